"""Models package - Catalog search criteria, records and results"""

from .catalog_search import (
    SearchResponseGroup,
    ItemResponseGroup,
    SearchCriteria,
    ProductSearchCriteria,
    CatalogProduct,
    Category,
    Aggregation,
    AggregationItem,
    ProductSearchResult,
    SearchResult,
)

__all__ = [
    "SearchResponseGroup",
    "ItemResponseGroup",
    "SearchCriteria",
    "ProductSearchCriteria",
    "CatalogProduct",
    "Category",
    "Aggregation",
    "AggregationItem",
    "ProductSearchResult",
    "SearchResult",
]
