"""
Catalog Search Data Models

Shared data models for catalog search used by the route selector, the
reconciliation engine and every catalog collaborator (record store, search
index, legacy direct-store search).
"""

from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional
from pydantic import BaseModel, ConfigDict, Field


class SearchResponseGroup(str, Enum):
    """Parts of the catalog a caller wants back from a search"""
    WITH_CATALOGS = "WithCatalogs"
    WITH_CATEGORIES = "WithCategories"
    WITH_PRODUCTS = "WithProducts"
    WITH_OUTLINES = "WithOutlines"
    WITH_PROPERTIES = "WithProperties"


class ItemResponseGroup(str, Enum):
    """Product fields requested from the record store"""
    ITEM_INFO = "ItemInfo"
    OUTLINES = "Outlines"
    ITEM_PROPERTIES = "ItemProperties"
    SEO = "Seo"


DEFAULT_RESPONSE_GROUP = frozenset({
    SearchResponseGroup.WITH_CATEGORIES,
    SearchResponseGroup.WITH_PRODUCTS,
})


class SearchCriteria(BaseModel):
    """
    Caller-supplied catalog search criteria.

    Frozen: the reconciliation engine never mutates it and works on a
    derived ProductSearchCriteria copy instead.
    """
    model_config = ConfigDict(frozen=True)

    keyword: Optional[str] = None
    catalog_id: Optional[str] = None
    category_id: Optional[str] = None
    with_hidden: bool = False
    skip: int = 0
    take: int = 20
    response_group: FrozenSet[SearchResponseGroup] = DEFAULT_RESPONSE_GROUP

    def has_response_group(self, group: SearchResponseGroup) -> bool:
        return group in self.response_group


class ProductSearchCriteria(BaseModel):
    """Criteria in the form the search index understands"""
    model_config = ConfigDict(frozen=True)

    search_phrase: Optional[str] = None
    catalog: Optional[str] = None
    outline: Optional[str] = None
    with_hidden: bool = False
    skip: int = 0
    take: int = 20
    response_group: FrozenSet[ItemResponseGroup] = frozenset({ItemResponseGroup.ITEM_INFO})


class CatalogProduct(BaseModel):
    """Fully populated product record from the authoritative store"""
    id: str
    code: Optional[str] = None
    name: str
    catalog_id: Optional[str] = None
    category_id: Optional[str] = None
    is_active: bool = True
    outlines: List[str] = Field(default_factory=list)  # Category path ids, root first
    properties: Dict[str, Any] = Field(default_factory=dict)


class Category(BaseModel):
    """Catalog category"""
    id: str
    name: str
    catalog_id: Optional[str] = None
    parent_id: Optional[str] = None
    is_active: bool = True


class AggregationItem(BaseModel):
    """Single facet value with its match count"""
    value: str
    count: int


class Aggregation(BaseModel):
    """Facet computed by the search index over all matches"""
    field: str
    items: List[AggregationItem] = Field(default_factory=list)


class ProductSearchResult(BaseModel):
    """
    One page of the search index response.

    Holds only product ids in relevance order; total_count is the index's
    own (possibly stale) estimate of all matches.
    """
    ids: List[str] = Field(default_factory=list)
    total_count: int = 0
    aggregations: List[Aggregation] = Field(default_factory=list)


class SearchResult(BaseModel):
    """Catalog search result returned to callers"""
    products: List[CatalogProduct] = Field(default_factory=list)
    products_total_count: int = 0
    categories: List[Category] = Field(default_factory=list)
    aggregations: List[Aggregation] = Field(default_factory=list)
