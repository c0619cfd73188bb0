"""
Route Selector

Decides per request whether a catalog search goes through the hybrid
indexed path (search index + record store reconciliation) or straight to
the legacy direct-store search.
"""

from enum import Enum

from ...models.catalog_search import (
    ItemResponseGroup,
    ProductSearchCriteria,
    SearchCriteria,
    SearchResponseGroup,
)


class SearchRoute(str, Enum):
    HYBRID = "hybrid"
    LEGACY = "legacy"


# Record fields loaded for products found through the index
HYBRID_ITEM_RESPONSE_GROUP = frozenset({
    ItemResponseGroup.ITEM_INFO,
    ItemResponseGroup.OUTLINES,
})


def select_route(criteria: SearchCriteria, use_indexed_search: bool) -> SearchRoute:
    """
    Pick the search route.

    Hybrid only when the indexed search toggle is on, the caller asked for
    products and there is a keyword for the index to match. Everything else
    goes to the legacy search.
    """
    if (
        use_indexed_search
        and criteria.has_response_group(SearchResponseGroup.WITH_PRODUCTS)
        and criteria.keyword
    ):
        return SearchRoute.HYBRID
    return SearchRoute.LEGACY


def build_product_search_criteria(criteria: SearchCriteria) -> ProductSearchCriteria:
    """
    Translate caller criteria into index query form.

    Category outline and keyword relevance sorting are not computed here;
    category_id is passed as the outline as-is.
    """
    return ProductSearchCriteria(
        search_phrase=criteria.keyword,
        catalog=criteria.catalog_id,
        outline=criteria.category_id,
        with_hidden=criteria.with_hidden,
        skip=criteria.skip,
        take=criteria.take,
        response_group=HYBRID_ITEM_RESPONSE_GROUP,
    )
