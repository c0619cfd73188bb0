"""
Catalog Collaborator Interfaces

Abstract contracts the catalog search core consumes:
- ItemService: authoritative record store (lookup by id)
- ProductSearchService: eventually-consistent search index (ids + total count)
- LegacyCatalogSearchService: direct-store search used when the index is bypassed
- SettingsManager: named settings, used for the indexed-search feature toggle
"""

from abc import ABC, abstractmethod
from typing import Any, FrozenSet, List, Optional

from ...models.catalog_search import (
    CatalogProduct,
    ItemResponseGroup,
    ProductSearchCriteria,
    ProductSearchResult,
    SearchCriteria,
    SearchResult,
)


class ItemService(ABC):
    """Authoritative product record store"""

    @abstractmethod
    async def get_by_ids(
        self,
        ids: List[str],
        response_group: FrozenSet[ItemResponseGroup],
        catalog_id: Optional[str] = None
    ) -> List[CatalogProduct]:
        """
        Load products by id.

        Args:
            ids: Product ids to load
            response_group: Product fields to populate
            catalog_id: Optional catalog hint; implementations may ignore it

        Returns:
            Products that still exist, in any order. Unknown ids are omitted
            silently, never raised.
        """
        pass


class ProductSearchService(ABC):
    """Search index returning product ids for criteria"""

    @abstractmethod
    async def search(self, criteria: ProductSearchCriteria) -> ProductSearchResult:
        """
        Query one page of product ids.

        Args:
            criteria: Index query (search_phrase, catalog, outline, skip, take, ...)

        Returns:
            ProductSearchResult with ids in relevance order and the index's
            total match count. Zero matches is an empty page, not an error.
        """
        pass


class LegacyCatalogSearchService(ABC):
    """Direct-store catalog search used when the hybrid path is not taken"""

    @abstractmethod
    async def search(self, criteria: SearchCriteria) -> SearchResult:
        pass


class SettingsManager(ABC):
    """Named setting lookup"""

    @abstractmethod
    def get_value(self, name: str, default: Any) -> Any:
        """Return the setting value, or default when unset"""
        pass
