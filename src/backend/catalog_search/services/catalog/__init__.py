"""In-process catalog collaborators (record store, search index, legacy search)"""

from .in_memory import (
    InMemoryCatalog,
    InMemoryItemService,
    InMemoryLegacyCatalogSearchService,
    InMemoryProductSearchService,
)

__all__ = [
    "InMemoryCatalog",
    "InMemoryItemService",
    "InMemoryLegacyCatalogSearchService",
    "InMemoryProductSearchService",
]
