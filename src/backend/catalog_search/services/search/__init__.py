"""
Search Package

Hybrid catalog search over an eventually-consistent search index and an
authoritative record store:
- Route selection between the hybrid and legacy direct-store paths
- Reconciliation of index pages with record store lookups
- Collaborator interfaces for index, store, legacy search and settings
"""

from .catalog_search_service import CatalogSearchService, validate_criteria
from .exceptions import (
    CatalogSearchError,
    CollaboratorUnavailableError,
    InvalidCriteriaError,
    SearchCancelledError,
)
from .interfaces import (
    ItemService,
    LegacyCatalogSearchService,
    ProductSearchService,
    SettingsManager,
)
from .reconciliation import (
    OrderedIdLedger,
    ReconciliationEngine,
    ReconciliationOutcome,
    TerminationReason,
)
from .route_selector import SearchRoute, build_product_search_criteria, select_route

__all__ = [
    "CatalogSearchService",
    "validate_criteria",
    "CatalogSearchError",
    "CollaboratorUnavailableError",
    "InvalidCriteriaError",
    "SearchCancelledError",
    "ItemService",
    "LegacyCatalogSearchService",
    "ProductSearchService",
    "SettingsManager",
    "OrderedIdLedger",
    "ReconciliationEngine",
    "ReconciliationOutcome",
    "TerminationReason",
    "SearchRoute",
    "build_product_search_criteria",
    "select_route",
]
