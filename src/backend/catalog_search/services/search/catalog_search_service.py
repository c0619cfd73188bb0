"""
Catalog Search Service

Entry point for catalog searches. Combines the legacy direct-store search
with the hybrid indexed search:
- Validates criteria before touching any collaborator
- Reads the indexed search toggle once per call
- Routes to the legacy search or to the reconciliation engine
"""

import asyncio
import logging
from typing import Optional

from ...models.catalog_search import SearchCriteria, SearchResult
from ...utils.logging_context import log_context
from ..config.configuration_service import USE_INDEXED_SEARCH_SETTING
from .exceptions import InvalidCriteriaError
from .interfaces import LegacyCatalogSearchService, SettingsManager
from .reconciliation import ReconciliationEngine
from .route_selector import SearchRoute, build_product_search_criteria, select_route

logger = logging.getLogger(__name__)


def validate_criteria(criteria: SearchCriteria) -> None:
    """
    Reject criteria no collaborator can answer.

    Raises:
        InvalidCriteriaError: On negative skip or take
    """
    if criteria.skip < 0:
        raise InvalidCriteriaError("skip", criteria.skip, "must be >= 0")
    if criteria.take < 0:
        raise InvalidCriteriaError("take", criteria.take, "must be >= 0")


class CatalogSearchService:
    """
    Catalog search combining indexed and direct-store providers.

    The hybrid path only ever returns products the record store still holds,
    in the search index's relevance order, with the index's total count.
    """

    def __init__(
        self,
        legacy_search_service: LegacyCatalogSearchService,
        reconciliation_engine: ReconciliationEngine,
        settings_manager: SettingsManager,
        indexed_search_setting: str = USE_INDEXED_SEARCH_SETTING,
        indexed_search_default: bool = True
    ):
        """
        Initialize catalog search service.

        Args:
            legacy_search_service: Direct-store search used as fallback
            reconciliation_engine: Hybrid index + record store engine
            settings_manager: Source of the indexed search toggle
            indexed_search_setting: Name of the toggle setting
            indexed_search_default: Toggle value when the setting is unset
        """
        self.legacy_search_service = legacy_search_service
        self.reconciliation_engine = reconciliation_engine
        self.settings_manager = settings_manager
        self.indexed_search_setting = indexed_search_setting
        self.indexed_search_default = indexed_search_default

    def is_indexed_search_enabled(self) -> bool:
        value = self.settings_manager.get_value(
            self.indexed_search_setting,
            self.indexed_search_default
        )
        return bool(value)

    async def search(
        self,
        criteria: SearchCriteria,
        cancel_event: Optional[asyncio.Event] = None,
        deadline_seconds: Optional[float] = None
    ) -> SearchResult:
        """
        Search the catalog.

        Args:
            criteria: Caller criteria, never modified
            cancel_event: Optional cancellation signal for the hybrid path
            deadline_seconds: Optional overall deadline for the hybrid path;
                on expiry the partial result is returned

        Returns:
            SearchResult from the selected route

        Raises:
            InvalidCriteriaError: Criteria rejected before any collaborator call
            SearchCancelledError: cancel_event was set during a hybrid search
        """
        validate_criteria(criteria)

        route = select_route(criteria, self.is_indexed_search_enabled())

        with log_context(route=route.value):
            if route is SearchRoute.LEGACY:
                logger.info(
                    f"Catalog search via legacy path "
                    f"(keyword={criteria.keyword!r}, catalog={criteria.catalog_id})"
                )
                return await self.legacy_search_service.search(criteria)

            product_criteria = build_product_search_criteria(criteria)
            logger.info(
                f"Catalog search via hybrid path "
                f"(keyword={criteria.keyword!r}, skip={criteria.skip}, take={criteria.take})"
            )
            outcome = await self.reconciliation_engine.reconcile(
                product_criteria,
                cancel_event=cancel_event,
                deadline_seconds=deadline_seconds
            )
            return outcome.result
