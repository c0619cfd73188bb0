"""
Unit tests for CatalogSearchService

Tests criteria validation, the once-per-call feature toggle read and
dispatch to the legacy search or the reconciliation engine.
"""

import asyncio

import pytest
from unittest.mock import AsyncMock, MagicMock

from catalog_search.models.catalog_search import (
    CatalogProduct,
    ProductSearchCriteria,
    SearchCriteria,
    SearchResponseGroup,
    SearchResult,
)
from catalog_search.services.config.configuration_service import USE_INDEXED_SEARCH_SETTING
from catalog_search.services.search.catalog_search_service import (
    CatalogSearchService,
    validate_criteria,
)
from catalog_search.services.search.exceptions import InvalidCriteriaError, SearchCancelledError
from catalog_search.services.search.reconciliation import (
    ReconciliationEngine,
    ReconciliationOutcome,
    TerminationReason,
)


@pytest.fixture
def legacy_result():
    return SearchResult(
        products=[CatalogProduct(id="legacy-1", name="Legacy product")],
        products_total_count=1,
    )


@pytest.fixture
def legacy_search(legacy_result):
    legacy = MagicMock()
    legacy.search = AsyncMock(return_value=legacy_result)
    return legacy


@pytest.fixture
def hybrid_result():
    return SearchResult(
        products=[CatalogProduct(id="hybrid-1", name="Hybrid product")],
        products_total_count=7,
    )


@pytest.fixture
def engine(hybrid_result):
    engine = MagicMock(spec=ReconciliationEngine)
    engine.reconcile = AsyncMock(return_value=ReconciliationOutcome(
        result=hybrid_result,
        reason=TerminationReason.DRIFT_RESOLVED,
        rounds=1,
        index_queries=1,
        store_lookups=1,
        take_history=[20],
        ledger_ids=["hybrid-1"],
    ))
    return engine


@pytest.fixture
def settings_manager():
    settings = MagicMock()
    settings.get_value.return_value = True
    return settings


@pytest.fixture
def service(legacy_search, engine, settings_manager):
    return CatalogSearchService(
        legacy_search_service=legacy_search,
        reconciliation_engine=engine,
        settings_manager=settings_manager,
    )


class TestValidateCriteria:
    def test_valid_criteria_pass(self):
        validate_criteria(SearchCriteria(skip=0, take=0))

    @pytest.mark.parametrize("field,value", [("skip", -1), ("take", -5)])
    def test_negative_paging_rejected(self, field, value):
        with pytest.raises(InvalidCriteriaError) as exc_info:
            validate_criteria(SearchCriteria(**{field: value}))

        assert exc_info.value.field == field
        assert isinstance(exc_info.value, ValueError)


class TestCatalogSearchServiceRouting:
    """Dispatch between legacy and hybrid paths"""

    @pytest.mark.asyncio
    async def test_hybrid_path_returns_engine_result(self, service, engine, legacy_search, hybrid_result):
        criteria = SearchCriteria(keyword="drill", catalog_id="hardware", skip=20, take=10)

        result = await service.search(criteria)

        assert result == hybrid_result
        legacy_search.search.assert_not_awaited()
        product_criteria = engine.reconcile.await_args.args[0]
        assert isinstance(product_criteria, ProductSearchCriteria)
        assert product_criteria.search_phrase == "drill"
        assert product_criteria.catalog == "hardware"
        assert product_criteria.skip == 20
        assert product_criteria.take == 10

    @pytest.mark.asyncio
    async def test_cancel_and_deadline_forwarded_to_engine(self, service, engine):
        cancel_event = asyncio.Event()

        await service.search(SearchCriteria(keyword="drill"), cancel_event=cancel_event, deadline_seconds=1.5)

        assert engine.reconcile.await_args.kwargs == {
            "cancel_event": cancel_event,
            "deadline_seconds": 1.5,
        }

    @pytest.mark.asyncio
    async def test_toggle_off_uses_legacy_verbatim(
        self, service, engine, legacy_search, legacy_result, settings_manager
    ):
        settings_manager.get_value.return_value = False
        criteria = SearchCriteria(keyword="drill")

        result = await service.search(criteria)

        assert result is legacy_result
        legacy_search.search.assert_awaited_once_with(criteria)
        engine.reconcile.assert_not_called()

    @pytest.mark.asyncio
    async def test_no_keyword_uses_legacy(self, service, engine, legacy_search):
        await service.search(SearchCriteria(keyword=None, category_id="drills"))

        legacy_search.search.assert_awaited_once()
        engine.reconcile.assert_not_called()

    @pytest.mark.asyncio
    async def test_without_products_group_uses_legacy(self, service, engine, legacy_search):
        criteria = SearchCriteria(
            keyword="drill",
            response_group=frozenset({SearchResponseGroup.WITH_CATEGORIES}),
        )

        await service.search(criteria)

        legacy_search.search.assert_awaited_once_with(criteria)
        engine.reconcile.assert_not_called()

    @pytest.mark.asyncio
    async def test_toggle_read_once_by_name_with_true_default(self, service, settings_manager):
        await service.search(SearchCriteria(keyword="drill"))

        settings_manager.get_value.assert_called_once_with(USE_INDEXED_SEARCH_SETTING, True)


class TestCatalogSearchServiceErrors:
    """Error propagation policy"""

    @pytest.mark.asyncio
    async def test_invalid_criteria_raised_before_any_collaborator(
        self, service, engine, legacy_search, settings_manager
    ):
        with pytest.raises(InvalidCriteriaError):
            await service.search(SearchCriteria(keyword="drill", take=-1))

        settings_manager.get_value.assert_not_called()
        legacy_search.search.assert_not_called()
        engine.reconcile.assert_not_called()

    @pytest.mark.asyncio
    async def test_legacy_errors_propagate_unmodified(self, service, legacy_search, settings_manager):
        settings_manager.get_value.return_value = False
        failure = RuntimeError("direct store offline")
        legacy_search.search.side_effect = failure

        with pytest.raises(RuntimeError) as exc_info:
            await service.search(SearchCriteria(keyword="drill"))

        assert exc_info.value is failure

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self, service, engine):
        engine.reconcile.side_effect = SearchCancelledError("cancelled")

        with pytest.raises(SearchCancelledError):
            await service.search(SearchCriteria(keyword="drill"))
