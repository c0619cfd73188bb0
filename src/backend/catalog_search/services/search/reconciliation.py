"""
Reconciliation Engine

Merges paginated search index results with authoritative record store
lookups for the hybrid catalog search path:
- Queries the index for a page of product ids
- Loads only ids not seen in earlier rounds from the record store
- Keeps products in the index's first-seen (relevance) order
- Grows the requested page by the number of indexed-but-missing products
  and queries again, bounded by a retry ceiling and the index total count

Reconciliation is best effort: residual drift after the ceilings is a normal
outcome, and the page is simply shorter than requested.
"""

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, Dict, Iterable, List, Optional

import structlog
from langsmith import traceable

from ...models.catalog_search import (
    CatalogProduct,
    ProductSearchCriteria,
    ProductSearchResult,
    SearchResult,
)
from ...utils.logging_context import log_context
from .exceptions import CollaboratorUnavailableError, SearchCancelledError
from .interfaces import ItemService, ProductSearchService

logger = structlog.get_logger(__name__)

DEFAULT_MAX_RETRIES = 3


class TerminationReason(str, Enum):
    DRIFT_RESOLVED = "drift_resolved"
    INDEX_EXHAUSTED = "index_exhausted"
    RETRY_CEILING = "retry_ceiling"
    TOTAL_COUNT_CEILING = "total_count_ceiling"
    DEADLINE_EXCEEDED = "deadline_exceeded"


class _DeadlineExceeded(Exception):
    """Overall search deadline passed while awaiting a collaborator"""


class OrderedIdLedger:
    """
    Every product id seen across rounds, deduplicated, in first-seen order.

    The rank of an id is its position in the ledger and defines the final
    order of assembled products.
    """

    def __init__(self):
        self._ranks: Dict[str, int] = {}

    def add_new(self, ids: Iterable[str]) -> List[str]:
        """
        Append ids not already present.

        Returns:
            The newly added ids, in their given relative order
        """
        new_ids = []
        for item_id in ids:
            if item_id not in self._ranks:
                self._ranks[item_id] = len(self._ranks)
                new_ids.append(item_id)
        return new_ids

    def rank(self, item_id: str) -> int:
        return self._ranks[item_id]

    @property
    def ids(self) -> List[str]:
        return list(self._ranks)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._ranks

    def __len__(self) -> int:
        return len(self._ranks)


@dataclass
class ReconciliationState:
    """Per-call working state threaded through every round"""
    criteria: ProductSearchCriteria
    ledger: OrderedIdLedger = field(default_factory=OrderedIdLedger)
    products: List[CatalogProduct] = field(default_factory=list)
    retry_count: int = 0
    found_count: int = 0
    db_count: int = 0
    page: Optional[ProductSearchResult] = None  # Response of the current round
    last_page: Optional[ProductSearchResult] = None  # Last successful response
    index_queries: int = 0
    store_lookups: int = 0
    take_history: List[int] = field(default_factory=list)
    failures: List[CollaboratorUnavailableError] = field(default_factory=list)

    @property
    def has_drift(self) -> bool:
        return self.found_count > self.db_count

    @property
    def page_has_ids(self) -> bool:
        return self.page is not None and bool(self.page.ids)


@dataclass
class ReconciliationOutcome:
    """Assembled result plus bookkeeping about how reconciliation ended"""
    result: SearchResult
    reason: TerminationReason
    rounds: int
    index_queries: int
    store_lookups: int
    take_history: List[int]
    ledger_ids: List[str]
    failures: List[CollaboratorUnavailableError] = field(default_factory=list)  # Absorbed, in order


class ReconciliationEngine:
    """
    Hybrid search over a search index and a record store.

    Holds no per-request state, so a single instance serves concurrent
    searches.
    """

    def __init__(
        self,
        product_search_service: ProductSearchService,
        item_service: ItemService,
        max_retries: int = DEFAULT_MAX_RETRIES,
        deadline_seconds: Optional[float] = None
    ):
        """
        Args:
            product_search_service: Search index collaborator
            item_service: Record store collaborator
            max_retries: Rounds allowed after the first one
            deadline_seconds: Default overall deadline; None disables it
        """
        self.product_search_service = product_search_service
        self.item_service = item_service
        self.max_retries = max_retries
        self.deadline_seconds = deadline_seconds

    @traceable(name="catalog_reconciliation", run_type="retriever")
    async def reconcile(
        self,
        criteria: ProductSearchCriteria,
        cancel_event: Optional[asyncio.Event] = None,
        deadline_seconds: Optional[float] = None
    ) -> ReconciliationOutcome:
        """
        Run reconciliation rounds until drift is resolved or a ceiling is hit.

        Args:
            criteria: Index query; its take is the initial page size
            cancel_event: Checked before every round; when set the search
                is abandoned with SearchCancelledError
            deadline_seconds: Overall deadline overriding the engine default.
                When it passes, the products gathered so far are returned.

        Returns:
            ReconciliationOutcome with the assembled SearchResult

        Raises:
            SearchCancelledError: If cancel_event was set
        """
        loop = asyncio.get_running_loop()
        timeout = deadline_seconds if deadline_seconds is not None else self.deadline_seconds
        deadline = loop.time() + timeout if timeout is not None else None

        state = ReconciliationState(criteria=criteria, take_history=[criteria.take])
        reason: Optional[TerminationReason] = None

        with log_context(search_phrase=criteria.search_phrase, catalog=criteria.catalog):
            try:
                while reason is None:
                    if cancel_event is not None and cancel_event.is_set():
                        logger.info(
                            "reconciliation_cancelled",
                            rounds=state.retry_count,
                            ledger_size=len(state.ledger)
                        )
                        raise SearchCancelledError("Catalog search cancelled by caller")

                    if deadline is not None and loop.time() >= deadline:
                        raise _DeadlineExceeded()

                    await self._run_round(state, deadline)
                    reason = self._termination_reason(state)

            except _DeadlineExceeded:
                reason = TerminationReason.DEADLINE_EXCEEDED

            outcome = self._build_outcome(state, reason)

            # Residual drift at a ceiling is expected under index staleness
            logger.info(
                "reconciliation_completed",
                reason=reason.value,
                rounds=outcome.rounds,
                index_queries=outcome.index_queries,
                store_lookups=outcome.store_lookups,
                products=len(outcome.result.products),
                total_count=outcome.result.products_total_count,
                residual_drift=max(state.found_count - state.db_count, 0),
                collaborator_failures=len(outcome.failures)
            )

        return outcome

    async def _run_round(self, state: ReconciliationState, deadline: Optional[float]) -> None:
        """Execute one index query + record store lookup round"""
        page = await self._query_index(state, deadline)
        state.index_queries += 1
        state.page = page

        if page is not None:
            state.last_page = page

        if not state.page_has_ids:
            state.found_count = 0
            state.retry_count += 1
            return

        new_ids = state.ledger.add_new(page.ids)
        state.found_count = len(new_ids)

        if not new_ids:
            state.retry_count += 1
            return

        fetched = await self._fetch_records(new_ids, state, deadline)
        state.store_lookups += 1

        accepted = self._accept_records(fetched, new_ids)
        state.db_count = len(accepted)

        state.products.extend(accepted)
        state.products.sort(key=lambda product: state.ledger.rank(product.id))

        if state.has_drift:
            shortfall = state.found_count - state.db_count
            state.criteria = state.criteria.model_copy(
                update={"take": state.criteria.take + shortfall}
            )
            state.take_history.append(state.criteria.take)
            logger.debug(
                "reconciliation_drift_detected",
                found=state.found_count,
                loaded=state.db_count,
                next_take=state.criteria.take
            )

        state.retry_count += 1

    def _termination_reason(self, state: ReconciliationState) -> Optional[TerminationReason]:
        """Return why the loop must stop, or None to run another round"""
        if not state.page_has_ids:
            return TerminationReason.INDEX_EXHAUSTED
        if not state.has_drift:
            return TerminationReason.DRIFT_RESOLVED
        if state.retry_count > self.max_retries:
            return TerminationReason.RETRY_CEILING
        if state.criteria.take + state.criteria.skip >= state.page.total_count:
            return TerminationReason.TOTAL_COUNT_CEILING
        return None

    async def _query_index(
        self,
        state: ReconciliationState,
        deadline: Optional[float]
    ) -> Optional[ProductSearchResult]:
        """Query the search index; failures are recorded on the state and yield None"""
        criteria = state.criteria
        try:
            return await self._await_before_deadline(
                lambda: self.product_search_service.search(criteria),
                deadline
            )
        except _DeadlineExceeded:
            raise
        except Exception as e:
            state.failures.append(CollaboratorUnavailableError("search index", e))
            logger.warning(
                "search_index_unavailable",
                error_type=type(e).__name__,
                round=state.retry_count,
                exc_info=e
            )
            return None

    async def _fetch_records(
        self,
        ids: List[str],
        state: ReconciliationState,
        deadline: Optional[float]
    ) -> List[CatalogProduct]:
        """Load records from the store; failures are recorded on the state and yield no records"""
        criteria = state.criteria
        try:
            records = await self._await_before_deadline(
                lambda: self.item_service.get_by_ids(
                    ids,
                    criteria.response_group,
                    criteria.catalog
                ),
                deadline
            )
            return list(records or [])
        except _DeadlineExceeded:
            raise
        except Exception as e:
            state.failures.append(CollaboratorUnavailableError("record store", e))
            logger.warning(
                "record_store_unavailable",
                error_type=type(e).__name__,
                requested=len(ids),
                round=state.retry_count,
                exc_info=e
            )
            return []

    @staticmethod
    async def _await_before_deadline(
        call: Callable[[], Awaitable],
        deadline: Optional[float]
    ):
        """Await a collaborator call, bounded by the remaining deadline"""
        if deadline is None:
            return await call()

        loop = asyncio.get_running_loop()
        remaining = deadline - loop.time()
        if remaining <= 0:
            raise _DeadlineExceeded()

        # asyncio.wait keeps the collaborator's own TimeoutError distinct from ours
        task = asyncio.ensure_future(call())
        try:
            done, _ = await asyncio.wait({task}, timeout=remaining)
        except asyncio.CancelledError:
            task.cancel()
            raise

        if task not in done:
            task.cancel()
            raise _DeadlineExceeded()
        return task.result()

    @staticmethod
    def _accept_records(fetched: List[CatalogProduct], requested_ids: List[str]) -> List[CatalogProduct]:
        """Keep one record per requested id; anything else is store noise"""
        requested = set(requested_ids)
        seen = set()
        accepted = []

        for product in fetched:
            if product.id in requested and product.id not in seen:
                seen.add(product.id)
                accepted.append(product)

        if len(accepted) != len(fetched):
            logger.debug(
                "record_store_extra_records_dropped",
                dropped=len(fetched) - len(accepted)
            )

        return accepted

    @staticmethod
    def _build_outcome(state: ReconciliationState, reason: TerminationReason) -> ReconciliationOutcome:
        last_page = state.last_page
        result = SearchResult(
            products=list(state.products),
            products_total_count=last_page.total_count if last_page else 0,
            aggregations=list(last_page.aggregations) if last_page else [],
        )
        return ReconciliationOutcome(
            result=result,
            reason=reason,
            rounds=state.retry_count,
            index_queries=state.index_queries,
            store_lookups=state.store_lookups,
            take_history=list(state.take_history),
            ledger_ids=state.ledger.ids,
            failures=list(state.failures),
        )
