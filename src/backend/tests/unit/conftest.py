"""
Unit test fixtures

Scripted stand-ins for the search index and record store. Unit tests
should be fast and isolated from real collaborators.
"""

import asyncio
from typing import Dict, Iterable, List, Optional

import pytest
from unittest.mock import AsyncMock, MagicMock

from catalog_search.models.catalog_search import (
    CatalogProduct,
    ProductSearchCriteria,
    ProductSearchResult,
)
from catalog_search.services.search.interfaces import ItemService, ProductSearchService


def make_product(product_id: str) -> CatalogProduct:
    return CatalogProduct(id=product_id, name=f"Product {product_id}")


class RankedSearchIndex(ProductSearchService):
    """
    Index over a fixed relevance ranking.

    Pages are sliced by skip/take. total_count defaults to the ranking
    length; totals lets each call report a different (stale) count.
    """

    def __init__(
        self,
        ranked_ids: Iterable[str],
        total_count: Optional[int] = None,
        totals: Optional[List[int]] = None,
        delay: float = 0.0,
        delay_from_call: int = 1
    ):
        self.ranked_ids = list(ranked_ids)
        self.total_count = len(self.ranked_ids) if total_count is None else total_count
        self.totals = list(totals or [])
        self.delay = delay
        self.delay_from_call = delay_from_call
        self.calls: List[ProductSearchCriteria] = []

    async def search(self, criteria: ProductSearchCriteria) -> ProductSearchResult:
        self.calls.append(criteria)
        if self.delay and len(self.calls) >= self.delay_from_call:
            await asyncio.sleep(self.delay)

        total = self.totals[len(self.calls) - 1] if self.totals else self.total_count
        return ProductSearchResult(
            ids=self.ranked_ids[criteria.skip:criteria.skip + criteria.take],
            total_count=total,
        )


class RecordStore(ItemService):
    """Store holding records for a fixed set of ids"""

    def __init__(self, available_ids: Iterable[str], failures: int = 0):
        self.records: Dict[str, CatalogProduct] = {i: make_product(i) for i in available_ids}
        self.failures = failures
        self.calls: List[dict] = []

    async def get_by_ids(self, ids, response_group, catalog_id=None) -> List[CatalogProduct]:
        self.calls.append({
            "ids": list(ids),
            "response_group": response_group,
            "catalog_id": catalog_id,
        })
        if self.failures > 0:
            self.failures -= 1
            raise ConnectionError("record store connection reset")

        # Reverse to prove ordering never depends on store order
        return [self.records[i] for i in reversed(list(ids)) if i in self.records]


@pytest.fixture
def ranked_index():
    """Factory for RankedSearchIndex"""
    return RankedSearchIndex


@pytest.fixture
def record_store():
    """Factory for RecordStore"""
    return RecordStore


@pytest.fixture
def scripted_index():
    """Index mock returning the given pages (or raising given exceptions) in order"""
    def _make(*responses):
        index = MagicMock(spec=ProductSearchService)
        index.search = AsyncMock(side_effect=list(responses))
        return index
    return _make


@pytest.fixture
def product_criteria():
    """Factory for index query criteria"""
    def _make(take: int = 3, skip: int = 0, **kwargs) -> ProductSearchCriteria:
        return ProductSearchCriteria(search_phrase="drill", skip=skip, take=take, **kwargs)
    return _make
