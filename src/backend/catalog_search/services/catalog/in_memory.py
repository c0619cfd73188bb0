"""
In-Memory Catalog Collaborators

Process-local implementations of every catalog collaborator, used by the
development application and the test suite:
- InMemoryCatalog: authoritative products and categories
- InMemoryItemService: record store over the catalog
- InMemoryProductSearchService: search index with its own document snapshot.
  Removing a product from the catalog without removing it from the index
  reproduces index/store drift.
- InMemoryLegacyCatalogSearchService: direct-store search over the catalog
"""

import json
import logging
import re
from collections import Counter
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, List, Optional, Union

from ...models.catalog_search import (
    Aggregation,
    AggregationItem,
    CatalogProduct,
    Category,
    ItemResponseGroup,
    ProductSearchCriteria,
    ProductSearchResult,
    SearchCriteria,
    SearchResponseGroup,
    SearchResult,
)
from ..search.interfaces import (
    ItemService,
    LegacyCatalogSearchService,
    ProductSearchService,
)

logger = logging.getLogger(__name__)

_TOKEN_PATTERN = re.compile(r"\w+")


def _tokens(text: Optional[str]) -> List[str]:
    return _TOKEN_PATTERN.findall(text.lower()) if text else []


def _in_category(product: CatalogProduct, category_id: Optional[str]) -> bool:
    if not category_id:
        return True
    return product.category_id == category_id or category_id in product.outlines


def _visible(product: CatalogProduct, with_hidden: bool) -> bool:
    return with_hidden or product.is_active


class InMemoryCatalog:
    """Authoritative product and category holdings"""

    def __init__(
        self,
        products: Optional[Iterable[CatalogProduct]] = None,
        categories: Optional[Iterable[Category]] = None
    ):
        self._products: Dict[str, CatalogProduct] = {}
        self._categories: Dict[str, Category] = {}

        for product in products or []:
            self.add_product(product)
        for category in categories or []:
            self.add_category(category)

    @classmethod
    def from_seed_file(cls, path: Union[str, Path]) -> "InMemoryCatalog":
        """
        Load a catalog from a JSON seed file

        Expected shape: {"categories": [...], "products": [...]}
        """
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)

        catalog = cls(
            products=[CatalogProduct(**p) for p in data.get("products", [])],
            categories=[Category(**c) for c in data.get("categories", [])],
        )
        logger.info(
            f"Loaded catalog seed {path}: "
            f"{len(catalog.products)} products, {len(catalog.categories)} categories"
        )
        return catalog

    @property
    def products(self) -> List[CatalogProduct]:
        return list(self._products.values())

    @property
    def categories(self) -> List[Category]:
        return list(self._categories.values())

    def add_product(self, product: CatalogProduct) -> None:
        self._products[product.id] = product

    def remove_product(self, product_id: str) -> Optional[CatalogProduct]:
        return self._products.pop(product_id, None)

    def get_product(self, product_id: str) -> Optional[CatalogProduct]:
        return self._products.get(product_id)

    def add_category(self, category: Category) -> None:
        self._categories[category.id] = category


class InMemoryItemService(ItemService):
    """Record store returning only products the catalog still holds"""

    def __init__(self, catalog: InMemoryCatalog):
        self.catalog = catalog

    async def get_by_ids(
        self,
        ids: List[str],
        response_group: FrozenSet[ItemResponseGroup],
        catalog_id: Optional[str] = None
    ) -> List[CatalogProduct]:
        products = []
        for product_id in ids:
            product = self.catalog.get_product(product_id)
            if product is None:
                continue
            products.append(self._shape(product, response_group))

        logger.debug(
            f"Loaded {len(products)}/{len(ids)} products "
            f"(catalog hint: {catalog_id})"
        )
        return products

    @staticmethod
    def _shape(product: CatalogProduct, response_group: FrozenSet[ItemResponseGroup]) -> CatalogProduct:
        """Drop fields the caller did not ask for"""
        update = {}
        if ItemResponseGroup.OUTLINES not in response_group:
            update["outlines"] = []
        if ItemResponseGroup.ITEM_PROPERTIES not in response_group:
            update["properties"] = {}
        return product.model_copy(update=update) if update else product


class InMemoryProductSearchService(ProductSearchService):
    """
    Keyword search index over a snapshot of indexed products.

    Matches keyword tokens against product name and code, ranks by number
    of token hits (ties keep indexing order) and aggregates matches by
    category.
    """

    AGGREGATION_FIELD = "category_id"

    def __init__(self, catalog: Optional[InMemoryCatalog] = None):
        self._documents: Dict[str, CatalogProduct] = {}
        if catalog is not None:
            self.rebuild(catalog)

    def rebuild(self, catalog: InMemoryCatalog) -> None:
        """Replace the index contents with the current catalog"""
        self._documents = {product.id: product for product in catalog.products}
        logger.info(f"Search index rebuilt with {len(self._documents)} documents")

    def index_product(self, product: CatalogProduct) -> None:
        self._documents[product.id] = product

    def remove_from_index(self, product_id: str) -> None:
        self._documents.pop(product_id, None)

    @property
    def document_count(self) -> int:
        return len(self._documents)

    async def search(self, criteria: ProductSearchCriteria) -> ProductSearchResult:
        query_tokens = set(_tokens(criteria.search_phrase))

        scored = []
        for position, document in enumerate(self._documents.values()):
            if criteria.catalog and document.catalog_id != criteria.catalog:
                continue
            if not _in_category(document, criteria.outline):
                continue
            if not _visible(document, criteria.with_hidden):
                continue

            if query_tokens:
                document_tokens = set(_tokens(document.name)) | set(_tokens(document.code))
                hits = len(query_tokens & document_tokens)
                if hits == 0:
                    continue
            else:
                hits = 0

            scored.append((-hits, position, document))

        scored.sort(key=lambda entry: (entry[0], entry[1]))
        matches = [document for _, _, document in scored]

        page = matches[criteria.skip:criteria.skip + criteria.take]

        return ProductSearchResult(
            ids=[document.id for document in page],
            total_count=len(matches),
            aggregations=self._aggregate(matches),
        )

    def _aggregate(self, matches: List[CatalogProduct]) -> List[Aggregation]:
        counts = Counter(document.category_id for document in matches if document.category_id)
        if not counts:
            return []
        return [
            Aggregation(
                field=self.AGGREGATION_FIELD,
                items=[
                    AggregationItem(value=value, count=count)
                    for value, count in counts.most_common()
                ],
            )
        ]


class InMemoryLegacyCatalogSearchService(LegacyCatalogSearchService):
    """Direct-store catalog search with substring keyword matching"""

    def __init__(self, catalog: InMemoryCatalog):
        self.catalog = catalog

    async def search(self, criteria: SearchCriteria) -> SearchResult:
        result = SearchResult()
        keyword = (criteria.keyword or "").lower()

        if criteria.has_response_group(SearchResponseGroup.WITH_CATEGORIES):
            result.categories = [
                category for category in self.catalog.categories
                if self._category_matches(category, criteria, keyword)
            ]

        if criteria.has_response_group(SearchResponseGroup.WITH_PRODUCTS):
            matches = [
                product for product in self.catalog.products
                if self._product_matches(product, criteria, keyword)
            ]
            result.products_total_count = len(matches)
            result.products = [
                self._shape(product, criteria)
                for product in matches[criteria.skip:criteria.skip + criteria.take]
            ]

        return result

    @staticmethod
    def _category_matches(category: Category, criteria: SearchCriteria, keyword: str) -> bool:
        if criteria.catalog_id and category.catalog_id != criteria.catalog_id:
            return False
        if not criteria.with_hidden and not category.is_active:
            return False
        if keyword:
            return keyword in category.name.lower()
        # Without a keyword list the direct children of the requested category
        return category.parent_id == criteria.category_id

    @staticmethod
    def _product_matches(product: CatalogProduct, criteria: SearchCriteria, keyword: str) -> bool:
        if criteria.catalog_id and product.catalog_id != criteria.catalog_id:
            return False
        if not _in_category(product, criteria.category_id):
            return False
        if not _visible(product, criteria.with_hidden):
            return False
        if keyword:
            return keyword in product.name.lower() or keyword in (product.code or "").lower()
        return True

    @staticmethod
    def _shape(product: CatalogProduct, criteria: SearchCriteria) -> CatalogProduct:
        update = {}
        if not criteria.has_response_group(SearchResponseGroup.WITH_OUTLINES):
            update["outlines"] = []
        if not criteria.has_response_group(SearchResponseGroup.WITH_PROPERTIES):
            update["properties"] = {}
        return product.model_copy(update=update) if update else product
