"""
catalog.py: Catalog snapshot, refresher and filtering.

The snapshot is the client's cached copy of the full product list. It is
replaced wholesale on every successful fetch; a failed fetch leaves the
previous copy in place. Filtering is a pure function over the snapshot.
"""

import logging
from typing import Callable, Dict, Iterable, List, Optional

import httpx
from pydantic import ValidationError

from .models import Product
from .services import CatalogService

log = logging.getLogger(__name__)


class CatalogSnapshot:
    def __init__(self, products: Iterable[Product] = ()):
        self._products: List[Product] = []
        self._by_sku: Dict[str, Product] = {}
        self.replace(products)

    def replace(self, products: Iterable[Product]):
        self._products = list(products)
        self._by_sku = {p.sku: p for p in self._products}

    @property
    def products(self) -> List[Product]:
        return list(self._products)

    def get(self, sku: str) -> Optional[Product]:
        return self._by_sku.get(sku)

    def price_of(self, sku: str) -> Optional[float]:
        product = self._by_sku.get(sku)
        return product.price if product else None

    def __len__(self):
        return len(self._products)

    def __iter__(self):
        return iter(self._products)


class CatalogRefresher:
    """
    Re-fetches the snapshot from the catalog service.

    Failures are logged and reported through the return value only; they
    never raise into the caller.
    """

    def __init__(self, service: CatalogService, snapshot: CatalogSnapshot,
                 on_change: Optional[Callable[[CatalogSnapshot], None]] = None):
        self.service = service
        self.snapshot = snapshot
        self.on_change = on_change
        self.loading = False

    async def fetch_all(self) -> bool:
        self.loading = True
        try:
            products = await self.service.list_all()
        except (httpx.HTTPError, ValidationError, ValueError) as e:
            log.warning(f"Catalog refresh failed, keeping {len(self.snapshot)} cached products: {e}")
            return False
        finally:
            self.loading = False

        self.snapshot.replace(products)
        log.info(f"Catalog refreshed: {len(products)} products.")
        if self.on_change:
            self.on_change(self.snapshot)
        return True


def _matches_text(product: Product, needle: str) -> bool:
    for field in (product.name, product.brand, product.category):
        if field and needle in field.lower():
            return True
    return False


def filter_catalog(products: Iterable[Product], search_text: str = "", category: str = "") -> List[Product]:
    """
    Returns the products matching both the free-text search and the category.

    Text match is a case-insensitive substring test against name, brand and
    category. An empty category matches everything; otherwise equality is
    exact. Input order is preserved.
    """
    needle = (search_text or "").lower()
    out = []
    for p in products:
        if category and p.category != category:
            continue
        if needle and not _matches_text(p, needle):
            continue
        out.append(p)
    return out


def categories(products: Iterable[Product]) -> List[str]:
    seen: List[str] = []
    for p in products:
        if p.category and p.category not in seen:
            seen.append(p.category)
    return seen
