"""
storefront.py: Presentation-facing state and orchestration.

Wires the catalog, cart, submitter and payment poller together and exposes
what a view needs: the filtered catalog, cart contents and total, a single
status line and the two busy flags. Nothing here raises into the view.
"""

import logging
from typing import List, Optional, Tuple

import httpx

from .cart import CartStore
from .catalog import CatalogRefresher, CatalogSnapshot, categories, filter_catalog
from .config import StoreSettings
from .models import CartLine, Failed, PaymentRecord, Product, Submitted, SubmissionResult
from .ordering import OrderSubmitter
from .payments import PaymentPoller
from .services import CatalogService, OrderService, PaymentService
from .session import Session

log = logging.getLogger(__name__)


class Storefront:
    def __init__(self, catalog_service: CatalogService, order_service: OrderService,
                 payment_service: PaymentService, settings: Optional[StoreSettings] = None,
                 http: Optional[httpx.AsyncClient] = None):
        self.settings = settings or StoreSettings()
        self.payment_service = payment_service
        self._http = http

        self.snapshot = CatalogSnapshot()
        self.cart = CartStore()
        self.refresher = CatalogRefresher(catalog_service, self.snapshot)
        self.submitter = OrderSubmitter(order_service, self.cart, on_submitted=self._start_poller)

        self.search_text = ""
        self.category = ""
        self.status: Optional[str] = None
        self.last_failure: Optional[Failed] = None
        self.poller: Optional[PaymentPoller] = None

    @classmethod
    def open(cls, session: Session, settings: Optional[StoreSettings] = None) -> "Storefront":
        """Builds a storefront whose service clients share one HTTP client from `session`."""
        http = session.open()
        return cls(CatalogService(http), OrderService(http), PaymentService(http),
                   settings=settings, http=http)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        await self.aclose()

    async def aclose(self):
        self.stop_polling()
        if self._http is not None:
            await self._http.aclose()

    # busy flags
    @property
    def loading_catalog(self) -> bool:
        return self.refresher.loading

    @property
    def submitting_order(self) -> bool:
        return self.submitter.submitting

    # catalog
    async def load(self) -> bool:
        return await self.refresher.fetch_all()

    def visible_products(self) -> List[Product]:
        return filter_catalog(self.snapshot, self.search_text, self.category)

    def categories(self) -> List[str]:
        return categories(self.snapshot)

    # cart
    def add_to_cart(self, sku: str) -> bool:
        product = self.snapshot.get(sku)
        if product is None:
            return False
        self.cart.add_item(product)
        return True

    def change_quantity(self, sku: str, delta: int) -> int:
        return self.cart.update_quantity(sku, delta)

    def cart_total(self) -> float:
        return self.cart.total(self.snapshot.price_of)

    def cart_view(self) -> List[Tuple[CartLine, Optional[Product]]]:
        return [(line, self.snapshot.get(line.sku)) for line in self.cart.lines()]

    # checkout
    async def place_order(self) -> Optional[SubmissionResult]:
        if self.cart.is_empty():
            return None
        # a new checkout supersedes whatever the previous one was still polling
        self.stop_polling()
        result = await self.submitter.submit()
        return self._record(result)

    async def retry_failed(self) -> Optional[SubmissionResult]:
        if self.last_failure is None:
            return None
        self.stop_polling()
        result = await self.submitter.resume(self.last_failure)
        return self._record(result)

    def _record(self, result: Optional[SubmissionResult]) -> Optional[SubmissionResult]:
        if isinstance(result, Submitted):
            self.last_failure = None
            self.status = f"Order Placed: {result.order_number}"
        elif isinstance(result, Failed):
            self.last_failure = result
            self.status = f"Order submission failed: {result.reason}"
        return result

    # payment polling
    def _start_poller(self, order_number: str):
        self.stop_polling()
        self.poller = PaymentPoller(
            self.payment_service, order_number,
            on_resolved=self._on_payment_resolved,
            on_update=self._on_payment_update,
            interval=self.settings.poll_interval,
            max_attempts=self.settings.poll_attempts,
            policy=self.settings.poll_policy,
            terminal_statuses=self.settings.terminal_statuses,
        )
        self.poller.start()

    def stop_polling(self):
        if self.poller is not None:
            self.poller.stop()

    def _is_current(self, record: PaymentRecord) -> bool:
        return self.poller is not None and self.poller.order_number == record.order_number

    async def _on_payment_update(self, record: PaymentRecord):
        if self._is_current(record):
            self.status = f"Order {record.order_number}: Payment {record.status} (waiting)"

    async def _on_payment_resolved(self, record: PaymentRecord):
        if not self._is_current(record):
            return
        self.status = f"Order {record.order_number}: Payment {record.status}"
        await self.refresher.fetch_all()
