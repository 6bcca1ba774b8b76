"""
ordering.py: Checkout submission.

Turns the cart into one order-creation call per line, all sharing a single
order number. Lines go out strictly one after another, in cart order.

Partial failure is not rolled back: lines the backend accepted stay
accepted. The returned `Failed` result records which lines went through and
which did not, and `resume()` resubmits only the remainder under the same
order number. Every line carries an idempotency key derived from the order
number and sku, so resubmitting an already-accepted line is harmless.
"""

import itertools
import logging
import secrets
import time
from typing import Awaitable, Callable, List, Optional, Union

import httpx

from .cart import CartStore
from .models import CartLine, Failed, Submitted, SubmissionResult
from .services import OrderService

log = logging.getLogger(__name__)

OnSubmitted = Callable[[str], Union[None, Awaitable[None]]]


class OrderNumberGenerator:
    """
    Produces `ORD-<UTC timestamp>-<counter>-<hex>` identifiers.
    The counter is monotonic per generator; the hex suffix separates
    processes that happen to share a timestamp and counter value.
    """

    def __init__(self, prefix: str = "ORD", clock: Callable[[], float] = time.time):
        self.prefix = prefix
        self.clock = clock
        self._counter = itertools.count(1)

    def __call__(self) -> str:
        stamp = time.strftime("%Y%m%d%H%M%S", time.gmtime(self.clock()))
        return f"{self.prefix}-{stamp}-{next(self._counter):04d}-{secrets.token_hex(2)}"


def line_idempotency_key(order_number: str, sku: str) -> str:
    return f"{order_number}:{sku}"


def _describe(error: Exception) -> str:
    if isinstance(error, httpx.HTTPStatusError):
        try:
            detail = error.response.json().get("detail")
        except ValueError:
            detail = error.response.text
        return f"HTTP {error.response.status_code}: {detail}"
    return str(error) or type(error).__name__


class OrderSubmitter:
    def __init__(self, service: OrderService, cart: CartStore,
                 on_submitted: Optional[OnSubmitted] = None,
                 new_order_number: Optional[Callable[[], str]] = None):
        self.service = service
        self.cart = cart
        self.on_submitted = on_submitted
        self.new_order_number = new_order_number or OrderNumberGenerator()
        self.submitting = False

    async def submit(self) -> Optional[SubmissionResult]:
        """
        Submits the current cart as one checkout.

        Returns None without touching the network when the cart is empty.
        On success the cart is cleared and `on_submitted(order_number)` is
        invoked. On failure the cart is left as it was.
        """
        lines = self.cart.lines()
        if not lines:
            log.info("Checkout skipped: cart is empty.")
            return None
        return await self._send(self.new_order_number(), lines, accepted=[], resumed=False)

    async def resume(self, failed: Failed) -> SubmissionResult:
        """
        Resubmits the lines a previous checkout did not get through.

        On success only the lines of that checkout are taken out of the cart;
        anything the shopper added or changed since stays put.
        """
        log.info(f"[Order: {failed.order_number}] Resuming with {len(failed.remaining)} remaining line(s).")
        return await self._send(failed.order_number, list(failed.remaining),
                                accepted=list(failed.accepted), resumed=True)

    async def _send(self, order_number: str, lines: List[CartLine], accepted: List[CartLine],
                    resumed: bool) -> SubmissionResult:
        log_prefix = f"[Order: {order_number}]"
        log.info(f"{log_prefix} Submitting {len(lines)} line(s).")
        self.submitting = True
        try:
            for index, line in enumerate(lines):
                try:
                    await self.service.create(
                        order_number, line.sku, line.quantity,
                        idempotency_key=line_idempotency_key(order_number, line.sku),
                    )
                except (httpx.HTTPError, ValueError) as e:
                    reason = _describe(e)
                    log.error(f"{log_prefix} Submission failed at line {line.sku}: {reason}. "
                              f"{len(accepted)} line(s) already accepted, not rolled back.")
                    return Failed(order_number=order_number, reason=reason,
                                  accepted=accepted, remaining=lines[index:])
                accepted.append(line)
        finally:
            self.submitting = False

        if resumed:
            for line in accepted:
                self.cart.update_quantity(line.sku, -line.quantity)
        else:
            self.cart.clear()
        log.info(f"{log_prefix} All lines accepted.")
        if self.on_submitted:
            outcome = self.on_submitted(order_number)
            if outcome is not None:
                await outcome
        return Submitted(order_number=order_number, lines=accepted)
