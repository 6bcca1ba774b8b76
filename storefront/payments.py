"""
payments.py: Bounded payment-status polling for one order number.

State machine:
    POLLING  -> RESOLVED   a payment record was accepted as the outcome
             -> ABANDONED  the attempt budget ran out without an outcome
             -> CANCELLED  stop() was called

Poll policy:
    FIRST_RESPONSE  the first non-empty response wins, whatever its status.
                    This reproduces the storefront's historical behaviour and
                    can report a non-terminal status (e.g. PENDING) as final.
    UNTIL_TERMINAL  keep polling until a status from `terminal_statuses`
                    is seen; intermediate statuses are only reported.

Transient query errors are logged and consume an attempt, nothing more.
Abandonment is silent: no callback fires.
"""

import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable, Iterable, Optional, Union

import httpx
from pydantic import ValidationError

from .models import PaymentRecord
from .services import PaymentService

log = logging.getLogger(__name__)

DEFAULT_INTERVAL = 2.0
DEFAULT_MAX_ATTEMPTS = 10
DEFAULT_TERMINAL_STATUSES = ("COMPLETED", "FAILED")

RecordCallback = Callable[[PaymentRecord], Union[None, Awaitable[None]]]


class PollPolicy(str, Enum):
    FIRST_RESPONSE = "first_response"
    UNTIL_TERMINAL = "until_terminal"


class PollState(str, Enum):
    POLLING = "polling"
    RESOLVED = "resolved"
    ABANDONED = "abandoned"
    CANCELLED = "cancelled"


async def _notify(callback: Optional[RecordCallback], record: PaymentRecord):
    if callback is None:
        return
    outcome = callback(record)
    if outcome is not None:
        await outcome


class PaymentPoller:
    def __init__(self, service: PaymentService, order_number: str,
                 on_resolved: Optional[RecordCallback] = None,
                 on_update: Optional[RecordCallback] = None,
                 interval: float = DEFAULT_INTERVAL,
                 max_attempts: int = DEFAULT_MAX_ATTEMPTS,
                 policy: PollPolicy = PollPolicy.FIRST_RESPONSE,
                 terminal_statuses: Iterable[str] = DEFAULT_TERMINAL_STATUSES,
                 sleep: Callable[[float], Awaitable[None]] = asyncio.sleep):
        self.service = service
        self.order_number = order_number
        self.on_resolved = on_resolved
        self.on_update = on_update
        self.interval = interval
        self.max_attempts = max_attempts
        self.policy = PollPolicy(policy)
        self.terminal_statuses = {s.upper() for s in terminal_statuses}
        self._sleep = sleep

        self.state = PollState.POLLING
        self.attempts = 0
        self.record: Optional[PaymentRecord] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def active(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> asyncio.Task:
        if self._task is None:
            self._task = asyncio.get_running_loop().create_task(
                self.run(), name=f"payment-poller-{self.order_number}"
            )
        return self._task

    def stop(self):
        if self.active:
            log.info(f"[Order: {self.order_number}] Payment polling cancelled after {self.attempts} attempt(s).")
            self._task.cancel()
        # a task cancelled before its first step never reaches run()'s handler
        if self.state is PollState.POLLING:
            self.state = PollState.CANCELLED

    async def wait(self) -> PollState:
        if self._task is not None:
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        return self.state

    def _accepts(self, record: PaymentRecord) -> bool:
        if self.policy is PollPolicy.FIRST_RESPONSE:
            return True
        return record.status.upper() in self.terminal_statuses

    async def run(self) -> PollState:
        log_prefix = f"[Order: {self.order_number}]"
        try:
            while self.attempts < self.max_attempts:
                await self._sleep(self.interval)
                self.attempts += 1
                try:
                    records = await self.service.status(self.order_number)
                except (httpx.HTTPError, ValidationError, ValueError) as e:
                    log.warning(f"{log_prefix} Payment poll {self.attempts}/{self.max_attempts} failed: {e}")
                    continue

                if not records:
                    log.debug(f"{log_prefix} Payment poll {self.attempts}/{self.max_attempts}: no record yet.")
                    continue

                self.record = records[0]
                if self._accepts(self.record):
                    self.state = PollState.RESOLVED
                    log.info(f"{log_prefix} Payment {self.record.status} after {self.attempts} attempt(s).")
                    await _notify(self.on_resolved, self.record)
                    return self.state

                log.info(f"{log_prefix} Payment still {self.record.status}, polling on.")
                await _notify(self.on_update, self.record)

            self.state = PollState.ABANDONED
            log.info(f"{log_prefix} Payment polling gave up after {self.attempts} attempt(s).")
            return self.state
        except asyncio.CancelledError:
            if self.state is PollState.POLLING:
                self.state = PollState.CANCELLED
            raise
