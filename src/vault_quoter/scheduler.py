from __future__ import annotations

import logging
import threading
from typing import Callable, Iterable, Optional

from vault_quoter.balances import VaultBalanceReader
from vault_quoter.config import QuoterConfig
from vault_quoter.models import ActiveOrderRecord, SubmissionResult, Vault
from vault_quoter.orders import SpreadOrderBuilder

LOGGER = logging.getLogger("vault_quoter")

RecordParser = Callable[[SubmissionResult], Optional[ActiveOrderRecord]]
OrderHook = Callable[[ActiveOrderRecord], None]


class QuoteScheduler:
    """Round-robin quoting loop over a fixed vault list.

    Each step handles exactly one vault: read balances, submit one spread
    order, then pause for ``interval_ms``. Any exception in that sequence is
    logged and converted into an ``error_backoff_ms`` pause; the next step
    moves on to the following vault either way.
    """

    def __init__(
        self,
        config: QuoterConfig,
        reader: VaultBalanceReader,
        builder: SpreadOrderBuilder,
        vaults: Iterable[Vault] | None = None,
        *,
        sleep: Callable[[float], None] | None = None,
        record_parser: RecordParser | None = None,
        on_order_created: OrderHook | None = None,
    ) -> None:
        self.config = config
        self.reader = reader
        self.builder = builder
        self.vaults: tuple[Vault, ...] = tuple(vaults if vaults is not None else config.vaults)
        if not self.vaults:
            raise ValueError("QuoteScheduler needs at least one vault")
        self.record_parser = record_parser
        self.on_order_created = on_order_created
        self.active_orders: dict[str, ActiveOrderRecord] = {}
        self.steps = 0
        self.submitted = 0
        self.failures = 0
        self._cursor = 0
        self._sleep = sleep
        self._stop_event = threading.Event()

    @property
    def current_vault(self) -> Vault:
        return self.vaults[self._cursor]

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    def stop(self) -> None:
        self._stop_event.set()

    def _pause(self, delay_ms: int) -> None:
        if delay_ms <= 0 or self._stop_event.is_set():
            return
        seconds = delay_ms / 1000.0
        if self._sleep is not None:
            self._sleep(seconds)
            return
        self._stop_event.wait(seconds)

    def _advance(self) -> None:
        self._cursor = (self._cursor + 1) % len(self.vaults)

    def _track_order(self, result: SubmissionResult) -> None:
        if self.record_parser is None:
            return
        record = self.record_parser(result)
        if record is None:
            return
        self.active_orders[record.bid_order_id] = record
        self.active_orders[record.ask_order_id] = record
        if self.on_order_created is not None:
            self.on_order_created(record)

    def _quote_vault(self, vault: Vault) -> SubmissionResult:
        balances = self.reader.read_balances(vault)
        LOGGER.info(
            "vault=%s balances base=%s quote=%s",
            vault.id,
            balances.base_balance,
            balances.quote_balance,
        )
        result = self.builder.submit(vault)
        self.submitted += 1
        self._track_order(result)
        return result

    def step(self) -> bool:
        vault = self.current_vault
        self.steps += 1
        try:
            self._quote_vault(vault)
        except Exception as exc:
            self.failures += 1
            LOGGER.error(
                "quote_step_failed step=%s vault=%s error_type=%s error=%s",
                self.steps,
                vault.id,
                exc.__class__.__name__,
                exc,
            )
            self._advance()
            self._pause(self.config.error_backoff_ms)
            return False
        self._advance()
        self._pause(self.config.interval_ms)
        return True

    def run(self, max_steps: int | None = None) -> None:
        LOGGER.info(
            "Quote loop started vaults=%s interval_ms=%s",
            len(self.vaults),
            self.config.interval_ms,
        )
        while not self._stop_event.is_set():
            if max_steps is not None and self.steps >= max_steps:
                break
            self.step()
        LOGGER.info(
            "Quote loop stopped steps=%s submitted=%s failures=%s",
            self.steps,
            self.submitted,
            self.failures,
        )
