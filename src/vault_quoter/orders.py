from __future__ import annotations

import logging
import time
from typing import Callable

from vault_quoter.config import QuoterConfig
from vault_quoter.gateway import ChainGateway
from vault_quoter.models import (
    CancelResult,
    MoveCall,
    ObjectArg,
    PureArg,
    ResultArg,
    SpreadOrderRequest,
    SubmissionResult,
    Vault,
)

LOGGER = logging.getLogger("vault_quoter")


def now_ms() -> int:
    return int(time.time() * 1000)


class SpreadOrderBuilder:
    def __init__(
        self,
        config: QuoterConfig,
        gateway: ChainGateway,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.config = config
        self.gateway = gateway
        self.clock = clock

    def build_spread_order(self, vault: Vault, now: int) -> SpreadOrderRequest:
        expire_at_ms = now + self.config.order_expiry_ms
        if expire_at_ms <= now:
            raise ValueError("order expiry must be in the future")
        return SpreadOrderRequest(
            vault_id=vault.id,
            base_asset_type=vault.base_asset_type,
            quote_asset_type=vault.quote_asset_type,
            lp_token_type=vault.lp_token_type,
            pool_id=self.config.pool_id,
            spread_bps=self.config.spread_bps,
            order_size=self.config.order_size,
            max_skew_percent=self.config.max_skew_percent,
            expire_at_ms=expire_at_ms,
            self_match_policy=self.config.self_matching_option,
            order_type=self.config.order_type,
        )

    def build_calls(self, request: SpreadOrderRequest) -> list[MoveCall]:
        """Trade proof and order creation, composed into one transaction.

        The proof is consumed by the second call through ``ResultArg(0)`` so it
        never exists outside the transaction that uses it.
        """
        type_arguments = tuple(request.type_arguments)
        proof_call = MoveCall(
            target=f"{self.config.vault_module}::generate_trade_proof",
            type_arguments=type_arguments,
            arguments=(
                ObjectArg(self.config.trade_cap_id),
                ObjectArg(request.vault_id),
            ),
        )
        order_call = MoveCall(
            target=f"{self.config.vault_module}::create_spread_order",
            type_arguments=type_arguments,
            arguments=(
                ObjectArg(request.vault_id),
                ResultArg(0),
                ObjectArg(request.pool_id),
                PureArg(request.spread_bps, "u64"),
                PureArg(request.order_size, "u64"),
                PureArg(int(request.order_type), "u8"),
                PureArg(request.max_skew_percent, "u64"),
                PureArg(int(request.self_match_policy), "u8"),
                PureArg(request.expire_at_ms, "u64"),
                ObjectArg(self.config.clock_object_id),
            ),
        )
        return [proof_call, order_call]

    def submit(self, vault: Vault, now: int | None = None) -> SubmissionResult:
        # Expiry is anchored to submission time, not to when the step was scheduled.
        submitted_at = self.clock() if now is None else now
        request = self.build_spread_order(vault, submitted_at)
        result = self.gateway.execute(self.build_calls(request))
        LOGGER.info(
            "spread_order_submitted vault=%s digest=%s status=%s spread_bps=%s size=%s skew=%s expire_at_ms=%s",
            vault.id,
            result.digest,
            result.status,
            request.spread_bps,
            request.order_size,
            request.max_skew_percent,
            request.expire_at_ms,
        )
        return result

    def cancel_order(self, order_id: str) -> CancelResult:
        return CancelResult(
            status="unsupported",
            order_id=order_id,
            raw={"reason": "cancel not supported"},
        )
