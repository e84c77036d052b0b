from __future__ import annotations

import logging
from typing import Any

from vault_quoter.config import QuoterConfig
from vault_quoter.gateway import ChainGateway
from vault_quoter.models import BalanceSnapshot, MoveCall, ObjectArg, Vault

LOGGER = logging.getLogger("vault_quoter")

_U64_WIDTH = 8


class BalanceDecodeError(RuntimeError):
    pass


def _decode_u64(value: Any) -> int | None:
    # Dev-inspect return values are ``[bcs_bytes, type_tag]`` pairs.
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        return None
    raw_bytes, type_tag = value
    if type_tag != "u64":
        return None
    if not isinstance(raw_bytes, (list, tuple)) or len(raw_bytes) != _U64_WIDTH:
        return None
    if not all(isinstance(b, int) and not isinstance(b, bool) and 0 <= b <= 255 for b in raw_bytes):
        return None
    return int.from_bytes(bytes(raw_bytes), "little")


def decode_balance_response(payload: Any) -> BalanceSnapshot | None:
    """Return the (base, quote) snapshot, or ``None`` when the shape is unusable."""
    if not isinstance(payload, dict):
        return None
    results = payload.get("results")
    if not isinstance(results, list) or not results:
        return None
    first = results[0]
    if not isinstance(first, dict):
        return None
    return_values = first.get("returnValues")
    if not isinstance(return_values, list) or len(return_values) < 2:
        return None
    base = _decode_u64(return_values[0])
    quote = _decode_u64(return_values[1])
    if base is None or quote is None:
        return None
    return BalanceSnapshot(base_balance=base, quote_balance=quote)


class VaultBalanceReader:
    def __init__(self, config: QuoterConfig, gateway: ChainGateway) -> None:
        self.config = config
        self.gateway = gateway

    def balance_call(self, vault: Vault) -> MoveCall:
        return MoveCall(
            target=f"{self.config.vault_module}::get_vault_balance",
            type_arguments=tuple(vault.type_arguments),
            arguments=(ObjectArg(vault.id),),
        )

    def read_balances(self, vault: Vault) -> BalanceSnapshot:
        payload = self.gateway.inspect([self.balance_call(vault)])
        snapshot = decode_balance_response(payload)
        if snapshot is not None:
            return snapshot
        inspect_error = payload.get("error") if isinstance(payload, dict) else None
        if self.config.strict_balance_decode:
            raise BalanceDecodeError(
                f"undecodable balance response vault={vault.id} error={inspect_error}"
            )
        LOGGER.warning(
            "balance_decode_fallback vault=%s error=%s; using zero balances",
            vault.id,
            inspect_error,
        )
        return BalanceSnapshot.empty()
