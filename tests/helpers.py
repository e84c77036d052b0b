from __future__ import annotations

from dataclasses import replace
import os
from pathlib import Path
import sys
from typing import Sequence
from unittest.mock import patch

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from vault_quoter.config import QuoterConfig, load_config  # noqa: E402
from vault_quoter.gateway import ChainGateway  # noqa: E402
from vault_quoter.models import MoveCall, SubmissionResult, Vault  # noqa: E402

AMM_PACKAGE = "0xa11"
TRADE_CAP = "0xcap"
POOL = "0xpool"

VAULT_A = Vault(id="0xvaulta", base_asset_type="0x1::a::A", quote_asset_type="0x2::sui::SUI", lp_token_type="0x3::lp::LPA")
VAULT_B = Vault(id="0xvaultb", base_asset_type="0x1::b::B", quote_asset_type="0x2::sui::SUI", lp_token_type="0x3::lp::LPB")
VAULT_C = Vault(id="0xvaultc", base_asset_type="0x1::c::C", quote_asset_type="0x2::sui::SUI", lp_token_type="0x3::lp::LPC")


def make_config(**kwargs) -> QuoterConfig:
    with patch.dict(os.environ, {}, clear=True):
        cfg = load_config()
    defaults = {
        "amm_package_id": AMM_PACKAGE,
        "trade_cap_id": TRADE_CAP,
        "pool_id": POOL,
        "vaults": (VAULT_A,),
    }
    defaults.update(kwargs)
    return replace(cfg, **defaults)


def u64_value(amount: int) -> list[object]:
    return [list(int(amount).to_bytes(8, "little")), "u64"]


def inspect_payload(base: int, quote: int) -> dict[str, object]:
    return {"results": [{"returnValues": [u64_value(base), u64_value(quote)]}]}


def vault_of(calls: Sequence[MoveCall]) -> str:
    # Both the balance call and create_spread_order take the vault first.
    return calls[-1].arguments[0].object_id  # type: ignore[union-attr]


class FakeGateway(ChainGateway):
    def __init__(
        self,
        balances: dict[str, tuple[int, int]] | None = None,
        inspect_error: Exception | None = None,
        failing_vaults: Sequence[str] = (),
    ) -> None:
        self.balances = dict(balances or {})
        self.inspect_error = inspect_error
        self.failing_vaults = set(failing_vaults)
        self.events: list[tuple[str, str]] = []
        self.executed: list[list[MoveCall]] = []
        self.preflight_calls = 0

    def preflight(self) -> None:
        self.preflight_calls += 1

    def inspect(self, calls: Sequence[MoveCall]) -> dict[str, object]:
        vault_id = vault_of(calls)
        self.events.append(("inspect", vault_id))
        if self.inspect_error is not None:
            raise self.inspect_error
        base, quote = self.balances.get(vault_id, (0, 0))
        return inspect_payload(base, quote)

    def execute(self, calls: Sequence[MoveCall]) -> SubmissionResult:
        vault_id = vault_of(calls)
        self.events.append(("execute", vault_id))
        if vault_id in self.failing_vaults:
            raise RuntimeError(f"rejected transaction for {vault_id}")
        self.executed.append(list(calls))
        return SubmissionResult(digest=f"digest-{len(self.executed)}")
