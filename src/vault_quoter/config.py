from __future__ import annotations

from dataclasses import dataclass
import json
import os
from pathlib import Path

from vault_quoter.models import OrderType, SelfMatchingOption, Vault
from vault_quoter.pools import DEEPBOOK_PACKAGE_IDS, resolve_pool_id


DEFAULT_VAULTS = (
    Vault(
        id="0x83a4c6f45b8b4088902c0dcea8cab9c9440c3145e3b6438614f7d05daad08e9e",
        base_asset_type="0xdeeb7a4662eec9f2f3def03fb937a663dddaa2e215b8078a284d026b7946c270::deep::DEEP",
        quote_asset_type="0x2::sui::SUI",
        lp_token_type="0x9d38bc4d25492d7bf10afdedaf67450de14ec4faa6c89131aa3e4f5b2f00e82b::drip::DRIP",
    ),
)

SUI_CLOCK_OBJECT_ID = "0x6"


@dataclass(frozen=True)
class QuoterConfig:
    mode: str
    network: str
    rpc_url: str
    api_timeout_seconds: float

    amm_package_id: str
    deepbook_package_id: str
    trade_cap_id: str
    pool_id: str
    balance_manager_id: str
    clock_object_id: str
    private_key: str

    spread_bps: int
    order_size: int
    max_skew_percent: int
    order_expiry_ms: int
    order_type: OrderType
    self_matching_option: SelfMatchingOption
    gas_budget: int

    interval_ms: int
    error_backoff_ms: int
    strict_balance_decode: bool

    vaults: tuple[Vault, ...]

    log_level: str

    @property
    def live_mode(self) -> bool:
        return self.mode.lower() == "live"

    @property
    def paper_mode(self) -> bool:
        return not self.live_mode

    @property
    def vault_module(self) -> str:
        return f"{self.amm_package_id}::mm_vault"

    def problems(self) -> list[str]:
        """Startup errors that must stop the process before the loop begins."""
        out: list[str] = []
        if self.mode not in {"paper", "live"}:
            out.append(f"BOT_MODE must be paper or live, got {self.mode!r}")
        if not self.amm_package_id:
            out.append("AMM_PACKAGE_ID is required")
        if not self.trade_cap_id:
            out.append("TRADE_CAP_ID is required")
        if not self.pool_id:
            out.append("POOL_ID is required")
        if self.live_mode and not self.private_key:
            out.append("PRIVATE_KEY is required for live mode")
        if self.spread_bps <= 0:
            out.append("SPREAD_BPS must be > 0")
        if self.order_size <= 0:
            out.append("ORDER_SIZE must be > 0")
        if not 0 <= self.max_skew_percent <= 100:
            out.append("MAX_SKEW_PERCENT must be within [0, 100]")
        if self.order_expiry_ms <= 0:
            out.append("ORDER_EXPIRY_MS must be > 0")
        if self.interval_ms < 0 or self.error_backoff_ms < 0:
            out.append("INTERVAL_MS and ERROR_BACKOFF_MS must be >= 0")
        if not self.vaults:
            out.append("at least one vault must be configured")
        seen: set[str] = set()
        for vault in self.vaults:
            out.extend(vault.problems())
            if vault.id and vault.id in seen:
                out.append(f"vault {vault.id} is configured twice")
            seen.add(vault.id)
        return out


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in {"1", "true", "yes", "y", "on"}


def parse_vaults(raw: object) -> tuple[Vault, ...]:
    if isinstance(raw, dict):
        raw = [raw]
    if not isinstance(raw, list):
        raise ValueError("vault list must be a JSON array of vault objects")
    vaults: list[Vault] = []
    for item in raw:
        if not isinstance(item, dict):
            raise ValueError(f"vault entry must be an object, got {item!r}")
        vaults.append(Vault.from_dict(item))
    return tuple(vaults)


def load_vaults() -> tuple[Vault, ...]:
    inline = os.getenv("VAULTS_JSON", "").strip()
    if inline:
        return parse_vaults(json.loads(inline))
    path = os.getenv("VAULTS_FILE", "").strip()
    if path:
        try:
            raw = Path(path).read_text(encoding="utf-8")
        except OSError as exc:
            raise ValueError(f"VAULTS_FILE unreadable: {exc}") from exc
        return parse_vaults(json.loads(raw))
    return DEFAULT_VAULTS


def load_config() -> QuoterConfig:
    network = os.getenv("SUI_NETWORK", "mainnet").strip().lower()
    return QuoterConfig(
        mode=os.getenv("BOT_MODE", "paper").strip().lower(),
        network=network,
        rpc_url=os.getenv("RPC_URL", f"https://fullnode.{network}.sui.io:443"),
        api_timeout_seconds=10.0,
        amm_package_id=os.getenv("AMM_PACKAGE_ID", "").strip(),
        deepbook_package_id=os.getenv(
            "DEEPBOOK_PACKAGE_ID", DEEPBOOK_PACKAGE_IDS.get(network, "")
        ).strip(),
        trade_cap_id=os.getenv("TRADE_CAP_ID", "").strip(),
        pool_id=resolve_pool_id(os.getenv("POOL_ID", "DEEP_SUI"), network),
        balance_manager_id=os.getenv("BALANCE_MANAGER_ID", "").strip(),
        clock_object_id=SUI_CLOCK_OBJECT_ID,
        private_key=os.getenv("PRIVATE_KEY", "").strip(),
        spread_bps=_env_int("SPREAD_BPS", 1000),
        order_size=_env_int("ORDER_SIZE", 100),
        max_skew_percent=_env_int("MAX_SKEW_PERCENT", 20),
        order_expiry_ms=_env_int("ORDER_EXPIRY_MS", 300_000),
        order_type=OrderType(_env_int("ORDER_TYPE", int(OrderType.NO_RESTRICTION))),
        self_matching_option=SelfMatchingOption(
            _env_int("SELF_MATCHING_OPTION", int(SelfMatchingOption.SELF_MATCHING_ALLOWED))
        ),
        gas_budget=_env_int("GAS_BUDGET", 50_000_000),
        interval_ms=_env_int("INTERVAL_MS", 10_000),
        error_backoff_ms=_env_int("ERROR_BACKOFF_MS", 5_000),
        strict_balance_decode=_env_flag("STRICT_BALANCE_DECODE"),
        vaults=load_vaults(),
        log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper(),
    )
