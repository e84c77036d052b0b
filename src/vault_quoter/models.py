from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Union


class OrderType(IntEnum):
    NO_RESTRICTION = 0
    IMMEDIATE_OR_CANCEL = 1
    FILL_OR_KILL = 2
    POST_ONLY = 3


class SelfMatchingOption(IntEnum):
    SELF_MATCHING_ALLOWED = 0
    CANCEL_TAKER = 1
    CANCEL_MAKER = 2


@dataclass(frozen=True)
class Vault:
    id: str
    base_asset_type: str
    quote_asset_type: str
    lp_token_type: str

    @property
    def type_arguments(self) -> list[str]:
        return [self.base_asset_type, self.quote_asset_type, self.lp_token_type]

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "Vault":
        return cls(
            id=str(raw.get("id") or "").strip(),
            base_asset_type=str(raw.get("baseAssetType") or raw.get("base_asset_type") or "").strip(),
            quote_asset_type=str(raw.get("quoteAssetType") or raw.get("quote_asset_type") or "").strip(),
            lp_token_type=str(raw.get("lpTokenType") or raw.get("lp_token_type") or "").strip(),
        )

    def problems(self) -> list[str]:
        out: list[str] = []
        if not self.id:
            out.append("vault id is empty")
        tags = self.type_arguments
        if any(not tag for tag in tags):
            out.append(f"vault {self.id or '?'} has an empty type tag")
        elif len(set(tags)) != len(tags):
            out.append(f"vault {self.id} type tags must be distinct")
        return out


@dataclass(frozen=True)
class BalanceSnapshot:
    base_balance: int = 0
    quote_balance: int = 0

    @classmethod
    def empty(cls) -> "BalanceSnapshot":
        return cls(base_balance=0, quote_balance=0)

    def to_dict(self) -> dict[str, int]:
        return {"base_balance": self.base_balance, "quote_balance": self.quote_balance}


@dataclass(frozen=True)
class SpreadOrderRequest:
    vault_id: str
    base_asset_type: str
    quote_asset_type: str
    lp_token_type: str
    pool_id: str
    spread_bps: int
    order_size: int
    max_skew_percent: int
    expire_at_ms: int
    self_match_policy: SelfMatchingOption
    order_type: OrderType

    @property
    def type_arguments(self) -> list[str]:
        return [self.base_asset_type, self.quote_asset_type, self.lp_token_type]


@dataclass
class ActiveOrderRecord:
    bid_order_id: str
    ask_order_id: str
    mid_price: float
    bid_price: float
    ask_price: float
    timestamp_ms: int


@dataclass(frozen=True)
class ObjectArg:
    object_id: str


@dataclass(frozen=True)
class PureArg:
    value: int
    kind: str = "u64"


@dataclass(frozen=True)
class ResultArg:
    # Index of an earlier call in the same transaction.
    index: int


CallArg = Union[ObjectArg, PureArg, ResultArg]


@dataclass(frozen=True)
class MoveCall:
    target: str
    type_arguments: tuple[str, ...]
    arguments: tuple[CallArg, ...]

    @property
    def function(self) -> str:
        return self.target.rsplit("::", 1)[-1]


@dataclass
class SubmissionResult:
    digest: str
    status: str = "success"
    effects: dict[str, Any] = field(default_factory=dict)
    events: list[dict[str, Any]] = field(default_factory=list)
    raw: dict[str, Any] = field(default_factory=dict)

    @property
    def is_error(self) -> bool:
        return self.status not in {"success", "paper"}


@dataclass
class CancelResult:
    status: str
    order_id: str
    raw: dict[str, Any] = field(default_factory=dict)

    @property
    def unsupported(self) -> bool:
        return self.status == "unsupported"
