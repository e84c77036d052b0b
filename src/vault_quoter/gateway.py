from __future__ import annotations

import base64
import logging
from typing import Any, Sequence
import uuid

from vault_quoter.config import QuoterConfig
from vault_quoter.http_utils import GatewayError, rpc_call
from vault_quoter.models import CallArg, MoveCall, ObjectArg, PureArg, ResultArg, SubmissionResult

LOGGER = logging.getLogger("vault_quoter")

ZERO_ADDRESS = "0x" + ("00" * 32)


def describe_calls(calls: Sequence[MoveCall]) -> list[dict[str, Any]]:
    out: list[dict[str, Any]] = []
    for call in calls:
        args: list[Any] = []
        for arg in call.arguments:
            if isinstance(arg, ObjectArg):
                args.append({"object": arg.object_id})
            elif isinstance(arg, PureArg):
                args.append({arg.kind: arg.value})
            else:
                args.append({"result": arg.index})
        out.append(
            {
                "target": call.target,
                "type_arguments": list(call.type_arguments),
                "arguments": args,
            }
        )
    return out


class ChainGateway:
    """Ledger access used by the quoting loop.

    ``inspect`` runs calls without committing and returns the raw dev-inspect
    payload. ``execute`` signs and submits all calls as one transaction.
    """

    def preflight(self) -> None:
        return

    def inspect(self, calls: Sequence[MoveCall]) -> dict[str, Any]:
        raise NotImplementedError

    def execute(self, calls: Sequence[MoveCall]) -> SubmissionResult:
        raise NotImplementedError


class SuiChainGateway(ChainGateway):
    def __init__(self, config: QuoterConfig) -> None:
        self.config = config
        self.client = None
        self._sender = ""
        self._bootstrap_done = False
        self._preflight_done = False

    def _bootstrap_client(self) -> None:
        if self._bootstrap_done:
            return
        try:
            from pysui import SuiConfig, SyncClient  # type: ignore
        except ImportError as exc:  # pragma: no cover - runtime dependency path
            raise RuntimeError(
                "pysui is required to talk to the Sui ledger. Install it with `pip install pysui`."
            ) from exc

        prv_keys = [self.config.private_key] if self.config.private_key else []
        sui_config = SuiConfig.user_config(rpc_url=self.config.rpc_url, prv_keys=prv_keys)
        self.client = SyncClient(sui_config)
        if prv_keys:
            self._sender = str(sui_config.active_address)
        else:
            self._sender = ZERO_ADDRESS
        self._bootstrap_done = True
        LOGGER.info("ledger_client rpc=%s sender=%s", self.config.rpc_url, self._sender)

    def _rpc(self, method: str, params: list[Any]) -> Any:
        return rpc_call(
            self.config.rpc_url,
            method,
            params,
            timeout=self.config.api_timeout_seconds,
        )

    def preflight(self) -> None:
        self._bootstrap_client()
        if self._preflight_done:
            return
        object_ids = [self.config.trade_cap_id, self.config.pool_id]
        if self.config.balance_manager_id:
            object_ids.append(self.config.balance_manager_id)
        object_ids.extend(vault.id for vault in self.config.vaults)
        result = self._rpc("sui_multiGetObjects", [object_ids, {"showType": True}])
        if not isinstance(result, list) or len(result) != len(object_ids):
            raise RuntimeError("Preflight failed: unexpected sui_multiGetObjects response")
        missing = [
            object_id
            for object_id, entry in zip(object_ids, result)
            if not isinstance(entry, dict) or not entry.get("data")
        ]
        if missing:
            raise RuntimeError(f"Preflight failed: objects not found on-chain {missing}")
        self._preflight_done = True

    @staticmethod
    def _to_pysui_arg(arg: CallArg, results: list[Any], scalars: Any) -> Any:
        if isinstance(arg, ObjectArg):
            return scalars.ObjectID(arg.object_id)
        if isinstance(arg, PureArg):
            if arg.kind == "u8":
                return scalars.SuiU8(arg.value)
            if arg.kind == "u64":
                return scalars.SuiU64(arg.value)
            raise ValueError(f"unsupported pure argument kind={arg.kind!r}")
        if isinstance(arg, ResultArg):
            return results[arg.index]
        raise TypeError(f"unsupported call argument {arg!r}")

    def _build_transaction(self, calls: Sequence[MoveCall]):  # pragma: no cover - live path
        self._bootstrap_client()
        from pysui.sui.sui_txn import SyncTransaction  # type: ignore
        from pysui.sui.sui_types import scalars  # type: ignore
        from pysui.sui.sui_types.address import SuiAddress  # type: ignore

        txn = SyncTransaction(client=self.client, initial_sender=SuiAddress(self._sender))
        results: list[Any] = []
        for call in calls:
            arguments = [self._to_pysui_arg(arg, results, scalars) for arg in call.arguments]
            results.append(
                txn.move_call(
                    target=call.target,
                    arguments=arguments,
                    type_arguments=list(call.type_arguments),
                )
            )
        return txn

    def inspect(self, calls: Sequence[MoveCall]) -> dict[str, Any]:
        txn = self._build_transaction(calls)
        kind_bytes = base64.b64encode(txn.raw_kind().serialize()).decode("ascii")
        result = self._rpc(
            "sui_devInspectTransactionBlock",
            [self._sender, kind_bytes, None, None],
        )
        if not isinstance(result, dict):
            raise GatewayError("dev-inspect returned non-object payload")
        return result

    @staticmethod
    def _as_dict(value: Any) -> dict[str, Any]:
        if isinstance(value, dict):
            return value
        to_dict = getattr(value, "to_dict", None)
        if callable(to_dict):
            converted = to_dict()
            if isinstance(converted, dict):
                return converted
        return {}

    @classmethod
    def _effects_status(cls, effects: dict[str, Any]) -> tuple[str, str]:
        status = effects.get("status")
        if isinstance(status, dict):
            return str(status.get("status") or "success").lower(), str(status.get("error") or "")
        return "success", ""

    def execute(self, calls: Sequence[MoveCall]) -> SubmissionResult:
        if not self.config.private_key:
            raise RuntimeError("Missing PRIVATE_KEY for live submission")
        txn = self._build_transaction(calls)
        result = txn.execute(gas_budget=str(self.config.gas_budget))
        if not result.is_ok():
            raise GatewayError(f"transaction rejected error={result.result_string}")
        data = result.result_data
        digest = str(getattr(data, "digest", "") or "")
        effects = self._as_dict(getattr(data, "effects", None))
        events = [self._as_dict(event) for event in (getattr(data, "events", None) or [])]
        status, error = self._effects_status(effects)
        if status != "success":
            raise GatewayError(f"transaction failed digest={digest} error={error}")
        return SubmissionResult(
            digest=digest,
            status=status,
            effects=effects,
            events=events,
            raw={"calls": describe_calls(calls)},
        )


class PaperChainGateway(SuiChainGateway):
    """Live reads, logged writes. Submissions never reach the ledger."""

    def __init__(self, config: QuoterConfig) -> None:
        super().__init__(config)
        self.submitted: list[list[MoveCall]] = []

    def execute(self, calls: Sequence[MoveCall]) -> SubmissionResult:
        plan = describe_calls(calls)
        self.submitted.append(list(calls))
        digest = f"paper-{uuid.uuid4().hex[:12]}"
        LOGGER.info(
            "paper_submit digest=%s calls=%s",
            digest,
            ",".join(call.function for call in calls),
        )
        return SubmissionResult(digest=digest, status="paper", raw={"paper": True, "calls": plan})
