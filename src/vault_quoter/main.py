from __future__ import annotations

import argparse
from dataclasses import replace
import json
import logging
import signal
from typing import Callable, Iterable

from vault_quoter.balances import VaultBalanceReader
from vault_quoter.config import QuoterConfig, load_config
from vault_quoter.gateway import ChainGateway, PaperChainGateway, SuiChainGateway
from vault_quoter.orders import SpreadOrderBuilder
from vault_quoter.scheduler import QuoteScheduler

LOGGER = logging.getLogger("vault_quoter")


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    for noisy in ("httpx", "httpcore", "urllib3", "pysui"):
        logging.getLogger(noisy).setLevel(logging.ERROR)


def build_gateway(config: QuoterConfig) -> ChainGateway:
    if config.live_mode:
        return SuiChainGateway(config)
    return PaperChainGateway(config)


def build_scheduler(config: QuoterConfig, gateway: ChainGateway) -> QuoteScheduler:
    reader = VaultBalanceReader(config, gateway)
    builder = SpreadOrderBuilder(config, gateway)
    return QuoteScheduler(config, reader, builder)


def _load_checked_config(overrides: dict[str, object]) -> QuoterConfig | None:
    try:
        config = load_config()
    except ValueError as exc:
        _setup_logging("INFO")
        LOGGER.error("Invalid configuration: %s", exc)
        return None
    if overrides:
        config = replace(config, **overrides)
    _setup_logging(config.log_level)
    problems = config.problems()
    if problems:
        for problem in problems:
            LOGGER.error("Invalid configuration: %s", problem)
        return None
    return config


def _install_signal_handlers(scheduler: QuoteScheduler) -> Callable[[int, object], None]:
    def _handle_signal(signum: int, _frame: object) -> None:
        LOGGER.warning("Received signal %s, shutting down quote loop", signum)
        scheduler.stop()
        raise SystemExit(0)

    signal.signal(signal.SIGINT, _handle_signal)
    signal.signal(signal.SIGTERM, _handle_signal)
    return _handle_signal


def _run_command(args: argparse.Namespace) -> int:
    overrides: dict[str, object] = {}
    if args.mode:
        overrides["mode"] = args.mode.lower()
    if args.interval_ms is not None:
        overrides["interval_ms"] = int(args.interval_ms)
    config = _load_checked_config(overrides)
    if config is None:
        return 2

    gateway = build_gateway(config)
    try:
        gateway.preflight()
    except Exception as exc:
        LOGGER.error("Preflight failed: %s", exc)
        return 2
    scheduler = build_scheduler(config, gateway)
    LOGGER.info(
        "Starting quoter mode=%s vaults=%s pool=%s deepbook=%s spread_bps=%s size=%s",
        config.mode,
        ",".join(vault.id for vault in config.vaults),
        config.pool_id,
        config.deepbook_package_id,
        config.spread_bps,
        config.order_size,
    )
    _install_signal_handlers(scheduler)
    try:
        scheduler.run(max_steps=args.max_steps)
        return 0
    except Exception as exc:
        LOGGER.error("Fatal runtime error: %s", exc)
        return 2


def _balances_command(args: argparse.Namespace) -> int:
    config = _load_checked_config({})
    if config is None:
        return 2
    reader = VaultBalanceReader(config, build_gateway(config))
    try:
        for vault in config.vaults:
            snapshot = reader.read_balances(vault)
            print(json.dumps({"vault": vault.id, **snapshot.to_dict()}))
    except Exception as exc:
        LOGGER.error("balances failed: %s", exc)
        return 2
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vault_quoter", description="Spread-order quoting loop for AMM vaults"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Run the quoting loop")
    run.add_argument("--mode", choices=("paper", "live"), default=None)
    run.add_argument(
        "--interval-ms",
        type=int,
        default=None,
        help="Pause between vault steps in milliseconds (overrides INTERVAL_MS)",
    )
    run.add_argument(
        "--max-steps",
        type=int,
        default=None,
        help="Stop after this many vault steps (default: run until interrupted)",
    )
    run.set_defaults(func=_run_command)

    balances = sub.add_parser("balances", help="Print current balances of every configured vault")
    balances.set_defaults(func=_balances_command)
    return parser


def cli(argv: Iterable[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    return int(args.func(args))


def main() -> None:
    raise SystemExit(cli())


if __name__ == "__main__":
    main()
