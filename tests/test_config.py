from __future__ import annotations

import json
import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from tests.helpers import VAULT_A, VAULT_B, make_config
from vault_quoter.config import DEFAULT_VAULTS, load_config, parse_vaults
from vault_quoter.models import OrderType, SelfMatchingOption, Vault
from vault_quoter.pools import MAINNET_POOLS, TESTNET_POOLS, resolve_pool_id


class LoadConfigTests(unittest.TestCase):
    def test_defaults(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            cfg = load_config()
        self.assertEqual(cfg.mode, "paper")
        self.assertTrue(cfg.paper_mode)
        self.assertEqual(cfg.network, "mainnet")
        self.assertEqual(cfg.rpc_url, "https://fullnode.mainnet.sui.io:443")
        self.assertEqual(cfg.spread_bps, 1000)
        self.assertEqual(cfg.order_size, 100)
        self.assertEqual(cfg.max_skew_percent, 20)
        self.assertEqual(cfg.order_expiry_ms, 300_000)
        self.assertEqual(cfg.interval_ms, 10_000)
        self.assertEqual(cfg.error_backoff_ms, 5_000)
        self.assertEqual(cfg.order_type, OrderType.NO_RESTRICTION)
        self.assertEqual(cfg.self_matching_option, SelfMatchingOption.SELF_MATCHING_ALLOWED)
        self.assertEqual(cfg.clock_object_id, "0x6")
        self.assertEqual(cfg.pool_id, MAINNET_POOLS["DEEP_SUI"].address)
        self.assertEqual(cfg.vaults, DEFAULT_VAULTS)
        self.assertFalse(cfg.strict_balance_decode)

    def test_env_overrides(self) -> None:
        env = {
            "BOT_MODE": "LIVE",
            "AMM_PACKAGE_ID": " 0xamm ",
            "TRADE_CAP_ID": "0xcap",
            "POOL_ID": "0xcustompool",
            "PRIVATE_KEY": "suiprivkey1abc",
            "SPREAD_BPS": "250",
            "ORDER_SIZE": "5000",
            "MAX_SKEW_PERCENT": "0",
            "ORDER_EXPIRY_MS": "60000",
            "INTERVAL_MS": "2500",
            "ORDER_TYPE": "3",
            "SELF_MATCHING_OPTION": "1",
            "STRICT_BALANCE_DECODE": "yes",
            "LOG_LEVEL": "debug",
        }
        with patch.dict(os.environ, env, clear=True):
            cfg = load_config()
        self.assertTrue(cfg.live_mode)
        self.assertEqual(cfg.amm_package_id, "0xamm")
        self.assertEqual(cfg.vault_module, "0xamm::mm_vault")
        self.assertEqual(cfg.pool_id, "0xcustompool")
        self.assertEqual(cfg.spread_bps, 250)
        self.assertEqual(cfg.order_size, 5000)
        self.assertEqual(cfg.max_skew_percent, 0)
        self.assertEqual(cfg.order_expiry_ms, 60_000)
        self.assertEqual(cfg.interval_ms, 2_500)
        self.assertEqual(cfg.order_type, OrderType.POST_ONLY)
        self.assertEqual(cfg.self_matching_option, SelfMatchingOption.CANCEL_TAKER)
        self.assertTrue(cfg.strict_balance_decode)
        self.assertEqual(cfg.log_level, "DEBUG")
        self.assertEqual(cfg.problems(), [])

    def test_non_integer_env_is_rejected(self) -> None:
        with patch.dict(os.environ, {"SPREAD_BPS": "wide"}, clear=True):
            with self.assertRaises(ValueError):
                load_config()

    def test_unknown_order_type_is_rejected(self) -> None:
        with patch.dict(os.environ, {"ORDER_TYPE": "9"}, clear=True):
            with self.assertRaises(ValueError):
                load_config()

    def test_testnet_pool_name_resolves(self) -> None:
        with patch.dict(os.environ, {"SUI_NETWORK": "testnet", "POOL_ID": "deep_sui"}, clear=True):
            cfg = load_config()
        self.assertEqual(cfg.pool_id, TESTNET_POOLS["DEEP_SUI"].address)
        self.assertEqual(cfg.rpc_url, "https://fullnode.testnet.sui.io:443")

    def test_vaults_json_env(self) -> None:
        raw = json.dumps(
            [
                {
                    "id": "0xv1",
                    "baseAssetType": "0x1::a::A",
                    "quoteAssetType": "0x2::sui::SUI",
                    "lpTokenType": "0x3::lp::LP",
                }
            ]
        )
        with patch.dict(os.environ, {"VAULTS_JSON": raw}, clear=True):
            cfg = load_config()
        self.assertEqual(
            cfg.vaults,
            (Vault(id="0xv1", base_asset_type="0x1::a::A", quote_asset_type="0x2::sui::SUI", lp_token_type="0x3::lp::LP"),),
        )

    def test_vaults_file_env(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "vaults.json"
            path.write_text(
                json.dumps(
                    {
                        "id": "0xv2",
                        "base_asset_type": "0x1::b::B",
                        "quote_asset_type": "0x2::sui::SUI",
                        "lp_token_type": "0x3::lp::LP",
                    }
                ),
                encoding="utf-8",
            )
            with patch.dict(os.environ, {"VAULTS_FILE": str(path)}, clear=True):
                cfg = load_config()
        self.assertEqual(len(cfg.vaults), 1)
        self.assertEqual(cfg.vaults[0].id, "0xv2")

    def test_missing_vaults_file_is_a_config_error(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            missing = str(Path(tmp) / "absent.json")
            with patch.dict(os.environ, {"VAULTS_FILE": missing}, clear=True):
                with self.assertRaises(ValueError) as ctx:
                    load_config()
        self.assertIn("VAULTS_FILE unreadable", str(ctx.exception))

    def test_parse_vaults_rejects_non_objects(self) -> None:
        with self.assertRaises(ValueError):
            parse_vaults(["0xv1"])
        with self.assertRaises(ValueError):
            parse_vaults("0xv1")


class ConfigProblemsTests(unittest.TestCase):
    def test_valid_config_has_no_problems(self) -> None:
        self.assertEqual(make_config(vaults=(VAULT_A, VAULT_B)).problems(), [])

    def test_missing_required_ids(self) -> None:
        problems = make_config(amm_package_id="", trade_cap_id="").problems()
        self.assertIn("AMM_PACKAGE_ID is required", problems)
        self.assertIn("TRADE_CAP_ID is required", problems)

    def test_live_mode_requires_private_key(self) -> None:
        self.assertIn("PRIVATE_KEY is required for live mode", make_config(mode="live").problems())
        self.assertEqual(make_config(mode="live", private_key="k").problems(), [])
        self.assertEqual(make_config(mode="paper", private_key="").problems(), [])

    def test_numeric_ranges_are_validated_not_clamped(self) -> None:
        cases = [
            ({"spread_bps": 0}, "SPREAD_BPS must be > 0"),
            ({"order_size": -1}, "ORDER_SIZE must be > 0"),
            ({"max_skew_percent": 101}, "MAX_SKEW_PERCENT must be within [0, 100]"),
            ({"max_skew_percent": -1}, "MAX_SKEW_PERCENT must be within [0, 100]"),
            ({"order_expiry_ms": 0}, "ORDER_EXPIRY_MS must be > 0"),
        ]
        for overrides, expected in cases:
            with self.subTest(overrides=overrides):
                cfg = make_config(**overrides)
                self.assertIn(expected, cfg.problems())
                for key, value in overrides.items():
                    self.assertEqual(getattr(cfg, key), value)

    def test_vault_type_tags_must_be_distinct(self) -> None:
        bad = Vault(id="0xbad", base_asset_type="0x2::sui::SUI", quote_asset_type="0x2::sui::SUI", lp_token_type="0x3::lp::LP")
        self.assertIn("vault 0xbad type tags must be distinct", make_config(vaults=(bad,)).problems())

    def test_duplicate_and_empty_vaults(self) -> None:
        self.assertIn("vault 0xvaulta is configured twice", make_config(vaults=(VAULT_A, VAULT_A)).problems())
        self.assertIn("at least one vault must be configured", make_config(vaults=()).problems())


class PoolResolutionTests(unittest.TestCase):
    def test_raw_object_id_passes_through(self) -> None:
        self.assertEqual(resolve_pool_id("0xabc"), "0xabc")

    def test_pool_name_resolves_case_insensitively(self) -> None:
        self.assertEqual(resolve_pool_id("xbtc_usdc"), MAINNET_POOLS["XBTC_USDC"].address)
        self.assertEqual(
            MAINNET_POOLS["XBTC_USDC"].address,
            "0x20b9a3ec7a02d4f344aa1ebc5774b7b0ccafa9a5d76230662fdc0300bb215307",
        )

    def test_unknown_pool_name(self) -> None:
        with self.assertRaises(ValueError):
            resolve_pool_id("NOPE_SUI")

    def test_unknown_network(self) -> None:
        with self.assertRaises(ValueError):
            resolve_pool_id("DEEP_SUI", network="devnet")


if __name__ == "__main__":
    unittest.main()
