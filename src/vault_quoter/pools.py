from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PoolInfo:
    address: str
    base_coin: str
    quote_coin: str


DEEPBOOK_PACKAGE_IDS: dict[str, str] = {
    "mainnet": "0x2c8d603bc51326b8c13cef9dd07031a408a48dddb541963357661df5d3204809",
    "testnet": "0x984757fc7c0e6dd5f15c2c66e881dd6e5aca98b725f3dbd83c445e057ebb790a",
}

MAINNET_POOLS: dict[str, PoolInfo] = {
    "DEEP_SUI": PoolInfo("0xb663828d6217467c8a1838a03793da896cbe745b150ebd57d82f814ca579fc22", "DEEP", "SUI"),
    "SUI_USDC": PoolInfo("0xe05dafb5133bcffb8d59f4e12465dc0e9faeaa05e3e342a08fe135800e3e4407", "SUI", "USDC"),
    "DEEP_USDC": PoolInfo("0xf948981b806057580f91622417534f491da5f61aeaf33d0ed8e69fd5691c95ce", "DEEP", "USDC"),
    "WUSDT_USDC": PoolInfo("0x4e2ca3988246e1d50b9bf209abb9c1cbfec65bd95afdacc620a36c67bdb8452f", "WUSDT", "USDC"),
    "WUSDC_USDC": PoolInfo("0xa0b9ebefb38c963fd115f52d71fa64501b79d1adcb5270563f92ce0442376545", "WUSDC", "USDC"),
    "BETH_USDC": PoolInfo("0x1109352b9112717bd2a7c3eb9a416fff1ba6951760f5bdd5424cf5e4e5b3e65c", "BETH", "USDC"),
    "NS_USDC": PoolInfo("0x0c0fdd4008740d81a8a7d4281322aee71a1b62c449eb5b142656753d89ebc060", "NS", "USDC"),
    "NS_SUI": PoolInfo("0x27c4fdb3b846aa3ae4a65ef5127a309aa3c1f466671471a806d8912a18b253e8", "NS", "SUI"),
    "TYPUS_SUI": PoolInfo("0xe8e56f377ab5a261449b92ac42c8ddaacd5671e9fec2179d7933dd1a91200eec", "TYPUS", "SUI"),
    "SUI_AUSD": PoolInfo("0x183df694ebc852a5f90a959f0f563b82ac9691e42357e9a9fe961d71a1b809c8", "SUI", "AUSD"),
    "AUSD_USDC": PoolInfo("0x5661fc7f88fbeb8cb881150a810758cf13700bb4e1f31274a244581b37c303c3", "AUSD", "USDC"),
    "DRF_SUI": PoolInfo("0x126865a0197d6ab44bfd15fd052da6db92fd2eb831ff9663451bbfa1219e2af2", "DRF", "SUI"),
    "SEND_USDC": PoolInfo("0x1fe7b99c28ded39774f37327b509d58e2be7fff94899c06d22b407496a6fa990", "SEND", "USDC"),
    "WAL_USDC": PoolInfo("0x56a1c985c1f1123181d6b881714793689321ba24301b3585eec427436eb1c76d", "WAL", "USDC"),
    "WAL_SUI": PoolInfo("0x81f5339934c83ea19dd6bcc75c52e83509629a5f71d3257428c2ce47cc94d08b", "WAL", "SUI"),
    "XBTC_USDC": PoolInfo("0x20b9a3ec7a02d4f344aa1ebc5774b7b0ccafa9a5d76230662fdc0300bb215307", "XBTC", "USDC"),
}

TESTNET_POOLS: dict[str, PoolInfo] = {
    "DEEP_SUI": PoolInfo("0x48c95963e9eac37a316b7ae04a0deb761bcdcc2b67912374d6036e7f0e9bae9f", "DEEP", "SUI"),
    "SUI_DBUSDC": PoolInfo("0x1c19362ca52b8ffd7a33cee805a67d40f31e6ba303753fd3a4cfdfacea7163a5", "SUI", "DBUSDC"),
    "DEEP_DBUSDC": PoolInfo("0xe86b991f8632217505fd859445f9803967ac84a9d4a1219065bf191fcb74b622", "DEEP", "DBUSDC"),
    "DBUSDT_DBUSDC": PoolInfo("0x83970bb02e3636efdff8c141ab06af5e3c9a22e2f74d7f02a9c3430d0d10c1ca", "DBUSDT", "DBUSDC"),
    "WAL_DBUSDC": PoolInfo("0xeb524b6aea0ec4b494878582e0b78924208339d360b62aec4a8ecd4031520dbb", "WAL", "DBUSDC"),
    "WAL_SUI": PoolInfo("0x8c1c1b186c4fddab1ebd53e0895a36c1d1b3b9a77cd34e607bef49a38af0150a", "WAL", "SUI"),
}


def pools_for_network(network: str) -> dict[str, PoolInfo]:
    normalized = str(network or "").strip().lower()
    if normalized == "mainnet":
        return MAINNET_POOLS
    if normalized == "testnet":
        return TESTNET_POOLS
    raise ValueError(f"unsupported network={network!r}")


def resolve_pool_id(name_or_id: str, network: str = "mainnet") -> str:
    """Accept either a raw object id or a known pool name like ``DEEP_SUI``."""
    raw = str(name_or_id or "").strip()
    if not raw:
        return ""
    if raw.startswith("0x"):
        return raw
    pool = pools_for_network(network).get(raw.upper())
    if pool is None:
        raise ValueError(f"unknown pool={raw!r} on network={network!r}")
    return pool.address
