from typing import Dict

from .errors import ConfigurationError

# Pool object addresses published with the DeepBook v3 SDK constants.
TESTNET_POOLS: Dict[str, str] = {
    "SUI_DBUSDC": "0x1c19362ca52b8ffd7a33cee805a67d40f31e6ba303753fd3a4cfdfacea7163a5",
    "DEEP_SUI": "0x48c95963e9eac37a316b7ae04a0deb761bcdcc2b67912374d6036e7f0e9bae9f",
}

MAINNET_POOLS: Dict[str, str] = {
    "SUI_USDC": "0xe05dafb5133bcffb8d59f4e12465dc0e9faeaa05e3e342a08fe135800e3e4407",
}


def resolve_pool_ref(pool_key: str, network: str) -> str:
    """
    Map a named pool (e.g. SUI_DBUSDC) to its object address.
    Values that already look like an address are returned unchanged.
    """
    raw = (pool_key or "").strip()
    if not raw:
        raise ConfigurationError("Missing POOL_KEY in .env", field="POOL_KEY")
    if raw.startswith("0x"):
        return raw

    net = (network or "").lower()
    is_testnet = any(tag in net for tag in ("test", "dev", "local"))
    pools = TESTNET_POOLS if is_testnet else MAINNET_POOLS
    resolved = pools.get(raw)
    if not resolved:
        raise ConfigurationError(
            f'POOL_KEY "{raw}" not found in {"TESTNET" if is_testnet else "MAINNET"} mapping. '
            f"Set POOL_KEY to the 0x pool address directly.",
            field="POOL_KEY",
        )
    return resolved
