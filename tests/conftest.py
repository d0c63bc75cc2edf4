import pytest

from deepbook_bot.config import Settings
from fakes import FakeSigner, StubClient

ENV_VARS = (
    "SUI_ENV", "SUI_PRIVATE_KEY", "SUI_RPC_URL", "POOL_KEY", "ALLOW_TRADING", "MAX_ORDER_USD",
    "ORDER_SIZE_BASE", "BALANCE_MANAGER_ID", "BALANCE_MANAGER_KEY", "BALANCE_MANAGERS", "ORDER_IDS",
    "BAD_BID_MULT", "CLIENT_ORDER_ID", "DEPOSIT_BASE", "DEPOSIT_QUOTE", "DEEPBOOK_SDK",
    "DEEPBOOK_ADAPTER", "RESOLVE_POOL_ADDRESS", "L2_LEVELS", "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def make_settings():
    def make(**overrides):
        values = {"sui_private_key": "suiprivkey1test", "balance_manager_id": "0xbm"}
        values.update(overrides)
        return Settings(**values)
    return make


@pytest.fixture
def settings(make_settings):
    return make_settings()


@pytest.fixture
def signer():
    return FakeSigner()


@pytest.fixture
def sdk():
    return StubClient()
