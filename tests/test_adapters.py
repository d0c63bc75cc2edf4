import asyncio
import logging

import pytest

from deepbook_bot.adapters import BuilderDeepBook, ReflectiveDeepBook
from deepbook_bot.errors import CapabilityNotFound, InvocationFailed, NetworkError
from deepbook_bot.factory import AdapterFactory, AdapterType
from deepbook_bot.models import LimitOrderParams
from fakes import (
    BuilderBalanceManagerApi,
    BuilderClient,
    BuilderDeepBookApi,
    FakeTxb,
    StubClient,
    StubDeepBook,
)

PARAMS = LimitOrderParams(pool_key="SUI_DBUSDC", manager_key="BM1", manager_id="0xbm",
                          price=0.6, quantity=3.0, client_order_id="42")


def test_factory_accepts_enum_or_string():
    assert isinstance(AdapterFactory.create_adapter(AdapterType.BUILDER, object()), BuilderDeepBook)
    assert isinstance(AdapterFactory.create_adapter("reflective", object()), ReflectiveDeepBook)
    with pytest.raises(ValueError):
        AdapterFactory.create_adapter("unknown", object())


@pytest.mark.asyncio
async def test_reflective_level2_snapshot():
    adapter = ReflectiveDeepBook(StubClient())
    snap = await adapter.get_level2_range("SUI_DBUSDC", 0.1, 50, True)
    assert snap.prices == [1.23, 1.20]
    assert snap.best_price == 1.23
    assert adapter.describe()["resolved"]


@pytest.mark.asyncio
async def test_reflective_mid_price_missing_is_none():
    assert await ReflectiveDeepBook(StubClient()).mid_price("SUI_DBUSDC") is None


@pytest.mark.asyncio
async def test_reflective_open_orders():
    orders = await ReflectiveDeepBook(StubClient()).account_open_orders("SUI_DBUSDC", "BM1")
    assert [o.order_id for o in orders] == ["5"]


@pytest.mark.asyncio
async def test_reflective_place_finds_working_argument_order():
    txb = FakeTxb()
    label = await ReflectiveDeepBook(StubClient()).build_place_limit_order(txb, PARAMS)
    assert label == "txb,pool,isBid,price,qty,managerId"
    assert txb.commands == [("place", "SUI_DBUSDC", True, 0.6, 3.0, "0xbm")]


@pytest.mark.asyncio
async def test_reflective_cancel_skips_cancel_all_and_reports_partial_success():
    deep = StubDeepBook(failing_orders={"2"})
    txb = FakeTxb()
    reports = await ReflectiveDeepBook(StubClient(deep_book=deep)).build_cancel_orders(
        txb, "SUI_DBUSDC", "BM1", "0xbm", ["1", "2", "3"])
    assert [r.succeeded for r in reports] == [True, False, True]
    assert ("cancel", "SUI_DBUSDC", "0xbm", "1") in txb.commands
    assert not any(c[0] == "cancel_all" for c in txb.commands)


@pytest.mark.asyncio
async def test_reflective_cancel_every_order_failing():
    deep = StubDeepBook(failing_orders={"1", "2", "3"})
    with pytest.raises(InvocationFailed) as exc:
        await ReflectiveDeepBook(StubClient(deep_book=deep)).build_cancel_orders(
            FakeTxb(), "SUI_DBUSDC", "BM1", "0xbm", ["1", "2", "3"])
    reports = exc.value.reports
    assert [r.unit for r in reports] == ["1", "2", "3"]
    for report in reports:
        assert [o.label for o in report.outcomes] == [
            "txb,pool,managerId,orderId",
            "txb,pool,orderId,managerId",
            "txb,pool,orderId",
            "txb,orderId",
        ]
    # the two 4-argument shapes reach the SDK; the shorter ones fail on arity
    assert deep.cancel_calls == [
        ("SUI_DBUSDC", "0xbm", "1"), ("SUI_DBUSDC", "1", "0xbm"),
        ("SUI_DBUSDC", "0xbm", "2"), ("SUI_DBUSDC", "2", "0xbm"),
        ("SUI_DBUSDC", "0xbm", "3"), ("SUI_DBUSDC", "3", "0xbm"),
    ]


@pytest.mark.asyncio
async def test_reflective_deposit_applies_builder():
    txb = FakeTxb()
    res = await ReflectiveDeepBook(StubClient()).build_deposit(txb, "BM1", "0xbm", "SUI", 0.1)
    assert res.built
    assert txb.commands == [("deposit", "0xbm", "SUI", 0.1)]


@pytest.mark.asyncio
async def test_reflective_register_manager_and_pool():
    adapter = ReflectiveDeepBook(StubClient())
    txb = FakeTxb()
    assert await adapter.build_register_balance_manager(txb, "0xowner", "BM1", "0xbm") == "txb,managerKey,managerId"
    assert await adapter.build_register_pool(txb, "SUI_DBUSDC", "BM1", "0xbm") == "txb,pool,managerKey"
    assert txb.commands == [("register_manager", "BM1", "0xbm"), ("register_pool", "SUI_DBUSDC", "BM1")]


@pytest.mark.asyncio
async def test_reflective_missing_facade_lists_client_attributes():
    class Bare:
        def getLevel2Range(self, *args):
            return {}

    with pytest.raises(CapabilityNotFound) as exc:
        await ReflectiveDeepBook(Bare()).build_place_limit_order(FakeTxb(), PARAMS)
    assert "getLevel2Range" in exc.value.candidates


@pytest.mark.asyncio
async def test_builder_reads():
    adapter = BuilderDeepBook(BuilderClient())
    snap = await adapter.get_level2_range("SUI_DBUSDC", 0.1, 10, False)
    assert snap.best_price == 0.98
    assert await adapter.mid_price("SUI_DBUSDC") == 1.0
    assert [o.order_id for o in await adapter.account_open_orders("SUI_DBUSDC", "BM1")] == ["11", "12"]


@pytest.mark.asyncio
async def test_builder_place_passes_manager_label():
    txb = FakeTxb()
    await BuilderDeepBook(BuilderClient()).build_place_limit_order(txb, PARAMS)
    (command,) = txb.commands
    assert command[1]["balance_manager_key"] == "BM1"
    assert command[1]["client_order_id"] == "42"


@pytest.mark.asyncio
async def test_builder_cancel_and_deposit():
    adapter = BuilderDeepBook(BuilderClient())
    txb = FakeTxb()
    reports = await adapter.build_cancel_orders(txb, "SUI_DBUSDC", "BM1", "0xbm", ["7", "8"])
    assert all(r.succeeded for r in reports)
    res = await adapter.build_deposit(txb, "BM1", "0xbm", "DBUSDC", 5.0)
    assert res.built
    assert txb.commands[-1] == ("deposit", "BM1", "DBUSDC", 5.0)


@pytest.mark.asyncio
async def test_builder_non_callable_return_fails():
    with pytest.raises(InvocationFailed) as exc:
        await BuilderDeepBook(BuilderClient()).build_register_balance_manager(FakeTxb(), "0xowner", "BM1", "0xbm")
    assert exc.value.reports[0].unit == "register_balance_manager"


@pytest.mark.asyncio
async def test_builder_missing_method_lists_candidates():
    class Empty:
        deep_book = object()

    with pytest.raises(CapabilityNotFound):
        await BuilderDeepBook(Empty()).get_level2_range("SUI_DBUSDC", 0.1, 10, True)


class HangingClient(StubClient):
    async def getLevel2Range(self, pool, tick_size, levels, include_asks):
        await asyncio.Event().wait()


class HangingBuilderClient(BuilderClient):
    async def get_level2_range(self, pool, tick_size, levels, include_asks):
        await asyncio.Event().wait()


@pytest.mark.asyncio
async def test_reflective_read_deadline():
    adapter = ReflectiveDeepBook(HangingClient(), {"call_timeout_s": 0.05})
    with pytest.raises(NetworkError) as exc:
        await adapter.get_level2_range("SUI_DBUSDC", 0.1, 10, True)
    assert "getLevel2Range timed out" in str(exc.value)


@pytest.mark.asyncio
async def test_builder_read_deadline():
    adapter = BuilderDeepBook(HangingBuilderClient(), {"call_timeout_s": 0.05})
    with pytest.raises(NetworkError):
        await adapter.get_level2_range("SUI_DBUSDC", 0.1, 10, True)


class ProofDeepBookApi(BuilderDeepBookApi):
    def account(self, txb, pool, manager_key):
        txb.add(("account", pool, manager_key))


class ProofBalanceManagerApi(BuilderBalanceManagerApi):
    def generate_proof_as_trader(self, txb, manager_key):
        txb.add(("proof", manager_key))


class FailingProofBalanceManagerApi(BuilderBalanceManagerApi):
    def generate_proof_as_trader(self, txb, manager_key):
        raise RuntimeError("proof unavailable")


@pytest.mark.asyncio
async def test_builder_place_adds_trade_proof_first():
    sdk = BuilderClient()
    sdk.deep_book = ProofDeepBookApi()
    sdk.balance_manager = ProofBalanceManagerApi()
    txb = FakeTxb()
    await BuilderDeepBook(sdk).build_place_limit_order(txb, PARAMS)
    assert txb.commands[:2] == [("proof", "BM1"), ("account", "SUI_DBUSDC", "BM1")]
    assert txb.commands[2][0] == "place"


@pytest.mark.asyncio
async def test_builder_place_survives_failed_trade_proof(caplog):
    sdk = BuilderClient()
    sdk.deep_book = ProofDeepBookApi()
    sdk.balance_manager = FailingProofBalanceManagerApi()
    txb = FakeTxb()
    with caplog.at_level(logging.WARNING, logger="DeepBook.Builder"):
        await BuilderDeepBook(sdk).build_place_limit_order(txb, PARAMS)
    assert [c[0] for c in txb.commands] == ["account", "place"]
    assert "generate_proof_as_trader failed" in caplog.text


@pytest.mark.asyncio
async def test_reflective_balance_check_follows_method_arity():
    class OneArgBalance:
        def __init__(self):
            self.calls = []

        async def checkManagerBalance(self, manager_key):
            self.calls.append(manager_key)
            return {"balance": 2}

    sdk = OneArgBalance()
    assert await ReflectiveDeepBook(sdk).check_manager_balance("BM1", "SUI") == {"balance": 2}
    assert sdk.calls == ["BM1"]


@pytest.mark.asyncio
async def test_reflective_balance_check_does_not_retry_sdk_type_errors():
    class BrokenBalance:
        def __init__(self):
            self.calls = 0

        async def checkManagerBalance(self, manager_key, coin):
            self.calls += 1
            raise TypeError("unsupported coin type")

    sdk = BrokenBalance()
    with pytest.raises(TypeError):
        await ReflectiveDeepBook(sdk).check_manager_balance("BM1", "SUI")
    assert sdk.calls == 1
