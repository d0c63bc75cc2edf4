import json

import pytest

from deepbook_bot.bot import DeepBookBot
from deepbook_bot.errors import (
    InsufficientFunds,
    ObjectNotFound,
    SdkUnavailable,
    TradingDisabled,
    TransactionFailed,
)
from deepbook_bot.models import ExecutionResult
from deepbook_bot.scripts import (
    cancel_all,
    create_manager,
    deposit,
    inspect_manager,
    inspect_sdk,
    inspect_tx,
    l2_snapshot,
    place_order,
    register_manager,
    register_pool,
)
from deepbook_bot.scripts import _runner
from deepbook_bot.scripts._runner import EXIT_CONFIG, EXIT_FAILED, EXIT_OK, run
from fakes import FakeSigner, StubClient, StubDeepBook


def make_bot(settings, signer, sdk):
    return DeepBookBot(settings, signer=signer, sdk=sdk)


@pytest.mark.asyncio
async def test_l2_snapshot(settings, signer, sdk):
    out = await l2_snapshot.main(settings, make_bot(settings, signer, sdk))
    assert out["best_price"] == 1.23
    assert out["prices"] == [1.23, 1.20]
    assert out["network"] == "testnet"
    assert signer.closed


@pytest.mark.asyncio
async def test_cancel_all_uses_order_ids(make_settings, signer):
    settings = make_settings(order_ids="1,2,3")
    deep = StubDeepBook(failing_orders={"2"})
    sdk = StubClient(deep_book=deep)
    out = await cancel_all.main(settings, make_bot(settings, signer, sdk))
    assert out["requested"] == 3
    assert out["built"] == 2
    assert out["failed"] == ["2"]
    assert out["digest"] == "D1"
    assert sdk.open_order_reads == 0
    assert len(signer.executed) == 1


@pytest.mark.asyncio
async def test_cancel_all_reads_open_orders(settings, signer, sdk):
    out = await cancel_all.main(settings, make_bot(settings, signer, sdk))
    assert out["requested"] == 1
    assert sdk.open_order_reads == 1
    assert signer.executed[0].commands == [("cancel", "SUI_DBUSDC", "0xbm", "5")]


@pytest.mark.asyncio
async def test_cancel_all_with_nothing_open(settings, signer):
    sdk = StubClient(orders={"orders": []})
    out = await cancel_all.main(settings, make_bot(settings, signer, sdk))
    assert out["requested"] == 0
    assert signer.executed == []


@pytest.mark.asyncio
async def test_place_order_requires_trading_flag(settings, signer, sdk):
    with pytest.raises(TradingDisabled):
        await place_order.main(settings, make_bot(settings, signer, sdk))
    assert signer.executed == []


@pytest.mark.asyncio
async def test_place_order_uses_best_bid_and_reads_orders(make_settings, signer, sdk):
    settings = make_settings(allow_trading=True, bad_bid_mult=0.5, client_order_id="77")
    out = await place_order.main(settings, make_bot(settings, signer, sdk))
    assert out["price"] == pytest.approx(0.615)
    assert out["client_order_id"] == "77"
    assert out["signature"] == "txb,pool,isBid,price,qty,managerId"
    assert out["open_orders"] == ["5"]
    assert sdk.open_order_reads == 1


@pytest.mark.asyncio
async def test_place_order_stops_on_failed_status(make_settings, sdk):
    settings = make_settings(allow_trading=True)
    signer = FakeSigner(result=ExecutionResult(digest="DX", status="failure", error="MoveAbort"))
    with pytest.raises(TransactionFailed) as exc:
        await place_order.main(settings, make_bot(settings, signer, sdk))
    assert exc.value.digest == "DX"
    assert sdk.open_order_reads == 0
    assert signer.closed


@pytest.mark.asyncio
async def test_create_manager_reports_new_id(settings, sdk):
    signer = FakeSigner(result=ExecutionResult(
        digest="D2",
        status="success",
        object_changes=[{"type": "created", "objectType": "0xdee9::balance_manager::BalanceManager",
                         "objectId": "0xnew"}],
    ))
    out = await create_manager.main(settings, make_bot(settings, signer, sdk))
    assert out["balance_manager_id"] == "0xnew"
    assert signer.executed[0].commands == [("create_manager",)]


@pytest.mark.asyncio
async def test_create_manager_without_match_lists_changes(settings, signer, sdk):
    signer.result = ExecutionResult(digest="D3", status="success",
                                    object_changes=[{"type": "mutated", "objectType": "0x2::coin::Coin"}])
    out = await create_manager.main(settings, make_bot(settings, signer, sdk))
    assert out["balance_manager_id"] is None
    assert out["object_changes"][0]["objectType"] == "0x2::coin::Coin"


@pytest.mark.asyncio
async def test_deposit_builds_and_reads_balances(make_settings, signer, sdk):
    settings = make_settings(deposit_base=0.2, deposit_quote=0)
    out = await deposit.main(settings, make_bot(settings, signer, sdk))
    assert signer.executed[0].commands == [("deposit", "0xbm", "SUI", 0.2)]
    assert out["digest"] == "D1"
    assert out["balances"]["SUI"]["balance"] == 1.5


@pytest.mark.asyncio
async def test_deposit_without_gas(settings, signer, sdk):
    signer.coins = []
    with pytest.raises(InsufficientFunds):
        await deposit.main(settings, make_bot(settings, signer, sdk))


@pytest.mark.asyncio
async def test_register_scripts(settings, signer, sdk):
    out = await register_manager.main(settings, make_bot(settings, signer, sdk))
    assert out["signature"] == "txb,managerKey,managerId"
    out = await register_pool.main(settings, make_bot(settings, FakeSigner(), sdk))
    assert out["pool"] == "SUI_DBUSDC"


@pytest.mark.asyncio
async def test_inspect_manager(settings, signer):
    signer.objects["0xbm"] = {"data": {"type": "0xdee9::balance_manager::BalanceManager", "owner": {"Shared": {}}}}
    out = await inspect_manager.main(settings, DeepBookBot(settings, signer=signer))
    assert out["type"].endswith("BalanceManager")
    assert out["owner"] == {"Shared": {}}


@pytest.mark.asyncio
async def test_inspect_manager_missing_object(settings, signer):
    with pytest.raises(ObjectNotFound):
        await inspect_manager.main(settings, DeepBookBot(settings, signer=signer))


@pytest.mark.asyncio
async def test_inspect_tx(settings, signer):
    signer.transactions["D7"] = {"digest": "D7", "events": [{"type": "x"}], "objectChanges": []}
    out = await inspect_tx.main(settings, "D7", DeepBookBot(settings, signer=signer))
    assert out["events"] == [{"type": "x"}]


@pytest.mark.asyncio
async def test_inspect_sdk(settings, signer, sdk):
    out = await inspect_sdk.main(settings, make_bot(settings, signer, sdk))
    assert "placeLimitOrder" in out["facades"]["deep_book"]
    assert out["facades"]["pool_proxy"] is None
    assert "accountOpenOrders" in out["trading_methods"]


def test_runner_exit_codes(monkeypatch, capsys):
    monkeypatch.setattr(_runner, "setup_logging", lambda level="INFO": None)

    async def ok(settings):
        return {"digest": "D1"}

    async def failing(settings):
        raise TransactionFailed("DX", "failure", "MoveAbort")

    assert run(ok, env_file=None) == EXIT_CONFIG

    monkeypatch.setenv("SUI_PRIVATE_KEY", "suiprivkey1test")
    assert run(ok, env_file=None) == EXIT_OK
    assert json.loads(capsys.readouterr().out) == {"digest": "D1"}

    assert run(failing, env_file=None) == EXIT_FAILED
    assert json.loads(capsys.readouterr().out)["digest"] == "DX"


@pytest.mark.asyncio
async def test_signer_closed_when_sdk_fails_to_load(settings, signer):
    signer.client = None
    with pytest.raises(SdkUnavailable):
        await l2_snapshot.main(settings, DeepBookBot(settings, signer=signer))
    assert signer.client is not None
    assert signer.closed


def test_runner_reports_unexpected_errors(monkeypatch, capsys):
    monkeypatch.setattr(_runner, "setup_logging", lambda level="INFO": None)
    monkeypatch.setenv("SUI_PRIVATE_KEY", "suiprivkey1test")

    async def crashing(settings):
        raise RuntimeError("fetch failed: ECONNRESET")

    assert run(crashing, env_file=None) == EXIT_FAILED
    diagnostic = json.loads(capsys.readouterr().out)
    assert diagnostic == {"error": "RuntimeError", "message": "fetch failed: ECONNRESET"}
