import logging
from typing import Any, Callable, List, Optional, Sequence

from ..base import AbstractDeepBook, BALANCE_MANAGER_NAMES, DEEP_BOOK_NAMES
from ..discovery import list_methods, resolve_facade
from ..errors import CapabilityNotFound, InvocationFailed
from ..invocation import error_message, maybe_await, positional_capacity, run_units
from ..models import (
    AttemptReport, HelperResult, InvocationAttempt, InvocationOutcome,
    Level2Snapshot, LimitOrderParams, OpenOrder,
)
from ..normalize import level2_snapshot, open_orders, to_float

logger = logging.getLogger("DeepBook.Builder")


class BuilderDeepBook(AbstractDeepBook):
    """
    Adapter for the "configure then build" SDK shape: every transaction
    method takes its parameters and returns a function to apply to the
    transaction. Method names are fixed; balance managers are addressed by
    the label registered with the SDK at construction.
    """

    def _method(self, target: Any, label: str, names: Sequence[str]) -> Callable:
        for name in names:
            fn = getattr(target, name, None)
            if callable(fn):
                return fn
        raise CapabilityNotFound(
            f"{label} has none of {', '.join(names)}",
            target=label,
            candidates=list_methods(target),
        )

    @property
    def deep_book(self) -> Any:
        return resolve_facade(self.sdk, DEEP_BOOK_NAMES)

    @property
    def balance_manager(self) -> Any:
        return resolve_facade(self.sdk, BALANCE_MANAGER_NAMES)

    async def _apply(self, builder: Any, txb: Any, what: str):
        if not callable(builder):
            report = AttemptReport(unit=what, outcomes=[
                InvocationOutcome(label=what, ok=False, error=f"did not return a builder function (got {type(builder).__name__})"),
            ])
            raise InvocationFailed(f"{what} did not return a builder function", [report])
        await maybe_await(builder(txb))

    async def _build(self, txb: Any, what: str, fn: Callable, *args, **kwargs):
        try:
            builder = await maybe_await(fn(*args, **kwargs))
        except Exception as e:
            report = AttemptReport(unit=what, outcomes=[InvocationOutcome(label=what, ok=False, error=error_message(e))])
            raise InvocationFailed(f"{what} failed: {error_message(e)}", [report])
        await self._apply(builder, txb, what)

    # --- Market Data ---

    async def get_level2_range(self, pool_key: str, tick_size: float, levels: int, include_asks: bool) -> Level2Snapshot:
        fn = self._method(self.sdk, "client", ("get_level2_range", "getLevel2Range"))
        return level2_snapshot(await self._read(fn, pool_key, tick_size, levels, include_asks))

    async def mid_price(self, pool_key: str) -> Optional[float]:
        try:
            fn = self._method(self.sdk, "client", ("mid_price", "midPrice"))
        except CapabilityNotFound:
            return None
        return to_float(await self._read(fn, pool_key))

    # --- Account ---

    async def account_open_orders(self, pool_key: str, manager_key: str) -> List[OpenOrder]:
        fn = self._method(self.sdk, "client", ("account_open_orders", "accountOpenOrders"))
        return open_orders(await self._read(fn, pool_key, manager_key))

    async def check_manager_balance(self, manager_key: str, coin: str) -> Any:
        fn = self._method(self.sdk, "client", ("check_manager_balance", "checkManagerBalance"))
        return await self._read(fn, manager_key, coin)

    # --- Transaction building ---

    async def _best_effort(self, txb: Any, what: str, facade: Sequence[str], label: str, names: Sequence[str], shapes):
        """
        Add an optional setup command to txb. `shapes` maps a minimum
        positional arity to the arguments used; the widest that fits wins.
        Failures are logged and never raised.
        """
        try:
            fn = self._method(resolve_facade(self.sdk, facade), label, names)
            capacity = positional_capacity(fn)
            args = next(a for n, a in shapes if capacity is None or capacity >= n)
            r = await maybe_await(fn(*args))
            if callable(r):
                await maybe_await(r(txb))
            return True
        except Exception as e:
            logger.warning(f"{what} failed; continuing (order may fail): {error_message(e)}")
            return False

    async def _prepare_trade_proof(self, txb: Any, pool_key: str, manager_key: str):
        """Trader proof and account state in the same transaction as the order."""
        await self._best_effort(
            txb, "generate_proof_as_trader", BALANCE_MANAGER_NAMES, "balance_manager",
            ("generate_proof_as_trader", "generateProofAsTrader"),
            [(2, (txb, manager_key)), (0, (txb,))],
        )
        await self._best_effort(
            txb, "account", DEEP_BOOK_NAMES, "deep_book", ("account",),
            [(3, (txb, pool_key, manager_key)), (2, (txb, manager_key)), (0, (txb,))],
        )

    async def build_place_limit_order(self, txb: Any, params: LimitOrderParams) -> str:
        await self._prepare_trade_proof(txb, params.pool_key, params.manager_key)
        fn = self._method(self.deep_book, "deep_book", ("place_limit_order", "placeLimitOrder"))
        await self._build(txb, "place_limit_order", fn, {
            "pool_key": params.pool_key,
            "balance_manager_key": params.manager_key,
            "client_order_id": params.client_order_id,
            "price": params.price,
            "quantity": params.quantity,
            "is_bid": params.is_bid,
            "pay_with_deep": params.pay_with_deep,
        })
        return "place_limit_order(params)"

    async def build_cancel_orders(self, txb: Any, pool_key: str, manager_key: str, manager_id: str,
                                  order_ids: List[str]) -> List[AttemptReport]:
        fn = self._method(self.deep_book, "deep_book", ("cancel_order", "cancelOrder"))

        async def cancel(order_id):
            await self._apply(await maybe_await(fn(pool_key, manager_key, order_id)), txb, "cancel_order")

        units = [(oid, [InvocationAttempt("pool,managerKey,orderId", (oid,))]) for oid in order_ids]
        reports = await run_units(cancel, units)
        logger.info(f"Built {sum(1 for r in reports if r.succeeded)}/{len(reports)} cancels via cancel_order")
        return reports

    async def build_deposit(self, txb: Any, manager_key: str, manager_id: str, coin: str, amount: float) -> HelperResult:
        fn = self._method(self.balance_manager, "balance_manager", ("deposit_into_manager", "depositIntoManager"))
        await self._build(txb, "deposit_into_manager", fn, manager_key, coin, amount)
        return HelperResult(built=True)

    async def build_create_balance_manager(self, txb: Any) -> HelperResult:
        fn = self._method(self.balance_manager, "balance_manager",
                          ("create_and_share_balance_manager", "createAndShareBalanceManager"))
        await self._build(txb, "create_and_share_balance_manager", fn)
        return HelperResult(built=True)

    async def build_register_balance_manager(self, txb: Any, owner: str, manager_key: str, manager_id: str) -> str:
        fn = self._method(self.balance_manager, "balance_manager",
                          ("register_balance_manager", "registerBalanceManager"))
        await self._build(txb, "register_balance_manager", fn, manager_key)
        return "register_balance_manager(managerKey)"

    async def build_register_pool(self, txb: Any, pool_key: str, manager_key: str, manager_id: str) -> str:
        fn = self._method(self.sdk, "client", ("register_pool", "registerPool"))
        await self._build(txb, "register_pool", fn, pool_key, manager_key)
        return "register_pool(pool,managerKey)"
