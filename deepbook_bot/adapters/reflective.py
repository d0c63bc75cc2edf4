import inspect
import logging
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from ..base import AbstractDeepBook, BALANCE_MANAGER_NAMES, DEEP_BOOK_NAMES
from ..discovery import CapabilityQuery, find_method, optional_facade, resolve_facade
from ..errors import CapabilityNotFound
from ..invocation import call_sdk_helper, invoke_plan, positional_capacity, run_units
from ..models import AttemptReport, HelperResult, InvocationAttempt, Level2Snapshot, LimitOrderParams, OpenOrder
from ..normalize import level2_snapshot, open_orders, to_float

logger = logging.getLogger("DeepBook.Reflective")


def _single_order(name: str) -> bool:
    return "all" not in name.lower()


LEVEL2 = CapabilityQuery([r"level_?2|l2", "range"])
MID_PRICE = CapabilityQuery(["mid", "price"])
OPEN_ORDERS = CapabilityQuery(["open", "order"])
MANAGER_BALANCE = CapabilityQuery(["check", "balance"])
PLACE_LIMIT = CapabilityQuery(["place", "limit|order"])
CANCEL_ORDER = CapabilityQuery(["cancel", "order", _single_order])
DEPOSIT = CapabilityQuery(["deposit", "manager"])
CREATE_MANAGER = CapabilityQuery(["create", "balance|manager"])
REGISTER_MANAGER = CapabilityQuery(["register", "balance", "manager"])
REGISTER_POOL = CapabilityQuery(["register", "pool"])


def place_plan(txb: Any, p: LimitOrderParams) -> List[InvocationAttempt]:
    # tx builders want the manager object id, not its label
    return [
        InvocationAttempt("txb,pool,managerId,side,price,qty", (txb, p.pool_key, p.manager_id, p.side, p.price, p.quantity)),
        InvocationAttempt("txb,pool,side,price,qty,managerId", (txb, p.pool_key, p.side, p.price, p.quantity, p.manager_id)),
        InvocationAttempt("txb,pool,managerId,isBid,price,qty", (txb, p.pool_key, p.manager_id, p.is_bid, p.price, p.quantity)),
        InvocationAttempt("txb,pool,isBid,price,qty,managerId", (txb, p.pool_key, p.is_bid, p.price, p.quantity, p.manager_id)),
    ]


def cancel_plan(txb: Any, pool_key: str, manager_id: str, order_id: str) -> List[InvocationAttempt]:
    return [
        InvocationAttempt("txb,pool,managerId,orderId", (txb, pool_key, manager_id, order_id)),
        InvocationAttempt("txb,pool,orderId,managerId", (txb, pool_key, order_id, manager_id)),
        InvocationAttempt("txb,pool,orderId", (txb, pool_key, order_id)),
        InvocationAttempt("txb,orderId", (txb, order_id)),
    ]


def cancel_units(txb: Any, pool_key: str, manager_id: str,
                 order_ids: Sequence[str]) -> List[Tuple[str, List[InvocationAttempt]]]:
    return [(oid, cancel_plan(txb, pool_key, manager_id, oid)) for oid in order_ids]


def register_manager_plan(txb: Any, owner: str, manager_key: str, manager_id: str) -> List[InvocationAttempt]:
    return [
        InvocationAttempt("txb,owner,managerKey,managerId", (txb, owner, manager_key, manager_id)),
        InvocationAttempt("txb,managerKey,managerId", (txb, manager_key, manager_id)),
        InvocationAttempt("txb,managerId,managerKey", (txb, manager_id, manager_key)),
        InvocationAttempt("txb,owner,managerId,managerKey", (txb, owner, manager_id, manager_key)),
    ]


def register_pool_plan(txb: Any, pool_key: str, manager_key: str, manager_id: str) -> List[InvocationAttempt]:
    return [
        InvocationAttempt("txb,pool,managerKey", (txb, pool_key, manager_key)),
        InvocationAttempt("txb,pool,managerId", (txb, pool_key, manager_id)),
        InvocationAttempt("txb,pool", (txb, pool_key)),
        InvocationAttempt("txb,pool,managerKey,managerId", (txb, pool_key, manager_key, manager_id)),
    ]


def applying(fn: Callable, txb: Any) -> Callable:
    """Wrap fn so that a returned builder function is applied to txb."""
    async def call(*args):
        r = fn(*args)
        if inspect.isawaitable(r):
            r = await r
        if callable(r):
            r = r(txb)
            if inspect.isawaitable(r):
                await r
    return call


class ReflectiveDeepBook(AbstractDeepBook):
    """
    Adapter for SDK releases whose method names and argument orders are not
    known in advance. Methods are discovered by name pattern and invoked
    under a fixed list of argument shapes.
    """

    def __init__(self, sdk: Any, config: Optional[Dict[str, Any]] = None):
        super().__init__(sdk, config)
        self._resolved: Dict[str, str] = {}

    def _facade(self, names: Sequence[str]) -> Any:
        return resolve_facade(self.sdk, names)

    def _optional_facade(self, names: Sequence[str]) -> Any:
        return optional_facade(self.sdk, names)

    def _locate(self, query: CapabilityQuery, targets: Sequence[Tuple[str, Any]]) -> Tuple[Callable, str]:
        candidates: List[str] = []
        for label, target in targets:
            if target is None:
                continue
            found = find_method(target, query)
            if found.found:
                name = found.hit
                self._resolved[query.describe()] = f"{label}.{name}"
                logger.debug(f"{query.describe()} -> {label}.{name}")
                return getattr(target, name), name
            candidates.extend(f"{label}.{n}" for n in found.names)
        raise CapabilityNotFound(
            f"Could not find a method matching {query.describe()}",
            target="/".join(label for label, _ in targets),
            candidates=sorted(candidates),
        )

    def _read_targets(self) -> List[Tuple[str, Any]]:
        return [("client", self.sdk), ("deep_book", self._optional_facade(DEEP_BOOK_NAMES))]

    # --- Market Data ---

    async def get_level2_range(self, pool_key: str, tick_size: float, levels: int, include_asks: bool) -> Level2Snapshot:
        fn, _ = self._locate(LEVEL2, self._read_targets())
        raw = await self._read(fn, pool_key, tick_size, levels, include_asks)
        return level2_snapshot(raw)

    async def mid_price(self, pool_key: str) -> Optional[float]:
        try:
            fn, _ = self._locate(MID_PRICE, self._read_targets())
        except CapabilityNotFound:
            return None
        return to_float(await self._read(fn, pool_key))

    # --- Account ---

    async def account_open_orders(self, pool_key: str, manager_key: str) -> List[OpenOrder]:
        fn, _ = self._locate(OPEN_ORDERS, self._read_targets())
        raw = await self._read(fn, pool_key, manager_key)
        return open_orders(raw)

    async def check_manager_balance(self, manager_key: str, coin: str) -> Any:
        targets = [("client", self.sdk), ("balance_manager", self._optional_facade(BALANCE_MANAGER_NAMES))]
        fn, _ = self._locate(MANAGER_BALANCE, targets)
        capacity = positional_capacity(fn)
        if capacity is not None and capacity < 2:
            return await self._read(fn, manager_key)
        return await self._read(fn, manager_key, coin)

    # --- Transaction building ---

    async def build_place_limit_order(self, txb: Any, params: LimitOrderParams) -> str:
        deep = self._facade(DEEP_BOOK_NAMES)
        fn, name = self._locate(PLACE_LIMIT, [("deep_book", deep)])
        report = await invoke_plan(applying(fn, txb), place_plan(txb, params), unit=name)
        logger.info(f"Built limit order via {name} ({report.used_label})")
        return report.used_label

    async def build_cancel_orders(self, txb: Any, pool_key: str, manager_key: str, manager_id: str,
                                  order_ids: List[str]) -> List[AttemptReport]:
        deep = self._facade(DEEP_BOOK_NAMES)
        fn, name = self._locate(CANCEL_ORDER, [("deep_book", deep)])
        reports = await run_units(applying(fn, txb), cancel_units(txb, pool_key, manager_id, order_ids))
        built = sum(1 for r in reports if r.succeeded)
        logger.info(f"Built {built}/{len(reports)} cancels via {name}")
        return reports

    async def build_deposit(self, txb: Any, manager_key: str, manager_id: str, coin: str, amount: float) -> HelperResult:
        bm = self._facade(BALANCE_MANAGER_NAMES)
        fn, name = self._locate(DEPOSIT, [("balance_manager", bm)])
        return await call_sdk_helper(fn, txb, manager_id, coin, amount)

    async def build_create_balance_manager(self, txb: Any) -> HelperResult:
        bm = self._facade(BALANCE_MANAGER_NAMES)
        fn, name = self._locate(CREATE_MANAGER, [("balance_manager", bm)])
        return await call_sdk_helper(fn, txb)

    async def build_register_balance_manager(self, txb: Any, owner: str, manager_key: str, manager_id: str) -> str:
        bm = self._facade(BALANCE_MANAGER_NAMES)
        fn, name = self._locate(REGISTER_MANAGER, [("balance_manager", bm)])
        report = await invoke_plan(applying(fn, txb), register_manager_plan(txb, owner, manager_key, manager_id), unit=name)
        return report.used_label

    async def build_register_pool(self, txb: Any, pool_key: str, manager_key: str, manager_id: str) -> str:
        fn, name = self._locate(REGISTER_POOL, [("client", self.sdk)])
        report = await invoke_plan(applying(fn, txb), register_pool_plan(txb, pool_key, manager_key, manager_id), unit=name)
        return report.used_label

    def describe(self) -> Dict[str, Any]:
        out = super().describe()
        out["resolved"] = dict(self._resolved)
        return out
