import asyncio
import inspect
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict, List, Optional

from .errors import NetworkError
from .models import AttemptReport, HelperResult, Level2Snapshot, LimitOrderParams, OpenOrder

DEEP_BOOK_NAMES = ("deep_book", "deepBook", "deepbook")
BALANCE_MANAGER_NAMES = ("balance_manager", "balanceManager")
DEFAULT_TIMEOUT_S = 30.0

class AbstractDeepBook(ABC):
    """
    Adapter over one shape of the DeepBook SDK.
    Read calls return normalized models; build_* calls add commands to a
    transaction (txb) without submitting it.
    """
    def __init__(self, sdk: Any, config: Optional[Dict[str, Any]] = None):
        self.sdk = sdk
        self.config = config or {}
        self.timeout_s = float(self.config.get("call_timeout_s", DEFAULT_TIMEOUT_S))

    async def _deadline(self, what: str, awaitable: Awaitable) -> Any:
        """Await an SDK read under the configured deadline."""
        try:
            return await asyncio.wait_for(awaitable, timeout=self.timeout_s)
        except asyncio.TimeoutError:
            raise NetworkError(f"{what} timed out after {self.timeout_s}s")

    async def _read(self, fn: Callable, *args) -> Any:
        """Call an SDK read; sync callables run in a worker thread. Both are bounded by timeout_s."""
        what = getattr(fn, "__name__", "SDK read")
        if inspect.iscoroutinefunction(fn):
            return await self._deadline(what, fn(*args))
        res = await self._deadline(what, asyncio.to_thread(fn, *args))
        if inspect.isawaitable(res):
            res = await self._deadline(what, res)
        return res

    # --- Market Data ---

    @abstractmethod
    async def get_level2_range(self, pool_key: str, tick_size: float, levels: int, include_asks: bool) -> Level2Snapshot:
        """Aggregated price levels for one side of a pool."""
        pass

    async def mid_price(self, pool_key: str) -> Optional[float]:
        """Mid price, or None if the SDK cannot provide it. Optional."""
        return None

    # --- Account ---

    @abstractmethod
    async def account_open_orders(self, pool_key: str, manager_key: str) -> List[OpenOrder]:
        """Open orders of a balance manager in a pool."""
        pass

    async def check_manager_balance(self, manager_key: str, coin: str) -> Any:
        """Manager balance for a coin. Optional."""
        raise NotImplementedError("check_manager_balance not implemented")

    # --- Transaction building ---

    @abstractmethod
    async def build_place_limit_order(self, txb: Any, params: LimitOrderParams) -> str:
        """Add a limit order to txb. Returns the signature/method label used."""
        pass

    @abstractmethod
    async def build_cancel_orders(self, txb: Any, pool_key: str, manager_key: str, manager_id: str,
                                  order_ids: List[str]) -> List[AttemptReport]:
        """
        Add one cancel per order id. Partial success is success;
        raises InvocationFailed when no cancel could be added.
        """
        pass

    @abstractmethod
    async def build_deposit(self, txb: Any, manager_key: str, manager_id: str, coin: str, amount: float) -> HelperResult:
        """Deposit `amount` of `coin` into the manager. built=False if the SDK executed it itself."""
        pass

    @abstractmethod
    async def build_create_balance_manager(self, txb: Any) -> HelperResult:
        pass

    @abstractmethod
    async def build_register_balance_manager(self, txb: Any, owner: str, manager_key: str, manager_id: str) -> str:
        pass

    @abstractmethod
    async def build_register_pool(self, txb: Any, pool_key: str, manager_key: str, manager_id: str) -> str:
        pass

    # --- Utils ---

    def describe(self) -> Dict[str, Any]:
        """Adapter name and the SDK type it wraps, for logs."""
        return {"adapter": type(self).__name__, "sdk": type(self.sdk).__name__}
