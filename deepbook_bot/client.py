import asyncio
import inspect
import logging
from typing import Any, Dict, List, Optional

from .errors import NetworkError, ObjectNotFound, SdkUnavailable
from .models import ExecutionResult
from .normalize import parse_execution, to_plain

try:
    from pysui import AsyncClient, ObjectID, SuiAddress, SuiConfig
    from pysui.sui.sui_builders.get_builders import GetTx
    from pysui.sui.sui_txn.async_transaction import SuiTransactionAsync as SuiTransaction
except ImportError:
    AsyncClient = None
    ObjectID = None
    SuiAddress = None
    SuiConfig = None
    GetTx = None
    SuiTransaction = None

logger = logging.getLogger("DeepBook.Client")

TX_QUERY_OPTIONS = {
    "showInput": True,
    "showEffects": True,
    "showEvents": True,
    "showObjectChanges": True,
}


class SuiSigner:
    """
    Signing client over pysui: address, build/submit transactions, read objects.
    Every network await is bounded by `timeout_s`.
    """

    def __init__(self, private_key: str, rpc_url: str, gas_budget: int = 50_000_000, timeout_s: float = 30.0):
        self.private_key = private_key
        self.rpc_url = rpc_url
        self.gas_budget = gas_budget
        self.timeout_s = timeout_s
        self.client = None
        self._address: Optional[str] = None

    async def initialize(self):
        if not AsyncClient or not SuiConfig:
            raise SdkUnavailable("pysui not installed.")
        try:
            cfg = SuiConfig.user_config(rpc_url=self.rpc_url, prv_keys=[self.private_key])
            self.client = AsyncClient(cfg)
            self._address = str(self.client.config.active_address)
        except Exception as e:
            raise SdkUnavailable(f"Sui client init failed: {e}")
        logger.info(f"Sui client ready: {self._address} @ {self.rpc_url}")

    @property
    def address(self) -> str:
        if not self._address:
            raise NetworkError("Sui client not initialized.")
        return self._address

    async def _call(self, what: str, coro):
        try:
            result = await asyncio.wait_for(coro, timeout=self.timeout_s)
        except asyncio.TimeoutError:
            raise NetworkError(f"{what} timed out after {self.timeout_s}s")
        except NetworkError:
            raise
        except Exception as e:
            raise NetworkError(f"{what} failed: {e}")
        if hasattr(result, "is_ok"):
            if not result.is_ok():
                raise NetworkError(f"{what} failed: {getattr(result, 'result_string', result)}")
            return result.result_data
        return result

    def new_transaction(self) -> Any:
        if not self.client or not SuiTransaction:
            raise NetworkError("Sui client not initialized.")
        return SuiTransaction(client=self.client)

    async def sign_and_execute(self, txb: Any) -> ExecutionResult:
        raw = await self._call("execute transaction", txb.execute(gas_budget=str(self.gas_budget)))
        return parse_execution(raw)

    async def get_object(self, object_id: str) -> Dict[str, Any]:
        try:
            data = await self._call(f"get_object {object_id}", self.client.get_object(ObjectID(object_id)))
        except NetworkError as e:
            raise ObjectNotFound(str(e))
        plain = to_plain(data)
        if isinstance(plain, dict) and plain.get("error"):
            raise ObjectNotFound(f"{object_id}: {plain['error']}")
        return plain

    async def get_transaction(self, digest: str) -> Dict[str, Any]:
        data = await self._call(f"get_tx {digest}", self.client.execute(GetTx(digest=digest, options=TX_QUERY_OPTIONS)))
        return to_plain(data)

    async def get_coins(self, owner: Optional[str] = None) -> List[Any]:
        data = await self._call("get_gas", self.client.get_gas(SuiAddress(owner or self.address)))
        coins = getattr(data, "data", data)
        return list(coins or [])

    async def close(self):
        if self.client and hasattr(self.client, "close"):
            try:
                res = self.client.close()
                if inspect.isawaitable(res):
                    await res
            except Exception as e:
                logger.warning(f"Sui client close failed: {e}")
        self.client = None
