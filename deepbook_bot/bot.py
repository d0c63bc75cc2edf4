import logging
from typing import Any, Optional

from .base import AbstractDeepBook
from .client import SuiSigner
from .config import Settings
from .errors import TransactionFailed
from .factory import AdapterFactory, AdapterType
from .models import ExecutionResult
from .sdk import create_sdk_client, load_sdk_factory

logger = logging.getLogger("DeepBook.Bot")


class DeepBookBot:
    """
    Wires the signing client, the DeepBook SDK and the adapter chosen by
    DEEPBOOK_ADAPTER. Balance manager labels are handed to the SDK here and
    nowhere else.
    """

    def __init__(self, settings: Settings, signer: Optional[SuiSigner] = None,
                 sdk: Any = None, adapter: Optional[AbstractDeepBook] = None):
        self.settings = settings
        self.signer = signer or SuiSigner(
            settings.sui_private_key,
            settings.rpc_url,
            gas_budget=settings.gas_budget,
            timeout_s=settings.call_timeout_s,
        )
        self.sdk = sdk
        self.adapter = adapter
        self.is_initialized = False

    async def initialize(self, with_sdk: bool = True):
        if getattr(self.signer, "client", None) is None:
            await self.signer.initialize()
        if with_sdk and self.sdk is None:
            factory = load_sdk_factory(self.settings.deepbook_sdk)
            self.sdk = create_sdk_client(
                factory,
                address=self.address,
                env=self.settings.network,
                client=self.signer.client,
                balance_managers=self.settings.manager_mapping(),
            )
        if with_sdk and self.adapter is None:
            self.adapter = AdapterFactory.create_adapter(
                AdapterType(self.settings.deepbook_adapter),
                self.sdk,
                {"network": self.settings.network, "call_timeout_s": self.settings.call_timeout_s},
            )
        self.is_initialized = True
        described = self.adapter.describe() if self.adapter else {}
        logger.info(f"Connected: address={self.address} network={self.settings.network} {described}")

    @property
    def address(self) -> str:
        return self.signer.address

    def new_transaction(self) -> Any:
        return self.signer.new_transaction()

    async def execute(self, txb: Any, what: str = "tx") -> ExecutionResult:
        """Submit txb. Raises TransactionFailed when the effects status is not success."""
        logger.warning(f"Executing {what}...")
        res = await self.signer.sign_and_execute(txb)
        logger.info(f"{what} executed: digest={res.digest} status={res.status}")
        ensure_success(res)
        return res

    async def close(self):
        await self.signer.close()
        self.is_initialized = False

    async def __aenter__(self):
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()


def ensure_success(res: ExecutionResult) -> ExecutionResult:
    if not res.succeeded:
        logger.error(f"Transaction did not succeed: digest={res.digest} status={res.status} error={res.error}")
        raise TransactionFailed(res.digest, res.status, res.error)
    return res
