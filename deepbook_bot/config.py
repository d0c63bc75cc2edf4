"""
Environment-driven settings for every script.

Values come from the process environment and a local `.env` file. Validation
runs before any client is constructed so a bad value never reaches the node.
"""
import logging
from typing import Dict, Literal, Optional

from dotenv import load_dotenv
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigurationError
from .models import Network

logger = logging.getLogger("DeepBook.Config")

DEFAULT_MANAGER_KEY = "BM1"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        extra="ignore",
        case_sensitive=False,
        str_strip_whitespace=True,
    )

    sui_env: Network = Field(default=Network.TESTNET)
    sui_private_key: str = Field(min_length=1)
    sui_rpc_url: Optional[str] = None

    pool_key: str = Field(default="SUI_DBUSDC", min_length=1)

    l2_tick_size: float = Field(default=0.1, gt=0)
    l2_levels: int = Field(default=50, gt=0, le=200)
    l2_include_asks: bool = True

    allow_trading: bool = False
    max_order_usd: float = Field(default=2.0, gt=0)
    order_size_base: float = Field(default=0.1, gt=0)

    base_coin: str = "SUI"
    quote_coin: str = "DBUSDC"

    balance_manager_id: Optional[str] = None
    balance_manager_key: Optional[str] = None
    balance_managers: Optional[str] = None

    order_ids: Optional[str] = None
    bad_bid_mult: float = Field(default=0.5, gt=0, lt=1)
    client_order_id: Optional[str] = None
    deposit_base: float = Field(default=0.1, ge=0)
    deposit_quote: float = Field(default=0.0, ge=0)

    resolve_pool_address: bool = False

    deepbook_sdk: Optional[str] = None
    deepbook_adapter: Literal["reflective", "builder"] = "reflective"
    gas_budget: int = Field(default=50_000_000, gt=0)
    call_timeout_s: float = Field(default=30.0, gt=0)
    log_level: str = "INFO"

    @field_validator("sui_private_key", mode="before")
    @classmethod
    def _require_key(cls, v):
        if v is None or not str(v).strip():
            raise ValueError("Missing SUI_PRIVATE_KEY")
        return v

    @field_validator("balance_manager_id", "balance_manager_key", "order_ids",
                     "client_order_id", "deepbook_sdk", "sui_rpc_url", mode="after")
    @classmethod
    def _blank_is_none(cls, v):
        return v or None

    @field_validator("balance_managers", mode="after")
    @classmethod
    def _check_mapping(cls, v):
        if v:
            parse_manager_mapping(v)
        return v or None

    @property
    def network(self) -> str:
        return self.sui_env.value

    @property
    def rpc_url(self) -> str:
        return self.sui_rpc_url or self.sui_env.fullnode_url

    @property
    def manager_key(self) -> str:
        return self.balance_manager_key or DEFAULT_MANAGER_KEY

    def manager_mapping(self) -> Dict[str, str]:
        """Label -> object id map handed to the SDK at construction time."""
        mapping = parse_manager_mapping(self.balance_managers) if self.balance_managers else {}
        if self.balance_manager_id:
            mapping[self.manager_key] = self.balance_manager_id
        return mapping

    def require_manager_id(self) -> str:
        if not self.balance_manager_id:
            raise ConfigurationError(
                "Missing BALANCE_MANAGER_ID (0x...) in .env", field="BALANCE_MANAGER_ID"
            )
        return self.balance_manager_id

    def safe_dict(self) -> Dict[str, object]:
        data = self.model_dump(mode="json")
        data["sui_private_key"] = "***"
        return data


def parse_manager_mapping(raw: str) -> Dict[str, str]:
    mapping: Dict[str, str] = {}
    for entry in raw.split(","):
        entry = entry.strip()
        if not entry:
            continue
        if "=" not in entry:
            raise ValueError(f"expected label=0x... pairs, got {entry!r}")
        label, object_id = (p.strip() for p in entry.split("=", 1))
        if not label or not object_id:
            raise ValueError(f"expected label=0x... pairs, got {entry!r}")
        mapping[label] = object_id
    return mapping


def _format_error(err: dict) -> ConfigurationError:
    field = ".".join(str(p) for p in err.get("loc", ())).upper() or "SETTINGS"
    msg = err.get("msg", "invalid value")
    if err.get("type") == "missing":
        msg = f"Missing {field}"
    return ConfigurationError(f"{field}: {msg}", field=field)


def load_settings(env_file: Optional[str] = ".env", **overrides) -> Settings:
    """Load and validate settings. Raises ConfigurationError naming the first bad field."""
    if env_file:
        load_dotenv(env_file)
    try:
        return Settings(**overrides)
    except ValidationError as e:
        errors = e.errors()
        for err in errors[1:]:
            logger.error(str(_format_error(err)))
        raise _format_error(errors[0]) from None
