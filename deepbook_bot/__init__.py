from .base import AbstractDeepBook
from .bot import DeepBookBot
from .config import Settings, load_settings
from .errors import (
    CapabilityNotFound,
    ConfigurationError,
    DeepBookError,
    InvocationFailed,
    TradingDisabled,
    TransactionFailed,
)
from .factory import AdapterFactory, AdapterType

__version__ = "0.1.0"

__all__ = [
    "AbstractDeepBook",
    "AdapterFactory",
    "AdapterType",
    "CapabilityNotFound",
    "ConfigurationError",
    "DeepBookBot",
    "DeepBookError",
    "InvocationFailed",
    "Settings",
    "TradingDisabled",
    "TransactionFailed",
    "load_settings",
]
