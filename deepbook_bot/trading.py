import logging
import time
from typing import Tuple

from .config import Settings
from .errors import ConfigurationError, TradingDisabled

logger = logging.getLogger("DeepBook.Trading")

MIN_BASE_QTY = 0.01


def assert_trading_allowed(settings: Settings):
    if not settings.allow_trading:
        raise TradingDisabled("Trading disabled. Set ALLOW_TRADING=true in .env to enable (careful).")
    if not settings.max_order_usd > 0:
        raise ConfigurationError("MAX_ORDER_USD must be > 0", field="MAX_ORDER_USD")


def clamp_order_usd(requested_usd: float, max_usd: float) -> float:
    usd = min(requested_usd, max_usd)
    if usd <= 0:
        raise ConfigurationError("Order USD must be > 0", field="MAX_ORDER_USD")
    return usd


def log_safety(settings: Settings):
    logger.warning(f"Safety config: ALLOW_TRADING={settings.allow_trading} "
                   f"MAX_ORDER_USD={settings.max_order_usd} ORDER_SIZE_BASE={settings.order_size_base}")


def bad_bid_quote(reference_price: float, mult: float, max_usd: float) -> Tuple[float, float]:
    """
    Price far enough below the reference that the bid rests on the book.
    Quantity is sized from max_usd, never below MIN_BASE_QTY.
    """
    if not 0 < mult < 1:
        raise ConfigurationError("BAD_BID_MULT must be between 0 and 1 (e.g. 0.5 or 0.2).", field="BAD_BID_MULT")
    if not reference_price or reference_price <= 0:
        raise ValueError(f"Invalid reference price: {reference_price}")
    price = reference_price * mult
    quantity = max(MIN_BASE_QTY, max_usd / price)
    return price, quantity


def client_order_id() -> str:
    return str(int(time.time() * 1000))
