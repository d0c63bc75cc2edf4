"""
Place one resting limit bid far below the market.

The reference price is the pool mid price, or the best bid of the level-2
book when the SDK has no mid-price call. The order is priced at
reference * BAD_BID_MULT and sized from MAX_ORDER_USD.
"""
import logging
import sys
from typing import Any, Dict, Optional

from ..bot import DeepBookBot
from ..config import Settings
from ..errors import MarketDataUnavailable
from ..models import LimitOrderParams
from ..pools import resolve_pool_ref
from ..trading import assert_trading_allowed, bad_bid_quote, clamp_order_usd, client_order_id, log_safety
from ._runner import connect, run

logger = logging.getLogger("DeepBook.PlaceOrder")

FALLBACK_TICK = 0.1
FALLBACK_LEVELS = 10


async def reference_price(bot: DeepBookBot, pool_ref: str) -> float:
    try:
        mid = await bot.adapter.mid_price(pool_ref)
    except Exception as e:
        logger.warning(f"mid price unavailable: {e}")
        mid = None
    if mid:
        logger.info(f"Mid price: {mid}")
        return mid

    # SDKs read the last flag as the bid side
    snap = await bot.adapter.get_level2_range(pool_ref, FALLBACK_TICK, FALLBACK_LEVELS, True)
    best = snap.best_price
    if not best or best <= 0:
        raise MarketDataUnavailable(f"Could not read L2 best bid for {pool_ref}")
    logger.info(f"L2 best bid: {best}")
    return best


def pool_reference(settings: Settings) -> str:
    if settings.resolve_pool_address:
        return resolve_pool_ref(settings.pool_key, settings.network)
    return settings.pool_key


async def main(settings: Settings, bot: Optional[DeepBookBot] = None) -> Dict[str, Any]:
    assert_trading_allowed(settings)
    log_safety(settings)
    manager_id = settings.require_manager_id()
    pool_ref = pool_reference(settings)

    async with connect(settings, bot) as bot:
        ref = await reference_price(bot, pool_ref)
        usd = clamp_order_usd(settings.order_size_base * ref, settings.max_order_usd)
        price, quantity = bad_bid_quote(ref, settings.bad_bid_mult, usd)
        params = LimitOrderParams(
            pool_key=pool_ref,
            manager_key=settings.manager_key,
            manager_id=manager_id,
            price=price,
            quantity=quantity,
            is_bid=True,
            client_order_id=settings.client_order_id or client_order_id(),
        )
        logger.warning(f"Placing {params.side}: price={price:.6f} qty={quantity:.6f} (~{usd:.2f} USD) pool={pool_ref}")

        txb = bot.new_transaction()
        label = await bot.adapter.build_place_limit_order(txb, params)
        res = await bot.execute(txb, "limit order tx")

        outcome: Dict[str, Any] = {
            "digest": res.digest,
            "status": res.status,
            "signature": label,
            "price": price,
            "quantity": quantity,
            "client_order_id": params.client_order_id,
        }
        try:
            orders = await bot.adapter.account_open_orders(pool_ref, settings.manager_key)
            outcome["open_orders"] = [o.order_id for o in orders]
        except Exception as e:
            logger.warning(f"Could not read open orders after placing: {e}")
            outcome["open_orders"] = None
        return outcome


if __name__ == "__main__":
    sys.exit(run(main))
