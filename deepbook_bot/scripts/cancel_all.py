import logging
import sys
from typing import Any, Dict, List, Optional

from ..bot import DeepBookBot
from ..config import Settings
from ..errors import DeepBookError, NetworkError
from ..normalize import parse_order_ids
from ._runner import connect, run

logger = logging.getLogger("DeepBook.CancelAll")


async def collect_order_ids(bot: DeepBookBot, settings: Settings) -> List[str]:
    """ORDER_IDS when set, otherwise the manager's open orders read from the pool."""
    ids = parse_order_ids(settings.order_ids)
    if ids:
        logger.info(f"Using ORDER_IDS from .env: {len(ids)} ids")
        return ids
    try:
        orders = await bot.adapter.account_open_orders(settings.pool_key, settings.manager_key)
    except DeepBookError:
        logger.error("Could not read open orders. Set ORDER_IDS=1,2,3 in .env to cancel explicitly.")
        raise
    except Exception as e:
        logger.error("Could not read open orders. Set ORDER_IDS=1,2,3 in .env to cancel explicitly.")
        raise NetworkError(f"Failed to read open orders: {e}")
    return [o.order_id for o in orders if o.order_id]


async def main(settings: Settings, bot: Optional[DeepBookBot] = None) -> Dict[str, Any]:
    manager_id = settings.require_manager_id()
    async with connect(settings, bot) as bot:
        order_ids = await collect_order_ids(bot, settings)
        if not order_ids:
            logger.info("No open orders to cancel.")
            return {"digest": None, "requested": 0, "built": 0, "failed": []}

        txb = bot.new_transaction()
        reports = await bot.adapter.build_cancel_orders(
            txb, settings.pool_key, settings.manager_key, manager_id, order_ids
        )
        failed = [r.unit for r in reports if not r.succeeded]
        built = len(reports) - len(failed)
        logger.info(f"Cancel commands built: {built}/{len(order_ids)}")

        res = await bot.execute(txb, "cancel tx")
        return {
            "digest": res.digest,
            "status": res.status,
            "requested": len(order_ids),
            "built": built,
            "failed": failed,
            "reports": [r.to_dict() for r in reports],
        }


if __name__ == "__main__":
    sys.exit(run(main))
