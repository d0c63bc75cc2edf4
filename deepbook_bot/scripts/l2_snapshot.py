import logging
import sys
from typing import Any, Dict, Optional

from ..bot import DeepBookBot
from ..config import Settings
from ._runner import connect, run

logger = logging.getLogger("DeepBook.L2")


async def main(settings: Settings, bot: Optional[DeepBookBot] = None) -> Dict[str, Any]:
    async with connect(settings, bot) as bot:
        snap = await bot.adapter.get_level2_range(
            settings.pool_key,
            settings.l2_tick_size,
            settings.l2_levels,
            settings.l2_include_asks,
        )
        logger.info(f"{settings.pool_key}: {len(snap.prices)} levels, best={snap.best_price}")
        return {
            "address": bot.address,
            "network": settings.network,
            "pool": settings.pool_key,
            **snap.to_dict(),
        }


if __name__ == "__main__":
    sys.exit(run(main))
