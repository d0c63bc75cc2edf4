import logging
import sys
from typing import Any, Dict, Optional

from ..bot import DeepBookBot
from ..config import Settings
from ._runner import connect, run

logger = logging.getLogger("DeepBook.RegisterManager")


async def main(settings: Settings, bot: Optional[DeepBookBot] = None) -> Dict[str, Any]:
    manager_id = settings.require_manager_id()
    async with connect(settings, bot) as bot:
        txb = bot.new_transaction()
        label = await bot.adapter.build_register_balance_manager(txb, bot.address, settings.manager_key, manager_id)
        res = await bot.execute(txb, "register BalanceManager tx")
        return {"digest": res.digest, "status": res.status, "signature": label, "manager_id": manager_id}


if __name__ == "__main__":
    sys.exit(run(main))
