import logging
import sys
from typing import Any, Dict, Optional

from ..bot import DeepBookBot, ensure_success
from ..config import Settings
from ..normalize import extract_created_object_id, parse_execution, summarize_object_changes
from ._runner import connect, run

logger = logging.getLogger("DeepBook.CreateManager")


async def main(settings: Settings, bot: Optional[DeepBookBot] = None) -> Dict[str, Any]:
    async with connect(settings, bot) as bot:
        txb = bot.new_transaction()
        helper = await bot.adapter.build_create_balance_manager(txb)
        if helper.built:
            res = await bot.execute(txb, "BalanceManager creation")
        else:
            logger.info("SDK executed the BalanceManager creation itself")
            res = ensure_success(parse_execution(helper.exec_result))

        manager_id = extract_created_object_id(res.object_changes)
        outcome: Dict[str, Any] = {"digest": res.digest, "status": res.status, "balance_manager_id": manager_id}
        if manager_id:
            logger.info(f"BalanceManager created. Put this in .env: BALANCE_MANAGER_ID={manager_id}")
        else:
            changes = summarize_object_changes(res.object_changes)
            logger.warning("Could not find BalanceManager id in objectChanges.")
            for c in changes:
                logger.warning(f"  {c.change_type} {c.object_type} {c.object_id}")
            outcome["object_changes"] = [c.to_dict() for c in changes]
        return outcome


if __name__ == "__main__":
    sys.exit(run(main))
