import logging
import sys
from typing import Any, Dict, Optional

from ..bot import DeepBookBot
from ..config import Settings
from ..normalize import first_field, get_field
from ._runner import connect, run

logger = logging.getLogger("DeepBook.InspectManager")


async def main(settings: Settings, bot: Optional[DeepBookBot] = None) -> Dict[str, Any]:
    manager_id = settings.require_manager_id()
    async with connect(settings, bot, with_sdk=False) as bot:
        obj = await bot.signer.get_object(manager_id)
        data = get_field(obj, "data") or obj
        object_type = first_field(data, ("type", "object_type", "objectType"))
        owner = first_field(data, ("owner",))
        logger.info(f"{settings.manager_key} {manager_id}: type={object_type}")
        return {
            "manager_key": settings.manager_key,
            "manager_id": manager_id,
            "type": object_type,
            "owner": owner,
        }


if __name__ == "__main__":
    sys.exit(run(main))
