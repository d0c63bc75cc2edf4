import logging
import sys
from typing import Any, Dict, Optional

from ..bot import DeepBookBot
from ..config import Settings
from ..normalize import first_field, get_field
from ._runner import connect, run

logger = logging.getLogger("DeepBook.InspectTx")


async def main(settings: Settings, digest: str, bot: Optional[DeepBookBot] = None) -> Dict[str, Any]:
    async with connect(settings, bot, with_sdk=False) as bot:
        tx = await bot.signer.get_transaction(digest)
        events = get_field(tx, "events") or []
        changes = first_field(tx, ("objectChanges", "object_changes")) or []
        logger.info(f"{digest}: {len(events)} events, {len(changes)} object changes")
        return {"digest": digest, "events": events, "objectChanges": changes}


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage: python -m deepbook_bot.scripts.inspect_tx <DIGEST>")
        sys.exit(2)
    sys.exit(run(main, sys.argv[1]))
