import logging
import re
import sys
from typing import Any, Dict, Optional

from ..bot import DeepBookBot
from ..config import Settings
from ..discovery import list_methods, optional_facade, public_attributes
from ._runner import connect, run

logger = logging.getLogger("DeepBook.InspectSdk")

FACADES = {
    "deep_book": ("deep_book", "deepBook"),
    "balance_manager": ("balance_manager", "balanceManager"),
    "pool_proxy": ("pool_proxy", "poolProxy"),
    "deep_book_admin": ("deep_book_admin", "deepBookAdmin"),
}

TRADING_NAMES = re.compile(r"order|cancel|place|bid|ask|limit|market", re.IGNORECASE)


def describe_sdk(sdk: Any) -> Dict[str, Any]:
    report: Dict[str, Any] = {
        "client_type": type(sdk).__name__,
        "attributes": public_attributes(sdk),
        "client_methods": list_methods(sdk),
        "facades": {},
    }
    for label, names in FACADES.items():
        target = optional_facade(sdk, names)
        if target is None:
            report["facades"][label] = None
            continue
        report["facades"][label] = list_methods(target)
    report["trading_methods"] = [m for m in report["client_methods"] if TRADING_NAMES.search(m)]
    return report


async def main(settings: Settings, bot: Optional[DeepBookBot] = None) -> Dict[str, Any]:
    async with connect(settings, bot) as bot:
        report = describe_sdk(bot.sdk)
        for label, methods in report["facades"].items():
            logger.info(f"{label}: {'missing' if methods is None else len(methods)} methods")
        return report


if __name__ == "__main__":
    sys.exit(run(main))
