import asyncio
import json
import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, Awaitable, Callable, Dict, Optional

from ..bot import DeepBookBot
from ..config import Settings, load_settings
from ..errors import ConfigurationError, DeepBookError

logger = logging.getLogger("DeepBook.Script")

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CONFIG = 2


def setup_logging(level: str = "INFO"):
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format=LOG_FORMAT,
        force=True,
        stream=sys.stdout,
    )


@asynccontextmanager
async def connect(settings: Settings, bot: Optional[DeepBookBot] = None, with_sdk: bool = True):
    """Initialized bot for the duration of one script run; always closed afterwards."""
    bot = bot or DeepBookBot(settings)
    try:
        await bot.initialize(with_sdk=with_sdk)
        yield bot
    finally:
        await bot.close()


def _diagnostic(err: Exception) -> Dict[str, Any]:
    info: Dict[str, Any] = {"error": type(err).__name__, "message": str(err)}
    if hasattr(err, "to_dict"):
        info.update(err.to_dict())
    return info


def run(main: Callable[..., Awaitable[Dict[str, Any]]], *args, env_file: Optional[str] = ".env") -> int:
    """
    Load settings, run one script coroutine and print its outcome as JSON.
    Returns the process exit code: 0 success, 1 failure, 2 configuration error.
    """
    setup_logging()
    try:
        settings = load_settings(env_file)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return EXIT_CONFIG
    setup_logging(settings.log_level)

    try:
        outcome = asyncio.run(main(settings, *args))
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return EXIT_CONFIG
    except DeepBookError as e:
        logger.error(f"{type(e).__name__}: {e}")
        print(json.dumps(_diagnostic(e), indent=2, default=str))
        return EXIT_FAILED
    except KeyboardInterrupt:
        logger.warning("Interrupted")
        return EXIT_FAILED
    except Exception as e:
        logger.exception(f"Unexpected {type(e).__name__}: {e}")
        print(json.dumps(_diagnostic(e), indent=2, default=str))
        return EXIT_FAILED

    print(json.dumps(outcome, indent=2, default=str))
    return EXIT_OK
