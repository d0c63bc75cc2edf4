import importlib
import inspect
import logging
from typing import Any, Callable

from .errors import SdkUnavailable

logger = logging.getLogger("DeepBook.Sdk")


def load_sdk_factory(path: str) -> Callable:
    """Import `package.module:attr` (or `package.module.attr`) and return the attribute."""
    if not path:
        raise SdkUnavailable("DEEPBOOK_SDK is not set (expected module:factory).")
    if ":" in path:
        module_name, attr = path.split(":", 1)
    else:
        module_name, _, attr = path.rpartition(".")
    if not module_name or not attr:
        raise SdkUnavailable(f"Invalid DEEPBOOK_SDK path: {path!r}")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise SdkUnavailable(f"DeepBook SDK not installed ({module_name}): {e}")
    factory = getattr(module, attr, None)
    if factory is None:
        raise SdkUnavailable(f"{module_name} has no attribute {attr!r}")
    return factory


def create_sdk_client(factory: Callable, **candidates: Any) -> Any:
    """
    Construct the SDK client, passing only the keyword arguments its
    signature accepts (SDK releases disagree on the constructor).
    """
    try:
        sig = inspect.signature(factory)
    except (TypeError, ValueError):
        sig = None

    if sig is None or any(p.kind == p.VAR_KEYWORD for p in sig.parameters.values()):
        kwargs = candidates
    else:
        kwargs = {k: v for k, v in candidates.items() if k in sig.parameters}

    dropped = sorted(set(candidates) - set(kwargs))
    if dropped:
        logger.debug(f"SDK factory does not accept: {dropped}")
    try:
        return factory(**kwargs)
    except Exception as e:
        raise SdkUnavailable(f"DeepBook SDK construction failed: {e}")
