from enum import Enum
from typing import Dict, Any

from .adapters.builder import BuilderDeepBook
from .adapters.reflective import ReflectiveDeepBook
from .base import AbstractDeepBook as AdapterBase

class AdapterType(Enum):
    REFLECTIVE = "reflective"
    BUILDER = "builder"

class AdapterFactory:
    @staticmethod
    def create_adapter(adapter_type: AdapterType, sdk: Any, config: Dict[str, Any] = None) -> AdapterBase:
        """
        Factory method to create SDK adapters.

        Args:
            adapter_type (AdapterType): REFLECTIVE (discovered names/signatures) or BUILDER (fixed v3 shape)
            sdk: Constructed DeepBook SDK client
            config (Dict): Extra adapter settings

        Returns:
            AdapterBase: Adapter instance
        """
        if config is None:
            config = {}

        if isinstance(adapter_type, str):
            adapter_type = AdapterType(adapter_type)

        if adapter_type == AdapterType.REFLECTIVE:
            return ReflectiveDeepBook(sdk, config)
        elif adapter_type == AdapterType.BUILDER:
            return BuilderDeepBook(sdk, config)
        else:
            raise ValueError(f"Unknown adapter type: {adapter_type}")
