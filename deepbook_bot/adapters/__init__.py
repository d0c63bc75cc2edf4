from .builder import BuilderDeepBook
from .reflective import ReflectiveDeepBook

__all__ = ["BuilderDeepBook", "ReflectiveDeepBook"]
