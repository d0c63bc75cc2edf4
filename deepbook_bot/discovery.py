"""
Capability discovery over SDK objects whose interface is not known statically.

The DeepBook SDK renames and reshapes its builders between releases, so the
scripts look methods up by name pattern instead of hard-coding them.
"""
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Sequence, Tuple, Union

from .errors import CapabilityNotFound

logger = logging.getLogger("DeepBook.Discovery")

Predicate = Union[str, "re.Pattern", Callable[[str], bool]]


def _is_excluded(name: str) -> bool:
    # dunders belong to the call machinery, not the SDK surface
    return name.startswith("__") and name.endswith("__")


def _compile(p: Predicate) -> Callable[[str], bool]:
    if isinstance(p, str):
        rx = re.compile(p, re.IGNORECASE)
        return lambda name: rx.search(name) is not None
    if isinstance(p, re.Pattern):
        return lambda name: p.search(name) is not None
    if callable(p):
        return lambda name: bool(p(name))
    raise TypeError(f"Unsupported predicate: {p!r}")


@dataclass
class CapabilityQuery:
    """Ordered predicates that must all hold for a member name."""
    patterns: Sequence[Predicate]
    _tests: List[Callable[[str], bool]] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        self._tests = [_compile(p) for p in self.patterns]

    def matches(self, name: str) -> bool:
        return all(t(name) for t in self._tests)

    def describe(self) -> str:
        parts = []
        for p in self.patterns:
            if isinstance(p, re.Pattern):
                parts.append(f"/{p.pattern}/")
            elif isinstance(p, str):
                parts.append(f"/{p}/i")
            else:
                parts.append(getattr(p, "__name__", repr(p)))
        return " & ".join(parts)


@dataclass
class Discovery:
    hit: Optional[str]
    names: List[str]

    @property
    def found(self) -> bool:
        return self.hit is not None


def _member_names(target: Any) -> List[str]:
    names = []
    for source in (target, type(target)):
        try:
            names.extend(vars(source).keys())
        except TypeError:
            # __slots__ objects and builtins have no __dict__
            continue
    return names


def _safe_is_callable(target: Any, name: str) -> bool:
    if _is_excluded(name):
        return False
    try:
        return callable(getattr(target, name))
    except Exception:
        return False


def list_methods(target: Any) -> List[str]:
    """Sorted callable member names of target (own + class level)."""
    if target is None:
        return []
    found = {n for n in _member_names(target) if _safe_is_callable(target, n)}
    return sorted(found)


def find_method(target: Any, query: Union[CapabilityQuery, Sequence[Predicate]]) -> Discovery:
    if not isinstance(query, CapabilityQuery):
        query = CapabilityQuery(query)
    names = list_methods(target)
    hit = next((n for n in names if query.matches(n)), None)
    return Discovery(hit=hit, names=names)


def require_method(
    target: Any,
    query: Union[CapabilityQuery, Sequence[Predicate]],
    label: str = "target",
) -> Tuple[Callable, str]:
    """Resolve a bound callable or raise CapabilityNotFound with the candidate list."""
    if not isinstance(query, CapabilityQuery):
        query = CapabilityQuery(query)
    found = find_method(target, query)
    if not found.found:
        raise CapabilityNotFound(
            f"Could not find a {label} method matching {query.describe()}",
            target=label,
            candidates=found.names,
        )
    logger.debug(f"{label}: {query.describe()} -> {found.hit}")
    return getattr(target, found.hit), found.hit


def public_attributes(target: Any) -> List[str]:
    if target is None:
        return []
    return sorted({n for n in _member_names(target) if not n.startswith("_")})


def resolve_facade(root: Any, names: Sequence[str]) -> Any:
    """First present sub-object among alternative spellings (e.g. deep_book / deepBook)."""
    for name in names:
        try:
            value = getattr(root, name, None)
        except Exception:
            value = None
        if value is not None:
            return value
    raise CapabilityNotFound(
        f"SDK client has none of {', '.join(names)}",
        target="client",
        candidates=public_attributes(root),
    )


def optional_facade(root: Any, names: Sequence[str]) -> Any:
    """resolve_facade, returning None instead of raising."""
    try:
        return resolve_facade(root, names)
    except CapabilityNotFound:
        return None
