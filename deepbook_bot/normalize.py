"""
Defensive extraction of values from SDK and node responses.

Responses arrive as dicts, SDK result objects or plain lists depending on the
SDK release; nothing here raises on an unexpected shape.
"""
from dataclasses import asdict, is_dataclass
from enum import Enum
from typing import Any, Iterable, List, Optional, Sequence

from .models import ExecutionResult, Level2Snapshot, ObjectChange, OpenOrder

OPEN_ORDER_FIELDS = ("open", "orders", "data")
ORDER_ID_FIELDS = ("orderId", "id", "order_id", "orderID", "order", "order_id_str")
BALANCE_MANAGER_MARKERS = ("balance", "manager")


def to_plain(obj: Any) -> Any:
    if isinstance(obj, Enum):
        return obj.value
    if is_dataclass(obj) and not isinstance(obj, type):
        return to_plain(asdict(obj))
    if hasattr(obj, "to_dict"):
        try:
            return to_plain(obj.to_dict())
        except Exception:
            pass
    if isinstance(obj, dict):
        return {k: to_plain(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_plain(v) for v in obj]
    if hasattr(obj, "__dict__") and not callable(obj):
        return {k: to_plain(v) for k, v in vars(obj).items() if not k.startswith("_")}
    return obj


def get_field(obj: Any, name: str, default: Any = None) -> Any:
    """Key lookup for mappings, attribute lookup for everything else."""
    if obj is None:
        return default
    if isinstance(obj, dict):
        return obj.get(name, default)
    try:
        return getattr(obj, name, default)
    except Exception:
        return default


def first_field(obj: Any, names: Iterable[str]) -> Any:
    for name in names:
        value = get_field(obj, name)
        if value is not None:
            return value
    return None


def is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def normalize_open_orders(raw: Any) -> List[Any]:
    if is_sequence(raw):
        return list(raw)
    for name in OPEN_ORDER_FIELDS:
        value = get_field(raw, name)
        if is_sequence(value):
            return list(value)
    return []


def extract_order_id(item: Any) -> Optional[str]:
    value = first_field(item, ORDER_ID_FIELDS)
    return None if value is None else str(value)


def extract_order_ids(raw: Any) -> List[str]:
    ids = (extract_order_id(o) for o in normalize_open_orders(raw))
    return [i for i in ids if i]


def open_orders(raw: Any) -> List[OpenOrder]:
    return [OpenOrder(order_id=extract_order_id(o), raw=o) for o in normalize_open_orders(raw)]


def parse_order_ids(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    return [s.strip() for s in str(raw).split(",") if s.strip()]


def _object_type(change: Any) -> str:
    return str(first_field(change, ("objectType", "object_type")) or "")


def _object_id(change: Any) -> Optional[str]:
    oid = first_field(change, ("objectId", "object_id"))
    if oid is None:
        ref = first_field(change, ("objectRef", "object_ref"))
        oid = first_field(ref, ("objectId", "object_id"))
    return None if oid is None else str(oid)


def extract_created_object_id(
    changes: Optional[Sequence[Any]],
    markers: Sequence[str] = BALANCE_MANAGER_MARKERS,
) -> Optional[str]:
    """Object id of the first change whose type label contains every marker."""
    wanted = [m.lower() for m in markers]
    for change in changes or []:
        label = _object_type(change).lower()
        if all(m in label for m in wanted):
            return _object_id(change)
    return None


def summarize_object_changes(changes: Optional[Sequence[Any]]) -> List[ObjectChange]:
    out = []
    for change in changes or []:
        object_type = _object_type(change)
        if not object_type:
            continue
        out.append(ObjectChange(
            change_type=get_field(change, "type"),
            object_type=object_type,
            object_id=_object_id(change),
        ))
    return out


def _floats(values: Any) -> List[float]:
    out = []
    for v in values if is_sequence(values) else []:
        try:
            out.append(float(v))
        except (TypeError, ValueError):
            continue
    return out


def level2_snapshot(raw: Any) -> Level2Snapshot:
    return Level2Snapshot(
        prices=_floats(get_field(raw, "prices")),
        quantities=_floats(get_field(raw, "quantities")),
        raw=raw,
    )


def best_price(raw: Any) -> Optional[float]:
    price = level2_snapshot(raw).best_price
    if price is None or price != price or price <= 0:
        return None
    return price


def to_float(value: Any) -> Optional[float]:
    try:
        f = float(value)
    except (TypeError, ValueError):
        return None
    if f != f or f <= 0:
        return None
    return f


def parse_execution(raw: Any) -> ExecutionResult:
    """Build an ExecutionResult from a node response (camelCase or snake_case)."""
    data = to_plain(raw)
    if not isinstance(data, dict):
        data = {}
    effects = data.get("effects") or {}
    status = get_field(effects, "status") or {}
    if isinstance(status, str):
        status_str, error = status, None
    else:
        status_str = get_field(status, "status") or "UNKNOWN"
        error = get_field(status, "error")
    return ExecutionResult(
        digest=data.get("digest"),
        status=str(status_str),
        error=None if error is None else str(error),
        object_changes=list(first_field(data, ("objectChanges", "object_changes")) or []),
        events=list(data.get("events") or []),
        raw=data,
    )
