from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from enum import Enum

class Network(Enum):
    TESTNET = 'testnet'
    MAINNET = 'mainnet'

    @property
    def fullnode_url(self) -> str:
        return f"https://fullnode.{self.value}.sui.io:443"

@dataclass
class InvocationAttempt:
    """One argument-shape hypothesis for an SDK call."""
    label: str
    args: tuple = ()

@dataclass
class InvocationOutcome:
    """Result of one attempt. Holds the error message only, never the exception."""
    label: str
    ok: bool
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out = {"label": self.label, "ok": self.ok}
        if self.error is not None:
            out["error"] = self.error
        return out

@dataclass
class AttemptReport:
    """All outcomes of one plan for one unit of work (e.g. one order id)."""
    unit: Optional[str] = None
    outcomes: List[InvocationOutcome] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return any(o.ok for o in self.outcomes)

    @property
    def used_label(self) -> Optional[str]:
        for o in self.outcomes:
            if o.ok:
                return o.label
        return None

    @property
    def failures(self) -> List[InvocationOutcome]:
        return [o for o in self.outcomes if not o.ok]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "unit": self.unit,
            "succeeded": self.succeeded,
            "used": self.used_label,
            "outcomes": [o.to_dict() for o in self.outcomes],
        }

@dataclass
class HelperResult:
    """built=False means the helper executed internally instead of adding to the transaction."""
    built: bool
    exec_result: Any = None

@dataclass
class Level2Snapshot:
    """Aggregated price levels for one side of a pool."""
    prices: List[float] = field(default_factory=list)
    quantities: List[float] = field(default_factory=list)
    raw: Any = None

    @property
    def best_price(self) -> Optional[float]:
        return self.prices[0] if self.prices else None

    def to_dict(self) -> Dict[str, Any]:
        return {"prices": self.prices, "quantities": self.quantities, "best_price": self.best_price}

@dataclass
class OpenOrder:
    order_id: Optional[str]
    raw: Any = None

@dataclass
class ObjectChange:
    change_type: Optional[str]
    object_type: Optional[str]
    object_id: Optional[str]

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.change_type, "objectType": self.object_type, "objectId": self.object_id}

@dataclass
class ExecutionResult:
    """Normalized outcome of a submitted transaction."""
    digest: Optional[str]
    status: str = 'UNKNOWN'
    error: Optional[str] = None
    object_changes: List[dict] = field(default_factory=list)
    events: List[dict] = field(default_factory=list)
    raw: Any = None

    @property
    def succeeded(self) -> bool:
        return self.status == 'success'

    def to_dict(self) -> Dict[str, Any]:
        return {
            "digest": self.digest,
            "status": self.status,
            "error": self.error,
            "object_changes": len(self.object_changes),
            "events": len(self.events),
        }

@dataclass
class LimitOrderParams:
    pool_key: str
    manager_key: str
    manager_id: str
    price: float
    quantity: float
    is_bid: bool = True
    client_order_id: Optional[str] = None
    pay_with_deep: bool = True

    @property
    def side(self) -> str:
        return 'bid' if self.is_bid else 'ask'
