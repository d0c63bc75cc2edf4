from typing import Any, Dict, List, Optional


class DeepBookError(Exception):
    """Base exception for all DeepBook client errors."""
    pass

class ConfigurationError(DeepBookError):
    """Raised when a required setting is missing or invalid."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field

class SdkUnavailable(DeepBookError):
    """Raised when the Sui client or the exchange SDK cannot be loaded."""
    pass

class NetworkError(DeepBookError):
    """Raised when a node call fails or exceeds its deadline."""
    pass

class ObjectNotFound(DeepBookError):
    """Raised when an on-chain object lookup returns an error."""
    pass

class TradingDisabled(DeepBookError):
    """Raised when the trading guard blocks an order."""
    pass

class CapabilityNotFound(DeepBookError):
    """Raised when no member of an SDK object matches a capability query."""

    def __init__(self, message: str, target: str = "", candidates: Optional[List[str]] = None):
        self.target = target
        self.candidates = list(candidates or [])
        if self.candidates:
            message = f"{message}. Available {target} methods:\n" + "\n".join(self.candidates)
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {"target": self.target, "candidates": self.candidates}

class InvocationFailed(DeepBookError):
    """Raised when every attempt of every unit of work failed."""

    def __init__(self, message: str, reports: Optional[list] = None):
        super().__init__(message)
        self.reports = list(reports or [])

    def to_dict(self) -> Dict[str, Any]:
        return {"reports": [r.to_dict() for r in self.reports]}

class TransactionFailed(DeepBookError):
    """
    Raised when a submitted transaction reports a non-success status.
    Post-state reads must not follow this error.
    """

    def __init__(self, digest: Optional[str], status: str, error: Optional[str] = None):
        super().__init__(f"Transaction {digest} did not succeed (status={status}): {error or 'no error reported'}")
        self.digest = digest
        self.status = status
        self.error = error

    def to_dict(self) -> Dict[str, Any]:
        return {"digest": self.digest, "status": self.status, "error": self.error}

class InsufficientFunds(DeepBookError):
    """Raised when the signer has no coins to pay for gas."""
    pass

class MarketDataUnavailable(DeepBookError):
    """Raised when no usable reference price can be read from the book."""
    pass
