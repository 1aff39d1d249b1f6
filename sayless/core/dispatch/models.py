"""
Dispatch Models

Request variants for the five provider operations and the uniform result
they all produce.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, ClassVar, Dict, Optional, Union

from ..chains import ChainSelection
from ..errors import DispatchError, LimitOutOfRangeError
from ..identifiers import ResolvedAddress


class OperationKind(str, Enum):
    """The provider operations the engine can dispatch."""

    BALANCE = "balance"
    HISTORY = "history"
    PRICE = "price"
    CREATE_WALLET = "create_wallet"
    FUND_WALLET = "fund_wallet"


@dataclass(frozen=True)
class BalanceRequest:
    target: ResolvedAddress
    chain: ChainSelection

    kind: ClassVar[OperationKind] = OperationKind.BALANCE


@dataclass(frozen=True)
class HistoryRequest:
    target: ResolvedAddress
    chain: ChainSelection
    limit: int

    kind: ClassVar[OperationKind] = OperationKind.HISTORY


@dataclass(frozen=True)
class PriceRequest:
    query: str
    chain: ChainSelection

    kind: ClassVar[OperationKind] = OperationKind.PRICE


@dataclass(frozen=True)
class CreateWalletRequest:
    blockchain: str
    account_type: str

    kind: ClassVar[OperationKind] = OperationKind.CREATE_WALLET


@dataclass(frozen=True)
class FundWalletRequest:
    address: str
    blockchain: str

    kind: ClassVar[OperationKind] = OperationKind.FUND_WALLET


ProviderRequest = Union[
    BalanceRequest,
    HistoryRequest,
    PriceRequest,
    CreateWalletRequest,
    FundWalletRequest,
]


@dataclass
class ProviderResult:
    """Outcome of one operation: a display-ready payload or a classified error."""

    kind: OperationKind
    request: Optional[ProviderRequest] = None
    payload: Any = None
    error: Optional[DispatchError] = None
    latency_ms: Optional[int] = None
    completed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(
        cls,
        request: ProviderRequest,
        payload: Any,
        latency_ms: Optional[int] = None,
    ) -> "ProviderResult":
        return cls(kind=request.kind, request=request, payload=payload, latency_ms=latency_ms)

    @classmethod
    def failure(
        cls,
        kind: OperationKind,
        error: DispatchError,
        request: Optional[ProviderRequest] = None,
        latency_ms: Optional[int] = None,
    ) -> "ProviderResult":
        return cls(kind=kind, request=request, error=error, latency_ms=latency_ms)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "ok": self.ok,
            "payload": self.payload,
            "error": self.error.to_dict() if self.error else None,
            "latencyMs": self.latency_ms,
            "completedAt": self.completed_at.isoformat(),
        }


def validate_limit(limit: int, ceiling: int) -> int:
    """Reject history limits outside 1..ceiling before anything is sent."""
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1 or limit > ceiling:
        raise LimitOutOfRangeError(limit, ceiling)
    return limit
