"""
Dispatch Module

Tagged request variants and the single invoke/classify routine that sends
them to the external providers.
"""

from .dispatcher import Dispatcher
from .models import (
    BalanceRequest,
    CreateWalletRequest,
    FundWalletRequest,
    HistoryRequest,
    OperationKind,
    PriceRequest,
    ProviderRequest,
    ProviderResult,
    validate_limit,
)

__all__ = [
    "Dispatcher",
    "OperationKind",
    "BalanceRequest",
    "HistoryRequest",
    "PriceRequest",
    "CreateWalletRequest",
    "FundWalletRequest",
    "ProviderRequest",
    "ProviderResult",
    "validate_limit",
]
