"""Swap orchestration components."""

from typing import TYPE_CHECKING

from .allowance import AllowanceResolver
from .assembler import TransactionAssembler, TransactionSequence
from .models import (
    ApprovalAction,
    ApprovalDecision,
    PendingOrder,
    SwapPolicy,
    SwapRequest,
    SwapResult,
    TradeQuote,
    WrapAction,
    WrapDecision,
)
from .status import NotificationStatus, OrderStatusCode, StatusMapper
from .wrap import WrapCalculator

if TYPE_CHECKING:  # pragma: no cover
    from .manager import SwapOrchestrator

__all__ = [
    "AllowanceResolver",
    "WrapCalculator",
    "TransactionAssembler",
    "TransactionSequence",
    "StatusMapper",
    "OrderStatusCode",
    "NotificationStatus",
    "ApprovalAction",
    "ApprovalDecision",
    "WrapAction",
    "WrapDecision",
    "SwapPolicy",
    "SwapRequest",
    "SwapResult",
    "PendingOrder",
    "TradeQuote",
    "SwapOrchestrator",
]


def __getattr__(name: str):  # pragma: no cover - simple thunk
    if name == "SwapOrchestrator":
        from .manager import SwapOrchestrator as _SwapOrchestrator

        return _SwapOrchestrator
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
