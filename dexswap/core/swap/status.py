"""Aggregator order status codes and their notification-status equivalents."""

from __future__ import annotations

from enum import Enum
from typing import Dict, Union

from ..errors import UnknownStatusCode


class OrderStatusCode(str, Enum):
    """Codes reported by the aggregator's order-status endpoint."""
    NEW = "new"
    WAITING = "waiting"
    CONFIRMING = "confirming"
    EXCHANGING = "exchanging"
    SENDING = "sending"
    HOLD = "hold"
    FINISHED = "finished"
    FAILED = "failed"
    OVERDUE = "overdue"
    REFUNDED = "refunded"


class NotificationStatus(str, Enum):
    """Internal lifecycle status shown to the user."""
    NEW = "NEW"
    SENT = "SENT"
    PENDING = "PENDING"
    COMPLETE = "COMPLETE"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"


class StatusMapper:
    STATUS_MAP: Dict[OrderStatusCode, NotificationStatus] = {
        OrderStatusCode.NEW: NotificationStatus.NEW,
        OrderStatusCode.WAITING: NotificationStatus.SENT,
        OrderStatusCode.CONFIRMING: NotificationStatus.PENDING,
        OrderStatusCode.EXCHANGING: NotificationStatus.PENDING,
        OrderStatusCode.SENDING: NotificationStatus.PENDING,
        OrderStatusCode.HOLD: NotificationStatus.PENDING,
        OrderStatusCode.FINISHED: NotificationStatus.COMPLETE,
        OrderStatusCode.FAILED: NotificationStatus.FAILED,
        OrderStatusCode.OVERDUE: NotificationStatus.CANCELLED,
        OrderStatusCode.REFUNDED: NotificationStatus.CANCELLED,
    }

    @classmethod
    def map(cls, code: Union[str, OrderStatusCode]) -> NotificationStatus:
        if isinstance(code, OrderStatusCode):
            return cls.STATUS_MAP[code]
        if not isinstance(code, str):
            raise UnknownStatusCode(code)
        try:
            parsed = OrderStatusCode(code.strip().lower())
        except ValueError:
            raise UnknownStatusCode(code) from None
        return cls.STATUS_MAP[parsed]
