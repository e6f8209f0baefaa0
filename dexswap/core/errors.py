"""
Swap error taxonomy.

Errors are split into recoverable (the caller may retry the whole attempt)
and unrecoverable (the user has to change something first). Nothing in this
package retries; the split only tells the caller what is worth retrying.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class ErrorCategory(str, Enum):
    """Categories of swap failures."""

    LEDGER = "ledger"                          # Allowance/balance read failed
    QUOTE = "quote"                            # Aggregator trade creation failed
    INSUFFICIENT_FUNDS = "insufficient_funds"  # Wrapped + native cannot cover the trade
    DECODING = "decoding"                      # Unexpected payload from the aggregator
    UNSUPPORTED_TOKEN = "unsupported_token"    # No address/decimals for a symbol
    UNSUPPORTED_NETWORK = "unsupported_network"  # Request targets another network
    UNKNOWN = "unknown"


@dataclass
class ErrorContext:
    """Additional context about an error."""

    category: ErrorCategory = ErrorCategory.UNKNOWN
    recoverable: bool = True
    suggested_action: Optional[str] = None
    provider: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)


class SwapError(Exception):
    """Base class for every error raised while preparing or tracking a swap."""

    recoverable: bool = False

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.UNKNOWN,
        context: Optional[ErrorContext] = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category
        self.context = context or ErrorContext(category=category, recoverable=self.recoverable)


class RecoverableError(SwapError):
    """Transient failure; a fresh attempt may succeed."""

    recoverable = True


class UnrecoverableError(SwapError):
    """Failure that needs user action before another attempt."""

    recoverable = False


class LedgerReadFailure(RecoverableError):
    """An allowance or balance query against the ledger failed."""

    def __init__(
        self,
        message: str = "Ledger read failed",
        method: Optional[str] = None,
        address: Optional[str] = None,
    ):
        super().__init__(
            message,
            category=ErrorCategory.LEDGER,
            context=ErrorContext(
                category=ErrorCategory.LEDGER,
                recoverable=True,
                suggested_action="Check the RPC endpoint and retry the swap",
                details={"method": method, "address": address},
            ),
        )


class QuoteCreationFailure(RecoverableError):
    """The aggregator could not create a trade for the request."""

    def __init__(
        self,
        message: str = "Trade creation failed",
        provider: Optional[str] = None,
        dex: Optional[str] = None,
    ):
        super().__init__(
            message,
            category=ErrorCategory.QUOTE,
            context=ErrorContext(
                category=ErrorCategory.QUOTE,
                recoverable=True,
                provider=provider,
                suggested_action="Request a new quote",
                details={"dex": dex} if dex else {},
            ),
        )


class InsufficientFundsError(UnrecoverableError):
    """Wrapped plus native balance cannot cover the trade."""

    def __init__(
        self,
        message: str = "Insufficient funds",
        required: Optional[int] = None,
        available: Optional[int] = None,
        token: Optional[str] = None,
    ):
        super().__init__(
            message,
            category=ErrorCategory.INSUFFICIENT_FUNDS,
            context=ErrorContext(
                category=ErrorCategory.INSUFFICIENT_FUNDS,
                recoverable=False,
                suggested_action="Add funds to wallet or reduce swap amount",
                details={
                    "required": required,
                    "available": available,
                    "token": token,
                },
            ),
        )
        self.required = required
        self.available = available


class UnknownStatusCode(UnrecoverableError):
    """The aggregator reported an order status outside the known set."""

    def __init__(self, code: Any):
        super().__init__(
            f"Unknown order status code: {code!r}",
            category=ErrorCategory.DECODING,
            context=ErrorContext(
                category=ErrorCategory.DECODING,
                recoverable=False,
                details={"code": code},
            ),
        )
        self.code = code


class UnsupportedTokenError(UnrecoverableError):
    """A currency has no known contract address or decimals."""

    def __init__(self, symbol: str, network: Optional[str] = None):
        where = f" on {network}" if network else ""
        super().__init__(
            f"Token [{symbol}] not included in dex.ag list of tokens{where}",
            category=ErrorCategory.UNSUPPORTED_TOKEN,
            context=ErrorContext(
                category=ErrorCategory.UNSUPPORTED_TOKEN,
                recoverable=False,
                suggested_action="Choose a supported token",
                details={"symbol": symbol, "network": network},
            ),
        )
        self.symbol = symbol


class UnsupportedNetworkError(UnrecoverableError):
    """A request names a network the orchestrator is not configured for."""

    def __init__(self, network: str, expected: str):
        super().__init__(
            f"Network [{network}] not supported, expected [{expected}]",
            category=ErrorCategory.UNSUPPORTED_NETWORK,
            context=ErrorContext(
                category=ErrorCategory.UNSUPPORTED_NETWORK,
                recoverable=False,
                suggested_action="Send the request to an orchestrator for that network",
                details={"network": network, "expected": expected},
            ),
        )
        self.network = network


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "SwapError",
    "RecoverableError",
    "UnrecoverableError",
    "LedgerReadFailure",
    "QuoteCreationFailure",
    "InsufficientFundsError",
    "UnknownStatusCode",
    "UnsupportedTokenError",
    "UnsupportedNetworkError",
]
