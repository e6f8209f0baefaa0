"""Typed models used by the swap subsystem."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..execution.models import Transaction
from ..execution.tx_builder import parse_quantity


class SwapRequest(BaseModel):
    """A user's request to swap ``from_value`` of one currency into another."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    from_currency: str = Field(alias='fromCurrency', description='Source currency symbol')
    to_currency: str = Field(alias='toCurrency', description='Destination currency symbol')
    from_value: Decimal = Field(alias='fromValue', gt=0, description='Source amount in human units')
    from_address: str = Field(alias='fromAddress', description='Address spending the source asset')
    to_address: str = Field(alias='toAddress', description='Address receiving the destination asset')
    provider: Optional[str] = Field(default=None, description='Preferred liquidity source (dex)')
    network: str = Field(default='ETH', description='Network symbol')


def _base_units(value: Any) -> int:
    """Accept int, decimal or 0x-hex quantities; anything fractional or negative is malformed."""
    if isinstance(value, bool):
        raise ValueError(f'Expected an integer quantity, got {value!r}')
    try:
        parsed = parse_quantity(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f'Expected an integer or hex quantity, got {value!r}') from exc
    if parsed < 0:
        raise ValueError(f'Quantity must be non-negative, got {value!r}')
    return parsed


class TradeCall(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra='allow')

    to: str
    data: str = '0x'
    value: int = 0

    @field_validator('value', mode='before')
    @classmethod
    def parse_value(cls, value: Any) -> int:
        return _base_units(value)


class TradeInput(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra='allow')

    address: Optional[str] = None
    amount: int = 0
    spender: Optional[str] = None

    @field_validator('amount', mode='before')
    @classmethod
    def parse_amount(cls, value: Any) -> int:
        return 0 if value is None else _base_units(value)


class TradeQuery(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra='allow')

    to_amount: Any = Field(default=None, alias='toAmount')


class TradeMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra='allow')

    input: Optional[TradeInput] = None
    query: TradeQuery = Field(default_factory=TradeQuery)
    gas_price: Optional[int] = Field(default=None, alias='gasPrice')

    @field_validator('gas_price', mode='before')
    @classmethod
    def parse_gas_price(cls, value: Any) -> Optional[int]:
        return None if value is None else _base_units(value)


class TradeQuote(BaseModel):
    """Trade returned by the aggregator for a swap request."""

    model_config = ConfigDict(populate_by_name=True, extra='allow')

    trade: TradeCall
    metadata: TradeMetadata = Field(default_factory=TradeMetadata)

    @property
    def spender_address(self) -> str:
        """Contract that must hold the allowance.

        ``metadata.input.spender`` wins when present; otherwise the trade's
        destination contract (``trade.to``) is the spender.
        """
        if self.metadata.input is not None and self.metadata.input.spender:
            return self.metadata.input.spender
        return self.trade.to


class ApprovalAction(str, Enum):
    NONE = 'none'
    APPROVE = 'approve'
    RESET_THEN_APPROVE = 'reset_then_approve'


@dataclass(frozen=True)
class ApprovalDecision:
    """Whether the spender needs a new allowance, and whether to clear the old one first."""

    action: ApprovalAction
    amount: int = 0

    @classmethod
    def none(cls) -> 'ApprovalDecision':
        return cls(ApprovalAction.NONE)

    @classmethod
    def approve(cls, amount: int) -> 'ApprovalDecision':
        return cls(ApprovalAction.APPROVE, amount)

    @classmethod
    def reset_then_approve(cls, amount: int) -> 'ApprovalDecision':
        return cls(ApprovalAction.RESET_THEN_APPROVE, amount)

    @property
    def transaction_count(self) -> int:
        return {
            ApprovalAction.NONE: 0,
            ApprovalAction.APPROVE: 1,
            ApprovalAction.RESET_THEN_APPROVE: 2,
        }[self.action]


class WrapAction(str, Enum):
    NOT_REQUIRED = 'not_required'
    WRAP = 'wrap'
    INSUFFICIENT_FUNDS = 'insufficient_funds'


@dataclass(frozen=True)
class WrapDecision:
    """How much native currency to wrap before the swap, in wrapped-token base units."""

    action: WrapAction
    amount: int = 0
    required: int = 0
    available: int = 0

    @classmethod
    def not_required(cls) -> 'WrapDecision':
        return cls(WrapAction.NOT_REQUIRED)

    @classmethod
    def wrap(cls, amount: int) -> 'WrapDecision':
        return cls(WrapAction.WRAP, amount)

    @classmethod
    def insufficient_funds(cls, required: int, available: int) -> 'WrapDecision':
        return cls(WrapAction.INSUFFICIENT_FUNDS, 0, required, available)


@dataclass(frozen=True)
class SwapPolicy:
    """Per-deployment swap restrictions."""

    disabled_symbols: FrozenSet[str] = frozenset()

    @classmethod
    def from_symbols(cls, symbols: Iterable[str]) -> 'SwapPolicy':
        return cls(disabled_symbols=frozenset(symbol.upper() for symbol in symbols))

    def is_disabled(self, symbol: str) -> bool:
        return symbol.upper() in self.disabled_symbols


@dataclass
class PendingOrder:
    """Where the caller sends funds and how long the quote stays valid."""

    send_to_address: str
    status: str = 'pending'
    valid_for: int = 600


@dataclass
class SwapResult:
    """Ordered transactions plus the metadata a broadcaster needs."""

    request: SwapRequest
    transactions: List[Transaction]
    provider_address: str
    provider_receives: Decimal
    provider_sends: Any
    parsed: PendingOrder
    provider: str = ''
    dex: str = ''
    is_dex: bool = True
    is_exit_to_fiat: bool = False
    approval: Optional[ApprovalDecision] = None
    wrap: Optional[WrapDecision] = None

    def data_for_initialization(self) -> List[Dict[str, Any]]:
        return [tx.to_dict() for tx in self.transactions]


@dataclass
class ParsedOrder:
    """Normalized view of an aggregator order record."""

    order_id: str
    status_id: str
    send_to_address: Optional[str]
    rec_value: Any
    send_value: Any
    status: Optional[str]
    timestamp: Optional[str]
    valid_for: int
    raw: Dict[str, Any] = field(default_factory=dict)
