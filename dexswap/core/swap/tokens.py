"""Token address and decimals lookup for a single network."""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation, ROUND_DOWN
from typing import Any, Dict, Optional

from ..errors import UnsupportedTokenError
from .constants import NETWORK_METADATA, TOKEN_REGISTRY


class TokenDirectory:
    """Resolves currency symbols to contract metadata on one network."""

    def __init__(
        self,
        network: str = 'ETH',
        registry: Optional[Dict[str, Dict[str, Dict[str, object]]]] = None,
        *,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.network = network.upper()
        self._logger = logger or logging.getLogger(__name__)
        source = registry if registry is not None else TOKEN_REGISTRY
        self._tokens: Dict[str, Dict[str, object]] = {
            symbol.upper(): meta for symbol, meta in source.get(self.network, {}).items()
        }
        network_meta = NETWORK_METADATA.get(self.network, {})
        self.native_symbol = network_meta.get('native_symbol', self.network)
        self.wrapped_symbol = network_meta.get('wrapped_symbol')

    def __contains__(self, symbol: object) -> bool:
        return isinstance(symbol, str) and symbol.upper() in self._tokens

    def _entry(self, symbol: str) -> Dict[str, object]:
        entry = self._tokens.get(symbol.upper())
        if entry is None:
            self._logger.error('Token %s not found on %s', symbol, self.network)
            raise UnsupportedTokenError(symbol, self.network)
        return entry

    def is_native(self, symbol: str) -> bool:
        return symbol.upper() == self.native_symbol.upper()

    def get_token_address(self, symbol: str) -> str:
        return str(self._entry(symbol)['address'])

    def get_token_decimals(self, symbol: str) -> int:
        return int(self._entry(symbol)['decimals'])  # type: ignore[arg-type]

    @property
    def wrapped_token_address(self) -> Optional[str]:
        if not self.wrapped_symbol or self.wrapped_symbol not in self:
            return None
        return self.get_token_address(self.wrapped_symbol)

    def to_base_units(self, symbol: str, value: Any) -> int:
        """Human units → integer base units, rounding down."""
        decimals = self.get_token_decimals(symbol)
        try:
            amount = Decimal(str(value))
        except (InvalidOperation, ValueError) as exc:
            raise ValueError(f'Invalid amount for {symbol}: {value!r}') from exc
        scaled = (amount * (Decimal(10) ** decimals)).quantize(Decimal(1), rounding=ROUND_DOWN)
        return int(scaled)

    def from_base_units(self, symbol: str, value: Any) -> Decimal:
        decimals = self.get_token_decimals(symbol)
        return Decimal(int(value)) / (Decimal(10) ** decimals)
