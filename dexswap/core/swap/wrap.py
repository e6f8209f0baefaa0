"""Works out how much native currency must be wrapped before a WETH-funded swap."""

from __future__ import annotations

from typing import Optional

from .models import WrapDecision


class WrapCalculator:
    """Only consulted when the swap's source asset is the wrapped native token."""

    @staticmethod
    def is_applicable(token_address: Optional[str], wrapped_token_address: str) -> bool:
        if not token_address:
            return False
        return token_address.lower() == wrapped_token_address.lower()

    def resolve(
        self,
        required_wrapped_amount: int,
        current_wrapped_balance: int,
        current_native_balance: int,
    ) -> WrapDecision:
        if min(required_wrapped_amount, current_wrapped_balance, current_native_balance) < 0:
            raise ValueError('Wrap inputs must be non-negative')

        if current_wrapped_balance >= required_wrapped_amount:
            return WrapDecision.not_required()

        available = current_native_balance + current_wrapped_balance
        if available < required_wrapped_amount:
            return WrapDecision.insufficient_funds(required_wrapped_amount, available)

        # Wrap only the shortfall so unused native balance stays unwrapped.
        shortfall = required_wrapped_amount - current_wrapped_balance
        if shortfall <= 0:
            raise AssertionError(f'Computed non-positive wrap shortfall {shortfall}')
        return WrapDecision.wrap(shortfall)
