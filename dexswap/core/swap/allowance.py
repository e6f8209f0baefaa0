"""Decides whether a spender needs a fresh ERC20 allowance before a swap."""

from __future__ import annotations

import logging
from typing import Optional

from .models import ApprovalDecision


class AllowanceResolver:
    """Maps (current allowance, required amount) onto an approval decision.

    Some tokens (USDT being the usual example) revert when an allowance moves
    from one non-zero value to another, so an insufficient non-zero allowance
    is always cleared to zero before the new approval.
    """

    def __init__(self, *, logger: Optional[logging.Logger] = None) -> None:
        self._logger = logger or logging.getLogger(__name__)

    def resolve(
        self,
        current_allowance: int,
        required_amount: int,
        *,
        is_native: bool = False,
    ) -> ApprovalDecision:
        if current_allowance < 0 or required_amount < 0:
            raise ValueError(
                f'Allowance and amount must be non-negative (allowance={current_allowance}, amount={required_amount})'
            )

        if is_native or required_amount == 0:
            return ApprovalDecision.none()

        if current_allowance <= 0:
            return ApprovalDecision.approve(required_amount)

        if current_allowance - required_amount < 0:
            self._logger.info(
                'Existing allowance %s below required %s; resetting before approval',
                current_allowance,
                required_amount,
            )
            return ApprovalDecision.reset_then_approve(required_amount)

        return ApprovalDecision.none()
