"""Orders approval, wrap and swap transactions into a single broadcast sequence."""

from __future__ import annotations

from typing import List, Optional, Sequence

from ..errors import InsufficientFundsError
from ..execution.models import Transaction, TransactionType
from .models import ApprovalAction, ApprovalDecision, WrapAction, WrapDecision


# Broadcast order. The swap needs both the allowance and the wrapped balance
# in place when it executes, so it always comes last.
SEQUENCE_ORDER: Sequence[TransactionType] = (
    TransactionType.RESET_APPROVAL,
    TransactionType.APPROVE,
    TransactionType.WRAP,
    TransactionType.SWAP,
)


class TransactionSequence:
    """Append-only list that refuses transactions out of ``SEQUENCE_ORDER``."""

    def __init__(self) -> None:
        self._transactions: List[Transaction] = []
        self._stage = 0

    def append(self, tx: Transaction) -> 'TransactionSequence':
        stage = SEQUENCE_ORDER.index(tx.tx_type)
        if stage < self._stage:
            raise ValueError(
                f'{tx.tx_type.value} transaction cannot follow {SEQUENCE_ORDER[self._stage].value}'
            )
        if tx.tx_type is TransactionType.SWAP and self.has_swap:
            raise ValueError('Sequence already contains a swap transaction')
        self._stage = stage
        self._transactions.append(tx)
        return self

    @property
    def has_swap(self) -> bool:
        return any(tx.tx_type is TransactionType.SWAP for tx in self._transactions)

    def build(self) -> List[Transaction]:
        if not self.has_swap:
            raise ValueError('Sequence has no swap transaction')
        return list(self._transactions)


class TransactionAssembler:
    """Pure ordering step over already-resolved decisions.

    The caller turns each decision into transactions (zero, one or two
    approvals; zero or one wrap). The assembler checks they agree with the
    decisions and emits them as reset, approve, wrap, swap.
    """

    def assemble(
        self,
        approval: ApprovalDecision,
        wrap: WrapDecision,
        swap_tx: Transaction,
        *,
        approvals: Sequence[Transaction] = (),
        wrap_tx: Optional[Transaction] = None,
    ) -> List[Transaction]:
        if wrap.action is WrapAction.INSUFFICIENT_FUNDS:
            raise InsufficientFundsError(
                f'Wrapped plus native balance ({wrap.available}) cannot cover {wrap.required}',
                required=wrap.required,
                available=wrap.available,
            )

        if len(approvals) != approval.transaction_count:
            raise ValueError(
                f'{approval.action.value} expects {approval.transaction_count} approval transactions, got {len(approvals)}'
            )
        if approval.action is ApprovalAction.RESET_THEN_APPROVE:
            expected = [TransactionType.RESET_APPROVAL, TransactionType.APPROVE]
        else:
            expected = [TransactionType.APPROVE] * len(approvals)
        if [tx.tx_type for tx in approvals] != expected:
            raise ValueError('Approval transactions do not match the approval decision')

        needs_wrap = wrap.action is WrapAction.WRAP
        if needs_wrap != (wrap_tx is not None):
            raise ValueError('Wrap transaction does not match the wrap decision')
        if wrap_tx is not None and wrap_tx.tx_type is not TransactionType.WRAP:
            raise ValueError(f'Expected a wrap transaction, got {wrap_tx.tx_type.value}')

        if swap_tx.tx_type is not TransactionType.SWAP:
            raise ValueError(f'Expected a swap transaction, got {swap_tx.tx_type.value}')

        sequence = TransactionSequence()
        for tx in approvals:
            sequence.append(tx)
        if wrap_tx is not None:
            sequence.append(wrap_tx)
        sequence.append(swap_tx)
        return sequence.build()
