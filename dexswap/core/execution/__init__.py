"""
Unsigned transaction layer.

Usage:
    from dexswap.core.execution import TransactionBuilder, encode_approve

    tx = TransactionBuilder.build_approve(
        token_address="0x...",
        spender_address="0x...",
        data=encode_approve("0x...", 10**18),
    )
"""

from .models import Transaction, TransactionType
from .tx_builder import (
    MAX_UINT256,
    TransactionBuilder,
    encode_allowance,
    encode_approve,
    encode_balance_of,
    parse_quantity,
)

__all__ = [
    "Transaction",
    "TransactionType",
    "TransactionBuilder",
    "MAX_UINT256",
    "encode_allowance",
    "encode_approve",
    "encode_balance_of",
    "parse_quantity",
]
