"""
Unsigned transaction models.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class TransactionType(str, Enum):
    """Role a transaction plays in a swap sequence."""
    RESET_APPROVAL = "reset_approval"
    APPROVE = "approve"
    WRAP = "wrap"
    SWAP = "swap"


@dataclass(frozen=True)
class Transaction:
    """An unsigned instruction handed to an external broadcaster."""
    tx_type: TransactionType
    to_address: str
    data: str                                   # Encoded calldata (hex)
    value: int = 0                              # Wei to send
    gas_price: Optional[int] = None             # Aggregator-supplied override
    description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the ``{to, data, value}`` shape used for signing."""
        tx: Dict[str, Any] = {
            "to": self.to_address,
            "data": self.data,
            "value": self.value,
        }
        if self.gas_price is not None:
            tx["gasPrice"] = self.gas_price
        return tx
