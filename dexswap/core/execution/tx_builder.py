"""
Transaction builder for the approve, wrap and swap steps of a swap.
"""

from typing import Any, Optional

from .models import Transaction, TransactionType


# Minimal ABI selectors
ERC20_APPROVE_SELECTOR = "0x095ea7b3"    # approve(address,uint256)
ERC20_ALLOWANCE_SELECTOR = "0xdd62ed3e"  # allowance(address,address)
ERC20_BALANCE_OF_SELECTOR = "0x70a08231"  # balanceOf(address)
WETH_DEPOSIT_SELECTOR = "0xd0e30db0"     # deposit()

MAX_UINT256 = 2**256 - 1


def _encode_uint256(value: int) -> str:
    """Encode a uint256 as a 32-byte hex string (without 0x prefix)."""
    if value < 0 or value > MAX_UINT256:
        raise ValueError(f"Value out of uint256 range: {value}")
    return format(value, "064x")


def _encode_address(address: str) -> str:
    """Encode an address as a 32-byte hex string (without 0x prefix)."""
    addr = address.lower().replace("0x", "")
    return addr.zfill(64)


def encode_approve(spender_address: str, amount: int) -> str:
    return ERC20_APPROVE_SELECTOR + _encode_address(spender_address) + _encode_uint256(amount)


def encode_allowance(owner_address: str, spender_address: str) -> str:
    return ERC20_ALLOWANCE_SELECTOR + _encode_address(owner_address) + _encode_address(spender_address)


def encode_balance_of(owner_address: str) -> str:
    return ERC20_BALANCE_OF_SELECTOR + _encode_address(owner_address)


def parse_quantity(value: Any) -> int:
    """Parse an amount that may arrive as int, decimal string or 0x-hex string."""
    if value is None or value == "":
        return 0
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if text.startswith(("0x", "0X")):
        return int(text, 16) if len(text) > 2 else 0
    return int(text)


class TransactionBuilder:
    """
    Builds the individual transactions of a swap sequence.

    Approval calldata comes from the caller (usually the ledger client's
    ``encode_approve_call``) so the builder never touches the network.
    """

    @staticmethod
    def build_approve(
        token_address: str,
        spender_address: str,
        data: str,
        *,
        reset: bool = False,
    ) -> Transaction:
        """
        Build an ERC20 approval transaction.

        Args:
            token_address: The ERC20 token contract
            spender_address: The address being approved to spend
            data: Encoded ``approve(spender, amount)`` calldata
            reset: True for the approve(spender, 0) step of a reset

        Returns:
            Transaction ready to be signed
        """
        if reset:
            return Transaction(
                tx_type=TransactionType.RESET_APPROVAL,
                to_address=token_address,
                data=data,
                value=0,
                description=f"Reset allowance for {spender_address[:10]}... to zero",
            )
        return Transaction(
            tx_type=TransactionType.APPROVE,
            to_address=token_address,
            data=data,
            value=0,
            description=f"Approve {spender_address[:10]}... to spend tokens",
        )

    @staticmethod
    def build_wrap(wrapped_token_address: str, amount_wei: int) -> Transaction:
        """Build a WETH ``deposit()`` call converting ``amount_wei`` of native currency."""
        if amount_wei <= 0:
            raise ValueError(f"Wrap amount must be positive, got {amount_wei}")
        return Transaction(
            tx_type=TransactionType.WRAP,
            to_address=wrapped_token_address,
            data=WETH_DEPOSIT_SELECTOR,
            value=amount_wei,
            description=f"Wrap {amount_wei} wei of native currency",
        )

    @staticmethod
    def build_swap(
        to_address: str,
        data: str,
        value: Any = 0,
        gas_price: Optional[Any] = None,
        description: str = "",
    ) -> Transaction:
        """Build the swap call returned by the aggregator."""
        return Transaction(
            tx_type=TransactionType.SWAP,
            to_address=to_address,
            data=data if data.startswith("0x") else f"0x{data}",
            value=parse_quantity(value),
            gas_price=parse_quantity(gas_price) if gas_price is not None else None,
            description=description,
        )
