from abc import ABC, abstractmethod
from typing import Any, Dict


class Provider(ABC):
    """Base provider interface"""

    name: str
    timeout_s: int = 10


class LedgerClient(Provider):
    """Read-only view of on-chain token state plus approve() encoding"""

    @abstractmethod
    async def read_allowance(self, token_address: str, owner_address: str, spender_address: str) -> int:
        """Current ERC20 allowance granted by owner to spender, in base units"""
        pass

    @abstractmethod
    async def read_token_balance(self, token_address: str, owner_address: str) -> int:
        """ERC20 balance of owner, in base units"""
        pass

    @abstractmethod
    async def read_native_balance(self, address: str) -> int:
        """Native currency balance in wei"""
        pass

    @abstractmethod
    def encode_approve_call(self, token_address: str, spender_address: str, amount: int) -> str:
        """Hex calldata for ``approve(spender, amount)`` on token_address"""
        pass


class AggregatorClient(Provider):
    """Liquidity aggregator used to create trades and track orders"""

    @abstractmethod
    async def create_trade(self, request: Any, dex: str) -> Dict[str, Any]:
        """Create a trade for a swap request; returns ``{trade, metadata}``"""
        pass

    @abstractmethod
    async def get_status(self, order_id: str, network: str) -> str:
        """External status code for an order"""
        pass

    @abstractmethod
    async def validate_address(self, currency: str, address: str, network: str) -> bool:
        """Whether address can receive currency"""
        pass
