from .base import AggregatorClient, LedgerClient, Provider
from .dexag import DexAgProvider
from .ledger import RpcLedgerClient

__all__ = ["Provider", "LedgerClient", "AggregatorClient", "RpcLedgerClient", "DexAgProvider"]
