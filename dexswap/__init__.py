"""Swap transaction assembly for the dex.ag liquidity aggregator."""

__version__ = "0.1.0"
