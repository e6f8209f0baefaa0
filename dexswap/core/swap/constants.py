"""Constants and token metadata for aggregator swaps."""

from __future__ import annotations

from typing import Dict, Tuple

PROVIDER_NAME = 'dexag'

# Liquidity sources the aggregator is known to route correctly; anything else
# falls back to the aggregator's own best-route mode.
SUPPORTED_DEXES: Tuple[str, ...] = (
    'ag',
    'radar-relay',
    'uniswap',
    'bancor',
    'kyber',
    'oasis',
    'zero_x',
    'curvefi',
)
AGGREGATE_DEX = 'ag'

NATIVE_PLACEHOLDER = '0x0000000000000000000000000000000000000000'

# Network symbol → native currency symbol and its wrapped form.
NETWORK_METADATA: Dict[str, Dict[str, str]] = {
    'ETH': {
        'name': 'Ethereum',
        'native_symbol': 'ETH',
        'wrapped_symbol': 'WETH',
    },
}

# Minimal token registry keyed by network → token symbol → metadata.
# Addresses lowercased to simplify comparisons.
TOKEN_REGISTRY: Dict[str, Dict[str, Dict[str, object]]] = {
    'ETH': {
        'ETH': {
            'symbol': 'ETH',
            'name': 'Ethereum',
            'address': NATIVE_PLACEHOLDER,
            'decimals': 18,
            'is_native': True,
        },
        'WETH': {
            'symbol': 'WETH',
            'name': 'Wrapped Ether',
            'address': '0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2',
            'decimals': 18,
            'is_native': False,
        },
        'USDC': {
            'symbol': 'USDC',
            'name': 'USD Coin',
            'address': '0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48',
            'decimals': 6,
            'is_native': False,
        },
        'USDT': {
            'symbol': 'USDT',
            'name': 'Tether USD',
            'address': '0xdac17f958d2ee523a2206206994597c13d831ec7',
            'decimals': 6,
            'is_native': False,
        },
        'DAI': {
            'symbol': 'DAI',
            'name': 'Dai Stablecoin',
            'address': '0x6b175474e89094c44da98b954eedeac495271d0f',
            'decimals': 18,
            'is_native': False,
        },
        'WBTC': {
            'symbol': 'WBTC',
            'name': 'Wrapped BTC',
            'address': '0x2260fac5e5542a773aa44fbcfedf7c193bc2c599',
            'decimals': 8,
            'is_native': False,
        },
        'KNC': {
            'symbol': 'KNC',
            'name': 'Kyber Network',
            'address': '0xdd974d5c2e2928dea5f71b9825b8b646686bd200',
            'decimals': 18,
            'is_native': False,
        },
    },
}

__all__ = [
    'PROVIDER_NAME',
    'SUPPORTED_DEXES',
    'AGGREGATE_DEX',
    'NATIVE_PLACEHOLDER',
    'NETWORK_METADATA',
    'TOKEN_REGISTRY',
]
