"""
API clients for the P2P arbitrage calculator.

Provides wrappers for the fiat exchange rate API and the P2P order book API.
"""

from .exchange_rate_client import ExchangeRateClient
from .p2p_client import P2PMarketClient

__all__ = [
    "ExchangeRateClient",
    "P2PMarketClient",
]
