"""
P2P Arbitrage - cross-market arbitrage calculator for peer-to-peer crypto markets.

Buys an asset peer-to-peer with one fiat currency, sells it for another and
compares the proceeds with the spot fiat exchange rate.
"""

__version__ = "0.1.0"
