"""
Core business logic for the P2P arbitrage calculator.

Provides advertisement selection and the arbitrage calculator.
"""

from .calculator import ArbitrageCalculator, ArbitrageOutcome, calculate_arbitrage
from .selector import select_buy_advertisement, select_sell_advertisement

__all__ = [
    "ArbitrageCalculator",
    "ArbitrageOutcome",
    "calculate_arbitrage",
    "select_buy_advertisement",
    "select_sell_advertisement",
]
