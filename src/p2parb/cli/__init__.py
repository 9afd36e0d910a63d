"""Command-line interface for the P2P arbitrage calculator."""
