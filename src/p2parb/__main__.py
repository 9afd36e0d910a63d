"""
Main entry point for running p2parb as a module.

Allows running with: python -m p2parb [command]
"""

from .cli.main import app

if __name__ == "__main__":
    app()
