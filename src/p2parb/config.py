"""
Configuration management for the P2P arbitrage calculator.

Loads configuration from:
- .env file (API keys only - sensitive)
- config.yaml (all other settings)
"""

import os
from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field


# Load .env file from project root
def _find_project_root() -> Path:
    """Find the project root directory by looking for pyproject.toml."""
    current = Path(__file__).resolve().parent
    while current != current.parent:
        if (current / "pyproject.toml").exists():
            return current
        current = current.parent
    # Fallback to src parent
    return Path(__file__).resolve().parent.parent.parent


PROJECT_ROOT = _find_project_root()
load_dotenv(PROJECT_ROOT / ".env", override=True)


def _load_yaml_config(config_path: Optional[Path] = None) -> dict[str, Any]:
    """Load configuration from config.yaml."""
    config_path = config_path or PROJECT_ROOT / "config.yaml"
    if config_path.exists():
        with open(config_path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}
    return {}


class Config(BaseModel):
    """Application configuration."""

    # Fiat exchange rate API
    exchange_rate_api_base_url: str = Field(default="https://api.exchangerate.host")
    exchange_rate_api_key: Optional[str] = Field(default=None)

    # P2P order book API
    p2p_api_base_url: str = Field(default="https://p2p.binance.com")
    p2p_page_size: int = Field(default=20, gt=0)

    # HTTP transport
    http_timeout_seconds: float = Field(default=30.0, gt=0)
    verify_tls: bool = Field(default=True)

    # Request defaults used by the CLI
    default_asset: str = Field(default="USDT")
    default_buy_currency: str = Field(default="GBP")
    default_sell_currency: str = Field(default="PKR")
    default_buy_amount: float = Field(default=150.0, gt=0)
    buy_payment_method: str = Field(default="Wise")
    sell_payment_method: str = Field(default="BankTransfer")

    # Logging
    log_level: str = Field(default="INFO")


def load_config(config_path: Optional[Path] = None) -> Config:
    """Load configuration from .env (API keys) and config.yaml (settings)."""
    yaml_config = _load_yaml_config(config_path)

    return Config(
        # API key from .env only (sensitive)
        exchange_rate_api_key=os.getenv("EXCHANGE_RATE_API_KEY") or None,

        exchange_rate_api_base_url=yaml_config.get(
            "exchange_rate_api_base_url", "https://api.exchangerate.host"
        ),
        p2p_api_base_url=yaml_config.get("p2p_api_base_url", "https://p2p.binance.com"),
        p2p_page_size=int(yaml_config.get("p2p_page_size", 20)),
        http_timeout_seconds=float(yaml_config.get("http_timeout_seconds", 30.0)),
        verify_tls=yaml_config.get("verify_tls", True),
        default_asset=yaml_config.get("default_asset", "USDT"),
        default_buy_currency=yaml_config.get("default_buy_currency", "GBP"),
        default_sell_currency=yaml_config.get("default_sell_currency", "PKR"),
        default_buy_amount=float(yaml_config.get("default_buy_amount", 150)),
        buy_payment_method=yaml_config.get("buy_payment_method", "Wise"),
        sell_payment_method=yaml_config.get("sell_payment_method", "BankTransfer"),
        log_level=yaml_config.get("log_level", "INFO"),
    )


# Global config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = load_config()
    return _config
