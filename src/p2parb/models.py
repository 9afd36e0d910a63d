"""
Domain models for the P2P arbitrage calculator.

Advertisements and exchange rates are immutable snapshots of upstream data;
requests are validated with pydantic at the boundary; results are plain
dataclasses handed back to whatever renders them.
"""

import enum
from dataclasses import dataclass, field
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


MONEY_PRECISION = Decimal("0.01")
WHOLE_UNIT = Decimal("1")


def round_money(value: Decimal) -> Decimal:
    """Round a currency amount to 2 decimal places, half away from zero."""
    return value.quantize(MONEY_PRECISION, rounding=ROUND_HALF_UP)


def round_whole(value: Decimal) -> Decimal:
    """Round a currency amount to a whole unit, half away from zero."""
    return value.quantize(WHOLE_UNIT, rounding=ROUND_HALF_UP)


def _plain(value: Decimal) -> str:
    # Fixed-point, never scientific notation
    return format(value, "f")


class TradeSide(str, enum.Enum):
    """Direction of the order book being queried."""
    BUY = "BUY"
    SELL = "SELL"


@dataclass(frozen=True)
class ExchangeRate:
    """Spot fiat conversion rate."""
    from_currency: str
    to_currency: str
    rate: Decimal
    observed_at: datetime


@dataclass(frozen=True)
class Advertisement:
    """A single P2P order book listing."""
    side: TradeSide
    price: Decimal  # Fiat per unit of asset
    min_transaction_quantity: Decimal
    max_transaction_quantity: Decimal
    available_quantity: Decimal
    advertiser_id: str
    advertiser_name: str
    # Display-only fields, never used for selection
    trade_type: Optional[str] = None
    fiat_symbol: Optional[str] = None
    month_order_count: Optional[int] = None
    month_finish_rate: Optional[float] = None

    def accepts_quantity(self, quantity: Decimal) -> bool:
        """Whether quantity lies strictly inside the advertiser's limits."""
        return self.min_transaction_quantity < quantity < self.max_transaction_quantity


class ArbitrageRequest(BaseModel):
    """Validated input for one arbitrage calculation."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    asset: str = Field(default="USDT", min_length=1)
    buy_amount: Decimal = Field(gt=0)
    buy_currency: str = Field(min_length=1)
    sell_currency: str = Field(min_length=1)
    payment_method_buy: str = Field(default="Wise", min_length=1)
    payment_method_sell: str = Field(default="BankTransfer", min_length=1)

    @field_validator("asset", "buy_currency", "sell_currency")
    @classmethod
    def _upper_code(cls, value: str) -> str:
        return value.upper()


@dataclass(frozen=True)
class ArbitrageResult:
    """Outcome of one successful arbitrage calculation."""
    asset: str
    buy_price: Decimal
    buy_advertiser_id: str
    buy_advertiser_name: str
    bought_asset_amount: Decimal
    sell_price: Decimal
    sell_advertiser_id: str
    sell_advertiser_name: str
    sold_currency_amount: Decimal
    fiat_rate: Decimal
    fiat_total_amount: Decimal
    profit: Decimal
    summary_text: list[str] = field(default_factory=list)
    has_error: bool = False

    def to_dict(self) -> dict[str, Any]:
        """JSON payload for the boundary layer."""
        return {
            "asset": self.asset,
            "buyPrice": _plain(self.buy_price),
            "boughtAssetAmount": _plain(self.bought_asset_amount),
            "buyAdvId": self.buy_advertiser_id,
            "buyAdvertiser": self.buy_advertiser_name,
            "sellPrice": _plain(self.sell_price),
            "soldCurrencyAmount": _plain(self.sold_currency_amount),
            "sellAdvId": self.sell_advertiser_id,
            "sellAdvertiser": self.sell_advertiser_name,
            "fiatRate": _plain(self.fiat_rate),
            "fiatTotalAmount": _plain(self.fiat_total_amount),
            "profit": _plain(self.profit),
            "summary": list(self.summary_text),
            "hasError": self.has_error,
        }
