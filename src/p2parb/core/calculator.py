"""
Arbitrage calculator.

Runs one buy-in-one-currency, sell-in-another calculation:

    exchange rate -> buy-side order book -> sell-side order book -> result

Each stage feeds the next and the first failing stage ends the run. The
outcome is always returned, never raised: an ArbitrageResult on success, an
ErrorRecord otherwise.
"""

from decimal import Decimal
from typing import Optional, Union

from ..clients.exchange_rate_client import ExchangeRateClient
from ..clients.p2p_client import P2PMarketClient
from ..config import Config, get_config
from ..errors import ArbitrageError, ErrorRecord, normalize_error
from ..logging_config import get_logger
from ..models import (
    Advertisement,
    ArbitrageRequest,
    ArbitrageResult,
    ExchangeRate,
    TradeSide,
    round_money,
    round_whole,
)
from .selector import select_buy_advertisement, select_sell_advertisement

logger = get_logger(__name__)

ArbitrageOutcome = Union[ArbitrageResult, ErrorRecord]


class ArbitrageCalculator:
    """
    Orchestrates the rate lookup, both order book searches and the arithmetic.

    Holds no per-calculation state, so one instance can serve many requests.
    """

    def __init__(
        self,
        rate_client: ExchangeRateClient,
        p2p_client: P2PMarketClient,
    ):
        self.rate_client = rate_client
        self.p2p_client = p2p_client

    def calculate(self, request: ArbitrageRequest) -> ArbitrageOutcome:
        """
        Run the full pipeline for one request.

        Args:
            request: Validated arbitrage request.

        Returns:
            ArbitrageResult, or the ErrorRecord of the first failing stage.
        """
        logger.info(
            f"Calculating {request.asset} arbitrage: {request.buy_amount} "
            f"{request.buy_currency} -> {request.sell_currency}"
        )

        try:
            rate = self._fetch_rate(request)
            fiat_total_amount = round_whole(request.buy_amount * rate.rate)

            buy_ad = self._select_buy(request)
            bought_asset_amount = request.buy_amount / buy_ad.price

            sell_ad = self._select_sell(request, fiat_total_amount, bought_asset_amount)
            sold_currency_amount = bought_asset_amount * sell_ad.price

            result = self._assemble(
                request,
                rate,
                fiat_total_amount,
                buy_ad,
                bought_asset_amount,
                sell_ad,
                sold_currency_amount,
            )

        except ArbitrageError as e:
            logger.warning(f"Arbitrage calculation failed: {e.code} - {e.message}")
            return normalize_error(e)
        except Exception as e:
            logger.exception(f"Unexpected error during arbitrage calculation: {e}")
            return normalize_error(e)

        logger.info(result.summary_text[-1])
        return result

    def _fetch_rate(self, request: ArbitrageRequest) -> ExchangeRate:
        return self.rate_client.get_rate(request.buy_currency, request.sell_currency)

    def _select_buy(self, request: ArbitrageRequest) -> Advertisement:
        buy_ads = self.p2p_client.search(
            TradeSide.BUY,
            request.buy_amount,
            request.payment_method_buy,
            request.buy_currency,
            request.asset,
        )
        return select_buy_advertisement(buy_ads)

    def _select_sell(
        self,
        request: ArbitrageRequest,
        fiat_total_amount: Decimal,
        bought_asset_amount: Decimal,
    ) -> Advertisement:
        sell_ads = self.p2p_client.search(
            TradeSide.SELL,
            fiat_total_amount,
            request.payment_method_sell,
            request.sell_currency,
            request.asset,
        )
        return select_sell_advertisement(sell_ads, bought_asset_amount)

    @staticmethod
    def _assemble(
        request: ArbitrageRequest,
        rate: ExchangeRate,
        fiat_total_amount: Decimal,
        buy_ad: Advertisement,
        bought_asset_amount: Decimal,
        sell_ad: Advertisement,
        sold_currency_amount: Decimal,
    ) -> ArbitrageResult:
        """Build the result and its human-readable summary lines."""
        profit = round_money(sold_currency_amount - fiat_total_amount)
        sold_rounded = round_money(sold_currency_amount)
        bought_rounded = round_money(bought_asset_amount)

        summary = [
            f"{request.buy_amount} {request.buy_currency} = {fiat_total_amount} "
            f"{request.sell_currency} at a rate of {rate.rate}",
            f"Buy {bought_rounded} {request.asset} at {buy_ad.price} {request.buy_currency} "
            f"from {buy_ad.advertiser_name} ({buy_ad.advertiser_id})",
            f"Sell {bought_rounded} {request.asset} at {sell_ad.price} {request.sell_currency} "
            f"to {sell_ad.advertiser_name} ({sell_ad.advertiser_id}) for {sold_rounded} "
            f"{request.sell_currency}",
            f"Profit: {profit} {request.sell_currency}",
        ]

        return ArbitrageResult(
            asset=request.asset,
            buy_price=buy_ad.price,
            buy_advertiser_id=buy_ad.advertiser_id,
            buy_advertiser_name=buy_ad.advertiser_name,
            bought_asset_amount=bought_asset_amount,
            sell_price=sell_ad.price,
            sell_advertiser_id=sell_ad.advertiser_id,
            sell_advertiser_name=sell_ad.advertiser_name,
            sold_currency_amount=sold_rounded,
            fiat_rate=rate.rate,
            fiat_total_amount=fiat_total_amount,
            profit=profit,
            summary_text=summary,
        )


def calculate_arbitrage(
    request: ArbitrageRequest,
    config: Optional[Config] = None,
) -> ArbitrageOutcome:
    """
    Run one calculation against the live APIs.

    Opens both HTTP clients for the duration of the call.

    Args:
        request: Validated arbitrage request.
        config: Optional configuration override.

    Returns:
        ArbitrageResult or ErrorRecord.
    """
    config = config or get_config()

    with ExchangeRateClient(config) as rate_client, P2PMarketClient(config) as p2p_client:
        calculator = ArbitrageCalculator(rate_client, p2p_client)
        return calculator.calculate(request)
