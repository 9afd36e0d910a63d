"""
P2P order book API client.

Provides a wrapper around the Binance P2P advertisement search endpoint.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Union

import httpx

from ..config import Config, get_config
from ..errors import UpstreamRejected, UpstreamUnavailable
from ..models import Advertisement, TradeSide
from ..logging_config import get_logger

logger = get_logger(__name__)

SEARCH_ENDPOINT = "/bapi/c2c/v2/friendly/c2c/adv/search"
SUCCESS_CODE = "000000"


class P2PMarketClient:
    """
    Client for the P2P advertisement order book.

    Each search returns one page of advertisements in the order the
    order book ranked them.
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Initialize the P2P client.

        Args:
            config: Optional configuration override.
            transport: Optional httpx transport (used by tests).
        """
        self.config = config or get_config()
        self.base_url = self.config.p2p_api_base_url.rstrip("/")
        self.page_size = self.config.p2p_page_size
        self._transport = transport
        self._client: Optional[httpx.Client] = None

    @property
    def client(self) -> httpx.Client:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.Client(
                base_url=self.base_url,
                headers={
                    "User-Agent": "P2PArb/1.0",
                    "Accept": "application/json",
                    "Content-Type": "application/json",
                },
                timeout=self.config.http_timeout_seconds,
                verify=self.config.verify_tls,
                transport=self._transport,
            )
        return self._client

    def _request(self, payload: dict[str, Any]) -> dict[str, Any]:
        """
        POST a search payload and validate the response envelope.

        Raises:
            UpstreamUnavailable: On network or HTTP status errors.
            UpstreamRejected: When the response signals failure.
        """
        try:
            response = self.client.post(SEARCH_ENDPOINT, json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"HTTP error from P2P API: {e.response.status_code} - {e.response.text[:500]}")
            raise UpstreamUnavailable(
                f"P2P API returned HTTP {e.response.status_code}",
                upstream_code=str(e.response.status_code),
                upstream_message=e.response.reason_phrase,
            ) from e
        except httpx.RequestError as e:
            logger.error(f"Request error to P2P API: {e}")
            raise UpstreamUnavailable(
                "P2P API is unreachable",
                upstream_code=type(e).__name__,
                upstream_message=str(e),
            ) from e

        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"P2P API returned a non-JSON body: {response.text[:200]}")
            raise UpstreamRejected("P2P response is not valid JSON") from e

        if not isinstance(data, dict):
            raise UpstreamRejected("P2P response is not an object")

        code = data.get("code")
        if (code is not None and str(code) != SUCCESS_CODE) or data.get("success") is False:
            message = data.get("message") or data.get("messageDetail") or "Unknown error"
            logger.error(f"P2P API error: {code} - {message}")
            raise UpstreamRejected(
                "P2P order book search was rejected",
                upstream_code=str(code) if code is not None else None,
                upstream_message=message,
            )

        return data

    def search(
        self,
        side: TradeSide,
        amount: Union[Decimal, int, float],
        payment_method: str,
        currency: str,
        asset: str,
    ) -> list[Advertisement]:
        """
        Search the order book for one trade side.

        POST /bapi/c2c/v2/friendly/c2c/adv/search

        Args:
            side: BUY to find ads to buy the asset from, SELL to sell it to.
            amount: Transaction size hint in fiat.
            payment_method: Payment method identifier (e.g. "Wise").
            currency: Fiat currency code.
            asset: Asset code (e.g. "USDT").

        Returns:
            Advertisements in the order returned by the order book.

        Raises:
            UpstreamUnavailable: The API could not be reached.
            UpstreamRejected: The API reported a failure.
        """
        side = TradeSide(side)
        payload = {
            "proMerchantAds": False,
            "page": 1,
            "rows": self.page_size,
            "payTypes": [payment_method],
            "countries": [],
            "publisherType": None,
            "asset": asset,
            "fiat": currency,
            "tradeType": side.value,
            "transAmount": str(amount),
        }

        logger.debug(f"Searching P2P {side.value} {asset}/{currency} via {payment_method}: {amount}")

        data = self._request(payload)
        ads = self._parse_advertisements(data, side)

        logger.info(f"Fetched {len(ads)} {side.value} advertisements for {asset}/{currency}")
        return ads

    def _parse_advertisements(
        self,
        data: dict[str, Any],
        side: TradeSide,
    ) -> list[Advertisement]:
        """
        Parse a search response into Advertisements, keeping upstream order.

        Args:
            data: Raw API response.
            side: The side that was queried.

        Returns:
            List of Advertisement.
        """
        raw_ads = data.get("data")
        if raw_ads is None:
            return []
        if not isinstance(raw_ads, list):
            raise UpstreamRejected("P2P response data is not a list")

        ads: list[Advertisement] = []

        for raw in raw_ads:
            try:
                adv = raw["adv"]
                advertiser = raw.get("advertiser") or {}
                if not isinstance(adv, dict) or not isinstance(advertiser, dict):
                    raise TypeError("adv and advertiser must be objects")

                price = _decimal(adv["price"])
                if price <= 0:
                    logger.warning(f"Skipping advertisement with non-positive price: {adv.get('advNo')}")
                    continue

                ads.append(Advertisement(
                    side=side,
                    price=price,
                    min_transaction_quantity=_decimal(adv.get("minSingleTransQuantity", 0)),
                    max_transaction_quantity=_decimal(adv.get("maxSingleTransQuantity", 0)),
                    available_quantity=_decimal(
                        adv.get("surplusAmount", adv.get("tradableQuantity", 0))
                    ),
                    advertiser_id=str(advertiser.get("userNo") or ""),
                    advertiser_name=str(advertiser.get("nickName") or ""),
                    trade_type=adv.get("tradeType"),
                    fiat_symbol=adv.get("fiatSymbol"),
                    month_order_count=advertiser.get("monthOrderCount"),
                    month_finish_rate=advertiser.get("monthFinishRate"),
                ))

            except (AttributeError, KeyError, TypeError, InvalidOperation) as e:
                logger.warning(f"Failed to parse P2P advertisement: {e}")
                continue

        return ads

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            self._client.close()
            self._client = None

    def __enter__(self) -> "P2PMarketClient":
        return self

    def __exit__(self, *args) -> None:
        self.close()


def _decimal(value: Any) -> Decimal:
    """Convert a JSON number or numeric string to a finite Decimal."""
    if value is None or isinstance(value, bool):
        raise TypeError(f"not a number: {value!r}")
    result = Decimal(str(value))
    if not result.is_finite():
        raise InvalidOperation(f"not a finite number: {value!r}")
    return result
