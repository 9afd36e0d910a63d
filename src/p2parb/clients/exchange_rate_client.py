"""
Fiat exchange rate API client.

Provides a wrapper around the exchangerate.host ``/convert`` endpoint.
"""

from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

import httpx

from ..config import Config, get_config
from ..errors import NoRateData, UpstreamUnavailable
from ..models import ExchangeRate
from ..logging_config import get_logger

logger = get_logger(__name__)


class ExchangeRateClient:
    """
    Client for the fiat exchange rate API.

    Looks up a single spot conversion rate per call. No caching, no retries.
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Initialize the exchange rate client.

        Args:
            config: Optional configuration override.
            transport: Optional httpx transport (used by tests).
        """
        self.config = config or get_config()
        self.base_url = self.config.exchange_rate_api_base_url.rstrip("/")
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
                },
                timeout=self.config.http_timeout_seconds,
                verify=self.config.verify_tls,
                transport=self._transport,
            )
        return self._client

    def _request(self, endpoint: str, params: dict[str, Any]) -> Any:
        """
        Make a GET request, translating transport failures.

        Raises:
            UpstreamUnavailable: On network or HTTP status errors.
            NoRateData: When the body is not JSON.
        """
        try:
            response = self.client.get(endpoint, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(
                f"HTTP error from exchange rate API: {e.response.status_code} - {e.response.text[:500]}"
            )
            raise UpstreamUnavailable(
                f"Exchange rate API returned HTTP {e.response.status_code}",
                upstream_code=str(e.response.status_code),
                upstream_message=e.response.reason_phrase,
            ) from e
        except httpx.RequestError as e:
            logger.error(f"Request error to exchange rate API: {e}")
            raise UpstreamUnavailable(
                "Exchange rate API is unreachable",
                upstream_code=type(e).__name__,
                upstream_message=str(e),
            ) from e

        try:
            return response.json()
        except ValueError as e:
            logger.error(f"Exchange rate API returned a non-JSON body: {response.text[:200]}")
            raise NoRateData("Exchange rate response is not valid JSON") from e

    def get_rate(self, from_currency: str, to_currency: str) -> ExchangeRate:
        """
        Fetch the spot rate for converting from_currency into to_currency.

        GET /convert?from=GBP&to=PKR

        Args:
            from_currency: Currency code being converted from.
            to_currency: Currency code being converted to.

        Returns:
            ExchangeRate with a positive rate.

        Raises:
            UpstreamUnavailable: The API could not be reached.
            NoRateData: The response carried no usable rate.
        """
        params: dict[str, Any] = {"from": from_currency, "to": to_currency}
        if self.config.exchange_rate_api_key:
            params["access_key"] = self.config.exchange_rate_api_key

        logger.debug(f"Fetching exchange rate {from_currency} -> {to_currency}")

        data = self._request("/convert", params)
        rate = self._parse_rate(data, from_currency, to_currency)

        logger.info(f"Exchange rate {from_currency} -> {to_currency}: {rate.rate}")
        return rate

    def _parse_rate(
        self,
        data: Any,
        from_currency: str,
        to_currency: str,
    ) -> ExchangeRate:
        """
        Parse a /convert response into an ExchangeRate.

        Args:
            data: Raw API response.
            from_currency: Requested source currency.
            to_currency: Requested target currency.

        Returns:
            ExchangeRate.
        """
        if not isinstance(data, dict):
            raise NoRateData("Exchange rate response is not an object")

        if data.get("success") is False:
            error = data.get("error") or {}
            if not isinstance(error, dict):
                error = {"info": str(error)}
            code = error.get("code") or error.get("type")
            message = error.get("info") or error.get("message") or error.get("type")
            logger.error(f"Exchange rate API error: {code} - {message}")
            raise NoRateData(
                f"No rate for {from_currency}/{to_currency}",
                upstream_code=str(code) if code is not None else None,
                upstream_message=message,
            )

        info = data.get("info") or {}
        raw_rate = info.get("rate") if isinstance(info, dict) else None

        # Some plans omit info.rate; derive it from the converted amount
        if raw_rate is None:
            query = data.get("query") or {}
            result = data.get("result")
            amount = query.get("amount") if isinstance(query, dict) else None
            if result is not None and amount:
                try:
                    raw_rate = Decimal(str(result)) / Decimal(str(amount))
                except (InvalidOperation, ZeroDivisionError):
                    raw_rate = None

        rate = self._to_decimal(raw_rate)
        if rate is None or rate <= 0:
            logger.error(f"Exchange rate response has no usable rate: {data}")
            raise NoRateData(f"No rate for {from_currency}/{to_currency}")

        return ExchangeRate(
            from_currency=from_currency,
            to_currency=to_currency,
            rate=rate,
            observed_at=self._parse_observed_at(data),
        )

    @staticmethod
    def _to_decimal(value: Any) -> Optional[Decimal]:
        """Convert a JSON number/string to Decimal, or None."""
        if value is None or isinstance(value, bool):
            return None
        try:
            result = Decimal(str(value))
        except InvalidOperation:
            return None
        return result if result.is_finite() else None

    @staticmethod
    def _parse_observed_at(data: dict[str, Any]) -> datetime:
        """Use the upstream timestamp or date if present, else now (UTC)."""
        info = data.get("info")
        timestamp = info.get("timestamp") if isinstance(info, dict) else None
        if isinstance(timestamp, (int, float)) and not isinstance(timestamp, bool):
            try:
                return datetime.fromtimestamp(timestamp, tz=timezone.utc)
            except (OverflowError, OSError, ValueError):
                logger.debug(f"Unusable exchange rate timestamp: {timestamp}")

        date = data.get("date")
        if isinstance(date, str):
            try:
                observed_at = datetime.fromisoformat(date)
            except ValueError:
                logger.debug(f"Unparseable exchange rate date: {date}")
            else:
                if observed_at.tzinfo is None:
                    observed_at = observed_at.replace(tzinfo=timezone.utc)
                return observed_at

        return datetime.now(timezone.utc)

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            self._client.close()
            self._client = None

    def __enter__(self) -> "ExchangeRateClient":
        return self

    def __exit__(self, *args) -> None:
        self.close()
