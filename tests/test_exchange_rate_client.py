"""Tests for the fiat exchange rate client."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import httpx
import pytest

from p2parb.clients.exchange_rate_client import ExchangeRateClient
from p2parb.errors import NoRateData, UpstreamUnavailable


def _client(config, handler) -> ExchangeRateClient:
    return ExchangeRateClient(config, transport=httpx.MockTransport(handler))


def test_get_rate_parses_info_rate(config):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = request.url
        return httpx.Response(200, json={
            "success": True,
            "query": {"from": "GBP", "to": "PKR", "amount": 1},
            "info": {"rate": 350.25, "timestamp": 1700000000},
            "date": "2023-11-14",
            "result": 350.25,
        })

    with _client(config, handler) as client:
        rate = client.get_rate("GBP", "PKR")

    assert seen["url"].path == "/convert"
    assert seen["url"].params["from"] == "GBP"
    assert seen["url"].params["to"] == "PKR"
    assert "access_key" not in seen["url"].params
    assert rate.from_currency == "GBP"
    assert rate.to_currency == "PKR"
    assert rate.rate == Decimal("350.25")
    assert rate.observed_at == datetime.fromtimestamp(1700000000, tz=timezone.utc)


def test_get_rate_sends_access_key(config):
    config = config.model_copy(update={"exchange_rate_api_key": "secret"})
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["params"] = request.url.params
        return httpx.Response(200, json={"info": {"rate": 1.1}})

    with _client(config, handler) as client:
        client.get_rate("EUR", "USD")

    assert seen["params"]["access_key"] == "secret"


def test_get_rate_derives_rate_from_result(config):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={
            "query": {"from": "GBP", "to": "PKR", "amount": 2},
            "result": 701,
            "date": "2024-03-01",
        })

    with _client(config, handler) as client:
        rate = client.get_rate("GBP", "PKR")

    assert rate.rate == Decimal("350.5")
    assert rate.observed_at == datetime(2024, 3, 1, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "body",
    [
        {"success": True, "info": {}},
        {"success": True, "info": {"rate": None}},
        {"success": True, "info": {"rate": 0}},
        {"success": True, "info": {"rate": "not-a-number"}},
        {"success": True},
    ],
)
def test_missing_rate_raises_no_rate_data(config, body):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=body)

    with _client(config, handler) as client:
        with pytest.raises(NoRateData):
            client.get_rate("GBP", "PKR")


def test_api_error_body_raises_no_rate_data_with_details(config):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={
            "success": False,
            "error": {"code": 101, "type": "missing_access_key", "info": "You have not supplied an API Access Key."},
        })

    with _client(config, handler) as client:
        with pytest.raises(NoRateData) as excinfo:
            client.get_rate("GBP", "PKR")

    assert excinfo.value.upstream_code == "101"
    assert excinfo.value.upstream_message == "You have not supplied an API Access Key."


def test_non_json_body_raises_no_rate_data(config):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>maintenance</html>")

    with _client(config, handler) as client:
        with pytest.raises(NoRateData):
            client.get_rate("GBP", "PKR")


def test_transport_error_raises_upstream_unavailable(config):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with _client(config, handler) as client:
        with pytest.raises(UpstreamUnavailable) as excinfo:
            client.get_rate("GBP", "PKR")

    assert excinfo.value.upstream_code == "ConnectError"
    assert "connection refused" in excinfo.value.upstream_message


def test_http_status_error_raises_upstream_unavailable(config):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="unavailable")

    with _client(config, handler) as client:
        with pytest.raises(UpstreamUnavailable) as excinfo:
            client.get_rate("GBP", "PKR")

    assert excinfo.value.upstream_code == "503"


def test_close_releases_http_client(config):
    client = _client(config, lambda request: httpx.Response(200, json={"info": {"rate": 1}}))
    client.get_rate("GBP", "EUR")
    assert client._client is not None

    client.close()

    assert client._client is None


def test_unusable_timestamp_falls_back_to_date(config):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={
            "info": {"rate": 350, "timestamp": 10 ** 20},
            "date": "2024-03-01",
        })

    with _client(config, handler) as client:
        rate = client.get_rate("GBP", "PKR")

    assert rate.observed_at == datetime(2024, 3, 1, tzinfo=timezone.utc)


def test_unusable_timestamp_without_date_uses_fetch_time(config):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"info": {"rate": 350, "timestamp": -10 ** 20}})

    before = datetime.now(timezone.utc)
    with _client(config, handler) as client:
        rate = client.get_rate("GBP", "PKR")

    assert rate.observed_at >= before


def test_date_keeps_explicit_offset(config):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"info": {"rate": 350}, "date": "2024-03-01T12:00:00+05:00"})

    with _client(config, handler) as client:
        rate = client.get_rate("GBP", "PKR")

    assert rate.observed_at == datetime(2024, 3, 1, 7, 0, tzinfo=timezone.utc)
    assert rate.observed_at.utcoffset() == timedelta(hours=5)
