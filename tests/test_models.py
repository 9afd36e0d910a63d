"""Tests for the domain models."""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from p2parb.models import ArbitrageRequest, ArbitrageResult, round_money, round_whole

from .fakes import make_ad


def test_request_defaults_and_normalization():
    request = ArbitrageRequest(buy_amount="150", buy_currency=" gbp ", sell_currency="pkr")

    assert request.asset == "USDT"
    assert request.buy_amount == Decimal("150")
    assert request.buy_currency == "GBP"
    assert request.sell_currency == "PKR"
    assert request.payment_method_buy == "Wise"
    assert request.payment_method_sell == "BankTransfer"


@pytest.mark.parametrize("amount", ["0", "-5", "abc"])
def test_request_rejects_non_positive_amount(amount):
    with pytest.raises(ValidationError):
        ArbitrageRequest(buy_amount=amount, buy_currency="GBP", sell_currency="PKR")


@pytest.mark.parametrize("field", ["buy_currency", "sell_currency", "asset"])
def test_request_rejects_empty_codes(field):
    fields = {"buy_amount": "150", "buy_currency": "GBP", "sell_currency": "PKR"}
    fields[field] = "  "
    with pytest.raises(ValidationError):
        ArbitrageRequest(**fields)


def test_request_is_immutable():
    request = ArbitrageRequest(buy_amount="150", buy_currency="GBP", sell_currency="PKR")
    with pytest.raises(ValidationError):
        request.buy_amount = Decimal("1")


@pytest.mark.parametrize(
    "value, expected",
    [("2214.285", "2214.29"), ("-2214.285", "-2214.29"), ("0.004", "0.00"), ("10", "10.00")],
)
def test_round_money_is_half_away_from_zero(value, expected):
    assert str(round_money(Decimal(value))) == expected


@pytest.mark.parametrize("value, expected", [("52499.5", "52500"), ("12.49", "12"), ("-0.5", "-1")])
def test_round_whole(value, expected):
    assert str(round_whole(Decimal(value))) == expected


@pytest.mark.parametrize(
    "quantity, accepted",
    [("20", False), ("20.0001", True), ("29.9999", True), ("30", False), ("5", False)],
)
def test_advertisement_window_is_exclusive(quantity, accepted):
    ad = make_ad("350", 20, 30)
    assert ad.accepts_quantity(Decimal(quantity)) is accepted


def test_result_to_dict_uses_plain_notation():
    result = ArbitrageResult(
        asset="USDT",
        buy_price=Decimal("1.00"),
        buy_advertiser_id="u1",
        buy_advertiser_name="alice",
        bought_asset_amount=Decimal("150") / Decimal("1.00"),
        sell_price=Decimal("360"),
        sell_advertiser_id="u2",
        sell_advertiser_name="bob",
        sold_currency_amount=Decimal("54000.00"),
        fiat_rate=Decimal("350"),
        fiat_total_amount=Decimal("52500"),
        profit=Decimal("1500.00"),
        summary_text=["a", "b", "c", "d"],
    )

    payload = result.to_dict()

    assert payload["boughtAssetAmount"] == "150"
    assert payload["buyAdvId"] == "u1"
    assert payload["sellAdvertiser"] == "bob"
    assert payload["fiatTotalAmount"] == "52500"
    assert payload["profit"] == "1500.00"
    assert payload["summary"] == ["a", "b", "c", "d"]
    assert payload["hasError"] is False
