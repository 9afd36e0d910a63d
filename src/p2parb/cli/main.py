"""
CLI application for the P2P arbitrage calculator.

Provides commands for running a calculation and inspecting its inputs.
"""

from decimal import Decimal
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..clients import ExchangeRateClient, P2PMarketClient
from ..config import get_config
from ..core import calculate_arbitrage
from ..errors import ArbitrageError, ErrorRecord, normalize_error
from ..logging_config import setup_logging
from ..models import Advertisement, ArbitrageRequest, ArbitrageResult, TradeSide

app = typer.Typer(
    name="p2parb",
    help="P2P Arbitrage - Buy crypto P2P in one fiat currency, sell it in another",
    add_completion=False,
)

console = Console()


@app.callback()
def main_callback(
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Override the configured log level"),
):
    """Initialize logging on startup."""
    setup_logging(log_level)


@app.command("calculate")
def calculate(
    amount: Optional[str] = typer.Option(None, "--amount", "-a", help="Amount of buy currency to spend"),
    buy_currency: Optional[str] = typer.Option(None, "--buy-currency", "-b", help="Fiat currency to buy with"),
    sell_currency: Optional[str] = typer.Option(None, "--sell-currency", "-s", help="Fiat currency to sell for"),
    asset: Optional[str] = typer.Option(None, "--asset", help="Asset to trade (e.g. USDT)"),
    buy_payment: Optional[str] = typer.Option(None, "--buy-payment", help="Payment method on the buy side"),
    sell_payment: Optional[str] = typer.Option(None, "--sell-payment", help="Payment method on the sell side"),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON"),
):
    """
    Calculate the arbitrage between buying and selling the asset P2P.

    Unset options fall back to the defaults in config.yaml.
    """
    config = get_config()

    try:
        request = ArbitrageRequest(
            asset=asset or config.default_asset,
            buy_amount=amount if amount is not None else str(config.default_buy_amount),
            buy_currency=buy_currency or config.default_buy_currency,
            sell_currency=sell_currency or config.default_sell_currency,
            payment_method_buy=buy_payment or config.buy_payment_method,
            payment_method_sell=sell_payment or config.sell_payment_method,
        )
    except ValidationError as e:
        console.print(f"[bold red]✗ Invalid request:[/bold red] {escape(str(e))}")
        raise typer.Exit(2)

    outcome = calculate_arbitrage(request, config)

    if as_json:
        console.print_json(data=outcome.to_dict())
    elif isinstance(outcome, ErrorRecord):
        _print_error(outcome)
    else:
        _print_result(request, outcome)

    if outcome.has_error:
        raise typer.Exit(1)


@app.command("rate")
def rate(
    from_currency: str = typer.Argument(..., help="Currency to convert from"),
    to_currency: str = typer.Argument(..., help="Currency to convert to"),
):
    """Show the spot fiat exchange rate between two currencies."""
    config = get_config()

    with ExchangeRateClient(config) as client:
        try:
            exchange_rate = client.get_rate(from_currency.upper(), to_currency.upper())
        except ArbitrageError as e:
            _print_error(normalize_error(e))
            raise typer.Exit(1)

    console.print(
        f"[bold]1 {exchange_rate.from_currency}[/bold] = "
        f"[bold green]{exchange_rate.rate} {exchange_rate.to_currency}[/bold green] "
        f"[dim](as of {exchange_rate.observed_at:%Y-%m-%d %H:%M} UTC)[/dim]"
    )


@app.command("ads")
def ads(
    side: TradeSide = typer.Argument(..., help="Order book side (BUY or SELL)"),
    currency: str = typer.Argument(..., help="Fiat currency of the order book"),
    amount: Optional[str] = typer.Option(None, "--amount", "-a", help="Transaction amount hint"),
    payment: Optional[str] = typer.Option(None, "--payment", "-p", help="Payment method"),
    asset: Optional[str] = typer.Option(None, "--asset", help="Asset to trade (e.g. USDT)"),
    limit: int = typer.Option(10, "--limit", "-l", help="Number of advertisements to show"),
):
    """
    List the ranked advertisements of one order book side.

    Advertisements are shown in the order the order book returned them.
    """
    config = get_config()

    if payment is None:
        payment = config.buy_payment_method if side == TradeSide.BUY else config.sell_payment_method

    try:
        hint = Decimal(amount) if amount is not None else Decimal(str(config.default_buy_amount))
    except ArithmeticError:
        console.print(f"[bold red]✗ Invalid amount: {escape(amount)}[/bold red]")
        raise typer.Exit(2)

    with P2PMarketClient(config) as client:
        try:
            advertisements = client.search(
                side,
                hint,
                payment,
                currency.upper(),
                (asset or config.default_asset).upper(),
            )
        except ArbitrageError as e:
            _print_error(normalize_error(e))
            raise typer.Exit(1)

    if not advertisements:
        console.print("[yellow]No advertisements found.[/yellow]")
        return

    _print_ads_table(advertisements[:limit], currency.upper())


@app.command("show-config")
def show_config():
    """Show the effective configuration."""
    config = get_config()

    table = Table(title="Configuration", show_header=True, header_style="bold cyan")
    table.add_column("Setting")
    table.add_column("Value")

    for key, value in config.model_dump().items():
        if key.endswith("api_key") and value:
            value = "********"
        table.add_row(key, str(value))

    console.print(table)


def _print_result(request: ArbitrageRequest, result: ArbitrageResult) -> None:
    """Print an arbitrage result as a table followed by its summary."""
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("", style="bold")
    table.add_column("Buy", justify="right")
    table.add_column("Sell", justify="right")

    table.add_row(
        "Price",
        f"{result.buy_price} {request.buy_currency}",
        f"{result.sell_price} {request.sell_currency}",
    )
    table.add_row("Advertiser", escape(result.buy_advertiser_name), escape(result.sell_advertiser_name))
    table.add_row("Advertiser ID", result.buy_advertiser_id, result.sell_advertiser_id)
    table.add_row(
        "Amount",
        f"{request.buy_amount} {request.buy_currency}",
        f"{result.sold_currency_amount} {request.sell_currency}",
    )

    console.print(table)
    console.print()

    for line in result.summary_text[:-1]:
        console.print(f"  {escape(line)}")

    profit_style = "bold green" if result.profit > 0 else "bold red"
    console.print(f"  [{profit_style}]{result.summary_text[-1]}[/{profit_style}]")


def _print_error(record: ErrorRecord) -> None:
    console.print(f"[bold red]✗ {escape(record.extended_text)}[/bold red]")


def _print_ads_table(advertisements: list[Advertisement], currency: str) -> None:
    """Print advertisements as a table."""
    table = Table(show_header=True, header_style="bold cyan")

    table.add_column("#", style="dim", width=3, justify="right")
    table.add_column("Advertiser")
    table.add_column(f"Price ({currency})", justify="right")
    table.add_column("Min", justify="right")
    table.add_column("Max", justify="right")
    table.add_column("Available", justify="right")
    table.add_column("Orders/30d", justify="right")

    for i, ad in enumerate(advertisements, 1):
        orders = str(ad.month_order_count) if ad.month_order_count is not None else "—"
        table.add_row(
            str(i),
            escape(ad.advertiser_name),
            f"[green]{ad.price}[/green]",
            str(ad.min_transaction_quantity),
            str(ad.max_transaction_quantity),
            str(ad.available_quantity),
            orders,
        )

    console.print(table)
