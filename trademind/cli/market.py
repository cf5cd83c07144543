"""Market view commands for TradeMind CLI.

Displays the simulated market: a filterable snapshot table, top movers,
single-instrument detail, and a live table refreshed on every tick.
"""

from typing import Optional

import click
from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table

from trademind.config import load_config
from trademind.market import MarketFeed, feed_from_config
from trademind.market.screener import (
    SORT_KEYS,
    VALID_PATTERNS,
    StockFilter,
    classify_trend,
    filter_instruments,
    range_position,
    sort_instruments,
    top_gainers,
    top_losers,
)
from trademind.models import InstrumentState
from trademind.utils.formatters import format_change, format_currency, format_large_number

console = Console()

MARKET_CHOICES = ["ALL", "USA", "INDIA", "CRYPTO"]
SPARK_CHARS = "▁▂▃▄▅▆▇█"


def sparkline(prices: list[float]) -> str:
    """Render prices as a unicode sparkline scaled to their own range."""
    if not prices:
        return ""
    low, high = min(prices), max(prices)
    span = high - low
    if span == 0:
        return SPARK_CHARS[len(SPARK_CHARS) // 2] * len(prices)
    last = len(SPARK_CHARS) - 1
    return "".join(SPARK_CHARS[round((p - low) / span * last)] for p in prices)


def _change_style(state: InstrumentState) -> tuple[str, str]:
    """Color and arrow for an instrument's direction."""
    if state.is_up:
        return "green", "▲"
    return "red", "▼"


def build_market_table(states: list[InstrumentState], title: str = "Market") -> Table:
    """Build the main instrument table."""
    table = Table(title=title, show_header=True, header_style="bold cyan")

    table.add_column("Symbol", style="bold")
    table.add_column("Market", style="dim")
    table.add_column("Name")
    table.add_column("Sector", style="dim")
    table.add_column("Price", justify="right")
    table.add_column("Change", justify="right")
    table.add_column("Volume", justify="right", style="dim")
    table.add_column("Mkt Cap", justify="right", style="dim")
    table.add_column("Trend")

    for state in states:
        color, arrow = _change_style(state)
        table.add_row(
            state.symbol,
            state.market.value,
            state.name,
            state.sector,
            format_currency(state.price, state.market),
            f"[{color}]{arrow} {abs(state.change_percent):.2f}%[/{color}]",
            format_large_number(state.volume),
            format_large_number(state.market_cap * 1_000_000_000),
            f"[{color}]{sparkline([p.price for p in state.history])}[/{color}]",
        )

    return table


def build_movers_table(states: list[InstrumentState], title: str, color: str) -> Table:
    """Build a compact gainers/losers table."""
    table = Table(title=title, show_header=True, header_style=f"bold {color}")
    table.add_column("Symbol", style="bold")
    table.add_column("Name", style="dim")
    table.add_column("Price", justify="right")
    table.add_column("Change %", justify="right")

    for state in states:
        table.add_row(
            state.symbol,
            state.name,
            format_currency(state.price, state.market),
            f"[{color}]{state.change_percent:+.2f}%[/{color}]",
        )

    return table


def build_quote_panel(state: InstrumentState) -> Panel:
    """Build the detail panel for one instrument."""
    color, arrow = _change_style(state)

    def price(value: float) -> str:
        return format_currency(value, state.market)

    quote_text = (
        f"[bold]{state.symbol}[/bold] [dim]{state.market.value}[/dim]  {state.name}\n"
        f"[dim]{state.sector}[/dim]\n\n"
        f"[bold white]Price:[/bold white]  {price(state.price)}\n"
        f"[bold white]Change:[/bold white] [{color}]{arrow} {format_change(state.change, state.change_percent)}[/{color}]\n"
        f"[bold white]Trend:[/bold white]  {classify_trend(state)}\n\n"
        f"[dim]Open (window):[/dim] {price(state.open_price)}\n"
        f"[dim]Volume:[/dim]        {state.volume:,}\n"
        f"[dim]Market Cap:[/dim]    {format_large_number(state.market_cap * 1_000_000_000)}\n"
        f"[dim]P/E Ratio:[/dim]     {state.pe_ratio:.2f}\n"
        f"[dim]52W Range:[/dim]     {price(state.low_52_week)} - {price(state.high_52_week)} "
        f"({range_position(state):.0f}%)\n\n"
        f"[{color}]{sparkline([p.price for p in state.history])}[/{color}]"
    )

    return Panel(
        quote_text,
        title=f"[bold {color}]Quote[/bold {color}]",
        border_style=color,
    )


def build_history_table(state: InstrumentState) -> Table:
    """Build the price history table for one instrument."""
    table = Table(title=f"{state.symbol} - last {len(state.history)} points", header_style="bold cyan")
    table.add_column("Time", style="dim")
    table.add_column("Price", justify="right")

    for point in state.history:
        table.add_row(point.time, format_currency(point.price, state.market))

    return table


def _start_feed(ticks: int) -> MarketFeed:
    """Build the configured feed, start it, and advance it ``ticks`` times."""
    feed = feed_from_config(load_config())
    feed.start()
    for _ in range(ticks):
        feed.step()
    return feed


def _error(message: str, e: Exception) -> None:
    console.print(Panel(
        f"[red]{message}:[/red]\n\n{str(e)}",
        title="[bold red]Error[/bold red]",
        border_style="red",
    ))
    raise SystemExit(1)


@click.command()
@click.option("-m", "--market", "market_name", default="ALL", type=click.Choice(MARKET_CHOICES, case_sensitive=False), help="Market to show (default: ALL).")
@click.option("-s", "--search", default="", help="Filter by symbol or name.")
@click.option("--sector", default="All", help="Filter by sector (default: All).")
@click.option("--sort", "sort_key", default="symbol", type=click.Choice(SORT_KEYS), help="Sort column (default: symbol).")
@click.option("--asc/--desc", "ascending", default=True, help="Sort direction.")
@click.option("--min-cap", default=0.0, type=float, help="Minimum market cap in billions.")
@click.option("--max-cap", default=10000.0, type=float, help="Maximum market cap in billions.")
@click.option("--min-volume", default=0, type=int, help="Minimum volume.")
@click.option("--pattern", default="All", type=click.Choice(VALID_PATTERNS), help="Trend pattern.")
@click.option("-t", "--ticks", default=0, type=int, help="Simulate this many ticks before showing.")
def market(
    market_name: str,
    search: str,
    sector: str,
    sort_key: str,
    ascending: bool,
    min_cap: float,
    max_cap: float,
    min_volume: int,
    pattern: str,
    ticks: int,
) -> None:
    """Show a snapshot of the simulated market.

    \b
    Examples:
      trademind market                      # Every instrument
      trademind market --market INDIA       # Indian equities only
      trademind market --search bank        # Symbol or name contains 'bank'
      trademind market --sort change_percent --desc
      trademind market --pattern Bullish --min-cap 100
    """
    try:
        feed = _start_feed(ticks)
        stock_filter = StockFilter(
            min_cap=min_cap,
            max_cap=max_cap,
            min_volume=min_volume,
            pattern=pattern,
        )
        states = filter_instruments(
            feed.snapshot,
            market=market_name,
            query=search,
            sector=sector,
            stock_filter=stock_filter,
        )
        states = sort_instruments(states, sort_key, descending=not ascending)
    except Exception as e:
        _error("Failed to load market", e)

    if not states:
        console.print(Panel(
            "[dim]No assets found matching your criteria.[/dim]",
            title="[bold]Market[/bold]",
            border_style="dim",
        ))
        return

    title = "Global Market" if market_name.upper() == "ALL" else f"{market_name.upper()} Market"
    console.print(build_market_table(states, title=title))
    console.print(f"[dim]Showing {len(states)} of {len(feed.snapshot)} instruments[/dim]")


@click.command()
@click.option("-n", "--count", default=5, type=int, help="Instruments per table (default: 5).")
@click.option("-m", "--market", "market_name", default="ALL", type=click.Choice(MARKET_CHOICES, case_sensitive=False), help="Market to rank (default: ALL).")
@click.option("-t", "--ticks", default=0, type=int, help="Simulate this many ticks before ranking.")
def movers(count: int, market_name: str, ticks: int) -> None:
    """Show top gainers and losers.

    \b
    Examples:
      trademind movers
      trademind movers --market CRYPTO -n 3
    """
    try:
        feed = _start_feed(ticks)
        states = filter_instruments(feed.snapshot, market=market_name)
    except Exception as e:
        _error("Failed to load market", e)

    console.print(build_movers_table(top_gainers(states, count), "Top Gainers", "green"))
    console.print(build_movers_table(top_losers(states, count), "Top Losers", "red"))


@click.command()
@click.argument("symbol")
@click.option("--history", "show_history", is_flag=True, help="Also print the price history window.")
@click.option("-t", "--ticks", default=0, type=int, help="Simulate this many ticks before showing.")
def quote(symbol: str, show_history: bool, ticks: int) -> None:
    """Display detail for one instrument.

    SYMBOL is the instrument symbol (e.g., AAPL, RELIANCE, BTC).

    \b
    Examples:
      trademind quote AAPL
      trademind quote BTC --history
    """
    symbol = symbol.upper()

    try:
        feed = _start_feed(ticks)
        state = feed.get(symbol)
    except KeyError:
        console.print(Panel(
            f"[red]Unknown symbol: {symbol}[/red]\n\n"
            "Run [cyan]trademind market[/cyan] to see available instruments.",
            title="[bold red]Error[/bold red]",
            border_style="red",
        ))
        raise SystemExit(1)
    except Exception as e:
        _error("Failed to get quote", e)

    console.print(build_quote_panel(state))
    if show_history:
        console.print(build_history_table(state))


@click.command()
@click.argument("symbols", nargs=-1)
@click.option("-i", "--interval", default=None, type=float, help="Seconds between ticks (default: from config, 3).")
@click.option("-n", "--ticks", default=None, type=int, help="Stop after this many ticks.")
def live(symbols: tuple[str, ...], interval: Optional[float], ticks: Optional[int]) -> None:
    """Watch the simulated market update live.

    SYMBOLS optionally restrict the table (e.g., AAPL TCS BTC).

    Press Ctrl+C to stop watching.

    \b
    Examples:
      trademind live
      trademind live AAPL TCS BTC
      trademind live --interval 1 --ticks 20
    """
    from rich.live import Live

    wanted = {s.upper() for s in symbols}

    try:
        feed = feed_from_config(load_config())
        if interval is not None:
            if interval <= 0:
                raise ValueError(f"Tick interval must be positive, got {interval}")
            feed.interval = interval
        unknown = wanted - set(feed.symbols())
        if unknown:
            raise KeyError(f"Unknown symbol(s): {', '.join(sorted(unknown))}")
    except Exception as e:
        _error("Failed to start feed", e)

    def render(snapshot) -> Group:
        states = [s for s in snapshot if not wanted or s.symbol in wanted]
        table = build_market_table(states, title="Live Market (Ctrl+C to stop)")
        return Group(table, f"[dim]Tick {feed.tick_count} · every {feed.interval:g}s[/dim]")

    console.print(f"[dim]Refreshing every {feed.interval:g}s...[/dim]\n")

    try:
        with Live(render(feed.start()), refresh_per_second=4, console=console) as live_display:
            feed.run(lambda snapshot: live_display.update(render(snapshot)), max_ticks=ticks)
    except KeyboardInterrupt:
        feed.stop()
        console.print("\n[dim]Stopped watching.[/dim]")
