"""Watchlist management commands for TradeMind CLI.

Handles watchlist operations including add, remove, toggle, list, delete and show.
Supports multiple watchlists; the default one is "My Watchlist".
"""

from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from trademind.models.watchlist import DEFAULT_WATCHLIST_ID

console = Console()


def _get_data_store():
    """Get the data store instance."""
    from trademind.config import get_db_path, load_config
    from trademind.db.store import DataStore

    return DataStore(get_db_path(load_config()))


def _known_symbols() -> set[str]:
    """Symbols of the configured catalog."""
    from trademind.config import get_catalog_path, load_config
    from trademind.market.catalog import catalog, catalog_from_file

    catalog_path = get_catalog_path(load_config())
    seeds = catalog_from_file(catalog_path) if catalog_path else catalog()
    return {seed.symbol for seed in seeds}


def _fail(message: str, e: Exception) -> None:
    console.print(Panel(
        f"[red]{message}:[/red]\n\n{str(e)}",
        title="[bold red]Error[/bold red]",
        border_style="red",
    ))
    raise SystemExit(1)


list_option = click.option(
    "--list", "list_id",
    default=DEFAULT_WATCHLIST_ID,
    help="ID of the watchlist (default: 'default').",
)


@click.group()
def watch() -> None:
    """Manage watchlists.

    Add, remove, and view symbols in your watchlists.

    \b
    Examples:
      trademind watch add AAPL             # Add to default watchlist
      trademind watch add BTC --list coins # Add to 'coins' watchlist
      trademind watch toggle TCS           # Add or remove
      trademind watch list                 # Show all watchlists
      trademind watch delete coins         # Delete the 'coins' watchlist
      trademind watch show                 # Live prices of the default list
    """
    pass


@watch.command("add")
@click.argument("symbol")
@list_option
def add_symbol(symbol: str, list_id: str) -> None:
    """Add a symbol to a watchlist.

    SYMBOL must be an instrument in the catalog (e.g., AAPL, INFY, ETH).
    """
    symbol = symbol.upper()

    try:
        if symbol not in _known_symbols():
            console.print(f"[red]Unknown symbol: {symbol}[/red]")
            raise SystemExit(1)

        store = _get_data_store()
        if not store.add_to_watchlist(symbol, list_id):
            console.print(f"[yellow]{symbol} is already in watchlist '{list_id}'[/yellow]")
            return

        console.print(f"[green]✓ Added {symbol} to watchlist '{list_id}'[/green]")

    except SystemExit:
        raise
    except Exception as e:
        _fail("Failed to add symbol", e)


@watch.command("remove")
@click.argument("symbol")
@list_option
def remove_symbol(symbol: str, list_id: str) -> None:
    """Remove a symbol from a watchlist."""
    symbol = symbol.upper()

    try:
        store = _get_data_store()
        if not store.remove_from_watchlist(symbol, list_id):
            console.print(f"[yellow]{symbol} is not in watchlist '{list_id}'[/yellow]")
            return

        console.print(f"[green]✓ Removed {symbol} from watchlist '{list_id}'[/green]")

    except Exception as e:
        _fail("Failed to remove symbol", e)


@watch.command("toggle")
@click.argument("symbol")
@list_option
def toggle_symbol(symbol: str, list_id: str) -> None:
    """Add a symbol if absent, remove it if present."""
    symbol = symbol.upper()

    try:
        if symbol not in _known_symbols():
            console.print(f"[red]Unknown symbol: {symbol}[/red]")
            raise SystemExit(1)

        if _get_data_store().toggle_watchlist(symbol, list_id):
            console.print(f"[green]✓ Added {symbol} to watchlist '{list_id}'[/green]")
        else:
            console.print(f"[green]✓ Removed {symbol} from watchlist '{list_id}'[/green]")

    except SystemExit:
        raise
    except Exception as e:
        _fail("Failed to toggle symbol", e)


@watch.command("list")
@click.option(
    "--list", "list_id",
    default=None,
    help="ID of the watchlist to display. If not specified, shows all watchlists.",
)
def list_watchlist(list_id: Optional[str]) -> None:
    """Display watchlist symbols."""
    try:
        store = _get_data_store()
        list_ids = [list_id] if list_id else store.get_watchlist_ids()

        if not list_ids:
            console.print(Panel(
                "[dim]No watchlists found. Use 'trademind watch add SYMBOL' to create one.[/dim]",
                title="[bold]Watchlists[/bold]",
                border_style="dim",
            ))
            return

        for wl_id in list_ids:
            watchlist = store.get_watchlist(wl_id)

            if not watchlist.symbols:
                console.print(Panel(
                    f"[dim]Watchlist '{watchlist.name}' is empty[/dim]",
                    title=f"[bold]Watchlist: {watchlist.name}[/bold]",
                    border_style="dim",
                ))
                continue

            table = Table(
                title=f"Watchlist: {watchlist.name} ({watchlist.id})",
                show_header=True,
                header_style="bold cyan",
            )
            table.add_column("#", style="dim", width=4)
            table.add_column("Symbol", style="bold")

            for i, symbol in enumerate(watchlist.symbols, 1):
                table.add_row(str(i), symbol)

            console.print(table)
            console.print(f"[dim]Total: {len(watchlist.symbols)} symbols[/dim]\n")

    except Exception as e:
        _fail("Failed to list watchlist", e)


@watch.command("delete")
@click.argument("list_id")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation.")
def delete_list(list_id: str, yes: bool) -> None:
    """Delete a watchlist and all its symbols.

    LIST_ID is the watchlist to delete (see 'trademind watch list').
    """
    try:
        store = _get_data_store()
        if list_id not in store.get_watchlist_ids():
            console.print(f"[yellow]No watchlist '{list_id}'[/yellow]")
            return

        if not yes and not click.confirm(f"Delete watchlist '{list_id}'?"):
            console.print("[dim]Cancelled.[/dim]")
            return

        store.delete_watchlist(list_id)
        console.print(f"[green]✓ Deleted watchlist '{list_id}'[/green]")

    except click.Abort:
        raise
    except Exception as e:
        _fail("Failed to delete watchlist", e)


@watch.command("show")
@list_option
def show_watchlist(list_id: str) -> None:
    """Show current simulated prices for a watchlist."""
    from trademind.cli.market import build_market_table
    from trademind.config import load_config
    from trademind.market import feed_from_config
    from trademind.market.screener import watchlisted

    try:
        watchlist = _get_data_store().get_watchlist(list_id)

        if not watchlist.symbols:
            console.print(Panel(
                "[dim]Your watchlist is empty. Add assets with 'trademind watch add SYMBOL'.[/dim]",
                title=f"[bold]{watchlist.name}[/bold]",
                border_style="dim",
            ))
            return

        feed = feed_from_config(load_config())
        states = watchlisted(feed.start(), watchlist.symbols)

        console.print(build_market_table(states, title=watchlist.name))
        console.print(f"[dim]Tracking {len(states)} assets[/dim]")

    except Exception as e:
        _fail("Failed to show watchlist", e)
