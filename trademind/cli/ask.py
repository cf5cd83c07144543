"""AI commands for TradeMind CLI.

Sends simulated instrument data to the Market Analyst Agent for
technical or fundamental write-ups, and answers free-form questions.
"""

from typing import Optional

import click
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel

from trademind.config import get_config_path, get_openai_key, load_config

console = Console()


def _require_api_key(config: dict) -> str:
    """Return the OpenAI key or exit with a configuration error."""
    api_key = get_openai_key(config)
    if not api_key:
        console.print(Panel(
            "[red]OpenAI API key not configured.[/red]\n\n"
            "Please add your OpenAI API key to:\n"
            f"[cyan]{get_config_path()}[/cyan]\n"
            "or set the [cyan]OPENAI_API_KEY[/cyan] environment variable.",
            title="[bold red]Configuration Error[/bold red]",
            border_style="red",
        ))
        raise SystemExit(1)
    return api_key


def _create_analyst(config: dict):
    """Configure the SDK and build the analyst agent."""
    from trademind.agents import MarketAnalystAgent, configure_api_key

    configure_api_key(_require_api_key(config))
    model = config.get("openai", {}).get("model") or None
    return MarketAnalystAgent(model=model)


def _agent_error(e: Exception) -> None:
    console.print(Panel(
        f"[red]Error generating analysis: {e}[/red]\n\n"
        "[dim]Please check your API key configuration.[/dim]",
        title="[bold red]Error[/bold red]",
        border_style="red",
    ))
    raise SystemExit(1)


@click.command()
@click.argument("symbol")
@click.option("-f", "--fundamental", is_flag=True, help="Fundamental snapshot instead of technical analysis.")
@click.option("--refresh", is_flag=True, help="Ignore cached analysis.")
def analyze(symbol: str, fundamental: bool, refresh: bool) -> None:
    """Ask the AI analyst about an instrument.

    SYMBOL is the instrument symbol (e.g., AAPL, RELIANCE, BTC).

    \b
    Examples:
      trademind analyze NVDA
      trademind analyze INFY --fundamental
      trademind analyze BTC --refresh
    """
    from trademind.config import get_db_path, get_seed
    from trademind.db.store import DataStore
    from trademind.market import feed_from_config

    config = load_config()
    symbol = symbol.upper()
    kind = "fundamental" if fundamental else "technical"

    try:
        feed = feed_from_config(config)
        feed.start()
        state = feed.get(symbol)
    except KeyError:
        console.print(f"[red]Unknown symbol: {symbol}[/red]")
        raise SystemExit(1)
    except ValueError as e:
        console.print(f"[red]Failed to load market: {e}[/red]")
        raise SystemExit(1)

    # cache entries are per seed; unseeded runs are never cached
    seed = get_seed(config)
    cache_kind = f"{kind}:seed={seed}" if seed is not None else None

    store = DataStore(get_db_path(config))
    if cache_kind and not refresh:
        cached = store.get_cached_analysis(symbol, cache_kind)
        if cached:
            console.print(Panel(
                Markdown(cached),
                title=f"[bold cyan]{kind.title()} Analysis: {symbol}[/bold cyan] [dim](cached)[/dim]",
                border_style="cyan",
            ))
            return

    analyst = _create_analyst(config)
    console.print(f"[dim]Analyzing {symbol} ({kind})...[/dim]\n")

    try:
        if kind == "fundamental":
            response = analyst.fundamental_analysis(state)
        else:
            response = analyst.technical_analysis(state)
    except Exception as e:
        _agent_error(e)

    if cache_kind:
        store.cache_analysis(symbol, cache_kind, response)

    console.print(Panel(
        Markdown(response),
        title=f"[bold cyan]{kind.title()} Analysis: {symbol}[/bold cyan]",
        border_style="cyan",
    ))


@click.command()
@click.argument("query")
@click.option("-s", "--symbol", default=None, help="Instrument you are looking at, passed as context.")
def ask(query: str, symbol: Optional[str]) -> None:
    """Ask the TradeMind assistant a question.

    QUERY is your natural language question.

    \b
    Examples:
      trademind ask "What does a P/E ratio tell me?"
      trademind ask "Is this a good entry?" --symbol TSLA
    """
    from trademind.agents.analyst import GREETING, describe_instrument
    from trademind.market import feed_from_config

    config = load_config()
    context = None

    if symbol:
        try:
            feed = feed_from_config(config)
            feed.start()
            context = describe_instrument(feed.get(symbol))
        except KeyError:
            console.print(f"[red]Unknown symbol: {symbol.upper()}[/red]")
            raise SystemExit(1)
        except ValueError as e:
            console.print(f"[red]Failed to load market: {e}[/red]")
            raise SystemExit(1)

    analyst = _create_analyst(config)
    console.print(f"[dim]{GREETING}[/dim]\n")

    try:
        response = analyst.chat(query, context=context)
    except Exception as e:
        _agent_error(e)

    console.print(Panel(
        Markdown(response),
        title="[bold cyan]TradeMind AI[/bold cyan]",
        border_style="cyan",
    ))
