"""Setup command for TradeMind CLI.

Creates the template configuration file.
"""

import click
from rich.console import Console
from rich.panel import Panel

from trademind.config import create_template_config, get_config_path, load_config, validate_config

console = Console()


@click.command()
@click.option("--force", is_flag=True, help="Overwrite an existing config file.")
def init(force: bool) -> None:
    """Create a template configuration file.

    \b
    Examples:
      trademind init
      trademind init --force
    """
    config_path = get_config_path()

    if config_path.exists() and not force:
        problems = validate_config(load_config(config_path))
        if problems:
            details = "\n".join(f"  • {p}" for p in problems)
            console.print(Panel(
                f"[yellow]Config exists at[/yellow] [cyan]{config_path}[/cyan]\n\n"
                f"Missing or invalid:\n{details}",
                title="[bold yellow]Config Incomplete[/bold yellow]",
                border_style="yellow",
            ))
        else:
            console.print(f"[green]✓ Config OK at {config_path}[/green]")
        return

    try:
        path = create_template_config(config_path)
    except OSError as e:
        console.print(Panel(
            f"[red]Failed to write config:[/red]\n\n{str(e)}",
            title="[bold red]Error[/bold red]",
            border_style="red",
        ))
        raise SystemExit(1)

    console.print(Panel(
        f"Template written to [cyan]{path}[/cyan]\n\n"
        "Add your OpenAI API key under [bold]\\[openai][/bold] to enable AI analysis.",
        title="[bold green]Config Created[/bold green]",
        border_style="green",
    ))
