"""Configuration management CLI commands."""

import typer
from rich.console import Console

console = Console()

config_app = typer.Typer(help="Manage Storymind configuration")


@config_app.command("show")
def config_show():
    """Show current configuration."""
    from storymind.config import get_config_path, load_config

    config_path = get_config_path()
    config = load_config()

    console.print(f"[cyan]Configuration file:[/cyan] [dim]{config_path}[/dim]\n")
    console.print(f"[bold]Storage:[/bold] {config.resolved_storage_dir()} ({config.storage_key})\n")

    for name, value in config.model_dump(exclude={"storage_dir", "storage_key"}).items():
        console.print(f"  {name} = {value}")


@config_app.command("set")
def config_set(
    key: str = typer.Argument(help="Setting name (e.g., reinforcement_increment)"),
    value: str = typer.Argument(help="New value"),
):
    """Set a configuration value.

    Examples:
        storymind config set max_sessions 100
        storymind config set random_seed 42
    """
    from pydantic import ValidationError

    from storymind.config import Config, get_config_path, update_config

    if key not in Config.model_fields:
        console.print(f"[red]Unknown setting: {key}[/red]")
        raise typer.Exit(1)

    try:
        update_config(None, lambda cfg: setattr(cfg, key, value))
    except ValidationError as e:
        console.print(f"[red]Invalid value for {key}: {e.errors()[0]['msg']}[/red]")
        raise typer.Exit(1)

    console.print(f"[green]✓ {key} set to:[/green] {value}")
    console.print(f"[dim]Saved to: {get_config_path()}[/dim]")
