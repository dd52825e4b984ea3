"""Storymind CLI application - main entry point."""

import json
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel

from .helpers import connections_table, events_table, get_store, read_story_text, state_table

app = typer.Typer(
    name="storymind",
    help="Decompose stories into memory compartments and track patterns across sessions",
    no_args_is_help=True,
)

console = Console()


@app.command()
def version():
    """Show version information."""
    from storymind import __version__

    console.print(f"Storymind version {__version__}")


@app.command()
def process(
    story: Optional[Path] = typer.Argument(None, help="Story file to process ('-' reads stdin)"),
    text: Optional[str] = typer.Option(None, "--text", "-t", help="Story text given inline"),
    show_state: bool = typer.Option(True, "--state/--no-state", help="Show the final memory state"),
):
    """Process a story and store it as a new memory session.

    Examples:
        storymind process story.txt
        storymind process --text "Sarah walked into the coffee shop."
        cat story.txt | storymind process -
    """
    from storymind.processing import MemoryProcessor

    story_text = read_story_text(story, text, console)

    try:
        with get_store() as store:
            result = MemoryProcessor(store).process(story_text)
    except Exception as e:
        console.print(f"[red]Failed to process story: {e}[/red]")
        raise typer.Exit(1)

    console.print(events_table(result.events))
    if show_state:
        console.print(state_table(result.final_state))
    if result.cross_story_connections:
        console.print(connections_table(result.cross_story_connections))
    console.print(f"\n[green]✓ Stored session[/green] {result.session_id}")


@app.command()
def connections(
    session: Optional[str] = typer.Option(None, "--session", "-s", help="Only patterns seen in this session"),
):
    """List active cross-story connections, strongest first."""
    store = get_store()
    found = store.get_cross_story_connections(session)

    if not found:
        console.print("[yellow]No cross-story connections yet[/yellow]")
        return

    console.print(connections_table(found))


@app.command("query")
def query_memory_command(
    compartment: str = typer.Argument(help="Compartment to search (e.g. semantic, associative, flash)"),
    term: str = typer.Argument("", help="Text to look for (empty shows everything)"),
    session_id: Optional[str] = typer.Option(None, "--session", "-s", help="Session to query (default: latest)"),
    format: str = typer.Option("plain", "--format", "-f", help="Output format (plain, json)"),
):
    """Look up items in one memory compartment of a stored session.

    Examples:
        storymind query semantic coffee
        storymind query short_term capacity
        storymind query integration --session session_20251024T103000_1f2e3d4c
    """
    from rich.markup import escape

    from storymind.processing import query_memory

    sessions = get_store().get_session_history()
    if session_id:
        session = next((s for s in sessions if s.id == session_id), None)
    else:
        session = sessions[0] if sessions else None

    if session is None:
        if session_id:
            console.print(f"[red]Session '{session_id}' not found[/red]")
        else:
            console.print("[red]No sessions stored yet[/red]")
        raise typer.Exit(1)

    try:
        result = query_memory(session.memory_state, compartment, term)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    if format == "json":
        # Plain print to avoid Rich wrapping that breaks JSON
        print(json.dumps(result.model_dump(mode="json", by_alias=True), indent=2, ensure_ascii=False))
        return

    event = result.as_event()
    lines = [f"[dim]{escape(session.story_title)} ({session.id})[/dim]", f"[cyan]{escape(event.content)}[/cyan]", ""]
    if result.items:
        lines.extend(f"  • {escape(item)}" for item in result.items)
    else:
        lines.append("[yellow]No matching items[/yellow]")
    lines.extend(["", escape(result.explanation)])

    border = "green" if result.success else "yellow"
    console.print(Panel("\n".join(lines), title=f"{event.memory_type} ({event.action})", border_style=border))


@app.command()
def stats():
    """Show memory statistics."""
    statistics = get_store().get_memory_statistics()

    lines = [
        f"[cyan]Sessions:[/cyan] {statistics.total_sessions}",
        f"[cyan]Patterns:[/cyan] {statistics.total_patterns}",
    ]
    if statistics.strongest_connections:
        lines.append("\n[bold]Strongest connections:[/bold]")
        lines.extend(f"  {c.pattern} ({c.strength:.2f})" for c in statistics.strongest_connections)
    if statistics.memory_growth:
        lines.append("\n[bold]Memory growth:[/bold]")
        lines.extend(f"  {point.date}: {point.sessions}" for point in statistics.memory_growth)

    console.print(Panel("\n".join(lines), title="Memory Statistics", border_style="cyan"))


@app.command("export")
def export_memory(
    output: Optional[Path] = typer.Argument(None, help="File to write (prints to stdout if omitted)"),
):
    """Export all persisted memory as JSON."""
    data = get_store().export_memory_data()

    if output is None:
        # Plain print to avoid Rich wrapping that breaks JSON
        print(data)
        return

    try:
        output.write_text(data, encoding="utf-8")
    except OSError as e:
        console.print(f"[red]Failed to write {output}: {e}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]✓ Exported memory to[/green] {output}")


@app.command("import")
def import_memory(
    source: Path = typer.Argument(help="JSON file produced by 'storymind export'"),
):
    """Replace persisted memory with an exported JSON file."""
    try:
        payload = source.read_text(encoding="utf-8")
    except OSError as e:
        console.print(f"[red]Failed to read {source}: {e}[/red]")
        raise typer.Exit(1)

    with get_store() as store:
        if not store.import_memory_data(payload):
            console.print(f"[red]Invalid memory data in {source}; existing memory left unchanged[/red]")
            raise typer.Exit(1)
        statistics = store.get_memory_statistics()

    console.print(
        f"[green]✓ Imported {statistics.total_sessions} sessions and {statistics.total_patterns} patterns[/green]"
    )


@app.command()
def clear(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Erase all sessions, patterns and consolidated knowledge."""
    if not yes and not typer.confirm("Erase all persisted memory?"):
        console.print("[yellow]Aborted[/yellow]")
        raise typer.Exit(1)

    get_store().clear_all_memory()
    console.print("[green]✓ Memory cleared[/green]")


# Register subcommands from separate modules
from .config import config_app  # noqa: E402
from .history import history_app  # noqa: E402

app.add_typer(config_app, name="config")
app.add_typer(history_app, name="history")
