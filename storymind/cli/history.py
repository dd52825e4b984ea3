"""Session history CLI commands."""

import json

import typer
from rich.console import Console
from rich.table import Table

from .helpers import get_store, state_table

console = Console()

history_app = typer.Typer(help="Browse stored memory sessions")


@history_app.command("list")
def history_list(
    limit: int = typer.Option(20, "--limit", "-n", help="Maximum number of results"),
):
    """List stored sessions, most recent first.

    Examples:
        storymind history list
        storymind history list --limit 5
    """
    sessions = get_store().get_session_history()

    if not sessions:
        console.print("[yellow]No sessions stored yet[/yellow]")
        console.print("Sessions are saved automatically by 'storymind process'.")
        return

    table = Table(title=f"Memory Sessions ({len(sessions)} stored)")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Title", style="green")
    table.add_column("Stored", style="dim")
    table.add_column("Working", justify="right")
    table.add_column("Links", justify="right")

    for session in sessions[:limit]:
        table.add_row(
            session.id,
            session.story_title,
            session.timestamp.strftime("%Y-%m-%d %H:%M"),
            str(len(session.memory_state.working_memory)),
            str(len(session.memory_state.cross_story_links)),
        )

    console.print(table)
    console.print("\n[dim]Use 'storymind history show SESSION_ID' to view details[/dim]")


@history_app.command("show")
def history_show(
    session_id: str = typer.Argument(help="Session ID to show"),
    format: str = typer.Option("plain", "--format", "-f", help="Output format (plain, json)"),
):
    """Show one stored session.

    Examples:
        storymind history show session_20251024T103000_1f2e3d4c
        storymind history show session_20251024T103000_1f2e3d4c --format json
    """
    session = next((s for s in get_store().get_session_history() if s.id == session_id), None)

    if session is None:
        console.print(f"[red]Session '{session_id}' not found[/red]")
        raise typer.Exit(1)

    if format == "json":
        # Plain print to avoid Rich wrapping that breaks JSON
        print(json.dumps(session.model_dump(mode="json", by_alias=True), indent=2, ensure_ascii=False))
        return

    console.print(f"[bold]{session.story_title}[/bold] [dim]({session.id})[/dim]\n")
    console.print(session.story_text, markup=False)
    console.print()
    console.print(state_table(session.memory_state))
