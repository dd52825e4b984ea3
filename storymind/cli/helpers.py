"""Shared helpers for CLI commands."""

import sys
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from storymind.models import CrossStoryConnection, MemoryEvent, MemoryState
from storymind.store import CrossSessionPatternStore, open_store


def get_store() -> CrossSessionPatternStore:
    """Open the configured store (patched in tests)."""
    return open_store()


def read_story_text(path: Optional[Path], text: Optional[str], console: Console) -> str:
    """Resolve story text from --text, a file, or stdin ("-")."""
    if text:
        return text
    if path is None:
        console.print("[red]Provide a story file, '-' for stdin, or --text[/red]")
        raise typer.Exit(1)
    if str(path) == "-":
        return sys.stdin.read()
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        console.print(f"[red]Failed to read {path}: {e}[/red]")
        raise typer.Exit(1)


def events_table(events: List[MemoryEvent]) -> Table:
    table = Table(title=f"Memory Timeline ({len(events)} events)")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Time", justify="right", style="cyan")
    table.add_column("Memory", style="green")
    table.add_column("Action", style="magenta")
    table.add_column("Content")
    table.add_column("Cross-story", style="yellow")

    for event in events:
        link = event.cross_story_connection
        table.add_row(
            str(event.id),
            f"{event.timestamp / 1000:.2f}s",
            event.memory_type,
            event.action,
            event.content,
            f"{link.pattern} ({link.previous_occurrences}x, {link.strength:.2f})" if link else "",
        )
    return table


def state_table(state: MemoryState) -> Table:
    table = Table(title="Final Memory State")
    table.add_column("Compartment", style="cyan")
    table.add_column("Items", justify="right")
    table.add_column("Contents", style="dim")

    def _row(name: str, items: List[str]) -> None:
        table.add_row(name, str(len(items)), ", ".join(items))

    _row("Short-term", state.short_term)
    _row("Working", state.working_memory)
    _row("Long-term", [item for items in state.long_term.values() for item in items])
    _row("Episodic", [record.event for record in state.episodic])
    _row("Semantic", [f"{c} ({category})" for category, concepts in state.semantic.items() for c in concepts])
    _row("Associative", [f"{a.concept1} ↔ {a.concept2}" for a in state.associative])
    _row("Procedural", state.procedural)
    _row("Flash", state.flash)
    _row("Cross-story links", [f"{link.current_item} ({link.connection_type})" for link in state.cross_story_links])
    return table


def connections_table(connections: List[CrossStoryConnection]) -> Table:
    table = Table(title=f"Cross-Story Connections ({len(connections)} active)")
    table.add_column("Pattern", style="cyan")
    table.add_column("Type", style="green")
    table.add_column("Strength", justify="right")
    table.add_column("Occurrences", justify="right")
    table.add_column("Recent", justify="center")

    for connection in connections:
        table.add_row(
            connection.pattern,
            connection.type,
            f"{connection.strength:.2f}",
            str(connection.connections),
            "✓" if connection.recent_activity else "",
        )
    return table
