"""
Rendering functions for repoget output.

This module handles all pretty-printing and table formatting.
Core functions return data, this module makes it human-readable.
"""

from rich.table import Table
from rich.console import Console
from rich import box
from typing import List, Dict, Any

console = Console()

STATUS_STYLES = {
    'cloned': ("Cloned", "green"),
    'updated': ("Updated", "blue"),
    'exists': ("Exists", "yellow"),
    'skipped': ("Skipped", "dim"),
    'failed': ("Failed", "red"),
}


def render_list_table(repos: List[Dict[str, Any]]) -> None:
    """
    Render local repositories as a table.

    Args:
        repos: LocalRepository.to_dict() records
    """
    if not repos:
        console.print("[yellow]No repositories found.[/yellow]")
        return

    table = Table(
        title="Local Repositories",
        box=box.ROUNDED,
        show_header=True,
        header_style="bold magenta"
    )

    table.add_column("Repository", style="cyan")
    table.add_column("VCS", style="green", justify="center")
    table.add_column("Root", style="dim")

    for repo in repos:
        table.add_row(repo['rel_path'], repo.get('vcs') or "-", repo['root'])

    console.print(table)


def render_get_table(results: List[Dict[str, Any]]) -> None:
    """
    Render get/import results as a table followed by a summary.

    Args:
        results: GetResult.to_dict() records
    """
    if not results:
        console.print("[yellow]No operations performed.[/yellow]")
        return

    table = Table(
        title="Get Results",
        box=box.ROUNDED,
        show_header=True,
        header_style="bold magenta"
    )

    table.add_column("Reference", style="cyan")
    table.add_column("Status")
    table.add_column("VCS", style="green")
    table.add_column("Path", style="dim")

    for result in results:
        label, color = STATUS_STYLES.get(result['status'], (result['status'], "white"))
        table.add_row(
            result['reference'],
            f"[{color}]{label}[/{color}]",
            result.get('vcs') or "",
            result.get('path') or result.get('error') or "",
        )

    console.print(table)
    print_get_summary(results)


def print_get_summary(results: List[Dict[str, Any]]) -> None:
    """Print counts per status."""
    console.print("\n[bold]Summary:[/bold]")
    console.print(f"  Total references: {len(results)}")
    for status, (label, color) in STATUS_STYLES.items():
        count = sum(1 for r in results if r['status'] == status)
        if count:
            console.print(f"  [{color}]{label}: {count}[/{color}]")
