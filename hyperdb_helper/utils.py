"""Shared utility functions for hyperdb-helper.

Provides JSON writing, file-system helpers, and Rich-based console reporting.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

console = Console()


# ---------------------------------------------------------------------------
# JSON I/O
# ---------------------------------------------------------------------------


async def save_json(data: dict[str, Any] | list[Any], path: str | Path) -> Path:
    """Save data as pretty-printed JSON with a trailing newline.

    Parent directories are created automatically and the write runs in a
    worker thread.
    """
    file_path = Path(path)
    content = json.dumps(data, indent=2, ensure_ascii=False, default=str) + "\n"
    await asyncio.to_thread(_write_text, file_path, content)
    return file_path


# ---------------------------------------------------------------------------
# File-system helpers
# ---------------------------------------------------------------------------


async def path_exists(path: str | Path) -> bool:
    """Return ``True`` if *path* exists (file, directory or anything else)."""
    return await asyncio.to_thread(Path(path).exists)


def _write_text(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def format_duration(seconds: float) -> str:
    """Format a duration in seconds to a human-readable string.

    Examples::

        format_duration(3.7)    -> "3.7s"
        format_duration(65.2)   -> "1m 5s"
    """
    if seconds < 0:
        return "0.0s"

    minutes = int(seconds // 60)
    secs = seconds % 60
    if minutes > 0:
        return f"{minutes}m {int(secs)}s"
    return f"{secs:.1f}s"


def display_path(path: str | Path, base: str | Path | None = None) -> str:
    """Render *path* relative to *base* when it lives underneath it."""
    target = Path(path)
    if base is not None:
        try:
            return str(target.relative_to(base))
        except ValueError:
            pass
    return str(target)


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_summary_table(data: dict[str, str], title: str = "Summary") -> None:
    """Print a two-column key/value summary table."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(key, str(value))

    console.print(table)
    console.print()


def print_panel(body: str, title: str, style: str = "cyan") -> None:
    """Print *body* inside a titled panel."""
    console.print(Panel(body, title=title, border_style=style))


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{message}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{message}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{message}[/bold yellow]")
