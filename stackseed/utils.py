"""Shared console helpers for stackseed.

Progress goes to ``console`` (stdout); warnings and errors go to
``err_console`` (stderr) so that the diagnostic of a failed run lands on the
error stream.
"""

from __future__ import annotations

import re
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.rule import Rule
from rich.table import Table

console = Console()
err_console = Console(stderr=True)


# ---------------------------------------------------------------------------
# Pipeline steps
# ---------------------------------------------------------------------------

STEP_NAMES: dict[str, str] = {
    "environment": "Check environment",
    "validate": "Validate template revision",
    "layout": "Create project layout",
    "fetch": "Fetch backend template",
    "install": "Install and clean backend",
    "synthesize": "Synthesize backend files",
    "containers": "Write container descriptors",
    "frontend": "Scaffold frontend",
    "patch": "Patch frontend script",
}


def print_step_header(step: str) -> None:
    """Print a numbered rule announcing a pipeline step."""
    name = STEP_NAMES.get(step, step)
    index = list(STEP_NAMES).index(step) + 1 if step in STEP_NAMES else 0
    console.print(Rule(f"[bold cyan] {index}. {name} [/bold cyan]", style="cyan"))


def print_summary_table(data: dict[str, str], title: str = "Summary") -> None:
    """Print a two-column key/value summary table.

    Args:
        data: Mapping of label -> value.
        title: Table title.
    """
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(key, str(value))

    console.print(table)
    console.print()


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{escape(message)}[/bold green]")


def print_info(message: str) -> None:
    console.print(f"  [green]+[/green] {escape(message)}")


def print_error(message: str) -> None:
    """Print a red error message on stderr."""
    err_console.print(f"[bold red]{escape(message)}[/bold red]", highlight=False)


def print_warning(message: str) -> None:
    """Print a yellow warning message on stderr."""
    err_console.print(f"[bold yellow]Warning:[/bold yellow] {escape(message)}", highlight=False)


# ---------------------------------------------------------------------------
# Name / path helpers
# ---------------------------------------------------------------------------


def to_pascal(name: str) -> str:
    """Convert ``some-thing`` or ``some_thing`` to ``SomeThing``."""
    parts = re.split(r"[-_.\s]+", name)
    return "".join(word[:1].upper() + word[1:] for word in parts if word)


def relative_to_root(path: Path, root: Path) -> str:
    """Render *path* relative to *root* for display, falling back to the full path."""
    try:
        return str(path.relative_to(root))
    except ValueError:
        return str(path)


def version_sort_key(version: str) -> tuple:
    """Natural sort key: ``3.10.0`` sorts after ``3.9.1``.

    Numeric runs compare as integers and rank above text runs at the same
    position.
    """
    key: list[tuple[int, int | str]] = []
    for token in re.findall(r"\d+|[A-Za-z]+", version):
        if token.isdigit():
            key.append((1, int(token)))
        else:
            key.append((0, token.upper()))
    return tuple(key)
