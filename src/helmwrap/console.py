"""Rich console utilities for styled terminal output.

This module provides a consistent, visually appealing interface for all
CLI output using the Rich library.
"""

from collections.abc import Generator, Iterable
from contextlib import contextmanager

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.theme import Theme

from helmwrap.models import Chart, InstalledRelease

# Custom theme with consistent colors
_THEME = Theme(
    {
        "info": "cyan",
        "success": "green",
        "warning": "yellow",
        "error": "red bold",
        "highlight": "cyan bold",
        "muted": "dim",
    }
)

_STATUS_STYLES = {
    "deployed": "success",
    "failed": "error",
    "superseded": "muted",
    "uninstalled": "muted",
}

# Shared console instance
console = Console(theme=_THEME)


def success(message: str) -> None:
    """Print a success message.

    Args:
        message: The message to display.

    """
    console.print(f"[success]✓[/success] {message}")


def warning(message: str) -> None:
    """Print a warning message.

    Args:
        message: The message to display.

    """
    console.print(f"[warning]⚠[/warning] {message}")


def error(message: str) -> None:
    """Print an error message.

    Args:
        message: The message to display.

    """
    console.print(f"[error]✗[/error] {message}")


def highlight(text: str) -> str:
    """Return text wrapped in highlight markup.

    Args:
        text: The text to highlight.

    Returns:
        Text wrapped in Rich markup for highlighting, with any markup
        already in it escaped.

    """
    return f"[highlight]{escape(text)}[/highlight]"


@contextmanager
def spinner(message: str) -> Generator[None, None, None]:
    """Display a spinner while performing an operation.

    Args:
        message: The status message to display.

    Yields:
        None

    """
    with console.status(f"[info]{message}[/info]", spinner="dots"):
        yield


def summary_panel(title: str, items: dict[str, str]) -> None:
    """Print a summary panel with key-value pairs.

    Args:
        title: Title for the panel.
        items: Dictionary of label -> value pairs to display.

    """
    table = Table.grid(padding=(0, 2))
    table.add_column(style="bold")
    table.add_column(style="cyan")

    for label, value in items.items():
        table.add_row(f"{escape(label)}:", escape(value))

    console.print(Panel(table, title=f"[bold]{title}[/bold]", border_style="green"))


def release_table(releases: Iterable[InstalledRelease]) -> None:
    """Print installed releases as a table."""
    table = Table(header_style="bold")
    for column in ("Name", "Namespace", "Revision", "Updated", "Status", "Chart", "App version"):
        table.add_column(column)

    for release in releases:
        style = _STATUS_STYLES.get(release.status, "")
        status = escape(release.status)
        if style:
            status = f"[{style}]{status}[/{style}]"
        table.add_row(
            escape(release.name),
            escape(release.namespace),
            escape(release.revision),
            escape(release.updated),
            status,
            escape(release.chart),
            escape(release.app_version),
        )

    console.print(table)


def chart_table(charts: Iterable[Chart]) -> None:
    """Print chart search results as a table."""
    table = Table(header_style="bold")
    for column in ("Name", "Chart version", "App version", "Description"):
        table.add_column(column)

    for chart in charts:
        table.add_row(*(escape(cell) for cell in (chart.name, chart.version, chart.app_version, chart.description)))

    console.print(table)
