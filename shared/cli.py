"""Console helpers shared by the tool CLIs."""

import functools
import sys
from typing import Any, Callable, Optional

import click
from rich.console import Console
from rich.table import Table

# Status messages go to stderr so piped tool output stays clean
console = Console(stderr=True)


def info(message: str) -> None:
    """Print an informational message."""
    console.print(f"[cyan]ℹ[/cyan] {message}")


def success(message: str) -> None:
    """Print a success message."""
    console.print(f"[bold green]✓[/bold green] {message}")


def warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]⚠[/yellow] {message}")


def error(message: str) -> None:
    """Print an error message."""
    console.print(f"[bold red]✗[/bold red] {message}")


def create_table(title: Optional[str] = None, **kwargs: Any) -> Table:
    """
    Create a rich table with the house style.

    Args:
        title: Table title
        **kwargs: Extra arguments passed to rich.table.Table

    Returns:
        Table instance
    """
    kwargs.setdefault("show_header", True)
    kwargs.setdefault("header_style", "bold magenta")
    return Table(title=title, **kwargs)


def print_table(table: Table) -> None:
    """Render a table on the status console."""
    console.print(table)


def handle_errors(func: Callable) -> Callable:
    """
    Decorator for click commands.

    Click's own exceptions and SystemExit pass through untouched; Ctrl+C
    exits with 130 and anything else unexpected exits with 1.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except click.exceptions.ClickException:
            raise
        except click.exceptions.Abort:
            raise
        except KeyboardInterrupt:
            error("Interrupted")
            sys.exit(130)
        except Exception as e:
            error(f"Unexpected error: {e}")
            sys.exit(1)

    return wrapper
