"""Output formatting utilities using Rich."""

from rich.console import Console
from rich.prompt import Confirm, Prompt
from rich.table import Table

console = Console()


def print_error(msg: str) -> None:
    """Print an error message to the console.

    Args:
        msg: The error message to display.
    """
    console.print(f"[bold red]Error:[/bold red] {msg}")


def print_success(msg: str) -> None:
    """Print a success message to the console.

    Args:
        msg: The success message to display.
    """
    console.print(f"[bold green]✓[/bold green] {msg}")


def print_warning(msg: str) -> None:
    """Print a warning message to the console."""
    console.print(f"[bold yellow]Warning:[/bold yellow] {msg}")


def print_info(msg: str) -> None:
    """Print an info message to the console."""
    console.print(f"[cyan]{msg}[/cyan]")


def print_cancelled(msg: str = "Cancelled") -> None:
    """Print a cancellation message to the console."""
    console.print(f"[yellow]{msg}[/yellow]")


def create_table(
    title: str | None = None,
    columns: list[tuple[str, str]] | None = None,
    rows: list[list[str]] | None = None,
    show_header: bool = True,
) -> Table:
    """Create a Rich table.

    Args:
        title: Optional table title.
        columns: List of (column_name, column_style) tuples.
        rows: List of row data.
        show_header: Whether to show the header row.

    Returns:
        A configured Rich Table instance.
    """
    table = Table(title=title, show_header=show_header, header_style="bold cyan")

    for col_name, col_style in columns or []:
        table.add_column(col_name, style=col_style)

    for row in rows or []:
        table.add_row(*row)

    return table


def confirm(message: str, default: bool = False) -> bool:
    """Prompt user for confirmation.

    Args:
        message: The confirmation message to display.
        default: Default choice if user just presses enter.

    Returns:
        True if user confirmed, False otherwise.
    """
    return Confirm.ask(message, default=default)


def prompt(message: str, default: str | None = None, password: bool = False) -> str:
    """Prompt user for text input.

    Args:
        message: The prompt message to display.
        default: Default value if user just presses enter.
        password: Hide the input.

    Returns:
        The user's input string.
    """
    if default is None:
        return Prompt.ask(message, password=password)
    return Prompt.ask(message, default=default, password=password)


def format_kb(kb_value: int) -> str:
    """Format a size in KB (as vSphere disk capacities are) to a human-readable string.

    Args:
        kb_value: Size in KB.

    Returns:
        Formatted string (e.g., '40.0 GB').
    """
    value = float(kb_value)
    for unit in ["KB", "MB", "GB", "TB"]:
        if value < 1024.0:
            return f"{value:.1f} {unit}"
        value /= 1024.0
    return f"{value:.1f} PB"
