"""Console output for the CLI.

Provides a Console class that wraps rich for consistent, polished output.
All CLI output should go through this module.
"""

from typing import Any

from rich.console import Console as RichConsole
from rich.table import Table


class Console:
    """CLI output manager wrapping rich."""

    def __init__(
        self,
        *,
        force_terminal: bool | None = None,
        quiet: bool = False,
    ) -> None:
        self._console = RichConsole(force_terminal=force_terminal, stderr=False)
        self._err_console = RichConsole(force_terminal=force_terminal, stderr=True)
        self._quiet = quiet

    # -------------------------------------------------------------------------
    # Status messages
    # -------------------------------------------------------------------------

    def success(self, message: str) -> None:
        """Print a success message."""
        self._console.print(f"[green]✓[/green] {message}")

    def error(self, message: str, *, hint: str | None = None) -> None:
        """Print an error message to stderr."""
        self._err_console.print(f"[red]✗[/red] {message}")
        if hint:
            self._err_console.print(f"  [dim]{hint}[/dim]")

    def warning(self, message: str) -> None:
        """Print a warning message."""
        self._console.print(f"[yellow]⚠[/yellow] {message}")

    def info(self, message: str) -> None:
        """Print an info message (suppressed in quiet mode)."""
        if not self._quiet:
            self._console.print(f"[dim]{message}[/dim]")

    # -------------------------------------------------------------------------
    # Structured output
    # -------------------------------------------------------------------------

    def print(self, *args: Any, **kwargs: Any) -> None:
        """Print to console (pass-through to rich)."""
        self._console.print(*args, **kwargs)

    def table(
        self,
        rows: list[dict[str, Any]],
        columns: list[tuple[str, str]],  # (key, header)
        *,
        title: str | None = None,
    ) -> None:
        """Print a table.

        Args:
            rows: List of dicts containing row data.
            columns: List of (key, header) tuples defining columns.
            title: Optional table title.
        """
        table = Table(title=title, show_header=True, header_style="bold")
        for _, header in columns:
            table.add_column(header)
        for row in rows:
            table.add_row(*(str(row.get(key, "")) for key, _ in columns))
        self._console.print(table)


# Module-level default instance for convenience
_default: Console | None = None


def get_console() -> Console:
    """Get the default console instance."""
    global _default
    if _default is None:
        _default = Console()
    return _default
