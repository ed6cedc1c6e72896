"""
ELFScope Console Interface
===========================

Rich-powered console abstraction used by the command-line tool.

The class wraps :class:`rich.console.Console` and adds convenience methods
for section rules, severity-coloured messages, key/value panels and
tables, all with consistent styling.

References:
    - Rich library: https://github.com/Textualize/rich
"""

from __future__ import annotations

from typing import Any, Sequence

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.theme import Theme

_SCOPE_THEME = Theme(
    {
        "scope.section": "bold bright_magenta",
        "scope.success": "bold green",
        "scope.warning": "bold yellow",
        "scope.error": "bold red",
        "scope.info": "bold bright_blue",
        "scope.dim": "dim white",
        "scope.key": "bold bright_white",
    }
)


class ScopeConsole:
    """Unified console interface for ELFScope output.

    Usage::

        con = ScopeConsole()
        con.section("Section Headers")
        con.table("Sections", ["#", "Name"], rows)
        con.success("Decoded 28 sections")
    """

    def __init__(self, *, quiet: bool = False, record: bool = False, stderr: bool = False) -> None:
        """Initialise the console.

        Args:
            quiet:  Suppress all output (useful in library / test mode).
            record: Enable Rich recording so output can be exported as text.
            stderr: Write to stderr instead of stdout.
        """
        self._console = Console(
            theme=_SCOPE_THEME,
            quiet=quiet,
            record=record,
            stderr=stderr,
            highlight=False,
        )

    @property
    def rich(self) -> Console:
        """Direct access to the underlying Rich Console instance."""
        return self._console

    # ------------------------------------------------------------------ #
    #  Section header
    # ------------------------------------------------------------------ #

    def section(self, title: str) -> None:
        """Print a section rule with *title*."""
        self._console.rule(
            f"  {escape(title)}  ",
            style="scope.section",
            characters="─",
        )

    # ------------------------------------------------------------------ #
    #  Message helpers (severity-coloured)
    # ------------------------------------------------------------------ #

    def success(self, message: str) -> None:
        self._console.print(f"[scope.success][✔] SUCCESS:[/scope.success] {escape(message)}")

    def warning(self, message: str) -> None:
        self._console.print(f"[scope.warning][⚠] WARNING:[/scope.warning] {escape(message)}")

    def error(self, message: str) -> None:
        self._console.print(f"[scope.error][✘] ERROR:[/scope.error] {escape(message)}")

    def info(self, message: str) -> None:
        self._console.print(f"[scope.info][ℹ] INFO:[/scope.info] {escape(message)}")

    # ------------------------------------------------------------------ #
    #  Panels and tables
    # ------------------------------------------------------------------ #

    def key_values(self, title: str, pairs: Sequence[tuple[str, Any]]) -> None:
        """Render aligned ``key: value`` lines inside a titled panel."""
        width = max((len(k) for k, _ in pairs), default=0)
        lines = [
            f"[scope.key]{key + ':':<{width + 1}}[/scope.key] {escape(str(value))}"
            for key, value in pairs
        ]
        self._console.print(Panel(
            "\n".join(lines),
            title=f"[bold bright_cyan]{escape(title)}[/bold bright_cyan]",
            border_style="bright_cyan",
            padding=(0, 2),
        ))

    def table(
        self,
        title: str,
        columns: Sequence[str],
        rows: Sequence[Sequence[Any]],
        *,
        caption: str | None = None,
        styles: Sequence[str] | None = None,
    ) -> None:
        """Render a styled Rich table.

        Args:
            title:    Table title.
            columns:  Column header labels.
            rows:     Iterable of row tuples; each element is stringified.
            caption:  Optional footer caption.
            styles:   Optional per-column Rich style strings.
        """
        tbl = Table(
            title=title,
            caption=caption,
            border_style="bright_cyan",
            header_style="bold bright_magenta",
            padding=(0, 1),
        )
        for idx, col_name in enumerate(columns):
            style = styles[idx] if styles and idx < len(styles) else ""
            tbl.add_column(col_name, style=style)

        for row in rows:
            tbl.add_row(*(escape(str(cell)) for cell in row))

        self._console.print(tbl)

    # ------------------------------------------------------------------ #
    #  Utility
    # ------------------------------------------------------------------ #

    def blank(self, count: int = 1) -> None:
        """Print *count* blank lines."""
        for _ in range(count):
            self._console.print()

    def export_text(self) -> str:
        """Export recorded console output as plain text (requires ``record=True``)."""
        return self._console.export_text()
