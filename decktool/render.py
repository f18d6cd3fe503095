"""
Rendering functions for decktool output.

Services return data; this module makes it human-readable.
"""

from typing import Dict, List, Optional

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from .domain.binary import BuildResult
from .services.build_service import BuildSummary

console = Console()

STATUS_SYMBOLS = {
    "success": ("✓", "green"),
    "skipped": ("⊘", "yellow"),
    "failed": ("✗", "red"),
}


def build_result_line(result: BuildResult) -> Text:
    """One line per result: `<symbol> <binary> (<target>): <path or error>`."""
    symbol, style = STATUS_SYMBOLS[result.status]
    detail = result.path if result.ok else result.error
    line = Text()
    line.append(symbol, style=style)
    line.append(f" {result.binary} ({result.target}): {detail}")
    return line


def render_build_results(summary: BuildSummary, out: Optional[Console] = None) -> None:
    """
    Print the build results followed by the summary counts.

    Args:
        summary: BuildSummary from BuildService.build_all
        out: Console to print to (defaults to stdout)
    """
    out = out or console
    out.print("\n=== Build Results ===", highlight=False, soft_wrap=True)
    for result in summary.results:
        out.print(build_result_line(result), highlight=False, soft_wrap=True)
    out.print(
        f"\nSummary: {summary.succeeded} succeeded, {summary.failed} failed, {summary.skipped} skipped",
        highlight=False,
        soft_wrap=True,
    )


def render_build_table(summary: BuildSummary, out: Optional[Console] = None) -> None:
    """Render the build matrix as a table, one row per binary."""
    out = out or console
    if not summary.results:
        out.print("[yellow]Nothing was built.[/yellow]")
        return

    targets: List[str] = []
    rows: Dict[str, Dict[str, BuildResult]] = {}
    for result in summary.results:
        target = str(result.target)
        if target not in targets:
            targets.append(target)
        rows.setdefault(result.binary, {})[target] = result

    table = Table(
        title="Build Results",
        box=box.ROUNDED,
        show_header=True,
        header_style="bold magenta"
    )
    table.add_column("Binary", style="cyan")
    for target in targets:
        table.add_column(target.upper(), justify="center")

    for binary, by_target in rows.items():
        cells = []
        for target in targets:
            result = by_target.get(target)
            if result is None:
                cells.append("")
                continue
            symbol, style = STATUS_SYMBOLS[result.status]
            cells.append(f"[{style}]{symbol}[/{style}]")
        table.add_row(binary, *cells)

    out.print(table)
    out.print(
        f"[green]{summary.succeeded} succeeded[/green], "
        f"[red]{summary.failed} failed[/red], "
        f"[yellow]{summary.skipped} skipped[/yellow]"
    )


def render_examples_table(groups: Dict[str, List[str]], out: Optional[Console] = None) -> None:
    """Render examples grouped by source."""
    out = out or console
    if not any(groups.values()):
        out.print("[yellow]No examples found.[/yellow]")
        return

    table = Table(
        title="Examples",
        box=box.ROUNDED,
        show_header=True,
        header_style="bold magenta"
    )
    table.add_column("Source", style="cyan")
    table.add_column("Count", justify="right")
    table.add_column("Examples", style="dim")

    for source in sorted(groups):
        names = groups[source]
        table.add_row(source, str(len(names)), ", ".join(names))

    out.print(table)
