"""Console rendering of approved threads."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from prthreads_core.filter import FilterSummary


def build_threads_table(summary: FilterSummary) -> Table:
    pr = summary.pull_request
    title = f"Threads approved by {summary.reviewer}"
    if pr.number is not None:
        title += f" — PR #{pr.number}"
        if pr.head_ref_name:
            title += f" ({pr.head_ref_name})"

    table = Table(title=escape(title), show_header=True, header_style="bold cyan")
    table.add_column("File", max_width=50)
    table.add_column("Line", justify="right", width=6)
    table.add_column("Side", width=6)
    table.add_column("Comments", justify="right", width=10)
    table.add_column("First comment", max_width=60)

    for thread in summary.approved:
        # `line` is null when the anchored line no longer exists in the diff.
        line = thread.line if thread.line is not None else thread.original_line
        first = thread.comments[0] if thread.comments else None
        table.add_row(
            escape(thread.path),
            str(line) if line is not None else "—",
            thread.diff_side,
            str(len(thread.comments)),
            escape(f"{first.author}: {first.body.splitlines()[0] if first.body else ''}") if first else "",
        )
    return table


def print_summary(console: Console, summary: FilterSummary) -> None:
    """Print the per-stage counts and the approved thread table."""
    console.print(
        f"  Threads: {summary.total_threads}"
        f" · unresolved: {summary.unresolved_threads}"
        f" · approved: {len(summary.approved)}"
        + (f" · excluded: {summary.excluded_threads}" if summary.excluded_threads else "")
    )
    if not summary.approved:
        console.print("[yellow]No approved threads.[/yellow]")
        return
    console.print(build_threads_table(summary))
