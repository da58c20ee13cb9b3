from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .models import BackportResult, BackportStatus, RunReport

STATUS_LABELS = {
    BackportStatus.CREATED: "[green]created[/green]",
    BackportStatus.CONFLICT: "[red]conflict[/red]",
    BackportStatus.FAILED: "[red]failed[/red]",
    BackportStatus.BRANCH_EXISTS: "[yellow]branch exists[/yellow]",
    BackportStatus.ALREADY_APPLIED: "[dim]already applied[/dim]",
    BackportStatus.NO_COMMITS: "[dim]no commits[/dim]",
}


def _format_detail(result: BackportResult) -> str:
    """Format the detail cell of a result row.

    Args:
        result: Result of one target branch.

    Returns:
        Formatted cell string.
    """
    if result.pull_request:
        pr = result.pull_request
        return f"[link={pr.url}]#{pr.number}[/link]"
    if result.error:
        return escape(_truncate(result.error, 60))
    if result.failed_commit:
        return f"at {result.failed_commit[:12]}"
    return "-"


def print_results_table(report: RunReport, console: Console | None = None) -> None:
    """Print per-branch backport results as a formatted table.

    Args:
        report: Report of a backport run.
        console: Rich console instance. If None, a new one is created.
    """
    if console is None:
        console = Console()

    if report.skipped_reason:
        return

    table = Table(title=f"Backports of #{report.change_number}", show_lines=True)
    table.add_column("Target", style="cyan", no_wrap=True)
    table.add_column("Branch", style="dim")
    table.add_column("Status", justify="center")
    table.add_column("Detail")

    for result in report.results:
        table.add_row(
            escape(result.target_branch),
            escape(result.backport_branch),
            STATUS_LABELS[result.status],
            _format_detail(result),
        )

    console.print(table)

    created = len(report.created)
    conflicts = sum(
        1 for r in report.results if r.status in (BackportStatus.CONFLICT, BackportStatus.FAILED)
    )
    skipped = len(report.results) - created - conflicts
    console.print()
    console.print(
        f"[bold]Summary:[/bold] [green]{created} created[/green], "
        f"[red]{conflicts} need manual backport[/red], "
        f"[dim]{skipped} skipped[/dim]"
    )


def _truncate(text: str, max_len: int) -> str:
    """Truncate text with ellipsis if too long.

    Args:
        text: Text to truncate.
        max_len: Maximum length.

    Returns:
        Truncated text.
    """
    text = " ".join(text.split())
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."
