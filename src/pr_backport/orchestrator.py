from rich.console import Console
from rich.markup import escape

from .executor import BackportExecutor
from .labels import DEFAULT_LABEL_PREFIX, resolve_target_branches
from .messages import summary_comment
from .models import RunReport
from .protocols import Platform, WorkingCopy


def run_backport(
    platform: Platform,
    working_copy: WorkingCopy,
    change_number: int,
    token: str,
    label_prefix: str = DEFAULT_LABEL_PREFIX,
    draft: bool = False,
    console: Console | None = None,
) -> RunReport:
    """Backport a merged pull request to every branch named by its labels.

    Nothing is cloned, pushed or commented when the pull request has no
    backport label or is not merged.

    Args:
        platform: GitHub operations for the repository.
        working_copy: Local clone to replay commits in.
        change_number: Number of the pull request to backport.
        token: Token used to push backport branches.
        label_prefix: Label prefix marking a target branch.
        draft: Open backport pull requests as drafts.
        console: Rich console for progress output.

    Returns:
        Report with one result per target branch.

    Raises:
        GitTransportError: If cloning, fetching or pushing fails.
        httpx.HTTPStatusError: If a GitHub API call fails.
    """
    console = console or Console()
    change = platform.get_change_request(change_number)
    report = RunReport(change_number=change_number)

    report.target_branches = resolve_target_branches(change.labels, label_prefix)
    if not report.target_branches:
        report.skipped_reason = "No backport labels found"
        console.print(f"[yellow]{report.skipped_reason}[/yellow]")
        return report

    if not change.merged:
        report.skipped_reason = (
            f"The PR #{change_number} is not merged, no backport will be performed"
        )
        console.print(f"[yellow]{report.skipped_reason}[/yellow]")
        return report

    console.print(
        f"Backporting #{change_number} to {escape(', '.join(report.target_branches))}"
    )

    repository = platform.get_repository()
    working_copy.prepare()
    commits = platform.list_commits(change_number)

    executor = BackportExecutor(
        platform,
        working_copy,
        change,
        commits,
        repository,
        token,
        draft=draft,
        console=console,
    )
    report.results = executor.run(report.target_branches)

    if report.created:
        platform.comment(change_number, summary_comment(report.created, repository.html_url))
        report.summary_posted = True

    return report
