from pathlib import Path

import click
import httpx
from rich.console import Console
from rich.markup import escape

from .auth import AuthenticationError, get_github_token
from .config import BackportSettings
from .event import event_pull_request_number, is_backport_candidate, load_event
from .git_repo import GitError, GitWorkingCopy
from .github_client import GitHubClient, RateLimitError
from .orchestrator import run_backport
from .output import print_results_table
from .platform import GitHubPlatform


def backport_options(func):
    """Options shared by the run and action commands."""
    options = [
        click.option(
            "--token",
            default=None,
            help="GitHub token. Defaults to $GITHUB_TOKEN, then `gh auth token`.",
        ),
        click.option(
            "--label-prefix",
            default=None,
            help="Label prefix marking a backport target branch. Default: backport-.",
        ),
        click.option(
            "--workdir",
            type=click.Path(file_okay=False, path_type=Path),
            default=None,
            help="Directory in which the repository is cloned. Default: current directory.",
        ),
        click.option(
            "--draft/--no-draft",
            default=None,
            help="Open backport pull requests as drafts.",
        ),
        click.option(
            "-v",
            "--verbose",
            is_flag=True,
            help="Show verbose output.",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
@click.version_option(version="0.1.0")
def cli() -> None:
    """Backport merged pull requests to the branches named by their labels.

    A pull request labeled `backport-release-1.x` is cherry-picked onto
    `release-1.x` and proposed as a new pull request.
    """


@cli.command()
@click.argument("repository")
@click.argument("number", type=int)
@backport_options
def run(
    repository: str,
    number: int,
    token: str | None,
    label_prefix: str | None,
    workdir: Path | None,
    draft: bool | None,
    verbose: bool,
) -> None:
    """Backport pull request NUMBER of REPOSITORY (owner/repo).

    Examples:

        pr-backport run octo-org/octo-repo 42

        pr-backport run octo-org/octo-repo 42 --label-prefix backport/
    """
    settings = BackportSettings.from_env(label_prefix=label_prefix, workdir=workdir, draft=draft)
    _backport(repository, number, token, settings, verbose)


@cli.command()
@click.argument("repository", envvar="GITHUB_REPOSITORY")
@click.argument(
    "event_path",
    envvar="GITHUB_EVENT_PATH",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@backport_options
def action(
    repository: str,
    event_path: Path,
    token: str | None,
    label_prefix: str | None,
    workdir: Path | None,
    draft: bool | None,
    verbose: bool,
) -> None:
    """Backport the pull request of a GitHub Actions event.

    REPOSITORY and EVENT_PATH default to $GITHUB_REPOSITORY and
    $GITHUB_EVENT_PATH. Events other than a merged pull request being
    labeled or closed are ignored.
    """
    console = Console()
    event = load_event(event_path)
    if not is_backport_candidate(event, repository):
        if verbose:
            console.print("[dim]Event is not a merged pull request being labeled or closed[/dim]")
        return

    settings = BackportSettings.from_env(label_prefix=label_prefix, workdir=workdir, draft=draft)
    _backport(repository, event_pull_request_number(event), token, settings, verbose)


def _backport(
    repository: str,
    number: int,
    token: str | None,
    settings: BackportSettings,
    verbose: bool,
) -> None:
    console = Console()

    try:
        token = get_github_token(token)
    except AuthenticationError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise SystemExit(1)

    try:
        with GitHubClient(token, base_url=settings.api_url, console=console) as client:
            platform = GitHubPlatform(client, repository)
            repo_info = platform.get_repository()
            working_copy = GitWorkingCopy(
                settings.workdir / repo_info.name,
                repo_info.clone_url,
                token=token,
                user_name=settings.git_user_name,
                user_email=settings.git_user_email,
            )

            report = run_backport(
                platform,
                working_copy,
                number,
                token,
                label_prefix=settings.label_prefix,
                draft=settings.draft,
                console=console,
            )

        console.print()
        print_results_table(report, console)

    except (RateLimitError, GitError, httpx.HTTPError) as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise SystemExit(1)
    except Exception as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        if verbose:
            import traceback

            console.print(traceback.format_exc(), markup=False)
        raise SystemExit(1)
