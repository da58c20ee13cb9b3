from dataclasses import dataclass
from enum import Enum

from rich.console import Console
from rich.markup import escape

from .git_repo import GitError, GitTransportError
from .messages import (
    backport_body,
    backport_title,
    conflict_comment,
    failure_comment,
    manual_instructions,
)
from .models import (
    BackportResult,
    BackportStatus,
    ChangeRequest,
    CherryPickOutcome,
    RepositoryInfo,
    backport_branch_name,
)
from .protocols import Platform, WorkingCopy


class BackportState(str, Enum):
    GUARD = "guard"
    SYNC = "sync"
    REPLAY = "replay"
    EVALUATE = "evaluate"
    CONFLICT = "conflict"
    PUBLISH = "publish"
    DONE = "done"


@dataclass
class BranchRun:
    """Mutable state of one target branch while it moves through the machine."""

    target_branch: str
    backport_branch: str
    changed: bool = False
    failed_commit: str | None = None
    error: str | None = None
    result: BackportResult | None = None

    def finish(self, status: BackportStatus, **kwargs) -> BackportState:
        self.result = BackportResult(
            target_branch=self.target_branch,
            backport_branch=self.backport_branch,
            status=status,
            failed_commit=self.failed_commit,
            error=self.error,
            **kwargs,
        )
        return BackportState.DONE


class BackportExecutor:
    """Replay the commits of a merged pull request onto target branches.

    Each target branch goes through GUARD, SYNC, REPLAY and EVALUATE, then
    ends in CONFLICT or PUBLISH, or stops early. Branches are processed one
    after another on the same working copy.

    Git failures local to one branch end that branch with a ``failed``
    result and a comment; transport failures (``GitTransportError``) and
    GitHub API errors propagate and abort the remaining branches.
    """

    def __init__(
        self,
        platform: Platform,
        working_copy: WorkingCopy,
        change: ChangeRequest,
        commits: list[str],
        repository: RepositoryInfo,
        token: str,
        draft: bool = False,
        console: Console | None = None,
    ):
        self.platform = platform
        self.working_copy = working_copy
        self.change = change
        self.commits = list(commits)
        self.repository = repository
        self.token = token
        self.draft = draft
        self.console = console or Console()
        self._handlers = {
            BackportState.GUARD: self._guard,
            BackportState.SYNC: self._sync,
            BackportState.REPLAY: self._replay,
            BackportState.EVALUATE: self._evaluate,
            BackportState.CONFLICT: self._conflict,
            BackportState.PUBLISH: self._publish,
        }

    def run(self, target_branches: list[str]) -> list[BackportResult]:
        return [self.backport(branch) for branch in target_branches]

    def backport(self, target_branch: str) -> BackportResult:
        """Drive a single target branch to a terminal state."""
        run = BranchRun(
            target_branch=target_branch,
            backport_branch=backport_branch_name(self.change.number, target_branch),
        )
        state = BackportState.GUARD
        while state is not BackportState.DONE:
            state = self._handlers[state](run)
        return run.result

    def _guard(self, run: BranchRun) -> BackportState:
        if self.working_copy.remote_branch_exists(run.backport_branch):
            self._log(f"A backport branch {run.backport_branch} already exists in origin")
            return run.finish(BackportStatus.BRANCH_EXISTS)
        if not self.commits:
            self._log("No commits found to backport")
            return run.finish(BackportStatus.NO_COMMITS)
        return BackportState.SYNC

    def _sync(self, run: BranchRun) -> BackportState:
        try:
            self.working_copy.fetch_change_ref(self.change.number)
            self._log(f"Checkout branch to backport origin/{run.target_branch}")
            self.working_copy.checkout_tracking_branch(run.target_branch)
            self._log(f"Creating local branch to apply backport commits {run.backport_branch}")
            self.working_copy.create_branch(run.backport_branch)
        except GitTransportError:
            raise
        except GitError as e:
            run.error = str(e)
            return BackportState.CONFLICT
        return BackportState.REPLAY

    def _replay(self, run: BranchRun) -> BackportState:
        self._log(f"Backporting #{self.change.number} to {run.backport_branch}")
        for commit in self.commits:
            self._log(f"Applying commit {commit}")
            try:
                outcome = self.working_copy.cherry_pick(commit)
            except GitTransportError:
                raise
            except GitError as e:
                run.failed_commit = commit
                run.error = str(e)
                return BackportState.CONFLICT

            if outcome == CherryPickOutcome.CONFLICT:
                self._log(f"Could not apply commit {commit} due to a conflict")
                run.failed_commit = commit
                return BackportState.CONFLICT
            if outcome == CherryPickOutcome.ALREADY_PRESENT:
                self._log(f"Commit {commit} already applied")
            else:
                run.changed = True
        return BackportState.EVALUATE

    def _evaluate(self, run: BranchRun) -> BackportState:
        if not run.changed:
            self._log(f"All commits are already present in {run.target_branch}")
            return run.finish(BackportStatus.ALREADY_APPLIED)
        return BackportState.PUBLISH

    def _conflict(self, run: BranchRun) -> BackportState:
        instructions = manual_instructions(
            self.repository.clone_url,
            self.change.number,
            self.commits,
            run.backport_branch,
            run.target_branch,
            self.change.title,
        )
        if run.error is None:
            body = conflict_comment(run.target_branch, instructions)
            status = BackportStatus.CONFLICT
        else:
            body = failure_comment(run.target_branch, run.error, instructions)
            status = BackportStatus.FAILED

        self.platform.comment(self.change.number, body)
        self._log(f"Added cannot backport comment for {run.target_branch}")
        return run.finish(status)

    def _publish(self, run: BranchRun) -> BackportState:
        # not rolled back if opening the pull request fails afterwards
        self.working_copy.push(run.backport_branch, self.token)
        pull_request = self.platform.create_pull_request(
            title=backport_title(run.target_branch, self.change.title),
            head=run.backport_branch,
            base=run.target_branch,
            body=backport_body(self.change.number, run.target_branch),
            draft=self.draft,
        )
        self._log(f"Created Pull Request {pull_request.url}")
        return run.finish(BackportStatus.CREATED, pull_request=pull_request)

    def _log(self, message: str) -> None:
        self.console.print(f"[dim]{escape(message)}[/dim]")
