import io

import pytest
from rich.console import Console

from pr_backport.models import (
    ChangeRequest,
    CherryPickOutcome,
    CreatedPullRequest,
    RepositoryInfo,
)

REPOSITORY = RepositoryInfo(
    full_name="octo-org/octo-repo",
    name="octo-repo",
    clone_url="https://github.com/octo-org/octo-repo.git",
    html_url="https://github.com/octo-org/octo-repo",
)


class FakePlatform:
    """In-memory stand-in for GitHubPlatform."""

    def __init__(self, change: ChangeRequest, commits: list[str]):
        self.change = change
        self.commits = commits
        self.comments: list[tuple[int, str]] = []
        self.created: list[CreatedPullRequest] = []
        self.create_calls: list[dict] = []
        self.next_number = 100

    @property
    def mutations(self) -> int:
        return len(self.comments) + len(self.create_calls)

    def get_repository(self) -> RepositoryInfo:
        return REPOSITORY

    def get_change_request(self, number: int) -> ChangeRequest:
        assert number == self.change.number
        return self.change

    def list_commits(self, number: int) -> list[str]:
        return list(self.commits)

    def comment(self, number: int, body: str) -> None:
        self.comments.append((number, body))

    def create_pull_request(self, title, head, base, body, draft=False) -> CreatedPullRequest:
        self.create_calls.append(
            {"title": title, "head": head, "base": base, "body": body, "draft": draft}
        )
        pr = CreatedPullRequest(
            number=self.next_number,
            url=f"{REPOSITORY.html_url}/pull/{self.next_number}",
            head_branch=head,
            base_branch=base,
        )
        self.next_number += 1
        self.created.append(pr)
        return pr


class FakeWorkingCopy:
    """In-memory stand-in for GitWorkingCopy.

    ``outcomes`` maps (target branch, commit) to a cherry-pick outcome;
    anything not listed applies cleanly. ``errors`` maps the same keys to
    an exception raised instead.
    """

    def __init__(self, remote_branches=(), outcomes=None, errors=None):
        self.remote_branches = set(remote_branches)
        self.outcomes = outcomes or {}
        self.errors = errors or {}
        self.calls: list[tuple] = []
        self.current_target: str | None = None
        self.pushed: list[str] = []

    @property
    def mutations(self) -> list[tuple]:
        return [c for c in self.calls if c[0] != "remote_branch_exists"]

    @property
    def picked(self) -> list[tuple[str, str]]:
        return [(c[1], c[2]) for c in self.calls if c[0] == "cherry_pick"]

    def prepare(self) -> None:
        self.calls.append(("prepare",))

    def fetch_change_ref(self, number: int) -> None:
        self.calls.append(("fetch_change_ref", number))

    def remote_branch_exists(self, name: str) -> bool:
        self.calls.append(("remote_branch_exists", name))
        return name in self.remote_branches

    def checkout_tracking_branch(self, target_branch: str) -> None:
        self.calls.append(("checkout_tracking_branch", target_branch))
        error = self.errors.get((target_branch, None))
        if error:
            raise error
        self.current_target = target_branch

    def create_branch(self, name: str) -> None:
        self.calls.append(("create_branch", name))

    def cherry_pick(self, commit: str) -> CherryPickOutcome:
        self.calls.append(("cherry_pick", self.current_target, commit))
        error = self.errors.get((self.current_target, commit))
        if error:
            raise error
        return self.outcomes.get((self.current_target, commit), CherryPickOutcome.APPLIED)

    def push(self, branch: str, token: str) -> None:
        self.calls.append(("push", branch, token))
        error = self.errors.get(("push", branch))
        if error:
            raise error
        self.pushed.append(branch)
        self.remote_branches.add(branch)


def make_change(number=42, labels=None, merged=True, title="Fix the frobnicator"):
    return ChangeRequest(
        number=number,
        title=title,
        url=f"{REPOSITORY.html_url}/pull/{number}",
        merged=merged,
        labels=labels if labels is not None else ["backport-release-1.x", "backport-release-2.x"],
        base_branch="main",
        head_branch="fix-frobnicator",
    )


@pytest.fixture
def console():
    return Console(file=io.StringIO(), width=200)
