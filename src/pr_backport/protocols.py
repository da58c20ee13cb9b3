"""Capabilities the backport workflow needs from GitHub and from git."""

from typing import Protocol

from .models import ChangeRequest, CherryPickOutcome, CreatedPullRequest, RepositoryInfo


class Platform(Protocol):
    """Code-hosting operations, bound to one repository."""

    def get_repository(self) -> RepositoryInfo: ...

    def get_change_request(self, number: int) -> ChangeRequest: ...

    def list_commits(self, number: int) -> list[str]: ...

    def comment(self, number: int, body: str) -> None: ...

    def create_pull_request(
        self, title: str, head: str, base: str, body: str, draft: bool = False
    ) -> CreatedPullRequest: ...


class WorkingCopy(Protocol):
    """Local clone operations used while replaying commits."""

    def prepare(self) -> None: ...

    def fetch_change_ref(self, number: int) -> None: ...

    def remote_branch_exists(self, name: str) -> bool: ...

    def checkout_tracking_branch(self, target_branch: str) -> None: ...

    def create_branch(self, name: str) -> None: ...

    def cherry_pick(self, commit: str) -> CherryPickOutcome: ...

    def push(self, branch: str, token: str) -> None: ...
