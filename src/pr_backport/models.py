from enum import Enum

from pydantic import BaseModel


class CherryPickOutcome(str, Enum):
    APPLIED = "applied"
    ALREADY_PRESENT = "already_present"
    CONFLICT = "conflict"


class BackportStatus(str, Enum):
    BRANCH_EXISTS = "branch_exists"
    NO_COMMITS = "no_commits"
    ALREADY_APPLIED = "already_applied"
    CONFLICT = "conflict"
    FAILED = "failed"
    CREATED = "created"


class ChangeRequest(BaseModel):
    number: int
    title: str
    url: str = ""
    merged: bool = False
    labels: list[str] = []
    base_branch: str = ""
    head_branch: str = ""


class RepositoryInfo(BaseModel):
    full_name: str
    name: str
    clone_url: str
    html_url: str


class CreatedPullRequest(BaseModel):
    number: int
    url: str
    head_branch: str
    base_branch: str


class BackportResult(BaseModel):
    target_branch: str
    backport_branch: str
    status: BackportStatus
    pull_request: CreatedPullRequest | None = None
    failed_commit: str | None = None
    error: str | None = None


class RunReport(BaseModel):
    change_number: int
    target_branches: list[str] = []
    results: list[BackportResult] = []
    summary_posted: bool = False
    skipped_reason: str | None = None

    @property
    def created(self) -> list[CreatedPullRequest]:
        return [r.pull_request for r in self.results if r.pull_request is not None]


def backport_branch_name(change_number: int, target_branch: str) -> str:
    """Name of the branch holding the backport of a change to a target branch."""
    return f"backport-#{change_number}-to-{target_branch}"
