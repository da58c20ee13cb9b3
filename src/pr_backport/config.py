import os
from pathlib import Path

from pydantic import BaseModel

from .labels import DEFAULT_LABEL_PREFIX

DEFAULT_API_URL = "https://api.github.com"


def _env_flag(value: str | None) -> bool:
    return (value or "").strip().lower() in ("1", "true", "yes", "on")


class BackportSettings(BaseModel):
    """Settings for a backport run.

    Attributes:
        label_prefix: Label prefix that marks a backport target branch.
        workdir: Directory in which the working copy is cloned.
        draft: Open backport pull requests as drafts.
        git_user_name: Committer name for cherry-picked commits.
        git_user_email: Committer email for cherry-picked commits.
        api_url: Base URL of the GitHub REST API.
    """

    label_prefix: str = DEFAULT_LABEL_PREFIX
    workdir: Path = Path(".")
    draft: bool = False
    git_user_name: str = "github-actions[bot]"
    git_user_email: str = "41898282+github-actions[bot]@users.noreply.github.com"
    api_url: str = DEFAULT_API_URL

    @classmethod
    def from_env(cls, **overrides) -> "BackportSettings":
        """Build settings from environment variables.

        Args:
            **overrides: Explicit values; ``None`` values are ignored.

        Returns:
            Settings with overrides applied over environment values.
        """
        values: dict = {}
        if os.environ.get("BACKPORT_LABEL_PREFIX"):
            values["label_prefix"] = os.environ["BACKPORT_LABEL_PREFIX"]
        if os.environ.get("BACKPORT_WORKDIR"):
            values["workdir"] = Path(os.environ["BACKPORT_WORKDIR"])
        if "BACKPORT_DRAFT" in os.environ:
            values["draft"] = _env_flag(os.environ["BACKPORT_DRAFT"])
        if os.environ.get("BACKPORT_GIT_USER_NAME"):
            values["git_user_name"] = os.environ["BACKPORT_GIT_USER_NAME"]
        if os.environ.get("BACKPORT_GIT_USER_EMAIL"):
            values["git_user_email"] = os.environ["BACKPORT_GIT_USER_EMAIL"]
        if os.environ.get("GITHUB_API_URL"):
            values["api_url"] = os.environ["GITHUB_API_URL"]

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
