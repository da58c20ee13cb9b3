from .github_client import GitHubClient
from .models import ChangeRequest, CreatedPullRequest, RepositoryInfo


def _parse_change_request(pr_data: dict) -> ChangeRequest:
    """Parse PR data into a ChangeRequest model.

    Args:
        pr_data: Raw PR data from GitHub API.

    Returns:
        ChangeRequest model instance.
    """
    return ChangeRequest(
        number=pr_data["number"],
        title=pr_data["title"],
        url=pr_data.get("html_url", ""),
        merged=bool(pr_data.get("merged")),
        labels=[label["name"] for label in pr_data.get("labels", [])],
        base_branch=pr_data.get("base", {}).get("ref", ""),
        head_branch=pr_data.get("head", {}).get("ref", ""),
    )


def _parse_created_pull_request(pr_data: dict) -> CreatedPullRequest:
    return CreatedPullRequest(
        number=pr_data["number"],
        url=pr_data["html_url"],
        head_branch=pr_data["head"]["ref"],
        base_branch=pr_data["base"]["ref"],
    )


class GitHubPlatform:
    """GitHub operations for a single repository."""

    def __init__(self, client: GitHubClient, repo: str):
        self.client = client
        self.repo = repo
        self._repository: RepositoryInfo | None = None

    def get_repository(self) -> RepositoryInfo:
        """Repository metadata, fetched once."""
        if self._repository is None:
            data = self.client.get_repository(self.repo)
            self._repository = RepositoryInfo(
                full_name=data["full_name"],
                name=data["name"],
                clone_url=data["clone_url"],
                html_url=data["html_url"],
            )
        return self._repository

    def get_change_request(self, number: int) -> ChangeRequest:
        return _parse_change_request(self.client.get_pull_request(self.repo, number))

    def list_commits(self, number: int) -> list[str]:
        """List commit SHAs of a PR.

        The order is GitHub's (oldest first) and must not be changed:
        replaying commits out of order changes which ones conflict.
        """
        return [commit["sha"] for commit in self.client.list_pull_request_commits(self.repo, number)]

    def comment(self, number: int, body: str) -> None:
        self.client.create_issue_comment(self.repo, number, body)

    def create_pull_request(
        self, title: str, head: str, base: str, body: str, draft: bool = False
    ) -> CreatedPullRequest:
        data = self.client.create_pull_request(
            self.repo,
            title=title,
            head=head,
            base=base,
            body=body,
            maintainer_can_modify=True,
            draft=draft,
        )
        return _parse_created_pull_request(data)
