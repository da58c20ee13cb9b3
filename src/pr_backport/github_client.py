import time
from datetime import datetime
from typing import Generator

import httpx
from rich.console import Console

from .config import DEFAULT_API_URL


class RateLimitError(Exception):
    """Raised when GitHub API rate limit is exceeded."""

    pass


class GitHubClient:
    """GitHub API client with pagination and rate limit handling."""

    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_API_URL,
        auto_wait: bool = True,
        transport: httpx.BaseTransport | None = None,
        console: Console | None = None,
    ):
        self.client = httpx.Client(
            base_url=base_url,
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
            },
            timeout=30.0,
            transport=transport,
        )
        self.auto_wait = auto_wait
        self.console = console or Console()

    def close(self):
        """Close the HTTP client."""
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def get_repository(self, repo: str) -> dict:
        """Get repository metadata.

        Args:
            repo: Repository in format 'owner/repo'.

        Returns:
            Repository data dictionary.
        """
        return self._request("GET", f"/repos/{repo}").json()

    def get_pull_request(self, repo: str, pr_number: int) -> dict:
        """Get detailed information about a specific PR.

        Args:
            repo: Repository in format 'owner/repo'.
            pr_number: The PR number.

        Returns:
            PR details dictionary.
        """
        return self._request("GET", f"/repos/{repo}/pulls/{pr_number}").json()

    def list_pull_request_commits(self, repo: str, pr_number: int) -> list[dict]:
        """List the commits of a PR in the order GitHub reports them.

        Args:
            repo: Repository in format 'owner/repo'.
            pr_number: The PR number.

        Returns:
            List of commit data dictionaries.
        """
        return list(self._paginate(f"/repos/{repo}/pulls/{pr_number}/commits"))

    def create_issue_comment(self, repo: str, issue_number: int, body: str) -> dict:
        """Post a comment on an issue or PR.

        Args:
            repo: Repository in format 'owner/repo'.
            issue_number: Issue or PR number.
            body: Markdown comment body.

        Returns:
            Created comment data dictionary.
        """
        response = self._request(
            "POST",
            f"/repos/{repo}/issues/{issue_number}/comments",
            json={"body": body},
        )
        return response.json()

    def create_pull_request(
        self,
        repo: str,
        title: str,
        head: str,
        base: str,
        body: str,
        maintainer_can_modify: bool = True,
        draft: bool = False,
    ) -> dict:
        """Open a new PR.

        Args:
            repo: Repository in format 'owner/repo'.
            title: PR title.
            head: Branch containing the changes.
            base: Branch the changes should be merged into.
            body: PR description.
            maintainer_can_modify: Allow maintainers to push to the head branch.
            draft: Open the PR as a draft.

        Returns:
            Created PR data dictionary.
        """
        response = self._request(
            "POST",
            f"/repos/{repo}/pulls",
            json={
                "title": title,
                "head": head,
                "base": base,
                "body": body,
                "maintainer_can_modify": maintainer_can_modify,
                "draft": draft,
            },
        )
        return response.json()

    def _request(self, method: str, endpoint: str, **kwargs) -> httpx.Response:
        """Send a request, waiting out rate limits.

        Raises:
            httpx.HTTPStatusError: If GitHub answers with an error status.
        """
        while True:
            response = self.client.request(method, endpoint, **kwargs)
            if self._handle_rate_limit(response):
                continue  # Retry after waiting
            response.raise_for_status()
            return response

    def _paginate(
        self, endpoint: str, params: dict | None = None
    ) -> Generator[dict, None, None]:
        """Handle paginated API requests.

        Args:
            endpoint: API endpoint path.
            params: Optional query parameters.

        Yields:
            Response items.
        """
        params = params or {}
        params["per_page"] = 100
        page = 1

        while True:
            params["page"] = page
            data = self._request("GET", endpoint, params=params).json()

            if not data:
                break

            yield from data

            if len(data) < 100:
                break

            page += 1

    def _handle_rate_limit(self, response: httpx.Response) -> bool:
        """Check and handle rate limit from response headers.

        Args:
            response: HTTP response object.

        Returns:
            True if request should be retried after waiting.

        Raises:
            RateLimitError: If rate limit is exceeded and auto_wait is disabled.
        """
        remaining = response.headers.get("X-RateLimit-Remaining")
        reset_timestamp = response.headers.get("X-RateLimit-Reset")

        if remaining is not None and int(remaining) == 0:
            if reset_timestamp:
                reset_time = int(reset_timestamp)
                wait_seconds = max(0, reset_time - int(time.time())) + 1

                if self.auto_wait and wait_seconds <= 120:  # Max wait 2 minutes
                    self.console.print(
                        f"[yellow]Rate limit reached. Waiting {wait_seconds} seconds...[/yellow]"
                    )
                    time.sleep(wait_seconds)
                    return True  # Signal to retry
                else:
                    reset_dt = datetime.fromtimestamp(reset_time)
                    raise RateLimitError(
                        f"GitHub API rate limit exceeded. Resets at: {reset_dt.strftime('%H:%M:%S')}\n"
                        f"Try again in {wait_seconds} seconds, or wait and re-run the command."
                    )
            else:
                raise RateLimitError("GitHub API rate limit exceeded.")

        # Proactively slow down if remaining is low
        if remaining is not None and int(remaining) < 5:
            time.sleep(2)

        return False
