import shutil
import subprocess
from pathlib import Path
from urllib.parse import urlsplit, urlunsplit

from .models import CherryPickOutcome

REMOTE = "origin"


class GitError(Exception):
    """Raised when a git command fails."""

    def __init__(self, message: str, stderr: str = ""):
        super().__init__(message)
        self.stderr = stderr


class GitTransportError(GitError):
    """Raised when git cannot reach or authenticate against the remote."""

    pass


def authenticated_url(url: str, token: str | None) -> str:
    """Embed a token in an HTTP(S) remote URL.

    Args:
        url: Clone URL of the repository.
        token: GitHub token, or None to leave the URL unchanged.

    Returns:
        URL carrying the token as basic-auth credentials. Non-HTTP URLs
        (local paths, ssh) are returned unchanged.
    """
    parts = urlsplit(url)
    if not token or parts.scheme not in ("http", "https"):
        return url
    host = parts.netloc.rsplit("@", 1)[-1]
    return urlunsplit(
        (parts.scheme, f"x-access-token:{token}@{host}", parts.path, parts.query, parts.fragment)
    )


def pull_request_refspec(number: int) -> str:
    return f"+refs/pull/{number}/head:refs/remotes/{REMOTE}/pr/{number}"


class GitWorkingCopy:
    """Disposable clone of a repository, driven through the git CLI."""

    def __init__(
        self,
        path: Path,
        clone_url: str,
        token: str | None = None,
        user_name: str = "github-actions[bot]",
        user_email: str = "41898282+github-actions[bot]@users.noreply.github.com",
    ):
        self.path = Path(path)
        self.clone_url = clone_url
        self.token = token
        self.user_name = user_name
        self.user_email = user_email
        self._fetched: set[int] = set()

    def prepare(self) -> None:
        """Replace whatever is at the path with a fresh clone.

        Raises:
            GitTransportError: If the clone fails.
        """
        if self.path.is_dir():
            shutil.rmtree(self.path)
        elif self.path.exists():
            self.path.unlink()
        self.path.parent.mkdir(parents=True, exist_ok=True)

        result = self._git(
            "clone",
            authenticated_url(self.clone_url, self.token),
            str(self.path),
            cwd=self.path.parent,
        )
        if result.returncode != 0:
            raise GitTransportError(
                f"Cannot clone {self.clone_url}: {self._redact(result.stderr)}",
                self._redact(result.stderr),
            )

        # keep the token out of .git/config; fetch and push pass it explicitly
        self._run("remote", "set-url", REMOTE, self.clone_url)
        self._run("config", "user.name", self.user_name)
        self._run("config", "user.email", self.user_email)
        self._fetched.clear()

    def fetch_change_ref(self, number: int) -> None:
        """Fetch the head of PR ``number`` into ``origin/pr/<number>``.

        The refspec is registered on the remote once; later calls in the
        same run do nothing.
        """
        if number in self._fetched:
            return

        refspec = pull_request_refspec(number)
        configured = self._git("config", "--get-all", f"remote.{REMOTE}.fetch").stdout.split()
        if refspec not in configured:
            self._run("config", "--add", f"remote.{REMOTE}.fetch", refspec)

        self._run(
            "fetch",
            authenticated_url(self.clone_url, self.token),
            refspec,
            error=GitTransportError,
        )
        self._fetched.add(number)

    def remote_branch_exists(self, name: str) -> bool:
        output = self._run("branch", "--remotes", "--format=%(refname:short)")
        return f"{REMOTE}/{name}" in output.splitlines()

    def checkout_tracking_branch(self, target_branch: str) -> None:
        """Check out a local branch tracking ``origin/<target_branch>``.

        The checkout is forced and untracked files are removed, so nothing
        left over from a previous branch leaks into this one.

        Raises:
            GitError: If the remote branch does not exist.
        """
        if not self.remote_branch_exists(target_branch):
            raise GitError(f"Branch {target_branch} does not exist in {REMOTE}")
        self._run("checkout", "--force", "-B", target_branch, "--track", f"{REMOTE}/{target_branch}")
        self._run("clean", "-fd")

    def create_branch(self, name: str) -> None:
        self._run("checkout", "-b", name)

    def cherry_pick(self, commit: str) -> CherryPickOutcome:
        """Apply a single commit onto HEAD.

        A conflicting pick is aborted, leaving HEAD and the working tree as
        they were before the pick. An empty pick (changes already present) is
        dropped the same way.

        Args:
            commit: SHA of the commit to apply.

        Returns:
            The outcome of the pick.

        Raises:
            GitError: If git fails for any reason other than a conflict or
                an empty pick.
        """
        head = self._run("rev-parse", "HEAD")

        args = ["cherry-pick"]
        if self._is_merge(commit):
            args += ["-m", "1"]
        result = self._git(*args, commit)

        if result.returncode == 0:
            if self._run("rev-parse", "HEAD") == head:
                return CherryPickOutcome.ALREADY_PRESENT
            return CherryPickOutcome.APPLIED

        if self._run("diff", "--name-only", "--diff-filter=U"):
            self._run("cherry-pick", "--abort")
            return CherryPickOutcome.CONFLICT

        if self._git("rev-parse", "-q", "--verify", "CHERRY_PICK_HEAD").returncode == 0:
            empty = self._git("diff", "--cached", "--quiet").returncode == 0
            self._run("cherry-pick", "--abort")
            if empty:
                return CherryPickOutcome.ALREADY_PRESENT

        raise GitError(f"Cannot cherry-pick {commit}: {result.stderr.strip()}", result.stderr)

    def push(self, branch: str, token: str) -> None:
        """Push a branch to the remote in a single atomic transaction.

        Raises:
            GitTransportError: If the push is rejected or the remote is
                unreachable.
        """
        url = authenticated_url(self.clone_url, token)
        result = self._git("push", "--atomic", url, f"refs/heads/{branch}:refs/heads/{branch}")
        if result.returncode != 0:
            stderr = self._redact(result.stderr, token)
            raise GitTransportError(f"Cannot push {branch}: {stderr}", stderr)

    def _is_merge(self, commit: str) -> bool:
        parents = self._run("rev-list", "--parents", "-n", "1", commit).split()
        return len(parents) > 2

    def _run(self, *args: str, error: type[GitError] = GitError) -> str:
        result = self._git(*args)
        if result.returncode != 0:
            stderr = self._redact(result.stderr)
            raise error(f"git {args[0]} failed: {stderr}", stderr)
        return result.stdout.strip()

    def _git(self, *args: str, cwd: Path | None = None) -> subprocess.CompletedProcess[str]:
        return subprocess.run(
            ["git", *args],
            cwd=cwd or self.path,
            capture_output=True,
            text=True,
            check=False,
        )

    def _redact(self, text: str, *secrets: str | None) -> str:
        text = text.strip()
        for secret in (self.token, *secrets):
            if secret:
                text = text.replace(secret, "***")
        return text
