import os
import subprocess


class AuthenticationError(Exception):
    """Raised when no GitHub token can be obtained."""

    pass


def get_github_token(token: str | None = None) -> str:
    """Get a GitHub token from an explicit value, the environment or gh CLI.

    Args:
        token: Token passed on the command line, if any.

    Returns:
        GitHub authentication token.

    Raises:
        AuthenticationError: If no token can be obtained.
    """
    if token:
        return token

    # Actions runners always export GITHUB_TOKEN, prefer it over gh
    token = os.environ.get("GITHUB_TOKEN")
    if token:
        return token

    try:
        result = subprocess.run(
            ["gh", "auth", "token"],
            capture_output=True,
            text=True,
            check=True,
        )
        token = result.stdout.strip()
        if token:
            return token
    except (subprocess.CalledProcessError, FileNotFoundError):
        pass

    raise AuthenticationError(
        "Cannot obtain GitHub authentication.\n\n"
        "Provide a token using one of the following methods:\n\n"
        "  1. Pass it explicitly: --token <token>\n"
        "  2. Set the GITHUB_TOKEN environment variable\n"
        "     (in a workflow: env: GITHUB_TOKEN: ${{ secrets.GITHUB_TOKEN }})\n"
        "  3. Log in with the GitHub CLI: gh auth login\n\n"
        "The token needs 'contents: write' and 'pull-requests: write' permissions."
    )
