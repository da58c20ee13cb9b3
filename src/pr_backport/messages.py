"""Comment bodies posted on the original pull request."""

from .models import CreatedPullRequest


def backport_title(target_branch: str, title: str) -> str:
    return f"[{target_branch}] Backport {title}"


def backport_body(change_number: int, target_branch: str) -> str:
    return f"Backport #{change_number} to {target_branch}."


def manual_instructions(
    clone_url: str,
    change_number: int,
    commits: list[str],
    backport_branch: str,
    target_branch: str,
    title: str,
) -> str:
    """Build step-by-step instructions to perform a backport by hand.

    Every commit of the pull request is listed, not only the ones left
    after a failure, so the whole sequence can be redone from a fresh clone.
    The output depends only on the arguments.

    Args:
        clone_url: URL to clone the repository from.
        change_number: Number of the pull request being backported.
        commits: Commit SHAs of the pull request, in replay order.
        backport_branch: Name of the branch to create.
        target_branch: Maintenance branch receiving the backport.
        title: Title of the original pull request.

    Returns:
        Markdown text.
    """
    lines = [
        "Run:",
        "```",
        f"git clone {clone_url}",
        f"git fetch origin pull/{change_number}/head:pr-{change_number}",
        f"git checkout -b {target_branch} origin/{target_branch}",
        f"git checkout -b {backport_branch}",
        "# One or more of the following commands will fail, you will need to fix the conflict manually",
    ]
    lines += [f"git cherry-pick {commit}" for commit in commits]
    lines += [
        "# Once all commits have been cherry-picked:",
        f"git push --set-upstream origin {backport_branch}",
        "```",
        "",
        "To fix the conflict, first check which file is impacted using: `git status`",
        "For each file with a resolved conflict, execute: `git add $FILE`",
        "Then, commit the files using the same commit message as the original commit: "
        '`git commit -m "..."`',
        "",
        "Once done and pushed, open the pull request.",
        "",
        f"* Title: {backport_title(target_branch, title)}",
        f"* Message: {backport_body(change_number, target_branch)}",
        f"* ⚡ **Set the target branch to {target_branch}**",
        "* Set the milestone and the labels if needed",
    ]
    return "\n".join(lines) + "\n"


def conflict_comment(target_branch: str, instructions: str) -> str:
    return (
        f"Cannot backport to {target_branch} due to merge conflicts. "
        f"Please backport manually:\n{instructions}"
    )


def failure_comment(target_branch: str, error: str, instructions: str) -> str:
    return (
        f"Cannot backport to {target_branch}: {error}\n"
        f"Please backport manually:\n{instructions}"
    )


def summary_comment(created: list[CreatedPullRequest], repository_html_url: str) -> str:
    """List the backport pull requests created during a run.

    Args:
        created: Created pull requests, in the order they were opened.
        repository_html_url: Web URL of the repository.

    Returns:
        Markdown text.
    """
    lines = ["Created Backports: "]
    for pr in created:
        lines.append(
            f"- #{pr.number} to [{pr.head_branch}]({repository_html_url}/tree/{pr.base_branch})"
        )
    return "\n".join(lines) + "\n"
