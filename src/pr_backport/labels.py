DEFAULT_LABEL_PREFIX = "backport-"


def resolve_target_branches(
    labels: list[str],
    prefix: str = DEFAULT_LABEL_PREFIX,
) -> list[str]:
    """Resolve backport target branches from pull request labels.

    Args:
        labels: Label names attached to the pull request.
        prefix: Label prefix marking a backport request.

    Returns:
        Target branch names with the prefix stripped, without duplicates,
        in the order the labels were first seen.
    """
    branches: list[str] = []
    for label in labels:
        if not label.startswith(prefix):
            continue
        branch = label[len(prefix):]
        if branch and branch not in branches:
            branches.append(branch)
    return branches
