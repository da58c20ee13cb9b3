"""Filter GitHub Actions pull_request events down to backport candidates."""

import json
from pathlib import Path

BACKPORT_ACTIONS = ("labeled", "closed")


def load_event(path: Path) -> dict:
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def is_backport_candidate(event: dict, repository: str) -> bool:
    """Check whether an event should trigger a backport.

    Args:
        event: Decoded event payload.
        repository: Repository the workflow runs for, as 'owner/repo'.

    Returns:
        True for merged pull requests that were just labeled or closed
        in the given repository.
    """
    if event.get("repository", {}).get("full_name") != repository:
        return False
    if not event.get("pull_request", {}).get("merged"):
        return False
    return event.get("action") in BACKPORT_ACTIONS


def event_pull_request_number(event: dict) -> int:
    return int(event["number"])
