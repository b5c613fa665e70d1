"""CODEOWNERS-based approval for coverage overrides.

Every failure mode here resolves to "no approval": an unreadable CODEOWNERS
file, an empty owner set and a missing PR author all deny the override.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Iterable

logger = logging.getLogger(__name__)

DEFAULT_CODEOWNERS_PATH = ".github/CODEOWNERS"

MEANINGFUL_STATES = frozenset({"APPROVED", "CHANGES_REQUESTED", "DISMISSED"})

FileReader = Callable[[str], str]
ReviewFetcher = Callable[[], Iterable]


def read_text(path: str) -> str:
    return Path(path).read_text(encoding="utf-8")


def parse_codeowners(content: str) -> set[str]:
    """Return the individual ``@handle`` owners named in CODEOWNERS content.

    Team entries (``@org/team``) are skipped: reviews are always authored by
    individual logins, so a team slug can never match one.
    """
    owners: set[str] = set()
    for line in content.splitlines():
        if line.startswith("#") or not line.strip():
            continue
        for token in line.split("#", 1)[0].split():
            if not token.startswith("@") or "/" in token:
                continue
            handle = token[1:]
            if handle:
                owners.add(handle)
    return owners


def load_codeowners(path: str = DEFAULT_CODEOWNERS_PATH, reader: FileReader | None = None) -> set[str] | None:
    """Read and parse a CODEOWNERS file, or return None when it cannot be read."""
    reader = reader or read_text
    try:
        content = reader(path)
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Could not read CODEOWNERS at %s: %s", path, e)
        return None
    return parse_codeowners(content)


def _strip_bot_suffix(login: str) -> str:
    return login.removesuffix("-bot")


def is_sole_owner(owners: set[str], pr_author: str | None) -> bool:
    """True when the PR author (or their ``-bot`` account) is the only codeowner.

    GitHub does not let authors review their own PRs, so a solo developer
    could never obtain an approval; the override label alone suffices.
    """
    if len(owners) != 1 or not pr_author:
        return False
    return pr_author in owners or _strip_bot_suffix(pr_author) in owners


def latest_review_states(reviews: Iterable, exclude_login: str | None = None) -> dict[str, str]:
    """Reduce reviews (in fetch order) to each reviewer's latest meaningful state."""
    latest: dict[str, str] = {}
    for review in reviews:
        user = getattr(review, "user", None)
        login = getattr(user, "login", None)
        # Deleted accounts come back with no user
        if not login or login == exclude_login:
            continue
        if review.state in MEANINGFUL_STATES:
            latest[login] = review.state
    return latest


def has_approval(
    review_fetcher: ReviewFetcher,
    codeowners_file: str = DEFAULT_CODEOWNERS_PATH,
    pr_author: str | None = None,
    reader: FileReader | None = None,
) -> bool:
    """Return True if a codeowner other than the PR author currently approves the PR."""
    owners = load_codeowners(codeowners_file, reader)
    if owners is None:
        return False
    if not owners:
        logger.warning("CODEOWNERS at %s lists no individual owners; override cannot be approved", codeowners_file)
        return False

    if is_sole_owner(owners, pr_author):
        logger.info("PR author %s is the sole codeowner; override label is sufficient", pr_author)
        return True

    states = latest_review_states(review_fetcher(), exclude_login=pr_author)
    approvers = sorted(login for login, state in states.items() if state == "APPROVED" and login in owners)
    if approvers:
        logger.info("Coverage override approved by codeowner(s): %s", ", ".join(approvers))
        return True
    return False
