"""Small helpers for GitLab payload fields."""

from __future__ import annotations

import html
import logging

logger = logging.getLogger(__name__)

NULL_COMMIT = "0" * 40


def short_hash(sha: str | None, width: int = 7) -> str:
    """
    Shorten a commit hash for display.

    Example
    -------
    'a1b2c3d4e5f6...' → 'a1b2c3d'

    Hashes already shorter than ``width`` come back unchanged.
    """
    return (sha or "")[:width]


def is_null_commit(sha: str | None) -> bool:
    """True for the all-zero hash GitLab sends on branch creation/deletion."""
    return sha == NULL_COMMIT


def branch_from_ref(ref: str | None) -> str:
    """
    Extract the branch name from a git ref.

    Example
    -------
    'refs/heads/feature/x' → 'feature/x'

    A ref with fewer than three components is returned as-is.
    """
    ref = ref or ""
    parts = ref.split("/")
    if len(parts) < 3:
        logger.warning("Unexpected ref without branch component: %r", ref)
        return ref
    return "/".join(parts[2:])


def namespace_from_git_url(url: str | None) -> str:
    """
    Parse the namespace out of a repository git URL.

    Example
    -------
    'git@gitlab.example.com:group/project.git' → 'group'
    'https://gitlab.example.com/group/project.git' → 'group'
    """
    if not url:
        return ""
    if "://" in url:
        path = url.split("://", 1)[1]
        parts = path.split("/")
        return parts[1] if len(parts) > 2 else ""
    if ":" in url:
        path = url.split(":", 1)[1]
        parts = path.split("/")
        return parts[0] if len(parts) > 1 else ""
    return ""


def first_line(text: str | None) -> str:
    if not text:
        return ""
    lines = text.splitlines()
    return lines[0] if lines else ""


def commit_message(raw: str | None) -> str:
    """HTML-unescape a commit message and keep only its subject line."""
    return first_line(html.unescape(raw or ""))


def format_duration(value: float | int | None) -> str:
    """Render seconds without a trailing '.0' for whole numbers."""
    if value is None:
        return ""
    if float(value).is_integer():
        return str(int(value))
    return str(value)
