"""
Bug-fix detection from commit messages.
"""

from .config import BUG_FIX_PATTERN


def classify_bug_fix(message: str) -> str | None:
    """Return the bug id referenced by a "Fixes #123" style message, or None"""
    match = BUG_FIX_PATTERN.search(message or '')
    if match:
        return match.group(2)
    return None
