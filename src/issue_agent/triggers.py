"""Trigger detection for issue comments.

A comment is forwarded to the agent when its body contains one of the
trigger patterns. Matching is case-insensitive substring containment, so
"/ask" also matches inside "/asking"; this is the established behavior
and a known source of false positives.
"""

from typing import Optional


TRIGGER_PATTERNS = ("@gia", "@git-issue-agent", "/gia", "/ask")


def find_trigger(comment_body: Optional[str]) -> Optional[str]:
    """Return the first trigger pattern found in a comment body.

    Args:
        comment_body: Raw comment text. ``None`` is treated as empty.

    Returns:
        The matching pattern, or None if the comment contains none.
    """
    if not comment_body:
        return None

    lowered = comment_body.lower()
    for pattern in TRIGGER_PATTERNS:
        if pattern.lower() in lowered:
            return pattern
    return None


def matches_trigger(comment_body: Optional[str]) -> bool:
    """Check whether a comment body activates the agent."""
    return find_trigger(comment_body) is not None
