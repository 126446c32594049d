"""GitHub webhook handling for the issue agent.

This module verifies and parses GitHub webhook deliveries, specifically:
- issues.opened - New issue created
- pull_request.opened - New pull request created
- issue_comment.created - Comment posted on an issue
"""

from .handler import WebhookHandler, verify_signature
from .models import (
    EventKind,
    IssueCommentEvent,
    IssueOpenedEvent,
    PullRequestOpenedEvent,
    WebhookEvent,
)

__all__ = [
    "EventKind",
    "IssueCommentEvent",
    "IssueOpenedEvent",
    "PullRequestOpenedEvent",
    "WebhookEvent",
    "WebhookHandler",
    "verify_signature",
]
