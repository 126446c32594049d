"""GitHub webhook intake for the issue agent.

This module verifies webhook signatures and parses raw payloads into the
typed events of webhook/models.py.

GitHub Webhook Payload Structure (issue_comment event):
{
  "action": "created",
  "issue": {"number": 20, ...},
  "comment": {
    "id": 1,
    "body": "@gia what is left to do here?",
    "user": {"login": "username", "type": "User"}
  },
  "repository": {
    "name": "repo-name",
    "owner": {"login": "owner-name"}
  },
  "sender": {"login": "username"},
  "installation": {"id": 12345}
}
"""

import hashlib
import hmac
import logging
from typing import Any, Dict, Optional

from pydantic import ValidationError

from .models import (
    EventKind,
    IssueCommentEvent,
    IssueOpenedEvent,
    PullRequestOpenedEvent,
    WebhookEvent,
)

logger = logging.getLogger(__name__)


SIGNATURE_PREFIX = "sha256="


def verify_signature(body: bytes, signature: Optional[str], secret: str) -> bool:
    """Verify the ``X-Hub-Signature-256`` header of a delivery.

    Args:
        body: The raw request body.
        signature: The header value, ``sha256=<hex digest>``.
        secret: The webhook shared secret.

    Returns:
        True if the signature matches the body.
    """
    if not signature or not signature.startswith(SIGNATURE_PREFIX):
        return False

    expected = hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()
    return hmac.compare_digest(f"{SIGNATURE_PREFIX}{expected}", signature)


class WebhookHandler:
    """Verifies and parses GitHub webhook deliveries.

    Attributes:
        secret: The webhook shared secret.
    """

    def __init__(self, secret: str) -> None:
        self.secret = secret

    def verify(self, body: bytes, signature: Optional[str]) -> bool:
        return verify_signature(body, signature, self.secret)

    def parse_event(
        self, event_name: Optional[str], payload: Any
    ) -> Optional[WebhookEvent]:
        """Parse a webhook payload into a typed event.

        Args:
            event_name: Value of the ``X-GitHub-Event`` header.
            payload: The decoded JSON payload.

        Returns:
            The typed event for supported ``<event>.<action>`` pairs,
            None for unsupported events or malformed payloads.
        """
        if not isinstance(payload, dict):
            logger.warning("Invalid payload: expected dict, got %s", type(payload))
            return None

        kind = self._parse_kind(event_name, payload.get("action"))
        if kind is None:
            logger.debug(
                "Ignoring unsupported event: %s.%s",
                event_name,
                payload.get("action"),
            )
            return None

        try:
            common = self._extract_common(payload)
            if kind is EventKind.ISSUE_COMMENT_CREATED:
                event = self._parse_issue_comment(payload, common)
            elif kind is EventKind.ISSUES_OPENED:
                issue = payload.get("issue") or {}
                event = IssueOpenedEvent(
                    number=issue.get("number"),
                    title=issue.get("title") or "",
                    **common,
                )
            else:
                pull_request = payload.get("pull_request") or {}
                event = PullRequestOpenedEvent(
                    number=pull_request.get("number"),
                    title=pull_request.get("title") or "",
                    **common,
                )
        except (ValidationError, AttributeError, TypeError) as e:
            logger.warning("Malformed %s payload: %s", kind.value, e)
            return None

        logger.info(
            "Parsed webhook event: kind=%s, issue=%s",
            kind.value,
            event.issue_id,
        )
        return event

    def _parse_kind(self, event_name: Any, action: Any) -> Optional[EventKind]:
        if not isinstance(event_name, str) or not isinstance(action, str):
            return None
        try:
            return EventKind(f"{event_name}.{action}")
        except ValueError:
            return None

    def _extract_common(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        repository = payload.get("repository") or {}
        owner = repository.get("owner") or {}
        sender = payload.get("sender") or {}
        installation = payload.get("installation") or {}

        return {
            "owner": owner.get("login"),
            "repository": repository.get("name"),
            "sender": sender.get("login") or "",
            "installation_id": installation.get("id"),
        }

    def _parse_issue_comment(
        self, payload: Dict[str, Any], common: Dict[str, Any]
    ) -> IssueCommentEvent:
        issue = payload.get("issue") or {}
        comment = payload.get("comment") or {}
        user = comment.get("user") or {}

        return IssueCommentEvent(
            number=issue.get("number"),
            comment_id=comment.get("id"),
            comment_body=comment.get("body") or "",
            author=user.get("login"),
            author_is_bot=user.get("type") == "Bot",
            **common,
        )
