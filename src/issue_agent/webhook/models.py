"""GitHub webhook event models for the issue agent.

This module defines the data models for the webhook events the issue agent
reacts to: issues opened, pull requests opened, and issue comments created.
"""

from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, Field


class EventKind(str, Enum):
    """Supported ``<event>.<action>`` combinations.

    Attributes:
        ISSUES_OPENED: A new issue was created.
        PULL_REQUEST_OPENED: A new pull request was created.
        ISSUE_COMMENT_CREATED: A comment was posted on an issue or PR.
    """

    ISSUES_OPENED = "issues.opened"
    PULL_REQUEST_OPENED = "pull_request.opened"
    ISSUE_COMMENT_CREATED = "issue_comment.created"


class RepositoryEvent(BaseModel):
    """Delivery metadata shared by every supported event.

    Attributes:
        owner: The repository owner (user or organization).
        repository: The repository name (without owner prefix).
        number: The issue or pull request number.
        sender: Login of the actor that triggered the event.
        installation_id: App installation that delivered the event.
    """

    owner: str = Field(..., min_length=1)
    repository: str = Field(..., min_length=1)
    number: int = Field(..., gt=0)
    sender: str = Field(default="")
    installation_id: Optional[int] = None

    @property
    def issue_id(self) -> str:
        """Canonical identifier in format ``{owner}/{repository}#{number}``."""
        return f"{self.owner}/{self.repository}#{self.number}"


class IssueOpenedEvent(RepositoryEvent):
    kind: EventKind = EventKind.ISSUES_OPENED
    title: str = ""


class PullRequestOpenedEvent(RepositoryEvent):
    kind: EventKind = EventKind.PULL_REQUEST_OPENED
    title: str = ""


class IssueCommentEvent(RepositoryEvent):
    """A comment created on an issue.

    Attributes:
        comment_id: The comment identifier.
        comment_body: Raw markdown body of the comment.
        author: Login of the comment author.
        author_is_bot: True when GitHub reports the author as a Bot account.
    """

    kind: EventKind = EventKind.ISSUE_COMMENT_CREATED
    comment_id: Optional[int] = None
    comment_body: str = ""
    author: str = Field(..., min_length=1)
    author_is_bot: bool = False


WebhookEvent = Union[IssueOpenedEvent, PullRequestOpenedEvent, IssueCommentEvent]
