"""Webhook event handlers for the issue agent.

- pull_request.opened: post the pull request welcome message
- issues.opened: post the issue welcome message
- issue_comment.created: hand the comment to the AgentDispatcher

Welcome messages are markdown templates read once at startup.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from src.issue_agent.dispatcher import AgentDispatcher
from src.issue_agent.router import EventContext, EventRouter
from src.issue_agent.webhook.models import EventKind, IssueCommentEvent

logger = logging.getLogger(__name__)


TEMPLATES_DIR = Path(__file__).parent / "templates"
ISSUE_WELCOME_TEMPLATE = "issue_welcome.md"
PULL_REQUEST_WELCOME_TEMPLATE = "pull_request_welcome.md"


@dataclass(frozen=True)
class WelcomeMessages:
    issue: str
    pull_request: str


def load_welcome_messages(templates_dir: Optional[Path] = None) -> WelcomeMessages:
    """Read the welcome message templates.

    Args:
        templates_dir: Directory holding the templates. Defaults to the
            templates shipped with the package.

    Raises:
        OSError: If a template cannot be read.
    """
    directory = templates_dir or TEMPLATES_DIR
    return WelcomeMessages(
        issue=(directory / ISSUE_WELCOME_TEMPLATE).read_text(encoding="utf-8"),
        pull_request=(directory / PULL_REQUEST_WELCOME_TEMPLATE).read_text(
            encoding="utf-8"
        ),
    )


class EventHandlers:
    """Handler callbacks bound to their collaborators.

    Attributes:
        dispatcher: Forwards triggered comments to the agent.
        messages: Welcome messages for new issues and pull requests.
    """

    def __init__(self, dispatcher: AgentDispatcher, messages: WelcomeMessages):
        self.dispatcher = dispatcher
        self.messages = messages

    async def on_pull_request_opened(self, context: EventContext) -> None:
        event = context.event
        logger.info("Received a pull request event for #%s", event.number)
        await context.github.create_comment(
            event.owner, event.repository, event.number, self.messages.pull_request
        )

    async def on_issue_opened(self, context: EventContext) -> None:
        event = context.event
        logger.info("Received an issue opened event for #%s", event.number)
        await context.github.create_comment(
            event.owner, event.repository, event.number, self.messages.issue
        )

    async def on_issue_comment_created(self, context: EventContext) -> None:
        event = context.event
        if not isinstance(event, IssueCommentEvent):
            raise TypeError(f"Expected IssueCommentEvent, got {type(event).__name__}")
        logger.info("Received an issue comment event for #%s", event.number)
        await self.dispatcher.handle_issue_comment(event, context.github)

    def register(self, router: EventRouter) -> EventRouter:
        router.on(EventKind.PULL_REQUEST_OPENED, self.on_pull_request_opened)
        router.on(EventKind.ISSUES_OPENED, self.on_issue_opened)
        router.on(EventKind.ISSUE_COMMENT_CREATED, self.on_issue_comment_created)
        return router


def build_router(dispatcher: AgentDispatcher, messages: WelcomeMessages) -> EventRouter:
    """Create an EventRouter with every supported handler registered."""
    return EventHandlers(dispatcher, messages).register(EventRouter())
