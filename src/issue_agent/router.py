"""Event routing for webhook deliveries.

The EventRouter holds an explicit mapping from ``<event>.<action>`` to the
handler for it. Each delivery is dispatched at most once, and a failing
handler is logged without affecting the server or other deliveries.
"""

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Optional

from src.issue_agent.github.client import GitHubAPIError, GitHubClient
from src.issue_agent.webhook.models import EventKind, WebhookEvent

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EventContext:
    """Everything a handler needs for one delivery.

    Attributes:
        event: The parsed webhook event.
        github: Client scoped to the installation that delivered the event.
        delivery_id: Value of the ``X-GitHub-Delivery`` header, if any.
    """

    event: WebhookEvent
    github: GitHubClient
    delivery_id: Optional[str] = None

    @property
    def kind(self) -> EventKind:
        return self.event.kind


EventHandler = Callable[[EventContext], Awaitable[None]]


class EventRouter:
    """Maps event kinds to handler callbacks."""

    def __init__(self) -> None:
        self._handlers: Dict[EventKind, EventHandler] = {}

    def on(self, kind: EventKind, handler: EventHandler) -> None:
        """Register the handler for an event kind, replacing any previous one."""
        self._handlers[kind] = handler

    def handler_for(self, kind: EventKind) -> Optional[EventHandler]:
        return self._handlers.get(kind)

    def supports(self, kind: EventKind) -> bool:
        return kind in self._handlers

    async def dispatch(self, context: EventContext) -> bool:
        """Invoke the handler registered for the delivery's event kind.

        Handler errors are logged and not re-raised.

        Args:
            context: The delivery to handle.

        Returns:
            True if a handler ran to completion, False if no handler is
            registered or the handler failed.
        """
        handler = self.handler_for(context.kind)
        if handler is None:
            logger.debug("No handler registered for %s", context.kind.value)
            return False

        try:
            await handler(context)
        except GitHubAPIError as e:
            logger.error(
                "Error! Status: %s. Message: %s",
                e.status_code,
                e.message,
                extra={
                    "event": context.kind.value,
                    "issue_id": context.event.issue_id,
                    "delivery_id": context.delivery_id,
                    "request_url": e.request_url,
                },
            )
            return False
        except Exception:
            logger.exception(
                "Error processing webhook event",
                extra={
                    "event": context.kind.value,
                    "issue_id": context.event.issue_id,
                    "delivery_id": context.delivery_id,
                },
            )
            return False

        return True
