"""Agent dispatcher for issue comments.

Receives ``issue_comment.created`` events and drives them through:
bot filter -> trigger match -> issue context -> agent chat -> reply comment.

A triggered comment always gets a reply: when the agent cannot be reached
or answers with something unusable, the reply carries an error description
in place of the agent's response.

Source:
- src/issue_agent/context.py (IssueContextBuilder)
- src/issue_agent/triggers.py (matches_trigger)
- src/issue_agent/formatting.py (quote_comment, compose_reply)
- src/issue_agent/agent/client.py (AgentClient)
"""

import logging

from src.issue_agent.agent.client import AgentClient
from src.issue_agent.agent.models import (
    AgentCallResult,
    AgentCallSuccess,
    AgentHttpError,
    AgentNetworkError,
    AgentParseError,
    AgentRequest,
    AgentResponse,
    InitialState,
)
from src.issue_agent.context import IssueContextBuilder
from src.issue_agent.formatting import compose_reply, quote_comment
from src.issue_agent.github.client import GitHubClient
from src.issue_agent.triggers import find_trigger
from src.issue_agent.webhook.models import IssueCommentEvent

logger = logging.getLogger(__name__)


AGENT_ERROR_PREFIX = "Error communicating with agent"


def fallback_response(result: AgentCallResult) -> AgentResponse:
    """Convert an agent call result into the response to relay.

    Args:
        result: Outcome of the agent chat call.

    Returns:
        The agent's response on success, otherwise a response whose text
        describes the failure and whose chat history is empty.
    """
    if isinstance(result, AgentCallSuccess):
        return result.response
    if isinstance(result, AgentHttpError):
        detail = f"HTTP {result.status_code}: {result.message}"
    elif isinstance(result, AgentNetworkError):
        detail = f"network error: {result.detail}"
    elif isinstance(result, AgentParseError):
        detail = f"invalid response: {result.detail}"
    else:
        raise TypeError(f"Unknown agent call result: {result!r}")
    return AgentResponse(response=f"{AGENT_ERROR_PREFIX}: {detail}", chat_history=[])


class AgentDispatcher:
    """Forwards triggered issue comments to the agent and posts replies.

    Attributes:
        agent_client: Client for the agent chat API.
    """

    def __init__(self, agent_client: AgentClient):
        self.agent_client = agent_client

    async def handle_issue_comment(
        self, event: IssueCommentEvent, github_client: GitHubClient
    ) -> None:
        """Handle one ``issue_comment.created`` delivery.

        Args:
            event: Parsed comment event.
            github_client: Client scoped to the installation that delivered
                the event.

        Raises:
            GitHubAPIError: If the issue metadata cannot be read or the
                reply cannot be posted.
        """
        if event.author_is_bot:
            logger.debug(
                "Ignoring comment from bot account",
                extra={"issue_id": event.issue_id, "author": event.author},
            )
            return

        # Most comments are not addressed to the agent; those cost no API calls
        trigger = find_trigger(event.comment_body)
        if trigger is None:
            return

        context = await IssueContextBuilder(github_client).build(
            event.owner, event.repository, event.number
        )

        logger.info(
            "Comment triggered the agent",
            extra={
                "issue_id": event.issue_id,
                "author": event.author,
                "trigger": trigger,
            },
        )

        quoted = quote_comment(event.comment_body)
        request = AgentRequest(
            message=event.comment_body,
            chat_history=[],
            initial_state=InitialState(
                user_name=event.author,
                repository_name=event.repository,
                issue_context=context.text,
            ),
        )

        result = await self.agent_client.chat(request)
        response = fallback_response(result)

        await github_client.create_comment(
            event.owner,
            event.repository,
            event.number,
            compose_reply(quoted, response.response),
        )
