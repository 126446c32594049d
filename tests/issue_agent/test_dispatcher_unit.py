"""Unit tests for the AgentDispatcher.

Mocks the GitHub and agent clients and asserts which outbound calls are
made for bot comments, untriggered comments, triggered comments, and each
agent failure mode.
"""

import asyncio
from typing import Optional
from unittest.mock import AsyncMock

import pytest
from hypothesis import given, settings, strategies as st

from src.issue_agent.agent.client import AgentClient
from src.issue_agent.agent.models import (
    AgentCallSuccess,
    AgentHttpError,
    AgentNetworkError,
    AgentParseError,
    AgentRequest,
    AgentResponse,
)
from src.issue_agent.dispatcher import AGENT_ERROR_PREFIX, AgentDispatcher, fallback_response
from src.issue_agent.github.client import GitHubAPIError, GitHubClient
from src.issue_agent.github.models import IssueMetadata
from src.issue_agent.triggers import TRIGGER_PATTERNS
from src.issue_agent.webhook.models import IssueCommentEvent


def run_async(coro):
    return asyncio.run(coro)


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------


def _make_event(
    body: str = "@gia what is left to do?",
    author: str = "alice",
    author_is_bot: bool = False,
) -> IssueCommentEvent:
    return IssueCommentEvent(
        owner="acme",
        repository="widgets",
        number=20,
        sender=author,
        installation_id=1,
        comment_id=555,
        comment_body=body,
        author=author,
        author_is_bot=author_is_bot,
    )


def _make_github() -> AsyncMock:
    github = AsyncMock(spec=GitHubClient)
    github.get_issue_metadata = AsyncMock(
        return_value=IssueMetadata.from_github_response(
            {
                "title": "Test issue",
                "number": 20,
                "state": "open",
                "created_at": "2024-05-01T10:00:00Z",
                "updated_at": "2024-05-01T11:00:00Z",
                "labels": [{"name": "bug"}],
                "assignees": [],
                "milestone": None,
                "body": "Something broke",
            }
        )
    )
    github.get_linked_branches = AsyncMock(return_value=["20-test-issue"])
    github.create_comment = AsyncMock(return_value={"id": 1})
    return github


def _make_agent(result=None, side_effect: Optional[Exception] = None) -> AsyncMock:
    agent = AsyncMock(spec=AgentClient)
    if side_effect is not None:
        agent.chat = AsyncMock(side_effect=side_effect)
    else:
        agent.chat = AsyncMock(
            return_value=result
            or AgentCallSuccess(
                response=AgentResponse(response="Fix the null check.", chat_history=[])
            )
        )
    return agent


def _posted_body(github: AsyncMock) -> str:
    github.create_comment.assert_awaited_once()
    args = github.create_comment.await_args.args
    assert args[:3] == ("acme", "widgets", 20)
    return args[3]


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


class TestShortCircuits:
    def test_bot_comment_makes_no_calls(self):
        github, agent = _make_github(), _make_agent()
        event = _make_event(body="@gia hello", author="ci[bot]", author_is_bot=True)

        run_async(AgentDispatcher(agent).handle_issue_comment(event, github))

        assert github.mock_calls == []
        agent.chat.assert_not_called()

    def test_untriggered_comment_makes_no_calls(self):
        github, agent = _make_github(), _make_agent()

        run_async(
            AgentDispatcher(agent).handle_issue_comment(_make_event(body="LGTM"), github)
        )

        assert github.mock_calls == []
        agent.chat.assert_not_called()

    @settings(max_examples=50, deadline=None)
    @given(body=st.text(alphabet=st.characters(blacklist_characters="@/")))
    def test_no_trigger_no_outbound_calls(self, body: str):
        github, agent = _make_github(), _make_agent()

        run_async(AgentDispatcher(agent).handle_issue_comment(_make_event(body=body), github))

        assert github.mock_calls == []
        agent.chat.assert_not_called()

    @settings(max_examples=25, deadline=None)
    @given(body=st.text(max_size=40), pattern=st.sampled_from(TRIGGER_PATTERNS))
    def test_bot_never_calls_out(self, body: str, pattern: str):
        github, agent = _make_github(), _make_agent()
        event = _make_event(body=body + pattern.upper(), author_is_bot=True)

        run_async(AgentDispatcher(agent).handle_issue_comment(event, github))

        assert github.mock_calls == []
        agent.chat.assert_not_called()


class TestTriggeredComment:
    def test_agent_request_assembled(self):
        github, agent = _make_github(), _make_agent()
        body = "@GIA what is left\nto do?"

        run_async(AgentDispatcher(agent).handle_issue_comment(_make_event(body=body), github))

        agent.chat.assert_awaited_once()
        request: AgentRequest = agent.chat.await_args.args[0]
        assert request.message == body
        assert request.chat_history == []
        assert request.initial_state.user_name == "alice"
        assert request.initial_state.repository_name == "widgets"
        assert "Title: Test issue" in request.initial_state.issue_context
        assert "Linked Branches: 20-test-issue" in request.initial_state.issue_context

    def test_reply_quotes_comment_then_response(self):
        github, agent = _make_github(), _make_agent()

        run_async(
            AgentDispatcher(agent).handle_issue_comment(
                _make_event(body="/ask why\nis it broken?"), github
            )
        )

        assert _posted_body(github) == "> /ask why\n> is it broken?\n\nFix the null check."

    @pytest.mark.parametrize(
        "result",
        [
            AgentHttpError(status_code=500, message="Internal Server Error"),
            AgentNetworkError(detail="ConnectError: connection refused"),
            AgentParseError(detail="Invalid JSON"),
        ],
    )
    def test_agent_failure_still_replies(self, result):
        github, agent = _make_github(), _make_agent(result=result)

        run_async(
            AgentDispatcher(agent).handle_issue_comment(_make_event(body="@gia help"), github)
        )

        body = _posted_body(github)
        quoted, explanation = body.split("\n\n", 1)
        assert quoted == "> @gia help"
        assert explanation.startswith(AGENT_ERROR_PREFIX)
        assert len(explanation) > len(AGENT_ERROR_PREFIX)

    def test_http_error_detail_in_reply(self):
        github = _make_github()
        agent = _make_agent(result=AgentHttpError(status_code=500, message="boom"))

        run_async(AgentDispatcher(agent).handle_issue_comment(_make_event(), github))

        assert "HTTP 500: boom" in _posted_body(github)

    def test_linked_branch_failure_still_replies(self):
        github, agent = _make_github(), _make_agent()
        github.get_linked_branches = AsyncMock(side_effect=GitHubAPIError("Bad credentials", 401))

        run_async(AgentDispatcher(agent).handle_issue_comment(_make_event(), github))

        request: AgentRequest = agent.chat.await_args.args[0]
        assert "Linked Branches: None" in request.initial_state.issue_context
        github.create_comment.assert_awaited_once()

    def test_metadata_failure_propagates_without_agent_call(self):
        github, agent = _make_github(), _make_agent()
        github.get_issue_metadata = AsyncMock(side_effect=GitHubAPIError("Not Found", 404))

        with pytest.raises(GitHubAPIError):
            run_async(AgentDispatcher(agent).handle_issue_comment(_make_event(), github))

        agent.chat.assert_not_called()
        github.create_comment.assert_not_called()


class TestFallbackResponse:
    def test_success_passes_through(self):
        response = AgentResponse(response="hi", chat_history=["x"])
        assert fallback_response(AgentCallSuccess(response=response)) is response

    def test_errors_have_empty_history(self):
        response = fallback_response(AgentNetworkError(detail="down"))
        assert response.chat_history == []
        assert response.response == f"{AGENT_ERROR_PREFIX}: network error: down"

    def test_unknown_result_rejected(self):
        with pytest.raises(TypeError):
            fallback_response(object())
