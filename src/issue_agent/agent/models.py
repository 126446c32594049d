"""Agent chat API models.

AgentRequest and AgentResponse mirror the JSON bodies of the agent's
``/agent/chat`` endpoint. AgentCallResult is the outcome of one chat call:
exactly one of success, HTTP error, network error or parse error.
"""

from dataclasses import dataclass
from typing import List, Union

from pydantic import BaseModel, Field


class InitialState(BaseModel):
    """Conversation seed sent with the first message."""

    user_name: str = Field(..., description="Login of the comment author")
    repository_name: str = Field(..., description="Repository the issue belongs to")
    issue_context: str = Field(..., description="Rendered issue summary")


class AgentRequest(BaseModel):
    """Outbound chat request."""

    message: str
    chat_history: List[str] = Field(default_factory=list)
    initial_state: InitialState


class AgentResponse(BaseModel):
    """Inbound chat response."""

    response: str
    chat_history: List[str]


@dataclass(frozen=True)
class AgentCallSuccess:
    response: AgentResponse


@dataclass(frozen=True)
class AgentHttpError:
    """The agent answered with a non-2xx status."""

    status_code: int
    message: str


@dataclass(frozen=True)
class AgentNetworkError:
    """The request never produced a response (connection, timeout)."""

    detail: str


@dataclass(frozen=True)
class AgentParseError:
    """The response body was not a valid AgentResponse."""

    detail: str


AgentCallResult = Union[AgentCallSuccess, AgentHttpError, AgentNetworkError, AgentParseError]
