"""Agent chat API access.

The agent is an external chat service; this package sends issue comments
and context to it and reports each call's outcome as a tagged result.
"""

from .client import AgentClient
from .models import (
    AgentCallResult,
    AgentCallSuccess,
    AgentHttpError,
    AgentNetworkError,
    AgentParseError,
    AgentRequest,
    AgentResponse,
    InitialState,
)

__all__ = [
    "AgentCallResult",
    "AgentCallSuccess",
    "AgentClient",
    "AgentHttpError",
    "AgentNetworkError",
    "AgentParseError",
    "AgentRequest",
    "AgentResponse",
    "InitialState",
]
