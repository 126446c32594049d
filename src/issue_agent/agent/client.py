"""HTTP client for the agent chat API.

Sends a single ``POST {base_url}/agent/chat`` per call and reports the
outcome as an AgentCallResult instead of raising. No retries.
"""

import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from src.issue_agent.agent.models import (
    AgentCallResult,
    AgentCallSuccess,
    AgentHttpError,
    AgentNetworkError,
    AgentParseError,
    AgentRequest,
    AgentResponse,
)


logger = logging.getLogger(__name__)


CHAT_PATH = "/agent/chat"


class AgentClient:
    """Async client for the agent chat endpoint.

    Attributes:
        base_url: Agent base URL, as resolved from the network settings.
        timeout: Request timeout in seconds.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 120.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def chat_url(self) -> str:
        return f"{self.base_url}{CHAT_PATH}"

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def chat(self, request: AgentRequest) -> AgentCallResult:
        """Send a chat request to the agent.

        Args:
            request: The assembled chat request.

        Returns:
            AgentCallSuccess with the parsed response, or the error variant
            describing why no usable response was obtained.
        """
        logger.info(
            "Sending chat request to agent",
            extra={
                "url": self.chat_url,
                "user_name": request.initial_state.user_name,
                "repository_name": request.initial_state.repository_name,
            },
        )

        try:
            response = await self.client.post(
                self.chat_url,
                content=request.model_dump_json(),
                headers={"Content-Type": "application/json"},
            )
        except httpx.HTTPError as e:
            logger.error(
                "Agent request failed",
                extra={"url": self.chat_url, "error": str(e)},
            )
            return AgentNetworkError(detail=f"{type(e).__name__}: {e}")

        if not response.is_success:
            logger.error(
                "Agent returned an error status",
                extra={
                    "url": self.chat_url,
                    "status_code": response.status_code,
                    "response_body": response.text[:500],
                },
            )
            return AgentHttpError(
                status_code=response.status_code,
                message=response.text or response.reason_phrase,
            )

        try:
            parsed = AgentResponse.model_validate_json(response.content)
        except ValidationError as e:
            logger.error(
                "Agent response could not be parsed",
                extra={"url": self.chat_url, "error": str(e)},
            )
            return AgentParseError(detail=str(e))

        return AgentCallSuccess(response=parsed)
