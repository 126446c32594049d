"""GitHub App authentication.

Signs short-lived app JWTs with the App private key and exchanges them for
installation access tokens, which scope API calls to the installation that
delivered a webhook.
"""

import logging
import time
from typing import Any, Dict, Optional

import httpx
import jwt

from src.issue_agent.github.client import GitHubAPIError


logger = logging.getLogger(__name__)


# GitHub rejects app JWTs that live longer than 10 minutes
JWT_LIFETIME_SECONDS = 540
JWT_CLOCK_SKEW_SECONDS = 60


class GitHubAppAuth:
    """Authenticates as a GitHub App.

    Attributes:
        app_id: The GitHub App identifier (JWT issuer).
        base_url: Base URL for the REST API.
        timeout: Request timeout in seconds.
    """

    def __init__(
        self,
        app_id: str,
        private_key: str,
        base_url: str = "https://api.github.com",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.app_id = app_id
        self._private_key = private_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def create_app_jwt(self, now: Optional[int] = None) -> str:
        """Create an RS256-signed JWT identifying the app.

        Args:
            now: Current unix time; defaults to ``time.time()``.

        Returns:
            The encoded JWT.
        """
        issued_at = int(time.time()) if now is None else now
        payload = {
            "iat": issued_at - JWT_CLOCK_SKEW_SECONDS,
            "exp": issued_at + JWT_LIFETIME_SECONDS,
            "iss": self.app_id,
        }
        return jwt.encode(payload, self._private_key, algorithm="RS256")

    async def _app_request(self, method: str, path: str) -> Dict[str, Any]:
        headers = {
            "Authorization": f"Bearer {self.create_app_jwt()}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": "git-issue-agent/1.0",
        }
        url = f"{self.base_url}{path}"

        async with httpx.AsyncClient(
            timeout=self.timeout,
            transport=self._transport,
        ) as client:
            try:
                response = await client.request(method, url, headers=headers)
            except httpx.RequestError as e:
                raise GitHubAPIError(
                    message=f"Request to GitHub failed: {e}",
                    request_url=url,
                ) from e

        if response.status_code >= 400:
            raise GitHubAPIError(
                message=f"GitHub App authentication failed: {response.status_code}",
                status_code=response.status_code,
                response_body=response.text,
                request_url=url,
            )

        try:
            return response.json()
        except ValueError as e:
            raise GitHubAPIError(
                message=f"Invalid JSON in GitHub response: {e}",
                status_code=response.status_code,
                response_body=response.text,
                request_url=url,
            ) from e

    async def get_app(self) -> Dict[str, Any]:
        """Fetch the authenticated app (``GET /app``).

        Raises:
            GitHubAPIError: If the app credentials are rejected.
        """
        return await self._app_request("GET", "/app")

    async def get_installation_token(self, installation_id: int) -> str:
        """Mint an access token for an app installation.

        Args:
            installation_id: The installation that delivered the webhook.

        Returns:
            The installation access token.

        Raises:
            GitHubAPIError: If the token cannot be created.
        """
        data = await self._app_request(
            "POST",
            f"/app/installations/{installation_id}/access_tokens",
        )
        token = data.get("token") if isinstance(data, dict) else None
        if not isinstance(token, str) or not token:
            raise GitHubAPIError(
                message="Installation token missing from GitHub response",
                request_url=f"{self.base_url}/app/installations/{installation_id}/access_tokens",
            )

        logger.debug(
            "Created installation token",
            extra={"installation_id": installation_id},
        )
        return token
