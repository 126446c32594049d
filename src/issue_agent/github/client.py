"""GitHub API client for issue interactions.

This module provides an async wrapper around the GitHub REST and GraphQL
APIs for:
- Reading issue metadata
- Querying branches linked to an issue
- Creating comments on issues and pull requests

Every call is attempted exactly once. Failures of any kind (HTTP errors,
network errors, malformed responses) surface as GitHubAPIError.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from src.issue_agent.github.models import IssueMetadata


logger = logging.getLogger(__name__)


LINKED_BRANCHES_QUERY = """
query ($owner: String!, $repo: String!, $number: Int!) {
    repository(owner: $owner, name: $repo) {
        issue(number: $number) {
            linkedBranches(first: 10) {
                edges {
                    node {
                        ref {
                            name
                        }
                    }
                }
            }
        }
    }
}
"""


class GitHubAPIError(Exception):
    """Raised when a GitHub API request fails.

    Attributes:
        message: Human-readable error description.
        status_code: HTTP status code from the response, if any.
        response_body: Response body from GitHub API.
        request_url: The URL that was requested.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
        request_url: Optional[str] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.response_body = response_body
        self.request_url = request_url
        super().__init__(message)


class GitHubClient:
    """Async GitHub API client scoped to one access token.

    Supports both github.com and GitHub Enterprise Server through the
    ``base_url`` and ``graphql_url`` arguments.

    Attributes:
        token: GitHub API token (installation token or PAT).
        base_url: Base URL for the REST API.
        graphql_url: Absolute URL of the GraphQL endpoint.
        graphql_token: Token used for GraphQL queries. Defaults to ``token``.
        timeout: Request timeout in seconds.

    Example:
        >>> async with GitHubClient(token="ghs_xxx") as client:
        ...     await client.create_comment("owner", "repo", 123, "Hello!")
    """

    def __init__(
        self,
        token: str,
        base_url: str = "https://api.github.com",
        graphql_url: str = "https://api.github.com/graphql",
        graphql_token: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.graphql_url = graphql_url
        self.graphql_token = graphql_token or token
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get the HTTP client, creating it if necessary."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=self._default_headers(),
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    def _default_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": "git-issue-agent/1.0",
        }

    async def close(self) -> None:
        """Close the HTTP client and release resources."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "GitHubClient":
        return self

    async def __aexit__(
        self,
        exc_type: Any,
        exc_val: Any,
        exc_tb: Any,
    ) -> None:
        await self.close()

    async def _request(
        self,
        method: str,
        path: str,
        json_data: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        """Make a single HTTP request.

        Args:
            method: HTTP method (GET, POST, ...).
            path: API path relative to ``base_url``, or an absolute URL.
            json_data: Optional JSON body for the request.
            headers: Optional headers overriding the defaults.

        Returns:
            The HTTP response from GitHub.

        Raises:
            GitHubAPIError: On network errors and 4xx/5xx responses.
        """
        try:
            response = await self.client.request(
                method=method,
                url=path,
                json=json_data,
                headers=headers,
            )
        except httpx.RequestError as e:
            logger.error(
                "GitHub API request failed",
                extra={"path": path, "method": method, "error": str(e)},
            )
            raise GitHubAPIError(
                message=f"Request to GitHub failed: {e}",
                request_url=path,
            ) from e

        if response.status_code >= 400:
            error_body = response.text
            logger.error(
                "GitHub API error",
                extra={
                    "status_code": response.status_code,
                    "path": path,
                    "method": method,
                    "response_body": error_body[:500],
                },
            )
            raise GitHubAPIError(
                message=_error_message(response),
                status_code=response.status_code,
                response_body=error_body,
                request_url=str(response.url),
            )

        return response

    def _json(self, response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise GitHubAPIError(
                message=f"Invalid JSON in GitHub response: {e}",
                status_code=response.status_code,
                response_body=response.text,
                request_url=str(response.url),
            ) from e

    async def create_comment(
        self,
        owner: str,
        repo: str,
        issue_number: int,
        body: str,
    ) -> Dict[str, Any]:
        """Create a comment on an issue or pull request.

        Args:
            owner: Repository owner (user or organization).
            repo: Repository name.
            issue_number: Issue or pull request number to comment on.
            body: Comment body in markdown format.

        Returns:
            The created comment data from GitHub API.

        Raises:
            GitHubAPIError: If the request fails.
        """
        path = f"/repos/{owner}/{repo}/issues/{issue_number}/comments"

        logger.info(
            "Creating comment on issue",
            extra={
                "owner": owner,
                "repo": repo,
                "issue_number": issue_number,
                "body_length": len(body),
            },
        )

        response = await self._request(
            method="POST",
            path=path,
            json_data={"body": body},
        )

        result = self._json(response)
        logger.info(
            "Comment created successfully",
            extra={
                "owner": owner,
                "repo": repo,
                "issue_number": issue_number,
                "comment_id": result.get("id") if isinstance(result, dict) else None,
            },
        )

        return result

    async def get_issue(
        self,
        owner: str,
        repo: str,
        issue_number: int,
    ) -> Dict[str, Any]:
        """Get raw issue details.

        Raises:
            GitHubAPIError: If the request fails.
        """
        path = f"/repos/{owner}/{repo}/issues/{issue_number}"

        logger.debug(
            "Getting issue details",
            extra={
                "owner": owner,
                "repo": repo,
                "issue_number": issue_number,
            },
        )

        response = await self._request(method="GET", path=path)
        return self._json(response)

    async def get_issue_metadata(
        self,
        owner: str,
        repo: str,
        issue_number: int,
    ) -> IssueMetadata:
        """Get issue details parsed into IssueMetadata.

        Raises:
            GitHubAPIError: If the request fails or the payload is malformed.
        """
        data = await self.get_issue(owner, repo, issue_number)
        if not isinstance(data, dict):
            raise GitHubAPIError(
                message="Unexpected issue payload from GitHub",
                request_url=f"{self.base_url}/repos/{owner}/{repo}/issues/{issue_number}",
            )
        try:
            return IssueMetadata.from_github_response(data)
        except ValidationError as e:
            raise GitHubAPIError(
                message=f"Malformed issue payload from GitHub: {e}",
                request_url=f"{self.base_url}/repos/{owner}/{repo}/issues/{issue_number}",
            ) from e

    async def graphql(
        self,
        query: str,
        variables: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Execute a GraphQL query and return its ``data`` object.

        Raises:
            GitHubAPIError: If the request fails or GraphQL reports errors.
        """
        response = await self._request(
            method="POST",
            path=self.graphql_url,
            json_data={"query": query, "variables": variables or {}},
            headers={"Authorization": f"Bearer {self.graphql_token}"},
        )

        payload = self._json(response)
        if not isinstance(payload, dict):
            raise GitHubAPIError(
                message="Unexpected GraphQL payload",
                request_url=self.graphql_url,
            )

        errors = payload.get("errors")
        if errors:
            messages = "; ".join(
                str(error.get("message", error)) if isinstance(error, dict) else str(error)
                for error in errors
            )
            raise GitHubAPIError(
                message=f"GraphQL query failed: {messages}",
                status_code=response.status_code,
                response_body=response.text,
                request_url=self.graphql_url,
            )

        data = payload.get("data")
        if not isinstance(data, dict):
            raise GitHubAPIError(
                message="GraphQL response has no data",
                request_url=self.graphql_url,
            )
        return data

    async def get_linked_branches(
        self,
        owner: str,
        repo: str,
        issue_number: int,
    ) -> List[str]:
        """Get the names of branches linked to an issue (first 10).

        Raises:
            GitHubAPIError: If the query fails or the result is malformed.
        """
        data = await self.graphql(
            LINKED_BRANCHES_QUERY,
            {"owner": owner, "repo": repo, "number": issue_number},
        )

        try:
            edges = data["repository"]["issue"]["linkedBranches"]["edges"]
            branches = [edge["node"]["ref"]["name"] for edge in edges]
        except (KeyError, TypeError) as e:
            raise GitHubAPIError(
                message=f"Malformed linked branches response: {e!r}",
                request_url=self.graphql_url,
            ) from e

        logger.debug(
            "Fetched linked branches",
            extra={
                "owner": owner,
                "repo": repo,
                "issue_number": issue_number,
                "branches": branches,
            },
        )
        return branches


def _error_message(response: httpx.Response) -> str:
    """Build an error message from a failed GitHub response."""
    detail = None
    try:
        body = response.json()
        if isinstance(body, dict):
            detail = body.get("message")
    except ValueError:
        pass
    if detail:
        return f"GitHub API error: {response.status_code} {detail}"
    return f"GitHub API error: {response.status_code}"
