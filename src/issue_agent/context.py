"""Issue context assembly for agent requests.

Fetches issue metadata and linked branches and renders them into the
fixed-format text summary sent to the agent as ``issue_context``.

Issue metadata is required: a failed fetch propagates to the caller.
Linked branches are supplementary: a failed lookup is logged and the
context is rendered with no branches.
"""

import logging
from typing import Iterable, List

from pydantic import BaseModel, ConfigDict

from src.issue_agent.github.client import GitHubAPIError, GitHubClient
from src.issue_agent.github.models import IssueMetadata


logger = logging.getLogger(__name__)


NONE_PLACEHOLDER = "None"
NO_DESCRIPTION_PLACEHOLDER = "No description provided."


class IssueContext(BaseModel):
    """Rendered issue summary for one agent request."""

    model_config = ConfigDict(frozen=True)

    text: str

    def __str__(self) -> str:
        return self.text


def _join_or_none(values: Iterable[str]) -> str:
    joined = ", ".join(values)
    return joined if joined else NONE_PLACEHOLDER


def render_issue_context(metadata: IssueMetadata, linked_branches: List[str]) -> str:
    """Render issue metadata and linked branches as a text block.

    Args:
        metadata: Parsed issue metadata.
        linked_branches: Names of branches linked to the issue.

    Returns:
        The formatted context text.
    """
    lines = [
        f"Title: {metadata.title}",
        f"Issue Number: #{metadata.number}",
        f"State: {metadata.state}",
        f"Created At: {metadata.created_at}",
        f"Updated At: {metadata.updated_at}",
        f"Labels: {_join_or_none(metadata.label_names)}",
        f"Assignees: {_join_or_none(metadata.assignees)}",
        f"Milestone: {metadata.milestone or NONE_PLACEHOLDER}",
        f"Linked Branches: {_join_or_none(linked_branches)}",
        "Description:",
        metadata.body or NO_DESCRIPTION_PLACEHOLDER,
    ]
    return "\n".join(lines)


class IssueContextBuilder:
    """Builds IssueContext values from the GitHub API.

    Attributes:
        github_client: Client scoped to the installation that owns the issue.
    """

    def __init__(self, github_client: GitHubClient):
        self.github_client = github_client

    async def build(self, owner: str, repo: str, issue_number: int) -> IssueContext:
        """Fetch issue data and render the context.

        Args:
            owner: Repository owner.
            repo: Repository name.
            issue_number: Issue number.

        Returns:
            The rendered IssueContext.

        Raises:
            GitHubAPIError: If the issue metadata cannot be fetched.
        """
        metadata = await self.github_client.get_issue_metadata(owner, repo, issue_number)
        linked_branches = await self._linked_branches(owner, repo, issue_number)

        return IssueContext(text=render_issue_context(metadata, linked_branches))

    async def _linked_branches(self, owner: str, repo: str, issue_number: int) -> List[str]:
        try:
            return await self.github_client.get_linked_branches(owner, repo, issue_number)
        except GitHubAPIError as e:
            logger.warning(
                "Failed to fetch linked branches, continuing without them",
                extra={
                    "owner": owner,
                    "repo": repo,
                    "issue_number": issue_number,
                    "status_code": e.status_code,
                    "error": e.message,
                },
            )
            return []
        except Exception:
            logger.exception(
                "Linked branch lookup failed, continuing without them",
                extra={"owner": owner, "repo": repo, "issue_number": issue_number},
            )
            return []
