"""GitHub API access for the issue agent.

This package provides:
- GitHub App authentication (app JWT, installation tokens)
- An async REST/GraphQL client for issues, comments and linked branches
- Issue metadata models with normalized labels
"""

from src.issue_agent.github.auth import GitHubAppAuth
from src.issue_agent.github.client import GitHubAPIError, GitHubClient
from src.issue_agent.github.models import (
    IssueMetadata,
    NamedLabel,
    PlainLabel,
    normalize_label,
)

__all__ = [
    "GitHubAPIError",
    "GitHubAppAuth",
    "GitHubClient",
    "IssueMetadata",
    "NamedLabel",
    "PlainLabel",
    "normalize_label",
]
