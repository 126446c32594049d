"""GitHub issue data models for the issue agent.

The issue-read API reports labels either as plain strings or as objects
with a ``name`` field. Labels are normalized into a discriminated union
right after deserialization so downstream code only sees label names.
"""

from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class PlainLabel(BaseModel):
    """A label reported as a bare string. Carries no usable name."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["plain"] = "plain"
    value: str


class NamedLabel(BaseModel):
    """A label reported as an object with a ``name`` field."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["named"] = "named"
    name: str


Label = Annotated[Union[PlainLabel, NamedLabel], Field(discriminator="kind")]


def normalize_label(raw: Any) -> Optional[Union[PlainLabel, NamedLabel]]:
    """Convert a raw label entry into a Label variant.

    Args:
        raw: A label entry from the issue payload.

    Returns:
        PlainLabel for strings, NamedLabel for objects with a string
        ``name``, or None for anything else.
    """
    if isinstance(raw, str):
        return PlainLabel(value=raw)
    if isinstance(raw, dict) and isinstance(raw.get("name"), str):
        return NamedLabel(name=raw["name"])
    return None


class IssueMetadata(BaseModel):
    """Issue fields consumed by the issue context builder.

    Attributes:
        title: The issue title.
        number: The issue number within the repository.
        state: Issue state as reported by GitHub ("open", "closed").
        created_at: Creation timestamp, as reported by GitHub.
        updated_at: Last update timestamp, as reported by GitHub.
        labels: Normalized labels.
        assignees: Logins of the assigned users.
        milestone: Milestone title, if the issue has one.
        body: Issue description, if any.
    """

    model_config = ConfigDict(frozen=True)

    title: str
    number: int
    state: str
    created_at: str
    updated_at: str
    labels: List[Label] = Field(default_factory=list)
    assignees: List[str] = Field(default_factory=list)
    milestone: Optional[str] = None
    body: Optional[str] = None

    @property
    def label_names(self) -> List[str]:
        """Names of the structured labels; plain string labels are dropped."""
        return [label.name for label in self.labels if isinstance(label, NamedLabel)]

    @classmethod
    def from_github_response(cls, data: Dict[str, Any]) -> "IssueMetadata":
        """Build IssueMetadata from a REST issue payload.

        Args:
            data: JSON body of ``GET /repos/{owner}/{repo}/issues/{number}``.

        Returns:
            The parsed metadata.

        Raises:
            pydantic.ValidationError: If required fields are missing.
        """
        labels = []
        for raw in data.get("labels") or []:
            label = normalize_label(raw)
            if label is not None:
                labels.append(label)

        assignees = [
            assignee["login"]
            for assignee in data.get("assignees") or []
            if isinstance(assignee, dict) and isinstance(assignee.get("login"), str)
        ]

        milestone_data = data.get("milestone")
        milestone = None
        if isinstance(milestone_data, dict):
            milestone = milestone_data.get("title")

        return cls(
            title=data.get("title"),
            number=data.get("number"),
            state=data.get("state"),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
            labels=labels,
            assignees=assignees,
            milestone=milestone,
            body=data.get("body"),
        )
