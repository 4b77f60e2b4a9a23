"""
Issue domain models - Linear issues for the personal dashboard

Represents an issue as fetched from Linear, plus the priority rules used to
order the dashboard list:
    - Priority naming (0=No priority ... 4=Low)
    - Priority ranking (urgent first, no priority last)
    - Sort order (rank ascending, then most recently updated)
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from workboard.utils.datetime_utils import parse_iso_timestamp

PRIORITY_NAMES = {
    0: "No priority",
    1: "Urgent",
    2: "High",
    3: "Normal",
    4: "Low",
}
UNKNOWN_PRIORITY_NAME = "Unknown"

# Rank given to issues without a priority so they sort after Low (4)
NO_PRIORITY_RANK = 999


def priority_name(value: int) -> str:
    """
    Display name for a Linear priority value.

    Args:
        value: Upstream priority integer

    Returns:
        Name from PRIORITY_NAMES, or "Unknown" for any other value
    """
    return PRIORITY_NAMES.get(value, UNKNOWN_PRIORITY_NAME)


@dataclass(frozen=True)
class IssueStatus:
    name: str
    type: str
    color: str


@dataclass(frozen=True)
class IssuePriority:
    """
    Issue priority as shown on the dashboard.

    Attributes:
        value: Upstream priority (0=No priority, 1=Urgent, 2=High, 3=Normal, 4=Low)
        name: Display name
    """

    value: int
    name: str

    @classmethod
    def from_value(cls, value: int) -> "IssuePriority":
        return cls(value=value, name=priority_name(value))


@dataclass(frozen=True)
class IssueProject:
    name: str
    icon: str | None
    color: str


@dataclass(frozen=True)
class IssueAssignee:
    name: str
    avatar_url: str | None


@dataclass(frozen=True)
class IssueTeam:
    name: str
    key: str


@dataclass(frozen=True)
class Issue:
    """
    Represents a Linear issue relevant to the token owner.

    Immutable snapshot of upstream state at fetch time.

    Attributes:
        id: Linear issue id
        identifier: Human-readable key (e.g., "ENG-123")
        title: Issue title
        url: Link to the issue
        status: Workflow state {name, type (category), color}
        priority: Priority, or None when upstream has none
        project: Owning project, if any
        assignee: Assignee, if any
        created_at: ISO 8601 timestamp
        updated_at: ISO 8601 timestamp
        team: Owning team {name, key}

    Example:
        issue = Issue(
            id="a1b2",
            identifier="ENG-42",
            title="Fix login redirect",
            url="https://linear.app/acme/issue/ENG-42",
            status=IssueStatus(name="In Progress", type="started", color="#f2c94c"),
            priority=IssuePriority.from_value(2),
            project=None,
            assignee=None,
            created_at="2026-01-15T10:00:00Z",
            updated_at="2026-01-20T08:30:00Z",
            team=IssueTeam(name="Engineering", key="ENG"),
        )
        issue.sort_rank  # 2
    """

    id: str
    identifier: str
    title: str
    url: str
    status: IssueStatus
    priority: IssuePriority | None
    project: IssueProject | None
    assignee: IssueAssignee | None
    created_at: str
    updated_at: str
    team: IssueTeam

    @property
    def sort_rank(self) -> int:
        """
        Priority rank used for ordering.

        Returns:
            NO_PRIORITY_RANK for a missing priority or priority 0, else the value
        """
        if self.priority is None or self.priority.value == 0:
            return NO_PRIORITY_RANK
        return self.priority.value

    @property
    def updated_at_dt(self) -> datetime | None:
        """Parsed updated_at, or None when it cannot be parsed."""
        try:
            return parse_iso_timestamp(self.updated_at)
        except ValueError:
            return None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the camelCase JSON shape served to the dashboard."""
        return {
            "id": self.id,
            "identifier": self.identifier,
            "title": self.title,
            "url": self.url,
            "status": {"name": self.status.name, "type": self.status.type, "color": self.status.color},
            "priority": (
                {"value": self.priority.value, "name": self.priority.name} if self.priority is not None else None
            ),
            "project": (
                {"name": self.project.name, "icon": self.project.icon, "color": self.project.color}
                if self.project is not None
                else None
            ),
            "assignee": (
                {"name": self.assignee.name, "avatarUrl": self.assignee.avatar_url}
                if self.assignee is not None
                else None
            ),
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "team": {"name": self.team.name, "key": self.team.key},
        }


def sort_issues(issues: list[Issue]) -> list[Issue]:
    """
    Order issues for display.

    Ascending by sort_rank (Urgent first, no priority last); within a rank the
    most recently updated issue comes first. Issues whose updated_at cannot be
    parsed go after the parseable ones of the same rank.

    Returns:
        New sorted list (the input is not modified)
    """

    def sort_key(issue: Issue) -> tuple[int, int, float]:
        updated = issue.updated_at_dt
        if updated is None:
            return (issue.sort_rank, 1, 0.0)
        return (issue.sort_rank, 0, -updated.timestamp())

    return sorted(issues, key=sort_key)
