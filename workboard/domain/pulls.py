"""
Pull request domain models - GitHub pull requests and their CI state

Represents pull requests surfaced on the dashboard:
    - Repository / author / label sub-objects
    - CI status: the commit rollup plus individual checks, where a check is
      either a CheckRun (GitHub Actions / Checks API) or a legacy StatusContext
    - CI jobs attached to pending pull requests by enrichment
"""

from collections.abc import Iterable
from dataclasses import dataclass, replace
from typing import Any, Literal

# Rollup states reported by statusCheckRollup
ROLLUP_STATES = frozenset({"SUCCESS", "FAILURE", "PENDING", "ERROR", "EXPECTED", "ACTION_REQUIRED", "TIMED_OUT"})
ROLLUP_PENDING = "PENDING"


@dataclass(frozen=True)
class RepoRef:
    owner: str
    name: str
    url: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"


@dataclass(frozen=True)
class PRAuthor:
    login: str
    avatar_url: str
    url: str


@dataclass(frozen=True)
class PRLabel:
    name: str
    color: str


@dataclass(frozen=True)
class CheckRun:
    """A Checks API result (GitHub Actions and other check apps)."""

    name: str
    status: str | None
    conclusion: str | None
    details_url: str | None
    kind: Literal["CheckRun"] = "CheckRun"

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "name": self.name,
            "status": self.status,
            "conclusion": self.conclusion,
            "detailsUrl": self.details_url,
        }


@dataclass(frozen=True)
class StatusContext:
    """A legacy commit status (Statuses API)."""

    name: str
    state: str | None
    target_url: str | None
    kind: Literal["StatusContext"] = "StatusContext"

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "name": self.name,
            "state": self.state,
            "targetUrl": self.target_url,
        }


CICheck = CheckRun | StatusContext


@dataclass(frozen=True)
class CIStatus:
    """
    CI state of a pull request's head commit.

    Attributes:
        rollup: Aggregate state (see ROLLUP_STATES), or None when no CI reported
        checks: Individual check results
    """

    rollup: str | None
    checks: tuple[CICheck, ...] = ()

    @property
    def is_pending(self) -> bool:
        return self.rollup == ROLLUP_PENDING

    def to_dict(self) -> dict[str, Any]:
        return {"rollup": self.rollup, "checks": [check.to_dict() for check in self.checks]}


@dataclass(frozen=True)
class CIJob:
    """
    Summary of one workflow job, in GitHub REST field naming.

    Attributes:
        name: Job name
        status: queued / in_progress / completed
        conclusion: success / failure / ... or None while running
        started_at: ISO 8601 timestamp, or None
        html_url: Link to the job log
    """

    name: str
    status: str
    conclusion: str | None
    started_at: str | None
    html_url: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "status": self.status,
            "conclusion": self.conclusion,
            "started_at": self.started_at,
            "html_url": self.html_url,
        }


@dataclass(frozen=True)
class PullRequest:
    """
    Represents an open GitHub pull request relevant to the token owner.

    jobs stays None unless enrichment found a workflow run for the head commit.
    Instances are never mutated; with_jobs() returns an enriched copy.

    Example:
        if pr.status.is_pending and pr.head_sha:
            enriched = pr.with_jobs([CIJob(...)])
    """

    id: str
    number: int
    title: str
    url: str
    repo: RepoRef
    author: PRAuthor | None
    updated_at: str
    created_at: str
    is_draft: bool
    labels: tuple[PRLabel, ...]
    head_sha: str | None
    status: CIStatus
    jobs: tuple[CIJob, ...] | None = None

    def with_jobs(self, jobs: Iterable[CIJob]) -> "PullRequest":
        """Return a copy of this pull request carrying the given CI jobs."""
        return replace(self, jobs=tuple(jobs))

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the camelCase JSON shape served to the dashboard."""
        data: dict[str, Any] = {
            "id": self.id,
            "number": self.number,
            "title": self.title,
            "url": self.url,
            "repo": {"owner": self.repo.owner, "name": self.repo.name, "url": self.repo.url},
            "author": (
                {"login": self.author.login, "avatarUrl": self.author.avatar_url, "url": self.author.url}
                if self.author is not None
                else None
            ),
            "updatedAt": self.updated_at,
            "createdAt": self.created_at,
            "isDraft": self.is_draft,
            "labels": [{"name": label.name, "color": label.color} for label in self.labels],
            "headSha": self.head_sha,
            "status": self.status.to_dict(),
        }
        if self.jobs is not None:
            data["jobs"] = [job.to_dict() for job in self.jobs]
        return data


def merge_by_id(batches: Iterable[Iterable[PullRequest]]) -> list[PullRequest]:
    """
    Merge per-scope results for one bucket, keeping one entry per PR id.

    The last occurrence supplies the payload; order follows first insertion.

    Args:
        batches: Result lists in scope order

    Returns:
        Deduplicated list
    """
    merged: dict[str, PullRequest] = {}
    for batch in batches:
        for pr in batch:
            merged[pr.id] = pr
    return list(merged.values())
