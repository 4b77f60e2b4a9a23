"""
Upstream Response Transformers

Converts raw Linear and GitHub JSON into domain objects. Transformation
happens once per fetch; nothing downstream touches raw payloads.

Usage:
    from workboard.collectors.transformers import IssueTransformer, PullRequestTransformer

    issues = [IssueTransformer.transform_issue(node) for node in nodes]
    prs = PullRequestTransformer.transform_search_nodes(nodes)
"""

from typing import Any

from workboard.domain.issues import Issue, IssueAssignee, IssuePriority, IssueProject, IssueStatus, IssueTeam
from workboard.domain.pulls import (
    CheckRun,
    CICheck,
    CIJob,
    CIStatus,
    PRAuthor,
    PRLabel,
    PullRequest,
    RepoRef,
    StatusContext,
)

MAX_LABELS = 10


class IssueTransformer:
    """
    Transform Linear issue nodes to Issue objects.
    """

    @staticmethod
    def transform_issue(node: dict[str, Any]) -> Issue:
        """
        Transform one Linear issue node.

        Linear node:
        {
            "id": "a1b2", "identifier": "ENG-42", "title": "...", "url": "...",
            "createdAt": "...", "updatedAt": "...", "priority": 2,
            "state": {"name": "In Progress", "type": "started", "color": "#f2c94c"},
            "project": {"name": "Auth", "icon": null, "color": "#bec2c8"} | null,
            "assignee": {"name": "Sam", "avatarUrl": "..."} | null,
            "team": {"name": "Engineering", "key": "ENG"}
        }

        Args:
            node: Raw issue node

        Returns:
            Issue (priority is None when the node has no priority)
        """
        state = node.get("state") or {}
        project = node.get("project")
        assignee = node.get("assignee")
        team = node.get("team") or {}
        priority = node.get("priority")

        return Issue(
            id=node["id"],
            identifier=node.get("identifier", ""),
            title=node.get("title", ""),
            url=node.get("url", ""),
            status=IssueStatus(
                name=state.get("name", ""),
                type=state.get("type", ""),
                color=state.get("color", ""),
            ),
            priority=IssuePriority.from_value(priority) if priority is not None else None,
            project=(
                IssueProject(name=project.get("name", ""), icon=project.get("icon"), color=project.get("color", ""))
                if project
                else None
            ),
            assignee=(
                IssueAssignee(name=assignee.get("name", ""), avatar_url=assignee.get("avatarUrl")) if assignee else None
            ),
            created_at=node.get("createdAt", ""),
            updated_at=node.get("updatedAt", ""),
            team=IssueTeam(name=team.get("name", ""), key=team.get("key", "")),
        )


class PullRequestTransformer:
    """
    Transform GitHub search nodes and Actions jobs to domain objects.
    """

    @staticmethod
    def transform_check(context: dict[str, Any]) -> CICheck:
        """
        Transform one statusCheckRollup context.

        The __typename tag picks the variant: "CheckRun" nodes carry
        name/status/conclusion/detailsUrl, "StatusContext" nodes carry
        context/state/targetUrl.
        """
        if context.get("__typename") == "CheckRun":
            return CheckRun(
                name=context.get("name", ""),
                status=context.get("status"),
                conclusion=context.get("conclusion"),
                details_url=context.get("detailsUrl"),
            )
        return StatusContext(
            name=context.get("context", ""),
            state=context.get("state"),
            target_url=context.get("targetUrl"),
        )

    @staticmethod
    def transform_pull_request(node: dict[str, Any]) -> PullRequest:
        """
        Transform one PullRequest search node.

        Only the most recent commit is requested, so commits.nodes has at most
        one entry; its oid becomes head_sha and its rollup the CI status.

        Args:
            node: Raw PullRequest node

        Returns:
            PullRequest with jobs unset
        """
        commit_nodes = (node.get("commits") or {}).get("nodes") or []
        commit = (commit_nodes[0] or {}).get("commit") if commit_nodes else None
        rollup = (commit or {}).get("statusCheckRollup")
        contexts = ((rollup or {}).get("contexts") or {}).get("nodes") or []

        repository = node.get("repository") or {}
        author = node.get("author")
        labels = (node.get("labels") or {}).get("nodes") or []

        return PullRequest(
            id=node["id"],
            number=node["number"],
            title=node.get("title", ""),
            url=node.get("url", ""),
            repo=RepoRef(
                owner=(repository.get("owner") or {}).get("login", ""),
                name=repository.get("name", ""),
                url=repository.get("url", ""),
            ),
            author=(
                PRAuthor(login=author.get("login", ""), avatar_url=author.get("avatarUrl", ""), url=author.get("url", ""))
                if author
                else None
            ),
            updated_at=node.get("updatedAt", ""),
            created_at=node.get("createdAt", ""),
            is_draft=bool(node.get("isDraft", False)),
            labels=tuple(
                PRLabel(name=label.get("name", ""), color=label.get("color", "")) for label in labels[:MAX_LABELS]
            ),
            head_sha=(commit or {}).get("oid"),
            status=CIStatus(
                rollup=(rollup or {}).get("state"),
                checks=tuple(PullRequestTransformer.transform_check(c) for c in contexts if c),
            ),
        )

    @staticmethod
    def transform_search_nodes(nodes: list[dict[str, Any]]) -> list[PullRequest]:
        """
        Transform a page of search results, skipping non-PR hits.

        `... on PullRequest` leaves issue hits as empty objects.
        """
        return [PullRequestTransformer.transform_pull_request(node) for node in nodes if node and node.get("id")]

    @staticmethod
    def transform_job(job: dict[str, Any]) -> CIJob:
        """
        Transform one Actions job.

        A missing status is reported as "queued".
        """
        return CIJob(
            name=job.get("name", ""),
            status=job.get("status") or "queued",
            conclusion=job.get("conclusion"),
            started_at=job.get("started_at"),
            html_url=job.get("html_url", ""),
        )
