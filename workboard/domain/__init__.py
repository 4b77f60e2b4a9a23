"""
Domain Models - Type-safe data structures for dashboard work items

This package contains dataclasses representing business domain concepts:
    - issues: Issue, IssuePriority, priority naming and sort order
    - pulls: PullRequest, CIStatus, CheckRun / StatusContext, CIJob

Usage:
    from workboard.domain.issues import Issue, sort_issues
    from workboard.domain.pulls import PullRequest, merge_by_id
"""

from .issues import Issue, IssueAssignee, IssuePriority, IssueProject, IssueStatus, IssueTeam, sort_issues
from .pulls import CheckRun, CIJob, CIStatus, PRAuthor, PRLabel, PullRequest, RepoRef, StatusContext, merge_by_id

__all__ = [
    # Issue domain
    "Issue",
    "IssueStatus",
    "IssuePriority",
    "IssueProject",
    "IssueAssignee",
    "IssueTeam",
    "sort_issues",
    # Pull request domain
    "PullRequest",
    "RepoRef",
    "PRAuthor",
    "PRLabel",
    "CIStatus",
    "CheckRun",
    "StatusContext",
    "CIJob",
    "merge_by_id",
]
