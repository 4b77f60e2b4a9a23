"""
Pytest configuration and shared fixtures

Provides upstream payload builders (Linear issue nodes, GitHub search nodes,
Actions runs and jobs), configuration built from explicit environments, and
a recording httpx.MockTransport standing in for the upstream APIs.
"""

import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from workboard.secure_config import SecureConfig

LINEAR_URL = "https://api.linear.app/graphql"
GITHUB_API = "https://api.github.com"
GITHUB_GRAPHQL = "https://api.github.com/graphql"


# ===== Upstream Payload Builders =====


def make_issue_node(
    issue_id: str = "issue-1",
    identifier: str = "ENG-1",
    priority: int | None = 2,
    updated_at: str = "2026-10-01T10:00:00.000Z",
    **overrides: Any,
) -> dict[str, Any]:
    """Build a Linear issue node as returned by the issues query."""
    node = {
        "id": issue_id,
        "identifier": identifier,
        "title": f"Issue {identifier}",
        "url": f"https://linear.app/acme/issue/{identifier}",
        "createdAt": "2026-09-01T09:00:00.000Z",
        "updatedAt": updated_at,
        "priority": priority,
        "state": {"name": "In Progress", "type": "started", "color": "#f2c94c"},
        "project": {"name": "Auth", "icon": "Lock", "color": "#bec2c8"},
        "assignee": {"name": "Sam Rivera", "avatarUrl": "https://avatars.example/sam.png"},
        "team": {"name": "Engineering", "key": "ENG"},
    }
    node.update(overrides)
    return node


def make_pr_node(
    pr_id: str = "PR_1",
    number: int = 1,
    owner: str = "acme",
    repo: str = "widgets",
    rollup: str | None = "SUCCESS",
    head_sha: str | None = "sha-1",
    title: str | None = None,
    contexts: list[dict[str, Any]] | None = None,
    labels: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    """Build a GitHub PullRequest search node."""
    commits: list[dict[str, Any]] = []
    if head_sha is not None:
        commit: dict[str, Any] = {"oid": head_sha, "statusCheckRollup": None}
        if rollup is not None:
            commit["statusCheckRollup"] = {"state": rollup, "contexts": {"nodes": contexts or []}}
        commits.append({"commit": commit})

    return {
        "id": pr_id,
        "number": number,
        "title": title or f"PR #{number}",
        "url": f"https://github.com/{owner}/{repo}/pull/{number}",
        "createdAt": "2026-09-30T08:00:00Z",
        "updatedAt": "2026-10-01T12:00:00Z",
        "isDraft": False,
        "repository": {"name": repo, "url": f"https://github.com/{owner}/{repo}", "owner": {"login": owner}},
        "author": {"login": "octocat", "url": "https://github.com/octocat", "avatarUrl": "https://avatars.example/o"},
        "labels": {"nodes": labels or []},
        "commits": {"nodes": commits},
    }


def make_run(run_id: int, head_sha: str = "other-sha", pr_numbers: list[int] | None = None) -> dict[str, Any]:
    """Build an Actions workflow run."""
    return {
        "id": run_id,
        "head_sha": head_sha,
        "event": "pull_request",
        "pull_requests": [{"number": n} for n in (pr_numbers or [])],
    }


def make_job(name: str = "build", status: str | None = "in_progress", conclusion: str | None = None) -> dict[str, Any]:
    """Build an Actions job."""
    return {
        "name": name,
        "status": status,
        "conclusion": conclusion,
        "started_at": "2026-10-01T12:01:00Z",
        "html_url": f"https://github.com/acme/widgets/actions/runs/1/job/{name}",
    }


def graphql_body(request: httpx.Request) -> dict[str, Any]:
    """Decode the JSON body of a GraphQL POST."""
    return json.loads(request.content)


# ===== Configuration Fixtures =====


@pytest.fixture
def make_config() -> Callable[..., SecureConfig]:
    """
    Build a SecureConfig from an explicit environment (no .env, no os.environ).

    Example:
        config = make_config(GITHUB_TOKEN="ghp_test", GH_QUERY_ORGS="acme")
    """

    def factory(**env: Any) -> SecureConfig:
        return SecureConfig(environ={key: str(value) for key, value in env.items()})

    return factory


# ===== Upstream Transport Fixtures =====


@pytest.fixture
def make_transport() -> Callable[[Callable[[httpx.Request], httpx.Response]], httpx.MockTransport]:
    """
    Wrap a request handler in an httpx.MockTransport that records every request.

    The recorded requests are available as `transport.calls`.
    """

    def factory(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.MockTransport:
        calls: list[httpx.Request] = []

        def recording_handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return handler(request)

        transport = httpx.MockTransport(recording_handler)
        transport.calls = calls  # type: ignore[attr-defined]
        return transport

    return factory


@pytest.fixture
def no_network_transport(make_transport):
    """Transport that fails the test if any upstream request is made."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError(f"Unexpected upstream request: {request.method} {request.url}")

    return make_transport(handler)
