"""
API Endpoint Tests

Tests for the dashboard endpoints with upstreams replaced by httpx.MockTransport:
- /health
- /api/linear/issues
- /api/gh/overview
"""

import httpx
import pytest
from conftest import make_issue_node, make_pr_node
from fastapi.testclient import TestClient

from workboard.api.app import create_app
from workboard.storage.cache import MemoryCacheStore


def linear_ok(request: httpx.Request) -> httpx.Response:
    nodes = [
        make_issue_node("b", "ENG-2", priority=0, updated_at="2026-10-03T00:00:00Z"),
        make_issue_node("a", "ENG-1", priority=2, updated_at="2026-10-02T00:00:00Z"),
    ]
    return httpx.Response(200, json={"data": {"issues": {"nodes": nodes}}})


def github_ok(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json={"data": {"search": {"nodes": [make_pr_node(pr_id="PR_1")]}}})


@pytest.fixture
def build_client(make_config):
    """Create a TestClient for an app built from the given environment"""

    def factory(transport: httpx.MockTransport, cache_store=None, **env) -> TestClient:
        env.setdefault("UPSTREAM_MAX_RETRIES", "1")
        app = create_app(config=make_config(**env), cache_store=cache_store, http_transport=transport)
        return TestClient(app)

    return factory


# ============================================================
# Health Check Tests
# ============================================================


class TestHealthEndpoint:
    def test_health_reports_configuration(self, build_client, no_network_transport):
        client = build_client(no_network_transport, cache_store=MemoryCacheStore(), LINEAR_TOKEN="lin_api_test")

        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["upstreams"] == {"linear": True, "github": False}
        assert data["cache"] == {"backend": "memory"}
        assert "timestamp" in data

    def test_health_does_not_expose_tokens(self, build_client, no_network_transport):
        client = build_client(no_network_transport, LINEAR_TOKEN="lin_api_secret", GITHUB_TOKEN="ghp_secret")

        body = client.get("/health").text

        assert "lin_api_secret" not in body
        assert "ghp_secret" not in body
        assert no_network_transport.calls == []


# ============================================================
# Linear Issues Tests
# ============================================================


class TestLinearIssuesEndpoint:
    def test_missing_token_returns_500_without_network(self, build_client, no_network_transport):
        client = build_client(no_network_transport)

        response = client.get("/api/linear/issues")

        assert response.status_code == 500
        assert response.json() == {"error": "Missing LINEAR_TOKEN"}
        assert no_network_transport.calls == []

    def test_invalid_ttl_is_configuration_error(self, build_client, no_network_transport):
        client = build_client(no_network_transport, LINEAR_TOKEN="t", LINEAR_CACHE_TTL="soon")

        response = client.get("/api/linear/issues")

        assert response.status_code == 500
        assert "LINEAR_CACHE_TTL" in response.json()["error"]

    def test_miss_then_hit(self, build_client, make_transport):
        transport = make_transport(linear_ok)
        client = build_client(transport, cache_store=MemoryCacheStore(), LINEAR_TOKEN="lin_api_test")

        first = client.get("/api/linear/issues")
        second = client.get("/api/linear/issues")

        assert first.status_code == 200
        assert first.headers["x-cache"] == "MISS"
        assert first.headers["content-type"].startswith("application/json")
        assert [i["id"] for i in first.json()["issues"]] == ["a", "b"]
        assert second.headers["x-cache"] == "HIT"
        assert second.content == first.content
        assert len(transport.calls) == 1

    def test_no_cache_backend_always_fetches(self, build_client, make_transport):
        transport = make_transport(linear_ok)
        client = build_client(transport, LINEAR_TOKEN="lin_api_test")

        assert client.get("/api/linear/issues").headers["x-cache"] == "MISS"
        assert client.get("/api/linear/issues").headers["x-cache"] == "MISS"
        assert len(transport.calls) == 2

    def test_upstream_error_returns_500_json(self, build_client, make_transport):
        transport = make_transport(lambda request: httpx.Response(401))
        client = build_client(transport, LINEAR_TOKEN="lin_api_test")

        response = client.get("/api/linear/issues")

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to fetch Linear issues", "details": "Linear API error: 401"}

    def test_graphql_errors_returns_500_json(self, build_client, make_transport):
        body = {"errors": [{"message": "Authentication required"}]}
        transport = make_transport(lambda request: httpx.Response(200, json=body))
        client = build_client(transport, LINEAR_TOKEN="lin_api_test")

        data = client.get("/api/linear/issues").json()

        assert data["error"] == "Failed to fetch Linear issues"
        assert data["details"].startswith("Linear GraphQL errors:")
        assert "Authentication required" in data["details"]


# ============================================================
# GitHub Overview Tests
# ============================================================


class TestGitHubOverviewEndpoint:
    def test_missing_token_returns_plain_text_500(self, build_client, no_network_transport):
        client = build_client(no_network_transport)

        response = client.get("/api/gh/overview")

        assert response.status_code == 500
        assert response.text == "Missing GITHUB_TOKEN"
        assert response.headers["content-type"].startswith("text/plain")
        assert no_network_transport.calls == []

    def test_overview_payload(self, build_client, make_transport):
        transport = make_transport(github_ok)
        client = build_client(transport, GITHUB_TOKEN="ghp_test", GH_QUERY_ORGS=" acme, ,globex ")

        response = client.get("/api/gh/overview")

        assert response.status_code == 200
        assert response.headers["x-cache"] == "MISS"
        data = response.json()
        assert data["scopeOrgs"] == ["acme", "globex"]
        assert [pr["id"] for pr in data["buckets"]["mine"]] == ["PR_1"]
        assert len(transport.calls) == 6

    def test_overview_cached(self, build_client, make_transport):
        transport = make_transport(github_ok)
        client = build_client(transport, cache_store=MemoryCacheStore(), GITHUB_TOKEN="ghp_test")

        client.get("/api/gh/overview")
        response = client.get("/api/gh/overview")

        assert response.headers["x-cache"] == "HIT"
        assert len(transport.calls) == 3

    def test_upstream_error_returns_500_json(self, build_client, make_transport):
        transport = make_transport(lambda request: httpx.Response(404))
        client = build_client(transport, GITHUB_TOKEN="ghp_test")

        response = client.get("/api/gh/overview")

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to fetch GitHub overview", "details": "GitHub API error: 404"}

    def test_network_failure_returns_500_json(self, build_client, make_transport):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused")

        client = build_client(make_transport(handler), GITHUB_TOKEN="ghp_test")

        response = client.get("/api/gh/overview")

        assert response.status_code == 500
        assert response.json()["error"] == "Failed to fetch GitHub overview"
        assert "connection refused" in response.json()["details"]
