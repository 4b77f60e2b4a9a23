"""
GitHub API Client (GraphQL search + Actions REST)

Usage:
    from workboard.collectors.github_client import GitHubClient

    async with GitHubClient(token=github_config.token) as client:
        nodes = await client.search_pull_requests("is:pr is:open author:@me", first=20)
        run = await client.find_workflow_run("octo", "repo", lambda r: r["head_sha"] == sha)
        jobs = await client.list_run_jobs("octo", "repo", run["id"])

REST list endpoints are paginated through the Link header, the same way
`octokit.paginate` walks them.

API Documentation:
    https://docs.github.com/en/graphql/reference/queries#search
    https://docs.github.com/en/rest/actions/workflow-runs
    https://docs.github.com/en/rest/actions/workflow-jobs
"""

from collections.abc import AsyncIterator, Callable
from contextlib import aclosing
from typing import Any

import httpx

from workboard.collectors.upstream_client import UpstreamAPIClient
from workboard.core import get_logger
from workboard.secure_config import DEFAULT_GITHUB_API_URL

logger = get_logger(__name__)

SEARCH_PULL_REQUESTS_QUERY = """
query SearchPRs($q: String!, $n: Int!) {
  search(query: $q, type: ISSUE, first: $n) {
    nodes {
      ... on PullRequest {
        id number title url createdAt updatedAt isDraft
        repository { name url owner { login } }
        author { login url avatarUrl }
        labels(first: 10) { nodes { name color } }
        commits(last: 1) {
          nodes {
            commit {
              oid
              statusCheckRollup {
                state
                contexts(first: 20) {
                  nodes {
                    __typename
                    ... on CheckRun { name status conclusion detailsUrl }
                    ... on StatusContext { context state targetUrl }
                  }
                }
              }
            }
          }
        }
      }
    }
  }
}
"""


class GitHubClient(UpstreamAPIClient):
    """
    GitHub client covering PR search (GraphQL) and Actions runs/jobs (REST).

    Args:
        token: Personal access token (Bearer)
        api_url: REST base URL
        graphql_url: GraphQL endpoint (defaults to {api_url}/graphql)
    """

    API_VERSION = "2022-11-28"

    def __init__(
        self,
        token: str,
        api_url: str = DEFAULT_GITHUB_API_URL,
        graphql_url: str | None = None,
        timeout: float = 30,
        max_retries: int = 3,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if not token:
            raise ValueError("token is required")
        super().__init__(
            service="GitHub",
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": self.API_VERSION,
            },
            timeout=timeout,
            max_retries=max_retries,
            transport=transport,
        )
        self.api_url = api_url.rstrip("/")
        self.graphql_url = graphql_url or f"{self.api_url}/graphql"

    # ==============================
    # GraphQL search
    # ==============================

    async def search_pull_requests(self, query: str, first: int = 20) -> list[dict[str, Any]]:
        """
        Run an issue search and return its pull request nodes.

        Args:
            query: GitHub search syntax (e.g., "is:pr is:open author:@me org:acme")
            first: Maximum results

        Returns:
            Raw search nodes (non-PR hits come back as empty objects)
        """
        data = await self._graphql(self.graphql_url, SEARCH_PULL_REQUESTS_QUERY, {"q": query, "n": first})
        nodes: list[dict[str, Any]] = (data.get("search") or {}).get("nodes") or []
        return nodes

    # ==============================
    # REST pagination
    # ==============================

    async def paginate(
        self, path: str, item_key: str, params: dict[str, Any] | None = None, max_pages: int | None = None
    ) -> AsyncIterator[dict[str, Any]]:
        """
        Yield items from a paginated REST list endpoint.

        Args:
            path: Path below the API root (e.g., "/repos/o/r/actions/runs")
            item_key: Key of the item array in each page body (e.g., "workflow_runs")
            params: Query parameters for the first page
            max_pages: Stop after this many pages (None walks every page)

        Yields:
            Items in API order
        """
        url: str | None = f"{self.api_url}{path}"
        page_params: dict[str, Any] | None = params
        pages = 0

        while url:
            response = await self._handle_api_call("GET", url, params=page_params)
            pages += 1
            for item in response.json().get(item_key) or []:
                yield item

            if max_pages is not None and pages >= max_pages:
                break
            # The next link already carries every query parameter
            url = response.links.get("next", {}).get("url")
            page_params = None

    # ==============================
    # Actions APIs
    # ==============================

    async def find_workflow_run(
        self,
        owner: str,
        repo: str,
        predicate: Callable[[dict[str, Any]], bool],
        event: str = "pull_request",
        per_page: int = 50,
        max_pages: int | None = None,
    ) -> dict[str, Any] | None:
        """
        Find the first workflow run (newest first) that satisfies predicate.

        REST Endpoint: GET /repos/{owner}/{repo}/actions/runs?event={event}

        Pagination stops as soon as a run matches.

        Returns:
            The matching run, or None
        """
        runs = self.paginate(
            f"/repos/{owner}/{repo}/actions/runs",
            "workflow_runs",
            params={"event": event, "per_page": per_page},
            max_pages=max_pages,
        )
        async with aclosing(runs):
            async for run in runs:
                if predicate(run):
                    return run
        return None

    async def list_run_jobs(self, owner: str, repo: str, run_id: int, per_page: int = 100) -> list[dict[str, Any]]:
        """
        List the jobs of a workflow run's latest attempt.

        REST Endpoint: GET /repos/{owner}/{repo}/actions/runs/{run_id}/jobs?filter=latest

        Returns:
            Raw job objects
        """
        jobs = self.paginate(
            f"/repos/{owner}/{repo}/actions/runs/{run_id}/jobs",
            "jobs",
            params={"filter": "latest", "per_page": per_page},
        )
        return [job async for job in jobs]
