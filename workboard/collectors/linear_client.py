"""
Linear GraphQL API Client

Usage:
    from workboard.collectors.linear_client import LinearClient

    async with LinearClient(token=linear_config.token) as client:
        nodes = await client.recent_issues(first=20)

API Documentation:
    https://developers.linear.app/docs/graphql/working-with-the-graphql-api
"""

from typing import Any

import httpx

from workboard.collectors.upstream_client import UpstreamAPIClient
from workboard.secure_config import DEFAULT_LINEAR_API_URL

# Open issues assigned to or created by the token owner, newest activity first
RECENT_ISSUES_QUERY = """
query RecentIssues($first: Int!) {
  issues(
    first: $first
    orderBy: updatedAt
    filter: {
      and: [
        { or: [{ assignee: { isMe: { eq: true } } }, { creator: { isMe: { eq: true } } }] }
        { state: { type: { nin: ["completed", "canceled"] } } }
      ]
    }
  ) {
    nodes {
      id
      identifier
      title
      url
      createdAt
      updatedAt
      priority
      state { name type color }
      project { name icon color }
      assignee { name avatarUrl }
      team { name key }
    }
  }
}
"""


class LinearClient(UpstreamAPIClient):
    """
    Linear GraphQL client.

    Linear personal API keys go in the Authorization header as-is (no scheme).
    """

    def __init__(
        self,
        token: str,
        api_url: str = DEFAULT_LINEAR_API_URL,
        timeout: float = 30,
        max_retries: int = 3,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if not token:
            raise ValueError("token is required")
        super().__init__(
            service="Linear",
            headers={"Authorization": token, "Content-Type": "application/json"},
            timeout=timeout,
            max_retries=max_retries,
            transport=transport,
        )
        self.api_url = api_url

    async def recent_issues(self, first: int = 20) -> list[dict[str, Any]]:
        """
        Fetch open issues assigned to or created by the caller.

        Args:
            first: Maximum number of issues

        Returns:
            Raw issue nodes
        """
        data = await self._graphql(self.api_url, RECENT_ISSUES_QUERY, {"first": first})
        nodes: list[dict[str, Any]] = (data.get("issues") or {}).get("nodes") or []
        return nodes
