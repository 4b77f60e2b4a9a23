"""
Issue Aggregator - Linear issues for the personal dashboard

Fetches up to 20 open issues assigned to or created by the token owner,
normalizes them, and orders them by priority (urgent first, no priority last)
and then by most recent update.

Output:
    {"generatedAt": "2026-10-18T09:15:02.431Z", "issues": [Issue, ...]}

One user and one token per deployment, so the cache key is a constant.
"""

from typing import Any

import httpx

from workboard.collectors.base import BaseAggregator
from workboard.collectors.linear_client import LinearClient
from workboard.collectors.transformers import IssueTransformer
from workboard.domain.issues import sort_issues
from workboard.secure_config import HTTPConfig, LinearConfig
from workboard.storage.cache import ResponseCache
from workboard.utils.datetime_utils import utc_now_iso

ISSUE_CACHE_KEY = "linear:recent-issues"
ISSUE_LIMIT = 20


class IssueAggregator(BaseAggregator):
    """Aggregates Linear issues relevant to the caller"""

    def __init__(
        self,
        config: LinearConfig,
        cache: ResponseCache,
        http_config: HTTPConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__("issues", cache, http_config, transport)
        self.config = config

    @property
    def cache_key(self) -> str:
        return ISSUE_CACHE_KEY

    @property
    def ttl(self) -> int:
        return self.config.cache_ttl

    async def fetch(self) -> dict[str, Any]:
        async with LinearClient(
            token=self.config.token,
            api_url=self.config.api_url,
            timeout=self.http_config.timeout,
            max_retries=self.http_config.max_retries,
            transport=self.transport,
        ) as client:
            nodes = await client.recent_issues(first=ISSUE_LIMIT)

        issues = sort_issues([IssueTransformer.transform_issue(node) for node in nodes])
        self.logger.info(f"Fetched {len(issues)} Linear issues", extra={"issue_count": len(issues)})

        return {"generatedAt": utc_now_iso(), "issues": [issue.to_dict() for issue in issues]}
