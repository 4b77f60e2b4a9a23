"""
Pull Request Aggregator - GitHub pull requests for the personal dashboard

Two fan-out stages:

1. Search: for every org scope (or one unscoped pass) run the three bucket
   searches concurrently:
       mine:     is:pr is:open author:@me
       review:   is:pr is:open review-requested:@me
       assigned: is:pr is:open assignee:@me
   Results are merged per bucket across scopes by PR id.

2. Enrichment: the first 8 PRs (mine, then review, then assigned) whose CI
   rollup is PENDING get the jobs of their matching GitHub Actions run.
   Candidates run concurrently and fail independently.

Output:
    {"generatedAt": "...", "scopeOrgs": ["acme"],
     "buckets": {"review": [PR, ...], "mine": [PR, ...], "assigned": [PR, ...]}}
"""

import asyncio
from typing import Any

import httpx

from workboard.collectors.base import BaseAggregator
from workboard.collectors.github_client import GitHubClient
from workboard.collectors.transformers import PullRequestTransformer
from workboard.core import log_with_context
from workboard.domain.pulls import CIJob, PullRequest, merge_by_id
from workboard.secure_config import GitHubConfig, HTTPConfig
from workboard.storage.cache import ResponseCache
from workboard.utils.datetime_utils import utc_now_iso
from workboard.utils.error_handling import log_and_continue

BUCKETS = ("mine", "review", "assigned")
SEARCH_LIMIT = 20
MAX_ENRICHED = 8
RUNS_PER_PAGE = 50
RUNS_MAX_PAGES = 10

_BUCKET_QUALIFIERS = {
    "mine": "author:@me",
    "review": "review-requested:@me",
    "assigned": "assignee:@me",
}


def build_search_queries(org: str | None = None) -> dict[str, str]:
    """
    Search queries for the three buckets, optionally scoped to one org.

    Example:
        build_search_queries("acme")["mine"]
        -> "is:pr is:open author:@me sort:updated-desc org:acme"
    """
    org_filter = f" org:{org}" if org else ""
    return {
        bucket: f"is:pr is:open {qualifier} sort:updated-desc{org_filter}"
        for bucket, qualifier in _BUCKET_QUALIFIERS.items()
    }


def overview_cache_key(scope_orgs: tuple[str, ...] | list[str]) -> str:
    """Cache key per scope configuration ("overview:all" when unscoped)."""
    return f"overview:{','.join(scope_orgs) or 'all'}"


def select_enrichment_candidates(
    buckets: dict[str, list[PullRequest]], limit: int = MAX_ENRICHED
) -> list[tuple[str, int]]:
    """
    Pick the pull requests to enrich with CI jobs.

    Walks mine, review, assigned in that order (no re-sorting) and keeps
    entries whose rollup is exactly PENDING, up to limit. A PR present in two
    buckets is two separate candidates.

    Returns:
        (bucket name, index within bucket) positions
    """
    candidates: list[tuple[str, int]] = []
    for bucket in BUCKETS:
        for index, pr in enumerate(buckets.get(bucket, [])):
            if pr.status.is_pending:
                candidates.append((bucket, index))
                if len(candidates) >= limit:
                    return candidates
    return candidates


def _run_matches(pr: PullRequest):
    def predicate(run: dict[str, Any]) -> bool:
        if run.get("head_sha") == pr.head_sha:
            return True
        pull_requests = run.get("pull_requests")
        return isinstance(pull_requests, list) and any(
            (item or {}).get("number") == pr.number for item in pull_requests
        )

    return predicate


class PullRequestAggregator(BaseAggregator):
    """Aggregates open pull requests across org scopes with CI job enrichment"""

    def __init__(
        self,
        config: GitHubConfig,
        cache: ResponseCache,
        http_config: HTTPConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__("overview", cache, http_config, transport)
        self.config = config
        self.enrichment_attempts = 0

    @property
    def cache_key(self) -> str:
        return overview_cache_key(self.config.scope_orgs)

    @property
    def ttl(self) -> int:
        return self.config.cache_ttl

    async def fetch(self) -> dict[str, Any]:
        orgs: list[str | None] = list(self.config.scope_orgs) or [None]

        async with GitHubClient(
            token=self.config.token,
            api_url=self.config.api_url,
            graphql_url=self.config.graphql_url,
            timeout=self.http_config.timeout,
            max_retries=self.http_config.max_retries,
            transport=self.transport,
        ) as client:
            per_scope = await asyncio.gather(*(self._fetch_scope(client, org) for org in orgs))
            buckets = {bucket: merge_by_id(scope[bucket] for scope in per_scope) for bucket in BUCKETS}
            buckets = await self._enrich(client, buckets)

            self.logger.info(
                "Fetched GitHub overview",
                extra={
                    "scope": self.cache_key,
                    "counts": {bucket: len(prs) for bucket, prs in buckets.items()},
                    "api_calls": client.api_calls,
                },
            )

        return {
            "generatedAt": utc_now_iso(),
            "scopeOrgs": list(self.config.scope_orgs),
            "buckets": {bucket: [pr.to_dict() for pr in buckets[bucket]] for bucket in ("review", "mine", "assigned")},
        }

    async def _fetch_scope(self, client: GitHubClient, org: str | None) -> dict[str, list[PullRequest]]:
        """Run the three bucket searches for one scope concurrently."""
        queries = build_search_queries(org)
        results = await asyncio.gather(
            *(client.search_pull_requests(queries[bucket], first=SEARCH_LIMIT) for bucket in BUCKETS)
        )
        return {
            bucket: PullRequestTransformer.transform_search_nodes(nodes)
            for bucket, nodes in zip(BUCKETS, results, strict=True)
        }

    async def _find_jobs(self, client: GitHubClient, pr: PullRequest) -> tuple[CIJob, ...] | None:
        """
        Look up the CI jobs for one pull request.

        Returns:
            Jobs of the matching workflow run, or None when the PR has no head
            commit or no run matches
        """
        if not pr.head_sha:
            return None
        self.enrichment_attempts += 1

        run = await client.find_workflow_run(
            pr.repo.owner,
            pr.repo.name,
            _run_matches(pr),
            per_page=RUNS_PER_PAGE,
            max_pages=RUNS_MAX_PAGES,
        )
        if run is None:
            return None

        jobs = await client.list_run_jobs(pr.repo.owner, pr.repo.name, run["id"])
        return tuple(PullRequestTransformer.transform_job(job) for job in jobs)

    async def _enrich(
        self, client: GitHubClient, buckets: dict[str, list[PullRequest]]
    ) -> dict[str, list[PullRequest]]:
        """
        Attach CI jobs to the selected pending pull requests.

        A failed lookup leaves that PR without jobs; the rest still complete.

        Returns:
            New bucket lists with enriched copies in place of the candidates
        """
        candidates = select_enrichment_candidates(buckets)
        if not candidates:
            return buckets

        results = await asyncio.gather(
            *(self._find_jobs(client, buckets[bucket][index]) for bucket, index in candidates),
            return_exceptions=True,
        )

        enriched = {bucket: list(prs) for bucket, prs in buckets.items()}
        for (bucket, index), result in zip(candidates, results, strict=True):
            pr = enriched[bucket][index]
            if isinstance(result, Exception):
                log_and_continue(
                    self.logger,
                    result,
                    {"pr": pr.id, "repo": pr.repo.full_name, "number": pr.number},
                    "CI job enrichment",
                )
            elif result is not None:
                enriched[bucket][index] = pr.with_jobs(result)

        enriched_count = sum(1 for result in results if isinstance(result, tuple))
        log_with_context(
            self.logger, "info", "CI job enrichment complete", candidates=len(candidates), enriched=enriched_count
        )
        return enriched
