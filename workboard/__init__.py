"""
Workboard - Personal work-item aggregation API

This package aggregates open pull requests and issues from GitHub and Linear
into JSON payloads for a dashboard front end.

Package Structure:
    - core: Infrastructure (config, logging)
    - domain: Domain models (Issue, PullRequest, CI checks and jobs)
    - collectors: Upstream clients and the issue / pull request aggregators
    - storage: Short-lived response cache
    - api: FastAPI application and middleware
"""

__version__ = "1.0.0"
