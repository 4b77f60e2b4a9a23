"""
Data Collectors - Fetch work items from external systems

This package contains collectors for:
    - Linear (issues assigned to or created by the token owner)
    - GitHub (open pull requests across org scopes, with CI job enrichment)

Collectors run on demand per request; results are cached by the API layer.
"""

__all__ = []
