"""
REST API for the personal work dashboard

Serves aggregated Linear issues and GitHub pull requests over HTTP.
"""

from .app import create_app

__all__ = ["create_app"]
