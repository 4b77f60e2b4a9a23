"""
Core Infrastructure - Configuration and Logging

This package provides centralized infrastructure utilities that should be used
throughout the application instead of direct library calls.

Usage:
    from workboard.core import get_config, get_logger

    config = get_config()
    github_config = config.get_github_config()

    logger = get_logger(__name__)
"""

from ..secure_config import (
    CacheConfig,
    ConfigurationError,
    GitHubConfig,
    HTTPConfig,
    LinearConfig,
    SecureConfig,
    ServerConfig,
    get_config,
    validate_config_on_startup,
)
from .logging_config import JSONFormatter, get_logger, log_with_context, setup_logging

__all__ = [
    # Configuration
    "get_config",
    "validate_config_on_startup",
    "ConfigurationError",
    "SecureConfig",
    "LinearConfig",
    "GitHubConfig",
    "CacheConfig",
    "HTTPConfig",
    "ServerConfig",
    # Logging
    "get_logger",
    "setup_logging",
    "log_with_context",
    "JSONFormatter",
]
