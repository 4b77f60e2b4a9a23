"""
Secure Configuration Management

Provides centralized, validated configuration for the dashboard API.
Replaces scattered os.getenv() calls with strict validation and fail-fast behavior.

Usage:
    from workboard.secure_config import get_config

    config = get_config()
    github_config = config.get_github_config()
    print(github_config.scope_orgs)

Each upstream is validated independently: a missing LINEAR_TOKEN only breaks
the issues endpoint, never the GitHub overview.

Raises:
    ConfigurationError: If configuration is missing or invalid
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from dotenv import load_dotenv

DEFAULT_CACHE_TTL = 90  # seconds
DEFAULT_LINEAR_API_URL = "https://api.linear.app/graphql"
DEFAULT_GITHUB_API_URL = "https://api.github.com"
DEFAULT_SQLITE_PATH = ".tmp/workboard_cache.db"

CACHE_BACKENDS = ("memory", "sqlite")


class ConfigurationError(Exception):
    """Raised when configuration is missing or invalid."""

    pass


def _parse_positive_int(name: str, raw: str | None, default: int) -> int:
    """
    Parse a positive integer setting, falling back to default when unset.

    Raises:
        ConfigurationError: If the value is not a positive integer
    """
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw.strip())
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer number of seconds: {raw!r}") from e
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive: {value}")
    return value


def _split_csv(raw: str | None) -> tuple[str, ...]:
    return tuple(part.strip() for part in (raw or "").split(",") if part.strip())


@dataclass(frozen=True)
class LinearConfig:
    """
    Validated Linear configuration.
    """

    token: str
    cache_ttl: int = DEFAULT_CACHE_TTL
    api_url: str = DEFAULT_LINEAR_API_URL

    def __post_init__(self):
        """Validate configuration after initialization."""
        if not self.token:
            raise ConfigurationError("Missing LINEAR_TOKEN")
        if not self.api_url.startswith("https://") and not self.api_url.startswith("http://localhost"):
            raise ConfigurationError(f"LINEAR_API_URL must use HTTPS: {self.api_url}")


@dataclass(frozen=True)
class GitHubConfig:
    """
    Validated GitHub configuration.

    Attributes:
        token: Personal access token (sent as a Bearer token)
        scope_orgs: Organizations to scope searches to; empty means unscoped
        cache_ttl: Overview cache TTL in seconds
        api_url: REST base URL (GitHub Enterprise installs override this)
        graphql_url: GraphQL endpoint, derived from api_url when not given
    """

    token: str
    scope_orgs: tuple[str, ...] = ()
    cache_ttl: int = DEFAULT_CACHE_TTL
    api_url: str = DEFAULT_GITHUB_API_URL
    graphql_url: str = ""

    def __post_init__(self):
        """Validate configuration after initialization."""
        if not self.token:
            raise ConfigurationError("Missing GITHUB_TOKEN")
        if not self.api_url.startswith("https://") and not self.api_url.startswith("http://localhost"):
            raise ConfigurationError(f"GITHUB_API_URL must use HTTPS: {self.api_url}")
        if not self.graphql_url:
            object.__setattr__(self, "graphql_url", f"{self.api_url.rstrip('/')}/graphql")


@dataclass(frozen=True)
class CacheConfig:
    """
    Validated cache backend configuration.

    backend is None when no cache binding is configured; every request then
    goes straight to the upstream APIs.
    """

    backend: str | None = None
    sqlite_path: str = DEFAULT_SQLITE_PATH

    def __post_init__(self):
        """Validate configuration after initialization."""
        if self.backend is not None and self.backend not in CACHE_BACKENDS:
            raise ConfigurationError(f"CACHE_BACKEND must be one of {', '.join(CACHE_BACKENDS)}: {self.backend}")
        if self.backend == "sqlite" and not self.sqlite_path:
            raise ConfigurationError("CACHE_SQLITE_PATH is required for the sqlite cache backend")


@dataclass(frozen=True)
class HTTPConfig:
    """
    Upstream HTTP client settings.
    """

    timeout: int = 30
    max_retries: int = 3


@dataclass(frozen=True)
class ServerConfig:
    """
    API server settings (logging and browser access).
    """

    log_level: str = "INFO"
    json_logs: bool = False
    cors_allow_origins: tuple[str, ...] = field(default_factory=tuple)


class SecureConfig:
    """
    Centralized secure configuration manager.

    Loads and validates application configuration from environment variables.
    Pass an explicit mapping to bypass the process environment (used by tests).
    """

    def __init__(self, environ: Mapping[str, str] | None = None):
        """
        Initialize configuration.

        Args:
            environ: Optional mapping used instead of os.environ. When omitted,
                a .env file is loaded first.
        """
        if environ is None:
            load_dotenv()
            environ = os.environ
        self._environ = environ

    def _get(self, name: str, default: str | None = None) -> str | None:
        value = self._environ.get(name)
        if value is None or value.strip() == "":
            return default
        return value.strip()

    def get_linear_config(self) -> LinearConfig:
        """
        Get validated Linear configuration.

        Returns:
            LinearConfig: Validated configuration

        Raises:
            ConfigurationError: If LINEAR_TOKEN is missing or a setting is invalid
        """
        return LinearConfig(
            token=self._get("LINEAR_TOKEN") or "",
            cache_ttl=_parse_positive_int("LINEAR_CACHE_TTL", self._get("LINEAR_CACHE_TTL"), DEFAULT_CACHE_TTL),
            api_url=self._get("LINEAR_API_URL", DEFAULT_LINEAR_API_URL) or DEFAULT_LINEAR_API_URL,
        )

    def get_github_config(self) -> GitHubConfig:
        """
        Get validated GitHub configuration.

        Returns:
            GitHubConfig: Validated configuration

        Raises:
            ConfigurationError: If GITHUB_TOKEN is missing or a setting is invalid
        """
        return GitHubConfig(
            token=self._get("GITHUB_TOKEN") or "",
            scope_orgs=_split_csv(self._get("GH_QUERY_ORGS")),
            cache_ttl=_parse_positive_int("GH_CACHE_TTL", self._get("GH_CACHE_TTL"), DEFAULT_CACHE_TTL),
            api_url=(self._get("GITHUB_API_URL", DEFAULT_GITHUB_API_URL) or DEFAULT_GITHUB_API_URL).rstrip("/"),
            graphql_url=self._get("GITHUB_GRAPHQL_URL", "") or "",
        )

    def get_cache_config(self) -> CacheConfig:
        """
        Get validated cache configuration.

        "none" and an unset CACHE_BACKEND both disable caching.
        """
        backend = (self._get("CACHE_BACKEND") or "").lower()
        return CacheConfig(
            backend=None if backend in ("", "none") else backend,
            sqlite_path=self._get("CACHE_SQLITE_PATH", DEFAULT_SQLITE_PATH) or DEFAULT_SQLITE_PATH,
        )

    def get_http_config(self) -> HTTPConfig:
        """Get upstream HTTP client settings."""
        return HTTPConfig(
            timeout=_parse_positive_int("UPSTREAM_TIMEOUT_SECONDS", self._get("UPSTREAM_TIMEOUT_SECONDS"), 30),
            max_retries=_parse_positive_int("UPSTREAM_MAX_RETRIES", self._get("UPSTREAM_MAX_RETRIES"), 3),
        )

    def get_server_config(self) -> ServerConfig:
        """Get API server settings."""
        json_logs = (self._get("LOG_JSON") or "").lower() in ("1", "true", "yes")
        return ServerConfig(
            log_level=(self._get("LOG_LEVEL", "INFO") or "INFO").upper(),
            json_logs=json_logs,
            cors_allow_origins=_split_csv(self._get("CORS_ALLOW_ORIGINS")),
        )

    def configured_upstreams(self) -> dict[str, bool]:
        """Report which upstream tokens are present (values are never exposed)."""
        return {
            "linear": bool(self._get("LINEAR_TOKEN")),
            "github": bool(self._get("GITHUB_TOKEN")),
        }


# Convenience function for getting configuration
_config_instance: SecureConfig | None = None


def get_config() -> SecureConfig:
    """
    Get the global configuration instance (singleton pattern).

    Returns:
        SecureConfig: The configuration manager
    """
    global _config_instance
    if _config_instance is None:
        _config_instance = SecureConfig()
    return _config_instance


def validate_config_on_startup(required_services: list[str]) -> None:
    """
    Validate required configuration at application startup.

    Args:
        required_services: Services to validate (e.g., ['linear', 'github', 'cache', 'http'])

    Raises:
        ConfigurationError: If any required configuration is missing or invalid
    """
    config = get_config()

    for service in required_services:
        if service == "linear":
            config.get_linear_config()
        elif service == "github":
            config.get_github_config()
        elif service == "cache":
            config.get_cache_config()
        elif service == "http":
            config.get_http_config()
        else:
            raise ValueError(f"Unknown service: {service}")
