"""
Datetime Utility Functions

Centralized timestamp handling for upstream payloads.

Both Linear and GitHub return ISO 8601 timestamps with a 'Z' suffix:
    "2026-02-10T10:00:00Z" or "2026-02-10T10:00:00.123Z"
"""

from datetime import UTC, datetime


def parse_iso_timestamp(timestamp_str: str | None) -> datetime | None:
    """
    Parse an ISO 8601 timestamp (with 'Z' or offset suffix) to an aware datetime.

    Args:
        timestamp_str: ISO timestamp string, or None

    Returns:
        datetime object (naive inputs are assumed UTC), or None if input is None/empty

    Raises:
        ValueError: If timestamp format is invalid or cannot be parsed

    Examples:
        >>> parse_iso_timestamp("2026-02-10T10:00:00Z")
        datetime.datetime(2026, 2, 10, 10, 0, tzinfo=datetime.timezone.utc)
    """
    if not timestamp_str:
        return None

    if not isinstance(timestamp_str, str):
        raise ValueError(f"Timestamp must be a string, got {type(timestamp_str)}")

    try:
        parsed = datetime.fromisoformat(timestamp_str.replace("Z", "+00:00"))
    except ValueError as e:
        raise ValueError(f"Invalid timestamp format: {timestamp_str}") from e

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def utc_now_iso() -> str:
    """
    Current UTC time in the millisecond 'Z' form used in API payloads.

    Example:
        "2026-10-18T09:15:02.431Z"
    """
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")
