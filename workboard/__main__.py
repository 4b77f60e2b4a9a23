"""
Run the Workboard API under uvicorn.

Usage:
    python -m workboard
    python -m workboard --host 0.0.0.0 --port 8000 --log-level debug
    python -m workboard --reload
"""

import argparse
import sys

import uvicorn

from workboard.core import ConfigurationError, get_logger, validate_config_on_startup

logger = get_logger(__name__)


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Namespace: Parsed arguments
    """
    parser = argparse.ArgumentParser(description="Serve Linear issues and GitHub pull requests for the dashboard")

    parser.add_argument("--host", type=str, default="127.0.0.1", help="Bind address (default: 127.0.0.1)")

    parser.add_argument("--port", type=int, default=8000, help="Port to listen on (default: 8000)")

    parser.add_argument("--reload", action="store_true", help="Reload on code changes (development only)")

    parser.add_argument(
        "--log-level",
        type=str,
        default="info",
        choices=["critical", "error", "warning", "info", "debug"],
        help="uvicorn log level (application logging follows LOG_LEVEL)",
    )

    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_arguments(argv)

    # Tokens are checked per endpoint so one upstream can run without the other
    try:
        validate_config_on_startup(["cache", "http"])
    except ConfigurationError as e:
        logger.error(f"Invalid configuration: {e}")
        print(f"\nError: {e}", file=sys.stderr)
        return 1

    uvicorn.run("workboard.api.app:app", host=args.host, port=args.port, reload=args.reload, log_level=args.log_level)
    return 0


if __name__ == "__main__":
    sys.exit(main())
