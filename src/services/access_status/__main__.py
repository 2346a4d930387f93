"""
Access Status Service - CLI Entry Point

Usage:
    python -m src.services.access_status [options]

Examples:
    # Start HTTP server (default port 8000)
    python -m src.services.access_status

    # Local run without Supabase
    python -m src.services.access_status --port 8080 --cache-backend memory
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from src.common.logging import configure_sanitized_logging
from src.common.telemetry import init_telemetry, shutdown_telemetry

from .config import AccessServiceConfig, load_config
from .errors import ConfigurationError


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Access Status Service",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    # HTTP options
    parser.add_argument(
        "--host",
        default=None,
        help="Host to bind (default: from config or 0.0.0.0)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to bind (default: from config or 8000)",
    )

    # Cache options
    parser.add_argument(
        "--cache-backend",
        choices=["supabase", "postgres", "memory"],
        default=None,
        help="Cache store backend (default: from config or supabase)",
    )

    # Logging
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error"],
        default=None,
        help="Log level (default: from config or info)",
    )

    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> AccessServiceConfig:
    """Build configuration from args and environment."""
    overrides: dict[str, object] = {}

    if args.host:
        overrides["host"] = args.host
    if args.port:
        overrides["port"] = args.port
    if args.cache_backend:
        overrides["cache_backend"] = args.cache_backend
    if args.log_level:
        overrides["log_level"] = args.log_level.upper()

    return load_config(**overrides)


async def run_http(config: AccessServiceConfig) -> None:
    """Run HTTP server."""
    from .transports.http import run_http_server

    await run_http_server(config)


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    args = parse_args(argv)

    try:
        config = build_config(args)
    except ConfigurationError as e:
        configure_sanitized_logging(level=logging.INFO)
        logging.getLogger(__name__).error(str(e))
        sys.exit(2)

    configure_sanitized_logging(level=config.log_level)
    logger = logging.getLogger(__name__)

    if config.telemetry_enabled:
        init_telemetry(service_name=config.server_name, otlp_endpoint=config.otlp_endpoint)

    logger.info(f"Starting {config.server_name} v{config.server_version}")

    try:
        asyncio.run(run_http(config))
    except KeyboardInterrupt:
        logger.info("Shutting down...")
    except ConfigurationError as e:
        logger.error(str(e))
        sys.exit(2)
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        sys.exit(1)
    finally:
        shutdown_telemetry()


if __name__ == "__main__":
    main()
