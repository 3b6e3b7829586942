"""CLI entry point for s3verify."""

import argparse
import logging
import sys
from pathlib import Path

from prometheus_client import start_http_server
from pydantic import ValidationError

from s3verify import metrics
from s3verify.config import S3VerifyConfig, apply_env_overrides, load_config
from s3verify.errors import S3VerifyError
from s3verify.logging_config import configure_logging
from s3verify.suite import run


def _positive_int(value: str) -> int:
    n = int(value)
    if n < 1:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {value}")
    return n


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        argv: Argument list to parse. Defaults to sys.argv[1:].

    Returns:
        Parsed argument namespace.
    """
    parser = argparse.ArgumentParser(
        prog="s3verify",
        description="s3verify - S3 API compatibility test harness",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=Path("s3verify.yaml"),
        help="Path to YAML configuration file (default: s3verify.yaml, optional)",
    )
    parser.add_argument("--endpoint", type=str, default=None, help="Server URL (overrides config)")
    parser.add_argument("--access-key", type=str, default=None, help="Access key (overrides config)")
    parser.add_argument("--secret-key", type=str, default=None, help="Secret key (overrides config)")
    parser.add_argument("--region", type=str, default=None, help="Region (overrides config)")
    parser.add_argument(
        "--prepared",
        action="store_true",
        default=None,
        help="Reuse buckets from an earlier setup run instead of creating new ones",
    )
    parser.add_argument(
        "--object-count",
        type=_positive_int,
        default=None,
        help="Objects to upload in unprepared mode (default: 101)",
    )
    parser.add_argument(
        "--no-cleanup",
        action="store_true",
        help="Leave created objects and buckets in place",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (overrides config, default: INFO)",
    )
    parser.add_argument(
        "--log-format",
        type=str,
        default=None,
        choices=["text", "json"],
        help="Log format: 'text' (human-readable) or 'json' (structured)",
    )
    parser.add_argument(
        "--metrics-port",
        type=int,
        default=None,
        help="Expose Prometheus metrics on this port while the run is in progress",
    )
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> S3VerifyConfig:
    """Load the config file if present, then apply environment and CLI overrides."""
    config = load_config(args.config) if args.config.exists() else S3VerifyConfig()
    apply_env_overrides(config)

    if args.endpoint is not None:
        config.server.endpoint = args.endpoint
    if args.access_key is not None:
        config.server.access_key = args.access_key
    if args.secret_key is not None:
        config.server.secret_key = args.secret_key
    if args.region is not None:
        config.server.region = args.region
    if args.prepared is not None:
        config.run.prepared = args.prepared
    if args.object_count is not None:
        config.run.object_count = args.object_count
    if args.no_cleanup:
        config.run.cleanup = False
    if args.log_level is not None:
        config.logging.level = args.log_level
    if args.log_format is not None:
        config.logging.format = args.log_format
    if args.metrics_port is not None:
        config.observability.metrics = True
        config.observability.metrics_port = args.metrics_port
    return config


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the s3verify CLI.

    Args:
        argv: Argument list to parse. Defaults to sys.argv[1:].

    Returns:
        Process exit status: 0 if every step passed, 1 otherwise.
    """
    args = parse_args(argv)

    logging.basicConfig(level=logging.INFO, stream=sys.stderr)
    logger = logging.getLogger("s3verify")

    try:
        config = build_config(args)
    except ValidationError as exc:
        logger.error("Invalid config: %s", exc)
        return 1
    except Exception as exc:
        logger.error("Failed to load config: %s", exc)
        return 1

    configure_logging(level=config.logging.level, fmt=config.logging.format)

    if config.observability.metrics:
        metrics.init_metrics()
        if config.observability.metrics_port:
            start_http_server(config.observability.metrics_port)
            logger.info("Serving metrics on port %d", config.observability.metrics_port)

    try:
        ok = run(config)
    except S3VerifyError as exc:
        logger.error("Run aborted: %s", exc)
        return 1
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
