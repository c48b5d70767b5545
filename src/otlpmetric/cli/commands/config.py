"""Config command for the otlpmetric CLI.

Shows the exporter configuration that the current environment resolves to.
"""
from __future__ import annotations

import argparse
import json
import sys
from typing import Any, Final

from otlpmetric.config import Config, new_grpc_config, new_http_config
from otlpmetric.utils.constant import Transport

__all__ = ["describe_config", "register_parser", "run"]

EXIT_SUCCESS: Final = 0
EXIT_ERROR: Final = 1

_REDACTED: Final = "***"


def register_parser(subparsers: argparse._SubParsersAction) -> None:
    """Register the config command subparser.

    Args:
        subparsers: The argparse subparsers action to add to.
    """
    parser = subparsers.add_parser(
        "config",
        help="Inspect the resolved exporter configuration.",
        description="Resolve the exporter configuration from defaults and environment.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  otlpmetric config show
  otlpmetric config show --transport http --format text
  OTEL_EXPORTER_OTLP_ENDPOINT=http://collector:4318 otlpmetric config show -t http
        """,
    )
    parser.set_defaults(handler=run)

    config_subparsers = parser.add_subparsers(dest="subcommand", required=True)

    show_parser = config_subparsers.add_parser(
        "show",
        help="Print the resolved configuration.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    show_parser.add_argument(
        "-t",
        "--transport",
        choices=[t.value for t in Transport],
        default=Transport.GRPC.value,
        help="Transport to resolve the configuration for (default: grpc).",
    )
    show_parser.add_argument(
        "--format",
        choices=["json", "text"],
        default="json",
        help="Output format (default: json).",
    )
    show_parser.add_argument(
        "--show-headers",
        action="store_true",
        help="Print header values instead of redacting them.",
    )


def describe_config(cfg: Config, *, show_headers: bool = False) -> dict[str, Any]:
    """Return a JSON-serializable summary of ``cfg``."""
    metrics = cfg.metrics
    return {
        "endpoint": metrics.endpoint,
        "url_path": metrics.url_path,
        "insecure": metrics.insecure,
        "headers": {
            key: (value if show_headers else _REDACTED) for key, value in metrics.headers.items()
        },
        "compression": metrics.compression.value,
        "timeout": metrics.timeout,
        "tls_config": metrics.tls_config is not None,
        "credentials": metrics.grpc_credentials.kind.value if metrics.grpc_credentials else None,
        "retry": {
            "enabled": cfg.retry_config.enabled,
            "initial_interval": cfg.retry_config.initial_interval,
            "max_interval": cfg.retry_config.max_interval,
            "max_elapsed_time": cfg.retry_config.max_elapsed_time,
        },
        "reconnection_period": cfg.reconnection_period,
        "service_config": cfg.service_config or None,
        "dial_options": [option.kind.value for option in cfg.dial_options],
    }


def run(args: argparse.Namespace) -> int:
    """Execute the config command.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Exit code (0=success, 1=error).
    """
    if args.subcommand == "show":
        return _run_show(args)
    print(f"Error: Unknown subcommand '{args.subcommand}'", file=sys.stderr)
    return EXIT_ERROR


def _run_show(args: argparse.Namespace) -> int:
    if Transport(args.transport) is Transport.HTTP:
        cfg = new_http_config()
    else:
        cfg = new_grpc_config()
    summary = describe_config(cfg, show_headers=args.show_headers)
    summary = {"transport": args.transport, **summary}

    if args.format == "json":
        print(json.dumps(summary, indent=2))
    else:
        for key, value in summary.items():
            print(f"{key}: {value}")
    return EXIT_SUCCESS
