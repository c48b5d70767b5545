from __future__ import annotations

import argparse

from otlpmetric.version import get_version

__all__ = ["register_parser", "run"]


def register_parser(subparsers: argparse._SubParsersAction) -> None:
    parser = subparsers.add_parser(
        "version",
        help="Show the otlpmetric-config package version.",
    )
    parser.set_defaults(handler=run)


def run(_: argparse.Namespace) -> int:
    print(get_version())
    return 0
