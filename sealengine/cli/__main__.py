"""Entry point for the sealengine CLI."""

from __future__ import annotations

import argparse
from collections.abc import Sequence

from ..boot.logging import configure_logging
from . import export, layout


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="sealengine", description="Seal layout and export")
    parser.add_argument(
        "--log-level",
        help="Logging level name or number (default: SEALENGINE_LOG_LEVEL, LOG_LEVEL, else INFO)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    export.add_subparser(sub)
    layout.add_subparser(sub)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    configure_logging(level=args.log_level)
    return args.func(args)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
