"""``layout`` subcommand: print the resolved seal geometry as JSON."""

from __future__ import annotations

import argparse
import sys

from ..config import load_settings
from ..layout import RenderTarget, RingLayoutEngine
from ._io import load_inputs


def add_subparser(sub: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    """Register the ``layout`` subcommand."""

    parser = sub.add_parser(
        "layout",
        help="Print the resolved seal layout as JSON",
        description="Resolve ring radii, token positions and text fitting for one target size.",
    )
    parser.add_argument("--profile", help="Calibration profile JSON (default: built-in profile)")
    parser.add_argument("--seal", required=True, help="Seal token payload JSON (use '-' for stdin)")
    parser.add_argument("--size", type=float, default=384.0, help="Target pixel size (default: 384)")
    parser.add_argument(
        "--overlays",
        action="store_true",
        help="Resolve overlay flags as the live preview would",
    )
    parser.set_defaults(func=run)


def run(args: argparse.Namespace) -> int:
    """Execute the layout subcommand."""

    try:
        profile, seal = load_inputs(args.profile, args.seal)
    except Exception as exc:  # pragma: no cover - reported to user
        print(f"failed to load inputs: {exc}", file=sys.stderr)
        return 1
    if args.size <= 0:
        print("--size must be positive", file=sys.stderr)
        return 2

    engine = RingLayoutEngine(load_settings())
    document = engine.layout_seal(profile, RenderTarget(args.size, include_overlays=args.overlays), seal)
    print(document.to_json(indent=2))
    return 0
