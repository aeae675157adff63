"""``export`` subcommand: render a seal to PNG or SVG."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from ..config import load_settings
from ..exporter import SUPPORTED_FORMATS, Exporter
from ._io import load_inputs


def add_subparser(sub: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    """Register the ``export`` subcommand."""

    parser = sub.add_parser(
        "export",
        help="Render a seal image at export resolution",
        description=(
            "Lay out a seal from a calibration profile and a token payload and "
            "write it as PNG or SVG. Overlays are never included."
        ),
    )
    parser.add_argument("--profile", help="Calibration profile JSON (default: built-in profile)")
    parser.add_argument("--seal", required=True, help="Seal token payload JSON (use '-' for stdin)")
    parser.add_argument("--out", required=True, help="Destination image path")
    parser.add_argument("--size", type=float, help="Target pixel size (clamped to the export range)")
    parser.add_argument(
        "--format",
        choices=SUPPORTED_FORMATS,
        help="Output format (default: the --out suffix when it is png or svg, else settings)",
    )
    parser.add_argument("--descriptor", help="Also write the resolved layout as JSON to this path")
    parser.add_argument("--assets", help="Local asset directory containing glyphs/ and templates/")
    parser.add_argument("--asset-url", help="Base URL of the asset store")
    parser.set_defaults(func=run)


def _infer_format(args: argparse.Namespace) -> str | None:
    if args.format:
        return args.format
    suffix = Path(args.out).suffix.lower().lstrip(".")
    return suffix if suffix in SUPPORTED_FORMATS else None


def run(args: argparse.Namespace) -> int:
    """Execute the export subcommand."""

    try:
        profile, seal = load_inputs(args.profile, args.seal)
    except Exception as exc:  # pragma: no cover - reported to user
        print(f"failed to load inputs: {exc}", file=sys.stderr)
        return 1

    settings = load_settings()
    if args.assets or args.asset_url:
        settings.assets.directory = args.assets or settings.assets.directory
        settings.assets.base_url = args.asset_url or settings.assets.base_url
    with Exporter(settings=settings) as exporter:
        try:
            result = exporter.export_with_descriptor(profile, seal, args.size, fmt=_infer_format(args))
        except ValueError as exc:
            print(f"export failed: {exc}", file=sys.stderr)
            return 2

    Path(args.out).write_bytes(result.image)
    if args.descriptor:
        Path(args.descriptor).write_text(result.descriptor(), encoding="utf-8")
    print(f"wrote {result.fmt} seal ({int(result.document.pixel_size)}px) to {args.out}")
    return 0
