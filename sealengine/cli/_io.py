"""Shared input loading for CLI subcommands."""

from __future__ import annotations

import json
import sys
from pathlib import Path

from ..calibration import CalibrationProfile, load_profile
from ..models import SealInput, parse_seal_payload


def read_json(path: str) -> object:
    if path == "-":
        return json.loads(sys.stdin.read())
    return json.loads(Path(path).read_text(encoding="utf-8"))


def load_inputs(profile_path: str | None, seal_path: str) -> tuple[CalibrationProfile, SealInput]:
    profile = load_profile(profile_path) if profile_path else CalibrationProfile()
    seal = parse_seal_payload(read_json(seal_path))
    return profile, seal
