from __future__ import annotations

from io import BytesIO
from pathlib import Path

import pytest
from PIL import Image

from sealengine.calibration import CalibrationProfile
from sealengine.models import parse_seal_payload


@pytest.fixture(autouse=True)
def _isolated_config_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Keep settings files out of the developer's home directory."""

    home = tmp_path / "sealengine-home"
    monkeypatch.setenv("SEALENGINE_HOME", str(home))
    return home


def make_png(color: tuple[int, int, int, int] = (200, 30, 30, 255), size: int = 32) -> bytes:
    buffer = BytesIO()
    Image.new("RGBA", (size, size), color).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def png_bytes() -> bytes:
    return make_png()


@pytest.fixture
def reference_profile() -> CalibrationProfile:
    return CalibrationProfile.from_payload(
        {
            "referenceCanvasSize": 600,
            "centralRadius": 80,
            "innerRadius": 140,
            "middleRadius": 200,
            "outerRadius": 260,
        }
    )


@pytest.fixture
def seal_payload() -> dict:
    return {
        "centralDesign": "lotus",
        "ring1Tokens": [
            {"angle": 0, "color": "BLUE", "content": 7, "type": "number"},
            {"angle": 90, "color": "YELLOW", "content": 3, "type": "number"},
            {"position": "6:00", "color": "RED", "content": 9, "type": "number"},
        ],
        "ring2Tokens": [
            {"angle": 45, "color": "GREEN", "content": "ankh.png", "type": "glyph"},
            {"position": "9:30", "color": "WHITE", "content": "eye.png", "type": "glyph"},
        ],
        "ring3Affirmation": "om namah shivaya",
        "userConfig": {"category": "Health", "subCategory": "Vitality"},
    }


@pytest.fixture
def seal(seal_payload: dict):
    return parse_seal_payload(seal_payload)


@pytest.fixture
def asset_dir(tmp_path: Path) -> Path:
    root = tmp_path / "assets"
    (root / "glyphs").mkdir(parents=True)
    (root / "templates").mkdir(parents=True)
    (root / "glyphs" / "ankh.png").write_bytes(make_png((10, 120, 10, 255)))
    (root / "glyphs" / "eye.png").write_bytes(make_png((10, 10, 160, 255)))
    (root / "templates" / "lotus.png").write_bytes(make_png((240, 200, 40, 255), size=64))
    return root
