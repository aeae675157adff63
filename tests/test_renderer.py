from __future__ import annotations

from io import BytesIO
from typing import Dict, List, Optional, Tuple

import pytest
from PIL import Image

from sealengine.assets import AssetKind, ImageHandle, decode_image
from sealengine.calibration import CalibrationProfile
from sealengine.layout import OverlayFlags, RenderTarget, RingLayoutEngine, SealDocument
from sealengine.models import SealInput
from sealengine.render import DrawingSurface, RasterSurface, Renderer, SvgSurface, WATERMARK_TEXT
from sealengine.viz.core.theme import DEFAULT_THEME, SealTheme

from .conftest import make_png


class RecordingSurface(DrawingSurface):
    format = "test"

    def __init__(self, size: float) -> None:
        super().__init__(size)
        self.calls: List[Tuple[str, dict]] = []

    def _record(self, name: str, /, **details) -> None:
        self.calls.append((name, details))

    def fill_background(self, color):
        self._record("fill_background", color=color)

    def circle(self, center, radius, *, fill=None, stroke=None, stroke_width=1.0, opacity=1.0):
        self._record("circle", center=center, radius=radius, fill=fill, stroke=stroke)

    def line(self, start, end, *, stroke, stroke_width=1.0, opacity=1.0):
        self._record("line", start=start, end=end)

    def text(self, position, value, *, font_size, fill, font_family="sans-serif", bold=False,
             stroke=None, stroke_width=0.0, opacity=1.0):
        self._record("text", value=value, fill=fill, font_size=font_size)

    def clipped_image(self, handle, center, radius):
        self._record("clipped_image", name=handle.name, radius=radius)

    def image(self, handle, center, box):
        self._record("image", name=handle.name, box=box)

    def text_on_circle(self, center, radius, value, *, font_size, path_length, fill, font_family="serif"):
        self._record("text_on_circle", value=value, radius=radius, path_length=path_length)

    def finish(self) -> bytes:
        return b""

    def names(self) -> List[str]:
        return [name for name, _ in self.calls]


class DictAssets:
    def __init__(self, handles: Optional[Dict[Tuple[AssetKind, str], ImageHandle]] = None) -> None:
        self.handles = handles or {}

    def get(self, kind: AssetKind, name: str) -> Optional[ImageHandle]:
        return self.handles.get((kind, name))


@pytest.fixture
def assets() -> DictAssets:
    handles = {
        (AssetKind.TEMPLATE, "lotus"): decode_image(AssetKind.TEMPLATE, "lotus", make_png()),
        (AssetKind.GLYPH, "ankh.png"): decode_image(AssetKind.GLYPH, "ankh.png", make_png()),
        (AssetKind.GLYPH, "eye.png"): decode_image(AssetKind.GLYPH, "eye.png", make_png()),
    }
    return DictAssets(handles)


def _document(profile: CalibrationProfile, seal: SealInput, size: float = 384, overlays: bool = True) -> SealDocument:
    profile = profile.model_copy(update={"show_watermark": True})
    return RingLayoutEngine().layout_seal(profile, RenderTarget(size, include_overlays=overlays), seal)


def test_z_order_with_all_overlays(reference_profile, seal, assets) -> None:
    surface = RecordingSurface(384)
    Renderer(assets=assets).draw(surface, _document(reference_profile, seal))
    names = surface.names()

    assert names[0] == "fill_background"
    assert names[1:5] == ["circle"] * 4
    assert surface.calls[4][1]["stroke"] == DEFAULT_THEME.color("gold")
    assert names[5] == "line"  # first tick spoke
    central = names.index("clipped_image")
    first_glyph = names.index("image")
    text_path = names.index("text_on_circle")
    assert central < first_glyph < text_path
    grid_lines = [i for i, name in enumerate(names) if name == "line" and i > text_path]
    assert len(grid_lines) == 30
    assert names[-1] == "text"
    assert surface.calls[-1][1]["value"] == WATERMARK_TEXT


def test_export_document_draws_no_overlays(reference_profile, seal, assets) -> None:
    surface = RecordingSurface(1200)
    Renderer(assets=assets).draw(surface, _document(reference_profile, seal, 1200, overlays=False))
    names = surface.names()
    assert "line" not in names
    assert all(details.get("value") != WATERMARK_TEXT for _, details in surface.calls)
    assert names[-1] == "text_on_circle"


def test_explicit_flags_override_document(reference_profile, seal, assets) -> None:
    surface = RecordingSurface(384)
    Renderer(assets=assets).draw(surface, _document(reference_profile, seal), OverlayFlags.none())
    assert "line" not in surface.names()


def test_missing_assets_skip_only_their_elements(reference_profile, seal) -> None:
    surface = RecordingSurface(1200)
    document = _document(reference_profile, seal, 1200, overlays=False)
    Renderer(assets=DictAssets()).draw(surface, document)
    names = surface.names()
    assert "clipped_image" not in names
    assert "image" not in names
    token_fills = [d["fill"] for name, d in surface.calls if name == "circle" and d["fill"]]
    assert len(token_fills) == len(document.ring1) + len(document.ring2)
    labels = [d["value"] for name, d in surface.calls if name == "text"]
    assert "ankh" in labels and "eye" in labels
    assert "text_on_circle" in names


def test_number_tokens_use_contrast_color(reference_profile, seal, assets) -> None:
    surface = RecordingSurface(1200)
    document = _document(reference_profile, seal, 1200, overlays=False)
    Renderer(assets=assets).draw(surface, document)
    numbers = {d["value"]: d["fill"] for name, d in surface.calls if name == "text"}
    assert numbers["7"] == "#FFFFFF"  # BLUE fill
    assert numbers["3"] == "#000000"  # YELLOW fill


def test_theme_strokes_scale_with_floor() -> None:
    theme = SealTheme(identifier="t", strokes={"ring": 1.5}, stroke_floors={"ring": 1.0})
    assert theme.stroke("ring", 1200) == pytest.approx(1.5 * 1200 / 384)
    assert theme.stroke("ring", 100) == 1.0


def test_svg_surface_output(reference_profile, seal, assets) -> None:
    surface = SvgSurface(384)
    Renderer(assets=assets).draw(surface, _document(reference_profile, seal))
    markup = surface.finish().decode("utf-8")
    assert "<textPath" in markup
    assert 'lengthAdjust="spacing"' in markup
    assert 'startOffset="50%"' in markup
    assert "OM NAMAH SHIVAYA" in markup
    assert "data:image/png;base64," in markup
    assert 'clip-path="url(#clip-1)"' in markup
    assert WATERMARK_TEXT in markup


def test_svg_render_is_byte_stable(reference_profile, seal, assets) -> None:
    document = _document(reference_profile, seal)
    renderer = Renderer(assets=assets)
    first = renderer.draw(SvgSurface(384), document).finish()
    second = renderer.draw(SvgSurface(384), document).finish()
    assert first == second


def test_raster_surface_output(reference_profile, seal, assets) -> None:
    surface = RasterSurface(600)
    Renderer(assets=assets).draw(surface, _document(reference_profile, seal, 600, overlays=False))
    data = surface.finish()
    assert data.startswith(b"\x89PNG")
    image = Image.open(BytesIO(data)).convert("RGB")
    assert image.size == (600, 600)
    assert image.getpixel((2, 2)) == (255, 255, 255)
    # The central design fills the central circle.
    assert image.getpixel((300, 300)) == (200, 30, 30)


def test_raster_circular_text_marks_the_ring(reference_profile, seal) -> None:
    surface = RasterSurface(600)
    document = _document(reference_profile, seal, 600, overlays=False)
    Renderer(assets=DictAssets()).draw(surface, document)
    image = surface.image.convert("L")
    radius = document.text_path_radius + 0.35 * document.text.font_size
    band = [
        image.getpixel((int(300 + dx), int(300 - radius + dy)))
        for dx in range(-60, 61)
        for dy in range(-8, 9)
    ]
    assert min(band) < 100
