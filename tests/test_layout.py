from __future__ import annotations

import json

import pytest

from sealengine.calibration import CalibrationProfile
from sealengine.config.settings import RenderingCfg, Settings
from sealengine.layout import OverlayFlags, RenderTarget, RingLayoutEngine
from sealengine.models import SealInput, Token, TokenKind


def _engine() -> RingLayoutEngine:
    return RingLayoutEngine(Settings())


def test_single_token_sits_directly_above_center() -> None:
    profile = CalibrationProfile(
        reference_canvas_size=384,
        central_radius=50,
        inner_radius=90,
        middle_radius=128,
        outer_radius=166,
    )
    document = _engine().layout(
        profile,
        RenderTarget(384),
        [Token(0, "BLUE", 7)],
        [],
        "OM",
        "",
    )
    (token,) = document.ring1
    assert token.x == pytest.approx(192)
    assert token.y == pytest.approx(102)
    assert token.fill == "#2563EB"
    assert token.content_color == "#FFFFFF"


def test_layout_is_deterministic(reference_profile: CalibrationProfile, seal: SealInput) -> None:
    engine = _engine()
    first = engine.layout_seal(reference_profile, RenderTarget(384), seal)
    second = engine.layout_seal(reference_profile, RenderTarget(384), seal)
    assert first == second
    assert first.to_json() == second.to_json()


def test_preview_and_export_agree_on_relative_positions(
    reference_profile: CalibrationProfile, seal: SealInput
) -> None:
    engine = _engine()
    preview = engine.layout_seal(reference_profile, RenderTarget(384), seal)
    export = engine.layout_seal(reference_profile, RenderTarget(1200, include_overlays=False), seal)
    for small, large in zip(preview.tokens(), export.tokens()):
        assert small.x / 384 == pytest.approx(large.x / 1200)
        assert small.y / 384 == pytest.approx(large.y / 1200)
    assert preview.text_path_radius / 384 == pytest.approx(export.text_path_radius / 1200)
    assert preview.text.font_size / 384 == pytest.approx(export.text.font_size / 1200)


def test_overlays_follow_profile_flags(reference_profile: CalibrationProfile, seal: SealInput) -> None:
    engine = _engine()
    preview = engine.layout_seal(reference_profile, RenderTarget(384), seal)
    assert preview.overlays == OverlayFlags(grid=True, ticks=True, watermark=False)

    marked = reference_profile.model_copy(update={"show_grid": False, "show_watermark": True})
    flagged = engine.layout_seal(marked, RenderTarget(384), seal)
    assert flagged.overlays == OverlayFlags(grid=False, ticks=False, watermark=True)


def test_export_target_drops_all_overlays(reference_profile: CalibrationProfile, seal: SealInput) -> None:
    marked = reference_profile.model_copy(update={"show_watermark": True})
    document = _engine().layout_seal(marked, RenderTarget(1200, include_overlays=False), seal)
    assert document.overlays == OverlayFlags.none()
    assert not document.overlays.any()


def test_token_radii_track_their_ring(reference_profile: CalibrationProfile, seal: SealInput) -> None:
    document = _engine().layout_seal(reference_profile, RenderTarget(600), seal)
    for token in document.ring1:
        distance = ((token.x - 300) ** 2 + (token.y - 300) ** 2) ** 0.5
        assert distance == pytest.approx(document.radii.ring1)
        assert token.ring == 1
    for token in document.ring2:
        assert token.kind is TokenKind.GLYPH
        assert token.radius == document.radii.ring2_token


def test_font_bounds_scale_with_target(reference_profile: CalibrationProfile, seal: SealInput) -> None:
    document = _engine().layout_seal(reference_profile, RenderTarget(768), seal)
    assert document.font_bounds.min == pytest.approx(28)
    assert document.font_bounds.max == pytest.approx(60)
    assert document.font_bounds.min <= document.text.font_size <= document.font_bounds.max


def test_rendering_settings_drive_the_fitter(reference_profile: CalibrationProfile, seal: SealInput) -> None:
    settings = Settings(rendering=RenderingCfg(font_min=10, font_max=12))
    document = RingLayoutEngine(settings).layout_seal(reference_profile, RenderTarget(384), seal)
    assert document.text.font_size == 12


def test_repetitions_reach_the_text(reference_profile: CalibrationProfile) -> None:
    seal = SealInput(affirmation="om", repetitions=3)
    document = _engine().layout_seal(reference_profile, RenderTarget(384), seal)
    assert document.text.rendered_text == " OM • OM • OM •"


def test_border_stays_inside_canvas(reference_profile: CalibrationProfile, seal: SealInput) -> None:
    for size in (200, 384, 1200, 4800):
        document = _engine().layout_seal(reference_profile, RenderTarget(size), seal)
        assert document.border_radius + document.border_width / 2 <= size / 2


def test_descriptor_json(reference_profile: CalibrationProfile, seal: SealInput) -> None:
    document = _engine().layout_seal(reference_profile, RenderTarget(1200, include_overlays=False), seal)
    payload = json.loads(document.to_json())
    assert payload["pixel_size"] == 1200
    assert payload["central_design"] == "lotus"
    assert payload["overlays"] == {"grid": False, "ticks": False, "watermark": False}
    assert [entry["direction_index"] for entry in payload["ring1"]] == [0, 6, 12]
    assert payload["ring2"][0]["kind"] == "glyph"
    assert payload["text"]["rendered_text"] == " OM NAMAH SHIVAYA •"
    assert list(payload) == sorted(payload)
