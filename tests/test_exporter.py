from __future__ import annotations

import json
from io import BytesIO

import pytest
from PIL import Image

from sealengine.assets import AssetStore
from sealengine.config.settings import ExportCfg, Settings
from sealengine.exporter import Exporter
from sealengine.layout import RenderTarget, RingLayoutEngine


@pytest.fixture
def exporter(asset_dir):
    store = AssetStore(directory=asset_dir)
    yield Exporter(store, settings=Settings())
    store.close()


def test_png_export_waits_for_assets(exporter, reference_profile, seal) -> None:
    data = exporter.export_seal(reference_profile, seal, 1200)
    image = Image.open(BytesIO(data)).convert("RGB")
    assert image.size == (1200, 1200)
    # Central design (lotus template) is drawn at the center.
    assert image.getpixel((600, 600)) == (240, 200, 40)


def test_export_signature_with_token_lists(exporter, reference_profile, seal) -> None:
    data = exporter.export(
        reference_profile,
        seal.ring1,
        seal.ring2,
        "i am whole",
        "lotus",
        800,
        fmt="svg",
    )
    markup = data.decode("utf-8")
    assert 'width="800"' in markup
    assert "I AM WHOLE" in markup


def test_export_never_contains_overlays(exporter, reference_profile, seal) -> None:
    marked = reference_profile.model_copy(update={"show_grid": True, "show_watermark": True})
    markup = exporter.export_seal(marked, seal, 1200, fmt="svg").decode("utf-8")
    assert "ANOINT" not in markup
    assert "12:00" not in markup
    assert "<line" not in markup


@pytest.mark.parametrize("requested, expected", [(100, 600), (599.6, 600), (1200, 1200), (10000, 4800), (None, 1200)])
def test_size_is_clamped(exporter, requested, expected) -> None:
    assert exporter.clamp_size(requested) == expected


def test_small_request_is_raised_to_minimum(exporter, reference_profile, seal) -> None:
    result = exporter.export_with_descriptor(reference_profile, seal, 100, fmt="svg")
    assert result.document.pixel_size == 600


def test_unsupported_format(exporter, reference_profile, seal) -> None:
    with pytest.raises(ValueError):
        exporter.export_seal(reference_profile, seal, 1200, fmt="gif")


def test_default_format_comes_from_settings(asset_dir, reference_profile, seal) -> None:
    store = AssetStore(directory=asset_dir)
    try:
        exporter = Exporter(store, settings=Settings(export=ExportCfg(format="svg")))
        result = exporter.export_with_descriptor(reference_profile, seal)
        assert result.fmt == "svg"
        assert result.media_type == "image/svg+xml"
        assert result.document.pixel_size == 1200
    finally:
        store.close()


def test_descriptor_matches_preview_geometry(exporter, reference_profile, seal) -> None:
    result = exporter.export_with_descriptor(reference_profile, seal, 1200, fmt="svg")
    descriptor = json.loads(result.descriptor())
    preview = RingLayoutEngine().layout_seal(reference_profile, RenderTarget(384), seal)
    for exported, shown in zip(descriptor["ring1"] + descriptor["ring2"], preview.tokens()):
        assert exported["x"] / 1200 == pytest.approx(shown.x / 384)
        assert exported["y"] / 1200 == pytest.approx(shown.y / 384)
    assert descriptor["overlays"] == {"grid": False, "ticks": False, "watermark": False}


def test_broken_assets_still_export(tmp_path, reference_profile, seal) -> None:
    store = AssetStore(directory=tmp_path / "nothing-here")
    try:
        data = Exporter(store, settings=Settings()).export_seal(reference_profile, seal, 600)
        assert data.startswith(b"\x89PNG")
    finally:
        store.close()


def test_close_shuts_down_an_owned_store(asset_dir) -> None:
    settings = Settings()
    settings.assets.directory = str(asset_dir)
    with Exporter(settings=settings) as owned:
        executor = owned.store._executor
    with pytest.raises(RuntimeError):
        executor.submit(print)


def test_close_leaves_a_borrowed_store_running(exporter) -> None:
    exporter.close()
    assert exporter.store._executor.submit(int, "7").result(timeout=5) == 7
