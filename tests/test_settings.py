from __future__ import annotations

import logging
from pathlib import Path

import pytest
import yaml

from sealengine.boot.logging import configure_logging
from sealengine.config import (
    ExportCfg,
    RenderingCfg,
    Settings,
    config_path,
    default_settings,
    get_config_home,
    load_settings,
    save_settings,
)


def test_config_home_follows_environment(_isolated_config_home: Path) -> None:
    assert get_config_home() == _isolated_config_home
    assert config_path() == _isolated_config_home / "config.yaml"
    assert _isolated_config_home.is_dir()


def test_load_creates_defaults_on_first_use(_isolated_config_home: Path) -> None:
    settings = load_settings()
    assert settings == default_settings()
    assert (_isolated_config_home / "config.yaml").exists()


def test_round_trip(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    settings = Settings(
        rendering=RenderingCfg(font_min=12, font_max=28, gold="#C9A227"),
        export=ExportCfg(default_size=2400, format="svg"),
    )
    save_settings(settings, path)
    loaded = load_settings(path)
    assert loaded == settings
    assert yaml.safe_load(path.read_text(encoding="utf-8"))["export"]["format"] == "svg"


def test_values_are_capped() -> None:
    rendering = RenderingCfg(font_min=1, char_width_ratio=9, safety_factor=2, max_words=0, contrast_threshold=999)
    assert rendering.font_min == 4
    assert rendering.char_width_ratio == 1.5
    assert rendering.safety_factor == 1.0
    assert rendering.max_words == 1
    assert rendering.contrast_threshold == 255
    assert ExportCfg(max_size=100000).max_size == 8192


def test_reversed_font_bounds_are_swapped() -> None:
    rendering = RenderingCfg(font_min=40, font_max=20)
    assert (rendering.font_min, rendering.font_max) == (20, 40)


def test_unknown_keys_in_file_are_ignored(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("schema_version: 0\nexport:\n  default_size: 1800\n", encoding="utf-8")
    settings = load_settings(path)
    assert settings.export.default_size == 1800
    assert "schema_version" not in settings.model_dump()


def test_non_mapping_yaml_falls_back_to_defaults(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")
    assert load_settings(path).rendering == RenderingCfg()


@pytest.mark.parametrize(
    "env, expected",
    [("DEBUG", logging.DEBUG), ("warning", logging.WARNING), ("15", 15), ("nonsense", logging.INFO)],
)
def test_configure_logging_reads_environment(monkeypatch: pytest.MonkeyPatch, env: str, expected: int) -> None:
    monkeypatch.delenv("SEALENGINE_LOG_LEVEL", raising=False)
    monkeypatch.setenv("LOG_LEVEL", env)
    root = logging.getLogger()
    previous_level, previous_handlers = root.level, list(root.handlers)
    try:
        assert configure_logging() == expected
    finally:
        root.handlers[:] = previous_handlers
        root.setLevel(previous_level)


def test_package_specific_level_wins(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("SEALENGINE_LOG_LEVEL", "ERROR")
    root = logging.getLogger()
    previous_level, previous_handlers = root.level, list(root.handlers)
    try:
        assert configure_logging() == logging.ERROR
    finally:
        root.handlers[:] = previous_handlers
        root.setLevel(previous_level)


def test_explicit_level_beats_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SEALENGINE_LOG_LEVEL", "ERROR")
    root = logging.getLogger()
    previous_level, previous_handlers = root.level, list(root.handlers)
    try:
        assert configure_logging(level="warning") == logging.WARNING
        assert logging.getLogger("urllib3").level == logging.WARNING
    finally:
        root.handlers[:] = previous_handlers
        root.setLevel(previous_level)
