"""Configuration models and helpers for sealengine settings."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

# -------------------- Settings Schema --------------------


class RenderingCfg(BaseModel):
    """Legibility and styling constants shared by layout and rendering."""

    font_min: float = 14.0
    font_max: float = 30.0
    # Font bounds are authored against the 384px preview and scale with the
    # render target from there.
    font_reference_size: float = 384.0
    char_width_ratio: float = 0.58
    safety_factor: float = 0.995
    max_words: int = 10
    contrast_threshold: float = 160.0
    background: str = "#FFFFFF"
    ring_stroke: str = "#000000"
    gold: str = "#D4AF37"
    text_color: str = "#000000"
    font_family: str = "'Times New Roman', Georgia, serif"

    @field_validator("font_min", "font_max", mode="before")
    @classmethod
    def _cap_font_sizes(cls, value: float) -> float:
        numeric = float(value)
        return max(4.0, min(200.0, numeric))

    @field_validator("char_width_ratio", mode="before")
    @classmethod
    def _cap_char_ratio(cls, value: float) -> float:
        numeric = float(value)
        return max(0.2, min(1.5, numeric))

    @field_validator("safety_factor", mode="before")
    @classmethod
    def _cap_safety_factor(cls, value: float) -> float:
        numeric = float(value)
        return max(0.5, min(1.0, numeric))

    @field_validator("max_words", mode="before")
    @classmethod
    def _cap_max_words(cls, value: int) -> int:
        return max(1, min(50, int(value)))

    @field_validator("contrast_threshold", mode="before")
    @classmethod
    def _cap_contrast_threshold(cls, value: float) -> float:
        numeric = float(value)
        return max(0.0, min(255.0, numeric))

    @model_validator(mode="after")
    def _order_font_bounds(self) -> "RenderingCfg":
        if self.font_min > self.font_max:
            low, high = self.font_max, self.font_min
            self.font_min, self.font_max = low, high
        return self


class ExportCfg(BaseModel):
    """High resolution export defaults."""

    default_size: int = 1200
    min_size: int = 600
    max_size: int = 4800
    format: Literal["png", "svg"] = "png"
    asset_timeout_s: float = 10.0

    @field_validator("default_size", "min_size", "max_size", mode="before")
    @classmethod
    def _cap_sizes(cls, value: int) -> int:
        return max(64, min(8192, int(value)))

    @field_validator("asset_timeout_s", mode="before")
    @classmethod
    def _cap_timeout(cls, value: float) -> float:
        numeric = float(value)
        return max(0.0, min(120.0, numeric))


class AssetsCfg(BaseModel):
    """Where glyph and central design images are fetched from."""

    base_url: Optional[str] = None
    directory: Optional[str] = None
    request_timeout_s: float = 10.0
    max_workers: int = 4

    @field_validator("max_workers", mode="before")
    @classmethod
    def _cap_workers(cls, value: int) -> int:
        return max(1, min(32, int(value)))


class PreviewCfg(BaseModel):
    """Interactive preview behaviour."""

    size: int = 384
    debounce_s: float = 0.05

    @field_validator("size", mode="before")
    @classmethod
    def _cap_size(cls, value: int) -> int:
        return max(64, min(4096, int(value)))

    @field_validator("debounce_s", mode="before")
    @classmethod
    def _cap_debounce(cls, value: float) -> float:
        numeric = float(value)
        return max(0.0, min(5.0, numeric))


class Settings(BaseModel):
    """Top-level settings model persisted on disk."""

    rendering: RenderingCfg = Field(default_factory=RenderingCfg)
    export: ExportCfg = Field(default_factory=ExportCfg)
    assets: AssetsCfg = Field(default_factory=AssetsCfg)
    preview: PreviewCfg = Field(default_factory=PreviewCfg)


# -------------------- I/O Helpers --------------------

CONFIG_FILENAME = "config.yaml"


def get_config_home() -> Path:
    """Return the directory where settings should be stored."""

    return Path(os.environ.get("SEALENGINE_HOME", str(Path.home() / ".sealengine")))


def config_path() -> Path:
    """Return the full path to the configuration file, creating directories as needed."""

    home = get_config_home()
    home.mkdir(parents=True, exist_ok=True)
    return home / CONFIG_FILENAME


def default_settings() -> Settings:
    """Instantiate a Settings object populated with defaults."""

    return Settings()


def save_settings(settings: Settings, path: Optional[Path] = None) -> Path:
    """Persist the given settings to disk as YAML."""

    target_path = Path(path) if path else config_path()
    target_path.parent.mkdir(parents=True, exist_ok=True)
    data = settings.model_dump()
    with target_path.open("w", encoding="utf-8") as handle:
        yaml.safe_dump(data, handle, sort_keys=False, allow_unicode=True)
    return target_path


def load_settings(path: Optional[Path] = None) -> Settings:
    """Load settings from disk, creating defaults if missing."""

    source_path = Path(path) if path else config_path()
    if not source_path.exists():
        settings = default_settings()
        save_settings(settings, source_path)
        return settings
    with source_path.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}
    if not isinstance(raw, dict):
        raw = {}
    return Settings(**raw)
