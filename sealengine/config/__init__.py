"""Configuration helpers exposed at :mod:`sealengine.config`."""

from __future__ import annotations

from .settings import (
    AssetsCfg,
    ExportCfg,
    PreviewCfg,
    RenderingCfg,
    Settings,
    config_path,
    default_settings,
    get_config_home,
    load_settings,
    save_settings,
)

__all__ = [
    "Settings",
    "RenderingCfg",
    "ExportCfg",
    "AssetsCfg",
    "PreviewCfg",
    "config_path",
    "get_config_home",
    "default_settings",
    "load_settings",
    "save_settings",
]
