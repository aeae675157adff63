"""Logging bootstrap for the sealengine CLI and embedding applications."""

from __future__ import annotations

import logging
import os
from typing import Any, Iterable

__all__ = ["LEVEL_ENV_VARS", "configure_logging", "resolve_level"]

LEVEL_ENV_VARS = ("SEALENGINE_LOG_LEVEL", "LOG_LEVEL")

# Pillow traces every PNG chunk and urllib3 every connection at DEBUG.
_CHATTY_LOGGERS = ("PIL", "urllib3")

_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


def resolve_level(value: str | int | None, env_vars: Iterable[str] = LEVEL_ENV_VARS) -> int:
    """Turn ``value`` (or the first set environment variable) into a level.

    Level names are case insensitive and digits are read as numeric levels.
    Unknown or empty values resolve to :data:`logging.INFO`.
    """

    if value is None:
        value = next((os.environ[name] for name in env_vars if os.environ.get(name)), None)
    if isinstance(value, int):
        return value
    text = (value or "").strip()
    if text.isdigit():
        return int(text)
    named = logging.getLevelName(text.upper()) if text else None
    return named if isinstance(named, int) else logging.INFO


def configure_logging(*, level: str | int | None = None, **kwargs: Any) -> int:
    """Install a root handler and return the effective level.

    An explicit ``level`` (the CLI's ``--log-level``) wins over the
    environment. Third-party loggers listed in ``_CHATTY_LOGGERS`` never go
    below WARNING. ``kwargs`` are forwarded to :func:`logging.basicConfig`.
    """

    effective = resolve_level(level)
    kwargs.setdefault("format", _FORMAT)
    kwargs.setdefault("datefmt", _DATEFMT)
    kwargs.setdefault("force", True)
    logging.basicConfig(level=effective, **kwargs)
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(max(effective, logging.WARNING))
    return effective
