"""Fit an affirmation exactly once around a ring.

Widths are estimated from a calibrated average glyph width rather than
measured, so the result does not depend on whichever text backend ends up
drawing the seal.  Renderers stretch or compress the string onto
:attr:`FittedText.path_length` to absorb the estimate's error.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from typing import Dict, Iterator

LOG = logging.getLogger(__name__)

__all__ = [
    "CHAR_WIDTH_RATIO",
    "DEFAULT_AFFIRMATION",
    "DEFAULT_FONT_BOUNDS",
    "MAX_WORDS",
    "SAFETY_FACTOR",
    "SEPARATOR",
    "CircularTextFitter",
    "FittedText",
    "FontBounds",
    "estimate_width",
    "frame_for_circle",
    "normalize_affirmation",
]

MAX_WORDS = 10
CHAR_WIDTH_RATIO = 0.58
SAFETY_FACTOR = 0.995
SEPARATOR = "•"
DEFAULT_AFFIRMATION = "OM NAMAH SHIVAYA"

_LABEL_PREFIX = re.compile(r"^\s*[A-Za-z][\w-]*\s*:\s*")


@dataclass(frozen=True)
class FontBounds:
    """Inclusive font size range scanned in ``step`` increments."""

    min: float
    max: float
    step: float = 1.0

    def __post_init__(self) -> None:
        if self.min > self.max:
            low, high = self.max, self.min
            object.__setattr__(self, "min", low)
            object.__setattr__(self, "max", high)
        if self.step <= 0:
            raise ValueError("font step must be positive")

    def scaled(self, factor: float) -> "FontBounds":
        return FontBounds(self.min * factor, self.max * factor, self.step * factor)

    def candidates(self) -> Iterator[float]:
        """Yield sizes from ``max`` down to ``min`` (both included)."""

        count = int(math.floor((self.max - self.min) / self.step + 1e-9))
        for idx in range(count + 1):
            yield self.max - idx * self.step
        if self.max - count * self.step > self.min:
            yield self.min


DEFAULT_FONT_BOUNDS = FontBounds(14.0, 30.0)


@dataclass(frozen=True)
class FittedText:
    font_size: float
    rendered_text: str
    path_length: float
    circumference: float
    phrase: str
    overflow: bool = False

    def as_dict(self) -> Dict[str, object]:
        return {
            "font_size": self.font_size,
            "rendered_text": self.rendered_text,
            "path_length": self.path_length,
            "circumference": self.circumference,
            "phrase": self.phrase,
            "overflow": self.overflow,
        }


def normalize_affirmation(text: str | None, max_words: int = MAX_WORDS) -> str:
    """Trim, drop a leading ``Label:`` prefix, cap the word count and uppercase."""

    raw = (text or "").strip()
    raw = _LABEL_PREFIX.sub("", raw, count=1)
    words = raw.split()[:max_words]
    if not words:
        return DEFAULT_AFFIRMATION
    return " ".join(words).upper()


def frame_for_circle(phrase: str, repetitions: int = 1) -> str:
    """Add the leading space and trailing separator that mark the wrap seam."""

    body = f" {SEPARATOR} ".join([phrase] * max(1, int(repetitions)))
    return f" {body} {SEPARATOR}"


def estimate_width(text: str, font_size: float, ratio: float = CHAR_WIDTH_RATIO) -> float:
    return len(text) * ratio * font_size


class CircularTextFitter:
    def __init__(
        self,
        char_width_ratio: float = CHAR_WIDTH_RATIO,
        safety_factor: float = SAFETY_FACTOR,
        max_words: int = MAX_WORDS,
    ) -> None:
        self.char_width_ratio = char_width_ratio
        self.safety_factor = safety_factor
        self.max_words = max_words

    def fit(
        self,
        text: str | None,
        circumference: float,
        font_bounds: FontBounds = DEFAULT_FONT_BOUNDS,
        *,
        repetitions: int = 1,
    ) -> FittedText:
        """Pick the largest font in ``font_bounds`` that fits ``circumference``.

        Overlong text is clamped to ``font_bounds.min`` and flagged with
        ``overflow=True`` instead of failing.
        """

        phrase = normalize_affirmation(text, self.max_words)
        framed = frame_for_circle(phrase, repetitions)
        budget = max(0.0, circumference) * self.safety_factor

        chosen = None
        for size in font_bounds.candidates():
            if estimate_width(framed, size, self.char_width_ratio) <= budget:
                chosen = size
                break

        overflow = chosen is None
        if overflow:
            chosen = font_bounds.min
            LOG.warning(
                "affirmation of %d chars overflows ring (%.1fpx) at minimum font %.2f",
                len(framed),
                circumference,
                chosen,
            )

        return FittedText(
            font_size=chosen,
            rendered_text=framed,
            path_length=budget,
            circumference=circumference,
            phrase=phrase,
            overflow=overflow,
        )
