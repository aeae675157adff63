"""Input models for seal tokens and the token-selection payload."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from .geometry import DIRECTION_COUNT, direction_from_angle, direction_from_label

LOG = logging.getLogger(__name__)

__all__ = [
    "SealInput",
    "SealPayloadError",
    "Token",
    "TokenKind",
    "parse_seal_payload",
]


class SealPayloadError(ValueError):
    """Raised when a seal payload cannot be interpreted at all."""


class TokenKind(str, Enum):
    NUMBER = "number"
    GLYPH = "glyph"


@dataclass(frozen=True)
class Token:
    """A symbol anchored at one of the 24 directions of a ring.

    Several tokens may share a direction; the one drawn last wins.
    """

    direction_index: int
    color: str
    content: str | int
    kind: TokenKind = TokenKind.NUMBER

    def __post_init__(self) -> None:
        index = self.direction_index
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < DIRECTION_COUNT:
            raise ValueError(f"direction_index must be in 0..{DIRECTION_COUNT - 1}, got {index!r}")
        if not isinstance(self.kind, TokenKind):
            object.__setattr__(self, "kind", TokenKind(self.kind))


@dataclass(frozen=True)
class SealInput:
    """Everything the external token-selection step hands to the engine."""

    central_design: str = ""
    ring1: Tuple[Token, ...] = field(default_factory=tuple)
    ring2: Tuple[Token, ...] = field(default_factory=tuple)
    affirmation: str = ""
    repetitions: int = 1
    label: Optional[str] = None

    def glyph_names(self) -> List[str]:
        names: List[str] = []
        for token in self.ring2:
            name = str(token.content)
            if name and name not in names:
                names.append(name)
        return names


def _resolve_direction(entry: Mapping[str, Any]) -> Optional[int]:
    for key in ("direction_index", "directionIndex"):
        value = entry.get(key)
        if isinstance(value, int) and not isinstance(value, bool) and 0 <= value < DIRECTION_COUNT:
            return value
    angle = entry.get("angle")
    if isinstance(angle, (int, float)) and not isinstance(angle, bool) and math.isfinite(angle):
        return direction_from_angle(float(angle))
    for key in ("position", "direction"):
        label = entry.get(key)
        if isinstance(label, str):
            index = direction_from_label(label)
            if index is not None:
                return index
    return None


def _parse_tokens(entries: object, ring: str, default_kind: TokenKind) -> Tuple[Token, ...]:
    if entries is None:
        return ()
    if not isinstance(entries, Sequence) or isinstance(entries, (str, bytes)):
        LOG.warning("%s tokens are not a list; ignoring", ring)
        return ()
    tokens: List[Token] = []
    for position, entry in enumerate(entries):
        if not isinstance(entry, Mapping):
            LOG.warning("%s token #%d is not an object; dropped", ring, position)
            continue
        index = _resolve_direction(entry)
        if index is None:
            LOG.warning("%s token #%d has no usable direction; dropped", ring, position)
            continue
        kind_raw = entry.get("type") or entry.get("kind") or default_kind.value
        try:
            kind = TokenKind(str(kind_raw).lower())
        except ValueError:
            kind = default_kind
        content = entry.get("content")
        if content is None:
            content = entry.get("number") if default_kind is TokenKind.NUMBER else entry.get("glyph")
        if content is None:
            content = ""
        tokens.append(
            Token(
                direction_index=index,
                color=str(entry.get("color") or "WHITE"),
                content=content if isinstance(content, (int, str)) else str(content),
                kind=kind,
            )
        )
    return tuple(tokens)


_LEGACY_KEYS = ("CentralCircle", "Ring1", "Ring2", "Ring3")


def parse_seal_payload(payload: object) -> SealInput:
    """Build a :class:`SealInput` from the token-selection JSON.

    Both the current shape (``centralDesign``, ``ring1Tokens``,
    ``ring2Tokens``, ``ring3Affirmation``) and the legacy one
    (``CentralCircle``, ``Ring1``, ``Ring2``, ``Ring3``) are understood.
    Individual malformed tokens are dropped and logged.
    """

    if not isinstance(payload, Mapping):
        raise SealPayloadError("seal payload must be a JSON object")

    if any(key in payload for key in _LEGACY_KEYS):
        central = payload.get("CentralCircle") or {}
        ring3 = payload.get("Ring3") or {}
        if not isinstance(central, Mapping):
            central = {}
        if not isinstance(ring3, Mapping):
            ring3 = {"text": str(ring3)}
        return SealInput(
            central_design=str(central.get("template") or ""),
            ring1=_parse_tokens(payload.get("Ring1"), "ring1", TokenKind.NUMBER),
            ring2=_parse_tokens(payload.get("Ring2"), "ring2", TokenKind.GLYPH),
            affirmation=str(ring3.get("text") or ""),
            repetitions=_coerce_repetitions(ring3.get("repetitions")),
        )

    config = payload.get("userConfig")
    label = None
    if isinstance(config, Mapping):
        label = config.get("subCategory") or config.get("category") or None
    return SealInput(
        central_design=str(payload.get("centralDesign") or ""),
        ring1=_parse_tokens(payload.get("ring1Tokens"), "ring1", TokenKind.NUMBER),
        ring2=_parse_tokens(payload.get("ring2Tokens"), "ring2", TokenKind.GLYPH),
        affirmation=str(payload.get("ring3Affirmation") or ""),
        repetitions=_coerce_repetitions(payload.get("repetitions")),
        label=str(label) if label else None,
    )


def _coerce_repetitions(value: object) -> int:
    try:
        return max(1, min(6, int(value)))  # type: ignore[arg-type]
    except (TypeError, ValueError, OverflowError):
        return 1
