"""Deterministic SVG scene graph used by the vector surface.

Attribute values are formatted without locale influence and children keep
insertion order, so laying out the same document twice yields byte
identical markup.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

SVG_NS = "http://www.w3.org/2000/svg"
XLINK_NS = "http://www.w3.org/1999/xlink"


def fmt_number(value: float) -> str:
    """Format a coordinate with at most four decimals and no trailing zeros."""

    text = f"{float(value):.4f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text


@dataclass
class SvgElement:
    """A minimal SVG node."""

    tag: str
    attributes: Dict[str, str] = field(default_factory=dict)
    children: List["SvgElement"] = field(default_factory=list)
    text: Optional[str] = None

    def set(self, **attrs: object) -> "SvgElement":
        """Assign attributes (``None`` skipped, ``_`` becomes ``-``) and return ``self``."""

        for key, value in attrs.items():
            if value is None:
                continue
            name = key.rstrip("_").replace("_", "-")
            if isinstance(value, bool):
                self.attributes[name] = "true" if value else "false"
            elif isinstance(value, (int, float)):
                self.attributes[name] = fmt_number(value)
            else:
                self.attributes[name] = str(value)
        return self

    def add(self, *children: "SvgElement") -> "SvgElement":
        self.children.extend(children)
        return self

    def to_string(self, indent: int = 0, pretty: bool = True) -> str:
        pad = "  " * indent if pretty else ""
        attrs = "".join(
            f" {name}={_quote(value)}" for name, value in sorted(self.attributes.items())
        )
        if not self.children and self.text is None:
            return f"{pad}<{self.tag}{attrs}/>"

        parts: List[str] = []
        if self.text is not None and not self.children:
            return f"{pad}<{self.tag}{attrs}>{_escape(self.text)}</{self.tag}>"
        parts.append(f"{pad}<{self.tag}{attrs}>")
        if self.text is not None:
            parts.append(("  " * (indent + 1) if pretty else "") + _escape(self.text))
        for child in self.children:
            parts.append(child.to_string(indent + 1, pretty=pretty))
        parts.append(f"{pad}</{self.tag}>")
        return ("\n" if pretty else "").join(parts)


def _quote(value: str) -> str:
    return f'"{_escape(value)}"'


def _escape(value: str) -> str:
    return (
        value.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&apos;")
    )


@dataclass
class SvgScene:
    """Square scene container that serialises to a standalone SVG file."""

    width: float
    height: float
    metadata: Dict[str, str] = field(default_factory=dict)
    root: SvgElement = field(init=False)
    defs: SvgElement = field(init=False)
    _ids: Dict[str, int] = field(init=False, default_factory=dict)

    def __post_init__(self) -> None:
        self.root = SvgElement("svg").set(
            xmlns=SVG_NS,
            width=self.width,
            height=self.height,
            viewBox=f"0 0 {fmt_number(self.width)} {fmt_number(self.height)}",
        )
        self.root.attributes["xmlns:xlink"] = XLINK_NS
        if self.metadata:
            meta = SvgElement("metadata")
            for key, value in sorted(self.metadata.items()):
                meta.add(SvgElement("meta").set(key=key, value=str(value)))
            self.root.add(meta)
        self.defs = SvgElement("defs")
        self.root.add(self.defs)

    def next_id(self, prefix: str) -> str:
        """Sequential ids keep repeated renders identical."""

        count = self._ids.get(prefix, 0) + 1
        self._ids[prefix] = count
        return f"{prefix}-{count}"

    # Element factories -------------------------------------------------
    def rect(self, x: float, y: float, width: float, height: float, **attrs: object) -> SvgElement:
        return self.add(SvgElement("rect").set(x=x, y=y, width=width, height=height, **attrs))

    def circle(self, cx: float, cy: float, r: float, **attrs: object) -> SvgElement:
        return self.add(SvgElement("circle").set(cx=cx, cy=cy, r=r, **attrs))

    def line(self, x1: float, y1: float, x2: float, y2: float, **attrs: object) -> SvgElement:
        return self.add(SvgElement("line").set(x1=x1, y1=y1, x2=x2, y2=y2, **attrs))

    def text(self, x: float, y: float, value: str, **attrs: object) -> SvgElement:
        return self.add(SvgElement("text", text=value).set(x=x, y=y, **attrs))

    def clip_circle(self, cx: float, cy: float, r: float) -> str:
        clip_id = self.next_id("clip")
        self.defs.add(SvgElement("clipPath").set(id=clip_id).add(SvgElement("circle").set(cx=cx, cy=cy, r=r)))
        return clip_id

    def circular_path(self, cx: float, cy: float, r: float) -> str:
        """Register a full clockwise circle starting at 9 o'clock; return its id."""

        path_id = self.next_id("ring-path")
        d = (
            f"M {fmt_number(cx - r)},{fmt_number(cy)} "
            f"a {fmt_number(r)},{fmt_number(r)} 0 1,1 {fmt_number(2 * r)},0 "
            f"a {fmt_number(r)},{fmt_number(r)} 0 1,1 {fmt_number(-2 * r)},0"
        )
        self.defs.add(SvgElement("path").set(id=path_id, d=d, fill="none"))
        return path_id

    def add(self, element: SvgElement) -> SvgElement:
        self.root.add(element)
        return element

    def to_string(self, pretty: bool = True) -> str:
        return self.root.to_string(indent=0, pretty=pretty)

    def to_bytes(self, pretty: bool = True) -> bytes:
        header = '<?xml version="1.0" encoding="UTF-8"?>\n'
        return (header + self.to_string(pretty=pretty)).encode("utf-8")
