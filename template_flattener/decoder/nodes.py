"""Decoded document tree — the read-only input of the flattening engine.

A decoder turns document bytes into a ``DecodedDocument`` whose children
form a tree of ``DecodedNode``s. Bounding boxes are absolute document
coordinates. Opacity is passed through in whatever unit the decoder
reports (0-1 or 0-255); normalization happens in the processor.
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class RGB:
    """A colour triple with channels in the 0-255 range (may be fractional)."""
    r: float
    g: float
    b: float

    @classmethod
    def from_value(cls, value: Any) -> "RGB | None":
        """Accept ``{"r","g","b"}`` mappings or ``[r, g, b]`` sequences."""
        if value is None:
            return None
        if isinstance(value, RGB):
            return value
        if isinstance(value, dict):
            return cls(r=value["r"], g=value["g"], b=value["b"])
        r, g, b = list(value)[:3]
        return cls(r=r, g=g, b=b)


@dataclass
class TextRun:
    """Text content of a type layer plus whatever style signals survived decoding.

    ``font_size`` and ``fill_color`` come from the layer's style record;
    ``sizes`` and ``colors`` are the per-run arrays. Either side may be
    missing.
    """
    content: str = ""
    font_name: str | None = None
    font_size: float | None = None
    sizes: list[float] = field(default_factory=list)
    fill_color: RGB | None = None
    colors: list[RGB] = field(default_factory=list)
    alignment: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, d: dict) -> "TextRun":
        return cls(
            content=d.get("content", ""),
            font_name=d.get("font_name"),
            font_size=d.get("font_size"),
            sizes=list(d.get("sizes", [])),
            fill_color=RGB.from_value(d.get("fill_color")),
            colors=[RGB.from_value(c) for c in d.get("colors", [])],
            alignment=list(d.get("alignment", [])),
        )


@dataclass
class DecodedNode:
    """One node of the decoded tree: a group (has children) or a leaf."""
    name: str
    left: float = 0
    top: float = 0
    right: float = 0
    bottom: float = 0
    opacity: float | None = None
    text_run: TextRun | None = None
    raster: Any = None                   # Opaque image handle (PIL image)
    fill_color: RGB | None = None        # Solid fill exposed by shape layers
    children: list["DecodedNode"] = field(default_factory=list)

    @property
    def is_group(self) -> bool:
        return bool(self.children)

    def leaf_count(self) -> int:
        """Number of leaves at or below this node."""
        if not self.is_group:
            return 1
        return sum(child.leaf_count() for child in self.children)

    @classmethod
    def from_dict(cls, d: dict) -> "DecodedNode":
        return cls(
            name=d.get("name", ""),
            left=d.get("left", 0),
            top=d.get("top", 0),
            right=d.get("right", 0),
            bottom=d.get("bottom", 0),
            opacity=d.get("opacity"),
            text_run=TextRun.from_dict(d["text_run"]) if d.get("text_run") else None,
            raster=d.get("raster"),
            fill_color=RGB.from_value(d.get("fill_color")),
            children=[cls.from_dict(c) for c in d.get("children", [])],
        )


@dataclass
class DecodedDocument:
    """A decoded layered document: canvas size plus its root nodes."""
    name: str
    children: list[DecodedNode] = field(default_factory=list)
    width: int | None = None
    height: int | None = None

    @classmethod
    def from_dict(cls, d: dict) -> "DecodedDocument":
        return cls(
            name=d.get("name", ""),
            children=[DecodedNode.from_dict(c) for c in d.get("children", [])],
            width=d.get("width"),
            height=d.get("height"),
        )
