"""Canonical template models - the contract between flattener, store, and renderer.

Defines the typed, format-independent structure of an imported creative
template: which slides exist, which layers each slide holds, in what
stacking order, and the kind-specific content of every layer.
"""

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class LayerKind(Enum):
    """What kind of content a layer holds."""
    TEXT = "text"
    IMAGE = "image"
    SHAPE = "shape"


class TextAlign(Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class TextTransform(Enum):
    NONE = "none"
    UPPERCASE = "uppercase"
    LOWERCASE = "lowercase"
    CAPITALIZE = "capitalize"


# Fixed text defaults applied to every imported text layer
DEFAULT_LINE_HEIGHT = 1.2
DEFAULT_LETTER_SPACING = 0.0
DEFAULT_MAX_LENGTH = 500


def new_local_id(prefix: str) -> str:
    """Return a transient client-side identifier, e.g. ``layer-3f2a...``."""
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------

@dataclass
class Geometry:
    """Layer position and size in whole document pixels."""
    x: int
    y: int
    width: int
    height: int

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y,
                "width": self.width, "height": self.height}

    @classmethod
    def from_dict(cls, d: dict) -> "Geometry":
        return cls(x=d["x"], y=d["y"], width=d["width"], height=d["height"])


# ---------------------------------------------------------------------------
# Kind-specific payloads
# ---------------------------------------------------------------------------

@dataclass
class TextPayload:
    """Editable text content and its typography."""
    text: str
    font_family: str = "DM Sans"
    font_size_pt: float = 16.0
    color_hex: str = "#000000"
    align: TextAlign = TextAlign.LEFT
    line_height: float = DEFAULT_LINE_HEIGHT
    letter_spacing: float = DEFAULT_LETTER_SPACING
    text_transform: TextTransform = TextTransform.NONE
    max_length: int = DEFAULT_MAX_LENGTH

    kind = LayerKind.TEXT

    def to_dict(self) -> dict:
        return {
            "text": self.text,
            "font_family": self.font_family,
            "font_size_pt": self.font_size_pt,
            "color_hex": self.color_hex,
            "align": self.align.value,
            "line_height": self.line_height,
            "letter_spacing": self.letter_spacing,
            "text_transform": self.text_transform.value,
            "max_length": self.max_length,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "TextPayload":
        return cls(
            text=d.get("text", ""),
            font_family=d.get("font_family", "DM Sans"),
            font_size_pt=d.get("font_size_pt", 16.0),
            color_hex=d.get("color_hex", "#000000"),
            align=TextAlign(d.get("align", "left")),
            line_height=d.get("line_height", DEFAULT_LINE_HEIGHT),
            letter_spacing=d.get("letter_spacing", DEFAULT_LETTER_SPACING),
            text_transform=TextTransform(d.get("text_transform", "none")),
            max_length=d.get("max_length", DEFAULT_MAX_LENGTH),
        )


@dataclass
class ImagePayload:
    """Raster content as a data URL; None when the raster could not be encoded."""
    source_data_url: str | None = None

    kind = LayerKind.IMAGE

    def to_dict(self) -> dict:
        d: dict[str, Any] = {}
        if self.source_data_url:
            d["source_data_url"] = self.source_data_url
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "ImagePayload":
        return cls(source_data_url=d.get("source_data_url"))


@dataclass
class ShapePayload:
    """Solid fill colour of a vector/fill layer."""
    color_hex: str = "#000000"

    kind = LayerKind.SHAPE

    def to_dict(self) -> dict:
        return {"color_hex": self.color_hex}

    @classmethod
    def from_dict(cls, d: dict) -> "ShapePayload":
        return cls(color_hex=d.get("color_hex", "#000000"))


Payload = Union[TextPayload, ImagePayload, ShapePayload]

_PAYLOAD_TYPES = {
    LayerKind.TEXT: TextPayload,
    LayerKind.IMAGE: ImagePayload,
    LayerKind.SHAPE: ShapePayload,
}


# ---------------------------------------------------------------------------
# Layer
# ---------------------------------------------------------------------------

@dataclass
class Layer:
    """One flattened, renderable layer of a slide.

    ``order_index`` is the bottom-to-top stacking position within the slide
    (0 is drawn first). Identity is two-phase: ``local_id`` is generated at
    construction and ``stored_id`` is filled in once a store persists the
    layer.
    """
    name: str
    geometry: Geometry
    payload: Payload
    order_index: int = 0
    opacity: float = 1.0
    visible: bool = True
    locked: bool = False
    rotation: float = 0.0
    local_id: str = field(default_factory=lambda: new_local_id("layer"))
    stored_id: str | None = None

    def __post_init__(self):
        if not isinstance(self.payload, tuple(_PAYLOAD_TYPES.values())):
            raise TypeError(f"Layer '{self.name}' has unsupported payload "
                            f"{type(self.payload).__name__}")

    @property
    def kind(self) -> LayerKind:
        return self.payload.kind

    @property
    def id(self) -> str:
        return self.stored_id or self.local_id

    def to_dict(self) -> dict:
        d: dict[str, Any] = {
            "id": self.local_id,
            "kind": self.kind.value,
            "name": self.name,
            "order_index": self.order_index,
            "geometry": self.geometry.to_dict(),
            "opacity": self.opacity,
        }
        if self.stored_id:
            d["stored_id"] = self.stored_id
        if not self.visible:
            d["visible"] = False
        if self.locked:
            d["locked"] = True
        if self.rotation:
            d["rotation"] = self.rotation
        d[self.kind.value] = self.payload.to_dict()
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "Layer":
        kind = LayerKind(d["kind"])
        payload = _PAYLOAD_TYPES[kind].from_dict(d.get(kind.value, {}))
        return cls(
            name=d["name"],
            geometry=Geometry.from_dict(d["geometry"]),
            payload=payload,
            order_index=d.get("order_index", 0),
            opacity=d.get("opacity", 1.0),
            visible=d.get("visible", True),
            locked=d.get("locked", False),
            rotation=d.get("rotation", 0.0),
            local_id=d.get("id") or new_local_id("layer"),
            stored_id=d.get("stored_id"),
        )

    def to_row(self, slide_id: str | None = None) -> dict:
        """Flatten into the wide ``layers`` row the backing store persists.

        Kind-specific columns that do not apply to this layer are None.
        """
        row: dict[str, Any] = {
            "slide_id": slide_id,
            "type": self.kind.value,
            "name": self.name,
            "visible": self.visible,
            "locked": self.locked,
            "z_index": self.order_index,
            "x": self.geometry.x,
            "y": self.geometry.y,
            "width": self.geometry.width,
            "height": self.geometry.height,
            "opacity": self.opacity,
            "rotation": self.rotation,
            "text_content": None,
            "font_family": None,
            "font_size": None,
            "color": None,
            "text_align": None,
            "line_height": None,
            "letter_spacing": None,
            "text_transform": None,
            "max_length": None,
            "image_src": None,
        }
        p = self.payload
        if isinstance(p, TextPayload):
            row.update({
                "text_content": p.text,
                "font_family": p.font_family,
                "font_size": p.font_size_pt,
                "color": p.color_hex,
                "text_align": p.align.value,
                "line_height": p.line_height,
                "letter_spacing": p.letter_spacing,
                "text_transform": p.text_transform.value,
                "max_length": p.max_length,
            })
        elif isinstance(p, ImagePayload):
            row["image_src"] = p.source_data_url
        else:
            row["color"] = p.color_hex
        return row


# ---------------------------------------------------------------------------
# Slide
# ---------------------------------------------------------------------------

@dataclass
class Slide:
    """One imported document: canvas size plus its stacked layers."""
    name: str
    width: int
    height: int
    layers: list[Layer] = field(default_factory=list)
    order_index: int = 0                 # Position within the template
    local_id: str = field(default_factory=lambda: new_local_id("slide"))
    stored_id: str | None = None

    @property
    def id(self) -> str:
        return self.stored_id or self.local_id

    def ordered_layers(self) -> list[Layer]:
        """Layers sorted bottom-to-top by ``order_index``."""
        return sorted(self.layers, key=lambda layer: layer.order_index)

    def render_order(self) -> list[Layer]:
        """Layers a renderer draws, in draw order (hidden layers skipped)."""
        return [layer for layer in self.ordered_layers() if layer.visible]

    def get_layer(self, name: str) -> Layer | None:
        """Look up the first layer with the given name."""
        for layer in self.layers:
            if layer.name == name:
                return layer
        return None

    def to_dict(self) -> dict:
        d: dict[str, Any] = {
            "id": self.local_id,
            "name": self.name,
            "order_index": self.order_index,
            "dimensions": {"width": self.width, "height": self.height},
        }
        if self.stored_id:
            d["stored_id"] = self.stored_id
        d["layers"] = [layer.to_dict() for layer in self.ordered_layers()]
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "Slide":
        dims = d.get("dimensions", {})
        return cls(
            name=d["name"],
            width=dims.get("width", 1080),
            height=dims.get("height", 1080),
            layers=[Layer.from_dict(layer) for layer in d.get("layers", [])],
            order_index=d.get("order_index", 0),
            local_id=d.get("id") or new_local_id("slide"),
            stored_id=d.get("stored_id"),
        )

    def to_row(self, template_id: str | None = None) -> dict:
        return {
            "template_id": template_id,
            "name": self.name,
            "width": self.width,
            "height": self.height,
            "order_index": self.order_index,
        }


# ---------------------------------------------------------------------------
# Template — top-level container
# ---------------------------------------------------------------------------

@dataclass
class Template:
    """An imported creative template: an ordered set of slides."""
    name: str
    slides: list[Slide] = field(default_factory=list)
    brand: str | None = None
    category: str | None = None
    published: bool = False
    local_id: str = field(default_factory=lambda: new_local_id("template"))
    stored_id: str | None = None

    @property
    def id(self) -> str:
        return self.stored_id or self.local_id

    def ordered_slides(self) -> list[Slide]:
        return sorted(self.slides, key=lambda slide: slide.order_index)

    def layer_count(self) -> int:
        return sum(len(s.layers) for s in self.slides)

    def to_dict(self) -> dict:
        d: dict[str, Any] = {"id": self.local_id, "name": self.name}
        if self.stored_id:
            d["stored_id"] = self.stored_id
        if self.brand:
            d["brand"] = self.brand
        if self.category:
            d["category"] = self.category
        d["published"] = self.published
        d["slides"] = [s.to_dict() for s in self.ordered_slides()]
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "Template":
        return cls(
            name=d["name"],
            slides=[Slide.from_dict(s) for s in d.get("slides", [])],
            brand=d.get("brand"),
            category=d.get("category"),
            published=d.get("published", False),
            local_id=d.get("id") or new_local_id("template"),
            stored_id=d.get("stored_id"),
        )

    def to_row(self) -> dict:
        return {
            "name": self.name,
            "brand": self.brand,
            "category": self.category,
            "is_published": self.published,
        }
