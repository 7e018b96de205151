"""PSD decoder — builds a DecodedDocument from Photoshop files with psd-tools.

Walks the psd-tools layer tree in the library's native order (bottom-most
sibling first) and records, per layer, the signals the flattener consumes:

- Groups      → nodes with children (never classified themselves)
- Type layers → TextRun (text, font size/colour from the engine data,
                font name from the resource FontSet, paragraph justification)
- Pixel data  → raster handle (the psd-tools layer itself; rasterized lazily
                via ``topil()`` when the image is encoded)
- Solid fills → fill_color on shape/fill layers

Opacity is forwarded raw (psd-tools reports 0-255).
"""

import io
import logging
from pathlib import Path
from typing import Any, Protocol

from psd_tools import PSDImage
from psd_tools.constants import Tag
from psd_tools.terminology import Key

from template_flattener.decoder.nodes import RGB, DecodedDocument, DecodedNode, TextRun
from template_flattener.errors import DecodeFailure

logger = logging.getLogger(__name__)

# Photoshop ParagraphSheet Justification codes
_JUSTIFICATION = {
    0: "left",
    1: "right",
    2: "center",
    3: "justifyLeft",
    4: "justifyRight",
    5: "justifyCenter",
    6: "justifyAll",
}

# Layer kinds whose pixels are the content (rasterized to an image layer)
_RASTER_KINDS = {"pixel", "smartobject", "shape"}

# Layer kinds that may carry a solid colour fill
_FILL_KINDS = {"shape", "solidcolorfill"}


class Decoder(Protocol):
    """Anything that can turn document bytes into a DecodedDocument."""

    def decode(self, data: bytes, name: str) -> DecodedDocument:
        ...


# ---------------------------------------------------------------------------
# Engine data helpers
# ---------------------------------------------------------------------------

def _scalar(value: Any) -> Any:
    """Unwrap a psd-tools engine data element to its Python value."""
    return getattr(value, "value", value)


def _number(value: Any) -> float | None:
    value = _scalar(value)
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _style_runs(engine: dict) -> list[dict]:
    """Return the StyleSheetData dict of every style run."""
    runs = engine.get("StyleRun", {}).get("RunArray", [])
    return [r.get("StyleSheet", {}).get("StyleSheetData", {}) for r in runs]


def _paragraph_runs(engine: dict) -> list[dict]:
    runs = engine.get("ParagraphRun", {}).get("RunArray", [])
    return [r.get("ParagraphSheet", {}).get("Properties", {}) for r in runs]


def _argb_to_rgb(color: Any) -> RGB | None:
    """Convert an engine FillColor ({"Values": [a, r, g, b]} in 0-1) to RGB."""
    if not color:
        return None
    values = color.get("Values") if hasattr(color, "get") else None
    if not values or len(values) < 4:
        return None
    _, r, g, b = (_number(v) or 0.0 for v in list(values)[:4])
    return RGB(r=r * 255, g=g * 255, b=b * 255)


def _font_names(layer: Any) -> list[str]:
    try:
        font_set = layer.resource_dict["FontSet"]
    except (AttributeError, KeyError, TypeError):
        return []
    return [str(_scalar(f.get("Name", ""))).strip("'\"") for f in font_set]


def _text_run(layer: Any) -> TextRun:
    """Extract a TextRun from a psd-tools type layer."""
    try:
        engine = layer.engine_dict or {}
    except (AttributeError, KeyError):
        engine = {}
    styles = _style_runs(engine)
    fonts = _font_names(layer)

    sizes = [s for s in (_number(st.get("FontSize")) for st in styles) if s is not None]
    colors = [c for c in (_argb_to_rgb(st.get("FillColor")) for st in styles) if c]

    font_name = None
    if styles and fonts:
        font_index = _scalar(styles[0].get("Font"))
        if isinstance(font_index, int) and 0 <= font_index < len(fonts):
            font_name = fonts[font_index]

    alignment = []
    for props in _paragraph_runs(engine):
        code = _scalar(props.get("Justification"))
        if code in _JUSTIFICATION:
            alignment.append(_JUSTIFICATION[code])

    first = styles[0] if styles else {}
    return TextRun(
        content=str(layer.text or ""),
        font_name=font_name,
        font_size=_number(first.get("FontSize")),
        sizes=sizes,
        fill_color=_argb_to_rgb(first.get("FillColor")),
        colors=colors,
        alignment=alignment,
    )


def _solid_fill(layer: Any) -> RGB | None:
    """Read the solid fill colour of a shape or fill layer, if it has one."""
    try:
        data = layer.tagged_blocks.get_data(Tag.SOLID_COLOR_SHEET_SETTING)
        color = data[Key.Color]
        return RGB(r=float(color[Key.Red]), g=float(color[Key.Green]),
                   b=float(color[Key.Blue]))
    except (AttributeError, KeyError, TypeError, ValueError):
        return None


# ---------------------------------------------------------------------------
# Tree conversion
# ---------------------------------------------------------------------------

def node_from_layer(layer: Any) -> DecodedNode:
    """Convert one psd-tools layer (and its descendants) to a DecodedNode."""
    left, top, right, bottom = layer.bbox
    node = DecodedNode(
        name=layer.name or "",
        left=left,
        top=top,
        right=right,
        bottom=bottom,
        opacity=layer.opacity,
    )
    if layer.is_group():
        node.children = [node_from_layer(child) for child in layer]
        return node

    kind = layer.kind
    if kind == "type":
        node.text_run = _text_run(layer)
    elif kind in _RASTER_KINDS and layer.has_pixels():
        node.raster = layer
    if kind in _FILL_KINDS:
        node.fill_color = _solid_fill(layer)
    logger.debug("Decoded layer %r (kind=%s)", node.name, kind)
    return node


def document_from_psd(psd: Any, name: str) -> DecodedDocument:
    """Convert an opened PSDImage into a DecodedDocument."""
    return DecodedDocument(
        name=name,
        children=[node_from_layer(layer) for layer in psd],
        width=psd.width or None,
        height=psd.height or None,
    )


class PsdDecoder:
    """Decoder backed by psd-tools."""

    def decode(self, data: bytes, name: str) -> DecodedDocument:
        try:
            psd = PSDImage.open(io.BytesIO(data))
            return document_from_psd(psd, name)
        except Exception as exc:
            raise DecodeFailure(name, str(exc) or type(exc).__name__) from exc


def decode_file(path: str | Path, decoder: Decoder | None = None) -> DecodedDocument:
    """Read and decode a document from disk, named after the file."""
    path = Path(path)
    decoder = decoder or PsdDecoder()
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise DecodeFailure(path.name, str(exc)) from exc
    return decoder.decode(data, path.name)
