"""Leaf classifier — decides what kind of layer a decoded leaf becomes.

Classification precedence (first match wins):
    - text_run present → TextPayload  (even if the node also has pixels)
    - raster present   → ImagePayload (data URL; None if encoding fails)
    - otherwise        → ShapePayload (solid fill colour)

Every text attribute falls back through a fixed chain of sources and ends
at a documented default, so classification never fails:
    font size:   style size → sizes[0] → 16
    font family: font name → "DM Sans"
    colour:      style fill colour → colors[0] → black
    alignment:   first token containing "center"/"right" → else left
"""

import base64
import io
import logging

from template_flattener.config import ImportSettings
from template_flattener.decoder.nodes import DecodedNode, TextRun
from template_flattener.errors import EncodeFailure
from template_flattener.processor.normalize import color_to_hex
from template_flattener.schema.models import (
    ImagePayload,
    Payload,
    ShapePayload,
    TextAlign,
    TextPayload,
)

logger = logging.getLogger(__name__)

_MIME_TYPES = {
    "PNG": "image/png",
    "JPEG": "image/jpeg",
    "WEBP": "image/webp",
}


# ---------------------------------------------------------------------------
# Text attribute extraction
# ---------------------------------------------------------------------------

def _font_size(run: TextRun, settings: ImportSettings) -> float:
    if run.font_size:
        return float(run.font_size)
    if run.sizes:
        return float(run.sizes[0])
    return settings.font_size_pt


def _font_family(run: TextRun, settings: ImportSettings) -> str:
    return run.font_name or settings.font_family


def _text_color(run: TextRun, settings: ImportSettings) -> str:
    if run.fill_color is not None:
        return color_to_hex(run.fill_color)
    if run.colors:
        return color_to_hex(run.colors[0])
    return settings.color_hex


def parse_alignment(tokens: list[str] | None) -> TextAlign:
    """Map the first alignment token to a TextAlign.

    Substring match on the lower-cased token, so "justifyCenter" is CENTER
    and "justifyRight" is RIGHT. No token, or any other value, is LEFT.
    """
    if not tokens:
        return TextAlign.LEFT
    token = str(tokens[0]).lower()
    if "center" in token:
        return TextAlign.CENTER
    if "right" in token:
        return TextAlign.RIGHT
    return TextAlign.LEFT


def text_payload(run: TextRun, settings: ImportSettings | None = None) -> TextPayload:
    settings = settings or ImportSettings()
    return TextPayload(
        text=run.content or "",
        font_family=_font_family(run, settings),
        font_size_pt=_font_size(run, settings),
        color_hex=_text_color(run, settings),
        align=parse_alignment(run.alignment),
    )


# ---------------------------------------------------------------------------
# Raster encoding
# ---------------------------------------------------------------------------

def encode_raster(raster, image_format: str = "PNG") -> str:
    """Encode a raster handle as a base64 data URL.

    Accepts a PIL image, or any handle exposing ``topil()`` (psd-tools
    layers), which is rasterized first. Raises EncodeFailure when the
    handle yields no image or Pillow cannot write it.
    """
    image_format = image_format.upper()
    mime = _MIME_TYPES.get(image_format)
    if mime is None:
        raise EncodeFailure(f"Unsupported image format: {image_format}")
    try:
        image = raster.topil() if hasattr(raster, "topil") else raster
        if image is None:
            raise EncodeFailure("Raster produced no image")
        if image_format == "JPEG" and image.mode not in ("RGB", "L"):
            image = image.convert("RGB")
        buf = io.BytesIO()
        image.save(buf, format=image_format)
    except EncodeFailure:
        raise
    except Exception as exc:
        raise EncodeFailure(f"Could not encode raster: {exc}") from exc
    encoded = base64.b64encode(buf.getvalue()).decode("ascii")
    return f"data:{mime};base64,{encoded}"


def image_payload(node: DecodedNode, settings: ImportSettings | None = None) -> ImagePayload:
    """Build an ImagePayload, leaving the source empty if encoding fails."""
    settings = settings or ImportSettings()
    try:
        return ImagePayload(source_data_url=encode_raster(node.raster, settings.image_format))
    except EncodeFailure as exc:
        logger.warning("Layer %r kept without image data: %s", node.name, exc)
        return ImagePayload(source_data_url=None)


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

def classify_leaf(node: DecodedNode, settings: ImportSettings | None = None) -> Payload:
    """Return the kind-specific payload for a non-group node."""
    settings = settings or ImportSettings()
    if node.text_run is not None:
        payload = text_payload(node.text_run, settings)
    elif node.raster is not None:
        payload = image_payload(node, settings)
    else:
        payload = ShapePayload(color_hex=color_to_hex(node.fill_color) or settings.color_hex)
    logger.debug("Classified %r as %s", node.name, payload.kind.value)
    return payload
