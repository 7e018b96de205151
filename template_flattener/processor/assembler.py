"""Document assembler — wraps one decoded document into a Slide.

The assembler is the single flattening entry point shared by full-template
import and incremental slide append; callers only differ in the slide
order index they pass.
"""

import logging
import re

from template_flattener.config import ImportSettings
from template_flattener.decoder.nodes import DecodedDocument
from template_flattener.errors import AssemblyFailure
from template_flattener.processor.flattener import flatten_tree
from template_flattener.schema.models import Layer, Slide, Template

logger = logging.getLogger(__name__)

_EXTENSION = re.compile(r"\.(psd|psb)$", re.IGNORECASE)


def base_name(source: str) -> str:
    """Strip directories and a .psd/.psb extension from a document name.

    Examples:
        "banners/Hero.psd" -> "Hero"
        "story.PSB"        -> "story"
        "untitled"         -> "untitled"
    """
    name = re.split(r"[\\/]", source or "")[-1]
    return _EXTENSION.sub("", name)


def _check_order(slide: Slide) -> None:
    indices = sorted(layer.order_index for layer in slide.layers)
    if indices != list(range(len(indices))):
        raise AssemblyFailure(
            f"Slide '{slide.name}' has non-contiguous layer order {indices}")


def flatten_document(document: DecodedDocument,
                     settings: ImportSettings | None = None) -> list[Layer]:
    """Flatten a document's root children into stacking order."""
    try:
        return flatten_tree(document.children, settings)
    except RecursionError as exc:
        raise AssemblyFailure(f"Layer tree of '{document.name}' is too deep") from exc


def slide_from_layers(document: DecodedDocument, layers: list[Layer], order_index: int,
                      name: str | None = None,
                      settings: ImportSettings | None = None) -> Slide:
    """Wrap already-flattened layers into a Slide sized like the document."""
    if order_index < 0:
        raise ValueError(f"Slide order index must be >= 0, got {order_index}")
    settings = settings or ImportSettings()
    slide = Slide(
        name=name or base_name(document.name),
        width=int(document.width or settings.canvas_width),
        height=int(document.height or settings.canvas_height),
        layers=layers,
        order_index=order_index,
    )
    _check_order(slide)
    logger.info("Assembled slide %r (%dx%d, %d layers, order %d)",
                slide.name, slide.width, slide.height, len(slide.layers), order_index)
    return slide


def assemble_slide(document: DecodedDocument, order_index: int, name: str | None = None,
                   settings: ImportSettings | None = None) -> Slide:
    """Build a Slide from a decoded document.

    Canvas size falls back to the settings' default (1080x1080) when the
    decoder reports none; the slide name falls back to the document's base
    name.
    """
    if order_index < 0:
        raise ValueError(f"Slide order index must be >= 0, got {order_index}")
    layers = flatten_document(document, settings)
    return slide_from_layers(document, layers, order_index, name, settings)


def build_template(name: str, slides: list[Slide] | None = None, brand: str | None = None,
                   category: str | None = None, published: bool = False) -> Template:
    """Create a Template container holding the given slides."""
    return Template(
        name=name,
        slides=list(slides or []),
        brand=brand,
        category=category,
        published=published,
    )
