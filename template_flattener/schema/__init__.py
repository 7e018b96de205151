"""Template schema package — canonical models for imported templates.

Provides the contract between the flattening engine, the persistence
collaborator, and renderers:

- models.py: Core dataclasses (Template, Slide, Layer, payloads)
- loader.py: YAML serialization/deserialization
"""

from .loader import load_template, save_template
from .models import (
    Geometry,
    ImagePayload,
    Layer,
    LayerKind,
    Payload,
    ShapePayload,
    Slide,
    Template,
    TextAlign,
    TextPayload,
    TextTransform,
)

__all__ = [
    # Models
    "Geometry",
    "ImagePayload",
    "Layer",
    "LayerKind",
    "Payload",
    "ShapePayload",
    "Slide",
    "Template",
    "TextAlign",
    "TextPayload",
    "TextTransform",
    # Loader
    "load_template",
    "save_template",
]
