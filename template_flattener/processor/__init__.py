"""Flattening engine: normalizers, leaf classifier, tree flattener, assembler, batch import."""

from .assembler import assemble_slide, base_name, build_template, flatten_document, slide_from_layers
from .batch import (
    BatchImporter,
    DocumentOutcome,
    DocumentState,
    ImportResult,
    import_template,
)
from .classifier import classify_leaf, encode_raster, parse_alignment
from .flattener import build_layer, flatten_nodes, flatten_tree, rebase_order
from .normalize import normalize_box, normalize_opacity, rgb_to_hex, round_half_up
