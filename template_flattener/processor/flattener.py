"""Tree flattener — turns a decoded node tree into a flat, ordered layer list.

Flattening happens in two separate steps:

1. ``flatten_nodes`` walks the tree depth-first in source (pre-order)
   order. Groups are recursed into and never emitted; every leaf becomes a
   Layer carrying a provisional index. The running index is an explicit
   accumulator: passed in, returned out.
2. ``rebase_order`` reverses that sequence and re-assigns ``order_index``
   as each layer's position in the reversed list, discarding the
   provisional values.

The net stacking order (0 = drawn first) is therefore the reverse of the
source traversal. ``flatten_tree`` composes the two steps.

Coordinates are absolute: a group never offsets its children.
"""

import logging
from dataclasses import replace

from template_flattener.config import ImportSettings
from template_flattener.decoder.nodes import DecodedNode
from template_flattener.processor.classifier import classify_leaf
from template_flattener.processor.normalize import normalize_box, normalize_opacity
from template_flattener.schema.models import Layer

logger = logging.getLogger(__name__)


def build_layer(node: DecodedNode, index: int,
                settings: ImportSettings | None = None) -> Layer:
    """Classify a leaf and wrap it in a Layer with the given index."""
    settings = settings or ImportSettings()
    return Layer(
        name=node.name or settings.layer_name,
        geometry=normalize_box(node.left, node.top, node.right, node.bottom),
        payload=classify_leaf(node, settings),
        order_index=index,
        opacity=normalize_opacity(node.opacity),
    )


def flatten_nodes(nodes: list[DecodedNode], settings: ImportSettings | None = None,
                  start: int = 0) -> tuple[list[Layer], int]:
    """Flatten sibling nodes in pre-order.

    Returns ``(layers, next_index)``: the leaves as Layers with provisional
    indices ``start, start + 1, ...`` in traversal order, and the index the
    next leaf would receive.
    """
    settings = settings or ImportSettings()
    layers: list[Layer] = []
    index = start
    for node in nodes:
        if node.is_group:
            child_layers, index = flatten_nodes(node.children, settings, index)
            layers.extend(child_layers)
            continue
        layers.append(build_layer(node, index, settings))
        index += 1
    return layers, index


def rebase_order(layers: list[Layer]) -> list[Layer]:
    """Reverse a flattened sequence and index it 0..n-1 in the new order.

    Returns new Layer objects; the input list and its layers are left
    untouched.
    """
    return [replace(layer, order_index=position)
            for position, layer in enumerate(reversed(layers))]


def flatten_tree(nodes: list[DecodedNode],
                 settings: ImportSettings | None = None) -> list[Layer]:
    """Flatten a node tree into bottom-to-top stacking order."""
    layers, count = flatten_nodes(nodes, settings)
    logger.debug("Flattened %d leaf layer(s)", count)
    return rebase_order(layers)
