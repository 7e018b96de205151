"""Decoder boundary — the decoded document tree and the psd-tools adapter."""

from .nodes import RGB, DecodedDocument, DecodedNode, TextRun
from .psd_decoder import Decoder, PsdDecoder, decode_file, document_from_psd, node_from_layer

__all__ = [
    "RGB",
    "DecodedDocument",
    "DecodedNode",
    "Decoder",
    "PsdDecoder",
    "TextRun",
    "decode_file",
    "document_from_psd",
    "node_from_layer",
]
