"""Persistence boundary — the TemplateStore protocol and an in-memory store."""

from .contracts import TemplateStore
from .memory import MemoryTemplateStore, layer_from_row

__all__ = ["MemoryTemplateStore", "TemplateStore", "layer_from_row"]
