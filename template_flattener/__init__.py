"""Layered-document flattening engine for the creative template editor."""

__version__ = "0.1.0"
