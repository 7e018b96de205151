"""Exception taxonomy for document import.

Per-leaf problems never raise: they degrade to documented defaults.
``EncodeFailure`` is caught inside the classifier, ``DecodeFailure`` is
recovered per document by the batch importer, and only ``ImportFailure``
reaches callers of the batch API.
"""


class FlattenError(Exception):
    """Base class for all import errors."""


class DecodeFailure(FlattenError):
    """The document decoder could not parse the input."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Failed to decode '{source}': {reason}")


class EncodeFailure(FlattenError):
    """A raster could not be converted to an image data URL."""


class AssemblyFailure(FlattenError):
    """An internal invariant was violated while building a slide."""


class ImportFailure(FlattenError):
    """A batch import produced no slides, or a single-slide append failed."""

    def __init__(self, message: str, outcomes: list | None = None):
        self.outcomes = outcomes or []
        super().__init__(message)
