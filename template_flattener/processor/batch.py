"""Batch import coordinator — drives decode → flatten → assemble → commit.

Two entry points share one per-document pipeline:

- ``import_template``: N documents become one Template. Failed documents
  are logged and skipped; surviving slides get contiguous order indices in
  input order. If every document fails, the template container is deleted
  from the store and ImportFailure is raised.
- ``append_slide``: one document becomes one new slide after the current
  last slide of an existing template. Any failure raises ImportFailure.

Documents are processed strictly one after another, in input order, so
order indices never depend on completion timing.

Usage::

    importer = BatchImporter(store)
    result = importer.import_template(["hero.psd", "story.psd"], brand="acme")
    print(result.summary())
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Union

from template_flattener.config import ImportSettings
from template_flattener.decoder.psd_decoder import Decoder, PsdDecoder
from template_flattener.errors import DecodeFailure, FlattenError, ImportFailure
from template_flattener.processor.assembler import (
    base_name,
    build_template,
    flatten_document,
    slide_from_layers,
)
from template_flattener.schema.models import Slide, Template
from template_flattener.store.contracts import TemplateStore

logger = logging.getLogger(__name__)

# A document given as a path, or as (name, bytes) already read by the caller
Source = Union[str, Path, tuple[str, bytes]]


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

class DocumentState(Enum):
    """Lifecycle of one document within an import."""
    PENDING = "pending"
    DECODED = "decoded"
    FLATTENED = "flattened"
    ASSEMBLED = "assembled"
    COMMITTED = "committed"
    FAILED = "failed"


@dataclass
class DocumentOutcome:
    """What happened to a single input document."""
    source: str
    state: DocumentState = DocumentState.PENDING
    order_index: int | None = None
    slide: Slide | None = None
    error: str | None = None
    failed_after: DocumentState | None = None   # Last state reached before failing

    @property
    def committed(self) -> bool:
        return self.state == DocumentState.COMMITTED

    def __str__(self) -> str:
        if self.committed:
            return f"{self.source}: committed as slide {self.order_index}"
        if self.state == DocumentState.FAILED:
            return f"{self.source}: failed after {self.failed_after.value} ({self.error})"
        return f"{self.source}: {self.state.value}"


@dataclass
class ImportResult:
    """Aggregate result of a full-template import."""
    template: Template
    outcomes: list[DocumentOutcome] = field(default_factory=list)

    @property
    def committed(self) -> list[DocumentOutcome]:
        return [o for o in self.outcomes if o.committed]

    @property
    def failed(self) -> list[DocumentOutcome]:
        return [o for o in self.outcomes if o.state == DocumentState.FAILED]

    @property
    def partial(self) -> bool:
        return bool(self.failed)

    def summary(self) -> str:
        return (f"Imported '{self.template.name}': {len(self.committed)} slide(s), "
                f"{len(self.failed)} skipped, {self.template.layer_count()} layer(s)")


# ---------------------------------------------------------------------------
# Source helpers
# ---------------------------------------------------------------------------

def source_name(source: Source) -> str:
    if isinstance(source, tuple):
        return source[0]
    return Path(source).name


def read_source(source: Source) -> tuple[str, bytes]:
    """Return ``(name, bytes)`` for a source, reading paths from disk."""
    if isinstance(source, tuple):
        name, data = source
        return name, data
    path = Path(source)
    try:
        return path.name, path.read_bytes()
    except OSError as exc:
        raise DecodeFailure(path.name, str(exc)) from exc


# ---------------------------------------------------------------------------
# Importer
# ---------------------------------------------------------------------------

class BatchImporter:
    """Imports layered documents into templates held by a TemplateStore."""

    def __init__(self, store: TemplateStore, decoder: Decoder | None = None,
                 settings: ImportSettings | None = None):
        self.store = store
        self.decoder = decoder or PsdDecoder()
        self.settings = settings or ImportSettings()

    def _process(self, source: Source, template_id: str, order_index: int) -> DocumentOutcome:
        """Run one document through the pipeline, recording how far it got."""
        outcome = DocumentOutcome(source=source_name(source), order_index=order_index)
        try:
            name, data = read_source(source)
            document = self.decoder.decode(data, name)
            outcome.state = DocumentState.DECODED

            layers = flatten_document(document, self.settings)
            outcome.state = DocumentState.FLATTENED

            slide = slide_from_layers(document, layers, order_index, settings=self.settings)
            outcome.state = DocumentState.ASSEMBLED

            self.store.add_slide(template_id, slide)
            outcome.slide = slide
            outcome.state = DocumentState.COMMITTED
        except Exception as exc:
            outcome.failed_after = outcome.state
            outcome.state = DocumentState.FAILED
            outcome.order_index = None
            outcome.error = str(exc) if isinstance(exc, FlattenError) \
                else f"{type(exc).__name__}: {exc}"
            logger.warning("Skipping %s: %s", outcome.source, exc)
        return outcome

    def _rollback(self, template: Template, template_id: str) -> None:
        logger.info("Rolling back template %r", template.name)
        self.store.delete_template(template_id)
        template.stored_id = None

    def import_template(self, sources: list[Source], name: str | None = None,
                        brand: str | None = None,
                        category: str | None = None) -> ImportResult:
        """Import every source as one slide of a new template.

        The template is named after the first source unless ``name`` is
        given. Raises ImportFailure (after removing the template from the
        store) when no document could be imported.
        """
        if not sources:
            raise ValueError("At least one document is required")

        template = build_template(
            name or base_name(source_name(sources[0])),
            brand=brand,
            category=category,
            published=self.settings.publish,
        )
        template_id = self.store.create_template(template)
        logger.info("Importing %d document(s) into template %r", len(sources), template.name)

        outcomes = []
        try:
            for source in sources:
                outcome = self._process(source, template_id, order_index=len(template.slides))
                if outcome.committed:
                    template.slides.append(outcome.slide)
                outcomes.append(outcome)
        except BaseException:
            self._rollback(template, template_id)
            raise

        if not template.slides:
            self._rollback(template, template_id)
            raise ImportFailure(
                f"None of {len(sources)} document(s) could be imported", outcomes)

        result = ImportResult(template=template, outcomes=outcomes)
        logger.info(result.summary())
        return result

    def append_slide(self, template_id: str, source: Source) -> DocumentOutcome:
        """Add one document as a new last slide of an existing template."""
        if self.store.get_template(template_id) is None:
            raise ImportFailure(f"Template {template_id} does not exist")
        order_index = self.store.max_slide_order(template_id) + 1
        outcome = self._process(source, template_id, order_index)
        if not outcome.committed:
            raise ImportFailure(f"Could not append {outcome.source}: {outcome.error}",
                                [outcome])
        logger.info("Appended %s to template %s as slide %d",
                    outcome.source, template_id, order_index)
        return outcome


def import_template(sources: list[Source], store: TemplateStore,
                    settings: ImportSettings | None = None, **kwargs) -> ImportResult:
    """Convenience function: import sources with the psd-tools decoder."""
    return BatchImporter(store, settings=settings).import_template(sources, **kwargs)
