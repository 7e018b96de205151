"""Tests for the batch import coordinator."""

from unittest.mock import patch

import pytest

from template_flattener.config import ImportSettings
from template_flattener.decoder.nodes import DecodedDocument
from template_flattener.errors import DecodeFailure, ImportFailure
from template_flattener.processor.batch import (
    BatchImporter,
    DocumentState,
    read_source,
    source_name,
)
from template_flattener.schema.models import Template
from template_flattener.store.memory import MemoryTemplateStore


class FakeDecoder:
    """Decodes documents from a name → dict registry; b"corrupt" fails."""

    def __init__(self, documents=None):
        self.documents = documents or {}
        self.calls = []

    def decode(self, data, name):
        self.calls.append(name)
        if data == b"corrupt":
            raise DecodeFailure(name, "not a PSD file")
        if data == b"truncated":
            raise ValueError("unexpected end of stream")
        if data == b"interrupt":
            raise KeyboardInterrupt
        spec = self.documents.get(name, {"children": [{"name": "Layer", "right": 5, "bottom": 5}]})
        return DecodedDocument.from_dict({"name": name, **spec})


def _doc(*names):
    return {"width": 800, "height": 600,
            "children": [{"name": n, "right": 10, "bottom": 10} for n in names]}


@pytest.fixture
def store():
    return MemoryTemplateStore()


@pytest.fixture
def decoder():
    return FakeDecoder({
        "one.psd": _doc("a", "b"),
        "two.psd": _doc("c"),
        "three.psd": _doc("d", "e", "f"),
    })


@pytest.fixture
def importer(store, decoder):
    return BatchImporter(store, decoder=decoder)


def ok(name):
    return (name, b"ok")


def bad(name):
    return (name, b"corrupt")


def truncated(name):
    return (name, b"truncated")


# ---------------------------------------------------------------------------
# Full-template import
# ---------------------------------------------------------------------------

class TestImportTemplate:
    def test_all_succeed(self, importer, store):
        result = importer.import_template([ok("one.psd"), ok("two.psd"), ok("three.psd")])
        template = result.template
        assert [s.order_index for s in template.slides] == [0, 1, 2]
        assert [s.name for s in template.slides] == ["one", "two", "three"]
        assert not result.partial
        assert template.stored_id in store.templates
        assert len(store.slides) == 3
        assert len(store.layers) == 6

    def test_name_defaults_to_first_document(self, importer):
        result = importer.import_template([ok("one.psd"), ok("two.psd")])
        assert result.template.name == "one"

    def test_explicit_name_and_tags(self, importer, store):
        result = importer.import_template([ok("one.psd")], name="Launch",
                                          brand="acme", category="social")
        row = store.templates[result.template.stored_id]
        assert row["name"] == "Launch"
        assert row["brand"] == "acme"
        assert row["category"] == "social"
        assert row["is_published"] is False

    def test_publish_setting(self, store, decoder):
        importer = BatchImporter(store, decoder=decoder,
                                 settings=ImportSettings(publish=True))
        result = importer.import_template([ok("one.psd")])
        assert result.template.published is True

    def test_partial_failure_rebases_order(self, importer, store):
        result = importer.import_template([ok("one.psd"), bad("two.psd"), ok("three.psd")])
        slides = result.template.slides
        assert len(slides) == 2
        assert [s.order_index for s in slides] == [0, 1]
        assert [s.name for s in slides] == ["one", "three"]
        assert sorted(r["order_index"] for r in store.slides.values()) == [0, 1]

    def test_partial_failure_outcomes(self, importer):
        result = importer.import_template([ok("one.psd"), bad("two.psd"), ok("three.psd")])
        assert result.partial
        (failed,) = result.failed
        assert failed.source == "two.psd"
        assert failed.state == DocumentState.FAILED
        assert failed.failed_after == DocumentState.PENDING
        assert failed.order_index is None
        assert "not a PSD file" in failed.error
        assert [o.state for o in result.committed] == [DocumentState.COMMITTED] * 2

    def test_failure_is_logged(self, importer, caplog):
        importer.import_template([ok("one.psd"), bad("two.psd")])
        assert "Skipping two.psd" in caplog.text

    def test_total_failure_rolls_back(self, importer, store):
        with pytest.raises(ImportFailure) as excinfo:
            importer.import_template([bad("one.psd"), bad("two.psd"), bad("three.psd")])
        assert store.templates == {}
        assert store.slides == {}
        assert store.layers == {}
        assert len(excinfo.value.outcomes) == 3

    def test_unexpected_decoder_error_is_skipped(self, importer, store):
        result = importer.import_template([ok("one.psd"), truncated("two.psd"), ok("three.psd")])
        assert [s.name for s in result.template.slides] == ["one", "three"]
        assert [s.order_index for s in result.template.slides] == [0, 1]
        (failed,) = result.failed
        assert failed.error == "ValueError: unexpected end of stream"
        assert failed.failed_after == DocumentState.PENDING
        assert len(store.slides) == 2

    def test_unexpected_errors_only_rolls_back(self, importer, store):
        with pytest.raises(ImportFailure):
            importer.import_template([truncated("one.psd")])
        assert store.templates == {}
        assert store.slides == {}

    def test_interrupted_batch_rolls_back(self, importer, store):
        with pytest.raises(KeyboardInterrupt):
            importer.import_template([ok("one.psd"), ("two.psd", b"interrupt")])
        assert store.templates == {}
        assert store.slides == {}
        assert store.layers == {}

    def test_documents_processed_in_input_order(self, importer, decoder):
        importer.import_template([ok("three.psd"), ok("one.psd"), ok("two.psd")])
        assert decoder.calls == ["three.psd", "one.psd", "two.psd"]

    def test_empty_batch_rejected(self, importer):
        with pytest.raises(ValueError):
            importer.import_template([])

    def test_failed_store_commit_skipped(self, importer, store):
        original = store.add_slide

        def flaky(template_id, slide):
            if slide.name == "two":
                raise OSError("connection reset")
            return original(template_id, slide)

        with patch.object(store, "add_slide", side_effect=flaky):
            result = importer.import_template([ok("one.psd"), ok("two.psd"), ok("three.psd")])
        assert [s.name for s in result.template.slides] == ["one", "three"]
        assert [s.order_index for s in result.template.slides] == [0, 1]
        assert result.failed[0].failed_after == DocumentState.ASSEMBLED

    def test_missing_path_is_skipped(self, importer, tmp_path):
        result = importer.import_template([ok("one.psd"), tmp_path / "missing.psd"])
        assert len(result.template.slides) == 1
        assert result.failed[0].source == "missing.psd"

    def test_summary(self, importer):
        result = importer.import_template([ok("one.psd"), bad("two.psd")])
        assert result.summary() == "Imported 'one': 1 slide(s), 1 skipped, 2 layer(s)"

    def test_layers_get_store_ids(self, importer, store):
        result = importer.import_template([ok("one.psd")])
        for layer in result.template.slides[0].layers:
            assert layer.stored_id in store.layers
            assert layer.id == layer.stored_id
            assert layer.local_id.startswith("layer-")


# ---------------------------------------------------------------------------
# Single-slide append
# ---------------------------------------------------------------------------

class TestAppendSlide:
    def test_appends_after_last(self, importer, store):
        result = importer.import_template([ok("one.psd"), ok("two.psd")])
        outcome = importer.append_slide(result.template.stored_id, ok("three.psd"))
        assert outcome.committed
        assert outcome.order_index == 2
        assert outcome.slide.order_index == 2
        assert store.max_slide_order(result.template.stored_id) == 2

    def test_uses_max_order_not_count(self, importer, store):
        result = importer.import_template([ok("one.psd")])
        template_id = result.template.stored_id
        # Simulate a gap left by a slide deleted downstream
        slide_id = result.template.slides[0].stored_id
        store.slides[slide_id]["order_index"] = 5
        outcome = importer.append_slide(template_id, ok("two.psd"))
        assert outcome.order_index == 6

    def test_empty_template_starts_at_zero(self, importer, store):
        template_id = store.create_template(Template(name="Empty"))
        assert importer.append_slide(template_id, ok("one.psd")).order_index == 0

    def test_failure_raises_and_commits_nothing(self, importer, store):
        result = importer.import_template([ok("one.psd")])
        slides_before = dict(store.slides)
        with pytest.raises(ImportFailure, match="two.psd"):
            importer.append_slide(result.template.stored_id, bad("two.psd"))
        assert store.slides == slides_before

    def test_unknown_template(self, importer):
        with pytest.raises(ImportFailure, match="does not exist"):
            importer.append_slide("nope", ok("one.psd"))

    def test_same_engine_as_import(self, importer, store):
        imported = importer.import_template([ok("three.psd")]).template.slides[0]
        template_id = store.create_template(Template(name="t"))
        appended = importer.append_slide(template_id, ok("three.psd")).slide
        assert [(l.name, l.order_index) for l in imported.layers] == \
            [(l.name, l.order_index) for l in appended.layers]


# ---------------------------------------------------------------------------
# Source helpers
# ---------------------------------------------------------------------------

class TestSources:
    def test_tuple_source(self):
        assert source_name(("a.psd", b"x")) == "a.psd"
        assert read_source(("a.psd", b"x")) == ("a.psd", b"x")

    def test_path_source(self, tmp_path):
        path = tmp_path / "doc.psd"
        path.write_bytes(b"data")
        assert source_name(str(path)) == "doc.psd"
        assert read_source(path) == ("doc.psd", b"data")

    def test_missing_path(self, tmp_path):
        with pytest.raises(DecodeFailure):
            read_source(tmp_path / "gone.psd")
