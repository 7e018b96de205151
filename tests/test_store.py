"""Tests for the in-memory template store."""

import pytest

from template_flattener.schema.models import (
    Geometry,
    ImagePayload,
    Layer,
    ShapePayload,
    Slide,
    Template,
    TextAlign,
    TextPayload,
)
from template_flattener.store.memory import MemoryTemplateStore, layer_from_row


def _slide(name, order_index=0):
    return Slide(name=name, width=100, height=100, order_index=order_index, layers=[
        Layer(name="bg", geometry=Geometry(0, 0, 100, 100), payload=ShapePayload("#112233")),
        Layer(name="copy", geometry=Geometry(5, 5, 50, 10), order_index=1,
              payload=TextPayload(text="Hello", align=TextAlign.RIGHT)),
    ])


@pytest.fixture
def store():
    return MemoryTemplateStore()


class TestMemoryStore:
    def test_create_assigns_permanent_id(self, store):
        template = Template(name="T")
        template_id = store.create_template(template)
        assert template.stored_id == template_id
        assert template.id == template_id
        assert template.local_id != template_id

    def test_add_slide_assigns_ids(self, store):
        template_id = store.create_template(Template(name="T"))
        slide = _slide("one")
        slide_id = store.add_slide(template_id, slide)
        assert slide.stored_id == slide_id
        assert all(layer.stored_id in store.layers for layer in slide.layers)
        assert all(store.layers[l.stored_id]["slide_id"] == slide_id for l in slide.layers)

    def test_add_slide_unknown_template(self, store):
        slide = _slide("one")
        with pytest.raises(KeyError):
            store.add_slide("missing", slide)
        assert slide.stored_id is None
        assert store.slides == {}

    def test_max_slide_order(self, store):
        template_id = store.create_template(Template(name="T"))
        assert store.max_slide_order(template_id) == -1
        store.add_slide(template_id, _slide("one", 0))
        store.add_slide(template_id, _slide("two", 3))
        assert store.max_slide_order(template_id) == 3

    def test_delete_cascades(self, store):
        keep_id = store.create_template(Template(name="Keep"))
        store.add_slide(keep_id, _slide("kept"))
        drop_id = store.create_template(Template(name="Drop"))
        store.add_slide(drop_id, _slide("dropped"))
        store.delete_template(drop_id)
        assert list(store.templates) == [keep_id]
        assert len(store.slides) == 1
        assert len(store.layers) == 2

    def test_get_template_rebuilds(self, store):
        template_id = store.create_template(Template(name="T", brand="acme"))
        store.add_slide(template_id, _slide("two", 1))
        store.add_slide(template_id, _slide("one", 0))
        template = store.get_template(template_id)
        assert template.brand == "acme"
        assert [s.name for s in template.slides] == ["one", "two"]
        layers = template.slides[0].layers
        assert [l.name for l in layers] == ["bg", "copy"]
        assert layers[1].payload.align == TextAlign.RIGHT
        assert layers[0].payload.color_hex == "#112233"

    def test_get_template_missing(self, store):
        assert store.get_template("nope") is None

    def test_put_template_keeps_ids(self, store):
        template = Template(name="T", slides=[_slide("one")], stored_id="tpl-1")
        template.slides[0].stored_id = "slide-1"
        assert store.put_template(template) == "tpl-1"
        assert store.slides["slide-1"]["template_id"] == "tpl-1"
        assert store.max_slide_order("tpl-1") == 0
        assert all(layer.stored_id for layer in template.slides[0].layers)


class TestLayerFromRow:
    def test_image_row(self):
        layer = Layer(name="p", geometry=Geometry(0, 0, 1, 1),
                      payload=ImagePayload("data:image/png;base64,AA"), opacity=0.25)
        restored = layer_from_row(layer.to_row("s"), "layer-id")
        assert restored.payload == layer.payload
        assert restored.opacity == 0.25
        assert restored.stored_id == "layer-id"

    def test_text_row(self):
        layer = Layer(name="t", geometry=Geometry(0, 0, 1, 1),
                      payload=TextPayload(text="x", font_family="Inter", font_size_pt=22.0))
        assert layer_from_row(layer.to_row()).payload == layer.payload
