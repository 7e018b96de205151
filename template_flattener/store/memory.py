"""In-process template store keeping wide rows keyed by permanent ids."""

import copy
import logging
import uuid

from template_flattener.schema.models import (
    Geometry,
    ImagePayload,
    Layer,
    ShapePayload,
    Slide,
    Template,
    TextAlign,
    TextPayload,
    TextTransform,
)

logger = logging.getLogger(__name__)


class MemoryTemplateStore:
    """Reference TemplateStore holding template, slide and layer rows in dicts."""

    def __init__(self) -> None:
        self.templates: dict[str, dict] = {}
        self.slides: dict[str, dict] = {}
        self.layers: dict[str, dict] = {}

    @staticmethod
    def _new_id() -> str:
        return str(uuid.uuid4())

    def create_template(self, template: Template) -> str:
        template_id = self._new_id()
        self.templates[template_id] = template.to_row()
        template.stored_id = template_id
        logger.debug("Created template %s (%r)", template_id, template.name)
        return template_id

    def add_slide(self, template_id: str, slide: Slide) -> str:
        if template_id not in self.templates:
            raise KeyError(f"Unknown template: {template_id}")
        slide_id = self._new_id()
        layer_rows = {self._new_id(): layer.to_row(slide_id) for layer in slide.layers}

        # Commit all rows together, then hand out the permanent ids
        self.slides[slide_id] = slide.to_row(template_id)
        self.layers.update(layer_rows)
        slide.stored_id = slide_id
        for layer, layer_id in zip(slide.layers, layer_rows):
            layer.stored_id = layer_id
        return slide_id

    def put_template(self, template: Template) -> str:
        """Insert an already-built template with all of its slides.

        Used to seed the store from a saved template; existing permanent
        ids are kept.
        """
        template_id = template.stored_id or self._new_id()
        self.templates[template_id] = template.to_row()
        template.stored_id = template_id
        for slide in template.slides:
            slide_id = slide.stored_id or self._new_id()
            self.slides[slide_id] = slide.to_row(template_id)
            slide.stored_id = slide_id
            for layer in slide.layers:
                layer_id = layer.stored_id or self._new_id()
                self.layers[layer_id] = layer.to_row(slide_id)
                layer.stored_id = layer_id
        return template_id

    def delete_template(self, template_id: str) -> None:
        self.templates.pop(template_id, None)
        slide_ids = [sid for sid, row in self.slides.items()
                     if row["template_id"] == template_id]
        for sid in slide_ids:
            del self.slides[sid]
        for lid in [lid for lid, row in self.layers.items() if row["slide_id"] in slide_ids]:
            del self.layers[lid]
        logger.debug("Deleted template %s (%d slide(s))", template_id, len(slide_ids))

    def slide_rows(self, template_id: str) -> list[tuple[str, dict]]:
        rows = [(sid, row) for sid, row in self.slides.items()
                if row["template_id"] == template_id]
        return sorted(rows, key=lambda item: item[1]["order_index"])

    def layer_rows(self, slide_id: str) -> list[tuple[str, dict]]:
        rows = [(lid, row) for lid, row in self.layers.items() if row["slide_id"] == slide_id]
        return sorted(rows, key=lambda item: item[1]["z_index"])

    def max_slide_order(self, template_id: str) -> int:
        return max((row["order_index"] for _, row in self.slide_rows(template_id)), default=-1)

    def get_template(self, template_id: str) -> Template | None:
        row = self.templates.get(template_id)
        if row is None:
            return None
        template = Template(
            name=row["name"],
            brand=row["brand"],
            category=row["category"],
            published=row["is_published"],
            stored_id=template_id,
        )
        for slide_id, slide_row in self.slide_rows(template_id):
            template.slides.append(Slide(
                name=slide_row["name"],
                width=slide_row["width"],
                height=slide_row["height"],
                layers=[layer_from_row(row, lid) for lid, row in self.layer_rows(slide_id)],
                order_index=slide_row["order_index"],
                stored_id=slide_id,
            ))
        return copy.deepcopy(template)


def layer_from_row(row: dict, layer_id: str | None = None) -> Layer:
    """Rebuild a Layer from a wide ``layers`` row."""
    kind = row["type"]
    if kind == "text":
        payload = TextPayload(
            text=row["text_content"] or "",
            font_family=row["font_family"],
            font_size_pt=row["font_size"],
            color_hex=row["color"],
            align=TextAlign(row["text_align"]),
            line_height=row["line_height"],
            letter_spacing=row["letter_spacing"],
            text_transform=TextTransform(row["text_transform"]),
            max_length=row["max_length"],
        )
    elif kind == "image":
        payload = ImagePayload(source_data_url=row["image_src"])
    else:
        payload = ShapePayload(color_hex=row["color"] or "#000000")
    return Layer(
        name=row["name"],
        geometry=Geometry(x=row["x"], y=row["y"], width=row["width"], height=row["height"]),
        payload=payload,
        order_index=row["z_index"],
        opacity=row["opacity"],
        visible=row["visible"],
        locked=row["locked"],
        rotation=row["rotation"],
        stored_id=layer_id,
    )
