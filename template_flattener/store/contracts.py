"""Persistence protocol for imported templates.

The store owns permanent identity: it fills ``stored_id`` on the models it
persists and returns that id. A slide is committed as a whole (slide row
plus all of its layer rows) or not at all.
"""

from typing import Protocol

from template_flattener.schema.models import Slide, Template


class TemplateStore(Protocol):
    def create_template(self, template: Template) -> str: ...

    def add_slide(self, template_id: str, slide: Slide) -> str: ...

    def delete_template(self, template_id: str) -> None: ...

    def get_template(self, template_id: str) -> Template | None: ...

    def max_slide_order(self, template_id: str) -> int: ...


__all__ = ["TemplateStore"]
