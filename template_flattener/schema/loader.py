"""Template loader — YAML serialization and deserialization for Template.

Saved templates are the store of record for the CLI: ``import`` writes one,
``append`` reads it back, adds a slide and rewrites it, and ``inspect``
prints it. Layers are written bottom to top so a diff of two saves reads
in stacking order.
"""

from pathlib import Path

import yaml

from .models import Template


def save_template(template: Template, path: str | Path) -> None:
    """Write a Template to a YAML file, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        yaml.dump(template.to_dict(), f, default_flow_style=False, sort_keys=False,
                  allow_unicode=True, width=120)


def load_template(path: str | Path) -> Template:
    """Read a Template saved by save_template.

    Raises ValueError when the file is not valid YAML or does not hold a
    template mapping with a name.
    """
    path = Path(path)
    with open(path) as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise ValueError(f"{path.name} is not valid YAML: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(f"{path.name} does not contain a template mapping")
    if "name" not in data:
        raise ValueError(f"{path.name} has no template name")
    return Template.from_dict(data)
