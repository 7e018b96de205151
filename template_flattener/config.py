"""Import settings — the tunable defaults consulted by the flattening engine.

Every field defaults to the value the engine uses without a settings file,
so ``ImportSettings()`` reproduces the standard import behaviour. Settings
can be kept as YAML next to the templates they produce.
"""

from dataclasses import dataclass, fields
from pathlib import Path

import yaml

DEFAULT_CANVAS_SIZE = 1080
DEFAULT_FONT_FAMILY = "DM Sans"
DEFAULT_FONT_SIZE_PT = 16.0
DEFAULT_COLOR = "#000000"
DEFAULT_IMAGE_FORMAT = "PNG"
UNNAMED_LAYER = "Unnamed Layer"


@dataclass
class ImportSettings:
    """Fallback values used when a document omits a signal."""
    canvas_width: int = DEFAULT_CANVAS_SIZE
    canvas_height: int = DEFAULT_CANVAS_SIZE
    font_family: str = DEFAULT_FONT_FAMILY
    font_size_pt: float = DEFAULT_FONT_SIZE_PT
    color_hex: str = DEFAULT_COLOR
    image_format: str = DEFAULT_IMAGE_FORMAT   # Pillow format name for data URLs
    layer_name: str = UNNAMED_LAYER
    publish: bool = False                      # Mark imported templates published

    def to_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, d: dict | None) -> "ImportSettings":
        d = d or {}
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(d) - known)
        if unknown:
            raise ValueError(f"Unknown import setting(s): {', '.join(unknown)}")
        return cls(**d)


def load_settings(path: str | Path) -> ImportSettings:
    """Read ImportSettings from a YAML file; missing keys keep their defaults."""
    path = Path(path)
    with open(path) as f:
        data = yaml.safe_load(f)
    return ImportSettings.from_dict(data)


def save_settings(settings: ImportSettings, path: str | Path) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        yaml.dump(settings.to_dict(), f, default_flow_style=False, sort_keys=False)
