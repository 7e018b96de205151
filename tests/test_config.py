"""Tests for import settings."""

import pytest

from template_flattener.config import ImportSettings, load_settings, save_settings


class TestImportSettings:
    def test_defaults(self):
        s = ImportSettings()
        assert (s.canvas_width, s.canvas_height) == (1080, 1080)
        assert s.font_family == "DM Sans"
        assert s.font_size_pt == 16.0
        assert s.color_hex == "#000000"
        assert s.image_format == "PNG"
        assert s.layer_name == "Unnamed Layer"
        assert s.publish is False

    def test_from_empty(self):
        assert ImportSettings.from_dict(None) == ImportSettings()
        assert ImportSettings.from_dict({}) == ImportSettings()

    def test_partial_override(self):
        s = ImportSettings.from_dict({"canvas_width": 1920, "publish": True})
        assert s.canvas_width == 1920
        assert s.canvas_height == 1080
        assert s.publish is True

    def test_unknown_key_rejected(self):
        with pytest.raises(ValueError, match="blend_mode"):
            ImportSettings.from_dict({"blend_mode": "multiply"})


class TestSettingsFile:
    def test_round_trip(self, tmp_path):
        path = tmp_path / "settings.yaml"
        save_settings(ImportSettings(font_family="Inter", image_format="WEBP"), path)
        loaded = load_settings(path)
        assert loaded.font_family == "Inter"
        assert loaded.image_format == "WEBP"

    def test_load_partial_file(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("font_size_pt: 12\n")
        assert load_settings(path).font_size_pt == 12

    def test_load_empty_file(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("")
        assert load_settings(path) == ImportSettings()
