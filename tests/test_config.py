from __future__ import annotations

import json

import pytest

from photostamp import context as context_module
from photostamp.config import (
    CONFIG_ENV_VAR,
    DEFAULT_COLORS,
    ImagingConfig,
    load_config,
)
from photostamp.context import build_context, get_context, init_context
from photostamp.dpi import (
    DISPLAY_DPI_ENV_VAR,
    current_display_dpi,
    pixels_to_points,
    points_to_pixels,
)


@pytest.fixture
def write_config(tmp_path):
    def _write(values: dict) -> str:
        path = tmp_path / "config.json"
        path.write_text(json.dumps(values), encoding="utf-8")
        return str(path)

    return _write


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    monkeypatch.delenv(DISPLAY_DPI_ENV_VAR, raising=False)


class TestLoadConfig:
    def test_defaults_without_file(self):
        config = load_config()

        assert config == ImagingConfig()
        assert config.scale_longest_side == 640
        assert config.photo_longest_side == 600
        assert config.thumb_longest_side == 320
        assert config.jpeg_quality == 90
        assert config.color("camera_date") == (255, 255, 0)

    def test_file_values_override_defaults(self, write_config):
        path = write_config(
            {
                "scale_longest_side": 800,
                "display_dpi": 120,
                "branding_product": "Acme Inspect",
                "colors": {"header_dark": [1, 2, 3]},
                "font_paths": {"bold": "/fonts/Bold.ttf"},
            }
        )

        config = load_config(path)

        assert config.scale_longest_side == 800
        assert config.display_dpi == 120
        assert config.branding_product == "Acme Inspect"
        assert config.color("header_dark") == (1, 2, 3)
        assert config.color("header_light") == DEFAULT_COLORS["header_light"]
        assert config.font_paths["bold"] == "/fonts/Bold.ttf"
        assert config.font_paths["regular"] == "DejaVuSans.ttf"

    def test_env_var_names_config_file(self, write_config, monkeypatch):
        monkeypatch.setenv(CONFIG_ENV_VAR, write_config({"thumb_longest_side": 150}))

        assert load_config().thumb_longest_side == 150

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "missing.json"))

    @pytest.mark.parametrize(
        "values",
        [
            {"photo_longest_side": 0},
            {"scale_longest_side": -10},
            {"jpeg_quality": 100},
            {"colors": {"header_dark": [0, 0, 300]}},
            {"colors": {"not_a_color": [0, 0, 0]}},
        ],
    )
    def test_rejects_invalid_values(self, write_config, values):
        with pytest.raises(ValueError):
            load_config(write_config(values))


class TestDisplayDpi:
    def test_default(self):
        assert current_display_dpi() == 96
        assert current_display_dpi(ImagingConfig()) == 96

    def test_env_var(self, monkeypatch):
        monkeypatch.setenv(DISPLAY_DPI_ENV_VAR, "120")

        assert current_display_dpi(ImagingConfig()) == 120

    def test_config_takes_precedence_over_env(self, monkeypatch):
        monkeypatch.setenv(DISPLAY_DPI_ENV_VAR, "120")

        assert current_display_dpi(ImagingConfig(display_dpi=144)) == 144

    @pytest.mark.parametrize("raw", ["high", "0", "-72"])
    def test_invalid_env_falls_back(self, monkeypatch, caplog, raw):
        monkeypatch.setenv(DISPLAY_DPI_ENV_VAR, raw)

        with caplog.at_level("WARNING", logger="photostamp.dpi"):
            assert current_display_dpi(ImagingConfig()) == 96
        assert DISPLAY_DPI_ENV_VAR in caplog.text

    def test_point_pixel_conversion(self):
        assert points_to_pixels(12, 96) == pytest.approx(16)
        assert points_to_pixels(72, 300) == 300
        assert pixels_to_points(16, 96) == 12


class TestRenderContext:
    def test_fonts_sized_from_points_at_display_dpi(self, fake_measurer):
        context = build_context(ImagingConfig(display_dpi=144), measurer=fake_measurer)

        assert context.dpi == 144
        assert context.details_font.size == 16
        assert context.camera_date_font.size == 32
        assert context.measurer is fake_measurer
        assert context.color("branding_text") == (0, 0, 0)

    def test_init_then_get_returns_same_context(self, monkeypatch):
        monkeypatch.setattr(context_module, "_context", None)

        installed = init_context(ImagingConfig(display_dpi=72))

        assert get_context() is installed
        assert get_context().dpi == 72

    def test_get_builds_from_config_when_uninitialized(self, monkeypatch):
        monkeypatch.setattr(context_module, "_context", None)

        context = get_context()

        assert context.config == ImagingConfig()
        assert get_context() is context
