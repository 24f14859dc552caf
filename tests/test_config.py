"""
Unit tests for settings loading.
"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from template_composer.config import AppConfig, load_config, load_render_config, load_yaml_config
from template_composer.errors import ConfigurationError
from template_composer.render_config import DEFAULT_RENDER_CONFIG, Rect


@pytest.fixture
def config_dir(tmp_path, monkeypatch):
    """Point settings loading at an empty temporary folder."""
    monkeypatch.setenv('TEMPLATE_COMPOSER_CONFIG_DIR', str(tmp_path))
    for name in ('FLASK_ENV', 'LOG_LEVEL', 'SECRET_KEY', 'FONT_PATH'):
        monkeypatch.delenv(name, raising=False)
    return tmp_path


class TestLoadConfig:
    """Test YAML and environment layering."""

    def test_defaults_without_files(self, config_dir):
        config = load_config()

        assert config.canvas_size == (1122, 794)
        assert config.OUTPUT_FILENAME == "final-template.png"
        assert config.RENDER_DEFAULTS == DEFAULT_RENDER_CONFIG
        assert config.DEBUG is True

    def test_base_and_environment_files(self, config_dir):
        (config_dir / "settings.yaml").write_text("LOG_LEVEL: WARNING\nPNG_COMPRESS_LEVEL: 3\n")
        (config_dir / "settings_production.yaml").write_text("PNG_COMPRESS_LEVEL: 9\n")

        config = load_config("production")

        assert config.LOG_LEVEL == "WARNING"
        assert config.PNG_COMPRESS_LEVEL == 9
        assert config.FLASK_ENV == "production"
        assert config.DEBUG is False

    def test_environment_variables_win(self, config_dir, monkeypatch):
        (config_dir / "settings.yaml").write_text("LOG_LEVEL: WARNING\n")
        monkeypatch.setenv('LOG_LEVEL', 'DEBUG')
        monkeypatch.setenv('FONT_PATH', '/fonts/serif.ttf')

        config = load_config()

        assert config.LOG_LEVEL == "DEBUG"
        assert config.FONT_PATH == "/fonts/serif.ttf"

    def test_overrides_win(self, config_dir):
        config = load_config(overrides={'CANVAS_WIDTH': 800, 'CANVAS_HEIGHT': 600})

        assert config.canvas_size == (800, 600)

    def test_nested_render_defaults(self, config_dir):
        (config_dir / "settings.yaml").write_text(
            "RENDER_DEFAULTS:\n"
            "  product_image_area: {x: 10, y: 20, width: 30, height: 40}\n"
            "  product_name_position: {x: 1, y: 2}\n"
            "  item_number_position: {x: 3, y: 4}\n"
            "  product_name_font_size: 200\n"
            "  item_number_font_size: 5\n"
        )

        render_defaults = load_config().RENDER_DEFAULTS

        assert render_defaults.product_image_area == Rect(x=10, y=20, width=30, height=40)
        assert render_defaults.product_name_font_size == 72
        assert render_defaults.item_number_font_size == 12

    @pytest.mark.parametrize('yaml_text', [
        "CANVAS_WIDTH: 0\n",
        "PNG_COMPRESS_LEVEL: 12\n",
        "DECODE_WORKERS: 0\n",
        "RENDER_DEFAULTS: {product_image_area: nowhere}\n",
    ])
    def test_invalid_settings_raise_configuration_error(self, config_dir, yaml_text):
        (config_dir / "settings.yaml").write_text(yaml_text)

        with pytest.raises(ConfigurationError) as exc_info:
            load_config()

        assert exc_info.value.details['errors']

    def test_broken_yaml_raises_configuration_error(self, config_dir):
        (config_dir / "settings.yaml").write_text("CANVAS_WIDTH: [1122\n")

        with pytest.raises(ConfigurationError):
            load_config()

    def test_missing_file_is_empty(self, tmp_path):
        assert load_yaml_config(tmp_path / "nope.yaml") == {}


class TestLoadRenderConfig:
    """Test layout files used by the command line."""

    def test_partial_layout_keeps_base_values(self, tmp_path):
        path = tmp_path / "layout.yaml"
        path.write_text("product_image_area: {x: 10}\nitem_number_font_size: 30\n")

        config = load_render_config(path)

        assert config.product_image_area == Rect(x=10, y=150, width=500, height=400)
        assert config.item_number_font_size == 30
        assert config.product_name_position == DEFAULT_RENDER_CONFIG.product_name_position

    def test_invalid_layout(self, tmp_path):
        path = tmp_path / "layout.yaml"
        path.write_text("product_name_position: {x: left}\n")

        with pytest.raises(ConfigurationError):
            load_render_config(path)


def test_app_config_rejects_bad_canvas():
    with pytest.raises(PydanticValidationError):
        AppConfig(CANVAS_WIDTH=-1)
