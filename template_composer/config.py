"""
Configuration management for Template Composer
Loads settings from YAML files with environment variable overrides
"""

import os
import yaml
from pathlib import Path
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field, ValidationError as PydanticValidationError
from loguru import logger

from .errors import ConfigurationError
from .export import OUTPUT_FILENAME
from .render_config import (
    CANVAS_HEIGHT,
    CANVAS_WIDTH,
    DEFAULT_ITEM_NUMBER,
    DEFAULT_PRODUCT_NAME,
    DEFAULT_RENDER_CONFIG,
    RenderConfig,
)


class AppConfig(BaseModel):
    """Main application configuration"""

    # Flask settings
    SECRET_KEY: str = Field(default_factory=lambda: os.urandom(24).hex())
    FLASK_ENV: str = "development"
    DEBUG: bool = True

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "logs/app.log"

    # Uploads
    MAX_UPLOAD_SIZE: int = 20 * 1024 * 1024  # 20MB

    # Canvas
    CANVAS_WIDTH: int = Field(default=CANVAS_WIDTH, gt=0)
    CANVAS_HEIGHT: int = Field(default=CANVAS_HEIGHT, gt=0)
    FONT_PATH: Optional[str] = None  # Auto-detect a serif font if None

    # Output
    OUTPUT_FILENAME: str = OUTPUT_FILENAME
    PNG_COMPRESS_LEVEL: int = Field(default=6, ge=0, le=9)
    DECODE_WORKERS: int = Field(default=2, ge=1)

    # Labels used when a request does not send one
    DEFAULT_PRODUCT_NAME: str = DEFAULT_PRODUCT_NAME
    DEFAULT_ITEM_NUMBER: str = DEFAULT_ITEM_NUMBER

    RENDER_DEFAULTS: RenderConfig = DEFAULT_RENDER_CONFIG

    @property
    def canvas_size(self):
        return (self.CANVAS_WIDTH, self.CANVAS_HEIGHT)


def config_dir() -> Path:
    """Directory holding settings*.yaml"""
    return Path(os.getenv('TEMPLATE_COMPOSER_CONFIG_DIR', 'config'))


def load_yaml_config(file_path) -> Dict:
    """Load configuration from YAML file"""
    path = Path(file_path)
    if not path.exists():
        logger.debug(f"Config file not found: {file_path}")
        return {}

    try:
        with open(path, 'r', encoding='utf-8') as f:
            return yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(
            f"Error loading config file {file_path}: {e}",
            details={'path': str(path)},
            suggestions=["Check the YAML syntax of the settings file"]
        )


def load_config(environment: str = "development", overrides: Dict[str, Any] = None) -> AppConfig:
    """Load configuration with environment-specific overrides"""

    # Load base settings
    base_config = load_yaml_config(config_dir() / "settings.yaml")

    # Load environment-specific settings
    env_config = load_yaml_config(config_dir() / f"settings_{environment}.yaml")

    # Merge configurations (env overrides base)
    config_dict = {**base_config, **env_config}

    # Apply environment variable overrides
    env_overrides = {
        'FLASK_ENV': os.getenv('FLASK_ENV', environment),
        'LOG_LEVEL': os.getenv('LOG_LEVEL'),
        'SECRET_KEY': os.getenv('SECRET_KEY'),
        'FONT_PATH': os.getenv('FONT_PATH'),
    }

    # Only include non-None values
    env_overrides = {k: v for k, v in env_overrides.items() if v is not None}
    config_dict.update(env_overrides)

    # Special handling for boolean DEBUG flag
    if 'FLASK_ENV' in config_dict:
        config_dict['DEBUG'] = config_dict['FLASK_ENV'] == 'development'

    if overrides:
        config_dict.update(overrides)

    try:
        return AppConfig(**config_dict)
    except PydanticValidationError as e:
        raise ConfigurationError(
            f"Configuration validation error: {e}",
            details={'errors': [err['msg'] for err in e.errors()]},
            suggestions=["Fix the listed settings in config/settings.yaml or the environment"]
        )


def load_render_config(file_path, base: RenderConfig = DEFAULT_RENDER_CONFIG) -> RenderConfig:
    """Load a layout from a YAML file, keeping base values for anything it leaves out."""
    data = load_yaml_config(file_path)
    merged = base.model_dump()
    for key, value in data.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = {**merged[key], **value}
        else:
            merged[key] = value

    try:
        return RenderConfig(**merged)
    except PydanticValidationError as e:
        raise ConfigurationError(
            f"Invalid layout in {file_path}: {e}",
            details={'path': str(file_path)}
        )


# Global config instance
_config_instance = None

def get_config() -> AppConfig:
    """Get the global configuration instance"""
    global _config_instance
    if _config_instance is None:
        _config_instance = load_config(os.getenv('FLASK_ENV', 'development'))
    return _config_instance
