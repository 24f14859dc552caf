"""
Template Composer - Flask Application Factory
Composes A4 landscape print templates from a background, a product photo and two labels
"""

import os
from pathlib import Path
from flask import Flask, jsonify
from loguru import logger
from dotenv import load_dotenv

from .composite import create_compositor
from .config import AppConfig, load_config
from .errors import TemplateComposerError


def create_app(config_name=None):
    """Flask application factory

    config_name is either an environment name ("development", "production")
    or a dict of settings overriding the loaded configuration.
    """

    # Load environment variables
    load_dotenv()

    overrides = {}
    if isinstance(config_name, dict):
        overrides = dict(config_name)
        config_name = None
    environment = config_name or os.getenv('FLASK_ENV', 'development')

    app = Flask(__name__)

    # Load configuration; keys unknown to AppConfig go straight to Flask
    settings = {k: v for k, v in overrides.items() if k in AppConfig.model_fields}
    config = load_config(environment, settings)
    app.config.update(config.model_dump())
    app.config.update({k: v for k, v in overrides.items() if k not in settings})
    app.config['MAX_CONTENT_LENGTH'] = config.MAX_UPLOAD_SIZE * 3
    app.extensions['template_composer'] = create_compositor(config)

    # Configure logging
    setup_logging(app)

    # Register blueprints
    from . import routes
    app.register_blueprint(routes.bp)
    register_error_handlers(app)

    logger.info(f"Template Composer initialized in {environment} mode")

    return app


def setup_logging(app):
    """Configure loguru logging"""
    log_level = app.config.get('LOG_LEVEL', 'INFO')
    log_file = app.config.get('LOG_FILE', 'logs/app.log')

    # Ensure logs directory exists
    Path(log_file).parent.mkdir(parents=True, exist_ok=True)

    logger.add(
        log_file,
        rotation="1 day",
        retention="30 days",
        level=log_level,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {name}:{function}:{line} | {message}"
    )


def register_error_handlers(app):
    """Return errors as JSON"""

    @app.errorhandler(TemplateComposerError)
    def handle_composer_error(error):
        if error.status_code >= 500:
            logger.error(f"{type(error).__name__}: {error.message}")
        else:
            logger.warning(f"{type(error).__name__}: {error.message}")
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(413)
    def handle_request_too_large(error):
        return jsonify({
            'error_type': 'RequestTooLarge',
            'message': 'Upload exceeds the allowed size',
            'details': {'max_upload_size': app.config.get('MAX_UPLOAD_SIZE')},
            'suggestions': ['Upload smaller images']
        }), 413
