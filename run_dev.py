#!/usr/bin/env python3
"""
Template Composer - Development Runner
Starts the Flask development server on port 5000 with the reloader enabled.
"""

import os

os.environ.setdefault('FLASK_APP', 'template_composer')
os.environ.setdefault('FLASK_ENV', 'development')

from template_composer import create_app
from template_composer.config import config_dir


def print_startup_info(app):
    """Show the settings a developer usually needs to check first"""
    print("=" * 60)
    print("Template Composer - Development Server")
    print("=" * 60)
    print(f"Environment: {app.config.get('FLASK_ENV')}")
    print(f"Debug mode:  {app.config.get('DEBUG')}")
    print(f"Log file:    {app.config.get('LOG_FILE')} ({app.config.get('LOG_LEVEL')})")
    print(f"Canvas:      {app.config['CANVAS_WIDTH']}x{app.config['CANVAS_HEIGHT']}")

    settings_file = config_dir() / 'settings.yaml'
    if not settings_file.exists():
        print(f"⚠️  {settings_file} not found, using built-in defaults")

    fonts = app.extensions['template_composer'].fonts
    if fonts.resolved_path is None:
        print("⚠️  No serif font found, labels use Pillow's default font")
        print("   Set FONT_PATH to a .ttf file for print-quality labels.")
    else:
        print(f"Label font:  {fonts.resolved_path}")

    print("-" * 60)
    print("POST multipart forms to http://localhost:5000/api/render")
    print("Press Ctrl+C to stop")
    print("-" * 60)


def main():
    app = create_app()
    print_startup_info(app)
    app.run(
        host='0.0.0.0',
        port=5000,
        debug=app.config.get('DEBUG', True),
        use_reloader=True,
        threaded=True
    )


if __name__ == '__main__':
    main()
