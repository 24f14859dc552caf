"""
Flask routes for Template Composer
Renders uploaded images and labels into a template PNG
"""

import io
from typing import List

from flask import Blueprint, current_app, jsonify, request, send_file
from loguru import logger

from .composite import RenderInputs
from .config import AppConfig
from .decode import decode_image
from .errors import FileTooLargeError, ValidationError
from .export import encode_png
from .render_config import MAX_FONT_SIZE, MIN_FONT_SIZE, RenderConfig, apply_form_values


bp = Blueprint('main', __name__)


@bp.route('/api/defaults', methods=['GET'])
def defaults():
    """Canvas, layout defaults and limits for clients building a form"""
    config = current_app.config
    return jsonify({
        'canvas': {'width': config['CANVAS_WIDTH'], 'height': config['CANVAS_HEIGHT']},
        'font_size_range': {'min': MIN_FONT_SIZE, 'max': MAX_FONT_SIZE},
        'render_config': config['RENDER_DEFAULTS'],
        'product_name': config['DEFAULT_PRODUCT_NAME'],
        'item_number': config['DEFAULT_ITEM_NUMBER'],
        'output_filename': config['OUTPUT_FILENAME'],
    })


@bp.route('/api/render', methods=['POST'])
def render_preview():
    """Render the posted inputs and return the PNG inline"""
    return _render_response(as_attachment=False)


@bp.route('/api/export', methods=['POST'])
def export_template():
    """Render the posted inputs and return the PNG as a download"""
    return _render_response(as_attachment=True)


def _render_response(as_attachment: bool):
    app_config = _current_app_config()
    warnings: List[str] = []

    template_image = _read_upload('template_image', warnings)
    product_image = _read_upload('product_image', warnings)

    render_config = apply_form_values(
        RenderConfig.model_validate(current_app.config['RENDER_DEFAULTS']),
        request.form
    )

    inputs = RenderInputs(
        template_image=template_image,
        product_image=product_image,
        product_name=request.form.get('product_name', app_config.DEFAULT_PRODUCT_NAME),
        item_number=request.form.get('item_number', app_config.DEFAULT_ITEM_NUMBER),
        config=render_config,
    )

    if _form_flag('require_complete') and not inputs.is_complete:
        raise ValidationError(
            "Template is incomplete",
            details={'missing': inputs.missing},
            suggestions=["Upload both images and fill in both labels before exporting"]
        )

    image = current_app.extensions['template_composer'].render(inputs)
    data = encode_png(image, app_config.PNG_COMPRESS_LEVEL)

    logger.info(f"Rendered template ({len(data):,} bytes, complete={inputs.is_complete}, "
                f"warnings={len(warnings)})")

    response = send_file(
        io.BytesIO(data),
        mimetype='image/png',
        as_attachment=as_attachment,
        download_name=app_config.OUTPUT_FILENAME,
    )
    if warnings:
        response.headers['X-Composer-Warnings'] = '; '.join(warnings)
    return response


def _current_app_config() -> AppConfig:
    """Rebuild the typed settings from the Flask config"""
    return AppConfig(**{name: current_app.config[name]
                        for name in AppConfig.model_fields
                        if name in current_app.config})


def _form_flag(name: str) -> bool:
    return request.form.get(name, '').strip().lower() in ('1', 'true', 'yes', 'on')


def _read_upload(field: str, warnings: List[str]):
    """Decode an uploaded image; unreadable uploads count as absent"""
    upload = request.files.get(field)
    if upload is None or not upload.filename:
        return None

    data = upload.read()
    limit = current_app.config.get('MAX_UPLOAD_SIZE', 20 * 1024 * 1024)
    if len(data) > limit:
        raise FileTooLargeError(
            filename=upload.filename,
            size_mb=len(data) / (1024 * 1024),
            limit_mb=limit / (1024 * 1024)
        )

    image = decode_image(data)
    if image is None:
        warnings.append(f"{field}: could not decode {upload.filename}")
    return image
