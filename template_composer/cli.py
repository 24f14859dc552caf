#!/usr/bin/env python3
"""
Command-line renderer for Template Composer.

Example:
    template-composer --template a4.png --product photo.jpg \\
        --name "Oak Chair" --item "Item Number: #104" \\
        --set product_image_area_x=320 --output final-template.png
"""

import argparse
import sys
from typing import Dict, List, Optional, Tuple

from loguru import logger

from .composite import Compositor, RenderInputs
from .config import get_config, load_render_config
from .decode import ImageDecoder
from .errors import TemplateComposerError, ValidationError, create_error_recovery_suggestions
from .export import save_png
from .render_config import FORM_FIELDS, apply_form_values
from .text import FontProvider


def parse_assignments(assignments: List[str]) -> Dict[str, str]:
    """Parse FIELD=VALUE pairs given with --set."""
    values = {}
    for assignment in assignments:
        name, sep, value = assignment.partition('=')
        name = name.strip()
        if not sep or not name:
            raise ValidationError(f"Expected FIELD=VALUE, got {assignment!r}")
        if name not in FORM_FIELDS:
            raise ValidationError(
                f"Unknown layout field: {name}",
                details={'allowed': sorted(FORM_FIELDS)}
            )
        values[name] = value.strip()
    return values


def parse_canvas_size(text: str) -> Tuple[int, int]:
    """Parse WIDTHxHEIGHT."""
    width, sep, height = text.lower().partition('x')
    try:
        return int(width), int(height)
    except ValueError:
        raise ValidationError(f"Canvas size must look like 1122x794, got {text!r}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='template-composer',
        description='Compose an A4 landscape template from a background, a product photo and two labels'
    )
    parser.add_argument('--template', help='Background template image')
    parser.add_argument('--product', help='Product photo')
    parser.add_argument('--name', dest='product_name', help='Product name label')
    parser.add_argument('--item', dest='item_number', help='Item number label')
    parser.add_argument('--output', '-o', help='Output PNG path (default: final-template.png)')
    parser.add_argument('--config', help='YAML file with layout values')
    parser.add_argument('--set', dest='assignments', action='append', default=[], metavar='FIELD=VALUE',
                        help='Override one layout field, e.g. product_image_area_width=480')
    parser.add_argument('--canvas-size', help='Canvas size as WIDTHxHEIGHT')
    parser.add_argument('--require-complete', action='store_true',
                        help='Fail unless both images decode and both labels are set')
    return parser


def run(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    context = {}

    try:
        app_config = get_config()
        render_config = app_config.RENDER_DEFAULTS
        if args.config:
            render_config = load_render_config(args.config, render_config)
        render_config = apply_form_values(render_config, parse_assignments(args.assignments))

        canvas_size = parse_canvas_size(args.canvas_size) if args.canvas_size else app_config.canvas_size
        compositor = Compositor(canvas_size=canvas_size, fonts=FontProvider(font_path=app_config.FONT_PATH))

        with ImageDecoder(max_workers=app_config.DECODE_WORKERS) as decoder:
            if args.template:
                decoder.template.request_decode(args.template)
            if args.product:
                decoder.product.request_decode(args.product)
            decoder.wait()
            template_image, product_image = decoder.snapshot()

        context['undecodable_images'] = [
            path for path, image in ((args.template, template_image), (args.product, product_image))
            if path and image is None
        ]

        inputs = RenderInputs(
            template_image=template_image,
            product_image=product_image,
            product_name=args.product_name if args.product_name is not None else app_config.DEFAULT_PRODUCT_NAME,
            item_number=args.item_number if args.item_number is not None else app_config.DEFAULT_ITEM_NUMBER,
            config=render_config,
        )

        if args.require_complete and not inputs.is_complete:
            raise ValidationError(
                "Template is incomplete",
                details={'missing': inputs.missing},
                suggestions=["Provide readable --template and --product images and non-empty labels"]
            )

        image = compositor.render(inputs)
        context['missing_font'] = compositor.fonts.resolved_path is None
        output = save_png(image, args.output or app_config.OUTPUT_FILENAME, app_config.PNG_COMPRESS_LEVEL)

    except TemplateComposerError as e:
        logger.error(e.message)
        for suggestion in create_error_recovery_suggestions(e, context):
            logger.info(f"  - {suggestion}")
        return 1

    print(output)
    return 0


def main():
    sys.exit(run())


if __name__ == '__main__':
    main()
