"""
Unit tests for label fonts and label drawing.
"""

from PIL import Image

from template_composer.render_config import Position
from template_composer.text import BLACK, FontProvider, draw_label, normalize_label
from tests.conftest import WHITE


class TestNormalizeLabel:

    def test_plain_text_is_unchanged(self):
        assert normalize_label("Item Number: #001") == "Item Number: #001"

    def test_line_breaks_become_spaces(self):
        assert normalize_label("Oak\nChair\r\n\tLarge") == "Oak Chair  Large"

    def test_markup_is_kept_verbatim(self):
        assert normalize_label("<b>Chair</b> &amp;") == "<b>Chair</b> &amp;"

    def test_missing_text(self):
        assert normalize_label(None) == ""
        assert normalize_label("") == ""


class TestFontProvider:
    """Test font lookup and caching."""

    def test_fonts_are_cached_per_pixel_size(self, shared_fonts):
        assert shared_fonts.get(24) is shared_fonts.get(24.2)
        assert shared_fonts.get(24) is not shared_fonts.get(36)

    def test_tiny_sizes_still_load(self, shared_fonts):
        assert shared_fonts.get(0.2) is shared_fonts.get(1)

    def test_fallback_when_no_candidate_loads(self):
        fonts = FontProvider(candidates=("no-such-serif-font.ttf",))

        assert fonts.resolved_path is None
        assert fonts.get(24) is not None

    def test_missing_configured_font_is_skipped(self):
        fonts = FontProvider(font_path="/nonexistent/fonts/Serif.ttf", candidates=())

        assert fonts.resolved_path is None
        assert fonts.get(12) is not None

    def test_lookup_happens_once(self, monkeypatch):
        fonts = FontProvider(candidates=())
        calls = []
        monkeypatch.setattr(fonts, '_find_font', lambda: calls.append(1))

        fonts.resolved_path
        fonts.resolved_path

        assert calls == [1]


class TestDrawLabel:
    """Test drawing one label onto a canvas."""

    def make_canvas(self):
        return Image.new('RGBA', (120, 40), WHITE)

    def test_empty_label_is_not_drawn(self, shared_fonts):
        canvas = self.make_canvas()

        assert draw_label(canvas, "", Position(x=5, y=5), shared_fonts.get(12)) is False
        assert draw_label(canvas, None, Position(x=5, y=5), shared_fonts.get(12)) is False
        assert canvas.getcolors() == [(120 * 40, WHITE)]

    def test_label_is_drawn_from_top_left(self, shared_fonts):
        canvas = self.make_canvas()

        assert draw_label(canvas, "HHHH", Position(x=60, y=10), shared_fonts.get(20)) is True

        left_half = canvas.crop((0, 0, 55, 40))
        right_half = canvas.crop((60, 0, 120, 40)).convert('L')
        assert left_half.getcolors() == [(55 * 40, WHITE)]
        assert right_half.getextrema()[0] < 64

    def test_fill_color(self, shared_fonts):
        canvas = self.make_canvas()

        draw_label(canvas, "HHHH", Position(x=2, y=2), shared_fonts.get(24), fill=(255, 0, 0, 255))

        colors = {color for _, color in canvas.getcolors(maxcolors=4096)}
        assert (255, 0, 0, 255) in colors
        assert BLACK not in colors

    def test_canvas_stays_opaque(self, shared_fonts):
        canvas = self.make_canvas()

        draw_label(canvas, "Chair", Position(x=2, y=2), shared_fonts.get(24))

        assert canvas.getextrema()[3] == (255, 255)
