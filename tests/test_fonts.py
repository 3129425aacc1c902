import pytest

from config import FontConfig
from fonts import BUILTIN_BOLD, BUILTIN_REGULAR, OutputFonts


def test_builtin_fonts_by_default() -> None:
    fonts = OutputFonts.load()
    assert fonts.fontname_for(False) == BUILTIN_REGULAR
    assert fonts.fontname_for(True) == BUILTIN_BOLD
    assert fonts.regular_file is None
    assert fonts.bold_file is None


def test_text_width_scales_with_font_size() -> None:
    fonts = OutputFonts.load()
    width = fonts.text_width("Software Engineer", 10)
    assert width > 0
    assert fonts.text_width("Software Engineer", 20) == pytest.approx(2 * width)
    assert fonts.text_width("", 10) == 0


def test_bold_text_is_wider() -> None:
    fonts = OutputFonts.load()
    assert fonts.text_width("Experience", 12, bold=True) > fonts.text_width("Experience", 12)


def test_missing_font_file_falls_back_to_builtin(tmp_path) -> None:
    config = FontConfig(regular_path=str(tmp_path / "Inter-Regular.ttf"))
    fonts = OutputFonts.load(config)
    assert fonts.regular_name == BUILTIN_REGULAR
    assert fonts.regular_file is None
    assert fonts.text_width("Inter", 10) > 0
