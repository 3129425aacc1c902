from text_sanitizer import PLACEHOLDER, apply_text_transform, sanitize_text


def test_latin1_text_is_unchanged() -> None:
    assert sanitize_text("Ren\N{LATIN SMALL LETTER E WITH ACUTE}e M\N{LATIN SMALL LETTER U WITH DIAERESIS}ller, 5 years") == (
        "Ren\N{LATIN SMALL LETTER E WITH ACUTE}e M\N{LATIN SMALL LETTER U WITH DIAERESIS}ller, 5 years"
    )


def test_typographic_characters_become_ascii() -> None:
    text = (
        "2019 \N{EN DASH} 2023 \N{EM DASH} "
        "\N{LEFT DOUBLE QUOTATION MARK}lead\N{RIGHT DOUBLE QUOTATION MARK} "
        "it\N{RIGHT SINGLE QUOTATION MARK}s \N{RIGHTWARDS ARROW} more\N{HORIZONTAL ELLIPSIS}"
    )
    assert sanitize_text(text) == "2019 - 2023 -- \"lead\" it's -> more..."


def test_unsupported_characters_become_placeholder() -> None:
    assert sanitize_text("Tokyo \N{CJK UNIFIED IDEOGRAPH-6771}") == "Tokyo " + PLACEHOLDER
    assert sanitize_text("\N{GRINNING FACE}") == PLACEHOLDER


def test_zero_width_space_is_removed() -> None:
    assert sanitize_text("data\N{ZERO WIDTH SPACE}base") == "database"


def test_output_is_always_latin1() -> None:
    text = "".join(chr(code) for code in range(0x2000, 0x2100))
    sanitize_text(text).encode("latin-1")


def test_text_transform() -> None:
    assert apply_text_transform("Work Experience", "uppercase") == "WORK EXPERIENCE"
    assert apply_text_transform("Work Experience", "lowercase") == "work experience"
    assert apply_text_transform("don't stop now", "capitalize") == "Don't Stop Now"
    assert apply_text_transform("Work Experience", "none") == "Work Experience"
    assert apply_text_transform("Work Experience", "full-width") == "Work Experience"
