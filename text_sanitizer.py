"""Text clean-up for the output font's Latin-1 text layer."""

from __future__ import annotations

import re

PLACEHOLDER = "?"

# Characters the base-14 fonts cannot encode, mapped to ASCII look-alikes
REPLACEMENTS = {
    "\N{RIGHTWARDS ARROW}": "->",
    "\N{LEFTWARDS ARROW}": "<-",
    "\N{LEFT RIGHT ARROW}": "<->",
    "\N{RIGHTWARDS DOUBLE ARROW}": "=>",
    "\N{HYPHEN}": "-",
    "\N{NON-BREAKING HYPHEN}": "-",
    "\N{FIGURE DASH}": "-",
    "\N{EN DASH}": "-",
    "\N{EM DASH}": "--",
    "\N{MINUS SIGN}": "-",
    "\N{LEFT SINGLE QUOTATION MARK}": "'",
    "\N{RIGHT SINGLE QUOTATION MARK}": "'",
    "\N{SINGLE LOW-9 QUOTATION MARK}": "'",
    "\N{LEFT DOUBLE QUOTATION MARK}": '"',
    "\N{RIGHT DOUBLE QUOTATION MARK}": '"',
    "\N{DOUBLE LOW-9 QUOTATION MARK}": '"',
    "\N{HORIZONTAL ELLIPSIS}": "...",
    "\N{BULLET}": "-",
    "\N{THIN SPACE}": " ",
    "\N{NARROW NO-BREAK SPACE}": " ",
    "\N{ZERO WIDTH SPACE}": "",
}

_REPLACEMENT_RE = re.compile("|".join(re.escape(ch) for ch in REPLACEMENTS))
_NON_LATIN1_RE = re.compile(r"[^\x00-\xff]")
_WORD_START_RE = re.compile(r"(?<![\w'])\w")


def apply_text_transform(text: str, transform: str) -> str:
    """Apply a CSS ``text-transform`` value the way the browser displays it."""
    if transform == "uppercase":
        return text.upper()
    if transform == "lowercase":
        return text.lower()
    if transform == "capitalize":
        return _WORD_START_RE.sub(lambda m: m.group(0).upper(), text)
    return text


def sanitize_text(text: str) -> str:
    """
    Replace characters outside Latin-1 with safe equivalents.

    Arrows, dashes, smart quotes and ellipses become ASCII sequences; any
    other character outside Latin-1 becomes ``?``. Latin-1 accents are kept.

    Args:
        text: Text as extracted from the DOM

    Returns:
        Text drawable with the built-in Helvetica encoding
    """
    text = _REPLACEMENT_RE.sub(lambda m: REPLACEMENTS[m.group(0)], text)
    return _NON_LATIN1_RE.sub(PLACEHOLDER, text)
