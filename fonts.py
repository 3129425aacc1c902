"""Output fonts for the invisible text layer, loaded with PyMuPDF."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Tuple

import fitz  # PyMuPDF

from config import FontConfig

logger = logging.getLogger(__name__)

# Base-14 Helvetica is the closest standard font to the page's Inter webfont
BUILTIN_REGULAR = "helv"
BUILTIN_BOLD = "hebo"

CUSTOM_REGULAR = "CVRegular"
CUSTOM_BOLD = "CVBold"


class OutputFonts:
    """Regular and bold fonts used to measure and draw rehydrated text."""

    def __init__(
        self,
        regular: fitz.Font,
        bold: fitz.Font,
        regular_name: str = BUILTIN_REGULAR,
        bold_name: str = BUILTIN_BOLD,
        regular_file: Optional[Path] = None,
        bold_file: Optional[Path] = None
    ):
        self.regular = regular
        self.bold = bold
        self.regular_name = regular_name
        self.bold_name = bold_name
        self.regular_file = regular_file
        self.bold_file = bold_file

    @staticmethod
    def _load_one(
        path: Optional[str],
        custom_name: str,
        builtin_name: str
    ) -> Tuple[fitz.Font, str, Optional[Path]]:
        if path:
            font_path = Path(path)
            try:
                font = fitz.Font(fontfile=str(font_path))
                logger.info(f"Loaded font {font.name} from {font_path}")
                return font, custom_name, font_path
            except Exception as e:
                logger.warning(
                    f"Could not load font from {font_path}: {e}. Using {builtin_name} as fallback"
                )

        return fitz.Font(builtin_name), builtin_name, None

    @classmethod
    def load(cls, config: Optional[FontConfig] = None) -> "OutputFonts":
        """
        Load the configured fonts, falling back to built-in Helvetica.

        Args:
            config: Optional TrueType paths for regular and bold text

        Returns:
            OutputFonts ready for measuring and drawing
        """
        config = config or FontConfig()
        regular, regular_name, regular_file = cls._load_one(
            config.regular_path, CUSTOM_REGULAR, BUILTIN_REGULAR
        )
        bold, bold_name, bold_file = cls._load_one(
            config.bold_path, CUSTOM_BOLD, BUILTIN_BOLD
        )
        return cls(regular, bold, regular_name, bold_name, regular_file, bold_file)

    def font_for(self, bold: bool) -> fitz.Font:
        return self.bold if bold else self.regular

    def fontname_for(self, bold: bool) -> str:
        return self.bold_name if bold else self.regular_name

    def text_width(self, text: str, font_size: float, bold: bool = False) -> float:
        """Width in points of ``text`` drawn at ``font_size``."""
        return self.font_for(bold).text_length(text, fontsize=font_size)

    def register(self, page: fitz.Page) -> None:
        """Make custom fonts available on ``page`` under their alias names."""
        for name, font_file in (
            (self.regular_name, self.regular_file),
            (self.bold_name, self.bold_file),
        ):
            if font_file is not None:
                page.insert_font(fontname=name, fontfile=str(font_file))
