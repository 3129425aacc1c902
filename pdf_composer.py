"""Raster page composition and invisible text overlay using PyMuPDF."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import fitz  # PyMuPDF

from config import A4_HEIGHT_PT, A4_WIDTH_PT
from cut_planner import slice_fit_scale
from exceptions import PDFCompositionError
from fonts import OutputFonts
from models import DrawInstruction

logger = logging.getLogger(__name__)

# Text render mode 3 draws neither fill nor stroke: selectable but invisible
INVISIBLE_RENDER_MODE = 3
DEBUG_COLOR = (1, 0, 0)
DEBUG_OPACITY = 0.5


class PDFPageComposer:
    """Build a PDF of page images and draw the rehydrated text layer on it."""

    def __init__(
        self,
        pdf_document: Optional[fitz.Document] = None,
        page_width: float = A4_WIDTH_PT,
        page_height: float = A4_HEIGHT_PT
    ):
        """
        Initialize PDFPageComposer.

        Args:
            pdf_document: Existing raster PDF to overlay, or None for a new document
            page_width: Width of new pages in points
            page_height: Height of new pages in points
        """
        self.pdf_document = pdf_document if pdf_document is not None else fitz.open()
        self.page_width = page_width
        self.page_height = page_height
        self.output_path: Optional[Path] = None

    @property
    def page_count(self) -> int:
        return len(self.pdf_document)

    def add_image_page(
        self,
        image_bytes: bytes,
        slice_height: float,
        page_height_px: float
    ) -> fitz.Page:
        """
        Append a page showing one captured slice, anchored top-left.

        A slice taller than one page is shrunk uniformly to fit.

        Args:
            image_bytes: PNG of the slice at full viewport width
            slice_height: Slice height in document pixels
            page_height_px: Document pixels per page

        Returns:
            The new page

        Raises:
            PDFCompositionError: If the image cannot be embedded
        """
        fit = slice_fit_scale(slice_height, page_height_px)
        image_height = self.page_height * (slice_height / page_height_px) * fit
        rect = fitz.Rect(0, 0, self.page_width * fit, min(image_height, self.page_height))

        page = None
        try:
            page = self.pdf_document.new_page(width=self.page_width, height=self.page_height)
            page.insert_image(rect, stream=image_bytes, keep_proportion=False)
        except Exception as e:
            if page is not None:
                self.pdf_document.delete_page(page.number)
            error_msg = f"Failed to add page {self.page_count}: {str(e)}"
            logger.error(error_msg)
            raise PDFCompositionError(error_msg) from e

        logger.debug(
            f"Added page {page.number + 1}: slice {slice_height:.0f}px, fit {fit:.3f}"
        )
        return page

    def _draw_instruction(
        self,
        page: fitz.Page,
        instruction: DrawInstruction,
        fonts: OutputFonts
    ) -> None:
        fontname = fonts.fontname_for(instruction.bold)
        if instruction.visible:
            page.insert_text(
                fitz.Point(instruction.x, instruction.y),
                instruction.text,
                fontsize=instruction.font_size,
                fontname=fontname,
                color=DEBUG_COLOR,
                fill_opacity=DEBUG_OPACITY
            )
        else:
            page.insert_text(
                fitz.Point(instruction.x, instruction.y),
                instruction.text,
                fontsize=instruction.font_size,
                fontname=fontname,
                render_mode=INVISIBLE_RENDER_MODE
            )

    def overlay_text(
        self,
        instructions: Sequence[DrawInstruction],
        fonts: OutputFonts
    ) -> int:
        """
        Draw text instructions on their pages.

        Instructions for missing pages and strings that fail to draw are
        skipped and logged.

        Args:
            instructions: Draw instructions from the text reconciler
            fonts: Fonts used to measure the instructions

        Returns:
            Number of strings drawn
        """
        pages_dict: Dict[int, List[DrawInstruction]] = {}
        for instruction in instructions:
            pages_dict.setdefault(instruction.page_index, []).append(instruction)

        drawn = 0
        for page_num in sorted(pages_dict.keys()):
            if page_num < 0 or page_num >= self.page_count:
                logger.warning(
                    f"Skipping {len(pages_dict[page_num])} instruction(s) for missing page {page_num}"
                )
                continue

            page = self.pdf_document[page_num]
            fonts.register(page)
            for instruction in pages_dict[page_num]:
                try:
                    self._draw_instruction(page, instruction, fonts)
                    drawn += 1
                except Exception as e:
                    logger.warning(
                        f"Skipped text item {instruction.text[:20]!r} on page {page_num}: {e}"
                    )

        logger.info(f"Overlaid {drawn}/{len(instructions)} text items on {len(pages_dict)} page(s)")
        return drawn

    def save(self, output_path: Path) -> Path:
        """
        Save the composed PDF.

        Raises:
            PDFCompositionError: If there is nothing to save or saving fails
        """
        if self.page_count == 0:
            raise PDFCompositionError("Cannot save a PDF without pages")

        output_path = Path(output_path)
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            self.pdf_document.save(output_path, garbage=3, deflate=True)
            self.output_path = output_path
            logger.info(f"PDF saved successfully: {output_path}")
            return output_path
        except Exception as e:
            error_msg = f"Failed to save PDF: {str(e)}"
            logger.error(error_msg)
            raise PDFCompositionError(error_msg) from e

    def close(self) -> None:
        self.pdf_document.close()
