"""Open and inspect an existing screenshot PDF for rehydrate-only runs."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import fitz  # PyMuPDF

from exceptions import PDFReadError, PDFValidationError

logger = logging.getLogger(__name__)

# Page sizes closer than this (in points) count as identical
SIZE_TOLERANCE_PT = 0.5


class PDFReader:
    """Hold a raster PDF open so a text layer can be drawn onto its pages."""

    def __init__(self, pdf_path: Path):
        self.pdf_path = Path(pdf_path)
        self.pdf_document: Optional[fitz.Document] = None
        self.pdf_name = self.pdf_path.name

    def validate_path(self) -> bool:
        """
        Check that the path names an existing ``.pdf`` file.

        Raises:
            PDFValidationError: On the first failed check
        """
        checks = (
            (self.pdf_path.exists(), "PDF file not found"),
            (self.pdf_path.is_file(), "Path is not a file"),
            (self.pdf_path.suffix.lower() == '.pdf', "File is not a PDF"),
        )
        for passed, message in checks:
            if not passed:
                error_msg = f"{message}: {self.pdf_path}"
                logger.error(error_msg)
                raise PDFValidationError(error_msg)

        logger.debug(f"PDF path validated: {self.pdf_path}")
        return True

    def open_pdf(self) -> fitz.Document:
        """
        Open the PDF and sanity-check it as a page-image document.

        Returns:
            The opened PyMuPDF Document

        Raises:
            PDFReadError: If the file cannot be opened or has no pages
        """
        try:
            document = fitz.open(self.pdf_path)
        except Exception as e:
            error_msg = f"Failed to open PDF: {self.pdf_path}. Error: {str(e)}"
            logger.error(error_msg)
            raise PDFReadError(error_msg) from e

        if document.page_count == 0:
            document.close()
            raise PDFReadError(f"PDF has no pages: {self.pdf_path}")

        self.pdf_document = document
        self._warn_mixed_page_sizes()
        pages_with_text = self.pages_with_text()
        if pages_with_text:
            logger.warning(
                f"{self.pdf_name} already has text on page(s) "
                f"{', '.join(str(n + 1) for n in pages_with_text)}; "
                f"the new text layer will be added on top"
            )

        logger.info(f"Opened {self.pdf_name} ({document.page_count} pages)")
        return document

    def _require_document(self) -> fitz.Document:
        if self.pdf_document is None:
            raise PDFReadError("PDF document not opened. Call open_pdf() first.")
        return self.pdf_document

    def get_page_dimensions(self, page_num: int = 0) -> Tuple[float, float]:
        """Width and height of one page in points (0-indexed page number)."""
        document = self._require_document()
        if not 0 <= page_num < document.page_count:
            raise ValueError(f"Invalid page number: {page_num}")

        rect = document[page_num].rect
        return rect.width, rect.height

    def _warn_mixed_page_sizes(self) -> None:
        width, height = self.get_page_dimensions(0)
        for page in self.pdf_document:
            if (abs(page.rect.width - width) > SIZE_TOLERANCE_PT
                    or abs(page.rect.height - height) > SIZE_TOLERANCE_PT):
                logger.warning(
                    f"Page {page.number + 1} is {page.rect.width:.1f}x{page.rect.height:.1f}pt, "
                    f"first page is {width:.1f}x{height:.1f}pt; text uses the first page size"
                )

    def pages_with_text(self) -> List[int]:
        """Indexes of pages that already carry extractable text."""
        document = self._require_document()
        return [page.number for page in document if page.get_text().strip()]

    def get_pdf_metadata(self) -> Dict[str, Any]:
        """
        Summarize the open document.

        Raises:
            PDFReadError: If the PDF is not opened
        """
        document = self._require_document()
        width, height = self.get_page_dimensions(0)
        return {
            'pdf_name': self.pdf_name,
            'total_pages': document.page_count,
            'page_width': width,
            'page_height': height,
            'metadata': document.metadata
        }

    def close(self) -> None:
        if self.pdf_document is not None:
            self.pdf_document.close()
            self.pdf_document = None
            logger.debug(f"Closed {self.pdf_name}")
