"""Custom exception classes for CV PDF generation errors."""

from __future__ import annotations


class CVPdfError(Exception):
    """Base exception for CV PDF generation errors."""
    pass


class SlicePlanError(CVPdfError):
    """Raised when a slice plan would duplicate or skip content."""
    pass


class RenderSurfaceError(CVPdfError):
    """Raised when the headless browser cannot load, measure or capture the page."""
    pass


class PDFValidationError(CVPdfError):
    """Raised when PDF path validation fails."""
    pass


class PDFReadError(CVPdfError):
    """Raised when PDF cannot be opened."""
    pass


class PDFCompositionError(CVPdfError):
    """Raised when page creation, image embedding or saving fails."""
    pass


class JSONExportError(CVPdfError):
    """Raised when JSON export fails."""
    pass
