"""Export the slice plan and text layer summary to JSON format."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from exceptions import JSONExportError
from models import ReconcileResult, SlicePlan

logger = logging.getLogger(__name__)


class JSONExporter:
    """Write a layout report next to the generated PDF."""

    def __init__(self, pdf_path: Path, source_path: Optional[Path] = None):
        """
        Initialize JSONExporter.

        Args:
            pdf_path: Path to the generated PDF file
            source_path: HTML page the PDF was rendered from
        """
        self.pdf_path = Path(pdf_path)
        self.source_path = Path(source_path) if source_path else None

    def _get_output_path(self, filename: Optional[str] = None) -> Path:
        """
        Get output path for JSON file.

        Args:
            filename: Optional custom filename. If None, uses {pdfname}_layout.json.
        """
        if filename is None:
            filename = f"{self.pdf_path.stem}_layout.json"

        if not filename.endswith('.json'):
            filename = f"{filename}.json"

        return self.pdf_path.parent / filename

    def _format_data(
        self,
        result: ReconcileResult,
        plan: Optional[SlicePlan] = None,
        page_count: Optional[int] = None
    ) -> Dict[str, Any]:
        """Build the JSON-ready report structure."""
        per_page = {
            str(page_index + 1): len(items)  # 1-indexed like PDF viewers
            for page_index, items in sorted(result.by_page().items())
        }

        data: Dict[str, Any] = {
            "pdf_name": self.pdf_path.name,
            "source": str(self.source_path) if self.source_path else None,
            "page_count": plan.page_count if plan is not None else page_count,
            "summary": result.summary.as_dict(),
            "instructions_per_page": per_page,
        }

        if plan is not None:
            data["page_height"] = plan.page_height
            data["total_height"] = plan.total_height
            data["scroll_positions"] = list(plan.scroll_positions)
            data["slices"] = [
                {"page": s.index + 1, "top": s.top, "height": s.height}
                for s in plan.slices()
            ]

        return data

    def export(
        self,
        result: ReconcileResult,
        plan: Optional[SlicePlan] = None,
        output_filename: Optional[str] = None,
        page_count: Optional[int] = None
    ) -> Path:
        """
        Export the layout report to a JSON file.

        Args:
            result: Reconcile result of the text layer
            plan: Slice plan, when the pages were captured in this run
            output_filename: Optional custom output filename
            page_count: Page count when no plan is available

        Returns:
            Path to the exported JSON file

        Raises:
            JSONExportError: If export fails
        """
        try:
            output_path = self._get_output_path(output_filename)
            data = self._format_data(result, plan, page_count)

            with open(output_path, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, ensure_ascii=False)

            logger.info(f"JSON exported successfully: {output_path}")
            return output_path

        except Exception as e:
            error_msg = f"Failed to export JSON: {str(e)}"
            logger.error(error_msg)
            raise JSONExportError(error_msg) from e
