"""Map DOM text boxes onto rasterized pages as invisible draw instructions."""

from __future__ import annotations

import logging
import math
from typing import List, Optional, Protocol, Sequence, Tuple

from config import PositioningConfig
from cut_planner import slice_fit_scale
from models import (
    BoundingBox,
    DrawInstruction,
    ReconcileResult,
    ReconcileSummary,
    SlicePlan,
    TextRun,
)
from text_sanitizer import apply_text_transform, sanitize_text

logger = logging.getLogger(__name__)


class TextMeasurer(Protocol):
    def text_width(self, text: str, font_size: float, bold: bool = False) -> float:
        ...


def split_text_evenly(text: str, parts: int) -> List[str]:
    """
    Split ``text`` into ``parts`` segments of (nearly) equal character count.

    This approximates which characters sit on which visual line when the
    browser only reports one box per line. Word boundaries are not respected.
    """
    if parts <= 1:
        return [text]

    length = len(text)
    bounds = [round(i * length / parts) for i in range(parts + 1)]
    return [text[bounds[i]:bounds[i + 1]] for i in range(parts)]


def split_run_lines(run: TextRun) -> List[Tuple[BoundingBox, str]]:
    """
    Pair each visual line box of a run with the text drawn on it.

    Exact per-line text from the rendering surface is used when it matches the
    number of boxes; otherwise the run text is split evenly across the
    non-empty boxes. Empty boxes are paired with an empty string.
    """
    rects = list(run.rects)
    if run.line_texts is not None and len(run.line_texts) == len(rects):
        return [(rect, line.strip()) for rect, line in zip(rects, run.line_texts)]

    visible = [rect for rect in rects if not rect.is_empty]
    segments = iter(split_text_evenly(run.text, len(visible)))
    lines = []
    for rect in rects:
        if rect.is_empty:
            lines.append((rect, ""))
        else:
            lines.append((rect, next(segments).strip()))
    return lines


def locate_line(rect_top: float, page_height: float) -> Tuple[int, float]:
    """Return (page_index, relative_y) for a line at document-space ``rect_top``."""
    page_index = math.floor(rect_top / page_height)
    return page_index, rect_top - page_index * page_height


def correct_font_size(
    font_size: float,
    expected_width: float,
    measured_width: float,
    min_ratio: float = 0.7,
    max_ratio: float = 1.5
) -> Optional[float]:
    """
    Scale ``font_size`` so the measured width matches the expected width.

    Returns:
        The corrected size, or None when the ratio is outside the sane bounds
        or the measurement is unusable
    """
    if measured_width <= 0 or expected_width <= 0:
        return None

    ratio = expected_width / measured_width
    if min_ratio <= ratio <= max_ratio:
        return font_size * ratio
    return None


class TextReconciler:
    """Compute draw instructions for the text layer of rasterized pages."""

    def __init__(
        self,
        config: Optional[PositioningConfig] = None,
        measurer: Optional[TextMeasurer] = None,
        debug: bool = False
    ):
        """
        Initialize TextReconciler.

        Args:
            config: Baseline strategy, offsets and font-size tables
            measurer: Output font metrics; width correction is skipped without one
            debug: Emit visible instructions for alignment checks
        """
        self.config = config or PositioningConfig()
        self.measurer = measurer
        self.debug = debug

    def _baseline(self, run: TextRun, rect: BoundingBox) -> float:
        """Document-space Y at which glyphs of this line sit."""
        config = self.config
        if config.strategy == "baseline":
            return run.estimated_baseline(rect, config.ascent_ratio)
        if config.strategy == "bottom":
            return rect.bottom - run.estimated_descent(config.descent_ratio)
        if config.strategy == "auto":
            return rect.bottom - rect.height * config.auto_descent_ratio
        return rect.top + run.font_size

    def _fit_font_size(
        self,
        text: str,
        font_size: float,
        expected_width: float,
        bold: bool,
        summary: ReconcileSummary
    ) -> float:
        if self.measurer is None or not self.config.adjust_font_size_to_width:
            return font_size

        try:
            measured = self.measurer.text_width(text, font_size, bold)
        except Exception as e:
            summary.measurement_failures += 1
            logger.warning(f"Width measurement failed for {text[:30]!r}: {e}")
            return font_size

        corrected = correct_font_size(
            font_size,
            expected_width,
            measured,
            self.config.min_width_ratio,
            self.config.max_width_ratio
        )
        if corrected is None:
            logger.debug(
                f"Width ratio out of bounds for {text[:30]!r} "
                f"(expected {expected_width:.1f}pt, measured {measured:.1f}pt)"
            )
            return font_size

        summary.adjusted += 1
        return corrected

    def reconcile(
        self,
        runs: Sequence[TextRun],
        page_height: float,
        scale_x: float,
        scale_y: float,
        page_count: int,
        slice_plan: Optional[SlicePlan] = None
    ) -> ReconcileResult:
        """
        Produce one draw instruction per visual line of every text run.

        Lines are assigned to pages by even ``page_height`` steps, or by the
        slices of ``slice_plan`` when given. Lines past the last page, empty
        lines and font measurement problems are counted, never raised.

        Args:
            runs: Text runs extracted from the rendered page
            page_height: Document pixels per page
            scale_x: PDF points per document pixel, horizontally
            scale_y: PDF points per document pixel, vertically
            page_count: Number of pages already rendered
            slice_plan: Optional slice plan the pages were captured with

        Returns:
            ReconcileResult with instructions and summary counts
        """
        if page_height <= 0:
            raise ValueError(f"page_height must be positive, got {page_height}")

        config = self.config
        result = ReconcileResult()
        summary = result.summary
        page_height_pt = page_height * scale_y

        for run in runs:
            type_key = run.type_key
            bold = run.is_bold

            for rect, line_text in split_run_lines(run):
                summary.total_lines += 1
                if rect.is_empty or not line_text:
                    summary.skipped_empty += 1
                    continue

                if slice_plan is not None:
                    page_slice = slice_plan.slice_for(rect.top)
                    if page_slice is None:
                        page_index, page_top, fit = page_count, 0.0, 1.0
                    else:
                        page_index, page_top = page_slice.index, page_slice.top
                        fit = slice_fit_scale(page_slice.height, page_height)
                else:
                    page_index, relative_top = locate_line(rect.top, page_height)
                    page_top = rect.top - relative_top
                    fit = 1.0

                if page_index < 0 or page_index >= page_count:
                    summary.skipped_out_of_bounds += 1
                    logger.debug(
                        f"Line {line_text[:30]!r} at y={rect.top:.0f} is past the last page"
                    )
                    continue

                baseline = self._baseline(run, rect) + config.offset_for(type_key)
                x = (rect.left + config.offset_x) * scale_x * fit
                y = (baseline - page_top) * scale_y * fit
                if config.flip_y:
                    y = page_height_pt - y

                font_size = run.font_size * config.font_multiplier_for(type_key) * scale_y * fit

                text = sanitize_text(apply_text_transform(line_text, run.text_transform))
                if not text.strip():
                    summary.skipped_empty += 1
                    continue

                font_size = self._fit_font_size(
                    text, font_size, rect.width * scale_x * fit, bold, summary
                )

                result.instructions.append(DrawInstruction(
                    page_index=page_index,
                    x=x,
                    y=y,
                    font_size=font_size,
                    text=text,
                    bold=bold,
                    visible=self.debug
                ))
                summary.processed += 1

        logger.info(
            f"Reconciled {summary.processed}/{summary.total_lines} text lines "
            f"({summary.skipped_out_of_bounds} out of bounds, {summary.skipped_empty} empty, "
            f"{summary.adjusted} width-adjusted, {summary.measurement_failures} measurement failures)"
        )
        return result


def reconcile(
    runs: Sequence[TextRun],
    page_height: float,
    scale_x: float,
    scale_y: float,
    page_count: int,
    config: Optional[PositioningConfig] = None,
    measurer: Optional[TextMeasurer] = None,
    slice_plan: Optional[SlicePlan] = None,
    debug: bool = False
) -> ReconcileResult:
    """Module-level shortcut for ``TextReconciler(...).reconcile(...)``."""
    reconciler = TextReconciler(config, measurer, debug)
    return reconciler.reconcile(runs, page_height, scale_x, scale_y, page_count, slice_plan)
