"""Data models for page slicing and text rehydration."""

from __future__ import annotations

import math
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

HEADING_TAGS = ("h1", "h2", "h3", "h4", "h5", "h6")


@dataclass(frozen=True)
class ContentBlock:
    """A structural region of the document treated as atomic for pagination."""
    selector_class: str
    top_y: float  # absolute document-space top, in CSS pixels
    height: float

    def __post_init__(self) -> None:
        """Validate ContentBlock geometry after initialization."""
        if not (math.isfinite(self.top_y) and math.isfinite(self.height)):
            raise ValueError(
                f"Block geometry must be finite, got top={self.top_y} height={self.height}"
            )

        if self.height <= 0:
            raise ValueError(f"Block height must be positive, got {self.height}")

    @property
    def bottom_y(self) -> float:
        return self.top_y + self.height


@dataclass(frozen=True)
class BoundingBox:
    """One client rect reported by the browser, in document space."""
    left: float
    top: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0


@dataclass(frozen=True)
class TextRun:
    """
    Geometry and style of one DOM text node.

    A node that wraps onto N visual lines carries N rects. When the rendering
    surface was able to resolve which characters sit on which line,
    ``line_texts`` holds one string per rect.
    """
    text: str
    rects: Tuple[BoundingBox, ...]
    font_size: float
    font_weight: str = "400"
    font_family: str = ""
    element_type: str = "body"  # "heading" or "body"
    tag_name: str = ""
    text_transform: str = "none"
    line_texts: Optional[Tuple[str, ...]] = None

    def __post_init__(self) -> None:
        """Validate TextRun data after initialization."""
        if not self.text.strip():
            raise ValueError("TextRun text must not be empty")

        if self.element_type not in ("heading", "body"):
            raise ValueError(f"Unknown element type: {self.element_type}")

        if self.font_size <= 0:
            raise ValueError(f"Font size must be positive, got {self.font_size}")

    @property
    def type_key(self) -> str:
        """Key into the per-element-type correction tables (h1..h6 or body)."""
        if self.element_type == "heading" and self.tag_name in HEADING_TAGS:
            return self.tag_name
        return "body"

    @property
    def is_bold(self) -> bool:
        weight = str(self.font_weight).strip().lower()
        if weight in ("bold", "bolder"):
            return True
        try:
            return int(float(weight)) >= 600
        except ValueError:
            return False

    def estimated_baseline(self, rect: BoundingBox, ascent_ratio: float = 0.75) -> float:
        return rect.top + ascent_ratio * self.font_size

    def estimated_descent(self, descent_ratio: float = 0.203) -> float:
        return descent_ratio * self.font_size


@dataclass(frozen=True)
class PageSlice:
    """One vertical segment of the document that becomes one output page."""
    index: int
    top: float
    height: float

    @property
    def bottom(self) -> float:
        return self.top + self.height

    def contains(self, y: float) -> bool:
        return self.top <= y < self.bottom


@dataclass(frozen=True)
class SlicePlan:
    """Ordered scroll offsets at which the document is captured, one per page."""
    scroll_positions: Tuple[float, ...]
    total_height: float
    page_height: float

    @property
    def page_count(self) -> int:
        return len(self.scroll_positions)

    def slices(self) -> Iterator[PageSlice]:
        positions = self.scroll_positions
        for index, top in enumerate(positions):
            if index + 1 < len(positions):
                bottom = positions[index + 1]
            else:
                bottom = max(self.total_height, top + 1)
            yield PageSlice(index=index, top=top, height=bottom - top)

    def slice_for(self, y: float) -> Optional[PageSlice]:
        """Return the slice containing document-space ``y``, or None past the end."""
        if y < 0:
            return None
        for page_slice in self.slices():
            if page_slice.contains(y):
                return page_slice
        return None


@dataclass(frozen=True)
class DrawInstruction:
    """A text string to draw on an already-rasterized page."""
    page_index: int
    x: float  # PDF points
    y: float  # PDF points, baseline
    font_size: float
    text: str
    bold: bool = False
    visible: bool = False  # debug overlay instead of invisible text


@dataclass
class ReconcileSummary:
    """Counters reported after one reconciliation run."""
    total_lines: int = 0
    processed: int = 0
    skipped_out_of_bounds: int = 0
    skipped_empty: int = 0
    adjusted: int = 0
    measurement_failures: int = 0

    def as_dict(self) -> Dict[str, int]:
        return {
            "total_lines": self.total_lines,
            "processed": self.processed,
            "skipped_out_of_bounds": self.skipped_out_of_bounds,
            "skipped_empty": self.skipped_empty,
            "adjusted": self.adjusted,
            "measurement_failures": self.measurement_failures,
        }


@dataclass
class ReconcileResult:
    instructions: List[DrawInstruction] = field(default_factory=list)
    summary: ReconcileSummary = field(default_factory=ReconcileSummary)

    def by_page(self) -> Dict[int, List[DrawInstruction]]:
        pages: Dict[int, List[DrawInstruction]] = defaultdict(list)
        for instruction in self.instructions:
            pages[instruction.page_index].append(instruction)
        return dict(pages)
