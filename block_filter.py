"""Content block filtering and overlap analysis using Shapely."""

from __future__ import annotations

import logging
from typing import List, Sequence, Tuple

from shapely.geometry import Point, Polygon, box

from models import ContentBlock

logger = logging.getLogger(__name__)

# Blocks are projected onto the vertical axis as unit-width boxes, so that
# polygon area equals block height.
_AXIS_WIDTH = 1.0


class BlockFilter:
    """Select the content blocks that constrain pagination and check cut safety."""

    def __init__(self, min_section_height: float = 100.0, overlap_threshold: float = 0.5):
        """
        Initialize BlockFilter.

        Args:
            min_section_height: Blocks shorter than this are ignored (inline noise)
            overlap_threshold: Minimum coverage ratio reported as an overlap (0.0-1.0)
        """
        if min_section_height < 0:
            raise ValueError("min_section_height must be non-negative")

        if not 0.0 <= overlap_threshold <= 1.0:
            raise ValueError("overlap_threshold must be between 0.0 and 1.0")

        self.min_section_height = min_section_height
        self.overlap_threshold = overlap_threshold

    def _block_to_polygon(self, block: ContentBlock) -> Polygon:
        return box(0.0, block.top_y, _AXIS_WIDTH, block.bottom_y)

    def calculate_coverage_ratio(self, block1: ContentBlock, block2: ContentBlock) -> float:
        """
        Calculate coverage ratio between two blocks.

        Coverage ratio = intersection_area / min(area1, area2)

        Returns:
            Coverage ratio (0.0-1.0)
        """
        poly1 = self._block_to_polygon(block1)
        poly2 = self._block_to_polygon(block2)

        if not poly1.intersects(poly2):
            return 0.0

        intersection_area = poly1.intersection(poly2).area
        min_area = min(poly1.area, poly2.area)
        if min_area < 1e-10:
            return 0.0

        return intersection_area / min_area

    def select(self, blocks: Sequence[ContentBlock]) -> List[ContentBlock]:
        """
        Drop blocks below the minimum height and duplicates, sorted by top.

        Args:
            blocks: Candidate blocks measured on the rendered page

        Returns:
            Blocks that take part in cut-point derivation
        """
        seen = set()
        selected = []
        for block in blocks:
            if block.height < self.min_section_height:
                continue
            key = (block.top_y, block.height)
            if key in seen:
                # Same box matched by several selectors (e.g. a section and its h2)
                continue
            seen.add(key)
            selected.append(block)

        selected.sort(key=lambda b: (b.top_y, -b.height))
        logger.debug(
            f"Selected {len(selected)}/{len(blocks)} blocks "
            f"(min height {self.min_section_height}px)"
        )
        return selected

    def detect_overlaps(self, blocks: Sequence[ContentBlock]) -> List[Tuple[int, int, float]]:
        """
        Detect blocks that partially overlap without one containing the other.

        Nesting (a section holding its items) is normal document structure and
        is not reported.

        Returns:
            List of tuples (index1, index2, coverage_ratio)
        """
        overlaps = []
        polygons = [self._block_to_polygon(block) for block in blocks]

        for i in range(len(blocks)):
            for j in range(i + 1, len(blocks)):
                poly_i, poly_j = polygons[i], polygons[j]
                if poly_i.covers(poly_j) or poly_j.covers(poly_i):
                    continue

                coverage_ratio = self.calculate_coverage_ratio(blocks[i], blocks[j])
                if coverage_ratio > 0.0 and coverage_ratio >= self.overlap_threshold:
                    overlaps.append((i, j, coverage_ratio))
                    logger.warning(
                        f"Overlapping blocks {blocks[i].selector_class}@{blocks[i].top_y:.0f} and "
                        f"{blocks[j].selector_class}@{blocks[j].top_y:.0f} "
                        f"(coverage: {coverage_ratio:.2f})"
                    )

        return overlaps

    def leaf_blocks(self, blocks: Sequence[ContentBlock]) -> List[ContentBlock]:
        """Return the blocks that contain no other block."""
        polygons = [self._block_to_polygon(block) for block in blocks]
        leaves = []
        for i, block in enumerate(blocks):
            is_container = any(
                i != j and polygons[i].covers(polygons[j])
                for j in range(len(blocks))
            )
            if not is_container:
                leaves.append(block)
        return leaves

    def covers(self, outer: ContentBlock, inner: ContentBlock) -> bool:
        """True when ``outer`` spans the whole of ``inner``."""
        return self._block_to_polygon(outer).covers(self._block_to_polygon(inner))

    def blocks_cut_at(self, y: float, blocks: Sequence[ContentBlock]) -> List[ContentBlock]:
        """Return the blocks a page boundary at ``y`` would slice through."""
        probe = Point(_AXIS_WIDTH / 2, y)
        return [block for block in blocks if self._block_to_polygon(block).contains(probe)]
