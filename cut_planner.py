"""Page boundary planning for a single-column, vertically flowing document."""

from __future__ import annotations

import bisect
import logging
from typing import List, Optional, Sequence

from block_filter import BlockFilter
from config import PaginationConfig
from exceptions import SlicePlanError
from models import ContentBlock, SlicePlan

logger = logging.getLogger(__name__)


def derive_cut_points(
    blocks: Sequence[ContentBlock],
    block_filter: BlockFilter
) -> List[float]:
    """
    Compute the document-space Y offsets where a page boundary is safe.

    A cut point sits midway between the top of a block and the furthest-down
    bottom edge among the blocks that end above it, so the whitespace between
    sections is split across the two pages. The top of the document is always
    a cut point. A block with nothing ending above it yields no cut point, and
    neither does a midpoint inside a block that does not contain the
    following one.

    Args:
        blocks: Measured content blocks, in any order
        block_filter: Filter selecting the blocks that matter

    Returns:
        Sorted, de-duplicated cut points starting with 0
    """
    selected = block_filter.select(blocks)
    block_filter.detect_overlaps(selected)

    points = {0.0}
    for following in selected:
        ended_above = [b.bottom_y for b in selected if b.bottom_y <= following.top_y]
        if not ended_above:
            continue

        candidate = (max(ended_above) + following.top_y) / 2
        if any(
            not block_filter.covers(block, following)
            for block in block_filter.blocks_cut_at(candidate, selected)
        ):
            # Would slice through a block that overlaps the following one
            continue
        points.add(candidate)

    cut_points = sorted(points)
    logger.debug(f"Derived {len(cut_points)} cut points from {len(selected)} blocks")
    return cut_points


def validate_plan(scroll_positions: Sequence[float], page_height: float) -> None:
    """
    Check that consecutive offsets are at least one page apart.

    Raises:
        SlicePlanError: If the plan would duplicate content between pages
    """
    if not scroll_positions or scroll_positions[0] != 0:
        raise SlicePlanError(f"Slice plan must start at 0: {list(scroll_positions)}")

    for previous, following in zip(scroll_positions, scroll_positions[1:]):
        if following - previous < page_height:
            raise SlicePlanError(
                f"Slices at {previous} and {following} are closer than one page "
                f"({page_height}px)"
            )


def plan_slices(
    blocks: Sequence[ContentBlock],
    total_height: float,
    page_height: float,
    tolerance: float = 150.0,
    min_section_height: float = 100.0
) -> List[float]:
    """
    Compute the scroll offsets at which each page slice starts.

    Each slice is at least one page tall. When a cut point lies within
    ``tolerance`` pixels past the ideal boundary, the nearest one is used;
    otherwise the boundary is forced at exactly one page height.

    Args:
        blocks: Measured content blocks
        total_height: Full content height of the document
        page_height: Document pixels per output page
        tolerance: Forward search window past the ideal boundary
        min_section_height: Blocks shorter than this are ignored

    Returns:
        Strictly increasing offsets, first element 0

    Raises:
        ValueError: If page_height is not positive or tolerance is negative
        SlicePlanError: If the resulting plan violates the no-overlap rule
    """
    if page_height <= 0:
        raise ValueError(f"page_height must be positive, got {page_height}")

    if tolerance < 0:
        raise ValueError(f"tolerance must be non-negative, got {tolerance}")

    block_filter = BlockFilter(min_section_height)
    cut_points = derive_cut_points(blocks, block_filter)
    leaves = block_filter.leaf_blocks(block_filter.select(blocks))

    positions: List[float] = [0.0]
    current = 0.0
    while True:
        ideal = current + page_height
        if ideal >= total_height:
            break

        # Smallest cut point at or past the ideal boundary, within tolerance
        idx = bisect.bisect_left(cut_points, ideal)
        if idx < len(cut_points) and cut_points[idx] <= ideal + tolerance:
            following = cut_points[idx]
            logger.debug(f"Snapped boundary {ideal:.1f} -> {following:.1f}")
        else:
            following = ideal
            sliced = block_filter.blocks_cut_at(ideal, leaves)
            logger.warning(
                f"No safe cut point within {tolerance:.0f}px after {ideal:.1f}, "
                f"forcing an even cut"
                + (f" through {', '.join(b.selector_class for b in sliced)}" if sliced else "")
            )

        positions.append(following)
        current = following

    validate_plan(positions, page_height)
    logger.info(f"Planned {len(positions)} page(s): {[round(p, 1) for p in positions]}")
    return positions


def slice_fit_scale(slice_height: float, page_height: float) -> float:
    """Uniform shrink factor that fits a slice taller than one page onto the page."""
    if slice_height <= page_height:
        return 1.0
    return page_height / slice_height


class SlicePlanner:
    """Plan page slices for a rendered document using pagination settings."""

    def __init__(self, config: Optional[PaginationConfig] = None):
        self.config = config or PaginationConfig()

    def plan(self, blocks: Sequence[ContentBlock], total_height: float) -> SlicePlan:
        page_height = self.config.page_height
        positions = plan_slices(
            blocks,
            total_height,
            page_height,
            tolerance=self.config.tolerance,
            min_section_height=self.config.min_section_height
        )
        return SlicePlan(
            scroll_positions=tuple(positions),
            total_height=total_height,
            page_height=page_height
        )
