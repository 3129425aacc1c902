import pytest

from block_filter import BlockFilter
from models import ContentBlock


def test_select_drops_small_and_duplicate_blocks() -> None:
    blocks = [
        ContentBlock(".section", 400, 300),
        ContentBlock("h2", 10, 40),
        ContentBlock(".section", 0, 350),
        ContentBlock(".project-item", 0, 350),
    ]
    selected = BlockFilter(min_section_height=100).select(blocks)
    assert [(b.top_y, b.height) for b in selected] == [(0, 350), (400, 300)]


def test_select_puts_containers_before_children_at_same_top() -> None:
    child = ContentBlock(".experience-item", 100, 200)
    parent = ContentBlock(".section", 100, 900)
    selected = BlockFilter(100).select([child, parent])
    assert selected == [parent, child]


def test_coverage_ratio() -> None:
    block_filter = BlockFilter()
    a = ContentBlock("a", 0, 200)
    b = ContentBlock("b", 100, 400)
    c = ContentBlock("c", 500, 100)
    assert block_filter.calculate_coverage_ratio(a, b) == pytest.approx(0.5)
    assert block_filter.calculate_coverage_ratio(a, c) == 0.0


def test_detect_overlaps_ignores_nesting() -> None:
    blocks = [
        ContentBlock(".section", 0, 1000),
        ContentBlock(".experience-item", 100, 300),
        ContentBlock(".experience-item", 350, 200),  # overlaps the previous item by 50px
    ]
    block_filter = BlockFilter(overlap_threshold=0.2)
    assert block_filter.detect_overlaps(blocks) == [(1, 2, pytest.approx(0.25))]


def test_leaf_blocks() -> None:
    section = ContentBlock(".section", 0, 1000)
    first = ContentBlock(".experience-item", 100, 300)
    second = ContentBlock(".experience-item", 500, 300)
    assert BlockFilter().leaf_blocks([section, first, second]) == [first, second]


def test_blocks_cut_at_excludes_edges() -> None:
    block = ContentBlock(".section", 100, 300)
    block_filter = BlockFilter()
    assert block_filter.blocks_cut_at(250, [block]) == [block]
    assert block_filter.blocks_cut_at(100, [block]) == []
    assert block_filter.blocks_cut_at(400, [block]) == []


def test_invalid_arguments() -> None:
    with pytest.raises(ValueError):
        BlockFilter(min_section_height=-1)
    with pytest.raises(ValueError):
        BlockFilter(overlap_threshold=1.5)


def test_covers() -> None:
    section = ContentBlock(".section", 0, 1000)
    item = ContentBlock(".experience-item", 100, 300)
    block_filter = BlockFilter()
    assert block_filter.covers(section, item)
    assert block_filter.covers(section, section)
    assert not block_filter.covers(item, section)
