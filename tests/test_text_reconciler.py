from typing import List, Optional

import pytest

from config import FONT_SIZE_PRESETS, PositioningConfig
from models import BoundingBox, SlicePlan, TextRun
from text_reconciler import (
    TextReconciler,
    correct_font_size,
    locate_line,
    reconcile,
    split_run_lines,
    split_text_evenly,
)

FLAT_SIZES = {"h1": 1.0, "h2": 1.0, "h3": 1.0, "h4": 1.0, "h5": 1.0, "h6": 1.0, "body": 1.0}


class FixedWidthMeasurer:
    """Reports the same width for any text, recording the calls it gets."""

    def __init__(self, width: float):
        self.width = width
        self.calls: List[tuple] = []

    def text_width(self, text: str, font_size: float, bold: bool = False) -> float:
        self.calls.append((text, font_size, bold))
        return self.width


class BrokenMeasurer:
    def text_width(self, text: str, font_size: float, bold: bool = False) -> float:
        raise RuntimeError("glyph table unavailable")


def _config(strategy: str = "top", **kwargs) -> PositioningConfig:
    return PositioningConfig(strategy=strategy, font_size_adjustments=FLAT_SIZES, **kwargs)


def _run(
    text: str = "Senior Engineer",
    rects: Optional[List[BoundingBox]] = None,
    font_size: float = 10.0,
    **kwargs
) -> TextRun:
    if rects is None:
        rects = [BoundingBox(40, 1050, 200, 14)]
    return TextRun(text=text, rects=tuple(rects), font_size=font_size, **kwargs)


def test_line_is_placed_on_its_page() -> None:
    result = reconcile([_run()], 1000, 1.0, 1.0, 3, config=_config())

    assert len(result.instructions) == 1
    instruction = result.instructions[0]
    assert instruction.page_index == 1
    assert instruction.x == pytest.approx(40)
    # top strategy: rect top (50 on the page) plus the font size
    assert instruction.y == pytest.approx(60)
    assert instruction.font_size == pytest.approx(10)
    assert instruction.visible is False


def test_locate_line() -> None:
    assert locate_line(1050, 1000) == (1, 50)
    assert locate_line(0, 1000) == (0, 0)
    assert locate_line(999.5, 1000) == (0, 999.5)
    assert locate_line(2000, 1000) == (2, 0)


def test_scale_converts_pixels_to_points() -> None:
    result = reconcile([_run()], 1000, 0.5, 0.75, 3, config=_config())
    instruction = result.instructions[0]
    assert instruction.x == pytest.approx(20)
    assert instruction.y == pytest.approx(45)
    assert instruction.font_size == pytest.approx(7.5)


def test_line_past_last_page_is_dropped_and_counted() -> None:
    runs = [
        _run("Kept", [BoundingBox(0, 100, 50, 14)]),
        _run("Dropped", [BoundingBox(0, 3050, 50, 14)]),
    ]
    result = reconcile(runs, 1000, 1.0, 1.0, 3, config=_config())

    assert [i.text for i in result.instructions] == ["Kept"]
    assert result.summary.skipped_out_of_bounds == 1
    assert result.summary.processed == 1
    assert all(0 <= i.page_index < 3 for i in result.instructions)


def test_width_ratio_out_of_bounds_keeps_font_size() -> None:
    measurer = FixedWidthMeasurer(100)
    result = reconcile([_run()], 1000, 1.0, 1.0, 3, config=_config(), measurer=measurer)

    assert result.instructions[0].font_size == pytest.approx(10)
    assert result.summary.adjusted == 0


def test_width_ratio_in_bounds_rescales_font_size() -> None:
    measurer = FixedWidthMeasurer(160)
    result = reconcile([_run()], 1000, 1.0, 1.0, 3, config=_config(), measurer=measurer)

    assert result.instructions[0].font_size == pytest.approx(12.5)
    assert result.summary.adjusted == 1
    assert measurer.calls == [("Senior Engineer", 10.0, False)]


def test_width_adjustment_can_be_disabled() -> None:
    measurer = FixedWidthMeasurer(160)
    config = _config(adjust_font_size_to_width=False)
    result = reconcile([_run()], 1000, 1.0, 1.0, 3, config=config, measurer=measurer)

    assert result.instructions[0].font_size == pytest.approx(10)
    assert measurer.calls == []


def test_corrected_font_size_stays_within_ratio_bounds() -> None:
    for measured in (50, 100, 133.4, 180, 250, 285.7, 400):
        corrected = correct_font_size(10, 200, measured)
        if corrected is not None:
            assert 7.0 <= corrected <= 15.0
    assert correct_font_size(10, 200, 0) is None
    assert correct_font_size(10, 140, 200) == pytest.approx(7.0)
    assert correct_font_size(10, 300, 200) == pytest.approx(15.0)


def test_measurement_failure_is_counted_not_raised() -> None:
    result = reconcile([_run()], 1000, 1.0, 1.0, 3, config=_config(), measurer=BrokenMeasurer())

    assert result.summary.measurement_failures == 1
    assert result.summary.processed == 1
    assert result.instructions[0].font_size == pytest.approx(10)


def test_multi_line_run_is_split_across_rects() -> None:
    run = _run(
        "abcdefgh",
        [BoundingBox(0, 100, 80, 14), BoundingBox(0, 118, 80, 14)],
    )
    result = reconcile([run], 1000, 1.0, 1.0, 1, config=_config())

    assert [i.text for i in result.instructions] == ["abcd", "efgh"]
    assert [i.y for i in result.instructions] == [pytest.approx(110), pytest.approx(128)]
    assert result.summary.total_lines == 2


def test_split_text_evenly() -> None:
    assert split_text_evenly("abcdefg", 1) == ["abcdefg"]
    assert split_text_evenly("abcdefghi", 3) == ["abc", "def", "ghi"]
    parts = split_text_evenly("Led migration of billing services", 4)
    assert len(parts) == 4
    assert "".join(parts) == "Led migration of billing services"


def test_split_run_lines_prefers_line_texts() -> None:
    rects = (BoundingBox(0, 0, 80, 14), BoundingBox(0, 18, 40, 14))
    run = TextRun("Hello big world", rects, 10.0, line_texts=("Hello big ", "world"))
    assert [text for _, text in split_run_lines(run)] == ["Hello big", "world"]


def test_split_run_lines_pairs_empty_rects_with_empty_text() -> None:
    rects = (BoundingBox(0, 0, 80, 14), BoundingBox(0, 14, 0, 0), BoundingBox(0, 18, 80, 14))
    run = TextRun("abcdef", rects, 10.0)
    assert [text for _, text in split_run_lines(run)] == ["abc", "", "def"]


def test_empty_rects_are_skipped() -> None:
    run = _run("abcdef", [BoundingBox(0, 0, 0, 0)])
    result = reconcile([run], 1000, 1.0, 1.0, 1, config=_config())
    assert result.instructions == []
    assert result.summary.skipped_empty == 1


@pytest.mark.parametrize("strategy, expected_y", [
    ("top", 100 + 10),
    ("baseline", 100 + 0.75 * 10),
    ("bottom", 114 - 0.203 * 10),
    ("auto", 114 - 0.15 * 14),
])
def test_baseline_strategies(strategy: str, expected_y: float) -> None:
    run = _run(rects=[BoundingBox(0, 100, 50, 14)])
    result = reconcile([run], 1000, 1.0, 1.0, 1, config=_config(strategy))
    assert result.instructions[0].y == pytest.approx(expected_y)


def test_type_offsets_and_font_multipliers() -> None:
    config = PositioningConfig(strategy="top", offset_x=3, offset_y=1).with_type_offsets(h1=4)
    heading = _run(
        "Jane Doe",
        [BoundingBox(10, 100, 120, 30)],
        font_size=24,
        element_type="heading",
        tag_name="h1",
        font_weight="700",
    )
    body = _run("Paris", [BoundingBox(10, 200, 40, 14)])
    result = reconcile([heading, body], 1000, 1.0, 1.0, 1, config=config)

    h1, text = result.instructions
    assert h1.x == pytest.approx(13)
    assert h1.y == pytest.approx(100 + 24 + 1 + 4)
    assert h1.font_size == pytest.approx(24 * FONT_SIZE_PRESETS["normal"]["h1"])
    assert h1.bold is True
    assert text.y == pytest.approx(200 + 10 + 1)
    assert text.font_size == pytest.approx(10 * FONT_SIZE_PRESETS["normal"]["body"])
    assert text.bold is False


def test_flip_y_uses_bottom_left_origin() -> None:
    result = reconcile([_run()], 1000, 1.0, 1.0, 3, config=_config(flip_y=True))
    assert result.instructions[0].y == pytest.approx(1000 - 60)


def test_text_is_transformed_and_sanitized() -> None:
    run = _run("lead \N{RIGHTWARDS ARROW} manager \N{SNOWMAN}", text_transform="uppercase")
    result = reconcile([run], 1000, 1.0, 1.0, 3, config=_config())
    assert result.instructions[0].text == "LEAD -> MANAGER ?"


def test_slice_plan_places_lines_on_planned_pages() -> None:
    plan = SlicePlan(scroll_positions=(0, 1100), total_height=2000, page_height=1000)
    runs = [
        _run("First", [BoundingBox(0, 1050, 50, 14)]),
        _run("Second", [BoundingBox(0, 1150, 50, 14)]),
    ]
    result = reconcile(runs, 1000, 1.0, 1.0, 2, config=_config(), slice_plan=plan)

    first, second = result.instructions
    fit = 1000 / 1100
    assert first.page_index == 0
    assert first.y == pytest.approx(1060 * fit)
    assert first.font_size == pytest.approx(10 * fit)
    assert second.page_index == 1
    assert second.y == pytest.approx(60)
    assert second.font_size == pytest.approx(10)


def test_debug_mode_emits_visible_instructions() -> None:
    reconciler = TextReconciler(_config(), debug=True)
    result = reconciler.reconcile([_run()], 1000, 1.0, 1.0, 3)
    assert result.instructions[0].visible is True


def test_invalid_page_height() -> None:
    with pytest.raises(ValueError):
        reconcile([_run()], 0, 1.0, 1.0, 3)


def test_by_page_groups_instructions() -> None:
    runs = [
        _run("A", [BoundingBox(0, 10, 10, 14)]),
        _run("B", [BoundingBox(0, 1010, 10, 14)]),
        _run("C", [BoundingBox(0, 20, 10, 14)]),
    ]
    result = reconcile(runs, 1000, 1.0, 1.0, 2, config=_config())
    pages = result.by_page()
    assert [i.text for i in pages[0]] == ["A", "C"]
    assert [i.text for i in pages[1]] == ["B"]
