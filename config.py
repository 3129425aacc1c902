"""Immutable configuration for pagination, positioning, fonts and rendering."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple

# A4 in PDF points (210mm x 297mm at 72 DPI)
A4_WIDTH_PT = 595.28
A4_HEIGHT_PT = 841.89

BASELINE_STRATEGIES = ("baseline", "bottom", "top", "auto")

# Multiplicative font-size corrections per element type
FONT_SIZE_PRESETS: Mapping[str, Mapping[str, float]] = MappingProxyType({
    "tight": MappingProxyType({
        "h1": 1.25, "h2": 1.20, "h3": 1.15, "h4": 1.10, "h5": 1.05, "h6": 1.02, "body": 0.92,
    }),
    "normal": MappingProxyType({
        "h1": 1.20, "h2": 1.15, "h3": 1.10, "h4": 1.05, "h5": 1.02, "h6": 1.00, "body": 0.95,
    }),
    "loose": MappingProxyType({
        "h1": 1.15, "h2": 1.12, "h3": 1.08, "h4": 1.04, "h5": 1.01, "h6": 0.98, "body": 0.98,
    }),
})

_ZERO_OFFSETS = MappingProxyType({
    "h1": 0.0, "h2": 0.0, "h3": 0.0, "h4": 0.0, "h5": 0.0, "h6": 0.0, "body": 0.0,
})


@dataclass(frozen=True)
class PageFormat:
    width_pt: float = A4_WIDTH_PT
    height_pt: float = A4_HEIGHT_PT

    @property
    def ratio(self) -> float:
        return self.height_pt / self.width_pt


@dataclass(frozen=True)
class PaginationConfig:
    """Settings for the cut-point planner."""
    viewport_width: int = 900
    a4_ratio: float = PageFormat().ratio
    min_section_height: float = 100.0
    tolerance: float = 150.0
    break_selectors: Tuple[str, ...] = (".section", ".experience-item", ".project-item", "h2")

    def __post_init__(self) -> None:
        if self.viewport_width <= 0:
            raise ValueError(f"viewport_width must be positive, got {self.viewport_width}")
        if self.tolerance < 0:
            raise ValueError(f"tolerance must be non-negative, got {self.tolerance}")
        if self.min_section_height < 0:
            raise ValueError(
                f"min_section_height must be non-negative, got {self.min_section_height}"
            )

    @property
    def page_height(self) -> int:
        """Height in CSS pixels of the document slice that fills one A4 page."""
        return round(self.viewport_width * self.a4_ratio)


@dataclass(frozen=True)
class PositioningConfig:
    """Settings for converting text boxes into draw instructions."""
    strategy: str = "baseline"
    offset_x: float = 0.0
    offset_y: float = 0.0
    offsets_by_type: Mapping[str, float] = field(default_factory=lambda: _ZERO_OFFSETS)
    font_size_adjust: float = 1.0
    font_size_adjustments: Mapping[str, float] = field(
        default_factory=lambda: FONT_SIZE_PRESETS["normal"]
    )
    ascent_ratio: float = 0.75
    descent_ratio: float = 0.203  # Inter descent
    auto_descent_ratio: float = 0.15
    adjust_font_size_to_width: bool = True
    min_width_ratio: float = 0.7
    max_width_ratio: float = 1.5
    flip_y: bool = False  # True for bottom-left origin output

    def __post_init__(self) -> None:
        if self.strategy not in BASELINE_STRATEGIES:
            raise ValueError(
                f"Unsupported baseline strategy: {self.strategy}. "
                f"Choose one of {', '.join(BASELINE_STRATEGIES)}"
            )
        if not 0 < self.min_width_ratio <= 1.0 <= self.max_width_ratio:
            raise ValueError(
                f"Invalid width ratio bounds: {self.min_width_ratio}-{self.max_width_ratio}"
            )

    def offset_for(self, type_key: str) -> float:
        return self.offset_y + self.offsets_by_type.get(type_key, 0.0)

    def font_multiplier_for(self, type_key: str) -> float:
        return self.font_size_adjust * self.font_size_adjustments.get(type_key, 1.0)

    def with_preset(self, name: str) -> "PositioningConfig":
        if name not in FONT_SIZE_PRESETS:
            raise ValueError(f"Unknown preset: {name}")
        return replace(self, font_size_adjustments=FONT_SIZE_PRESETS[name])

    def with_type_offsets(self, **offsets: Optional[float]) -> "PositioningConfig":
        """Return a copy with the given per-type offsets (None values are ignored)."""
        merged: Dict[str, float] = dict(self.offsets_by_type)
        for key, value in offsets.items():
            if value is not None:
                merged[key] = value
        return replace(self, offsets_by_type=MappingProxyType(merged))


@dataclass(frozen=True)
class FontConfig:
    """Optional TrueType files closer to the page webfont than Helvetica."""
    regular_path: Optional[str] = None
    bold_path: Optional[str] = None


@dataclass(frozen=True)
class RenderConfig:
    """Settings for the headless browser rendering surface."""
    viewport_height: int = 1273
    device_scale_factor: float = 2.0
    navigation_timeout_ms: int = 30000
    fonts_timeout_ms: int = 10000
    settle_ms: int = 500
    hide_selectors: Tuple[str, ...] = (
        "#print-btn", "#toggle", "#lang-button", ".lang-dropdown", ".top-right-buttons",
    )
    pdf_mode_class: str = "pdf-mode"
    precise_lines: bool = False


@dataclass(frozen=True)
class AppConfig:
    pagination: PaginationConfig = field(default_factory=PaginationConfig)
    positioning: PositioningConfig = field(default_factory=PositioningConfig)
    fonts: FontConfig = field(default_factory=FontConfig)
    render: RenderConfig = field(default_factory=RenderConfig)
    page: PageFormat = field(default_factory=PageFormat)
    debug: bool = False

    @property
    def scale_x(self) -> float:
        """PDF points per CSS pixel horizontally."""
        return self.page.width_pt / self.pagination.viewport_width

    @property
    def scale_y(self) -> float:
        """PDF points per CSS pixel vertically."""
        return self.page.height_pt / self.pagination.page_height
