"""Headless Chromium rendering surface driven through Playwright."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Sequence

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError
from playwright.sync_api import sync_playwright

from config import PaginationConfig, RenderConfig
from exceptions import RenderSurfaceError
from models import BoundingBox, ContentBlock, TextRun

logger = logging.getLogger(__name__)

_MEASURE_BLOCKS_JS = """
(selectors) => {
  const scrollY = window.pageYOffset || document.documentElement.scrollTop;
  const blocks = [];
  for (const selector of selectors) {
    document.querySelectorAll(selector).forEach(el => {
      const rect = el.getBoundingClientRect();
      if (rect.height > 0) {
        blocks.push({selector: selector, top: rect.top + scrollY, height: rect.height});
      }
    });
  }
  return blocks;
}
"""

_CONTENT_HEIGHT_JS = """
() => Math.max(
  document.documentElement.scrollHeight,
  document.body ? document.body.scrollHeight : 0
)
"""

_PREPARE_JS = """
([theme, pdfClass, hideSelectors]) => {
  if (theme) {
    document.documentElement.setAttribute('data-theme', theme);
  }
  document.documentElement.classList.add(pdfClass);
  if (hideSelectors.length) {
    document.querySelectorAll(hideSelectors.join(',')).forEach(el => {
      el.style.display = 'none';
    });
  }
  const style = document.createElement('style');
  style.textContent = '*, *::before, *::after { animation: none !important; transition: none !important; }';
  document.head.appendChild(style);
}
"""

# Walks text nodes and reports one client rect per visual line. With
# preciseLines, characters are probed one by one to find the line breaks.
_EXTRACT_TEXT_JS = """
(preciseLines) => {
  const results = [];
  const scrollX = window.pageXOffset || document.documentElement.scrollLeft;
  const scrollY = window.pageYOffset || document.documentElement.scrollTop;
  const HEADINGS = ['h1', 'h2', 'h3', 'h4', 'h5', 'h6'];

  function headingOf(element) {
    let current = element;
    while (current && current.tagName) {
      const tag = current.tagName.toLowerCase();
      if (HEADINGS.includes(tag)) return tag;
      current = current.parentElement;
    }
    return null;
  }

  function lineTexts(node, text, rects) {
    const offset = node.textContent.indexOf(text);
    const probe = document.createRange();
    const lines = [];
    let charIndex = 0;
    for (const rect of rects) {
      let lineEnd = charIndex;
      for (let j = charIndex; j < text.length; j++) {
        probe.setStart(node, offset + j);
        probe.setEnd(node, offset + j + 1);
        const charRect = probe.getBoundingClientRect();
        if (Math.abs(charRect.top - rect.top) < rect.height * 0.3) {
          lineEnd = j + 1;
        } else if (j > charIndex) {
          break;
        }
      }
      lines.push(text.substring(charIndex, lineEnd));
      charIndex = lineEnd;
    }
    return lines;
  }

  function walk(node) {
    if (node.nodeType === Node.TEXT_NODE) {
      const text = node.textContent.trim();
      if (!text) return;
      const range = document.createRange();
      range.selectNodeContents(node);
      const rects = Array.from(range.getClientRects());
      if (!rects.length) return;
      const parent = node.parentElement;
      const style = parent ? window.getComputedStyle(parent) : null;
      const heading = headingOf(parent);
      results.push({
        text: text,
        rects: rects.map(r => ({
          left: r.left + scrollX, top: r.top + scrollY, width: r.width, height: r.height
        })),
        fontSize: style ? parseFloat(style.fontSize) : 16,
        fontWeight: style ? String(style.fontWeight) : '400',
        fontFamily: style ? style.fontFamily : '',
        textTransform: style ? style.textTransform : 'none',
        elementType: heading ? 'heading' : 'body',
        tagName: heading || (parent ? parent.tagName.toLowerCase() : ''),
        lineTexts: preciseLines && rects.length > 1 ? lineTexts(node, text, rects) : null
      });
    } else if (node.nodeType === Node.ELEMENT_NODE) {
      const tag = node.tagName.toLowerCase();
      if (tag === 'script' || tag === 'style' || tag === 'noscript') return;
      const style = window.getComputedStyle(node);
      if (style.display === 'none' || style.visibility === 'hidden' || style.opacity === '0') return;
      for (const child of node.childNodes) walk(child);
    }
  }

  if (document.body) walk(document.body);
  return results;
}
"""


class RenderSurface:
    """Load an HTML page in headless Chromium and read layout geometry from it."""

    def __init__(
        self,
        pagination: Optional[PaginationConfig] = None,
        config: Optional[RenderConfig] = None
    ):
        self.pagination = pagination or PaginationConfig()
        self.config = config or RenderConfig()
        self._playwright = None
        self._browser = None
        self.page = None

    def __enter__(self) -> "RenderSurface":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def start(self) -> None:
        """Launch the browser and open a page at the configured viewport."""
        try:
            self._playwright = sync_playwright().start()
            self._browser = self._playwright.chromium.launch(headless=True)
            self.page = self._browser.new_page(
                viewport={
                    "width": self.pagination.viewport_width,
                    "height": self.config.viewport_height,
                },
                device_scale_factor=self.config.device_scale_factor
            )
            logger.info(
                f"Browser started (viewport {self.pagination.viewport_width}x"
                f"{self.config.viewport_height}, scale {self.config.device_scale_factor})"
            )
        except PlaywrightError as e:
            self.close()
            error_msg = f"Failed to launch headless browser: {e}"
            logger.error(error_msg)
            raise RenderSurfaceError(error_msg) from e

    def _require_page(self):
        if self.page is None:
            raise RenderSurfaceError("Browser not started. Call start() first.")
        return self.page

    def load(self, html_path: Path, theme: Optional[str] = None) -> None:
        """
        Navigate to a local HTML file and prepare it for capture.

        Fonts are awaited, the PDF mode class is set, UI controls are hidden
        and animations are disabled so that geometry is deterministic.

        Raises:
            RenderSurfaceError: If navigation or preparation fails
        """
        page = self._require_page()
        url = Path(html_path).resolve().as_uri()
        try:
            page.goto(url, wait_until="networkidle", timeout=self.config.navigation_timeout_ms)
            page.emulate_media(media="screen")
            page.wait_for_function(
                "() => document.fonts.status === 'loaded'",
                timeout=self.config.fonts_timeout_ms
            )
            page.evaluate(
                _PREPARE_JS,
                [theme, self.config.pdf_mode_class, list(self.config.hide_selectors)]
            )
            page.wait_for_timeout(self.config.settle_ms)
        except (PlaywrightError, PlaywrightTimeoutError) as e:
            error_msg = f"Failed to load {html_path}: {e}"
            logger.error(error_msg)
            raise RenderSurfaceError(error_msg) from e

        logger.info(f"Page loaded and prepared: {html_path}")

    def content_height(self) -> float:
        page = self._require_page()
        try:
            return float(page.evaluate(_CONTENT_HEIGHT_JS))
        except PlaywrightError as e:
            raise RenderSurfaceError(f"Failed to read content height: {e}") from e

    def measure_blocks(self, selectors: Optional[Sequence[str]] = None) -> List[ContentBlock]:
        """
        Report document-space boxes of the elements that must not be split.

        Args:
            selectors: CSS selectors, defaults to the pagination break selectors

        Returns:
            List of ContentBlock objects in document order per selector
        """
        page = self._require_page()
        selectors = list(selectors or self.pagination.break_selectors)
        try:
            raw_blocks = page.evaluate(_MEASURE_BLOCKS_JS, selectors)
        except PlaywrightError as e:
            raise RenderSurfaceError(f"Failed to measure content blocks: {e}") from e

        blocks = [
            ContentBlock(selector_class=b["selector"], top_y=b["top"], height=b["height"])
            for b in raw_blocks
        ]
        logger.info(f"Measured {len(blocks)} content blocks ({', '.join(selectors)})")
        return blocks

    def extract_text_runs(self, precise_lines: Optional[bool] = None) -> List[TextRun]:
        """
        Extract every visible text node with one box per visual line.

        Args:
            precise_lines: Probe character boxes to find exact line breaks.
                Slower, linear in the number of characters.

        Returns:
            List of TextRun objects
        """
        page = self._require_page()
        if precise_lines is None:
            precise_lines = self.config.precise_lines

        try:
            raw_runs = page.evaluate(_EXTRACT_TEXT_JS, precise_lines)
        except PlaywrightError as e:
            raise RenderSurfaceError(f"Failed to extract text coordinates: {e}") from e

        runs = []
        for raw in raw_runs:
            try:
                runs.append(TextRun(
                    text=raw["text"],
                    rects=tuple(BoundingBox(**rect) for rect in raw["rects"]),
                    font_size=raw["fontSize"] or 16.0,
                    font_weight=raw["fontWeight"],
                    font_family=raw["fontFamily"],
                    element_type=raw["elementType"],
                    tag_name=raw["tagName"],
                    text_transform=raw["textTransform"],
                    line_texts=tuple(raw["lineTexts"]) if raw["lineTexts"] else None
                ))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed text run {raw.get('text', '')[:30]!r}: {e}")

        logger.info(f"Extracted {len(runs)} text runs")
        return runs

    def capture_slice(self, top: float, height: float) -> bytes:
        """
        Capture a PNG of the document region ``[top, top + height)``.

        Raises:
            RenderSurfaceError: If the screenshot fails
        """
        page = self._require_page()
        try:
            return page.screenshot(
                clip={
                    "x": 0,
                    "y": top,
                    "width": self.pagination.viewport_width,
                    "height": height,
                },
                full_page=True,
                type="png",
                animations="disabled"
            )
        except PlaywrightError as e:
            error_msg = f"Failed to capture slice at {top}px: {e}"
            logger.error(error_msg)
            raise RenderSurfaceError(error_msg) from e

    def close(self) -> None:
        """Close the browser and stop Playwright."""
        browser, self._browser, self.page = self._browser, None, None
        playwright, self._playwright = self._playwright, None
        try:
            if browser is not None:
                browser.close()
        finally:
            if playwright is not None:
                playwright.stop()
                logger.info("Browser closed")
