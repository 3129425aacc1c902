"""Main entry point for the CV PDF generator."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional, Tuple

from cli_handler import CLIHandler
from config import AppConfig
from cut_planner import SlicePlanner
from exceptions import CVPdfError
from fonts import OutputFonts
from json_exporter import JSONExporter
from models import ReconcileResult, SlicePlan
from pdf_composer import PDFPageComposer
from pdf_reader import PDFReader
from render_surface import RenderSurface
from text_reconciler import TextReconciler

logger = logging.getLogger(__name__)


def generate_pdf(
    html_path: Path,
    output_path: Path,
    config: AppConfig,
    theme: Optional[str] = None
) -> Tuple[SlicePlan, ReconcileResult]:
    """
    Capture the page as content-safe A4 slices and add the text layer.

    Returns:
        The slice plan the pages were captured with and the reconcile result
    """
    fonts = OutputFonts.load(config.fonts)

    with RenderSurface(config.pagination, config.render) as surface:
        surface.load(html_path, theme=theme)
        total_height = surface.content_height()
        blocks = surface.measure_blocks()
        plan = SlicePlanner(config.pagination).plan(blocks, total_height)
        logger.info(
            f"Content height {total_height:.0f}px, page height {plan.page_height}px, "
            f"{plan.page_count} page(s)"
        )

        composer = PDFPageComposer(page_width=config.page.width_pt, page_height=config.page.height_pt)
        try:
            for page_slice in plan.slices():
                image = surface.capture_slice(page_slice.top, page_slice.height)
                composer.add_image_page(image, page_slice.height, plan.page_height)

            runs = surface.extract_text_runs()
            reconciler = TextReconciler(config.positioning, fonts, debug=config.debug)
            result = reconciler.reconcile(
                runs,
                plan.page_height,
                config.scale_x,
                config.scale_y,
                composer.page_count,
                slice_plan=plan
            )
            composer.overlay_text(result.instructions, fonts)
            composer.save(output_path)
        finally:
            composer.close()

    return plan, result


def rehydrate_pdf(
    html_path: Path,
    pdf_path: Path,
    output_path: Path,
    config: AppConfig,
    theme: Optional[str] = None
) -> Tuple[int, ReconcileResult]:
    """
    Add the text layer to an existing screenshot PDF cut at even page heights.

    Returns:
        Page count of the input PDF and the reconcile result
    """
    pdf_reader = PDFReader(pdf_path)
    pdf_reader.validate_path()
    pdf_reader.open_pdf()

    try:
        page_width, page_height_pt = pdf_reader.get_page_dimensions(0)
        page_count = pdf_reader.get_pdf_metadata()['total_pages']

        with RenderSurface(config.pagination, config.render) as surface:
            surface.load(html_path, theme=theme)
            runs = surface.extract_text_runs()

        page_height = config.pagination.page_height
        scale_x = page_width / config.pagination.viewport_width
        scale_y = page_height_pt / page_height
        logger.info(f"Scale factors: X={scale_x:.3f}, Y={scale_y:.3f}")

        fonts = OutputFonts.load(config.fonts)
        reconciler = TextReconciler(config.positioning, fonts, debug=config.debug)
        result = reconciler.reconcile(runs, page_height, scale_x, scale_y, page_count)

        composer = PDFPageComposer(pdf_reader.pdf_document, page_width, page_height_pt)
        composer.overlay_text(result.instructions, fonts)
        composer.save(output_path)
    finally:
        # Document is owned by PDFReader
        pdf_reader.close()

    return page_count, result


def _default_output_path(html_path: Path, rehydrate: Optional[str]) -> Path:
    if rehydrate:
        source = Path(rehydrate)
        return source.parent / f"{source.stem}-final.pdf"
    return html_path.parent / f"{html_path.stem}.pdf"


def main():
    """Main entry point for the CV PDF generator."""
    try:
        args = CLIHandler.parse_arguments()

        logging.basicConfig(
            level=getattr(logging, args.log_level),
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        CLIHandler.validate_arguments(args)
        config = CLIHandler.build_config(args)

        html_path = Path(args.html_path)
        output_path = Path(args.output) if args.output else _default_output_path(html_path, args.rehydrate)
        logger.info(f"Processing page: {html_path}")
        if config.debug:
            logger.info("Debug mode: text layer is drawn in red")

        plan = None
        page_count = None
        if args.rehydrate:
            page_count, result = rehydrate_pdf(
                html_path, Path(args.rehydrate), output_path, config, theme=args.theme
            )
        else:
            plan, result = generate_pdf(html_path, output_path, config, theme=args.theme)

        if args.save_json is not None:
            json_exporter = JSONExporter(output_path, source_path=html_path)
            output_filename = None if args.save_json == '' else args.save_json
            json_path = json_exporter.export(
                result,
                plan=plan,
                output_filename=output_filename,
                page_count=page_count
            )
            logger.info(f"JSON exported to: {json_path}")

        logger.info(f"PDF generation completed successfully: {output_path}")

    except CVPdfError as e:
        logger.error(f"CV PDF Error: {e}")
        sys.exit(1)
    except ValueError as e:
        logger.error(f"Validation Error: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Process interrupted by user")
        sys.exit(1)
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
