"""Command-line argument parsing and validation."""

from __future__ import annotations

import argparse
import logging
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from config import (
    BASELINE_STRATEGIES,
    FONT_SIZE_PRESETS,
    AppConfig,
    FontConfig,
    PaginationConfig,
    PositioningConfig,
    RenderConfig,
)

logger = logging.getLogger(__name__)

HTML_SUFFIXES = ('.html', '.htm')


class CLIHandler:
    """Handle command-line argument parsing and validation."""

    @staticmethod
    def build_parser() -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            description="Render a CV page into an A4 screenshot PDF with a selectable text layer",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog=(
                "Examples:\n"
                "  python main.py dist/fr/index.html --theme dark\n"
                "  python main.py dist/en/index.html --debug --preset tight\n"
                "  python main.py dist/en/index.html --rehydrate exports/cv-en-d.pdf\n"
            )
        )

        parser.add_argument(
            'html_path',
            type=str,
            help='Path to the rendered HTML page'
        )

        parser.add_argument(
            '--output', '-o',
            type=str,
            default=None,
            metavar='PDF',
            help='Output PDF path (default: {htmlname}.pdf next to the HTML file, '
                 'or {pdfname}-final.pdf with --rehydrate)'
        )

        parser.add_argument(
            '--theme',
            type=str,
            default=None,
            choices=['dark', 'light'],
            help='Set data-theme on the page before capture'
        )

        parser.add_argument(
            '--rehydrate',
            type=str,
            default=None,
            metavar='PDF',
            help='Overlay the text layer onto an existing raster PDF instead of capturing pages'
        )

        parser.add_argument(
            '--debug',
            action='store_true',
            help='Draw the text layer in semi-transparent red to check alignment'
        )

        parser.add_argument(
            '--strategy',
            type=str,
            default='baseline',
            choices=list(BASELINE_STRATEGIES),
            help='Baseline positioning strategy (default: baseline)'
        )

        parser.add_argument(
            '--preset',
            type=str,
            default='normal',
            choices=list(FONT_SIZE_PRESETS),
            help='Font size adjustments per element type (default: normal)'
        )

        parser.add_argument('--offset-x', type=float, default=0.0, metavar='PX',
                            help='Global horizontal offset (+ right, - left)')
        parser.add_argument('--offset-y', type=float, default=0.0, metavar='PX',
                            help='Global vertical offset (+ down, - up)')
        parser.add_argument('--offset-h1', type=float, default=None, metavar='PX',
                            help='Additional vertical offset for h1 titles')
        parser.add_argument('--offset-h2', type=float, default=None, metavar='PX',
                            help='Additional vertical offset for h2 titles')
        parser.add_argument('--offset-h3', type=float, default=None, metavar='PX',
                            help='Additional vertical offset for h3 titles')
        parser.add_argument('--offset-body', type=float, default=None, metavar='PX',
                            help='Additional vertical offset for body text')

        parser.add_argument(
            '--no-width-adjust',
            action='store_true',
            help='Disable font size correction to match rendered text width'
        )

        parser.add_argument(
            '--tolerance',
            type=float,
            default=PaginationConfig.tolerance,
            metavar='PX',
            help=f'Forward search window for safe page cuts (default: {PaginationConfig.tolerance:.0f})'
        )

        parser.add_argument(
            '--min-section-height',
            type=float,
            default=PaginationConfig.min_section_height,
            metavar='PX',
            help='Ignore blocks shorter than this when looking for cuts '
                 f'(default: {PaginationConfig.min_section_height:.0f})'
        )

        parser.add_argument(
            '--viewport-width',
            type=int,
            default=PaginationConfig.viewport_width,
            metavar='PX',
            help=f'Browser viewport width (default: {PaginationConfig.viewport_width})'
        )

        parser.add_argument(
            '--precise-lines',
            action='store_true',
            help='Find exact line breaks of wrapped text (slower)'
        )

        parser.add_argument('--font-regular', type=str, default=None, metavar='TTF',
                            help='TrueType font for regular text (default: Helvetica)')
        parser.add_argument('--font-bold', type=str, default=None, metavar='TTF',
                            help='TrueType font for bold text (default: Helvetica-Bold)')

        parser.add_argument(
            '--save-json',
            type=str,
            nargs='?',
            const='',
            default=None,
            metavar='FILENAME',
            help='Save the slice plan and text layer summary to JSON. '
                 'Without a filename, uses {pdfname}_layout.json.'
        )

        parser.add_argument(
            '--log-level',
            type=str,
            default='INFO',
            choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
            help='Set logging level (default: INFO)'
        )

        return parser

    @staticmethod
    def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
        """
        Parse command-line arguments.

        Returns:
            Parsed arguments namespace
        """
        return CLIHandler.build_parser().parse_args(argv)

    @staticmethod
    def validate_arguments(args: argparse.Namespace) -> bool:
        """
        Validate parsed arguments.

        Raises:
            ValueError: If arguments are invalid
        """
        html_path = Path(args.html_path)
        if not html_path.exists():
            raise ValueError(f"HTML file not found: {html_path}")

        if not html_path.is_file():
            raise ValueError(f"Path is not a file: {html_path}")

        if html_path.suffix.lower() not in HTML_SUFFIXES:
            raise ValueError(f"File is not an HTML page: {html_path}")

        if args.rehydrate is not None and not Path(args.rehydrate).is_file():
            raise ValueError(f"Raster PDF not found: {args.rehydrate}")

        if args.tolerance < 0:
            raise ValueError("--tolerance must be non-negative")

        if args.viewport_width <= 0:
            raise ValueError("--viewport-width must be positive")

        if args.save_json is not None and args.save_json != '' and args.save_json.strip() == '':
            raise ValueError("--save-json filename cannot be empty")

        return True

    @staticmethod
    def build_config(args: argparse.Namespace) -> AppConfig:
        """Turn parsed arguments into an immutable AppConfig."""
        pagination = PaginationConfig(
            viewport_width=args.viewport_width,
            min_section_height=args.min_section_height,
            tolerance=args.tolerance
        )

        positioning = PositioningConfig(
            strategy=args.strategy,
            offset_x=args.offset_x,
            offset_y=args.offset_y,
            adjust_font_size_to_width=not args.no_width_adjust
        ).with_preset(args.preset).with_type_offsets(
            h1=args.offset_h1,
            h2=args.offset_h2,
            h3=args.offset_h3,
            body=args.offset_body
        )

        render = replace(
            RenderConfig(),
            viewport_height=pagination.page_height,
            precise_lines=args.precise_lines
        )

        return AppConfig(
            pagination=pagination,
            positioning=positioning,
            fonts=FontConfig(regular_path=args.font_regular, bold_path=args.font_bold),
            render=render,
            debug=args.debug
        )
