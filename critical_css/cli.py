#!/usr/bin/env python3
"""
Command-line interface for Critical CSS.
"""

import argparse
import asyncio
import logging
import os
import sys
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Dict, List, Optional

import orjson
from tqdm import tqdm

from .core.inliner import CriticalInliner, ProcessResult
from .core.options import Options
from .utils.config import (
    DEFAULT_KEYFRAMES, ENABLE_PROGRESS, HTML_EXTENSIONS, KEYFRAMES_MODES, PRELOAD_MODES, VERSION,
)
from .utils.error import CriticalCSSError
from .utils.common import is_subpath
from .utils.html import read_html_file, write_html_file, write_text_file
from .utils.logging import setup_logging

logger = logging.getLogger(__name__)

def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog='critical-css',
        description='Inline the critical CSS of HTML files and defer the rest'
    )

    # Input source
    parser.add_argument(
        'inputs',
        help='HTML files to process',
        nargs='+',
        type=Path
    )

    # Output options
    parser.add_argument(
        '-o', '--output',
        help='Output file, or directory when several inputs are given (default: stdout)',
        type=Path
    )
    parser.add_argument(
        '--report',
        help='Write a JSON report of the reductions to this file',
        type=Path
    )

    # Stylesheet resolution
    parser.add_argument(
        '--path',
        help='Base directory for stylesheet hrefs (default: directory of each input)'
    )
    parser.add_argument(
        '--public-path',
        help='URL prefix stripped from stylesheet hrefs',
        default=''
    )
    parser.add_argument(
        '--additional-stylesheet',
        help='Stylesheet to embed into every page (repeatable)',
        action='append',
        default=[],
        dest='additional_stylesheets'
    )
    parser.add_argument(
        '--no-external',
        help='Do not embed linked stylesheets',
        action='store_true'
    )

    # Processing options
    parser.add_argument(
        '--keyframes',
        help='Which @keyframes to keep',
        choices=KEYFRAMES_MODES,
        default=DEFAULT_KEYFRAMES
    )
    parser.add_argument(
        '--preload',
        help='How to load the full stylesheets (default: preload link plus stylesheet at end of body)',
        choices=PRELOAD_MODES + ('none',)
    )
    parser.add_argument(
        '--no-noscript',
        help='Do not add <noscript> fallbacks',
        action='store_true'
    )
    parser.add_argument(
        '--inline-fonts',
        help='Keep @font-face rules for fonts used by critical CSS',
        action='store_true'
    )
    parser.add_argument(
        '--preload-fonts',
        help='Add preload links for fonts of @font-face rules',
        action='store_true'
    )
    parser.add_argument(
        '--prune-source',
        help='Compute the non-critical remainder and write it next to the output',
        action='store_true'
    )
    parser.add_argument(
        '--no-compress',
        help='Keep the original formatting of critical CSS',
        action='store_true'
    )
    parser.add_argument(
        '--minify',
        help='Minify the merged <style> with csscompressor',
        action='store_true'
    )
    parser.add_argument(
        '--no-merge',
        help='Keep one <style> per source stylesheet',
        action='store_true'
    )
    parser.add_argument(
        '--no-inline-styles',
        help='Only reduce stylesheets that came from links',
        action='store_true'
    )
    parser.add_argument(
        '--inline-threshold',
        help='Inline whole stylesheets smaller than this many characters',
        type=int,
        default=0
    )
    parser.add_argument(
        '--minimum-external-size',
        help='Inline everything when the non-critical CSS is smaller than this',
        type=int,
        default=0
    )

    # Other options
    parser.add_argument(
        '-v', '--verbose',
        help='Enable verbose output',
        action='store_true'
    )
    parser.add_argument(
        '-q', '--quiet',
        help='Only report errors',
        action='store_true'
    )
    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {VERSION}'
    )

    args = parser.parse_args(argv)
    if len(args.inputs) > 1 and (args.output is None or args.output.suffix in HTML_EXTENSIONS):
        parser.error('--output must name a directory when several inputs are given')
    return args

def build_options(args: argparse.Namespace, path: str) -> Options:
    """Translate parsed arguments into processing options."""
    if args.quiet:
        log_level = 'error'
    elif args.verbose:
        log_level = 'debug'
    else:
        log_level = 'info'

    preload = args.preload
    if preload == 'none':
        preload = False

    return Options(
        path=path,
        public_path=args.public_path,
        external=not args.no_external,
        inline_threshold=args.inline_threshold,
        minimum_external_size=args.minimum_external_size,
        prune_source=args.prune_source,
        merge_stylesheets=not args.no_merge,
        additional_stylesheets=list(args.additional_stylesheets),
        preload=preload,
        noscript_fallback=not args.no_noscript,
        inline_fonts=args.inline_fonts,
        preload_fonts=args.preload_fonts,
        keyframes=args.keyframes,
        compress=not args.no_compress,
        minify=args.minify,
        log_level=log_level,
        reduce_inline_styles=not args.no_inline_styles,
    )

def output_path_for(args: argparse.Namespace, input_path: Path) -> Optional[Path]:
    """Where the processed copy of ``input_path`` goes (``None`` for stdout)."""
    if args.output is None:
        return None
    if len(args.inputs) == 1 and args.output.suffix in HTML_EXTENSIONS:
        return args.output
    return args.output / input_path.name

def process_file(args: argparse.Namespace, input_path: Path) -> ProcessResult:
    """Process a single HTML file and write its output."""
    html = read_html_file(str(input_path))
    path = args.path or str(input_path.parent)
    inliner = CriticalInliner(build_options(args, path))
    result = asyncio.run(inliner.process_document(html))

    output = output_path_for(args, input_path)
    if output is None:
        sys.stdout.write(result.html)
        return result

    write_html_file(str(output), result.html)
    logger.info(f"Wrote {output}")
    if args.prune_source:
        for name, css in result.pruned.items():
            css_path = output.parent / name
            if not is_subpath(str(output.parent), str(css_path)):
                logger.warning(f"Not writing {name} outside of {output.parent}")
                continue
            write_text_file(str(css_path), css)
            logger.info(f"Wrote non-critical CSS to {css_path}")
    return result

def write_report(report_path: Path, results: Dict[str, ProcessResult]) -> None:
    """Write the reduction statistics of every processed file as JSON."""
    report = {
        name: [reduction.to_dict() for reduction in result.results]
        for name, result in results.items()
    }
    report_path.parent.mkdir(parents=True, exist_ok=True)
    report_path.write_bytes(orjson.dumps(report, option=orjson.OPT_INDENT_2))

def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    args = parse_args(argv)
    if args.verbose:
        setup_logging(logging.DEBUG)
    elif args.quiet:
        setup_logging(logging.ERROR)
    else:
        setup_logging(logging.INFO)

    results = {}
    failures = 0
    show_progress = ENABLE_PROGRESS and len(args.inputs) > 1 and not args.quiet

    with ThreadPoolExecutor(max_workers=min(len(args.inputs), os.cpu_count() or 1)) as executor:
        futures = {executor.submit(process_file, args, path): path for path in args.inputs}
        completed = as_completed(futures)
        if show_progress:
            completed = tqdm(completed, total=len(futures), desc='Processing', unit='file')
        for future in completed:
            path = futures[future]
            try:
                results[str(path)] = future.result()
            except CriticalCSSError as e:
                logger.error(f"Error processing {path}: {e}")
                failures += 1

    if args.report:
        try:
            write_report(args.report, results)
        except OSError as e:
            logger.error(f"Cannot write report {args.report}: {e}")
            return 1

    return 1 if failures else 0

if __name__ == '__main__':
    sys.exit(main())
