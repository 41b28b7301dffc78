# TextLayer - Selectable Text Layers for Vector Page Graphics
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
CLI argument parsing for TextLayer.

Handles command-line argument definition, parsing, page ranges,
and output file naming.
"""

from __future__ import annotations

import argparse
import os

from . import __version__
from .core.text_layer import DEFAULT_PRECISION


def _page_number(text: str, part: str) -> int:
    try:
        number = int(text)
    except ValueError:
        raise ValueError(f"'{part}' is not a page number or range") from None
    if number < 1:
        raise ValueError(f"pages are numbered from 1: '{part}'")
    return number


def _parse_page_ranges(ranges: str) -> set[int]:
    """Expand ``--pages`` into the set of selected 1-based page numbers.

    Accepts comma-separated items, each a page (``3``) or an inclusive range
    (``1-5``), e.g. ``1-3,7,10-12``. Blank items are ignored.

    Raises:
        ValueError: If an item is malformed or nothing is selected.
    """
    pages: set[int] = set()
    for part in (item.strip() for item in ranges.split(",")):
        if not part:
            continue
        first, dash, last = part.partition("-")
        if not dash:
            pages.add(_page_number(part, part))
            continue
        if not first.strip() or not last.strip():
            raise ValueError(f"incomplete page range: '{part}'")
        start, end = _page_number(first, part), _page_number(last, part)
        if start > end:
            raise ValueError(f"page range runs backwards: '{part}'")
        pages.update(range(start, end + 1))
    if not pages:
        raise ValueError("no pages given")
    return pages


def get_output_base_name(outputfile: str | None, inputfile: str) -> str:
    """
    Derive the output base name for one input document.

    Args:
        outputfile: The -o argument value (or None)
        inputfile: Path of the input document

    Returns:
        Base name for output files (without extension)
    """
    source = outputfile or inputfile
    return os.path.splitext(os.path.basename(source))[0]


def _precision(value: str) -> int:
    try:
        precision = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid precision: '{value}'") from None
    if not 0 <= precision <= 12:
        raise argparse.ArgumentTypeError("precision must be between 0 and 12")
    return precision


def build_argument_parser() -> argparse.ArgumentParser:
    """Create and configure the TextLayer argument parser."""
    parser = argparse.ArgumentParser(
        prog="textlayer",
        description="TextLayer - render PDF pages to SVG with a selectable text layer",
        epilog="With a single selected page and no -o, the SVG is written to stdout.",
    )
    parser.add_argument(
        "-V", "--version", action="version", version=f"TextLayer {__version__}")
    parser.add_argument(
        "inputfiles", nargs="+", metavar="FILE",
        help="PDF (or other PyMuPDF-readable) documents")

    output = parser.add_argument_group("output")
    output.add_argument(
        "-o", "--output", dest="outputfile", metavar="FILE",
        help="SVG file for a single page, or base name for numbered page files")
    output.add_argument(
        "--output-dir", default="tl_output", metavar="DIR",
        help="Directory for numbered page files (default: %(default)s)")
    output.add_argument(
        "--pages", metavar="RANGE",
        help="Pages to convert, e.g. 1-5, 3, 1-3,7,10-12 (default: all)")

    layer = parser.add_argument_group("text layer")
    layer.add_argument(
        "-p", "--precision", type=_precision, default=DEFAULT_PRECISION,
        help="Decimals kept in text layer coordinates (default: %(default)s)")
    layer.add_argument(
        "--strict", action="store_true",
        help="Fail the page on a degenerate text matrix instead of skipping the span")
    content = layer.add_mutually_exclusive_group()
    content.add_argument(
        "--text-layer-only", action="store_true",
        help="Write only the text layer <g> fragment, without page graphics")
    content.add_argument(
        "--no-text-layer", action="store_true",
        help="Write the page graphics without a text layer")

    diagnostics = parser.add_argument_group("diagnostics")
    diagnostics.add_argument(
        "-v", "--verbose", action="store_true", help="Log debug output to stderr")
    diagnostics.add_argument(
        "--profile", action="store_true", help="Profile the run with cProfile")
    diagnostics.add_argument(
        "--profile-output", metavar="FILE",
        help="Where to save profiling results (default: timestamped .prof file)")

    return parser
