# TextLayer - Selectable Text Layers for Vector Page Graphics
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
TextLayer execution logic.

Opens each input document, selects pages, renders them through the SVG
text layer device and writes the results to stdout or to numbered files.
A failure on one page is reported and the run continues with the next page;
the exit code reflects whether any page failed.
"""

from __future__ import annotations

import logging
import os
import sys

from .cli_args import get_output_base_name
from .core.error import DocumentError, TextLayerError
from .core.page_trace import DocumentFonts, open_document
from .devices.svg.svg import render_page, render_text_layer
from .utils import profiler as tl_profiler

logger = logging.getLogger(__name__)


def _selected_pages(page_count: int, page_filter: set[int] | None) -> list[int]:
    """Return the 1-based page numbers to render, in document order."""
    if page_filter is None:
        return list(range(1, page_count + 1))
    return [n for n in sorted(page_filter) if n <= page_count]


def _render(page, fonts, args) -> str:
    if args.text_layer_only:
        return render_text_layer(page, fonts, precision=args.precision,
                                 strict=args.strict)
    return render_page(page, fonts, precision=args.precision,
                       strict=args.strict, text_layer=not args.no_text_layer)


def _output_path(args, inputfile: str, page_num: int, single: bool,
                 sole_input: bool) -> str:
    # -o names the file itself only when exactly one page is written in total
    if sole_input and single and args.outputfile:
        return args.outputfile
    # several inputs: pages are named after their own document
    base_name = get_output_base_name(
        args.outputfile if sole_input else None, inputfile)
    return os.path.join(args.output_dir, f"{base_name}-{page_num:04d}.svg")


def convert_file(inputfile: str, args, page_filter: set[int] | None,
                 sole_input: bool = True) -> int:
    """
    Convert the selected pages of one document.

    Args:
        sole_input: True if this is the only document of the run. Only then
            may a single page go to stdout or to the -o file itself.

    Returns:
        Number of pages that failed (the document counts as one failure if it
        cannot be opened).
    """
    try:
        doc = open_document(inputfile)
    except DocumentError as e:
        print(f"TextLayer Error: {e}", file=sys.stderr)
        return 1

    failures = 0
    try:
        pages = _selected_pages(doc.page_count, page_filter)
        if not pages:
            logger.warning("%s: no pages selected (document has %d pages)",
                           inputfile, doc.page_count)
            return 0

        fonts = DocumentFonts(doc)
        single = len(pages) == 1
        to_stdout = sole_input and single and not args.outputfile
        for page_num in pages:
            page = doc[page_num - 1]
            try:
                svg = _render(page, fonts, args)
            except TextLayerError as e:
                print(f"TextLayer Error: {inputfile}, page {page_num}: {e}",
                      file=sys.stderr)
                failures += 1
                continue

            if to_stdout:
                sys.stdout.write(svg)
                sys.stdout.write("\n")
                continue

            output_file = _output_path(args, inputfile, page_num, single,
                                       sole_input)
            directory = os.path.dirname(output_file)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(output_file, "w", encoding="utf-8") as f:
                f.write(svg)
            logger.info("Wrote %s", output_file)
    finally:
        doc.close()

    return failures


def run(args, page_filter: set[int] | None) -> int:
    """Run a conversion job for all input files.

    Returns:
        Exit code: 0 if every page converted, 1 otherwise.
    """
    profile_output = args.profile_output
    if args.profile and not profile_output:
        profile_output = tl_profiler.generate_default_output_path()

    perf_profiler = tl_profiler.initialize_profiler(
        output_path=profile_output, enabled=args.profile)

    sole_input = len(args.inputfiles) == 1

    failures = 0
    with perf_profiler.profile_context():
        for inputfile in args.inputfiles:
            failures += convert_file(inputfile, args, page_filter, sole_input)

    if args.profile:
        perf_profiler.save_results()
        perf_profiler.print_summary()

    return 1 if failures else 0
