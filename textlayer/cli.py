#!/usr/bin/env python3
# TextLayer - Selectable Text Layers for Vector Page Graphics
# Copyright (c) 2025-2026 Scott Bowman
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.
#
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
TextLayer - command line entry point

Usage:
    textlayer document.pdf --pages 1 > page.svg
    textlayer document.pdf --output-dir out/
    textlayer -o report.svg --pages 3 document.pdf
    textlayer --text-layer-only --pages 2 document.pdf

Each page is rendered to SVG with text drawn as outlines, and an invisible
text layer is appended so the text stays selectable.

Author: Scott Bowman
License: AGPL-3.0-or-later
"""

import logging
import sys

from .cli_args import _parse_page_ranges, build_argument_parser
from .cli_runner import run


def main(argv=None) -> int:
    """
    Main entry point for TextLayer.

    Returns:
        Exit code: 0 for success, 1 for error
    """
    parser = build_argument_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    # Validate --pages format early
    page_filter = None
    if args.pages:
        try:
            page_filter = _parse_page_ranges(args.pages)
        except ValueError as e:
            print(f"TextLayer Error: {e}", file=sys.stderr)
            print("Expected format: 1-5, 3, 1-3,7,10-12", file=sys.stderr)
            return 1

    return run(args, page_filter)


if __name__ == "__main__":
    sys.exit(main())
