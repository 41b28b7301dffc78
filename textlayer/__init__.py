# TextLayer - Selectable Text Layers for Vector Page Graphics
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
TextLayer - invisible, selectable text over vector page graphics.

Renders PDF pages to SVG with glyphs drawn as paths, then overlays each text
run as transparent <text> elements positioned character by character so the
page can be searched, selected and copied.
"""

__version__ = "0.3.0"
