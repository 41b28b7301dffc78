# TextLayer - Selectable Text Layers for Vector Page Graphics
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
TextLayer error types.

Every error raised by the text layer derives from TextLayerError so callers
can catch the whole family at a page boundary. Which errors are recovered
and where:

- InvalidTransform: raised by the run normalizer before anything has been
  written for the span, for a text matrix with no usable font size or a
  transformation matrix with a non-finite entry. The SVG device skips the span (or re-raises in
  strict mode).
- MetricsLookupError: raised by glyph metrics providers. Always recovered
  by the line grouper with the fallback advance width.
- FontDataError: raised while parsing embedded font programs. The font
  registry logs it and substitutes a font with no metrics.
- SinkWriteError: raised by the output writer. Always propagates; the sink
  may hold open elements afterwards and must be discarded.
- DocumentError: the input document could not be opened or rendered.
- LayoutError: a line's offsets and characters disagree. This is a bug in
  the line grouper, never recovered; it aborts the page.
"""

from __future__ import annotations


class TextLayerError(Exception):
    """Base class for all text layer errors."""


class InvalidTransform(TextLayerError):
    """A span's matrices cannot place it (zero, NaN or infinite entries)."""

    def __init__(self, matrix, message: str | None = None) -> None:
        self.matrix = matrix
        super().__init__(message or f"degenerate text matrix {tuple(matrix)!r}")


class MetricsLookupError(TextLayerError):
    """An advance width could not be determined for a glyph."""


class FontDataError(TextLayerError):
    """An embedded font program is malformed or of an unsupported type."""


class SinkWriteError(TextLayerError):
    """The output sink failed or an element was closed out of order."""


class DocumentError(TextLayerError):
    """The input document could not be opened or a page could not be rendered."""


class LayoutError(TextLayerError):
    """A line does not carry exactly one offset per character."""
