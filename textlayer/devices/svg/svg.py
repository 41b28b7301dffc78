# TextLayer - Selectable Text Layers for Vector Page Graphics
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
SVG Text Layer Device

Page graphics are rendered by PyMuPDF's SVG writer with all text drawn as
glyph outlines, which look right but cannot be selected, searched or copied.
This device receives the page's text-painting operations and writes an
invisible <text> element for each span on top of those outlines.

All four text operations (fill, stroke, clip, clip-stroke) are handled the
same way: only glyph positions matter, never paint attributes.

Error policy:
- A span with a degenerate text matrix (InvalidTransform) has produced no
  output yet, so it is logged and skipped and the page continues. With
  strict=True the error propagates instead and aborts the page.
- A sink failure (SinkWriteError) always propagates and aborts the page,
  because the output may be left with open elements.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET

from ...core.error import DocumentError, InvalidTransform
from ...core.matrix import Matrix
from ...core.page_trace import DocumentFonts, run_page
from ...core.text_layer import DEFAULT_PRECISION, FALLBACK_ADVANCE, render_span
from ...core.types import Text
from ...core.writer import XMLWriter

logger = logging.getLogger(__name__)

# SVG namespace
_SVG_NS = 'http://www.w3.org/2000/svg'
_XLINK_NS = 'http://www.w3.org/1999/xlink'

# Class of the group element wrapping a page's text layer
LAYER_CLASS = 'textlayer'

_XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'


class TextLayerDevice:
    """
    Output device that writes a text layer into a sink.

    Args:
        writer: Event sink with start(tag, attrs), data(text) and end(tag)
        precision: Decimals kept in emitted coordinates
        strict: Abort on a degenerate text matrix instead of skipping the span
        fallback_width: Advance (em) used when glyph metrics are unavailable
    """

    def __init__(self, writer, precision: int = DEFAULT_PRECISION,
                 strict: bool = False,
                 fallback_width: float = FALLBACK_ADVANCE) -> None:
        self.writer = writer
        self.precision = precision
        self.strict = strict
        self.fallback_width = fallback_width
        self.spans_rendered = 0
        self.spans_skipped = 0
        self.lines_written = 0

    def fill_text(self, text: Text, cmt: Matrix) -> None:
        self._render_text(text, cmt)

    def stroke_text(self, text: Text, cmt: Matrix) -> None:
        self._render_text(text, cmt)

    def clip_text(self, text: Text, cmt: Matrix) -> None:
        self._render_text(text, cmt)

    def clip_stroke_text(self, text: Text, cmt: Matrix) -> None:
        self._render_text(text, cmt)

    def _render_text(self, text: Text, cmt: Matrix) -> None:
        for span in text:
            try:
                lines = render_span(span, cmt, self.writer, self.precision,
                                    self.fallback_width)
            except InvalidTransform as exc:
                if self.strict:
                    raise
                self.spans_skipped += 1
                logger.warning("Skipping text span in font %s: %s",
                               span.font.name, exc)
                continue
            self.spans_rendered += 1
            self.lines_written += lines


def _page_svg(page) -> str:
    try:
        return page.get_svg_image(text_as_path=True)
    except (RuntimeError, ValueError) as exc:
        raise DocumentError(f"cannot render page {page.number + 1}: {exc}") from exc


def _write_layer(page, fonts: DocumentFonts | None, precision: int,
                 strict: bool) -> tuple[str, TextLayerDevice]:
    if fonts is None:
        fonts = DocumentFonts(page.parent)
    writer = XMLWriter()
    device = TextLayerDevice(writer, precision=precision, strict=strict)
    writer.start('g', {'class': LAYER_CLASS, 'xmlns': _SVG_NS})
    run_page(page, device, fonts)
    writer.end('g')
    return writer.close(), device


def render_page(page, fonts: DocumentFonts | None = None,
                precision: int = DEFAULT_PRECISION, strict: bool = False,
                text_layer: bool = True) -> str:
    """
    Render a page to SVG with an invisible, selectable text layer.

    The page graphics come from PyMuPDF with text as paths. The text layer is
    appended as a single <g> group after all other content, so it sits on
    top of the glyph outlines it mirrors. The group is serialized by the
    same writer as render_text_layer() and inserted before the root's end
    tag, so its escaping does not depend on ElementTree.

    Args:
        page: PyMuPDF page
        fonts: Font registry shared across the document's pages
        precision: Decimals kept in emitted coordinates
        strict: Abort the page on a degenerate text matrix
        text_layer: If False, return the graphics only

    Returns:
        The SVG document as a string, with XML declaration.
    """
    ET.register_namespace('', _SVG_NS)
    ET.register_namespace('xlink', _XLINK_NS)

    try:
        root = ET.fromstring(_page_svg(page).encode('utf-8'))
    except ET.ParseError as exc:
        raise DocumentError(
            f"unreadable SVG for page {page.number + 1}: {exc}") from exc

    layer = ''
    if text_layer:
        markup, device = _write_layer(page, fonts, precision, strict)
        if device.lines_written:
            layer = markup
        logger.info("Page %d: %d text spans, %d skipped", page.number + 1,
                    device.spans_rendered, device.spans_skipped)

    # An empty root needs an end tag to take the layer
    short = not layer or len(root) > 0 or bool(root.text)
    # tostring() would declare the locale's encoding; output is always UTF-8
    svg = ET.tostring(root, encoding='unicode', short_empty_elements=short)
    if layer:
        end = svg.rfind('</')
        svg = svg[:end] + layer + svg[end:]
    return _XML_DECLARATION + svg


def render_text_layer(page, fonts: DocumentFonts | None = None,
                      precision: int = DEFAULT_PRECISION,
                      strict: bool = False) -> str:
    """Return only the text layer of a page, as a standalone <g> fragment."""
    markup, _ = _write_layer(page, fonts, precision, strict)
    return markup
