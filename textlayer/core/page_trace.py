# TextLayer - Selectable Text Layers for Vector Page Graphics
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
PDF page source backed by PyMuPDF.

PyMuPDF reports every text-painting operation on a page through
``Page.get_texttrace()``. Each trace entry is one shaped span: a font name,
a writing direction and size, a writing mode, a paint type and the list of
(ucs, gid, origin, bbox) character records. This module turns those entries
into Text objects and hands them to a device, one call per operation, the
same way a display list is replayed onto an output device.

Trace coordinates are y-down page coordinates. The text layer works in the
PDF convention where the text matrix is expressed in a y-up user space, so
origins are flipped into that space and the flip is carried back out as the
current transformation matrix:

    user (x, y)  = (x, height - y)
    cmt          = [1 0 0 -1 0 height]
    trm          = [s*dx  -s*dy  s*dy  s*dx  0 0]

where (dx, dy) is the trace's unit writing direction and s its font size.
"""

from __future__ import annotations

import itertools
import logging
from typing import Iterator

import pymupdf

from .error import DocumentError, FontDataError
from .matrix import Matrix
from .sfnt_metrics import MissingFont, SfntFont
from .types import GlyphItem, Text, TextSpan, WriteMode

logger = logging.getLogger(__name__)

# Trace span type -> device method
TEXT_OPERATIONS = {
    0: 'fill_text',
    1: 'stroke_text',
    2: 'clip_text',
    3: 'clip_stroke_text',
}

# Extensions reported by Document.extract_font() that hold sfnt programs
_SFNT_EXTENSIONS = frozenset({'ttf', 'otf'})


def open_document(path: str):
    """Open a document with PyMuPDF.

    Raises:
        DocumentError: if the file is missing, empty or not a readable document.
    """
    try:
        return pymupdf.open(path)
    except (RuntimeError, OSError, ValueError) as exc:
        raise DocumentError(f"cannot open '{path}': {exc}") from exc


def strip_subset_tag(name: str) -> str:
    """Remove a ``ABCDEF+`` subset prefix from a font name."""
    prefix, plus, rest = name.partition('+')
    return rest if plus else prefix


class DocumentFonts:
    """
    Glyph metrics for the fonts embedded in one document.

    Font names in the text trace are matched against the base font names
    of the page's font resources, first literally and then without the
    subset prefix. Fonts that cannot be found, or whose program is not an
    sfnt, resolve to a MissingFont so that every lookup falls back to the
    default advance.
    """

    def __init__(self, doc) -> None:
        self.doc = doc
        self._xrefs: dict[str, int] = {}          # {base font name: xref}
        self._by_xref: dict[int, object] = {}     # {xref: font}
        self._by_name: dict[str, object] = {}     # {trace font name: font}
        self._scanned: set[int] = set()

    def scan_page(self, page) -> None:
        """Register the font resources used by *page*."""
        if page.number in self._scanned:
            return
        self._scanned.add(page.number)
        # (xref, ext, type, basefont, name, encoding)
        for entry in page.get_fonts():
            xref, basefont = entry[0], entry[3]
            if not xref or not basefont:
                continue
            self._xrefs.setdefault(basefont, xref)
            self._xrefs.setdefault(strip_subset_tag(basefont), xref)

    def lookup(self, name: str):
        """Return a metrics provider for the trace font *name*."""
        font = self._by_name.get(name)
        if font is not None:
            return font

        xref = self._xrefs.get(name) or self._xrefs.get(strip_subset_tag(name))
        if xref is None:
            logger.debug("Font %s not found in page resources", name)
            font = MissingFont(name, "not found in page resources")
        elif xref in self._by_xref:
            font = self._by_xref[xref]
        else:
            font = self._load(name, xref)
            self._by_xref[xref] = font

        self._by_name[name] = font
        return font

    def _load(self, name: str, xref: int):
        try:
            _basename, ext, _ftype, buffer = self.doc.extract_font(xref)
        except (RuntimeError, ValueError) as exc:
            logger.warning("Cannot extract font %s (xref %d): %s", name, xref, exc)
            return MissingFont(name, "font extraction failed")

        if ext not in _SFNT_EXTENSIONS or not buffer:
            logger.debug("Font %s (xref %d) has no sfnt program (%s)", name, xref, ext)
            return MissingFont(name, f"unsupported font program '{ext}'")

        try:
            return SfntFont(name, buffer)
        except FontDataError as exc:
            logger.warning("Ignoring font data for %s: %s", name, exc)
            return MissingFont(name, str(exc))


def _trace_span(trace: dict, fonts: DocumentFonts, height: float) -> TextSpan:
    size = trace['size']
    dx, dy = trace['dir']
    trm = Matrix(size * dx, -size * dy, size * dy, size * dx, 0.0, 0.0)
    items = [GlyphItem(origin[0], height - origin[1], gid, ucs)
             for ucs, gid, origin, _bbox in trace['chars']]
    wmode = WriteMode.VERTICAL if trace.get('wmode') else WriteMode.HORIZONTAL
    return TextSpan(fonts.lookup(trace['font']), trm, wmode, items)


def page_text(page, fonts: DocumentFonts) -> Iterator[tuple[str, Text, Matrix]]:
    """
    Yield the text-painting operations of a page in drawing order.

    Consecutive trace spans that belong to the same drawing command (same
    sequence number and paint type) are delivered together as one Text.

    Yields:
        (device method name, Text, current transformation matrix)
    """
    fonts.scan_page(page)
    height = page.rect.height
    cmt = Matrix(1.0, 0.0, 0.0, -1.0, 0.0, height)

    traces = page.get_texttrace()
    for (_seqno, span_type), group in itertools.groupby(
            traces, key=lambda t: (t.get('seqno'), t.get('type'))):
        operation = TEXT_OPERATIONS.get(span_type)
        if operation is None:
            # Invisible (ignore-text) operations carry no painted glyphs
            continue
        text = Text(_trace_span(trace, fonts, height) for trace in group)
        yield operation, text, cmt


def run_page(page, device, fonts: DocumentFonts) -> None:
    """Replay the text operations of *page* onto *device*."""
    for operation, text, cmt in page_text(page, fonts):
        getattr(device, operation)(text, cmt)
