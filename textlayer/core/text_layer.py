# TextLayer - Selectable Text Layers for Vector Page Graphics
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Text Layer Synthesis

Turns shaped text spans into invisible, selectable SVG text. The glyph
outlines themselves are drawn elsewhere as paths; this module only emits
<text>/<tspan> elements whose characters line up with those outlines so that
the page can be searched, selected and copied.

Pipeline for one span:

1. normalize_span()      text matrix -> unscaled local frame + placement
2. group_lines()         items -> lines sharing a secondary-axis coordinate
3. distribute_offsets()  line -> one primary-axis offset per character
4. emit_line()           line -> <tspan> events on the sink

Coordinates inside a <text> element are expressed in the local frame
produced by the normalizer: rotation and font scale are removed, the primary
axis runs along the advance direction (x for horizontal text, y for vertical
text) and the secondary axis is orthogonal to it. The element's transform
maps the local frame back into page space, and its font-size restores the
glyph scale.
"""

from __future__ import annotations

import logging
import math
from typing import Iterator

from .error import InvalidTransform, LayoutError, MetricsLookupError
from .matrix import Matrix, concat, expansion, fmt, format_matrix, transform_point
from .types import GlyphMetrics, Line, TextSpan, WriteMode

logger = logging.getLogger(__name__)

# Advance (em) used when a glyph's width cannot be looked up
FALLBACK_ADVANCE = 0.3

# Default number of decimals in emitted coordinates
DEFAULT_PRECISION = 4


def normalize_span(trm: Matrix, cmt: Matrix) -> tuple[Matrix, Matrix, float]:
    """
    Derive the local frame for a span.

    Args:
        trm: Text rendering matrix of the span (glyph space -> user space)
        cmt: Current transformation matrix (user space -> device space)

    Returns:
        (inv, placement, fontsize) where inv maps item positions into the
        unscaled local frame and placement maps the local frame to device
        space.

    Raises:
        InvalidTransform: if the text matrix has no usable font size, or
            the transformation matrix has a NaN or infinite entry.
    """
    fontsize = expansion(trm)
    if fontsize == 0 or not math.isfinite(fontsize):
        raise InvalidTransform(trm)
    if not all(math.isfinite(v) for v in cmt):
        raise InvalidTransform(cmt, f"non-finite transformation matrix {tuple(cmt)!r}")

    a, b, c, d = trm.a, trm.b, trm.c, trm.d
    # Axis/sign swap gives the local y-down text frame, not a literal inverse
    inv = Matrix(d / fontsize, -b / fontsize, -c / fontsize, -a / fontsize, 0.0, 0.0)
    placement = concat(inv, cmt)
    return inv, placement, fontsize


def font_family(font_name: str) -> str:
    """
    Derive a CSS font family from a font name.

    Drops a subset tag (``ABCDEF+``) and a style suffix (``-Bold``):
    ``ABCDEF+Helvetica-Bold`` becomes ``Helvetica``.
    """
    _, plus, rest = font_name.partition('+')
    name = rest if plus else font_name
    family = name.rpartition('-')[0] if '-' in name else name
    return family or name


def group_lines(span: TextSpan, inv: Matrix, fontsize: float,
                fallback_width: float = FALLBACK_ADVANCE) -> Iterator[Line]:
    """
    Split a span into lines of items that share a secondary coordinate.

    A new line starts whenever the secondary coordinate changes, so a
    coordinate seen earlier in the span starts a new line when it returns.
    Lines are yielded as soon as they are closed.

    Items with no glyph (gid < 0) are followers of the preceding glyph: they
    add their character to the line and bump that glyph's follower count, so
    the offset distributor can give them a position inside its advance.
    """
    vertical = span.wmode == WriteMode.VERTICAL
    font = span.font
    line = None

    for item in span.items:
        if not item.has_char():
            continue

        x, y = transform_point(inv, (item.x, item.y))
        if not (math.isfinite(x) and math.isfinite(y)):
            logger.debug("Dropping glyph with non-finite position (%r, %r)",
                         item.x, item.y)
            continue
        primary, secondary = (y, x) if vertical else (x, y)

        if line is None or line.secondary != secondary:
            if line is not None:
                yield line
            line = Line(secondary)

        if item.gid >= 0:
            try:
                advance = font.advance_glyph(item.gid, vertical)
            except MetricsLookupError as exc:
                logger.debug("No advance for glyph %d in %s: %s",
                             item.gid, font.name, exc)
                advance = fallback_width
            line.glyphs.append(GlyphMetrics(advance * fontsize, primary))
        elif line.glyphs:
            line.glyphs[-1].followings += 1
        else:
            line.glyphs.append(GlyphMetrics(0.0, primary))

        line.chars.append(chr(item.ucs))

    if line is not None:
        yield line


def distribute_offsets(glyphs: list[GlyphMetrics]) -> list[float]:
    """
    Return one primary-axis offset per character.

    Each glyph contributes its own position followed by evenly spaced
    positions for its followers, spanning the glyph's advance.
    """
    offsets = []
    for glyph in glyphs:
        offsets.append(glyph.primary)
        step = glyph.width / (glyph.followings + 1)
        for i in range(glyph.followings):
            offsets.append(glyph.primary + step * (i + 1))
    return offsets


def emit_line(line: Line, wmode: WriteMode, writer,
              precision: int = DEFAULT_PRECISION) -> None:
    """Write one line as a <tspan> element."""
    offsets = distribute_offsets(line.glyphs)
    text = line.text
    if len(offsets) != len(text):
        raise LayoutError(
            f"{len(offsets)} offsets for {len(text)} characters in {line!r}")

    if wmode == WriteMode.VERTICAL:
        secondary_attr, primary_attr = 'x', 'y'
    else:
        secondary_attr, primary_attr = 'y', 'x'

    writer.start('tspan', {
        secondary_attr: fmt(line.secondary, precision),
        primary_attr: ' '.join(fmt(v, precision) for v in offsets),
    })
    writer.data(text)
    writer.end('tspan')


def render_span(span: TextSpan, cmt: Matrix, writer,
                precision: int = DEFAULT_PRECISION,
                fallback_width: float = FALLBACK_ADVANCE) -> int:
    """
    Write the text layer for one span.

    Nothing is written for a span without any character, and nothing is
    written before the transform has been validated.

    Returns:
        Number of lines written.

    Raises:
        InvalidTransform: degenerate text matrix (no output written).
        SinkWriteError: the sink failed (output left incomplete).
    """
    inv, placement, fontsize = normalize_span(span.trm, cmt)

    count = 0
    for line in group_lines(span, inv, fontsize, fallback_width):
        if count == 0:
            attrs = {
                'xml:space': 'preserve',
                'transform': format_matrix(placement, precision),
                'font-family': font_family(span.font.name),
                'font-size': f'{fmt(fontsize, precision)}pt',
            }
            if span.wmode == WriteMode.VERTICAL:
                attrs['writing-mode'] = 'tb'
            attrs['opacity'] = '0'
            writer.start('text', attrs)
        emit_line(line, span.wmode, writer, precision)
        count += 1

    if count:
        writer.end('text')
    return count
