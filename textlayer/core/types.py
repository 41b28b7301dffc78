# TextLayer - Selectable Text Layers for Vector Page Graphics
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
TextLayer Types Module

Input and working types for text layer synthesis. The input side (Text,
TextSpan, GlyphItem) mirrors what a text-painting call delivers to a device:
one or more shaped spans, each with a single font, text matrix and writing
mode. The working side (GlyphMetrics, Line) only lives for the duration of
one span's rendering.
"""

from __future__ import annotations

import enum
from typing import Iterable, Protocol

from .matrix import Matrix

# Highest Unicode scalar value
MAX_UNICODE = 0x10FFFF


class WriteMode(enum.IntEnum):
    HORIZONTAL = 0
    VERTICAL = 1


class GlyphFont(Protocol):
    """Glyph metrics capability consumed by the line grouper."""

    name: str

    def advance_glyph(self, gid: int, vertical: bool) -> float:
        """Return the advance of glyph *gid* in em units.

        Raises:
            MetricsLookupError: if the advance cannot be determined.
        """
        ...


class GlyphItem:
    """
    One shaped glyph/character placement.

    A negative gid means no glyph was drawn for this item (for instance the
    second character of a ligature). A negative ucs means the glyph carries
    no text.
    """
    __slots__ = ('x', 'y', 'gid', 'ucs')

    def __init__(self, x: float, y: float, gid: int, ucs: int) -> None:
        self.x = x          # Origin in user space
        self.y = y
        self.gid = gid      # Glyph id, -1 if none
        self.ucs = ucs      # Unicode scalar value, -1 if none

    def has_char(self) -> bool:
        """True if ucs is a valid Unicode scalar value (surrogates excluded)."""
        ucs = self.ucs
        return 0 <= ucs <= MAX_UNICODE and not 0xD800 <= ucs <= 0xDFFF

    def __repr__(self) -> str:
        return f'GlyphItem({self.x!r}, {self.y!r}, gid={self.gid}, ucs={self.ucs})'


class TextSpan:
    """A run of glyph items sharing one font, text matrix and writing mode."""
    __slots__ = ('font', 'trm', 'wmode', 'items')

    def __init__(self, font: GlyphFont, trm: Matrix, wmode: WriteMode,
                 items: Iterable[GlyphItem]) -> None:
        self.font = font
        self.trm = Matrix(*trm)
        self.wmode = WriteMode(wmode)
        self.items = list(items)


class Text(list):
    """The ordered spans delivered by a single text-painting operation."""

    def __init__(self, spans: Iterable[TextSpan] = ()) -> None:
        super().__init__(spans)


class GlyphMetrics:
    """Advance and position of one drawn glyph within a line."""
    __slots__ = ('width', 'primary', 'followings')

    def __init__(self, width: float, primary: float, followings: int = 0) -> None:
        self.width = width              # Advance in local units
        self.primary = primary          # Position along the advance axis
        self.followings = followings    # Characters sharing this glyph

    def __repr__(self) -> str:
        return (f'GlyphMetrics(width={self.width!r}, primary={self.primary!r}, '
                f'followings={self.followings})')


class Line:
    """Items of one span that share a secondary-axis coordinate."""
    __slots__ = ('secondary', 'glyphs', 'chars')

    def __init__(self, secondary: float) -> None:
        self.secondary = secondary
        self.glyphs: list[GlyphMetrics] = []
        self.chars: list[str] = []

    @property
    def text(self) -> str:
        return ''.join(self.chars)

    def __repr__(self) -> str:
        return f'Line(secondary={self.secondary!r}, text={self.text!r})'
