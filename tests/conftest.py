"""Pytest configuration and shared fixtures for TextLayer tests."""

from __future__ import annotations

import struct
from types import SimpleNamespace

import pytest

from textlayer.core.error import MetricsLookupError
from textlayer.core.matrix import Matrix
from textlayer.core.types import GlyphItem, TextSpan, WriteMode


class FakeFont:
    """Glyph metrics provider with a fixed table of advances (em units)."""

    def __init__(self, name="ABCDEF+Helvetica-Bold", advances=None, default=0.5):
        self.name = name
        self.advances = advances or {}
        self.default = default
        self.calls = []

    def advance_glyph(self, gid, vertical):
        self.calls.append((gid, vertical))
        if self.default is None and gid not in self.advances:
            raise MetricsLookupError(f"no glyph {gid}")
        return self.advances.get(gid, self.default)


def make_span(chars, font=None, trm=(10, 0, 0, 10, 0, 0),
              wmode=WriteMode.HORIZONTAL):
    """Build a span from (x, y, gid, character-or-ucs) tuples."""
    items = []
    for x, y, gid, ch in chars:
        ucs = ord(ch) if isinstance(ch, str) else ch
        items.append(GlyphItem(x, y, gid, ucs))
    return TextSpan(font or FakeFont(), Matrix(*trm), wmode, items)


def make_trace(text, x=10.0, y=20.0, seqno=0, span_type=0, font='Helvetica',
               size=12.0, direction=(1.0, 0.0), wmode=0, step=6.0):
    """One ``Page.get_texttrace()`` entry with evenly spaced characters."""
    chars = tuple(
        (ord(ch), i + 1, (x + i * step, y), (0, 0, 0, 0))
        for i, ch in enumerate(text)
    )
    return {
        'font': font, 'size': size, 'dir': direction, 'wmode': wmode,
        'type': span_type, 'seqno': seqno, 'chars': chars,
    }


class FakeTracePage:
    """The parts of a PyMuPDF page used by the trace reader and SVG device."""

    def __init__(self, traces, height=100.0, number=0, svg=None):
        self.number = number
        self.rect = SimpleNamespace(height=height)
        self.parent = SimpleNamespace(extract_font=None)
        self._traces = traces
        self._svg = svg or (
            '<svg xmlns="http://www.w3.org/2000/svg" '
            'xmlns:xlink="http://www.w3.org/1999/xlink" '
            f'width="100" height="{height:g}"><path d="M0 0L1 1"/></svg>')

    def get_texttrace(self):
        return self._traces

    def get_fonts(self):
        return []

    def get_svg_image(self, text_as_path=True):
        assert text_as_path
        if isinstance(self._svg, Exception):
            raise self._svg
        return self._svg


def build_sfnt(tables: dict[bytes, bytes], version: bytes = b'\x00\x01\x00\x00') -> bytes:
    """Assemble a minimal sfnt file from raw table data."""
    num_tables = len(tables)
    header = version + struct.pack(">HHHH", num_tables, 0, 0, 0)
    offset = 12 + 16 * num_tables
    records = b''
    body = b''
    for tag, data in tables.items():
        records += tag + struct.pack(">III", 0, offset + len(body), len(data))
        body += data
        body += b'\x00' * (-len(body) % 4)
    return header + records + body


def head_table(units_per_em=1000) -> bytes:
    data = bytearray(54)
    struct.pack_into(">H", data, 18, units_per_em)
    return bytes(data)


def metrics_header(long_metrics: int) -> bytes:
    """hhea / vhea table with the long-metric count at offset 34."""
    data = bytearray(36)
    struct.pack_into(">H", data, 34, long_metrics)
    return bytes(data)


def metrics_table(advances, extra_bearings=0) -> bytes:
    data = b''.join(struct.pack(">Hh", adv, 0) for adv in advances)
    return data + b'\x00\x00' * extra_bearings


@pytest.fixture
def fake_font() -> FakeFont:
    return FakeFont()


@pytest.fixture
def flip_cmt() -> Matrix:
    """Page transform for a 100 unit high page: y-up user space to y-down."""
    return Matrix(1.0, 0.0, 0.0, -1.0, 0.0, 100.0)


@pytest.fixture
def sfnt_bytes() -> bytes:
    """TrueType data with 3 long horizontal metrics and 2 short ones."""
    return build_sfnt({
        b'head': head_table(1000),
        b'hhea': metrics_header(3),
        b'hmtx': metrics_table([500, 600, 250], extra_bearings=2),
    })
