# TextLayer - Selectable Text Layers for Vector Page Graphics
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Glyph advance widths from embedded sfnt fonts.

Reads the horizontal and vertical metrics of TrueType / OpenType font
programs extracted from a document:

  head  unitsPerEm                 (offset 18)
  hhea  numberOfHMetrics           (offset 34)
  hmtx  longHorMetric[n] + lsb[]   (advanceWidth, lsb)
  vhea  numOfLongVerMetrics        (offset 34, optional)
  vmtx  longVerMetric[n] + tsb[]   (advanceHeight, tsb, optional)

Glyph ids past the last long metric share its advance, as OpenType
requires. Only the tables needed for advances are parsed; the glyph
outlines are never touched.
"""

from __future__ import annotations

import struct

from .error import FontDataError, MetricsLookupError

# sfnt version tags accepted as a font program
_SFNT_VERSIONS = frozenset({b'\x00\x01\x00\x00', b'OTTO', b'true'})

# Advance returned for vertical lookups when the font has no vmtx
DEFAULT_VERTICAL_ADVANCE = 1.0


def _find_table(data: bytes, tag: bytes) -> tuple[int | None, int | None]:
    """Find a table in the OTF/TTF table directory.

    Returns (offset, length) or (None, None) if not found.
    """
    if len(data) < 12:
        return None, None

    num_tables = struct.unpack_from(">H", data, 4)[0]
    for i in range(num_tables):
        rec_offset = 12 + i * 16
        if rec_offset + 16 > len(data):
            break
        tbl_tag = data[rec_offset : rec_offset + 4]
        if tbl_tag == tag:
            tbl_offset = struct.unpack_from(">I", data, rec_offset + 8)[0]
            tbl_length = struct.unpack_from(">I", data, rec_offset + 12)[0]
            if tbl_offset + tbl_length > len(data):
                return None, None
            return tbl_offset, tbl_length

    return None, None


class SfntFont:
    """
    Advance-width provider for one sfnt font program.

    Args:
        name: Font name as reported by the page (e.g. ``ABCDEF+Arial-Bold``)
        data: Raw font file bytes

    Raises:
        FontDataError: if the data is not an sfnt font with usable metrics.
    """

    def __init__(self, name: str, data: bytes) -> None:
        self.name = name
        data = bytes(data)
        if len(data) < 12 or data[:4] not in _SFNT_VERSIONS:
            raise FontDataError(f"{name}: not a TrueType/OpenType font")

        head_offset, head_length = _find_table(data, b'head')
        if head_offset is None or head_length < 20:
            raise FontDataError(f"{name}: missing head table")
        self.units_per_em = struct.unpack_from(">H", data, head_offset + 18)[0]
        if self.units_per_em == 0:
            raise FontDataError(f"{name}: unitsPerEm is zero")

        self._h_advances = _read_long_metrics(data, b'hhea', b'hmtx')
        if self._h_advances is None:
            raise FontDataError(f"{name}: missing hhea/hmtx tables")
        self._v_advances = _read_long_metrics(data, b'vhea', b'vmtx')

    def advance_glyph(self, gid: int, vertical: bool = False) -> float:
        """Return the advance of glyph *gid* in em units."""
        if gid < 0:
            raise MetricsLookupError(f"{self.name}: negative glyph id {gid}")
        if vertical:
            if self._v_advances is None:
                return DEFAULT_VERTICAL_ADVANCE
            advances = self._v_advances
        else:
            advances = self._h_advances
        if not advances:
            raise MetricsLookupError(f"{self.name}: font has no metrics")
        advance = advances[gid] if gid < len(advances) else advances[-1]
        return advance / self.units_per_em

    def __repr__(self) -> str:
        return f'SfntFont({self.name!r}, upem={self.units_per_em})'


class MissingFont:
    """Stand-in for a font whose program is unavailable; every lookup fails."""

    def __init__(self, name: str, reason: str = "font program not available") -> None:
        self.name = name
        self.reason = reason

    def advance_glyph(self, gid: int, vertical: bool = False) -> float:
        raise MetricsLookupError(f"{self.name}: {self.reason}")

    def __repr__(self) -> str:
        return f'MissingFont({self.name!r})'


def _read_long_metrics(data: bytes, header_tag: bytes, metrics_tag: bytes):
    """
    Read the advance column of an hmtx/vmtx table.

    Both header tables keep the long-metric count at offset 34, and both
    metric tables start with (uint16 advance, int16 bearing) records.

    Returns:
        List of advances in font units, or None if either table is missing.
    """
    hdr_offset, hdr_length = _find_table(data, header_tag)
    mtx_offset, mtx_length = _find_table(data, metrics_tag)
    if hdr_offset is None or mtx_offset is None:
        return None
    if hdr_length < 36:
        raise FontDataError(f"{header_tag.decode()} table truncated")

    count = struct.unpack_from(">H", data, hdr_offset + 34)[0]
    # Tolerate a count that overruns the table: read what is there
    count = min(count, mtx_length // 4)
    return [struct.unpack_from(">H", data, mtx_offset + i * 4)[0]
            for i in range(count)]
