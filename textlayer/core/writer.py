# TextLayer - Selectable Text Layers for Vector Page Graphics
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Streaming XML Writer

The text layer never builds a tree of its own. It writes three kinds of
events into a sink, in document order:

    start(tag, attrs)   open an element
    data(text)          character data
    end(tag)            close the innermost element

This is the same interface as xml.etree.ElementTree.TreeBuilder. The writer
does its own escaping: ElementTree writes a carriage return in text as-is,
and a parser reads it back as a newline.
"""

from __future__ import annotations

import io
import re
from typing import Mapping, TextIO

from .error import SinkWriteError

# Characters XML 1.0 does not allow anywhere in a document
_XML_ILLEGAL_RE = re.compile('[\x00-\x08\x0b\x0c\x0e-\x1f\ufffe\uffff]')

# Tag and attribute names are written verbatim, so they must look like names
_NAME_RE = re.compile(r'^[A-Za-z_][\w.\-]*(:[A-Za-z_][\w.\-]*)?$')


def xml_safe(text: str) -> str:
    """Replace characters that cannot appear in XML 1.0 with U+FFFD.

    The replacement is one for one, so string length is preserved.
    """
    return _XML_ILLEGAL_RE.sub('\ufffd', text)


def escape_text(text: str) -> str:
    """Escape character data."""
    text = xml_safe(text)
    text = text.replace('&', '&amp;').replace('<', '&lt;').replace('>', '&gt;')
    # Parsers fold CR and CRLF into LF unless the CR is a reference
    return text.replace('\r', '&#13;')


def escape_attr(value: str) -> str:
    """Escape an attribute value for use inside double quotes."""
    value = escape_text(value).replace('"', '&quot;')
    # Attribute value normalization would turn literal whitespace controls
    # into spaces on read
    return value.replace('\t', '&#9;').replace('\n', '&#10;')


class XMLWriter:
    """
    Event sink that serializes markup to a text stream.

    Tracks the stack of open elements so that every element is closed exactly
    once and in nesting order. Any failure, whether from the underlying stream
    or from an out-of-order end(), is raised as SinkWriteError. After such a
    failure the output is structurally incomplete and should be discarded.
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        self._owns_stream = stream is None
        self.stream = io.StringIO() if stream is None else stream
        self._open: list[str] = []

    @property
    def depth(self) -> int:
        """Number of currently open elements."""
        return len(self._open)

    def start(self, tag: str, attrs: Mapping[str, str] | None = None) -> None:
        _check_name(tag)
        parts = ['<', tag]
        for key, value in (attrs or {}).items():
            _check_name(key)
            parts.append(f' {key}="{escape_attr(str(value))}"')
        parts.append('>')
        self._write(''.join(parts))
        self._open.append(tag)

    def data(self, text: str) -> None:
        if not self._open:
            raise SinkWriteError("character data outside of any element")
        if text:
            self._write(escape_text(text))

    def end(self, tag: str) -> None:
        if not self._open:
            raise SinkWriteError(f"end of <{tag}> with no open element")
        if self._open[-1] != tag:
            raise SinkWriteError(
                f"end of <{tag}> while <{self._open[-1]}> is open")
        self._write(f'</{tag}>')
        self._open.pop()

    def close(self) -> str | None:
        """Check that all elements are closed.

        Returns:
            The serialized output if the writer owns its buffer, else None.
        """
        if self._open:
            raise SinkWriteError(
                f"{len(self._open)} element(s) still open: <{self._open[-1]}>")
        if self._owns_stream:
            return self.stream.getvalue()
        return None

    def getvalue(self) -> str:
        if not self._owns_stream:
            raise SinkWriteError("writer does not own its output stream")
        return self.stream.getvalue()

    def _write(self, chunk: str) -> None:
        try:
            self.stream.write(chunk)
        except (OSError, ValueError) as exc:
            raise SinkWriteError(f"output stream write failed: {exc}") from exc


def _check_name(name: str) -> None:
    if not _NAME_RE.match(name):
        raise SinkWriteError(f"invalid XML name {name!r}")
