"""Tests for the SVG text layer device and page assembly."""

import logging
import xml.etree.ElementTree as ET

import pytest

from conftest import FakeFont, FakeTracePage, make_span, make_trace
from textlayer.core.error import DocumentError, InvalidTransform, SinkWriteError
from textlayer.core.types import Text
from textlayer.core.writer import XMLWriter
from textlayer.devices.svg import TextLayerDevice, render_page, render_text_layer
from textlayer.devices.svg.svg import LAYER_CLASS

SVG = '{http://www.w3.org/2000/svg}'
XML_SPACE = '{http://www.w3.org/XML/1998/namespace}space'

OPERATIONS = ['fill_text', 'stroke_text', 'clip_text', 'clip_stroke_text']


def _text(*spans):
    return Text(spans)


def _hello():
    return make_span([(10, 90, 1, "H"), (16, 90, 2, "i")])


def _degenerate():
    return make_span([(10, 50, 1, "X")], trm=(0, 0, 0, 0, 0, 0))


class FailingSink:
    def start(self, tag, attrs):
        raise SinkWriteError("sink closed")

    def data(self, text):
        raise SinkWriteError("sink closed")

    def end(self, tag):
        raise SinkWriteError("sink closed")


# ----------------------------------------------------------------------
# Device dispatch and error policy
# ----------------------------------------------------------------------

class TestTextLayerDevice:
    def test_all_operations_render_identically(self, flip_cmt):
        outputs = []
        for operation in OPERATIONS:
            writer = XMLWriter()
            getattr(TextLayerDevice(writer), operation)(_text(_hello()), flip_cmt)
            outputs.append(writer.close())
        assert len(set(outputs)) == 1
        assert '<tspan y="-90" x="10 16">Hi</tspan>' in outputs[0]

    def test_spans_rendered_in_order(self, flip_cmt):
        writer = XMLWriter()
        device = TextLayerDevice(writer)
        second = make_span([(10, 50, 1, "B")])
        device.fill_text(_text(_hello(), second), flip_cmt)
        out = writer.close()
        assert out.index(">Hi<") < out.index(">B<")
        assert device.spans_rendered == 2

    def test_degenerate_span_skipped(self, flip_cmt, caplog):
        writer = XMLWriter()
        device = TextLayerDevice(writer)
        with caplog.at_level(logging.WARNING, logger='textlayer.devices.svg.svg'):
            device.fill_text(_text(_degenerate(), _hello()), flip_cmt)
        out = writer.close()
        assert out.count('<text ') == 1
        assert '>X<' not in out
        assert device.spans_skipped == 1
        assert device.spans_rendered == 1
        assert "Skipping text span" in caplog.text

    def test_strict_mode_raises(self, flip_cmt):
        writer = XMLWriter()
        device = TextLayerDevice(writer, strict=True)
        with pytest.raises(InvalidTransform):
            device.stroke_text(_text(_degenerate()), flip_cmt)
        assert writer.close() == ''

    def test_sink_failure_propagates(self, flip_cmt):
        device = TextLayerDevice(FailingSink())
        with pytest.raises(SinkWriteError):
            device.clip_text(_text(_hello()), flip_cmt)

    def test_precision_passed_through(self, flip_cmt):
        writer = XMLWriter()
        span = make_span([(10.123456, 90, 1, "a")])
        TextLayerDevice(writer, precision=1).fill_text(_text(span), flip_cmt)
        assert 'x="10.1"' in writer.close()

    def test_fallback_width(self, flip_cmt):
        writer = XMLWriter()
        span = make_span([(0, 90, 1, "f"), (0, 90, -1, "i")], font=FakeFont(default=None))
        TextLayerDevice(writer, fallback_width=0.5).fill_text(_text(span), flip_cmt)
        # 0.5 em at 10pt split over two characters
        assert 'x="0 2.5"' in writer.close()


# ----------------------------------------------------------------------
# Page assembly
# ----------------------------------------------------------------------

class TestRenderPage:
    def test_layer_appended_last(self):
        page = FakeTracePage([make_trace("Hi", x=10, y=20)])
        svg = render_page(page)
        assert svg.startswith('<?xml version="1.0" encoding="UTF-8"?>')
        root = ET.fromstring(svg.encode('utf-8'))
        assert root.tag == SVG + 'svg'
        layer = root[-1]
        assert layer.tag == SVG + 'g'
        assert layer.get('class') == LAYER_CLASS
        text = layer.find(SVG + 'text')
        assert text.get(XML_SPACE) == 'preserve'
        assert text.get('transform') == 'matrix(1,0,0,1,0,100)'
        assert text.get('font-size') == '12pt'
        assert text.get('opacity') == '0'
        tspan = text.find(SVG + 'tspan')
        assert tspan.get('y') == '-80'
        assert tspan.get('x') == '10 16'
        assert tspan.text == 'Hi'

    def test_graphics_kept(self):
        page = FakeTracePage([make_trace("Hi")])
        root = ET.fromstring(render_page(page).encode('utf-8'))
        assert root[0].tag == SVG + 'path'

    def test_default_namespace_serialized(self):
        svg = render_page(FakeTracePage([make_trace("Hi")]))
        assert '<svg xmlns="http://www.w3.org/2000/svg"' in svg
        assert '<g class="textlayer" xmlns="http://www.w3.org/2000/svg">' in svg
        assert 'xml:space="preserve"' in svg

    def test_page_without_text_has_no_layer(self):
        root = ET.fromstring(render_page(FakeTracePage([])).encode('utf-8'))
        assert root.find(SVG + 'g') is None

    def test_no_text_layer_option(self):
        page = FakeTracePage([make_trace("Hi")])
        root = ET.fromstring(render_page(page, text_layer=False).encode('utf-8'))
        assert root.find(SVG + 'g') is None

    def test_text_escaped(self):
        page = FakeTracePage([make_trace("a<b&c")])
        svg = render_page(page)
        assert 'a&lt;b&amp;c' in svg
        root = ET.fromstring(svg.encode('utf-8'))
        assert "".join(root[-1].itertext()) == "a<b&c"

    def test_carriage_return_survives(self):
        svg = render_page(FakeTracePage([make_trace("a\rb")]))
        assert 'a&#13;b' in svg
        root = ET.fromstring(svg.encode('utf-8'))
        assert "".join(root[-1].itertext()) == "a\rb"

    def test_control_character_in_font_name(self):
        page = FakeTracePage([make_trace("Hi", font="Bad\x01Font-Bold")])
        root = ET.fromstring(render_page(page).encode('utf-8'))
        text = root[-1].find(SVG + 'text')
        assert text.get('font-family') == 'Bad\ufffdFont'
        assert text.find(SVG + 'tspan').text == 'Hi'

    def test_same_layer_as_fragment(self):
        page = FakeTracePage([make_trace("Hi"), make_trace("yo", y=40, seqno=1)])
        root = ET.fromstring(render_page(page).encode('utf-8'))
        fragment = ET.fromstring(render_text_layer(page))
        assert ET.tostring(root[-1]) == ET.tostring(fragment)

    def test_layer_in_empty_root(self):
        page = FakeTracePage([make_trace("Hi")],
                             svg='<svg xmlns="http://www.w3.org/2000/svg"/>')
        root = ET.fromstring(render_page(page).encode('utf-8'))
        assert len(root) == 1
        assert root[0].get('class') == LAYER_CLASS
        assert "".join(root.itertext()) == "Hi"

    def test_strict_page_failure(self):
        page = FakeTracePage([make_trace("Hi", size=0)])
        with pytest.raises(InvalidTransform):
            render_page(page, strict=True)

    def test_degenerate_span_skipped_by_default(self):
        page = FakeTracePage([make_trace("no", size=0), make_trace("Hi", seqno=1)])
        root = ET.fromstring(render_page(page).encode('utf-8'))
        assert "".join(root[-1].itertext()) == "Hi"

    def test_render_failure(self):
        page = FakeTracePage([], svg=RuntimeError("broken page"))
        with pytest.raises(DocumentError, match="broken page"):
            render_page(page)

    def test_unparseable_svg(self):
        page = FakeTracePage([], svg='<svg')
        with pytest.raises(DocumentError, match="page 1"):
            render_page(page)


class TestRenderTextLayer:
    def test_fragment(self):
        page = FakeTracePage([make_trace("Hi", x=10, y=20)])
        fragment = render_text_layer(page)
        assert fragment.startswith(
            '<g class="textlayer" xmlns="http://www.w3.org/2000/svg">')
        root = ET.fromstring(fragment)
        assert root.tag == SVG + 'g'
        assert root.find(f'{SVG}text/{SVG}tspan').text == 'Hi'

    def test_empty_page(self):
        fragment = render_text_layer(FakeTracePage([]))
        assert fragment == '<g class="textlayer" xmlns="http://www.w3.org/2000/svg"></g>'

    def test_idempotent(self):
        page = FakeTracePage([make_trace("Hello"), make_trace("World", y=40, seqno=1)])
        assert render_text_layer(page) == render_text_layer(page)
