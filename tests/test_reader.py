"""Tests for the XML token source and the primitive element reader."""

import numpy as np
import pytest

from daeparse.core.errors import (
    MalformedDocumentError,
    MissingAttributeError,
    MissingContentError,
    NumericFormatError,
)
from daeparse.xml.tokens import ExpatTokenSource, TokenType


class TestExpatTokenSource:
    """Test the expat-backed token stream."""

    def test_token_sequence(self):
        """Test start, text and end tokens in document order."""
        source = ExpatTokenSource.from_string('<a x="1"><b>hi</b><c/></a>')
        seen = []
        while source.read():
            seen.append((source.node_type, source.node_name or source.text))

        assert seen == [
            (TokenType.ELEMENT, "a"),
            (TokenType.ELEMENT, "b"),
            (TokenType.TEXT, "hi"),
            (TokenType.ELEMENT_END, "b"),
            (TokenType.ELEMENT, "c"),
            (TokenType.ELEMENT_END, "c"),
            (TokenType.ELEMENT_END, "a"),
        ]

    def test_whitespace_text_dropped(self):
        """Test that whitespace between elements produces no tokens."""
        source = ExpatTokenSource.from_string("<a>\n   <b/>\n</a>")
        types = []
        while source.read():
            types.append(source.node_type)
        assert TokenType.TEXT not in types

    def test_small_chunks_merge_text(self):
        """Test that text split across feed chunks arrives as one token."""
        source = ExpatTokenSource.from_string("<a>1.5 2.5 3.5</a>", chunk_size=2)
        texts = []
        while source.read():
            if source.node_type is TokenType.TEXT:
                texts.append(source.text)
        assert texts == ["1.5 2.5 3.5"]

    def test_attributes(self):
        """Test attribute lookup on the current element."""
        source = ExpatTokenSource.from_string('<a id="x" name="Thing"/>')
        source.read()
        assert source.get_attribute("id") == "x"
        assert source.get_attribute("name") == "Thing"
        assert source.get_attribute("missing") is None

    def test_end_of_input(self):
        """Test that reading past the end keeps returning False."""
        source = ExpatTokenSource.from_string("<a/>")
        while source.read():
            pass
        assert source.read() is False
        assert source.node_type is TokenType.NONE

    def test_malformed_xml_reports_line(self):
        """Test that expat errors become MalformedDocumentError with a line."""
        source = ExpatTokenSource.from_string("<a>\n<b></c>\n</a>", file_name="bad.dae")
        with pytest.raises(MalformedDocumentError) as exc_info:
            while source.read():
                pass
        assert exc_info.value.file_name == "bad.dae"
        assert exc_info.value.line == 2


class TestAttributes:
    """Test attribute lookup helpers."""

    def test_require_attribute(self, make_reader):
        reader = make_reader('<a id="x"/>')
        assert reader.require_attribute("id") == "x"

    def test_require_attribute_missing(self, make_reader):
        """Test that a missing required attribute carries location info."""
        reader = make_reader("<root>\n<a/>\n</root>", at="a")
        with pytest.raises(MissingAttributeError, match='"id"') as exc_info:
            reader.require_attribute("id")
        assert exc_info.value.file_name == "<string>"
        assert exc_info.value.line == 2

    def test_optional_attribute(self, make_reader):
        reader = make_reader('<a name="n"/>')
        assert reader.optional_attribute("name") == "n"
        assert reader.optional_attribute("id") is None
        assert reader.optional_attribute("id", "fallback") == "fallback"

    def test_int_attribute(self, make_reader):
        reader = make_reader('<a count="4"/>')
        assert reader.int_attribute("count") == 4
        assert reader.int_attribute("stride", 1) == 1

    def test_int_attribute_invalid(self, make_reader):
        reader = make_reader('<a count="four"/>')
        with pytest.raises(NumericFormatError):
            reader.int_attribute("count")


class TestTextContent:
    """Test text extraction."""

    def test_leading_whitespace_skipped(self, make_reader):
        reader = make_reader("<a>   \n  hello </a>")
        assert reader.text_content() == "hello "

    def test_empty_element_raises(self, make_reader):
        reader = make_reader("<root><a/></root>", at="a")
        with pytest.raises(MissingContentError):
            reader.text_content()

    def test_child_element_instead_of_text_raises(self, make_reader):
        reader = make_reader("<root><a><b/></a></root>", at="a")
        with pytest.raises(MissingContentError):
            reader.text_content()

    def test_optional_text_content_empty(self, make_reader):
        """Test that an empty element leaves the reader on its closing tag."""
        reader = make_reader("<root><a></a></root>", at="a")
        assert reader.optional_text_content() is None
        assert reader.is_element_end("a")

    def test_truncated_document(self, make_reader):
        reader = make_reader("<root><a>1 2", at="a")
        with pytest.raises(MalformedDocumentError):
            reader.text_content()
            reader.verify_closing("a")


class TestReadFloats:
    """Test numeric content parsing."""

    def test_whitespace_and_commas(self, make_reader):
        reader = make_reader("<a>1, 2,3\n4.5   -6e1</a>")
        np.testing.assert_array_equal(reader.read_floats(), [1, 2, 3, 4.5, -60])

    def test_invalid_token(self, make_reader):
        reader = make_reader("<a>1 abc 3</a>")
        with pytest.raises(NumericFormatError):
            reader.read_floats()

    def test_arity_mismatch(self, make_reader):
        reader = make_reader("<a>1 2</a>")
        with pytest.raises(NumericFormatError, match="expects 3 values"):
            reader.read_floats(arity=3)

    def test_allow_empty(self, make_reader):
        reader = make_reader("<root><a/></root>", at="a")
        values = reader.read_floats(allow_empty=True)
        assert values.shape == (0,)


class TestVerifyClosing:
    """Test closing tag verification."""

    def test_after_text(self, make_reader):
        reader = make_reader("<root><a>x</a><b/></root>", at="a")
        reader.text_content()
        reader.verify_closing("a")
        assert reader.is_element_end("a")
        reader.read()
        assert reader.is_element("b")

    def test_already_on_closing_tag(self, make_reader):
        reader = make_reader("<root><a/></root>", at="a")
        reader.read()
        reader.verify_closing("a")
        assert reader.is_element_end("a")

    def test_unexpected_element(self, make_reader):
        reader = make_reader("<root><a>x<b/></a></root>", at="a")
        reader.text_content()
        with pytest.raises(MalformedDocumentError, match="Expected end of <a>"):
            reader.verify_closing("a")

    def test_wrong_closing_tag(self, make_reader):
        reader = make_reader("<root><a><b/></a></root>", at="b")
        reader.read()
        with pytest.raises(MalformedDocumentError):
            reader.verify_closing("a")


class TestChildren:
    """Test child element iteration."""

    def test_yields_child_names(self, make_reader):
        reader = make_reader("<root>text<a/><b><c/></b><d/></root>")
        names = []
        for name in reader.children("root"):
            names.append(name)
            reader.skip_element()
        assert names == ["a", "b", "d"]
        assert reader.is_element_end("root")

    def test_empty_element(self, make_reader):
        reader = make_reader("<root/>")
        assert list(reader.children("root")) == []


class TestSkipElement:
    """Test unknown-element skipping."""

    def test_self_closing(self, make_reader):
        reader = make_reader("<root><unknown/><next/></root>", at="unknown")
        reader.skip_element()
        assert reader.is_element_end("unknown")
        reader.read()
        assert reader.is_element("next")

    def test_nested_same_name(self, make_reader):
        """Test that nesting balance is kept for identically named elements."""
        xml = "<root><skip><skip><skip/></skip>t</skip><next/></root>"
        reader = make_reader(xml, at="skip")
        reader.skip_element()
        reader.read()
        assert reader.is_element("next")

    def test_deeply_nested(self, make_reader):
        """Test skipping a subtree far deeper than the recursion limit."""
        depth = 3000
        xml = (
            "<root><extra>"
            + "<x>" * depth
            + "</x>" * depth
            + "</extra><sibling/></root>"
        )
        reader = make_reader(xml, at="extra")
        reader.skip_element()
        assert reader.is_element_end("extra")
        reader.read()
        assert reader.is_element("sibling")

    def test_truncated_raises(self, make_reader):
        reader = make_reader("<root><extra><x>", at="extra")
        with pytest.raises(MalformedDocumentError):
            reader.skip_element()
