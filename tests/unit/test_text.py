"""Tests for text decoding and plain-text extraction."""

import pytest

from chm_viewer.core.encoding import decode_text
from chm_viewer.core.search.text import extract_page, extract_title, strip_html
from chm_viewer.errors import InvalidData


def test_decode_text_prefers_utf8() -> None:
    assert decode_text("naïve".encode()) == "naïve"


def test_decode_text_falls_back_to_windows_1252() -> None:
    assert decode_text(b"caf\xe9 \x93quoted\x94") == "café “quoted”"


def test_decode_text_raises_invalid_data() -> None:
    with pytest.raises(InvalidData):
        decode_text(b"\x81\x8d\x8f")


def test_strip_html_removes_script_and_style_content() -> None:
    html = (
        "<p>Before</p><SCRIPT type='text/javascript'>var hidden = 1;</script>"
        "<style>\n.x { color: red; }\n</STYLE><p>After</p>"
    )
    assert strip_html(html) == "Before After"


def test_strip_html_replaces_tags_with_spaces() -> None:
    assert strip_html("<td>one</td><td>two</td>") == "one two"


def test_strip_html_decodes_entities() -> None:
    assert strip_html("<p>Fish &amp; Chips&nbsp;&lt;3</p>") == "Fish & Chips <3"


def test_strip_html_collapses_whitespace() -> None:
    assert strip_html("\n  <p>line one\n\n\tline two  </p>\n") == "line one line two"


def test_extract_title_is_case_insensitive() -> None:
    assert extract_title("<HEAD><TITLE> Getting Started </TITLE></HEAD>") == "Getting Started"


def test_extract_title_uses_first_title() -> None:
    assert extract_title("<title>First</title><title>Second</title>") == "First"


def test_extract_title_missing_or_blank() -> None:
    assert extract_title("<html><body>No title</body></html>") is None
    assert extract_title("<title>   </title>") is None


def test_extract_title_decodes_entities() -> None:
    assert extract_title("<title>Q &amp; A</title>") == "Q & A"


def test_extract_page_from_bytes() -> None:
    page = extract_page(b"<title>Intro</title><body><p>Hello world</p></body>")
    assert page.title == "Intro"
    assert page.text == "Intro Hello world"


def test_extract_page_raises_on_undecodable_bytes() -> None:
    with pytest.raises(InvalidData):
        extract_page(b"\x81\x8d")


def test_strip_html_ignores_comments_and_attribute_values() -> None:
    html = '<p title="a > b">Hello</p><!-- if x > 1 then hidden --> world'
    assert strip_html(html) == "Hello world"


def test_strip_html_drops_doctype() -> None:
    assert strip_html("<!DOCTYPE html><html><body>Body</body></html>") == "Body"
