"""Extract plain text and titles from HTML pages."""

from dataclasses import dataclass

from bs4 import BeautifulSoup, Comment, Doctype

from chm_viewer.core.encoding import decode_text

# Elements removed together with their content before text extraction.
HIDDEN_ELEMENTS = ["script", "style"]


@dataclass(frozen=True)
class ExtractedPage:
    """Plain text and title pulled from one page."""

    title: str | None
    text: str


def _collapse(text: str) -> str:
    return " ".join(text.split())


def _parse(html: str) -> BeautifulSoup:
    soup = BeautifulSoup(html, "html.parser")
    for element in soup(HIDDEN_ELEMENTS):
        element.decompose()
    for node in soup.find_all(string=lambda s: isinstance(s, (Comment, Doctype))):
        node.extract()
    return soup


def _title_of(soup: BeautifulSoup) -> str | None:
    if soup.title is None:
        return None
    return _collapse(soup.title.get_text()) or None


def extract_html(html: str) -> ExtractedPage:
    """Extract the title and whitespace-normalized text from decoded markup.

    Script and style elements and comments are dropped, entities are
    decoded, and the text of adjacent elements is joined with a space.
    """
    soup = _parse(html)
    return ExtractedPage(title=_title_of(soup), text=_collapse(soup.get_text(" ")))


def strip_html(html: str) -> str:
    """Reduce markup to whitespace-normalized plain text."""
    return extract_html(html).text


def extract_title(html: str) -> str | None:
    """Return the first <title> text, or None if missing or blank."""
    return _title_of(_parse(html))


def extract_page(data: bytes) -> ExtractedPage:
    """Decode one page's bytes and extract its title and text.

    Raises:
        InvalidData: The bytes are not text in any supported encoding.
    """
    return extract_html(decode_text(data))
