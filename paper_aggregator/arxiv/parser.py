"""Atom feed parsing for arXiv query responses.

Entries are located by element local name, so the parser does not depend on
namespace prefixes or attribute order. Documents that are not well-formed are
split at every ``<entry`` boundary and each fragment is parsed on its own. A
fragment that still cannot be parsed is read field by field from its raw
text, so one bad field does not cost the rest of the record.
"""

import html
import logging
import re
import xml.etree.ElementTree as ET
from datetime import date
from typing import Iterator

from ..papers.models import PaperRecord
from ..settings import ABSTRACT_PREVIEW_LENGTH, ARXIV_ABS_URL, ARXIV_PDF_URL

logger = logging.getLogger(__name__)

SOURCE_NAME = "arxiv"

UNTITLED = "Untitled"
NO_ABSTRACT = "No abstract available"
UNKNOWN_AUTHOR = "Unknown"
ELLIPSIS = "..."

# Namespaces the arXiv feed declares on its root element. Fragments split out
# of a broken document lose that declaration, so they are re-wrapped in it.
_FRAGMENT_WRAPPER = (
    '<feed xmlns="http://www.w3.org/2005/Atom"'
    ' xmlns:arxiv="http://arxiv.org/schemas/atom"'
    ' xmlns:opensearch="http://a9.com/-/spec/opensearch/1.1/">{}</feed>'
)

_ENTRY_BOUNDARY = re.compile(r"<entry[\s>/]")
_ENTRY_CLOSE = "</entry>"
_CDATA = re.compile(r"<!\[CDATA\[(.*?)\]\]>", re.DOTALL)
_STRAY_AMPERSAND = re.compile(r"&(?!(?:[A-Za-z][\w.-]*|#\d+|#x[0-9A-Fa-f]+);)")
_TAG = re.compile(r"<[^>]*>")
_ATTRIBUTE = re.compile(r'([\w:.-]+)\s*=\s*"([^"]*)"')
_WHITESPACE = re.compile(r"\s+")


def _local_name(tag) -> str:
    # Comments and processing instructions carry a callable tag
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]


def _iter_named(element: ET.Element, name: str) -> Iterator[ET.Element]:
    for child in element.iter():
        if child is not element and _local_name(child.tag) == name:
            yield child


def _parse_fragment(text: str) -> ET.Element:
    """Parse one entry fragment.

    A fragment that is still not well-formed is retried with stray
    ampersands escaped, then read field by field with ``_salvage_entry``.
    """
    if not _ENTRY_BOUNDARY.search(text):
        text = f"<entry>{text}{_ENTRY_CLOSE}"
    elif _ENTRY_CLOSE not in text:
        text += _ENTRY_CLOSE

    for candidate in (text, _STRAY_AMPERSAND.sub("&amp;", text)):
        try:
            wrapper = ET.fromstring(_FRAGMENT_WRAPPER.format(candidate))
        except ET.ParseError as e:
            error = e
            continue
        for child in wrapper:
            if _local_name(child.tag) == "entry":
                return child
        return ET.Element("entry")

    logger.debug(f"Unparseable entry fragment ({error}): {text[:80]!r}")
    return _salvage_entry(text)


def _element_pattern(name: str) -> re.Pattern:
    return re.compile(
        rf"<(?:[\w.-]+:)?{name}(?:\s[^>]*)?>(.*?)</(?:[\w.-]+:)?{name}\s*>",
        re.DOTALL,
    )


def _empty_element_pattern(name: str) -> re.Pattern:
    return re.compile(rf"<(?:[\w.-]+:)?{name}\b([^>]*?)/?>")


_TEXT_FIELDS = {
    name: _element_pattern(name)
    for name in ("id", "title", "summary", "published", "updated")
}
_AUTHOR = _element_pattern("author")
_NAME = _element_pattern("name")
_LINK = _empty_element_pattern("link")
_CATEGORY = _empty_element_pattern("category")


def _raw_text(value: str) -> str:
    cdata = _CDATA.search(value)
    if cdata:
        return cdata.group(1).strip()
    return html.unescape(_TAG.sub("", value)).strip()


def _raw_attributes(value: str) -> dict[str, str]:
    return {key: html.unescape(val) for key, val in _ATTRIBUTE.findall(value)}


def _salvage_entry(text: str) -> ET.Element:
    """Rebuild an entry element from raw text, one field at a time."""
    entry = ET.Element("entry")

    for name, pattern in _TEXT_FIELDS.items():
        match = pattern.search(text)
        if match:
            ET.SubElement(entry, name).text = _raw_text(match.group(1))

    for block in _AUTHOR.findall(text):
        match = _NAME.search(block)
        if match:
            author = ET.SubElement(entry, "author")
            ET.SubElement(author, "name").text = _raw_text(match.group(1))

    for attributes in _LINK.findall(text):
        ET.SubElement(entry, "link", _raw_attributes(attributes))
    for attributes in _CATEGORY.findall(text):
        ET.SubElement(entry, "category", _raw_attributes(attributes))

    return entry


def collapse_whitespace(text: str) -> str:
    """Collapse runs of whitespace (including newlines) to single spaces."""
    return _WHITESPACE.sub(" ", text).strip()


def extract_field(fragment: ET.Element | str, name: str) -> str:
    """
    Return the text of the first element called ``name`` inside an entry.

    Args:
        fragment: Parsed entry element, or the raw text of one entry
        name: Element local name (e.g. "title", "summary", "published")

    Returns:
        Trimmed text content with CDATA wrappers removed, or "" when absent
    """
    if isinstance(fragment, str):
        fragment = _parse_fragment(fragment)

    for element in _iter_named(fragment, name):
        text = "".join(element.itertext()).strip()
        return _CDATA.sub(r"\1", text).strip()
    return ""


def extract_authors(entry: ET.Element) -> list[str]:
    """Names of every author block, in document order."""
    names: list[str] = []
    for author in _iter_named(entry, "author"):
        for name in _iter_named(author, "name"):
            text = collapse_whitespace("".join(name.itertext()))
            if text:
                names.append(text)
    return names


def extract_categories(entry: ET.Element) -> list[str]:
    """Term attribute of every category element, duplicates kept."""
    return [
        category.get("term", "")
        for category in _iter_named(entry, "category")
        if category.get("term")
    ]


def extract_identifier(raw_id: str) -> str:
    """Derive the external identifier from an entry id.

    "http://arxiv.org/abs/2301.00001v2" -> "2301.00001v2". Without an /abs/
    segment the last path segment is used, and failing that the raw value.
    """
    if "/abs/" in raw_id:
        tail = raw_id.split("/abs/", 1)[1].strip("/")
        if tail:
            return tail

    segment = raw_id.rstrip("/").rsplit("/", 1)[-1]
    return segment or raw_id


def secure_url(url: str) -> str:
    if url.startswith("http://"):
        return "https://" + url[len("http://"):]
    return url


def _landing_url(raw_id: str, paper_id: str) -> str:
    if raw_id.startswith(("http://", "https://")):
        return secure_url(raw_id)
    if paper_id:
        return f"{ARXIV_ABS_URL}/{paper_id}"
    return ""


def extract_pdf_url(entry: ET.Element, paper_id: str) -> str | None:
    """PDF link from the entry, or one built from the identifier."""
    for link in _iter_named(entry, "link"):
        href = link.get("href", "")
        if not href:
            continue
        if (
            href.lower().endswith(".pdf")
            or link.get("type") == "application/pdf"
            or link.get("title") == "pdf"
        ):
            return secure_url(href)

    if paper_id:
        return f"{ARXIV_PDF_URL}/{paper_id}.pdf"
    return None


def parse_date(value: str) -> date | None:
    """Keep the date portion of an ISO timestamp."""
    day = value.split("T", 1)[0].strip()
    if not day:
        return None
    try:
        return date.fromisoformat(day)
    except ValueError:
        logger.debug(f"Ignoring malformed date: {value!r}")
        return None


def truncate_abstract(text: str, limit: int = ABSTRACT_PREVIEW_LENGTH) -> str:
    """Cut ``text`` to its first ``limit`` characters plus an ellipsis.

    Applying it twice gives the same result as applying it once.
    """
    if len(text) <= limit:
        return text
    return text[:limit] + ELLIPSIS


def split_entries(document: str | bytes) -> list[ET.Element]:
    """Split a feed document into entry elements.

    A document without entries yields an empty list.
    """
    if isinstance(document, bytes):
        document = document.decode("utf-8", errors="replace")
    if not document.strip():
        return []

    try:
        root = ET.fromstring(document)
    except ET.ParseError as e:
        logger.warning(f"Feed is not well-formed ({e}), parsing entries individually")
        return [_parse_fragment(chunk) for chunk in _split_raw_entries(document)]

    if _local_name(root.tag) == "entry":
        return [root]
    return list(_iter_named(root, "entry"))


def _split_raw_entries(document: str) -> list[str]:
    starts = [match.start() for match in _ENTRY_BOUNDARY.finditer(document)]
    chunks: list[str] = []

    for i, start in enumerate(starts):
        end = starts[i + 1] if i + 1 < len(starts) else len(document)
        chunk = document[start:end]
        close = chunk.rfind(_ENTRY_CLOSE)
        if close != -1:
            chunk = chunk[: close + len(_ENTRY_CLOSE)]
        chunks.append(chunk)

    return chunks


def parse_entry(entry: ET.Element | str, truncate: bool = False) -> PaperRecord:
    """
    Map one feed entry to a PaperRecord.

    Missing fields fall back to placeholders so that partial entries still
    produce a record.

    Args:
        entry: Parsed entry element or raw entry text
        truncate: Whether to cut the abstract to the preview length

    Returns:
        PaperRecord with source "arxiv"
    """
    if isinstance(entry, str):
        entry = _parse_fragment(entry)

    raw_id = extract_field(entry, "id")
    paper_id = extract_identifier(raw_id)

    abstract = collapse_whitespace(extract_field(entry, "summary")) or NO_ABSTRACT
    if truncate:
        abstract = truncate_abstract(abstract)

    return PaperRecord(
        id=paper_id,
        title=collapse_whitespace(extract_field(entry, "title")) or UNTITLED,
        abstract=abstract,
        authors=extract_authors(entry) or [UNKNOWN_AUTHOR],
        categories=extract_categories(entry),
        published=parse_date(extract_field(entry, "published")),
        updated=parse_date(extract_field(entry, "updated")),
        url=_landing_url(raw_id, paper_id),
        pdf_url=extract_pdf_url(entry, paper_id),
        source=SOURCE_NAME,
    )


def parse_feed(document: str | bytes, truncate: bool = False) -> list[PaperRecord]:
    """Parse a whole feed document into records, one per entry."""
    papers = [parse_entry(entry, truncate=truncate) for entry in split_entries(document)]
    logger.debug(f"Parsed {len(papers)} entries from arXiv feed")
    return papers
