"""Paper deduplication logic for multi-source search."""

import logging
import re
from typing import Iterable

from ..papers.models import PaperRecord
from ..papers.protocols import DedupKey

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")
_ARXIV_VERSION = re.compile(r"v\d+$")
_ARXIV_PDF = re.compile(r"arxiv\.org/pdf/(.+?)(?:\.pdf)?$")


def normalize_title(title: str) -> str:
    """Lower-case the title and drop all whitespace."""
    return _WHITESPACE.sub("", title.lower())


def title_key(paper: PaperRecord) -> str:
    """Default identity: exact match on the normalized title."""
    return normalize_title(paper.title)


def _get_arxiv_id(paper: PaperRecord) -> str | None:
    """Extract a version-less arXiv ID from a record."""
    if paper.source == "arxiv" and paper.id:
        return _ARXIV_VERSION.sub("", paper.id)

    if paper.pdf_url:
        match = _ARXIV_PDF.search(paper.pdf_url)
        if match:
            return _ARXIV_VERSION.sub("", match.group(1))

    return None


def arxiv_id_key(paper: PaperRecord) -> str:
    """Identity by arXiv ID (ignoring version), falling back to the title."""
    arxiv_id = _get_arxiv_id(paper)
    if arxiv_id:
        return f"arxiv:{arxiv_id}"
    return title_key(paper)


def deduplicate_papers(
    papers: Iterable[PaperRecord],
    key: DedupKey = title_key,
) -> list[PaperRecord]:
    """
    Deduplicate papers, keeping the first record seen for each key.

    Args:
        papers: Records in priority order
        key: Identity function (default: normalized title)

    Returns:
        Records with duplicates removed, original order preserved
    """
    seen: set[str] = set()
    unique: list[PaperRecord] = []
    total = 0

    for paper in papers:
        total += 1
        paper_key = key(paper)
        if paper_key in seen:
            logger.debug(f"Dropped duplicate from {paper.source}: {paper.title[:50]}")
            continue
        seen.add(paper_key)
        unique.append(paper)

    logger.info(f"Deduplicated {total} papers to {len(unique)}")
    return unique


def merge_results(
    result_sets: Iterable[Iterable[PaperRecord]],
    key: DedupKey = title_key,
) -> list[PaperRecord]:
    """
    Merge per-source result sets into one deduplicated list.

    Earlier result sets win: when two sources return the same paper, the
    record from the source listed first is kept.
    """
    return deduplicate_papers(
        (paper for results in result_sets for paper in results),
        key=key,
    )
