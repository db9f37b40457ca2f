"""
Citation extraction from generated text.

URL grammar: ``http://`` or ``https://`` followed by a run of characters that
are neither whitespace nor ``)``. Trailing closing punctuation is trimmed
from each match. Every match yields one Source, in order of appearance, so a
URL cited twice produces two records.
"""

import re

from models.source import Source
from utils.source_classifier import classify

URL_PATTERN = re.compile(r"https?://[^\s)]+")
CITATION_MARKER_PATTERN = re.compile(r"\[(\d+)\]")
TRAILING_PUNCTUATION = ".,;:!?)]}'\""

DEFAULT_MAX_SOURCES = 15
SNIPPET_CHARS = 200


def find_urls(text: str) -> list[str]:
    """Return URL-shaped substrings of ``text`` left to right."""
    if not text:
        return []

    urls = []
    for match in URL_PATTERN.finditer(text):
        url = match.group(0).rstrip(TRAILING_PUNCTUATION)
        # a bare scheme is not a URL
        if url.split("://", 1)[1]:
            urls.append(url)
    return urls


def extract_sources(
    text: str, max_sources: int = DEFAULT_MAX_SOURCES, prefix: str = "ai"
) -> list[Source]:
    """
    Build typed Source records from the URLs embedded in ``text``.

    Args:
        text: Free text, typically a model answer
        max_sources: Upper bound on records; later URLs are ignored
        prefix: Id prefix, ids are ``<prefix>-<1-based index>``

    Returns:
        List of Source records in order of appearance
    """
    if max_sources <= 0:
        return []

    snippet = (text or "")[:SNIPPET_CHARS] + "..."
    sources = []
    for index, url in enumerate(find_urls(text)[:max_sources], start=1):
        source_type, description = classify(url)
        sources.append(
            Source(
                id=f"{prefix}-{index}",
                title=f"Source {index}",
                url=url,
                type=source_type,
                description=description,
                snippet=snippet,
            )
        )
    return sources


def find_citation_markers(text: str) -> list[int]:
    """Return the numbers of all ``[n]`` markers in ``text``, in order."""
    if not text:
        return []
    return [int(m.group(1)) for m in CITATION_MARKER_PATTERN.finditer(text)]


def resolve_citation(marker: int, sources) -> Source | None:
    """
    Resolve a 1-based citation marker against an ordered source list.

    Out-of-range markers resolve to None.
    """
    if marker < 1 or marker > len(sources):
        return None
    return sources[marker - 1]
