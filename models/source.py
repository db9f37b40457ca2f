"""
Source - Normalized reference to external research material.

Every component that contributes citations (router, archival search, snapshot
search, web search) emits Source records so the orchestrator can merge them
into one ordered list.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class SourceType(str, Enum):
    """Closed set of provenance tags a Source can carry."""

    CIA = "cia"
    FBI = "fbi"
    NARA = "nara"
    NSA = "nsa"
    WAYBACK = "wayback"
    ACADEMIC = "academic"
    DOE = "doe"
    WEB = "web"


ARCHIVE_SOURCE_TYPES = frozenset({SourceType.CIA, SourceType.FBI, SourceType.NARA, SourceType.NSA})


@dataclass(frozen=True)
class Source:
    id: str
    title: str
    url: str
    type: SourceType
    description: str | None = None
    document_date: str | None = None
    declassified_date: str | None = None
    pages: str | None = None
    snippet: str | None = None

    def __post_init__(self):
        if not isinstance(self.type, SourceType):
            object.__setattr__(self, "type", SourceType(self.type))

    @property
    def is_archive(self) -> bool:
        return self.type in ARCHIVE_SOURCE_TYPES

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "url": self.url,
            "type": self.type.value,
        }
        optional = {
            "description": self.description,
            "documentDate": self.document_date,
            "declassifiedDate": self.declassified_date,
            "pages": self.pages,
            "snippet": self.snippet,
        }
        data.update({k: v for k, v in optional.items() if v is not None})
        return data


@dataclass(frozen=True)
class AggregateResult:
    """
    Final answer for one research request.

    `sources` is the citation order: marker [n] in `answer_text` refers to
    sources[n - 1].
    """

    answer_text: str
    sources: tuple[Source, ...]
    conversation_id: str | None = None
    message_id: str | None = None
    model_used: str | None = None
    degraded: bool = False
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def source_count(self) -> int:
        return len(self.sources)
