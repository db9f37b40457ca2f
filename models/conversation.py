"""
Conversation records and bookmarks kept by the conversation store.

Messages are ordered by timestamp ascending; the assistant messages carry
the sources that were cited for that answer.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Literal

from models.source import Source, SourceType

Role = Literal["user", "assistant"]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Conversation:
    title: str
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "createdAt": self.created_at.isoformat().replace("+00:00", "Z"),
            "updatedAt": self.updated_at.isoformat().replace("+00:00", "Z"),
        }


@dataclass(frozen=True)
class ConversationMessage:
    conversation_id: str
    role: Role
    content: str
    sources: tuple[Source, ...] = ()
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "conversationId": self.conversation_id,
            "role": self.role,
            "content": self.content,
            "sources": [s.to_dict() for s in self.sources],
            "timestamp": self.timestamp.isoformat().replace("+00:00", "Z"),
        }


@dataclass(frozen=True)
class SearchHistoryItem:
    query: str
    results_count: int = 0
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "query": self.query,
            "resultsCount": self.results_count,
            "timestamp": self.timestamp.isoformat().replace("+00:00", "Z"),
        }


@dataclass(frozen=True)
class Bookmark:
    """A source the user saved for later, independent of any conversation."""

    title: str
    url: str
    source_type: SourceType
    description: str | None = None
    document_date: str | None = None
    declassified_date: str | None = None
    pages: str | None = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=utcnow)

    def __post_init__(self):
        if not isinstance(self.source_type, SourceType):
            object.__setattr__(self, "source_type", SourceType(self.source_type))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "url": self.url,
            "sourceType": self.source_type.value,
            "description": self.description,
            "documentDate": self.document_date,
            "declassifiedDate": self.declassified_date,
            "pages": self.pages,
            "createdAt": self.created_at.isoformat().replace("+00:00", "Z"),
        }
