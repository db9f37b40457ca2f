"""Pydantic response models (DTOs) for FastAPI endpoints."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class HealthResponseDTO(_CamelModel):
    status: str
    service: str
    version: str
    timestamp: str
    uptime_s: float = Field(..., alias="uptimeS")


class SourceDTO(_CamelModel):
    id: str
    title: str
    url: str
    type: str
    description: str | None = None
    document_date: str | None = Field(None, alias="documentDate")
    declassified_date: str | None = Field(None, alias="declassifiedDate")
    pages: str | None = None
    snippet: str | None = None

    @classmethod
    def from_source(cls, source):
        return cls(
            id=source.id,
            title=source.title,
            url=source.url,
            type=source.type.value,
            description=source.description,
            document_date=source.document_date,
            declassified_date=source.declassified_date,
            pages=source.pages,
            snippet=source.snippet,
        )


class ChatResponseDTO(_CamelModel):
    message: str
    sources: list[SourceDTO] = Field(default_factory=list)
    conversation_id: str = Field(..., alias="conversationId")
    message_id: str = Field(..., alias="messageId")
    model_used: str | None = Field(None, alias="modelUsed")
    degraded: bool = False

    @classmethod
    def from_aggregate_result(cls, result):
        """Convert AggregateResult to DTO."""
        return cls(
            message=result.answer_text,
            sources=[SourceDTO.from_source(s) for s in result.sources],
            conversation_id=result.conversation_id,
            message_id=result.message_id,
            model_used=result.model_used,
            degraded=result.degraded,
        )


class ConversationDTO(_CamelModel):
    id: str
    title: str
    created_at: str = Field(..., alias="createdAt")
    updated_at: str = Field(..., alias="updatedAt")

    @classmethod
    def from_conversation(cls, conversation):
        return cls(**conversation.to_dict())


class MessageDTO(_CamelModel):
    id: str
    conversation_id: str = Field(..., alias="conversationId")
    role: str
    content: str
    sources: list[SourceDTO] = Field(default_factory=list)
    timestamp: str

    @classmethod
    def from_message(cls, message):
        return cls(
            id=message.id,
            conversation_id=message.conversation_id,
            role=message.role,
            content=message.content,
            sources=[SourceDTO.from_source(s) for s in message.sources],
            timestamp=message.to_dict()["timestamp"],
        )


class SearchHistoryDTO(_CamelModel):
    id: str
    query: str
    results_count: int = Field(..., alias="resultsCount")
    timestamp: str

    @classmethod
    def from_item(cls, item):
        return cls(**item.to_dict())


class ProviderStatusDTO(_CamelModel):
    id: str
    name: str
    model: str
    priority: int
    available: bool
    unavailable_until: float | None = Field(None, alias="unavailableUntil")


class ErrorResponseDTO(BaseModel):
    detail: Any


class BookmarkDTO(_CamelModel):
    id: str
    title: str
    url: str
    source_type: str = Field(..., alias="sourceType")
    description: str | None = None
    document_date: str | None = Field(None, alias="documentDate")
    declassified_date: str | None = Field(None, alias="declassifiedDate")
    pages: str | None = None
    created_at: str = Field(..., alias="createdAt")

    @classmethod
    def from_bookmark(cls, bookmark):
        return cls(**bookmark.to_dict())
