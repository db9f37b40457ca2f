"""Pydantic request models for FastAPI endpoints."""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from models.search_request import (
    DEFAULT_ARCHIVE_YEARS,
    DEFAULT_MAX_SOURCES,
    MAX_ARCHIVE_YEARS,
    MAX_SOURCES,
    MIN_ARCHIVE_YEARS,
    MIN_SOURCES,
    REQUESTABLE_SOURCES,
)
from models.source import SourceType

SourceKind = Literal["cia", "fbi", "nara", "nsa", "wayback", "web"]


class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str = Field(..., min_length=1)
    conversation_id: Optional[str] = Field(None, alias="conversationId")
    sources: list[SourceKind] = Field(default_factory=lambda: list(REQUESTABLE_SOURCES), min_length=1)
    max_sources: int = Field(DEFAULT_MAX_SOURCES, ge=MIN_SOURCES, le=MAX_SOURCES, alias="maxSources")
    archive_years: int = Field(
        DEFAULT_ARCHIVE_YEARS, ge=MIN_ARCHIVE_YEARS, le=MAX_ARCHIVE_YEARS, alias="archiveYears"
    )

    @field_validator("message")
    @classmethod
    def message_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("message must not be blank")
        return value


class BookmarkCreateRequest(BaseModel):
    """Body of ``POST /v1/bookmarks``; ``sourceType`` is classified from the URL when omitted."""

    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(..., min_length=1)
    url: str = Field(..., min_length=1)
    source_type: Optional[SourceType] = Field(None, alias="sourceType")
    description: Optional[str] = None
    document_date: Optional[str] = Field(None, alias="documentDate")
    declassified_date: Optional[str] = Field(None, alias="declassifiedDate")
    pages: Optional[str] = None

    @field_validator("title", "url")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value.strip()
