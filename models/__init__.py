"""
Models package for research results and normalized provider responses.
"""

from .conversation import Bookmark, Conversation, ConversationMessage, SearchHistoryItem
from .errors import ConversationNotFoundError, InvalidSearchRequestError, NoProviderAvailableError
from .search_request import SearchRequest
from .source import AggregateResult, Source, SourceType
from .unified_response import NormalizedError, TokenUsage, UnifiedResponse

__all__ = [
    "AggregateResult",
    "Bookmark",
    "Conversation",
    "ConversationMessage",
    "ConversationNotFoundError",
    "InvalidSearchRequestError",
    "NoProviderAvailableError",
    "NormalizedError",
    "SearchHistoryItem",
    "SearchRequest",
    "Source",
    "SourceType",
    "TokenUsage",
    "UnifiedResponse",
]
