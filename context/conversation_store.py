"""Thread-safe in-memory store for conversations, messages, search history and bookmarks."""

import threading
from dataclasses import replace

from models.conversation import Bookmark, Conversation, ConversationMessage, Role, SearchHistoryItem, utcnow
from models.errors import ConversationNotFoundError
from models.source import Source, SourceType
from utils.logger import get_logger
from utils.source_classifier import classify_type

logger = get_logger(__name__)

TITLE_MAX_CHARS = 50


def title_from_query(query: str) -> str:
    """First 50 characters of the opening question, with ``...`` when cut."""
    query = query.strip()
    if len(query) > TITLE_MAX_CHARS:
        return query[:TITLE_MAX_CHARS] + "..."
    return query


class ConversationStore:
    """
    Process-local conversation storage.

    One lock guards every collection so concurrent FastAPI requests
    see consistent message order.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._conversations: dict[str, Conversation] = {}
        self._messages: dict[str, list[ConversationMessage]] = {}
        self._history: list[SearchHistoryItem] = []
        self._bookmarks: dict[str, Bookmark] = {}

    # ---------- conversations ----------

    def create_conversation(self, title: str) -> Conversation:
        conversation = Conversation(title=title)
        with self._lock:
            self._conversations[conversation.id] = conversation
            self._messages[conversation.id] = []
        logger.info(f"Created conversation {conversation.id}")
        return conversation

    def get_conversation(self, conversation_id: str) -> Conversation | None:
        with self._lock:
            return self._conversations.get(conversation_id)

    def list_conversations(self) -> list[Conversation]:
        """All conversations, most recently updated first."""
        with self._lock:
            conversations = list(self._conversations.values())
        return sorted(conversations, key=lambda c: c.updated_at, reverse=True)

    def delete_conversation(self, conversation_id: str) -> bool:
        with self._lock:
            existed = self._conversations.pop(conversation_id, None) is not None
            self._messages.pop(conversation_id, None)
        if existed:
            logger.info(f"Deleted conversation {conversation_id}")
        return existed

    # ---------- messages ----------

    def add_message(
        self,
        conversation_id: str,
        role: Role,
        content: str,
        sources: tuple[Source, ...] | list[Source] = (),
    ) -> ConversationMessage:
        """
        Append a message and bump the conversation's ``updated_at``.

        Raises:
            ConversationNotFoundError: if the conversation does not exist
        """
        message = ConversationMessage(
            conversation_id=conversation_id, role=role, content=content, sources=tuple(sources)
        )
        with self._lock:
            conversation = self._conversations.get(conversation_id)
            if conversation is None:
                raise ConversationNotFoundError(conversation_id)
            self._messages[conversation_id].append(message)
            self._conversations[conversation_id] = replace(conversation, updated_at=utcnow())
        return message

    def get_messages(self, conversation_id: str) -> list[ConversationMessage]:
        """Messages oldest first; unknown ids yield an empty list."""
        with self._lock:
            messages = list(self._messages.get(conversation_id, []))
        return sorted(messages, key=lambda m: m.timestamp)

    # ---------- search history ----------

    def add_search_history(self, query: str, results_count: int) -> SearchHistoryItem:
        item = SearchHistoryItem(query=query, results_count=results_count)
        with self._lock:
            self._history.append(item)
        return item

    def get_search_history(self, limit: int = 20) -> list[SearchHistoryItem]:
        """Newest first, at most ``limit`` entries."""
        with self._lock:
            items = list(self._history)
        items.sort(key=lambda i: i.timestamp, reverse=True)
        return items[: max(0, limit)]

    # ---------- bookmarks ----------

    def create_bookmark(
        self,
        title: str,
        url: str,
        source_type: SourceType | str | None = None,
        description: str | None = None,
        document_date: str | None = None,
        declassified_date: str | None = None,
        pages: str | None = None,
    ) -> Bookmark:
        """Save a source. ``source_type`` defaults to the classifier's verdict for ``url``."""
        bookmark = Bookmark(
            title=title,
            url=url,
            source_type=source_type if source_type is not None else classify_type(url),
            description=description,
            document_date=document_date,
            declassified_date=declassified_date,
            pages=pages,
        )
        with self._lock:
            self._bookmarks[bookmark.id] = bookmark
        logger.info(
            f"Created bookmark {bookmark.id}",
            extra={"extra_fields": {"url": url, "source_type": bookmark.source_type.value}},
        )
        return bookmark

    def get_bookmarks(self) -> list[Bookmark]:
        """Newest first."""
        with self._lock:
            bookmarks = list(self._bookmarks.values())
        # reversed insertion order breaks created_at ties newest first
        return sorted(reversed(bookmarks), key=lambda b: b.created_at, reverse=True)

    def delete_bookmark(self, bookmark_id: str) -> bool:
        with self._lock:
            return self._bookmarks.pop(bookmark_id, None) is not None

    def clear_all(self) -> None:
        """Drop everything (for testing)."""
        with self._lock:
            self._conversations.clear()
            self._messages.clear()
            self._history.clear()
            self._bookmarks.clear()


# Module-level singleton instance
_store = ConversationStore()


def get_conversation_store() -> ConversationStore:
    return _store
