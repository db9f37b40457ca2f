"""
ConversationContextBuilder - renders recent turns into the prompt prefix.

The context is rebuilt from the store on every request; nothing is cached.
"""

from typing import Protocol

from models.conversation import ConversationMessage
from utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_CONTEXT_WINDOW = 10

PROMPT_TEMPLATE = """Previous conversation:
{context}

Current question: {query}

Remember our conversation history and provide a response that builds on what we've discussed. Be conversational, empathetic, and remember details I've shared."""


class MessageSource(Protocol):
    def get_messages(self, conversation_id: str) -> list[ConversationMessage]: ...


class ConversationContextBuilder:
    def __init__(self, store: MessageSource, max_messages: int = DEFAULT_CONTEXT_WINDOW):
        """
        Args:
            store: Anything exposing get_messages(conversation_id), oldest first
            max_messages: Number of most recent messages rendered
        """
        self.store = store
        self.max_messages = max_messages

    def render_history(self, conversation_id: str) -> str:
        try:
            messages = self.store.get_messages(conversation_id)
        except Exception as e:
            logger.warning(
                f"Could not load history for {conversation_id}",
                extra={"extra_fields": {"error": str(e), "error_type": type(e).__name__}},
            )
            messages = []

        recent = messages[-self.max_messages :] if self.max_messages > 0 else []
        return "\n\n".join(
            f"{'User' if m.role == 'user' else 'Assistant'}: {m.content}" for m in recent
        )

    def build(self, conversation_id: str, new_query: str) -> str:
        """Full prompt: rendered history followed by the new question."""
        return PROMPT_TEMPLATE.format(context=self.render_history(conversation_id), query=new_query)
