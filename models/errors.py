"""Caller-visible error conditions of the research engine."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from orchestrator.routing_types import ProviderAttempt


class NoProviderAvailableError(RuntimeError):
    """Every AI generation provider failed or is cooling down."""

    def __init__(self, attempts: list[ProviderAttempt] | None = None):
        self.attempts = list(attempts or [])
        if self.attempts:
            tried = ", ".join(f"{a.provider_id} ({a.error_code})" for a in self.attempts)
            message = f"All AI models unavailable. Tried: {tried}"
        else:
            message = "All AI models unavailable. No provider is currently available."
        super().__init__(message)


class InvalidSearchRequestError(ValueError):
    """A research request failed validation before any network activity."""

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")


class ConversationNotFoundError(LookupError):
    def __init__(self, conversation_id: str):
        self.conversation_id = conversation_id
        super().__init__(f"Conversation not found: {conversation_id}")
