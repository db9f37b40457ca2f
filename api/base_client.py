import time
import uuid
from abc import ABC, abstractmethod

from models.unified_response import FinishReason, NormalizedError, UnifiedResponse


class BaseAIClient(ABC):
    """
    Abstract base class for AI generation clients.

    Every client answers ``generate(system_prompt, user_query)`` with a
    UnifiedResponse and never raises: transport errors, non-success statuses
    and malformed payloads come back as a response with ``error`` set.
    """

    provider_name: str = "unknown"

    def __init__(self, api_key: str, **kwargs):
        """
        Args:
            api_key: API key for the AI service
            **kwargs: model_name, timeout_s and other client-specific options
        """
        self.api_key = api_key
        self.model_name = kwargs.get("model_name")
        self.timeout_s = kwargs.get("timeout_s", 60.0)

    @abstractmethod
    def generate(self, system_prompt: str, user_query: str, **kwargs) -> UnifiedResponse:
        """
        Generate an answer for ``user_query`` under ``system_prompt``.

        Args:
            system_prompt: Instructions for the model
            user_query: The research question (possibly with conversation context)
            **kwargs: temperature, max_tokens overrides

        Returns:
            UnifiedResponse, with ``error`` set on failure
        """

    def close(self) -> None:
        """Release transport resources held by the client; the default holds none."""

    # ---------- shared helpers ----------

    def _generate_request_id(self) -> str:
        return str(uuid.uuid4())

    def _measure_latency(self, start_time: float) -> int:
        return int((time.time() - start_time) * 1000)

    def _build_messages(self, system_prompt: str, user_query: str) -> list[dict[str, str]]:
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": user_query})
        return messages

    def _normalize_finish_reason(self, reason: str | None) -> FinishReason:
        if reason is None:
            return None
        reason = str(reason).lower()
        mapping = {
            "stop": "stop",
            "eos_token": "stop",
            "end_turn": "stop",
            "length": "length",
            "max_tokens": "length",
            "content_filter": "content_filter",
            "safety": "content_filter",
        }
        return mapping.get(reason, reason)

    def _normalize_error(self, exc: Exception) -> NormalizedError:
        """Map a provider/transport exception onto the normalized error codes."""
        status_code = getattr(exc, "status_code", None)
        if status_code is None:
            response = getattr(exc, "response", None)
            status_code = getattr(response, "status_code", None)

        name = type(exc).__name__.lower()
        message = str(exc) or type(exc).__name__

        if "timeout" in name or "timed out" in message.lower():
            code, retryable = "timeout", True
        elif status_code in (401, 403) or "authentication" in name or "permission" in name:
            code, retryable = "auth", False
        elif status_code == 429 or "ratelimit" in name:
            code, retryable = "rate_limit", True
        elif status_code in (400, 404, 422) or "badrequest" in name:
            code, retryable = "bad_request", False
        elif (status_code and status_code >= 500) or "connect" in name:
            code, retryable = "provider_error", True
        elif isinstance(exc, (KeyError, IndexError, TypeError, ValueError)):
            # malformed payload
            code, retryable = "provider_error", False
        else:
            code, retryable = "unknown", False

        details = {"exception_type": type(exc).__name__}
        if status_code is not None:
            details["status_code"] = status_code

        return NormalizedError(
            code=code,
            message=message,
            provider=self.provider_name,
            retryable=retryable,
            details=details,
        )

    def _create_error_response(
        self, *, request_id: str, error: NormalizedError, latency_ms: int, model: str | None
    ) -> UnifiedResponse:
        return UnifiedResponse(
            request_id=request_id,
            text="",
            provider=self.provider_name,
            model=model or self.model_name or "unknown",
            latency_ms=latency_ms,
            finish_reason="error",
            error=error,
        )
