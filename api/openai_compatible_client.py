import time

import openai

from models.unified_response import TokenUsage, UnifiedResponse
from utils.logger import get_logger

from .base_client import BaseAIClient

logger = get_logger(__name__)


class OpenAICompatibleClient(BaseAIClient):
    """
    Client for any OpenAI-compatible chat completions endpoint.

    Uses the OpenAI SDK with a custom base URL; OpenRouter and Groq both
    speak this protocol. All responses are normalized to UnifiedResponse.
    """

    def __init__(
        self,
        api_key: str,
        model_name: str,
        base_url: str | None = None,
        provider_name: str = "openai",
        extra_headers: dict[str, str] | None = None,
        **kwargs,
    ):
        """
        Args:
            api_key: Provider API key
            model_name: Model id sent with every request
            base_url: API root (None for api.openai.com)
            provider_name: Name reported in UnifiedResponse.provider
            extra_headers: Static headers added to every request (OpenRouter attribution)
            **kwargs: timeout_s, temperature, max_tokens defaults
        """
        super().__init__(api_key, model_name=model_name, **kwargs)
        self.provider_name = provider_name
        self.temperature = kwargs.get("temperature", 0.3)
        self.max_tokens = kwargs.get("max_tokens", 3000)
        self.client = openai.OpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=self.timeout_s,
            max_retries=0,
            default_headers=extra_headers or None,
        )

    def generate(self, system_prompt: str, user_query: str, **kwargs) -> UnifiedResponse:
        """
        Get a completion from the chat completions endpoint.

        IMPORTANT: Never raises exceptions - returns UnifiedResponse with error instead
        """
        request_id = self._generate_request_id()
        start_time = time.time()
        model = kwargs.get("model", self.model_name)

        try:
            response = self.client.chat.completions.create(
                model=model,
                messages=self._build_messages(system_prompt, user_query),
                temperature=kwargs.get("temperature", self.temperature),
                max_tokens=kwargs.get("max_tokens", self.max_tokens),
            )
            latency_ms = self._measure_latency(start_time)

            if not response.choices:
                raise ValueError("Malformed completion payload: no choices")
            choice = response.choices[0]
            text = choice.message.content or ""

            usage = getattr(response, "usage", None)
            token_usage = TokenUsage(
                prompt_tokens=getattr(usage, "prompt_tokens", 0) or 0,
                completion_tokens=getattr(usage, "completion_tokens", 0) or 0,
                total_tokens=getattr(usage, "total_tokens", 0) or 0,
            )

            logger.info(
                f"{self.provider_name} completion successful",
                extra={
                    "extra_fields": {
                        "request_id": request_id,
                        "provider": self.provider_name,
                        "model": model,
                        "latency_ms": latency_ms,
                        "tokens": token_usage.total_tokens,
                    }
                },
            )

            return UnifiedResponse(
                request_id=request_id,
                text=text,
                provider=self.provider_name,
                model=model,
                latency_ms=latency_ms,
                token_usage=token_usage,
                finish_reason=self._normalize_finish_reason(choice.finish_reason),
            )

        except Exception as e:
            latency_ms = self._measure_latency(start_time)
            error = self._normalize_error(e)

            logger.error(
                f"{self.provider_name} completion failed: {error.code}",
                extra={
                    "extra_fields": {
                        "request_id": request_id,
                        "provider": self.provider_name,
                        "model": model,
                        "error_code": error.code,
                        "error_message": error.message,
                        "retryable": error.retryable,
                    }
                },
            )

            return self._create_error_response(
                request_id=request_id, error=error, latency_ms=latency_ms, model=model
            )
