import time

import httpx

from models.unified_response import UnifiedResponse
from utils.logger import get_logger

from .base_client import BaseAIClient

logger = get_logger(__name__)

HF_INFERENCE_URL = "https://api-inference.huggingface.co/models"


class HuggingFaceClient(BaseAIClient):
    """
    HuggingFace Inference API client for text-generation models.

    The inference API takes a single prompt string, so the system prompt and
    user query are folded into one "User: ... Assistant:" transcript.
    """

    provider_name = "huggingface"

    def __init__(
        self,
        api_key: str,
        model_name: str,
        base_url: str = HF_INFERENCE_URL,
        http_client: httpx.Client | None = None,
        **kwargs,
    ):
        super().__init__(api_key, model_name=model_name, **kwargs)
        self.endpoint = f"{base_url.rstrip('/')}/{model_name}"
        self.temperature = kwargs.get("temperature", 0.3)
        self.max_tokens = kwargs.get("max_tokens", 2000)
        # only a client built here is closed by close()
        self._owns_http = http_client is None
        self._http = http_client or httpx.Client(timeout=self.timeout_s)

    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> "HuggingFaceClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _build_inputs(self, system_prompt: str, user_query: str) -> str:
        return f"{system_prompt}\n\nUser: {user_query}\n\nAssistant:"

    @staticmethod
    def _parse_generated_text(payload) -> str:
        if isinstance(payload, list):
            if not payload:
                raise ValueError("Malformed HuggingFace payload: empty list")
            payload = payload[0]
        if not isinstance(payload, dict):
            raise ValueError(f"Malformed HuggingFace payload: {type(payload).__name__}")
        if "error" in payload:
            raise ValueError(f"HuggingFace error: {payload['error']}")
        return payload.get("generated_text") or ""

    def generate(self, system_prompt: str, user_query: str, **kwargs) -> UnifiedResponse:
        """
        Call the inference endpoint.

        IMPORTANT: Never raises exceptions - returns UnifiedResponse with error instead
        """
        request_id = self._generate_request_id()
        start_time = time.time()

        try:
            response = self._http.post(
                self.endpoint,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                json={
                    "inputs": self._build_inputs(system_prompt, user_query),
                    "parameters": {
                        "max_new_tokens": kwargs.get("max_tokens", self.max_tokens),
                        "temperature": kwargs.get("temperature", self.temperature),
                        "return_full_text": False,
                    },
                },
            )
            response.raise_for_status()
            text = self._parse_generated_text(response.json())
            latency_ms = self._measure_latency(start_time)

            logger.info(
                "HuggingFace completion successful",
                extra={
                    "extra_fields": {
                        "request_id": request_id,
                        "model": self.model_name,
                        "latency_ms": latency_ms,
                    }
                },
            )

            return UnifiedResponse(
                request_id=request_id,
                text=text,
                provider=self.provider_name,
                model=self.model_name,
                latency_ms=latency_ms,
                finish_reason="stop",
            )

        except Exception as e:
            latency_ms = self._measure_latency(start_time)
            error = self._normalize_error(e)

            logger.error(
                f"HuggingFace completion failed: {error.code}",
                extra={
                    "extra_fields": {
                        "request_id": request_id,
                        "model": self.model_name,
                        "error_code": error.code,
                        "error_message": error.message,
                    }
                },
            )

            return self._create_error_response(
                request_id=request_id, error=error, latency_ms=latency_ms, model=self.model_name
            )
