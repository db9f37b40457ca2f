from dataclasses import dataclass, field
from typing import Any

from models.source import Source


@dataclass(frozen=True)
class ProviderSpec:
    """One AI generation provider as declared in the provider registry."""

    id: str
    name: str
    kind: str  # "openai_compatible" | "huggingface" | "gemini"
    model: str
    api_key_env: str
    priority: int
    base_url: str | None = None
    is_free: bool = True
    enabled: bool = True
    max_tokens: int | None = None
    temperature: float | None = None
    extra_headers: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ProviderAttempt:
    provider_id: str
    provider_name: str
    ok: bool
    latency_ms: int = 0
    error_code: str | None = None
    error_message: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "provider_id": self.provider_id,
            "provider_name": self.provider_name,
            "ok": self.ok,
            "latency_ms": self.latency_ms,
            "error_code": self.error_code,
            "error_message": self.error_message,
        }


@dataclass(frozen=True)
class ProviderStatus:
    provider_id: str
    priority: int
    unavailable_until: float | None

    @property
    def available(self) -> bool:
        return self.unavailable_until is None


@dataclass(frozen=True)
class RoutedAnswer:
    content: str
    sources: tuple[Source, ...]
    provider_id: str
    model_used: str
    attempts: tuple[ProviderAttempt, ...] = ()
