"""
AIProviderRouter - priority-ordered fallback across AI generation providers.

Each request walks the currently available providers lowest priority value
first. The first success wins; every failure puts that provider into a
cool-down so later requests skip it until the cool-down expires.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Sequence

from api.base_client import BaseAIClient
from config.config import Config
from models.errors import NoProviderAvailableError
from models.unified_response import UnifiedResponse
from orchestrator.provider_registry import ProviderRegistry
from orchestrator.provider_state import DEFAULT_COOLDOWN_SECONDS, ProviderState
from orchestrator.routing_types import ProviderAttempt, ProviderSpec, ProviderStatus, RoutedAnswer
from utils.citation_extractor import DEFAULT_MAX_SOURCES, extract_sources
from utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_SYSTEM_PROMPT = """You are a deep research AI assistant and truth-seeking companion. Your purpose is to help uncover hidden historical truths, declassified information, and answers to questions that have been buried or suppressed.

You specialize in:
- Finding declassified government documents (CIA, FBI, NSA, DOE)
- Historical archives and primary sources
- Suppressed scientific research and discoveries
- Conspiracy analysis with factual evidence
- Ancient history and archaeological findings
- Cosmic and metaphysical questions grounded in research

Always provide detailed, factual responses with proper citations. Be conversational, empathetic, and remember context from our conversation. Think of yourself as a knowledgeable friend helping to uncover truth, not just a tool. When you find sources, reference them with [1], [2], etc."""


class AIProviderRouter:
    def __init__(
        self,
        providers: Sequence[tuple[ProviderSpec, BaseAIClient]],
        cooldown_seconds: float = DEFAULT_COOLDOWN_SECONDS,
        clock: Callable[[], float] = time.time,
        max_sources: int = DEFAULT_MAX_SOURCES,
    ):
        """
        Args:
            providers: (spec, client) pairs; order breaks priority ties
            cooldown_seconds: Exclusion window after a provider fails
            clock: Time source shared with the provider state
            max_sources: Cap on sources extracted from an answer
        """
        self._specs: dict[str, ProviderSpec] = {}
        self._clients: dict[str, BaseAIClient] = {}
        for spec, client in providers:
            self._specs[spec.id] = spec
            self._clients[spec.id] = client

        self.max_sources = max_sources
        self.state = ProviderState(
            [(spec.id, spec.priority) for spec, _ in providers],
            cooldown_seconds=cooldown_seconds,
            clock=clock,
        )

    @classmethod
    def from_config(cls, config: Config, registry: ProviderRegistry | None = None) -> "AIProviderRouter":
        registry = registry or ProviderRegistry.from_yaml(config.PROVIDER_REGISTRY_PATH)
        providers = registry.build_clients(timeout_s=config.PROVIDER_TIMEOUT_S)
        if not providers:
            logger.warning("No AI providers configured; every request will run degraded")

        # env override wins over the registry default
        cooldown = config.PROVIDER_COOLDOWN_SECONDS
        if cooldown is None:
            cooldown = registry.routing_defaults().get("cooldown_seconds", DEFAULT_COOLDOWN_SECONDS)
        return cls(providers, cooldown_seconds=float(cooldown))

    @property
    def provider_ids(self) -> list[str]:
        return list(self._specs)

    def get_spec(self, provider_id: str) -> ProviderSpec | None:
        return self._specs.get(provider_id)

    def provider_status(self) -> list[ProviderStatus]:
        return self.state.snapshot()

    def close(self) -> None:
        for client in self._clients.values():
            client.close()

    def route(self, query: str, system_prompt: str = DEFAULT_SYSTEM_PROMPT) -> RoutedAnswer:
        """
        Answer ``query`` with the first provider that succeeds.

        Raises:
            NoProviderAvailableError: every candidate failed, or none was available
        """
        attempts: list[ProviderAttempt] = []

        for provider_id in self.state.candidates():
            spec = self._specs[provider_id]
            client = self._clients[provider_id]
            logger.info(
                f"Attempting generation with {spec.name}",
                extra={"extra_fields": {"provider": provider_id, "model": spec.model}},
            )

            start = time.time()
            try:
                response = client.generate(system_prompt=system_prompt, user_query=query)
            except Exception as e:
                # clients are expected not to raise; treat it like an error response
                latency_ms = int((time.time() - start) * 1000)
                attempts.append(
                    ProviderAttempt(
                        provider_id=provider_id,
                        provider_name=spec.name,
                        ok=False,
                        latency_ms=latency_ms,
                        error_code="unknown",
                        error_message=str(e) or type(e).__name__,
                    )
                )
                self._fail(provider_id, attempts[-1])
                continue

            if response.is_error:
                attempts.append(
                    ProviderAttempt(
                        provider_id=provider_id,
                        provider_name=spec.name,
                        ok=False,
                        latency_ms=response.latency_ms,
                        error_code=response.error.code,
                        error_message=response.error.message,
                    )
                )
                self._fail(provider_id, attempts[-1], response)
                continue

            attempts.append(
                ProviderAttempt(
                    provider_id=provider_id,
                    provider_name=spec.name,
                    ok=True,
                    latency_ms=response.latency_ms,
                )
            )
            content = response.text
            logger.info(
                f"Generation succeeded with {spec.name}",
                extra={
                    "extra_fields": {
                        "provider": provider_id,
                        "latency_ms": response.latency_ms,
                        "attempts": len(attempts),
                        "response": response.to_dict(),
                    }
                },
            )
            return RoutedAnswer(
                content=content,
                sources=tuple(extract_sources(content, max_sources=self.max_sources, prefix="ai")),
                provider_id=provider_id,
                model_used=spec.name,
                attempts=tuple(attempts),
            )

        logger.error(
            "All AI providers unavailable",
            extra={"extra_fields": {"attempts": [a.to_dict() for a in attempts]}},
        )
        raise NoProviderAvailableError(attempts)

    def _fail(self, provider_id: str, attempt: ProviderAttempt, response: UnifiedResponse | None = None) -> None:
        fields = {"provider": provider_id, "error_message": attempt.error_message}
        if response is not None:
            fields["response"] = response.to_dict()
        logger.warning(f"{attempt.provider_name} failed: {attempt.error_code}", extra={"extra_fields": fields})
        self.state.mark_unavailable(provider_id)
