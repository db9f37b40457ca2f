from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from api.base_client import BaseAIClient
from orchestrator.routing_types import ProviderSpec
from utils.logger import get_logger

logger = get_logger(__name__)

PROVIDER_KINDS = ("openai_compatible", "huggingface", "gemini")


@dataclass
class ProviderRegistry:
    _providers: list[ProviderSpec]
    _routing_defaults: dict[str, Any]

    @classmethod
    def from_yaml(cls, path: str | None = None) -> "ProviderRegistry":
        registry_path = (
            Path(path) if path else Path(__file__).resolve().parent.parent / "config" / "provider_registry.yaml"
        )
        if not registry_path.exists():
            raise ValueError(f"Provider registry not found at {registry_path}")

        data = yaml.safe_load(registry_path.read_text(encoding="utf-8"))
        if not data or "providers" not in data:
            raise ValueError("Invalid provider registry: missing providers")
        if not isinstance(data["providers"], list):
            raise ValueError("Invalid provider registry: providers must be a list")

        providers: list[ProviderSpec] = []
        seen: set[str] = set()
        for entry in data["providers"]:
            required = ["id", "name", "kind", "model", "api_key_env", "priority"]
            if any(key not in entry for key in required):
                raise ValueError(f"Missing required fields in provider entry: {entry}")
            if entry["kind"] not in PROVIDER_KINDS:
                raise ValueError(f"Unknown provider kind {entry['kind']!r} for {entry['id']}")
            if entry["id"] in seen:
                raise ValueError(f"Duplicate provider id: {entry['id']}")
            seen.add(entry["id"])

            providers.append(
                ProviderSpec(
                    id=entry["id"],
                    name=entry["name"],
                    kind=entry["kind"],
                    model=entry["model"],
                    api_key_env=entry["api_key_env"],
                    priority=int(entry["priority"]),
                    base_url=entry.get("base_url"),
                    is_free=bool(entry.get("is_free", True)),
                    enabled=bool(entry.get("enabled", True)),
                    max_tokens=entry.get("max_tokens"),
                    temperature=entry.get("temperature"),
                    extra_headers=dict(entry.get("extra_headers") or {}),
                )
            )

        routing_defaults = data.get("routing_defaults", {}) or {}
        return cls(_providers=providers, _routing_defaults=routing_defaults)

    def routing_defaults(self) -> dict[str, Any]:
        return self._routing_defaults

    def list_enabled(self) -> list[ProviderSpec]:
        enabled = [p for p in self._providers if p.enabled]
        return sorted(enabled, key=lambda p: p.priority)

    def find(self, provider_id: str) -> ProviderSpec | None:
        for spec in self._providers:
            if spec.id == provider_id:
                return spec
        return None

    def build_client(self, spec: ProviderSpec, api_key: str, timeout_s: float = 60.0) -> BaseAIClient:
        """Instantiate the generation client for ``spec``."""
        options: dict[str, Any] = {
            "timeout_s": timeout_s,
            "temperature": spec.temperature
            if spec.temperature is not None
            else self._routing_defaults.get("temperature", 0.3),
            "max_tokens": spec.max_tokens
            if spec.max_tokens is not None
            else self._routing_defaults.get("max_tokens", 3000),
        }

        if spec.kind == "openai_compatible":
            from api.openai_compatible_client import OpenAICompatibleClient

            return OpenAICompatibleClient(
                api_key=api_key,
                model_name=spec.model,
                base_url=spec.base_url,
                provider_name=spec.id,
                extra_headers=spec.extra_headers,
                **options,
            )
        if spec.kind == "huggingface":
            from api.huggingface_client import HF_INFERENCE_URL, HuggingFaceClient

            return HuggingFaceClient(
                api_key=api_key,
                model_name=spec.model,
                base_url=spec.base_url or HF_INFERENCE_URL,
                **options,
            )
        if spec.kind == "gemini":
            from api.google_gemini_client import GeminiClient

            return GeminiClient(api_key=api_key, model_name=spec.model, **options)

        raise ValueError(f"Unsupported provider kind: {spec.kind}")

    def build_clients(
        self, env: dict[str, str] | None = None, timeout_s: float = 60.0
    ) -> list[tuple[ProviderSpec, BaseAIClient]]:
        """
        Build clients for every enabled provider that has credentials.

        Providers whose ``api_key_env`` is unset are skipped with a warning
        rather than failing startup.
        """
        source = os.environ if env is None else env
        built: list[tuple[ProviderSpec, BaseAIClient]] = []
        for spec in self.list_enabled():
            api_key = source.get(spec.api_key_env)
            if not api_key:
                logger.warning(
                    f"Skipping provider {spec.id}: {spec.api_key_env} not set",
                    extra={"extra_fields": {"provider": spec.id}},
                )
                continue
            built.append((spec, self.build_client(spec, api_key, timeout_s=timeout_s)))
        return built
