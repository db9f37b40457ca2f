"""
ProviderState - per-router cool-down bookkeeping for AI providers.

A provider that fails is excluded from candidate lists until
``now + cooldown``. Expiry is checked lazily on read, so no timer or
recovery check is needed. All access goes through one lock because
overlapping requests share the router instance.
"""

import threading
import time
from collections.abc import Callable, Iterable

from orchestrator.routing_types import ProviderStatus
from utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_COOLDOWN_SECONDS = 300.0


class ProviderState:
    def __init__(
        self,
        providers: Iterable[tuple[str, int]],
        cooldown_seconds: float = DEFAULT_COOLDOWN_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        """
        Args:
            providers: (provider_id, priority) pairs, in registry order
            cooldown_seconds: How long a failed provider stays excluded
            clock: Returns the current time in seconds
        """
        self._lock = threading.Lock()
        self._cooldown = float(cooldown_seconds)
        self._clock = clock
        self._order: list[str] = []
        self._priority: dict[str, int] = {}
        self._unavailable_until: dict[str, float] = {}

        for provider_id, priority in providers:
            if provider_id in self._priority:
                raise ValueError(f"Duplicate provider id: {provider_id}")
            self._order.append(provider_id)
            self._priority[provider_id] = int(priority)

    @property
    def cooldown_seconds(self) -> float:
        return self._cooldown

    def _expire_locked(self, now: float) -> None:
        expired = [pid for pid, until in self._unavailable_until.items() if until <= now]
        for pid in expired:
            del self._unavailable_until[pid]
            logger.info(f"Provider {pid} cool-down expired")

    def candidates(self) -> list[str]:
        """Available provider ids, lowest priority value first (ties keep registry order)."""
        with self._lock:
            self._expire_locked(self._clock())
            available = [pid for pid in self._order if pid not in self._unavailable_until]
        return sorted(available, key=lambda pid: self._priority[pid])

    def mark_unavailable(self, provider_id: str) -> float:
        """Start a cool-down for ``provider_id``; returns the time it ends."""
        with self._lock:
            if provider_id not in self._priority:
                raise KeyError(provider_id)
            until = self._clock() + self._cooldown
            self._unavailable_until[provider_id] = until

        logger.warning(
            f"Provider {provider_id} marked unavailable",
            extra={"extra_fields": {"provider": provider_id, "unavailable_until": until}},
        )
        return until

    def is_available(self, provider_id: str) -> bool:
        with self._lock:
            self._expire_locked(self._clock())
            return provider_id in self._priority and provider_id not in self._unavailable_until

    def reset(self, provider_id: str | None = None) -> None:
        with self._lock:
            if provider_id is None:
                self._unavailable_until.clear()
            else:
                self._unavailable_until.pop(provider_id, None)

    def snapshot(self) -> list[ProviderStatus]:
        with self._lock:
            self._expire_locked(self._clock())
            return [
                ProviderStatus(
                    provider_id=pid,
                    priority=self._priority[pid],
                    unavailable_until=self._unavailable_until.get(pid),
                )
                for pid in sorted(self._order, key=lambda p: self._priority[p])
            ]
