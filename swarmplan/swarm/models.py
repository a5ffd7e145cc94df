"""TTL-cached snapshot of available models, with fallback resolution."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from swarmplan.llm.backend import ModelBackend

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedModel:
    model: str
    fallback_used: bool


class ModelAvailabilityCache:
    """Caches the backend's model listing for ``ttl`` seconds.

    A stale snapshot is refreshed by probing ``check_health`` and then
    ``list_models``; an unavailable backend or a failed listing yields an
    empty snapshot, which is kept for the full ``ttl``. Only
    one refresh runs at a time; concurrent callers wait for it and reuse
    the result.
    """

    def __init__(
        self,
        backend: ModelBackend,
        ttl: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._backend = backend
        self._ttl = ttl
        self._clock = clock
        self._models: list[str] | None = None
        self._updated_at = 0.0
        self._lock = asyncio.Lock()

    def _is_fresh(self) -> bool:
        return self._models is not None and self._clock() - self._updated_at < self._ttl

    def invalidate(self) -> None:
        self._models = None

    async def get_models(self) -> list[str]:
        if self._is_fresh():
            return list(self._models or [])
        async with self._lock:
            if not self._is_fresh():
                self._models = await self._refresh()
                self._updated_at = self._clock()
        return list(self._models or [])

    async def _refresh(self) -> list[str]:
        try:
            health = await self._backend.check_health()
            if not health.available:
                logger.warning("Model backend unavailable: %s", health.error or "no details")
                return []
            models = await self._backend.list_models()
        except Exception as e:
            logger.warning("Model listing failed, using an empty snapshot: %s", e)
            return []
        return [m.name for m in models if m.name]

    async def resolve(self, requested: str | None, default_model: str) -> ResolvedModel:
        """Return ``requested`` if it is available, else ``default_model``."""
        if not requested:
            return ResolvedModel(model=default_model, fallback_used=False)
        available = await self.get_models()
        if requested in available:
            return ResolvedModel(model=requested, fallback_used=False)
        return ResolvedModel(model=default_model, fallback_used=True)
