"""Tests for the model availability cache and fallback resolution."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from swarmplan.llm.backend import HealthStatus, ModelInfo
from swarmplan.swarm.models import ModelAvailabilityCache, ResolvedModel


class FakeClock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


def _backend(*names: str, available: bool = True) -> MagicMock:
    backend = MagicMock()
    backend.check_health = AsyncMock(
        return_value=HealthStatus(available=available, error=None if available else "down")
    )
    backend.list_models = AsyncMock(return_value=[ModelInfo(name=n) for n in names])
    return backend


@pytest.mark.asyncio
async def test_snapshot_is_reused_within_ttl():
    backend = _backend("llama3.2:3b")
    clock = FakeClock()
    cache = ModelAvailabilityCache(backend, ttl=60, clock=clock)

    assert await cache.get_models() == ["llama3.2:3b"]
    clock.now += 59
    assert await cache.get_models() == ["llama3.2:3b"]
    assert backend.list_models.await_count == 1


@pytest.mark.asyncio
async def test_snapshot_refreshes_after_ttl():
    backend = _backend("llama3.2:3b")
    clock = FakeClock()
    cache = ModelAvailabilityCache(backend, ttl=60, clock=clock)

    await cache.get_models()
    clock.now += 61
    await cache.get_models()
    assert backend.list_models.await_count == 2


@pytest.mark.asyncio
async def test_concurrent_callers_share_one_refresh():
    backend = _backend("phi3:mini")

    async def slow_list():
        await asyncio.sleep(0.01)
        return [ModelInfo(name="phi3:mini")]

    backend.list_models = AsyncMock(side_effect=slow_list)
    cache = ModelAvailabilityCache(backend, ttl=60)

    results = await asyncio.gather(*(cache.get_models() for _ in range(5)))
    assert all(r == ["phi3:mini"] for r in results)
    assert backend.list_models.await_count == 1


@pytest.mark.asyncio
async def test_unavailable_backend_gives_empty_snapshot():
    backend = _backend("llama3.2:3b", available=False)
    cache = ModelAvailabilityCache(backend)

    assert await cache.get_models() == []
    backend.list_models.assert_not_awaited()


@pytest.mark.asyncio
async def test_failed_listing_gives_empty_snapshot_for_ttl():
    backend = _backend()
    backend.list_models = AsyncMock(side_effect=ValueError("not json"))
    clock = FakeClock()
    cache = ModelAvailabilityCache(backend, ttl=60, clock=clock)

    assert await cache.get_models() == []
    clock.now += 30
    assert await cache.get_models() == []
    assert backend.list_models.await_count == 1

    resolved = await cache.resolve("phi3:mini", "llama3.2:3b")
    assert resolved == ResolvedModel(model="llama3.2:3b", fallback_used=True)


@pytest.mark.asyncio
async def test_failed_health_check_gives_empty_snapshot():
    backend = _backend("phi3:mini")
    backend.check_health = AsyncMock(side_effect=RuntimeError("socket closed"))
    cache = ModelAvailabilityCache(backend)

    assert await cache.get_models() == []
    backend.list_models.assert_not_awaited()


@pytest.mark.asyncio
async def test_invalidate_forces_refresh():
    backend = _backend("llama3.2:3b")
    cache = ModelAvailabilityCache(backend)

    await cache.get_models()
    cache.invalidate()
    await cache.get_models()
    assert backend.list_models.await_count == 2


class TestResolve:
    @pytest.mark.asyncio
    async def test_available_model_is_used(self):
        cache = ModelAvailabilityCache(_backend("phi3:mini", "llama3.2:3b"))
        resolved = await cache.resolve("phi3:mini", "llama3.2:3b")
        assert resolved == ResolvedModel(model="phi3:mini", fallback_used=False)

    @pytest.mark.asyncio
    async def test_missing_model_falls_back(self):
        cache = ModelAvailabilityCache(_backend("llama3.2:3b"))
        resolved = await cache.resolve("phi3:mini", "llama3.2:3b")
        assert resolved == ResolvedModel(model="llama3.2:3b", fallback_used=True)

    @pytest.mark.asyncio
    async def test_unavailable_backend_always_falls_back(self):
        cache = ModelAvailabilityCache(_backend(available=False))
        resolved = await cache.resolve("phi3:mini", "llama3.2:3b")
        assert resolved.fallback_used is True

    @pytest.mark.asyncio
    async def test_no_request_uses_default_without_lookup(self):
        backend = _backend("llama3.2:3b")
        cache = ModelAvailabilityCache(backend)
        resolved = await cache.resolve(None, "llama3.2:3b")
        assert resolved == ResolvedModel(model="llama3.2:3b", fallback_used=False)
        backend.check_health.assert_not_awaited()
