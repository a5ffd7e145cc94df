"""Model backend: single-shot generation plus an availability probe."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

import httpx
from langchain_core.messages import HumanMessage

from swarmplan.config import SwarmConfig
from swarmplan.llm.factory import get_llm

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Generation:
    """Text returned by one model call."""

    response: str
    tokens: int | None = None


@dataclass(frozen=True)
class HealthStatus:
    available: bool
    error: str | None = None


@dataclass(frozen=True)
class ModelInfo:
    name: str


class ModelBackend(Protocol):
    """What the swarm needs from a model provider."""

    async def generate(
        self,
        model: str,
        prompt: str,
        *,
        temperature: float = 0.2,
        max_tokens: int | None = None,
    ) -> Generation: ...

    async def check_health(self) -> HealthStatus: ...

    async def list_models(self) -> list[ModelInfo]: ...


class LiteLLMBackend:
    """Backend over LiteLLM chat models and an Ollama-compatible tag listing.

    Usage:
        backend = LiteLLMBackend(SwarmConfig())
        result = await backend.generate("llama3.2:3b", "Hello")
    """

    def __init__(self, config: SwarmConfig, timeout: float = 5.0) -> None:
        self.config = config
        self.timeout = timeout

    def _route(self, model: str) -> str:
        prefix = self.config.model_prefix
        if not prefix or model.startswith(prefix):
            return model
        return f"{prefix}{model}"

    async def generate(
        self,
        model: str,
        prompt: str,
        *,
        temperature: float = 0.2,
        max_tokens: int | None = None,
    ) -> Generation:
        llm = get_llm(
            self._route(model),
            temperature=temperature,
            max_tokens=max_tokens,
            api_base=self.config.api_base or None,
        )
        response = await llm.ainvoke([HumanMessage(content=prompt)])
        usage = getattr(response, "usage_metadata", None) or {}
        return Generation(response=str(response.content), tokens=usage.get("total_tokens"))

    async def check_health(self) -> HealthStatus:
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.get(f"{self.config.api_base.rstrip('/')}/api/tags")
            resp.raise_for_status()
        except httpx.HTTPError as e:
            logger.debug("Model backend unavailable: %s", e)
            return HealthStatus(available=False, error=str(e))
        return HealthStatus(available=True)

    async def list_models(self) -> list[ModelInfo]:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            resp = await client.get(f"{self.config.api_base.rstrip('/')}/api/tags")
        resp.raise_for_status()
        data = resp.json()
        models: list[ModelInfo] = []
        for item in data.get("models", []):
            name = item.get("name") or item.get("model")
            if name:
                models.append(ModelInfo(name=name))
        return models
