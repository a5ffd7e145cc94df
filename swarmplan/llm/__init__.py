"""Model invocation for swarmplan."""

from __future__ import annotations

from swarmplan.llm.backend import Generation, HealthStatus, LiteLLMBackend, ModelBackend, ModelInfo

__all__ = [
    "Generation",
    "HealthStatus",
    "LiteLLMBackend",
    "ModelBackend",
    "ModelInfo",
]
