"""Shared types for the swarm module."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


class SwarmError(Exception):
    """A failure that aborts a whole swarm run."""


class AllAgentsFailedError(SwarmError):
    """No agent produced a response."""


class SwarmTimeoutError(SwarmError):
    """The run's deadline passed before a stage could start."""


@dataclass
class AgentOutcome:
    """Result of one agent's model call."""

    name: str
    model: str
    fallback_used: bool = False
    response: str = ""
    failed: bool = False
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "model": self.model,
            "fallback_used": self.fallback_used,
            "response": self.response,
            "failed": self.failed,
            "error": self.error,
        }


@dataclass
class AgentSummary:
    """Per-agent line in a swarm result."""

    name: str
    model: str
    fallback_used: bool
    preview: str
    success: bool


@dataclass
class MemoryInfo:
    """Where the run was archived, or why it was not."""

    archive_path: str | None = None
    log_path: str | None = None
    compacted: bool = False
    error: str | None = None


@dataclass
class SwarmTranscript:
    speculation: str
    plan: str
    agents: list[AgentOutcome]
    synthesis: str
    log: str
    plan_json: Any = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "speculation": self.speculation,
            "plan": self.plan,
            "plan_json": self.plan_json,
            "agents": [a.to_dict() for a in self.agents],
            "synthesis": self.synthesis,
            "log": self.log,
        }


@dataclass
class SwarmRunResult:
    """Aggregated result from a swarm run.

    Failed runs carry ``is_error=True`` and an ``error`` message; every
    other field keeps its default.
    """

    mode: str = "swarm"
    title: str | None = None
    summary: str = ""
    final: str = ""
    agents: list[AgentSummary] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    transcript: SwarmTranscript | None = None
    memory: MemoryInfo | None = None
    error: str | None = None
    is_error: bool = False

    @property
    def failed_agents(self) -> list[AgentSummary]:
        return [a for a in self.agents if not a.success]

    def to_dict(self) -> dict[str, Any]:
        if self.is_error:
            return {"mode": self.mode, "error": self.error, "is_error": True}
        data: dict[str, Any] = {
            "mode": self.mode,
            "title": self.title,
            "summary": self.summary,
            "final": self.final,
            "agents": [vars(a) for a in self.agents],
            "warnings": list(self.warnings),
            "memory": vars(self.memory) if self.memory else None,
        }
        if self.transcript is not None:
            data["transcript"] = self.transcript.to_dict()
        return data
