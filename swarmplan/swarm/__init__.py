"""Five-stage agent swarm for swarmplan."""

from __future__ import annotations

from swarmplan.swarm.executor import SwarmExecutor, run_swarm
from swarmplan.swarm.prompts import is_complex_prompt
from swarmplan.swarm.types import (
    AgentOutcome,
    AgentSummary,
    AllAgentsFailedError,
    SwarmError,
    SwarmRunResult,
    SwarmTimeoutError,
)

__all__ = [
    "AgentOutcome",
    "AgentSummary",
    "AllAgentsFailedError",
    "SwarmError",
    "SwarmExecutor",
    "SwarmRunResult",
    "SwarmTimeoutError",
    "is_complex_prompt",
    "run_swarm",
]
