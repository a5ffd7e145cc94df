"""Resource estimates for an execution plan: tokens, memory, concurrency, cost."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Literal

from swarmplan.planner.plan import ExecutionPlan

# Base tokens per agent per 15 minutes of phase time.
BASE_TOKENS = {"low": 500, "medium": 1200, "high": 2500}
SEQUENTIAL_TOKEN_FACTOR = 1.2
API_COST_PER_1K_TOKENS = 0.002  # USD, rough figure for a hosted model

TOKEN_INFO_THRESHOLD = 50_000
DURATION_WARNING_MINUTES = 120

Severity = Literal["info", "warning"]


@dataclass(frozen=True)
class Constraint:
    type: str
    message: str
    severity: Severity


@dataclass(frozen=True)
class PhaseResource:
    phase_id: str
    phase_name: str
    agent_count: int
    estimated_tokens: int
    estimated_duration: int
    parallel: bool


@dataclass(frozen=True)
class CostEstimate:
    local: float = 0.0
    api_estimate: float = 0.0


@dataclass
class ResourceEstimate:
    """Heuristic resource needs of an execution plan."""

    phase_resources: list[PhaseResource] = field(default_factory=list)
    total_tokens: int = 0
    estimated_cost: CostEstimate = field(default_factory=CostEstimate)
    memory_required: int = 0
    concurrency_required: int = 1
    unique_agents: int = 0
    total_duration: int = 0
    constraints: list[Constraint] = field(default_factory=list)
    recommendation: str = ""
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "phase_resources": [vars(p) for p in self.phase_resources],
            "total_tokens": self.total_tokens,
            "estimated_cost": {
                "local": self.estimated_cost.local,
                "api_estimate": self.estimated_cost.api_estimate,
            },
            "memory_required": self.memory_required,
            "concurrency_required": self.concurrency_required,
            "unique_agents": self.unique_agents,
            "total_duration": self.total_duration,
            "constraints": [vars(c) for c in self.constraints],
            "recommendation": self.recommendation,
            "error": self.error,
        }


def estimate_resources(plan: ExecutionPlan | None, *, max_concurrent: int = 5) -> ResourceEstimate:
    """Estimate tokens, memory, concurrency and cost for ``plan``.

    Never raises: a missing or phase-less plan yields a zeroed estimate
    carrying an ``error`` message.
    """
    if plan is None or not plan.phases:
        return ResourceEstimate(error="Invalid plan provided")

    base_tokens = BASE_TOKENS.get(plan.task_analysis.complexity, BASE_TOKENS["medium"])

    phase_resources: list[PhaseResource] = []
    for phase in plan.phases:
        agent_count = len(phase.agents) or 1
        factor = 1.0 if phase.parallel else SEQUENTIAL_TOKEN_FACTOR
        tokens = math.ceil(base_tokens * agent_count * factor * (phase.estimated_duration / 15))
        phase_resources.append(
            PhaseResource(
                phase_id=phase.id,
                phase_name=phase.name,
                agent_count=agent_count,
                estimated_tokens=tokens,
                estimated_duration=phase.estimated_duration,
                parallel=phase.parallel,
            )
        )

    total_tokens = sum(p.estimated_tokens for p in phase_resources)
    concurrency = max(
        [len(p.agents) or 1 for p in plan.phases if p.parallel] + [1],
    )
    unique_agents = len(plan.all_agents_involved) or 1
    total_duration = plan.estimated_total_duration
    api_estimate = (total_tokens / 1000) * API_COST_PER_1K_TOKENS

    constraints: list[Constraint] = []
    if concurrency > max_concurrent:
        constraints.append(
            Constraint(
                type="concurrency",
                message=(
                    f"Plan requires {concurrency} concurrent agents, "
                    f"but limit is {max_concurrent}"
                ),
                severity="warning",
            )
        )
    if total_tokens > TOKEN_INFO_THRESHOLD:
        constraints.append(
            Constraint(
                type="tokens",
                message=f"High token usage estimated: {total_tokens}",
                severity="info",
            )
        )
    if total_duration > DURATION_WARNING_MINUTES:
        constraints.append(
            Constraint(
                type="duration",
                message=f"Long execution time: {total_duration} minutes",
                severity="warning",
            )
        )

    return ResourceEstimate(
        phase_resources=phase_resources,
        total_tokens=total_tokens,
        estimated_cost=CostEstimate(local=0.0, api_estimate=round(api_estimate, 3)),
        memory_required=500 + unique_agents * 100,
        concurrency_required=concurrency,
        unique_agents=unique_agents,
        total_duration=total_duration,
        constraints=constraints,
        recommendation=(
            "Plan is within resource limits"
            if not constraints
            else f"{len(constraints)} constraint(s) detected - review before execution"
        ),
    )
