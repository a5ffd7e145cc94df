"""Plan optimizer: more parallelism, less duration and cost, topological order.

Passes, applied in order on copies of the caller's phases:

- ``parallel-merge``: report parallel phases that share a dependency set.
- ``sequential-to-parallel``: flip multi-agent sequential phases whose
  agents are all parallel-safe.
- ``agent-reduction``: keep the two cheapest agents of larger phases
  (only with ``minimize_cost``).
- topological reorder of the phases by ``depends_on``.

Cyclic plans are rejected with ``PlanCycleError`` instead of being
silently reordered.
"""

from __future__ import annotations

import dataclasses
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any

from swarmplan.agents import DEFAULT_ROSTER, AgentRoster
from swarmplan.planner.plan import ExecutionPlan, InvalidPlanError, Phase, PlanCycleError
from swarmplan.planner.resources import ResourceEstimate, estimate_resources

logger = logging.getLogger(__name__)

DEFAULT_RESOURCE_COST = 3
MAX_AGENTS_WHEN_MINIMIZING_COST = 2


@dataclass(frozen=True)
class Optimization:
    type: str
    description: str
    impact: str


@dataclass(frozen=True)
class PlanMetrics:
    duration: int
    tokens: int
    concurrency: int

    @classmethod
    def from_estimate(cls, estimate: ResourceEstimate) -> PlanMetrics:
        return cls(
            duration=estimate.total_duration,
            tokens=estimate.total_tokens,
            concurrency=estimate.concurrency_required,
        )


@dataclass(frozen=True)
class OptimizationMetrics:
    original: PlanMetrics
    optimized: PlanMetrics
    duration_percent: int
    token_percent: int


@dataclass
class OptimizationResult:
    """Outcome of ``optimize_plan``; ``original_plan`` is the caller's plan, untouched."""

    original_plan: ExecutionPlan
    optimized_plan: ExecutionPlan
    optimizations: list[Optimization]
    metrics: OptimizationMetrics
    options: dict[str, bool] = field(default_factory=dict)

    @property
    def applied_optimizations(self) -> int:
        return len(self.optimizations)

    @property
    def recommendation(self) -> str:
        if not self.optimizations:
            return "Plan is already optimal for given constraints"
        return (
            f"Applied {len(self.optimizations)} optimization(s) for "
            f"{self.metrics.duration_percent}% duration improvement"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "optimized_plan": self.optimized_plan.to_dict(),
            "optimizations": [vars(o) for o in self.optimizations],
            "metrics": {
                "original": vars(self.metrics.original),
                "optimized": vars(self.metrics.optimized),
                "improvements": {
                    "duration_percent": self.metrics.duration_percent,
                    "token_percent": self.metrics.token_percent,
                },
            },
            "options": dict(self.options),
            "applied_optimizations": self.applied_optimizations,
            "recommendation": self.recommendation,
        }


def optimize_plan(
    plan: ExecutionPlan | None,
    *,
    maximize_parallelism: bool = True,
    minimize_duration: bool = True,
    minimize_cost: bool = False,
    roster: AgentRoster = DEFAULT_ROSTER,
    max_concurrent: int = 5,
) -> OptimizationResult:
    """Optimize an execution plan for parallelism, duration and cost.

    Raises:
        InvalidPlanError: if the plan is missing, has no phases, or depends
            on phases it does not contain.
        PlanCycleError: if phase dependencies form a cycle.
    """
    if plan is None or not plan.phases:
        raise InvalidPlanError("Invalid plan provided")
    missing = plan.missing_dependencies()
    if missing:
        detail = "; ".join(f"{pid} -> {', '.join(deps)}" for pid, deps in missing.items())
        raise InvalidPlanError(f"Plan depends on unknown phases: {detail}")

    original = estimate_resources(plan, max_concurrent=max_concurrent)
    phases = list(plan.phases)
    optimizations: list[Optimization] = []

    if maximize_parallelism:
        optimizations.extend(_find_parallel_groups(phases))

    if minimize_duration:
        phases = _parallelize_sequential(phases, roster, optimizations)

    if minimize_cost:
        phases = _reduce_agents(phases, roster, optimizations)

    ordered = topological_sort(phases)
    optimized_plan = dataclasses.replace(plan, phases=tuple(ordered), optimized=True)
    optimized = estimate_resources(optimized_plan, max_concurrent=max_concurrent)

    metrics = OptimizationMetrics(
        original=PlanMetrics.from_estimate(original),
        optimized=PlanMetrics.from_estimate(optimized),
        duration_percent=_improvement(original.total_duration, optimized.total_duration),
        token_percent=_improvement(original.total_tokens, optimized.total_tokens),
    )
    logger.debug("Applied %d optimization(s) to plan", len(optimizations))

    return OptimizationResult(
        original_plan=plan,
        optimized_plan=optimized_plan,
        optimizations=optimizations,
        metrics=metrics,
        options={
            "maximize_parallelism": maximize_parallelism,
            "minimize_duration": minimize_duration,
            "minimize_cost": minimize_cost,
        },
    )


def _find_parallel_groups(phases: list[Phase]) -> list[Optimization]:
    groups: dict[str, list[Phase]] = defaultdict(list)
    for phase in phases:
        key = ",".join(sorted(phase.depends_on)) or "root"
        groups[key].append(phase)

    found: list[Optimization] = []
    for group in groups.values():
        parallel = [p for p in group if p.parallel]
        if len(parallel) > 1:
            found.append(
                Optimization(
                    type="parallel-merge",
                    description=f"Phases {', '.join(p.id for p in parallel)} can run in parallel",
                    impact="duration-reduction",
                )
            )
    return found


def _parallelize_sequential(
    phases: list[Phase],
    roster: AgentRoster,
    optimizations: list[Optimization],
) -> list[Phase]:
    result: list[Phase] = []
    for phase in phases:
        if not phase.parallel and len(phase.agents) > 1 and _all_parallel_safe(phase, roster):
            phase = dataclasses.replace(phase, parallel=True)
            optimizations.append(
                Optimization(
                    type="sequential-to-parallel",
                    description=f"Phase {phase.id} converted to parallel execution",
                    impact="duration-reduction",
                )
            )
        result.append(phase)
    return result


def _all_parallel_safe(phase: Phase, roster: AgentRoster) -> bool:
    # Agents missing from the roster are treated as parallel-safe.
    for name in phase.agents:
        profile = roster.get(name)
        if profile is not None and not profile.parallel_safe:
            return False
    return True


def _reduce_agents(
    phases: list[Phase],
    roster: AgentRoster,
    optimizations: list[Optimization],
) -> list[Phase]:
    def cost(name: str) -> int:
        profile = roster.get(name)
        return profile.resource_cost if profile else DEFAULT_RESOURCE_COST

    result: list[Phase] = []
    for phase in phases:
        if len(phase.agents) > MAX_AGENTS_WHEN_MINIMIZING_COST:
            kept = sorted(phase.agents, key=cost)[:MAX_AGENTS_WHEN_MINIMIZING_COST]
            optimizations.append(
                Optimization(
                    type="agent-reduction",
                    description=(
                        f"Phase {phase.id} reduced from {len(phase.agents)} "
                        f"to {len(kept)} agents"
                    ),
                    impact="cost-reduction",
                )
            )
            phase = dataclasses.replace(phase, agents=tuple(kept))
        result.append(phase)
    return result


def topological_sort(phases: list[Phase]) -> list[Phase]:
    """Order phases so every phase follows the phases it depends on.

    Depth-first, visiting phases in their given order so independent
    phases keep their relative position. Dependencies on ids that are not
    in ``phases`` are ignored.

    Raises:
        PlanCycleError: with the offending cycle, when one exists.
    """
    by_id = {p.id: p for p in phases}
    ordered: list[Phase] = []
    done: set[str] = set()
    path: list[str] = []

    def visit(phase: Phase) -> None:
        if phase.id in done:
            return
        if phase.id in path:
            start = path.index(phase.id)
            raise PlanCycleError(path[start:] + [phase.id])
        path.append(phase.id)
        for dep_id in phase.depends_on:
            dep = by_id.get(dep_id)
            if dep is not None:
                visit(dep)
        path.pop()
        done.add(phase.id)
        ordered.append(phase)

    for phase in phases:
        visit(phase)
    return ordered


def _improvement(before: int, after: int) -> int:
    if before <= 0:
        return 0
    return round((before - after) / before * 100)
