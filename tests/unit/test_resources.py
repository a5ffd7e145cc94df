"""Tests for plan resource estimation."""

from __future__ import annotations

from swarmplan.planner.analyzer import analyze_task
from swarmplan.planner.plan import ExecutionPlan, Phase, create_execution_plan
from swarmplan.planner.resources import estimate_resources


def _phase(phase_id: str, agents: tuple[str, ...], *, parallel: bool, duration: int = 15) -> Phase:
    return Phase(
        id=phase_id,
        name=phase_id.title(),
        order=1,
        agents=agents,
        parallel=parallel,
        description="",
        estimated_duration=duration,
    )


def _plan(*phases: Phase, task: str = "Fix a bug") -> ExecutionPlan:
    return ExecutionPlan(task=task, task_analysis=analyze_task(task), phases=phases)


def test_token_and_cost_arithmetic() -> None:
    plan = _plan(
        _phase("build", ("Geralt", "Triss"), parallel=True),
        _phase("wrap", ("Geralt",), parallel=False),
    )
    estimate = estimate_resources(plan)

    assert [p.estimated_tokens for p in estimate.phase_resources] == [1000, 600]
    assert estimate.total_tokens == 1600
    assert estimate.estimated_cost.local == 0.0
    assert estimate.estimated_cost.api_estimate == 0.003
    assert estimate.memory_required == 700
    assert estimate.concurrency_required == 2
    assert estimate.unique_agents == 2
    assert estimate.total_duration == 30
    assert estimate.constraints == []
    assert estimate.recommendation == "Plan is within resource limits"
    assert estimate.error is None


def test_concurrency_constraint() -> None:
    plan = _plan(_phase("build", ("Geralt", "Triss", "Ciri"), parallel=True))
    estimate = estimate_resources(plan, max_concurrent=2)

    assert [c.type for c in estimate.constraints] == ["concurrency"]
    assert estimate.constraints[0].severity == "warning"
    assert estimate.recommendation == "1 constraint(s) detected - review before execution"


def test_duration_constraint() -> None:
    plan = _plan(_phase("long", ("Geralt",), parallel=False, duration=150))
    estimate = estimate_resources(plan)
    assert any(c.type == "duration" and c.severity == "warning" for c in estimate.constraints)


def test_token_constraint_is_informational() -> None:
    plan = _plan(_phase("huge", tuple(f"agent-{i}" for i in range(10)), parallel=False, duration=150))
    estimate = estimate_resources(plan)
    tokens = [c for c in estimate.constraints if c.type == "tokens"]
    assert estimate.total_tokens > 50_000
    assert tokens and tokens[0].severity == "info"


def test_empty_phase_counts_as_one_agent() -> None:
    plan = _plan(_phase("solo", (), parallel=True))
    estimate = estimate_resources(plan)
    assert estimate.phase_resources[0].agent_count == 1
    assert estimate.unique_agents == 1


def test_generated_plan_estimate() -> None:
    plan = create_execution_plan("Implement a new endpoint for user profiles", [])
    estimate = estimate_resources(plan)
    assert estimate.total_duration == plan.estimated_total_duration
    assert estimate.total_tokens > 0


def test_missing_plan_never_raises() -> None:
    for plan in (None, _plan()):
        estimate = estimate_resources(plan)
        assert estimate.error == "Invalid plan provided"
        assert estimate.total_tokens == 0
        assert estimate.phase_resources == []


def test_to_dict() -> None:
    data = estimate_resources(_plan(_phase("a", ("Geralt",), parallel=True))).to_dict()
    assert data["estimated_cost"] == {"local": 0.0, "api_estimate": 0.001}
    assert data["error"] is None
