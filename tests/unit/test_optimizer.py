"""Tests for the plan optimizer and topological ordering."""

from __future__ import annotations

import pytest

from swarmplan.planner.analyzer import analyze_task
from swarmplan.planner.optimizer import optimize_plan, topological_sort
from swarmplan.planner.plan import (
    ExecutionPlan,
    InvalidPlanError,
    Phase,
    PlanCycleError,
    create_execution_plan,
)


def _phase(
    phase_id: str,
    agents: tuple[str, ...],
    *,
    parallel: bool = False,
    depends_on: tuple[str, ...] = (),
) -> Phase:
    return Phase(
        id=phase_id,
        name=phase_id.title(),
        order=1,
        agents=agents,
        parallel=parallel,
        description="",
        estimated_duration=15,
        depends_on=depends_on,
    )


def _plan(*phases: Phase) -> ExecutionPlan:
    return ExecutionPlan(task="Fix a bug", task_analysis=analyze_task("Fix a bug"), phases=phases)


class TestPasses:
    def test_parallel_groups_and_sequential_flip(self) -> None:
        plan = _plan(
            _phase("a", ("Geralt", "Triss")),
            _phase("b", ("Jaskier",), parallel=True, depends_on=("a",)),
            _phase("c", ("Ciri",), parallel=True, depends_on=("a",)),
        )
        result = optimize_plan(plan)

        kinds = [o.type for o in result.optimizations]
        assert kinds == ["parallel-merge", "sequential-to-parallel"]
        assert result.optimizations[0].description == "Phases b, c can run in parallel"
        assert result.optimized_plan.get_phase("a").parallel is True
        assert result.optimized_plan.optimized is True
        assert result.applied_optimizations == 2

    def test_original_plan_untouched(self) -> None:
        plan = _plan(_phase("a", ("Geralt", "Triss")))
        result = optimize_plan(plan)
        assert plan.phases[0].parallel is False
        assert plan.optimized is False
        assert result.original_plan is plan

    def test_unsafe_agent_blocks_flip(self) -> None:
        plan = _plan(_phase("a", ("Zoltan", "Triss")))
        result = optimize_plan(plan)
        assert result.optimizations == []
        assert result.recommendation == "Plan is already optimal for given constraints"

    def test_unknown_agents_count_as_safe(self) -> None:
        result = optimize_plan(_plan(_phase("a", ("Nobody", "Ciri"))))
        assert result.optimized_plan.get_phase("a").parallel is True

    def test_single_agent_phase_stays_sequential(self) -> None:
        result = optimize_plan(_plan(_phase("a", ("Ciri",))))
        assert result.optimized_plan.get_phase("a").parallel is False

    def test_minimize_duration_off(self) -> None:
        result = optimize_plan(_plan(_phase("a", ("Geralt", "Triss"))), minimize_duration=False)
        assert result.optimized_plan.get_phase("a").parallel is False

    def test_minimize_cost_keeps_two_cheapest(self) -> None:
        plan = _plan(_phase("a", ("Vesemir", "Ciri", "Jaskier"), parallel=True))
        result = optimize_plan(plan, minimize_cost=True)

        assert result.optimized_plan.get_phase("a").agents == ("Ciri", "Jaskier")
        assert [o.type for o in result.optimizations] == ["agent-reduction"]
        assert result.options["minimize_cost"] is True

    def test_token_improvement_from_parallelism(self) -> None:
        result = optimize_plan(_plan(_phase("a", ("Geralt", "Triss"))))
        assert result.metrics.original.tokens == 1200
        assert result.metrics.optimized.tokens == 1000
        assert result.metrics.token_percent == 17
        assert result.metrics.duration_percent == 0


class TestOrdering:
    def test_reorders_by_dependencies(self) -> None:
        plan = _plan(
            _phase("synthesis", ("Dijkstra",), depends_on=("work",)),
            _phase("work", ("Ciri",)),
        )
        result = optimize_plan(plan)
        assert result.optimized_plan.execution_order == ["work", "synthesis"]

    def test_generated_plan_order_is_topological(self) -> None:
        plan = create_execution_plan(
            "Implement a new endpoint for user profiles and document it",
            [],
        )
        ordered = optimize_plan(plan).optimized_plan
        seen: set[str] = set()
        for phase in ordered.phases:
            assert set(phase.depends_on) <= seen
            seen.add(phase.id)

    def test_cycle_raises(self) -> None:
        plan = _plan(
            _phase("a", ("Ciri",), depends_on=("b",)),
            _phase("b", ("Ciri",), depends_on=("a",)),
        )
        with pytest.raises(PlanCycleError) as exc_info:
            optimize_plan(plan)
        assert exc_info.value.cycle == ["a", "b", "a"]

    def test_self_dependency_is_a_cycle(self) -> None:
        with pytest.raises(PlanCycleError):
            topological_sort([_phase("a", ("Ciri",), depends_on=("a",))])


class TestInvalidPlans:
    def test_none(self) -> None:
        with pytest.raises(InvalidPlanError):
            optimize_plan(None)

    def test_no_phases(self) -> None:
        with pytest.raises(InvalidPlanError):
            optimize_plan(_plan())

    def test_missing_dependency(self) -> None:
        plan = _plan(_phase("a", ("Ciri",), depends_on=("ghost",)))
        with pytest.raises(InvalidPlanError, match="ghost"):
            optimize_plan(plan)


def test_to_dict() -> None:
    data = optimize_plan(_plan(_phase("a", ("Geralt", "Triss")))).to_dict()
    assert data["applied_optimizations"] == 1
    assert data["metrics"]["improvements"]["token_percent"] == 17
    assert data["optimized_plan"]["optimized"] is True
