"""Builds a dependency-ordered phase graph from the selected agents."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from swarmplan.agents import DEFAULT_ROSTER, AgentProfile, AgentRoster, Capability
from swarmplan.planner.analyzer import TaskAnalysis, analyze_task
from swarmplan.planner.selector import AgentSelection, ScoredAgent

C = Capability


class InvalidPlanError(ValueError):
    """Raised when a plan is missing or structurally unusable."""


class PlanCycleError(InvalidPlanError):
    """Raised when phase dependencies form a cycle."""

    def __init__(self, cycle: list[str]) -> None:
        self.cycle = cycle
        super().__init__(f"Circular phase dependency: {' -> '.join(cycle)}")


@dataclass(frozen=True)
class Phase:
    """A named unit of work in an execution plan."""

    id: str
    name: str
    order: int
    agents: tuple[str, ...]
    parallel: bool
    description: str
    estimated_duration: int  # minutes
    outputs: tuple[str, ...] = ()
    depends_on: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "order": self.order,
            "agents": list(self.agents),
            "parallel": self.parallel,
            "description": self.description,
            "estimated_duration": self.estimated_duration,
            "outputs": list(self.outputs),
            "depends_on": list(self.depends_on),
        }


@dataclass(frozen=True)
class ExecutionPlan:
    """An immutable plan; derive modified copies with ``dataclasses.replace``."""

    task: str
    task_analysis: TaskAnalysis
    phases: tuple[Phase, ...]
    created_at: str = field(default_factory=lambda: datetime.now(UTC).isoformat())
    optimized: bool = False

    @property
    def total_phases(self) -> int:
        return len(self.phases)

    @property
    def estimated_total_duration(self) -> int:
        return sum(p.estimated_duration for p in self.phases)

    @property
    def dependency_graph(self) -> dict[str, list[str]]:
        return {p.id: list(p.depends_on) for p in self.phases}

    @property
    def execution_order(self) -> list[str]:
        """Declared phase order (not a verified topological order)."""
        return [p.id for p in self.phases]

    @property
    def parallel_phases(self) -> list[str]:
        return [p.id for p in self.phases if p.parallel]

    @property
    def sequential_phases(self) -> list[str]:
        return [p.id for p in self.phases if not p.parallel]

    @property
    def all_agents_involved(self) -> list[str]:
        seen: dict[str, None] = {}
        for phase in self.phases:
            for name in phase.agents:
                seen.setdefault(name, None)
        return list(seen)

    def get_phase(self, phase_id: str) -> Phase | None:
        return next((p for p in self.phases if p.id == phase_id), None)

    def missing_dependencies(self) -> dict[str, list[str]]:
        """Map phase id -> ``depends_on`` ids that name no phase in this plan."""
        known = {p.id for p in self.phases}
        missing: dict[str, list[str]] = {}
        for phase in self.phases:
            absent = [dep for dep in phase.depends_on if dep not in known]
            if absent:
                missing[phase.id] = absent
        return missing

    def to_dict(self) -> dict[str, Any]:
        return {
            "task": self.task,
            "task_analysis": self.task_analysis.to_dict(),
            "phases": [p.to_dict() for p in self.phases],
            "total_phases": self.total_phases,
            "estimated_total_duration": self.estimated_total_duration,
            "dependency_graph": self.dependency_graph,
            "execution_order": self.execution_order,
            "parallel_phases": self.parallel_phases,
            "sequential_phases": self.sequential_phases,
            "all_agents_involved": self.all_agents_involved,
            "created_at": self.created_at,
            "optimized": self.optimized,
        }


AgentsInput = AgentSelection | Sequence[AgentProfile] | Sequence[ScoredAgent]


def _as_profiles(agents: AgentsInput) -> list[AgentProfile]:
    if isinstance(agents, AgentSelection):
        return agents.profiles
    return [a.agent if isinstance(a, ScoredAgent) else a for a in agents]


def _with_any(agents: list[AgentProfile], *capabilities: Capability) -> list[AgentProfile]:
    return [a for a in agents if a.has(*capabilities)]


def create_execution_plan(
    task: str,
    agents: AgentsInput,
    *,
    roster: AgentRoster = DEFAULT_ROSTER,
) -> ExecutionPlan:
    """Create an execution plan for a task with the selected agents.

    Phases come from a fixed template (research, planning, implementation,
    testing, review, documentation, synthesis). Planning and synthesis are
    always present and run by the roster's coordinator; the rest are gated
    on the selected agents' capabilities.
    """
    analysis = analyze_task(task)
    selected = _as_profiles(agents)
    high = analysis.complexity == "high"
    coordinator = roster.lead(C.PLANNING).name

    def can_parallel(members: list[AgentProfile]) -> bool:
        return not analysis.requires_sequential and all(a.parallel_safe for a in members)

    phases: list[Phase] = []

    # Research & analysis
    research_agents = [
        a
        for a in selected
        if a.has(C.RESEARCH, C.ANALYSIS) or "Research" in a.specialization
    ]
    if research_agents or analysis.complexity != "low":
        members = research_agents or [roster.lead(C.RESEARCH)]
        phases.append(
            Phase(
                id="research",
                name="Research & Analysis",
                order=1,
                agents=tuple(a.name for a in members),
                parallel=can_parallel(members),
                description="Gather context, investigate requirements, and identify unknowns",
                estimated_duration=30 if high else 15,
                outputs=("context", "requirements", "risks"),
            )
        )

    phases.append(
        Phase(
            id="planning",
            name="Planning & Strategy",
            order=2,
            agents=(coordinator,),
            parallel=False,
            description="Create detailed plan, define dependencies, allocate resources",
            estimated_duration=20 if high else 10,
            outputs=("plan", "dependencies", "timeline"),
            depends_on=("research",) if phases else (),
        )
    )

    implementation_agents = _with_any(
        selected, C.ARCHITECTURE, C.CODE_DESIGN, C.DATABASE, C.DEVOPS, C.API_DESIGN
    )
    if implementation_agents:
        phases.append(
            Phase(
                id="implementation",
                name="Implementation",
                order=3,
                agents=tuple(a.name for a in implementation_agents),
                parallel=can_parallel(implementation_agents),
                description="Execute the core work based on plan",
                estimated_duration=60 if high else 30,
                outputs=("code", "artifacts", "documentation"),
                depends_on=("planning",),
            )
        )

    # Verification hangs off implementation, or off planning when nothing is built.
    build_phase = "implementation" if implementation_agents else "planning"

    testing_agents = _with_any(selected, C.TESTING, C.QA, C.DEBUGGING)
    if testing_agents:
        phases.append(
            Phase(
                id="testing",
                name="Testing & Validation",
                order=4,
                agents=tuple(a.name for a in testing_agents),
                parallel=can_parallel(testing_agents),
                description="Verify implementation, run tests, validate output",
                estimated_duration=30 if high else 15,
                outputs=("test-results", "validation-report"),
                depends_on=(build_phase,),
            )
        )

    review_agents = _with_any(selected, C.CODE_REVIEW, C.BEST_PRACTICES, C.SECURITY_AUDIT)
    if review_agents:
        phases.append(
            Phase(
                id="review",
                name="Review & Security",
                order=5,
                agents=tuple(a.name for a in review_agents),
                parallel=can_parallel(review_agents),
                description="Code review, security audit, best practices check",
                estimated_duration=20,
                outputs=("review-feedback", "security-report"),
                depends_on=(build_phase,),
            )
        )

    doc_agents = _with_any(selected, C.DOCUMENTATION, C.WRITING)
    if doc_agents:
        present = {p.id for p in phases}
        phases.append(
            Phase(
                id="documentation",
                name="Documentation",
                order=6,
                agents=tuple(a.name for a in doc_agents),
                parallel=can_parallel(doc_agents),
                description="Update documentation, create changelogs",
                estimated_duration=15,
                outputs=("documentation", "changelog"),
                depends_on=tuple(d for d in ("review", "testing") if d in present)
                or (build_phase,),
            )
        )

    phases.append(
        Phase(
            id="synthesis",
            name="Synthesis & Report",
            order=7,
            agents=(coordinator,),
            parallel=False,
            description="Combine all outputs, resolve conflicts, create final report",
            estimated_duration=15,
            outputs=("final-report", "recommendations"),
            depends_on=tuple(p.id for p in phases),
        )
    )

    return ExecutionPlan(task=task, task_analysis=analysis, phases=tuple(phases))
