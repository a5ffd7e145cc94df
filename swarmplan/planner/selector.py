"""Scores and ranks the agent roster against a task analysis."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from swarmplan.agents import (
    DEFAULT_ROSTER,
    TASK_CAPABILITY_MAP,
    AgentProfile,
    AgentRoster,
    Capability,
)
from swarmplan.planner.analyzer import TaskAnalysis, analyze_task

REVIEW_CAPABILITIES = (Capability.CODE_REVIEW, Capability.BEST_PRACTICES)


@dataclass
class ScoredAgent:
    """A roster agent with its match score and the reasons behind it."""

    agent: AgentProfile
    score: int
    reasons: list[str] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.agent.name

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.agent.name,
            "specialization": self.agent.specialization,
            "capabilities": sorted(cap.value for cap in self.agent.capabilities),
            "score": self.score,
            "reasons": list(self.reasons),
            "resource_cost": self.agent.resource_cost,
            "parallel_safe": self.agent.parallel_safe,
        }


@dataclass(frozen=True)
class SelectionCriteria:
    max_agents: int = 5
    include_reviewer: bool = True
    include_researcher: bool = True


@dataclass
class AgentSelection:
    """Ranked agents chosen for a task."""

    agents: list[ScoredAgent]
    task_analysis: TaskAnalysis
    criteria: SelectionCriteria

    @property
    def total_agents(self) -> int:
        return len(self.agents)

    @property
    def profiles(self) -> list[AgentProfile]:
        return [scored.agent for scored in self.agents]

    def to_dict(self) -> dict[str, Any]:
        return {
            "agents": [scored.to_dict() for scored in self.agents],
            "task_analysis": self.task_analysis.to_dict(),
            "selection_criteria": {
                "max_agents": self.criteria.max_agents,
                "include_reviewer": self.criteria.include_reviewer,
                "include_researcher": self.criteria.include_researcher,
            },
            "total_agents": self.total_agents,
        }


def score_agent(agent: AgentProfile, analysis: TaskAnalysis) -> ScoredAgent:
    """Score a single agent against a task analysis."""
    score = 0
    reasons: list[str] = []

    for task_type in analysis.all_types:
        required = TASK_CAPABILITY_MAP.get(task_type, ())
        matching = [cap for cap in required if cap in agent.capabilities]
        if matching:
            score += len(matching) * 2
            reasons.append(
                f"Matches {task_type} capabilities: {', '.join(cap.value for cap in matching)}"
            )

    if analysis.complexity == "high" and agent.resource_cost >= 3:
        score += 1
        reasons.append("Suitable for high complexity")
    if analysis.complexity == "low" and agent.resource_cost <= 2:
        score += 1
        reasons.append("Efficient for low complexity")

    if analysis.risk_level == "high" and "Security" in agent.specialization:
        score += 2
        reasons.append("Security expertise for high-risk task")

    if analysis.has_data_dependencies and Capability.DATABASE in agent.capabilities:
        score += 2
        reasons.append("Has database capabilities")

    return ScoredAgent(agent=agent, score=score, reasons=reasons)


def select_agents(
    task: object,
    *,
    max_agents: int = 5,
    include_reviewer: bool = True,
    include_researcher: bool = True,
    roster: AgentRoster = DEFAULT_ROSTER,
) -> AgentSelection:
    """Select the best-matching agents for a task.

    Agents are ranked by score (descending) and priority (ascending); the
    top ``max_agents`` are kept. The reviewer and researcher guarantees are
    best-effort swaps of the lowest-ranked pick, applied in that order, and
    only when the roster is larger than ``max_agents``.
    """
    if max_agents < 1:
        msg = f"max_agents must be at least 1, got {max_agents}"
        raise ValueError(msg)

    analysis = analyze_task(task)
    ranked = sorted(
        (score_agent(agent, analysis) for agent in roster),
        key=lambda scored: (-scored.score, scored.agent.priority),
    )
    selected = ranked[:max_agents]

    if include_reviewer:
        _ensure_included(
            selected,
            ranked,
            max_agents,
            present=lambda a: a.has(*REVIEW_CAPABILITIES),
            candidate=lambda a: a.has(Capability.CODE_REVIEW),
        )
    if include_researcher:
        _ensure_included(
            selected,
            ranked,
            max_agents,
            present=lambda a: a.has(Capability.RESEARCH),
            candidate=lambda a: a.has(Capability.RESEARCH),
        )

    return AgentSelection(
        agents=selected,
        task_analysis=analysis,
        criteria=SelectionCriteria(
            max_agents=max_agents,
            include_reviewer=include_reviewer,
            include_researcher=include_researcher,
        ),
    )


def _ensure_included(
    selected: list[ScoredAgent],
    ranked: list[ScoredAgent],
    max_agents: int,
    present: Callable[[AgentProfile], bool],
    candidate: Callable[[AgentProfile], bool],
) -> None:
    """Swap the last pick for the best unselected candidate if none is present."""
    if any(present(scored.agent) for scored in selected):
        return
    if len(ranked) <= max_agents:
        return
    replacement = next(
        (s for s in ranked if candidate(s.agent) and all(s is not p for p in selected)),
        None,
    )
    if replacement is not None:
        selected.pop()
        selected.append(replacement)
