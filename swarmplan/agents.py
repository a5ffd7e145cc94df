"""Agent roster: persona-bound profiles shared by the planner and the swarm."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Any


class Capability(str, Enum):
    """Closed set of capability tags an agent can carry."""

    SECURITY_AUDIT = "security-audit"
    OPS = "ops"
    THREAT_ANALYSIS = "threat-analysis"
    PENETRATION_TESTING = "penetration-testing"
    ARCHITECTURE = "architecture"
    CODE_DESIGN = "code-design"
    REFACTORING = "refactoring"
    PATTERNS = "patterns"
    TESTING = "testing"
    QA = "qa"
    VALIDATION = "validation"
    DEBUGGING = "debugging"
    DOCUMENTATION = "documentation"
    COMMUNICATION = "communication"
    WRITING = "writing"
    EXPLANATION = "explanation"
    CODE_REVIEW = "code-review"
    BEST_PRACTICES = "best-practices"
    MENTORING = "mentoring"
    STANDARDS = "standards"
    QUICK_TASKS = "quick-tasks"
    PROTOTYPING = "prototyping"
    FAST_ITERATION = "fast-iteration"
    EXPLORATION = "exploration"
    DEVOPS = "devops"
    INFRASTRUCTURE = "infrastructure"
    DEPLOYMENT = "deployment"
    CI_CD = "ci-cd"
    PERFORMANCE = "performance"
    OPTIMIZATION = "optimization"
    PROFILING = "profiling"
    DATABASE = "database"
    DATA_MODELING = "data-modeling"
    SQL = "sql"
    MIGRATIONS = "migrations"
    RESEARCH = "research"
    ANALYSIS = "analysis"
    INVESTIGATION = "investigation"
    DEEP_DIVE = "deep-dive"
    PLANNING = "planning"
    STRATEGY = "strategy"
    COORDINATION = "coordination"
    ORCHESTRATION = "orchestration"
    INTEGRATIONS = "integrations"
    API_DESIGN = "api-design"
    EXTERNAL_SERVICES = "external-services"
    WEBHOOKS = "webhooks"


C = Capability

# Task type -> capabilities that serve it. Iteration order decides the
# primary task type when several match.
TASK_CAPABILITY_MAP: dict[str, tuple[Capability, ...]] = {
    "security": (C.SECURITY_AUDIT, C.THREAT_ANALYSIS, C.PENETRATION_TESTING),
    "architecture": (C.ARCHITECTURE, C.CODE_DESIGN, C.PATTERNS, C.REFACTORING),
    "testing": (C.TESTING, C.QA, C.VALIDATION, C.DEBUGGING),
    "documentation": (C.DOCUMENTATION, C.COMMUNICATION, C.WRITING, C.EXPLANATION),
    "review": (C.CODE_REVIEW, C.BEST_PRACTICES, C.STANDARDS),
    "performance": (C.DEBUGGING, C.PERFORMANCE, C.OPTIMIZATION, C.PROFILING),
    "data": (C.DATABASE, C.DATA_MODELING, C.SQL, C.MIGRATIONS),
    "research": (C.RESEARCH, C.ANALYSIS, C.INVESTIGATION, C.DEEP_DIVE),
    "devops": (C.DEVOPS, C.INFRASTRUCTURE, C.DEPLOYMENT, C.CI_CD),
    "api": (C.INTEGRATIONS, C.API_DESIGN, C.EXTERNAL_SERVICES, C.WEBHOOKS),
    "quick": (C.QUICK_TASKS, C.PROTOTYPING, C.FAST_ITERATION, C.EXPLORATION),
    "planning": (C.PLANNING, C.STRATEGY, C.COORDINATION, C.ORCHESTRATION),
}


@dataclass(frozen=True)
class AgentProfile:
    """A persona-bound agent with its capabilities and resource profile."""

    name: str
    persona: str
    specialization: str
    capabilities: frozenset[Capability]
    resource_cost: int
    parallel_safe: bool
    priority: int  # lower wins ties
    model: str

    def has(self, *capabilities: Capability) -> bool:
        """True if the agent carries any of the given capabilities."""
        return any(cap in self.capabilities for cap in capabilities)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "persona": self.persona,
            "specialization": self.specialization,
            "capabilities": sorted(cap.value for cap in self.capabilities),
            "resource_cost": self.resource_cost,
            "parallel_safe": self.parallel_safe,
            "priority": self.priority,
            "model": self.model,
        }


class AgentRoster:
    """Immutable, ordered collection of agent profiles.

    Built once and handed to the selector, planner, optimizer and swarm
    executor so they all read the same roster.

    Usage:
        roster = AgentRoster([...profiles...])
        roster.get("Regis")
        roster.with_capability(Capability.RESEARCH)
    """

    __slots__ = ("_profiles", "_by_name")

    def __init__(self, profiles: Iterable[AgentProfile]) -> None:
        ordered = tuple(profiles)
        by_name: dict[str, AgentProfile] = {}
        for profile in ordered:
            if profile.name in by_name:
                msg = f"Duplicate agent name in roster: {profile.name}"
                raise ValueError(msg)
            by_name[profile.name] = profile
        self._profiles = ordered
        self._by_name = by_name

    def __iter__(self) -> Iterator[AgentProfile]:
        return iter(self._profiles)

    def __len__(self) -> int:
        return len(self._profiles)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def get(self, name: str) -> AgentProfile | None:
        return self._by_name.get(name)

    def names(self) -> list[str]:
        return [p.name for p in self._profiles]

    def with_capability(self, capability: Capability) -> list[AgentProfile]:
        """Agents carrying ``capability``, best priority first."""
        matches = [p for p in self._profiles if capability in p.capabilities]
        return sorted(matches, key=lambda p: p.priority)

    def lead(self, capability: Capability) -> AgentProfile:
        """The best-priority agent carrying ``capability``."""
        matches = self.with_capability(capability)
        if not matches:
            msg = f"Roster has no agent with capability '{capability.value}'"
            raise LookupError(msg)
        return matches[0]


def _profile(
    name: str,
    persona: str,
    specialization: str,
    capabilities: tuple[Capability, ...],
    resource_cost: int,
    parallel_safe: bool,
    priority: int,
    model: str,
) -> AgentProfile:
    return AgentProfile(
        name=name,
        persona=persona,
        specialization=specialization,
        capabilities=frozenset(capabilities),
        resource_cost=resource_cost,
        parallel_safe=parallel_safe,
        priority=priority,
        model=model,
    )


DEFAULT_ROSTER = AgentRoster(
    [
        _profile(
            "Geralt", "White Wolf", "Security/Ops",
            (C.SECURITY_AUDIT, C.OPS, C.THREAT_ANALYSIS, C.PENETRATION_TESTING),
            3, True, 1, "llama3.2:3b",
        ),
        _profile(
            "Yennefer", "Sorceress", "Architecture/Code",
            (C.ARCHITECTURE, C.CODE_DESIGN, C.REFACTORING, C.PATTERNS),
            4, True, 2, "qwen2.5-coder:1.5b",
        ),
        _profile(
            "Triss", "Healer", "QA/Testing",
            (C.TESTING, C.QA, C.VALIDATION, C.DEBUGGING),
            3, True, 3, "qwen2.5-coder:1.5b",
        ),
        _profile(
            "Jaskier", "Bard", "Docs/Comms",
            (C.DOCUMENTATION, C.COMMUNICATION, C.WRITING, C.EXPLANATION),
            2, True, 5, "llama3.2:3b",
        ),
        _profile(
            "Vesemir", "Mentor", "Review/Best Practices",
            (C.CODE_REVIEW, C.BEST_PRACTICES, C.MENTORING, C.STANDARDS),
            3, True, 4, "llama3.2:3b",
        ),
        _profile(
            "Ciri", "Prodigy", "Speed/Quick",
            (C.QUICK_TASKS, C.PROTOTYPING, C.FAST_ITERATION, C.EXPLORATION),
            1, True, 6, "llama3.2:1b",
        ),
        _profile(
            "Eskel", "Pragmatist", "DevOps/Infra",
            (C.DEVOPS, C.INFRASTRUCTURE, C.DEPLOYMENT, C.CI_CD),
            4, True, 2, "llama3.2:3b",
        ),
        _profile(
            "Lambert", "Skeptic", "Debug/Perf",
            (C.DEBUGGING, C.PERFORMANCE, C.OPTIMIZATION, C.PROFILING),
            3, True, 3, "qwen2.5-coder:1.5b",
        ),
        _profile(
            "Zoltan", "Craftsman", "Data/DB",
            (C.DATABASE, C.DATA_MODELING, C.SQL, C.MIGRATIONS),
            3, False, 2, "llama3.2:3b",
        ),
        _profile(
            "Regis", "Sage", "Research/Analysis",
            (C.RESEARCH, C.ANALYSIS, C.INVESTIGATION, C.DEEP_DIVE),
            4, True, 1, "phi3:mini",
        ),
        _profile(
            "Dijkstra", "Spymaster", "Planning/Strategy",
            (C.PLANNING, C.STRATEGY, C.COORDINATION, C.ORCHESTRATION),
            3, True, 1, "llama3.2:3b",
        ),
        _profile(
            "Philippa", "Strategist", "Integrations/API",
            (C.INTEGRATIONS, C.API_DESIGN, C.EXTERNAL_SERVICES, C.WEBHOOKS),
            4, True, 2, "qwen2.5-coder:1.5b",
        ),
    ]
)


def get_agent(name: str, roster: AgentRoster = DEFAULT_ROSTER) -> AgentProfile | None:
    """Get an agent profile by name."""
    return roster.get(name)


def list_agents(roster: AgentRoster = DEFAULT_ROSTER) -> list[str]:
    """List agent names in roster order."""
    return roster.names()


def get_all_agents_info(roster: AgentRoster = DEFAULT_ROSTER) -> list[dict[str, Any]]:
    """Get info about all agents for display/API purposes."""
    return [profile.to_dict() for profile in roster]
