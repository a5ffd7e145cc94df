"""swarmplan: multi-agent swarm execution and task planning."""

from swarmplan.agents import DEFAULT_ROSTER, AgentProfile, AgentRoster, Capability
from swarmplan.config import SwarmConfig, resolve_config
from swarmplan.planner import (
    analyze_task,
    create_execution_plan,
    estimate_resources,
    optimize_plan,
    select_agents,
)
from swarmplan.swarm import SwarmExecutor, SwarmRunResult, is_complex_prompt, run_swarm

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_ROSTER",
    "AgentProfile",
    "AgentRoster",
    "Capability",
    "SwarmConfig",
    "SwarmExecutor",
    "SwarmRunResult",
    "analyze_task",
    "create_execution_plan",
    "estimate_resources",
    "is_complex_prompt",
    "optimize_plan",
    "resolve_config",
    "run_swarm",
    "select_agents",
]
