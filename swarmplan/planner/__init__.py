"""Generic planning API: analyze → select → plan → estimate → optimize."""

from __future__ import annotations

from swarmplan.planner.analyzer import TaskAnalysis, analyze_task
from swarmplan.planner.optimizer import OptimizationResult, optimize_plan, topological_sort
from swarmplan.planner.plan import (
    ExecutionPlan,
    InvalidPlanError,
    Phase,
    PlanCycleError,
    create_execution_plan,
)
from swarmplan.planner.resources import ResourceEstimate, estimate_resources
from swarmplan.planner.selector import AgentSelection, ScoredAgent, select_agents

__all__ = [
    "AgentSelection",
    "ExecutionPlan",
    "InvalidPlanError",
    "OptimizationResult",
    "Phase",
    "PlanCycleError",
    "ResourceEstimate",
    "ScoredAgent",
    "TaskAnalysis",
    "analyze_task",
    "create_execution_plan",
    "estimate_resources",
    "optimize_plan",
    "select_agents",
    "topological_sort",
]
