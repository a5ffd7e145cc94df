"""Async runner functions for CLI commands (no Typer coupling)."""

from __future__ import annotations

import json
import time
from typing import TYPE_CHECKING, Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

if TYPE_CHECKING:
    from collections.abc import Sequence

    from swarmplan.config import SwarmConfig
    from swarmplan.llm.backend import ModelBackend
    from swarmplan.planner.optimizer import OptimizationResult
    from swarmplan.planner.resources import ResourceEstimate
    from swarmplan.planner.selector import AgentSelection
    from swarmplan.swarm.types import SwarmRunResult

console = Console()


def _print_json(data: dict[str, Any]) -> None:
    console.print_json(json.dumps(data, default=str))


def _render_swarm_result(result: SwarmRunResult, elapsed: float) -> None:
    """Render a finished swarm run to the terminal."""
    for warning in result.warnings:
        console.print(f"[yellow]⚠ {warning}[/yellow]")

    console.print("\n[bold blue]Agents:[/bold blue]")
    for agent in result.agents:
        icon = "✅" if agent.success else "❌"
        fallback = " [yellow](fallback)[/yellow]" if agent.fallback_used else ""
        console.print(f"  {icon} [bold]{agent.name}[/bold] [dim]{agent.model}[/dim]{fallback}")
        console.print(f"     [dim]{agent.preview}[/dim]")

    ok = len(result.agents) - len(result.failed_agents)
    info_parts = [
        f"Agents: [bold]{ok}/{len(result.agents)}[/bold]",
        f"Time: [bold]{elapsed:.1f}s[/bold]",
    ]
    if result.memory is not None:
        if result.memory.error:
            info_parts.append(f"Memory: [red]{result.memory.error}[/red]")
        elif result.memory.archive_path:
            info_parts.append(f"Memory: [dim]{result.memory.archive_path}[/dim]")
    info_line = "  ·  ".join(info_parts)

    status_color = "green" if not result.failed_agents else "yellow"
    console.print(
        Panel(
            f"{result.final}\n\n[bold]Summary[/bold]\n{result.summary}\n\n{info_line}",
            border_style=status_color,
            title=f"[bold]{result.title or 'Swarm Complete'}[/bold]",
        )
    )


async def run_swarm(
    prompt: str,
    cfg: SwarmConfig,
    *,
    title: str | None = None,
    agents: Sequence[str] | None = None,
    include_transcript: bool = False,
    save_memory: bool = True,
    as_json: bool = False,
    backend: ModelBackend | None = None,
) -> int:
    """Run the swarm executor and render its result."""
    from swarmplan.swarm.executor import SwarmExecutor

    executor = SwarmExecutor(config=cfg, backend=backend)
    if not as_json:
        console.print("\n[bold blue]Running swarm:[/bold blue] speculate → plan → agents…")
    started_at = time.time()

    result = await executor.run(
        prompt,
        title=title,
        agents=agents,
        include_transcript=include_transcript,
        save_memory=save_memory,
    )
    elapsed = time.time() - started_at

    if as_json:
        _print_json(result.to_dict())
    elif result.is_error:
        console.print(f"\n[red]Swarm failed: {result.error}[/red]")
    else:
        _render_swarm_result(result, elapsed)
    return 1 if result.is_error else 0


async def run_single(
    prompt: str,
    cfg: SwarmConfig,
    *,
    as_json: bool = False,
    backend: ModelBackend | None = None,
) -> int:
    """Answer a simple prompt with one default-model call."""
    from swarmplan.llm.backend import LiteLLMBackend

    backend = backend or LiteLLMBackend(cfg)
    try:
        generation = await backend.generate(cfg.default_model, prompt, temperature=0.2)
    except Exception as e:
        if as_json:
            _print_json({"mode": "single", "error": str(e), "is_error": True})
        else:
            console.print(f"\n[red]Request failed: {e}[/red]")
        return 1

    if as_json:
        _print_json(
            {
                "mode": "single",
                "model": cfg.default_model,
                "final": generation.response,
                "tokens": generation.tokens,
            }
        )
    else:
        console.print(Panel(generation.response, border_style="green", title=cfg.default_model))
    return 0


def render_selection(selection: AgentSelection) -> None:
    analysis = selection.task_analysis
    console.print(
        f"[dim]Complexity:[/dim] [bold]{analysis.complexity}[/bold] "
        f"(score {analysis.complexity_score})  "
        f"[dim]Types:[/dim] {', '.join(analysis.all_types) or analysis.type}"
    )
    table = Table(title="[bold cyan]Selected Agents[/bold cyan]", border_style="cyan")
    table.add_column("Agent", style="cyan")
    table.add_column("Score", justify="right")
    table.add_column("Cost", justify="right")
    table.add_column("Reasons", style="dim")
    for scored in selection.agents:
        table.add_row(
            scored.name,
            str(scored.score),
            str(scored.agent.resource_cost),
            "; ".join(scored.reasons) or "-",
        )
    console.print(table)


def render_optimization(result: OptimizationResult, estimate: ResourceEstimate) -> None:
    plan = result.optimized_plan
    table = Table(
        title="[bold cyan]Execution Plan[/bold cyan]",
        border_style="cyan",
        show_lines=True,
    )
    table.add_column("#", justify="right")
    table.add_column("Phase", style="cyan")
    table.add_column("Agents")
    table.add_column("Mode")
    table.add_column("Depends on", style="dim")
    table.add_column("Duration", justify="right")
    for phase in plan.phases:
        table.add_row(
            str(phase.order),
            phase.name,
            ", ".join(phase.agents),
            "[green]parallel[/green]" if phase.parallel else "sequential",
            ", ".join(phase.depends_on) or "-",
            f"{phase.estimated_duration}m",
        )
    console.print(table)

    if result.optimizations:
        console.print("\n[bold]Optimizations:[/bold]")
        for opt in result.optimizations:
            console.print(f"  • [bold]{opt.type}[/bold]: {opt.description}")

    metrics = result.metrics
    info_parts = [
        f"Duration: [bold]{metrics.optimized.duration}m[/bold] "
        f"({metrics.duration_percent}% faster)",
        f"Tokens: [bold]{metrics.optimized.tokens:,}[/bold] ({metrics.token_percent}% fewer)",
        f"API cost: [bold]${estimate.estimated_cost.api_estimate:.3f}[/bold]",
    ]
    console.print(
        Panel(
            "  ·  ".join(info_parts) + f"\n\n{result.recommendation}",
            border_style="green",
            title="[bold]Plan Summary[/bold]",
        )
    )
    for constraint in estimate.constraints:
        color = "yellow" if constraint.severity == "warning" else "dim"
        console.print(f"[{color}]{constraint.severity}: {constraint.message}[/{color}]")
    console.print(f"[dim]→ {estimate.recommendation}[/dim]")
