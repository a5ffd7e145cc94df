"""Typer CLI for swarmplan."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

console = Console()
app = typer.Typer(
    name="swarmplan",
    help="Run prompts through a swarm of specialist agents, or plan multi-agent work.",
    add_completion=False,
    no_args_is_help=True,
)


def _resolve_config(cwd: str, **overrides: Any) -> Any:
    """Load .env and .swarmplan.yml; CLI flags take priority over both."""
    from dotenv import load_dotenv

    load_dotenv()

    from swarmplan.config import resolve_config

    try:
        return resolve_config(str(Path(cwd).resolve()), **overrides)
    except (ValueError, TypeError) as e:
        console.print(f"[red]Invalid configuration: {e}[/red]")
        raise typer.Exit(code=1) from e


@app.command()
def swarm(
    prompt: str = typer.Argument(..., help="Task for the swarm"),
    title: str | None = typer.Option(None, "--title", "-t", help="Title for the memory archive"),
    agent: list[str] | None = typer.Option(
        None, "--agent", "-a", help="Restrict to these agents (repeatable)"
    ),
    transcript: bool = typer.Option(
        False, "--transcript", help="Include every stage's raw output (with --json)"
    ),
    no_memory: bool = typer.Option(False, "--no-memory", help="Do not archive the run"),
    workers: int | None = typer.Option(
        None, "--workers", "-w", help="Maximum agents running at once"
    ),
    model: str | None = typer.Option(None, "--model", "-m", help="Default model"),
    fast_model: str | None = typer.Option(
        None, "--fast-model", help="Model for speculation and logging"
    ),
    timeout: float | None = typer.Option(
        None, "--timeout", help="Deadline for the whole run, in seconds"
    ),
    cwd: str = typer.Option(".", "--cwd", "-C", help="Project directory"),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON"),
) -> None:
    """Run a prompt through the five-stage agent swarm.

    Speculates, plans, fans out to specialist agents, synthesizes their
    outputs and writes a short log.

    Examples:
        swarmplan swarm "design a caching layer for the API"
        swarmplan swarm "audit the auth flow" --agent Yennefer --agent Triss
        swarmplan swarm "plan the v2 migration" --workers 3 --timeout 300 --json
    """
    cfg = _resolve_config(
        cwd,
        max_concurrent=workers,
        default_model=model,
        fast_model=fast_model,
        run_timeout=timeout,
    )

    if not as_json:
        console.print(
            Panel(
                f"[bold cyan]swarmplan swarm[/bold cyan]  🐝\n\n"
                f"[bold]{prompt}[/bold]\n\n"
                f"[dim]workers={cfg.max_concurrent}  model={cfg.default_model}  "
                f"fast-model={cfg.fast_model}[/dim]",
                border_style="cyan",
            )
        )

    from swarmplan.cli.runners import run_swarm as _run_swarm

    exit_code = asyncio.run(
        _run_swarm(
            prompt,
            cfg,
            title=title,
            agents=agent or None,
            include_transcript=transcript,
            save_memory=not no_memory,
            as_json=as_json,
        )
    )
    raise typer.Exit(code=exit_code)


@app.command()
def ask(
    prompt: str = typer.Argument(..., help="Question or task"),
    model: str | None = typer.Option(None, "--model", "-m", help="Default model"),
    cwd: str = typer.Option(".", "--cwd", "-C", help="Project directory"),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON"),
) -> None:
    """Answer a prompt, escalating complex ones to the swarm."""
    from swarmplan.cli.runners import run_single, run_swarm
    from swarmplan.swarm.prompts import is_complex_prompt

    cfg = _resolve_config(cwd, default_model=model)
    if is_complex_prompt(prompt):
        if not as_json:
            console.print("[dim]Complex prompt, routing to the swarm[/dim]")
        exit_code = asyncio.run(run_swarm(prompt, cfg, as_json=as_json))
    else:
        exit_code = asyncio.run(run_single(prompt, cfg, as_json=as_json))
    raise typer.Exit(code=exit_code)


@app.command()
def plan(
    task: str = typer.Argument(..., help="Task to plan"),
    max_agents: int = typer.Option(5, "--max-agents", "-n", help="Maximum agents to select"),
    no_reviewer: bool = typer.Option(False, "--no-reviewer", help="Do not force a reviewer"),
    no_researcher: bool = typer.Option(
        False, "--no-researcher", help="Do not force a researcher"
    ),
    minimize_cost: bool = typer.Option(
        False, "--minimize-cost", help="Trim large phases to their cheapest agents"
    ),
    workers: int | None = typer.Option(
        None, "--workers", "-w", help="Concurrency limit the plan is checked against"
    ),
    cwd: str = typer.Option(".", "--cwd", "-C", help="Project directory"),
    as_json: bool = typer.Option(False, "--json", help="Print the plan as JSON"),
) -> None:
    """Analyze a task, pick agents and build an optimized execution plan."""
    from swarmplan.cli.runners import render_optimization, render_selection
    from swarmplan.planner import (
        InvalidPlanError,
        create_execution_plan,
        estimate_resources,
        optimize_plan,
        select_agents,
    )

    cfg = _resolve_config(cwd, max_concurrent=workers)
    try:
        selection = select_agents(
            task,
            max_agents=max_agents,
            include_reviewer=not no_reviewer,
            include_researcher=not no_researcher,
        )
        execution_plan = create_execution_plan(task, selection)
        result = optimize_plan(
            execution_plan, minimize_cost=minimize_cost, max_concurrent=cfg.max_concurrent
        )
    except (InvalidPlanError, ValueError) as e:
        console.print(f"[red]Planning failed: {e}[/red]")
        raise typer.Exit(code=1) from e
    estimate = estimate_resources(result.optimized_plan, max_concurrent=cfg.max_concurrent)

    if as_json:
        console.print_json(
            json.dumps(
                {
                    "selection": selection.to_dict(),
                    "plan": execution_plan.to_dict(),
                    "optimization": result.to_dict(),
                    "resources": estimate.to_dict(),
                }
            )
        )
        return

    render_selection(selection)
    render_optimization(result, estimate)


@app.command()
def analyze(
    task: str = typer.Argument(..., help="Task to analyze"),
    as_json: bool = typer.Option(False, "--json", help="Print the analysis as JSON"),
) -> None:
    """Show the complexity, type and risk analysis of a task."""
    from swarmplan.planner import analyze_task

    analysis = analyze_task(task)
    if as_json:
        console.print_json(json.dumps(analysis.to_dict()))
        return

    color = {"high": "red", "medium": "yellow", "low": "green"}.get(analysis.complexity, "dim")
    keywords = ", ".join(hit.keyword for hit in analysis.detected_keywords) or "-"
    console.print(
        Panel(
            f"Complexity: [bold {color}]{analysis.complexity}[/bold {color}] "
            f"(score {analysis.complexity_score})\n"
            f"Type: [bold]{analysis.type}[/bold]  "
            f"[dim]all: {', '.join(analysis.all_types) or '-'}[/dim]\n"
            f"Risk: [bold]{analysis.risk_level}[/bold]  "
            f"Sequential: {analysis.requires_sequential}  "
            f"Data dependencies: {analysis.has_data_dependencies}\n"
            f"Estimated tokens: {analysis.estimated_tokens:,}  "
            f"Confidence: {analysis.confidence}\n"
            f"[dim]Keywords: {keywords}[/dim]",
            border_style=color,
            title="[bold]Task Analysis[/bold]",
        )
    )


@app.command()
def agents() -> None:
    """List the agent roster."""
    from swarmplan.agents import DEFAULT_ROSTER

    table = Table(
        title="[bold cyan]Agent Roster[/bold cyan]",
        border_style="cyan",
        show_lines=True,
    )
    table.add_column("Agent", style="cyan")
    table.add_column("Persona")
    table.add_column("Specialization", style="dim")
    table.add_column("Model", style="dim")
    table.add_column("Cost", justify="right")
    table.add_column("Parallel", justify="center")
    table.add_column("Priority", justify="right")

    for profile in DEFAULT_ROSTER:
        table.add_row(
            profile.name,
            profile.persona,
            profile.specialization,
            profile.model,
            str(profile.resource_cost),
            "✅" if profile.parallel_safe else "❌",
            str(profile.priority),
        )

    console.print(table)
