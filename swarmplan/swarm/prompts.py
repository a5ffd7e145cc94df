"""Prompt builders for the five swarm stages, plus prompt/response helpers."""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Sequence
from typing import Any

from swarmplan.agents import AgentProfile
from swarmplan.swarm.types import AgentOutcome

logger = logging.getLogger(__name__)

_COMPLEX_KEYWORDS = re.compile(
    r"(audit|architecture|refactor|migrate|design|implement|plan|strategy|spec|multi-step|swarm)",
    re.I,
)
_BULLET_LINE = re.compile(r"(^\s*[-*]|\d+\.)", re.M)


def truncate(value: str | None, limit: int) -> str:
    if not value:
        return ""
    if len(value) <= limit:
        return value
    return f"{value[:limit]}..."


def is_complex_prompt(prompt: str | None) -> bool:
    """Heuristic: does this prompt deserve a swarm rather than a single call?"""
    if not prompt:
        return False
    text = str(prompt)
    return (
        len(text) > 600
        or len(text.split("\n")) > 6
        or bool(_COMPLEX_KEYWORDS.search(text))
        or bool(_BULLET_LINE.search(text))
    )


def build_speculation_prompt(prompt: str) -> str:
    return "\n".join(
        [
            "You are a fast research scout. Provide context, risks, unknowns, and key questions.",
            "Keep it short and actionable.",
            "",
            f"Task: {prompt}",
        ]
    )


def build_plan_prompt(prompt: str, speculation: str) -> str:
    return "\n".join(
        [
            "You are the planner. Create a concise JSON plan with steps, assumptions, "
            "and dependencies.",
            "Output JSON only.",
            "",
            f"Task: {prompt}",
            "",
            f"Speculation: {speculation}",
        ]
    )


def build_agent_prompt(agent: AgentProfile, prompt: str, speculation: str, plan: str) -> str:
    return "\n".join(
        [
            f"You are {agent.name} ({agent.persona}).",
            f"Specialization: {agent.specialization}.",
            "Provide your best contribution for this task, focused on your specialty.",
            "",
            f"Task: {prompt}",
            "",
            f"Speculation: {speculation}",
            "",
            f"Plan: {plan}",
        ]
    )


def build_synthesis_prompt(
    prompt: str,
    speculation: str,
    plan: str,
    outcomes: Sequence[AgentOutcome],
    preview_chars: int = 1500,
) -> str:
    """Synthesis prompt over the successful outcomes only, each truncated."""
    agent_lines = [
        f"- {o.name}: {truncate(o.response, preview_chars)}" for o in outcomes if not o.failed
    ]
    return "\n".join(
        [
            "You are the synthesizer. Combine agent outputs into a single final answer.",
            "Be concise, concrete, and actionable.",
            "",
            f"Task: {prompt}",
            "",
            f"Speculation: {speculation}",
            "",
            f"Plan: {plan}",
            "",
            "Agent Outputs:",
            "\n".join(agent_lines),
        ]
    )


def build_log_prompt(prompt: str, final_answer: str) -> str:
    return "\n".join(
        [
            "Summarize the task and outcome in 4-6 bullet points.",
            "Focus on decisions, actions, and verification steps.",
            "",
            f"Task: {prompt}",
            "",
            f"Final Answer: {final_answer}",
        ]
    )


def raw_outputs_fallback(outcomes: Sequence[AgentOutcome]) -> str:
    """Deterministic stand-in for synthesis: the untruncated successful outputs."""
    blocks = [f"### {o.name}\n{o.response}" for o in outcomes if not o.failed]
    return "Synthesis failed. Raw outputs:\n\n" + "\n\n".join(blocks)


def extract_json(content: str) -> Any:
    """Parse a model response as JSON, tolerating markdown fences.

    Returns None when the content is not JSON.
    """
    content = content.strip()
    if content.startswith("```json"):
        content = content[7:]
    elif content.startswith("```"):
        content = content[3:]
    if content.endswith("```"):
        content = content[:-3]
    content = content.strip()
    if not content:
        return None

    try:
        return json.loads(content)
    except json.JSONDecodeError:
        logger.debug("Plan response is not JSON, keeping it as text")
        return None
