"""Markdown archive per swarm run, plus a daily task log."""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from swarmplan.swarm.types import AgentOutcome

MEMORY_DIR = ".swarmplan/memories"
TITLE_LIMIT = 80

_BLANK_RUN = re.compile(r"\n{3,}")


@dataclass
class MemoryRecord:
    """Paths written for one archived swarm run."""

    archive_path: str
    log_path: str
    compacted: bool = False

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _normalize(value: object) -> str:
    if not value:
        return ""
    return str(value).replace("\r\n", "\n").strip()


def make_title(title: str | None, prompt: str | None) -> str:
    """Explicit title, else the prompt's first line; truncated, never empty."""
    base = _normalize(title) or _normalize(prompt).split("\n")[0]
    if not base:
        return "Swarm Task"
    return f"{base[:TITLE_LIMIT]}..." if len(base) > TITLE_LIMIT else base


def _ensure_log_header(log_path: Path, date_label: str) -> bool:
    if log_path.exists():
        return False
    header = "\n".join(
        [
            f"# Task Log - {date_label}",
            f"**Date**: {date_label}",
            "**Type**: Multi-task Day",
            "",
        ]
    )
    log_path.write_text(f"{header}\n", encoding="utf-8")
    return True


def _compact_log(log_path: Path) -> bool:
    """Collapse runs of blank lines; True if the file changed."""
    content = log_path.read_text(encoding="utf-8")
    compacted = _BLANK_RUN.sub("\n\n", content).rstrip() + "\n"
    if compacted == content:
        return False
    log_path.write_text(compacted, encoding="utf-8")
    return True


def _create_archive(root: Path, stamp: str, content: str) -> Path:
    """Create a new archive file, suffixing ``-1``, ``-2``... on name collisions."""
    suffix = 0
    while True:
        name = f"swarm-archive-{stamp}{f'-{suffix}' if suffix else ''}.md"
        path = root / name
        try:
            with path.open("x", encoding="utf-8") as f:
                f.write(content)
        except FileExistsError:
            suffix += 1
            continue
        return path


def write_swarm_memory(
    *,
    title: str | None,
    prompt: str,
    steps: Mapping[str, str],
    agents: Sequence[AgentOutcome],
    summary: str,
    final_answer: str,
    memory_dir: str | Path = MEMORY_DIR,
    now: datetime | None = None,
) -> MemoryRecord:
    """Write ``swarm-archive-<stamp>.md`` and append to ``task-log-<date>.md``.

    Returns the paths of both files.
    """
    root = Path(memory_dir)
    root.mkdir(parents=True, exist_ok=True)

    now = now or datetime.now(UTC)
    date_label = now.date().isoformat()
    stamp = re.sub(r"[:.]", "-", now.isoformat(timespec="milliseconds"))
    safe_title = make_title(title, prompt)

    log_path = root / f"task-log-{date_label}.md"

    agent_blocks = "\n\n".join(
        "\n".join(
            [
                f"### {agent.name}",
                f"**Model**: {agent.model}",
                "",
                _normalize(agent.response) or f"_Failed: {agent.error or 'unknown error'}_",
            ]
        )
        for agent in agents
    )

    archive = "\n".join(
        [
            f"# Swarm Archive - {stamp}",
            f"**Date**: {date_label}",
            f"**Title**: {safe_title}",
            "",
            "## Prompt",
            _normalize(prompt),
            "",
            "## Speculate",
            _normalize(steps.get("speculation")),
            "",
            "## Plan",
            _normalize(steps.get("plan")),
            "",
            "## Execute",
            agent_blocks or "No agent output.",
            "",
            "## Synthesize",
            _normalize(final_answer),
            "",
            "## Log",
            _normalize(summary),
        ]
    )
    archive_path = _create_archive(root, stamp, f"{archive}\n")
    archive_name = archive_path.name

    _ensure_log_header(log_path, date_label)
    entry = "\n".join(
        [
            f"## Task: {safe_title}",
            "**Status**: Completed",
            "**Agent**: AgentSwarm",
            "",
            "### Outcome",
            f"- {_normalize(summary) or 'Summary unavailable.'}",
            "",
            "### Notes",
            f"- Archive: {archive_name}",
            f"- Agents: {', '.join(a.name for a in agents) or 'None'}",
            "",
        ]
    )
    with log_path.open("a", encoding="utf-8") as f:
        f.write(f"{entry}\n")
    compacted = _compact_log(log_path)

    return MemoryRecord(
        archive_path=str(archive_path),
        log_path=str(log_path),
        compacted=compacted,
    )
