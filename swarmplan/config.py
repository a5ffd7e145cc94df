"""Swarm configuration dataclass and .swarmplan.yml loading."""

from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

CONFIG_FILE = ".swarmplan.yml"
ENV_PREFIX = "SWARMPLAN_"


@dataclass
class SwarmConfig:
    """Settings shared by the swarm executor and the model backend."""

    default_model: str = "llama3.2:3b"
    fast_model: str = "llama3.2:1b"
    model_prefix: str = "ollama/"  # LiteLLM routing prefix
    api_base: str = "http://localhost:11434"
    max_concurrent: int = 5
    model_cache_ttl: float = 60.0  # seconds
    run_timeout: float | None = None  # whole-run deadline, seconds
    memory_timeout: float = 30.0
    memory_dir: str = ".swarmplan/memories"
    synthesis_preview_chars: int = 1500
    summary_preview_chars: int = 180

    def __post_init__(self) -> None:
        if self.max_concurrent < 1:
            msg = f"max_concurrent must be at least 1, got {self.max_concurrent}"
            raise ValueError(msg)
        if self.model_cache_ttl < 0:
            msg = f"model_cache_ttl must not be negative, got {self.model_cache_ttl}"
            raise ValueError(msg)
        if self.run_timeout is not None and self.run_timeout <= 0:
            self.run_timeout = None

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> SwarmConfig:
        """Build a config from a mapping, ignoring unknown keys."""
        known = {f.name for f in dataclasses.fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known and v is not None})


def load_config(cwd: str) -> dict[str, Any] | None:
    """Load config from .swarmplan.yml if it exists, else return None."""
    import yaml

    config_path = Path(cwd) / CONFIG_FILE
    if not config_path.exists():
        return None
    with config_path.open() as f:
        data = yaml.safe_load(f)
    return data if isinstance(data, dict) else None


def _env_overrides() -> dict[str, Any]:
    """Read SWARMPLAN_* variables, coerced to the field's type."""
    overrides: dict[str, Any] = {}
    for f in dataclasses.fields(SwarmConfig):
        raw = os.environ.get(ENV_PREFIX + f.name.upper())
        if raw is None or raw == "":
            continue
        if f.name in ("max_concurrent", "synthesis_preview_chars", "summary_preview_chars"):
            overrides[f.name] = int(raw)
        elif f.name in ("model_cache_ttl", "run_timeout", "memory_timeout"):
            overrides[f.name] = float(raw)
        else:
            overrides[f.name] = raw
    return overrides


def resolve_config(cwd: str = ".", **overrides: Any) -> SwarmConfig:
    """Merge defaults < .swarmplan.yml < SWARMPLAN_* env < explicit overrides.

    ``None`` overrides are ignored so CLI options can be passed through as-is.
    A relative ``memory_dir`` is resolved against ``cwd``.
    """
    merged: dict[str, Any] = {}
    merged.update(load_config(cwd) or {})
    merged.update(_env_overrides())
    merged.update({k: v for k, v in overrides.items() if v is not None})

    config = SwarmConfig.from_mapping(merged)
    memory_dir = Path(config.memory_dir)
    if not memory_dir.is_absolute():
        config.memory_dir = str((Path(cwd) / memory_dir).resolve())
    return config
