"""Tests for the top-level package API."""

from __future__ import annotations

import swarmplan
from swarmplan.planner.analyzer import analyze_task
from swarmplan.swarm.executor import run_swarm


def test_public_api_is_reexported():
    for name in swarmplan.__all__:
        assert hasattr(swarmplan, name), name
    assert swarmplan.analyze_task is analyze_task
    assert swarmplan.run_swarm is run_swarm
    assert swarmplan.__version__ == "0.1.0"
