"""Tests for agent scoring and selection."""

from __future__ import annotations

import pytest

from swarmplan.agents import DEFAULT_ROSTER, AgentRoster
from swarmplan.planner.analyzer import analyze_task
from swarmplan.planner.selector import score_agent, select_agents

SECURITY_TASK = "Run a security audit of the login flow"


def test_score_agent_counts_matching_capabilities() -> None:
    analysis = analyze_task(SECURITY_TASK)
    scored = score_agent(DEFAULT_ROSTER.get("Geralt"), analysis)
    assert scored.score == 6
    assert scored.name == "Geralt"
    assert any("security" in reason for reason in scored.reasons)


def test_score_agent_prefers_cheap_agents_for_low_complexity() -> None:
    analysis = analyze_task(SECURITY_TASK)
    assert analysis.complexity == "low"
    assert score_agent(DEFAULT_ROSTER.get("Ciri"), analysis).score == 1
    assert score_agent(DEFAULT_ROSTER.get("Yennefer"), analysis).score == 0


def test_score_agent_database_bonus() -> None:
    analysis = analyze_task("Tune the sql for the reporting database")
    zoltan = score_agent(DEFAULT_ROSTER.get("Zoltan"), analysis)
    assert "Has database capabilities" in zoltan.reasons


class TestSelectAgents:
    def test_defaults_guarantee_reviewer_and_researcher(self) -> None:
        selection = select_agents(SECURITY_TASK)
        names = [a.name for a in selection.agents]
        assert names == ["Geralt", "Jaskier", "Ciri", "Regis", "Vesemir"]
        assert selection.total_agents == 5

    def test_researcher_pass_runs_after_reviewer_pass(self) -> None:
        selection = select_agents(SECURITY_TASK, max_agents=3)
        assert [a.name for a in selection.agents] == ["Geralt", "Jaskier", "Regis"]

    def test_reviewer_swap_only(self) -> None:
        selection = select_agents(SECURITY_TASK, max_agents=3, include_researcher=False)
        assert [a.name for a in selection.agents] == ["Geralt", "Jaskier", "Vesemir"]

    def test_no_guarantees(self) -> None:
        selection = select_agents(
            SECURITY_TASK, max_agents=3, include_reviewer=False, include_researcher=False
        )
        assert [a.name for a in selection.agents] == ["Geralt", "Jaskier", "Ciri"]

    def test_never_exceeds_max_agents(self) -> None:
        for limit in range(1, len(DEFAULT_ROSTER) + 2):
            selection = select_agents("Refactor the whole codebase", max_agents=limit)
            assert selection.total_agents == min(limit, len(DEFAULT_ROSTER))

    def test_no_swap_when_roster_fits(self) -> None:
        roster = AgentRoster([DEFAULT_ROSTER.get("Geralt"), DEFAULT_ROSTER.get("Ciri")])
        selection = select_agents(SECURITY_TASK, max_agents=5, roster=roster)
        assert [a.name for a in selection.agents] == ["Geralt", "Ciri"]

    def test_invalid_max_agents(self) -> None:
        with pytest.raises(ValueError, match="max_agents"):
            select_agents(SECURITY_TASK, max_agents=0)

    def test_unknown_task_still_selects(self) -> None:
        selection = select_agents(None, max_agents=2)
        assert selection.task_analysis.complexity == "unknown"
        assert selection.total_agents == 2

    def test_to_dict(self) -> None:
        data = select_agents(SECURITY_TASK, max_agents=2).to_dict()
        assert data["selection_criteria"]["max_agents"] == 2
        assert len(data["agents"]) == 2
