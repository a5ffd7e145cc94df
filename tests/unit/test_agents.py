"""Tests for the agent roster."""

from __future__ import annotations

import pytest

from swarmplan.agents import (
    DEFAULT_ROSTER,
    AgentRoster,
    Capability,
    get_agent,
    get_all_agents_info,
    list_agents,
)


def test_default_roster_names():
    assert list_agents() == [
        "Geralt",
        "Yennefer",
        "Triss",
        "Jaskier",
        "Vesemir",
        "Ciri",
        "Eskel",
        "Lambert",
        "Zoltan",
        "Regis",
        "Dijkstra",
        "Philippa",
    ]


def test_only_zoltan_is_not_parallel_safe():
    assert [a.name for a in DEFAULT_ROSTER if not a.parallel_safe] == ["Zoltan"]


def test_get_agent():
    regis = get_agent("Regis")
    assert regis is not None
    assert regis.model == "phi3:mini"
    assert regis.has(Capability.RESEARCH)
    assert get_agent("Nobody") is None


def test_with_capability_sorted_by_priority():
    debuggers = DEFAULT_ROSTER.with_capability(Capability.DEBUGGING)
    assert [a.name for a in debuggers] == ["Triss", "Lambert"]


def test_lead_without_match_raises():
    roster = AgentRoster([DEFAULT_ROSTER.get("Ciri")])
    with pytest.raises(LookupError):
        roster.lead(Capability.PLANNING)


def test_duplicate_names_rejected():
    ciri = DEFAULT_ROSTER.get("Ciri")
    with pytest.raises(ValueError, match="Duplicate"):
        AgentRoster([ciri, ciri])


def test_membership():
    assert "Geralt" in DEFAULT_ROSTER
    assert "Nobody" not in DEFAULT_ROSTER
    assert len(DEFAULT_ROSTER) == 12


def test_agents_info_is_serializable():
    info = get_all_agents_info()
    assert info[0]["name"] == "Geralt"
    assert info[0]["capabilities"] == sorted(info[0]["capabilities"])
    assert all(isinstance(cap, str) for cap in info[0]["capabilities"])
