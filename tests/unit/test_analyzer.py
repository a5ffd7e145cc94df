"""Tests for the task analyzer heuristics."""

from __future__ import annotations

import pytest

from swarmplan.planner.analyzer import UNKNOWN_ANALYSIS, analyze_task


def _long_migration_task() -> str:
    task = "Migrate production database schema for the billing service. "
    while len(task) < 1200:
        task += "Keep the rollout careful and reversible. "
    return task


class TestComplexity:
    def test_typo_fix_is_low(self) -> None:
        analysis = analyze_task("Fix a typo in the README")
        assert analysis.complexity == "low"
        assert analysis.complexity_score == 2
        assert analysis.type == "general"
        assert analysis.risk_level == "low"

    def test_new_endpoint_is_medium(self) -> None:
        analysis = analyze_task("Implement a new endpoint for user profiles")
        assert analysis.complexity == "medium"
        keywords = [hit.keyword for hit in analysis.detected_keywords]
        assert keywords == ["implement", "endpoint"]

    def test_long_migration_is_high(self) -> None:
        task = _long_migration_task()
        assert len(task) >= 1200

        analysis = analyze_task(task)
        assert analysis.complexity == "high"
        assert analysis.risk_level == "high"
        assert analysis.has_data_dependencies is True
        assert analysis.requires_sequential is True

    def test_pattern_repeating_a_keyword_scores_once(self) -> None:
        # "typo" is both a keyword and a pattern of the low tier
        analysis = analyze_task("typo")
        assert analysis.complexity_score == 1

    def test_system_wide_pattern_scores_high_weight(self) -> None:
        analysis = analyze_task("Rename the logger across the whole codebase")
        assert analysis.complexity_score >= 3

    def test_data_words_do_not_add_score(self) -> None:
        analysis = analyze_task("Implement the sql data layer")
        assert analysis.has_data_dependencies is True
        assert analysis.complexity_score == 2
        assert analysis.complexity == "low"

    @pytest.mark.parametrize(
        "base",
        [
            "Fix a typo across the whole codebase",
            "Add a new endpoint for the billing service",
            "Make a quick fix",
        ],
    )
    def test_high_keywords_never_lower_score(self, base: str) -> None:
        task = base
        previous = analyze_task(task).complexity_score
        for keyword in ("refactor", "migrate", "architecture", "redesign", "distributed"):
            task = f"{task} {keyword}"
            score = analyze_task(task).complexity_score
            assert score >= previous, task
            previous = score
        assert previous >= analyze_task(base).complexity_score + 15

    def test_line_count_bonus(self) -> None:
        analysis = analyze_task("\n".join(["note"] * 12))
        assert analysis.metrics.line_count == 12
        assert analysis.complexity_score == 2
        assert analysis.complexity == "low"


class TestTypesAndRisk:
    def test_security_type_from_hyphenated_capability(self) -> None:
        analysis = analyze_task("Run a security audit of the login flow")
        assert analysis.type == "security"
        assert "security" in analysis.all_types

    def test_primary_type_follows_map_order(self) -> None:
        analysis = analyze_task("Write documentation and testing notes")
        assert analysis.all_types[:2] == ("testing", "documentation")
        assert analysis.type == "testing"

    def test_medium_risk(self) -> None:
        assert analyze_task("Deploy to staging").risk_level == "medium"

    def test_high_risk_wins(self) -> None:
        assert analyze_task("Drop the staging table").risk_level == "high"

    def test_sequential_wording(self) -> None:
        analysis = analyze_task("First lint the code then ship it")
        assert analysis.requires_sequential is True
        assert analysis.has_data_dependencies is False


class TestMetrics:
    def test_estimated_tokens_rounds_up(self) -> None:
        analysis = analyze_task("one two three")
        assert analysis.metrics.word_count == 3
        assert analysis.estimated_tokens == 4

    def test_confidence_is_capped_and_rounded(self) -> None:
        analysis = analyze_task(_long_migration_task())
        assert 0.0 < analysis.confidence <= 1.0
        assert analysis.confidence == round(analysis.confidence, 2)

    def test_to_dict_shape(self) -> None:
        data = analyze_task("Fix a bug").to_dict()
        assert data["complexity"] == "low"
        assert {"complexity_score", "type", "all_types", "risk_level", "metrics"} <= set(data)


@pytest.mark.parametrize("task", [None, "", "   ", 42, ["fix"]])
def test_invalid_input_is_unknown(task: object) -> None:
    analysis = analyze_task(task)
    assert analysis is UNKNOWN_ANALYSIS
    assert analysis.complexity == "unknown"
    assert analysis.complexity_score == 0
    assert analysis.type == "general"
