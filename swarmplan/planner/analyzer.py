"""Keyword and regex heuristics that size up a raw task."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from typing import Any, Literal

from swarmplan.agents import TASK_CAPABILITY_MAP

Complexity = Literal["low", "medium", "high", "unknown"]
RiskLevel = Literal["low", "medium", "high"]


@dataclass(frozen=True)
class ComplexityTier:
    level: Literal["low", "medium", "high"]
    keywords: tuple[str, ...]
    patterns: tuple[re.Pattern[str], ...]
    weight: int


# Scored high → medium → low; detected keywords keep this order.
COMPLEXITY_TIERS: tuple[ComplexityTier, ...] = (
    ComplexityTier(
        level="high",
        keywords=(
            "refactor",
            "migrate",
            "architecture",
            "redesign",
            "overhaul",
            "security-audit",
            "performance-optimization",
            "multi-service",
            "distributed",
        ),
        patterns=(
            re.compile(r"\b(entire|whole|all|complete)\s+(system|codebase|application)", re.I),
            re.compile(r"\b(major|significant|breaking)\s+(change|update|modification)", re.I),
            re.compile(r"\b(cross-cutting|system-wide|platform)", re.I),
        ),
        weight=3,
    ),
    ComplexityTier(
        level="medium",
        keywords=(
            "implement",
            "create",
            "build",
            "add",
            "feature",
            "endpoint",
            "component",
            "module",
            "service",
        ),
        patterns=(
            re.compile(r"\b(new|add|create)\s+(feature|endpoint|api|component)", re.I),
            re.compile(r"\b(update|modify|change)\s+(multiple|several)", re.I),
            re.compile(r"\b(integration|connect|sync)", re.I),
        ),
        weight=2,
    ),
    ComplexityTier(
        level="low",
        keywords=("fix", "bug", "typo", "update", "tweak", "adjust", "minor", "small", "quick"),
        patterns=(
            re.compile(r"\b(simple|quick|minor|small)\s+(fix|change|update)", re.I),
            re.compile(r"\b(typo|spelling|formatting)", re.I),
        ),
        weight=1,
    ),
)

HIGH_THRESHOLD = 6
MEDIUM_THRESHOLD = 3

_DATA_RE = re.compile(r"\b(database|db|migration|schema|data|sql|transaction)\b", re.I)
_SEQUENTIAL_RE = re.compile(r"\b(step by step|sequential|order|first.*then|before.*after)\b", re.I)
_HIGH_RISK_RE = re.compile(r"\b(production|prod|live|delete|drop|remove|destroy|critical)\b", re.I)
_MEDIUM_RISK_RE = re.compile(r"\b(staging|test|modify|update|change)\b", re.I)


@dataclass(frozen=True)
class KeywordHit:
    keyword: str
    level: str


@dataclass(frozen=True)
class TaskMetrics:
    word_count: int
    line_count: int
    char_count: int


@dataclass(frozen=True)
class TaskAnalysis:
    """Structured assessment of a raw task prompt."""

    complexity: Complexity
    complexity_score: int
    type: str
    all_types: tuple[str, ...] = ()
    detected_keywords: tuple[KeywordHit, ...] = ()
    estimated_tokens: int = 0
    requires_sequential: bool = False
    has_data_dependencies: bool = False
    risk_level: RiskLevel = "low"
    confidence: float = 0.0
    metrics: TaskMetrics = field(default_factory=lambda: TaskMetrics(0, 0, 0))

    def to_dict(self) -> dict[str, Any]:
        return {
            "complexity": self.complexity,
            "complexity_score": self.complexity_score,
            "type": self.type,
            "all_types": list(self.all_types),
            "detected_keywords": [
                {"keyword": hit.keyword, "level": hit.level} for hit in self.detected_keywords
            ],
            "estimated_tokens": self.estimated_tokens,
            "requires_sequential": self.requires_sequential,
            "has_data_dependencies": self.has_data_dependencies,
            "risk_level": self.risk_level,
            "confidence": self.confidence,
            "metrics": {
                "word_count": self.metrics.word_count,
                "line_count": self.metrics.line_count,
                "char_count": self.metrics.char_count,
            },
        }


UNKNOWN_ANALYSIS = TaskAnalysis(complexity="unknown", complexity_score=0, type="general")


def analyze_task(task: object) -> TaskAnalysis:
    """Analyze a task to determine its complexity, type and requirements.

    Anything that is not a non-empty string yields ``UNKNOWN_ANALYSIS``;
    this function never raises.
    """
    if not isinstance(task, str) or not task.strip():
        return UNKNOWN_ANALYSIS

    text = task.lower().strip()
    words = text.split()
    line_count = len(task.split("\n"))
    char_count = len(task)

    score, keywords = _score_tiers(text)

    # Length adjustments
    if char_count > 500:
        score += 1
    if char_count > 1000:
        score += 1
    if line_count > 5:
        score += 1
    if line_count > 10:
        score += 1

    has_data_dependencies = bool(_DATA_RE.search(text))

    if score >= HIGH_THRESHOLD:
        complexity: Complexity = "high"
    elif score >= MEDIUM_THRESHOLD:
        complexity = "medium"
    else:
        complexity = "low"

    task_types = tuple(
        task_type
        for task_type, capabilities in TASK_CAPABILITY_MAP.items()
        if any(cap.value.replace("-", " ") in text or cap.value in text for cap in capabilities)
    )

    requires_sequential = has_data_dependencies or bool(_SEQUENTIAL_RE.search(text))

    risk_level: RiskLevel = "low"
    if _HIGH_RISK_RE.search(text):
        risk_level = "high"
    elif _MEDIUM_RISK_RE.search(text):
        risk_level = "medium"

    confidence = min(1.0, 0.3 + len(keywords) * 0.1 + len(task_types) * 0.15)

    return TaskAnalysis(
        complexity=complexity,
        complexity_score=score,
        type=task_types[0] if task_types else "general",
        all_types=task_types,
        detected_keywords=keywords,
        estimated_tokens=math.ceil(len(words) * 1.3),
        requires_sequential=requires_sequential,
        has_data_dependencies=has_data_dependencies,
        risk_level=risk_level,
        confidence=round(confidence, 2),
        metrics=TaskMetrics(
            word_count=len(words),
            line_count=line_count,
            char_count=char_count,
        ),
    )


def _score_tiers(text: str) -> tuple[int, tuple[KeywordHit, ...]]:
    """Sum tier weights over keyword and pattern hits.

    A pattern whose match only repeats a keyword already counted in the
    same tier does not score a second time.
    """
    score = 0
    hits: list[KeywordHit] = []
    for tier in COMPLEXITY_TIERS:
        tier_hits = [kw for kw in tier.keywords if kw in text]
        score += tier.weight * len(tier_hits)
        hits.extend(KeywordHit(keyword=kw, level=tier.level) for kw in tier_hits)

        for pattern in tier.patterns:
            match = pattern.search(text)
            if match is None:
                continue
            if any(kw in match.group(0) for kw in tier_hits):
                continue
            score += tier.weight
    return score, tuple(hits)
