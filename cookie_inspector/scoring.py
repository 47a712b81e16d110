"""Severity-weighted scoring."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Literal

from cookie_inspector.origin import Origin
from cookie_inspector.rules.base import Finding, Severity

MAX_SCORE = 100

Grade = Literal["good", "fair", "poor"]


@dataclass(slots=True)
class OriginReport:
    """Findings and derived score for a single origin."""

    origin: Origin
    findings: list[Finding] = field(default_factory=list)
    counts: dict[Severity, int] = field(default_factory=dict)
    score: int = MAX_SCORE
    grade: Grade = "good"


def score(findings: Iterable[Finding]) -> int:
    """Return 100 minus the severity penalties, floored at 0."""
    total = MAX_SCORE
    for finding in findings:
        total -= finding.severity.penalty
    return _clamp(total)


def severity_counts(findings: Iterable[Finding]) -> dict[Severity, int]:
    """Count findings per severity; every severity is present."""
    counts = {severity: 0 for severity in Severity}
    for finding in findings:
        counts[finding.severity] += 1
    return counts


def score_grade(value: int) -> Grade:
    if value > 80:
        return "good"
    if value > 50:
        return "fair"
    return "poor"


def summarize(origin: Origin, findings: list[Finding]) -> OriginReport:
    """Bundle stored findings with their counts, score and grade."""
    value = score(findings)
    return OriginReport(
        origin=origin,
        findings=list(findings),
        counts=severity_counts(findings),
        score=value,
        grade=score_grade(value),
    )


def _clamp(value: int, lower: int = 0, upper: int = MAX_SCORE) -> int:
    return max(lower, min(upper, value))
