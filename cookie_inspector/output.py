"""Output rendering."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any

import click

from cookie_inspector import __version__
from cookie_inspector.rules.base import Finding, Severity
from cookie_inspector.scoring import OriginReport
from cookie_inspector.watcher import WatchStats

_GRADE_COLORS = {"good": "green", "fair": "yellow", "poor": "red"}
_SEVERITY_COLORS = {
    Severity.CRITICAL: "red",
    Severity.HIGH: "bright_red",
    Severity.MEDIUM: "yellow",
    Severity.LOW: "green",
}


def render_human(reports: list[OriginReport]) -> str:
    """Render a compact colorized summary per origin."""
    if not reports:
        return "No security issues found."

    blocks: list[str] = []
    for report in reports:
        lines = [
            click.style(
                f"{report.origin}: score {report.score}/100 ({report.grade.upper()})",
                fg=_GRADE_COLORS[report.grade],
                bold=True,
            ),
            "  " + ", ".join(f"{report.counts[sev]} {sev.value}" for sev in Severity),
        ]
        if not report.findings:
            lines.append("  No security issues found.")
        for finding in _ranked(report.findings):
            label = click.style(
                f"[{finding.severity.value}]", fg=_SEVERITY_COLORS[finding.severity]
            )
            lines.append(f"  {label} {finding.type} ({finding.cookie_name})")
            lines.append(f"     {finding.description}")
            lines.append(f"     fix: {finding.remediation}")
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)


def render_json(
    reports: list[OriginReport],
    *,
    input_source: str,
    stats: WatchStats | None = None,
) -> str:
    """Render stable JSON output for export and automation."""
    payload = build_json_payload(reports, input_source=input_source, stats=stats)
    return json.dumps(payload, sort_keys=True)


def build_json_payload(
    reports: list[OriginReport],
    *,
    input_source: str,
    stats: WatchStats | None = None,
) -> dict[str, Any]:
    """Build the export payload; findings keep their stored order."""
    meta: dict[str, Any] = {
        "generated_at": datetime.now(tz=UTC)
        .replace(microsecond=0)
        .isoformat()
        .replace("+00:00", "Z"),
        "input_source": input_source,
        "version": __version__,
    }
    if stats is not None:
        meta["events"] = stats.events
        meta["skipped"] = stats.skipped

    return {
        "origins": [_serialize_report(report) for report in reports],
        "meta": meta,
    }


def _serialize_report(report: OriginReport) -> dict[str, Any]:
    return {
        "origin": str(report.origin),
        "score": report.score,
        "grade": report.grade,
        "counts": {severity.value: count for severity, count in report.counts.items()},
        "findings": [finding.to_dict() for finding in report.findings],
    }


def _ranked(findings: list[Finding]) -> list[Finding]:
    return sorted(findings, key=lambda item: item.severity.rank)
