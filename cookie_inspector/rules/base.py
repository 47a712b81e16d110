"""Base rule protocol and finding model."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Literal, Protocol

URL_PARAM_SENTINEL = "N/A (URL Param)"

RuleKind = Literal["cookie", "header", "url"]


class Severity(str, Enum):
    """Finding severity with its score penalty."""

    CRITICAL = "Critical"
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"

    @property
    def penalty(self) -> int:
        return _PENALTIES[self]

    @property
    def rank(self) -> int:
        """Lower rank sorts first."""
        return _RANKS[self]


_PENALTIES = {
    Severity.CRITICAL: 25,
    Severity.HIGH: 15,
    Severity.MEDIUM: 5,
    Severity.LOW: 1,
}
_RANKS = {severity: index for index, severity in enumerate(Severity)}


@dataclass(frozen=True, slots=True)
class Finding:
    """A single security issue emitted by a rule."""

    type: str
    severity: Severity
    description: str
    remediation: str
    cookie_name: str

    @property
    def dedup_key(self) -> tuple[str, str]:
        return (self.cookie_name, self.type)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "severity": self.severity.value,
            "description": self.description,
            "remediation": self.remediation,
            "cookieName": self.cookie_name,
        }


class Rule(Protocol):
    """Protocol for deterministic detection rules."""

    rule_id: str
    kind: RuleKind

    def evaluate(self, observation: Any, *, now: float) -> list[Finding]:
        """Evaluate one observation at epoch time ``now`` and return findings."""
