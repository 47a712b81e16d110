"""Persistent cookie lifetime rule."""

from __future__ import annotations

import math

from cookie_inspector.observations import CookieObservation
from cookie_inspector.rules.base import Finding, Severity

SECONDS_PER_DAY = 24 * 60 * 60
DEFAULT_MAX_AGE_DAYS = 30


class LongLivedCookieRule:
    """Flags persistent cookies that outlive the allowed window."""

    rule_id = "long_lived_cookie"
    kind = "cookie"

    def __init__(self, max_age_days: int = DEFAULT_MAX_AGE_DAYS) -> None:
        self.max_age_days = max_age_days

    def evaluate(self, observation: CookieObservation, *, now: float) -> list[Finding]:
        if observation.is_session:
            return []

        days_until_expiry = (observation.expiration_epoch_seconds - now) / SECONDS_PER_DAY
        if days_until_expiry <= self.max_age_days:
            return []

        return [
            Finding(
                type="Long-lived Cookie",
                severity=Severity.MEDIUM,
                description=(
                    f"Cookie '{observation.name}' persists for "
                    f"{_round_half_up(days_until_expiry)} days."
                ),
                remediation="Reduce cookie lifetime to minimize session hijacking windows.",
                cookie_name=observation.name,
            )
        ]


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))
