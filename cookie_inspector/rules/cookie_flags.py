"""Attribute-level cookie flag rules."""

from __future__ import annotations

from cookie_inspector.observations import CookieObservation, SameSite
from cookie_inspector.rules.base import Finding, Severity

LAX_SAMESITE_VALUES = {SameSite.NONE, SameSite.UNSPECIFIED}


class MissingHttpOnlyRule:
    """Flags cookies readable from JavaScript."""

    rule_id = "missing_httponly"
    kind = "cookie"

    def evaluate(self, observation: CookieObservation, *, now: float) -> list[Finding]:
        _ = now
        if observation.http_only:
            return []
        return [
            Finding(
                type="Missing HttpOnly",
                severity=Severity.HIGH,
                description=(
                    f"Cookie '{observation.name}' is accessible via JavaScript. "
                    "This increases XSS risk."
                ),
                remediation="Set the 'HttpOnly' flag when setting the cookie.",
                cookie_name=observation.name,
            )
        ]


class MissingSecureRule:
    """Flags cookies that may travel over plain HTTP."""

    rule_id = "missing_secure"
    kind = "cookie"

    def evaluate(self, observation: CookieObservation, *, now: float) -> list[Finding]:
        _ = now
        if observation.secure:
            return []
        return [
            Finding(
                type="Missing Secure",
                severity=Severity.HIGH,
                description=f"Cookie '{observation.name}' is sent over unencrypted HTTP.",
                remediation="Set the 'Secure' flag to ensure it's only sent over HTTPS.",
                cookie_name=observation.name,
            )
        ]


class SameSiteNoneInsecureRule:
    """Flags cross-site cookies that are not restricted to HTTPS."""

    rule_id = "samesite_none_insecure"
    kind = "cookie"

    def evaluate(self, observation: CookieObservation, *, now: float) -> list[Finding]:
        _ = now
        # Absent SameSite is treated as None, not as the Lax browser default.
        if observation.secure or observation.same_site not in LAX_SAMESITE_VALUES:
            return []
        return [
            Finding(
                type="SameSite=None without Secure",
                severity=Severity.CRITICAL,
                description=(
                    f"Cookie '{observation.name}' allows cross-site usage but isn't Secure. "
                    "Modern browsers reject this combination and it is bad practice."
                ),
                remediation="If SameSite is 'None', the 'Secure' flag MUST be set.",
                cookie_name=observation.name,
            )
        ]
