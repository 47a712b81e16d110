"""Raw Set-Cookie header rule."""

from __future__ import annotations

from cookie_inspector.observations import HeaderObservation
from cookie_inspector.rules.base import Finding, Severity


class SetCookieHeaderRule:
    """Checks raw Set-Cookie headers for the HttpOnly and Secure tokens."""

    rule_id = "set_cookie_header_flags"
    kind = "header"

    def evaluate(self, observation: HeaderObservation, *, now: float) -> list[Finding]:
        _ = now
        name = cookie_name_from_header(observation.header_value)
        # Substring search over the whole header; a token inside a value counts.
        lowered = observation.header_value.lower()
        findings: list[Finding] = []

        if "httponly" not in lowered:
            findings.append(
                Finding(
                    type="Missing HttpOnly (Header)",
                    severity=Severity.HIGH,
                    description=f"Cookie '{name}' in Set-Cookie header lacks HttpOnly flag.",
                    remediation="Add '; HttpOnly' to the Set-Cookie header.",
                    cookie_name=name,
                )
            )
        if "secure" not in lowered:
            findings.append(
                Finding(
                    type="Missing Secure (Header)",
                    severity=Severity.HIGH,
                    description=f"Cookie '{name}' in Set-Cookie header lacks Secure flag.",
                    remediation="Add '; Secure' to the Set-Cookie header.",
                    cookie_name=name,
                )
            )
        return findings


def cookie_name_from_header(header_value: str) -> str:
    """Return the cookie name from the first ``name=value`` segment, or ``""``."""
    first_segment = header_value.split(";", 1)[0]
    name, sep, _ = first_segment.partition("=")
    if not sep:
        return ""
    return name.strip()
