"""Session tokens leaked through URL query parameters."""

from __future__ import annotations

from urllib.parse import parse_qsl, urlsplit

from cookie_inspector.observations import UrlObservation
from cookie_inspector.rules.base import URL_PARAM_SENTINEL, Finding, Severity

DEFAULT_SUSPICIOUS_KEYWORDS = ("session", "token", "auth", "sid", "jwt", "bearer")
DEFAULT_TOKEN_MIN_LENGTH = 20


class UrlTokenRule:
    """Flags long values in query parameters whose names suggest credentials.

    Value length is the only heuristic; no entropy analysis is performed.
    """

    rule_id = "session_token_in_url"
    kind = "url"

    def __init__(
        self,
        keywords: tuple[str, ...] = DEFAULT_SUSPICIOUS_KEYWORDS,
        min_length: int = DEFAULT_TOKEN_MIN_LENGTH,
    ) -> None:
        self.keywords = tuple(keyword.lower() for keyword in keywords)
        self.min_length = min_length

    def evaluate(self, observation: UrlObservation, *, now: float) -> list[Finding]:
        _ = now
        findings: list[Finding] = []
        for key, value in query_params(observation.url):
            lowered = key.lower()
            if not any(keyword in lowered for keyword in self.keywords):
                continue
            if len(value) <= self.min_length:
                continue
            findings.append(
                Finding(
                    type="Session Token in URL",
                    severity=Severity.CRITICAL,
                    description=(
                        f"Possible session token found in URL parameter '{key}'. "
                        "URLs are logged/cached, exposing this token."
                    ),
                    remediation=(
                        "Move session tokens to HTTP headers (Authorization) or secure cookies."
                    ),
                    cookie_name=URL_PARAM_SENTINEL,
                )
            )
        return findings


def query_params(url: str) -> list[tuple[str, str]]:
    """Decode query parameters the way browsers do; unparseable URLs have none."""
    try:
        query = urlsplit(url).query
    except ValueError:
        return []
    return parse_qsl(query, keep_blank_values=True)
