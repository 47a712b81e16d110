"""Helpers for building observations and event streams in tests."""

from __future__ import annotations

import json
from dataclasses import replace
from typing import Any

from cookie_inspector.observations import CookieObservation, SameSite
from cookie_inspector.rules.base import Finding, Severity

NOW = 1_700_000_000.0
DAY = 24 * 60 * 60


def hardened_cookie(**overrides: Any) -> CookieObservation:
    """A cookie that no rule flags; override attributes to weaken it."""
    cookie = CookieObservation(
        domain="example.com",
        name="sid",
        path="/",
        secure=True,
        http_only=True,
        same_site=SameSite.STRICT,
        expiration_epoch_seconds=NOW + 10 * DAY,
    )
    return replace(cookie, **overrides)


def finding(
    finding_type: str = "Missing HttpOnly",
    *,
    cookie_name: str = "sid",
    severity: Severity = Severity.HIGH,
    description: str = "desc",
) -> Finding:
    return Finding(
        type=finding_type,
        severity=severity,
        description=description,
        remediation="fix it",
        cookie_name=cookie_name,
    )


def cookie_event(removed: bool = False, **cookie: Any) -> str:
    record: dict[str, Any] = {"event": "cookie", "cookie": cookie}
    if removed:
        record["removed"] = True
    return json.dumps(record)


def headers_event(url: str, *set_cookies: str, extra: dict[str, str] | None = None) -> str:
    headers = [{"name": "Set-Cookie", "value": value} for value in set_cookies]
    for name, value in (extra or {}).items():
        headers.append({"name": name, "value": value})
    return json.dumps({"event": "headers", "url": url, "responseHeaders": headers})


def request_event(url: str) -> str:
    return json.dumps({"event": "request", "url": url})
