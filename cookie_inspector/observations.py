"""Observation models and JSON Lines event parsing."""

from __future__ import annotations

import json
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class SameSite(str, Enum):
    """Cookie SameSite attribute."""

    STRICT = "Strict"
    LAX = "Lax"
    NONE = "None"
    UNSPECIFIED = "Unspecified"

    @classmethod
    def parse(cls, raw: Any) -> SameSite:
        """Map browser API and header spellings onto the enum."""
        if isinstance(raw, SameSite):
            return raw
        if not isinstance(raw, str):
            return cls.UNSPECIFIED
        return _SAMESITE_ALIASES.get(raw.strip().lower(), cls.UNSPECIFIED)


_SAMESITE_ALIASES = {
    "strict": SameSite.STRICT,
    "lax": SameSite.LAX,
    "none": SameSite.NONE,
    "no_restriction": SameSite.NONE,
    "unspecified": SameSite.UNSPECIFIED,
}


@dataclass(frozen=True, slots=True)
class CookieObservation:
    """Attribute-level view of a single cookie."""

    domain: str
    name: str
    path: str = "/"
    secure: bool = False
    http_only: bool = False
    same_site: SameSite = SameSite.UNSPECIFIED
    expiration_epoch_seconds: float | None = None

    @property
    def is_session(self) -> bool:
        return self.expiration_epoch_seconds is None


@dataclass(frozen=True, slots=True)
class HeaderObservation:
    """A raw Set-Cookie header value and the request it arrived on."""

    header_value: str
    request_url: str


@dataclass(frozen=True, slots=True)
class UrlObservation:
    """A request URL, inspected for its query parameters."""

    url: str


class EventParseError(ValueError):
    """Raised when an event stream line cannot be decoded."""

    def __init__(self, line_number: int, message: str) -> None:
        super().__init__(f"line {line_number}: {message}")
        self.line_number = line_number


@dataclass(slots=True)
class CookieChanged:
    """Cookie jar change notification."""

    cookie: CookieObservation
    removed: bool = False


@dataclass(slots=True)
class HeadersReceived:
    """Response headers observed for a request."""

    url: str
    headers: list[tuple[str, str]] = field(default_factory=list)


@dataclass(slots=True)
class BeforeRequest:
    """Outgoing request about to be sent."""

    url: str


Event = CookieChanged | HeadersReceived | BeforeRequest


def parse_events(lines: Iterable[str]) -> Iterator[Event]:
    """Parse JSON Lines event records.

    Blank lines are skipped. Each record carries an ``event`` field of
    ``cookie``, ``headers`` or ``request``; cookie records use the browser
    cookie API keys (``httpOnly``, ``sameSite``, ``expirationDate``).
    """
    for line_number, raw_line in enumerate(lines, start=1):
        stripped = raw_line.strip()
        if not stripped:
            continue
        try:
            record = json.loads(stripped)
        except json.JSONDecodeError as exc:
            raise EventParseError(line_number, f"invalid JSON: {exc.msg}") from exc
        if not isinstance(record, dict):
            raise EventParseError(line_number, "event must be a JSON object")
        try:
            yield _parse_record(record)
        except ValueError as exc:
            raise EventParseError(line_number, str(exc)) from exc


def parse_cookie(mapping: dict[str, Any]) -> CookieObservation:
    """Build a CookieObservation from a browser-API style mapping."""
    expiration = mapping.get("expirationDate")
    if expiration is not None and (
        isinstance(expiration, bool) or not isinstance(expiration, (int, float))
    ):
        raise ValueError("cookie.expirationDate must be a number")
    return CookieObservation(
        domain=_as_str(mapping.get("domain", ""), "cookie.domain"),
        name=_as_str(mapping.get("name", ""), "cookie.name"),
        path=_as_str(mapping.get("path") or "/", "cookie.path"),
        secure=bool(mapping.get("secure", False)),
        http_only=bool(mapping.get("httpOnly", False)),
        same_site=SameSite.parse(mapping.get("sameSite")),
        expiration_epoch_seconds=float(expiration) if expiration is not None else None,
    )


def _parse_record(record: dict[str, Any]) -> Event:
    kind = record.get("event")
    if kind == "cookie":
        cookie = record.get("cookie")
        if not isinstance(cookie, dict):
            raise ValueError("cookie event requires a 'cookie' object")
        return CookieChanged(cookie=parse_cookie(cookie), removed=bool(record.get("removed")))
    if kind == "headers":
        return HeadersReceived(
            url=_as_str(record.get("url"), "url"),
            headers=_parse_headers(record.get("responseHeaders")),
        )
    if kind == "request":
        return BeforeRequest(url=_as_str(record.get("url"), "url"))
    raise ValueError(f"unknown event type: {kind!r}")


def _parse_headers(value: Any) -> list[tuple[str, str]]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError("responseHeaders must be a list")
    headers: list[tuple[str, str]] = []
    for item in value:
        if not isinstance(item, dict):
            raise ValueError("responseHeaders entries must be objects")
        headers.append(
            (
                _as_str(item.get("name"), "responseHeaders.name"),
                _as_str(item.get("value", ""), "responseHeaders.value"),
            )
        )
    return headers


def _as_str(value: Any, field_name: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{field_name} must be a string")
    return value
