"""Origin derivation for aggregation keys."""

from __future__ import annotations

import ipaddress
import re
from dataclasses import dataclass
from urllib.parse import urlsplit

from cookie_inspector.observations import CookieObservation

DEFAULT_PORTS = {"http": 80, "https": 443, "ws": 80, "wss": 443}
_HOST_PATTERN = re.compile(r"[a-z0-9._-]+")


class MalformedUrlError(ValueError):
    """Raised when an origin cannot be derived from a URL."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"cannot derive origin from {url!r}: {reason}")
        self.url = url
        self.reason = reason


@dataclass(frozen=True, slots=True)
class Origin:
    """Scheme, host and port identifying a web security boundary."""

    scheme: str
    host: str
    port: int | None

    def __str__(self) -> str:
        host = f"[{self.host}]" if ":" in self.host else self.host
        if self.port is None or DEFAULT_PORTS.get(self.scheme) == self.port:
            return f"{self.scheme}://{host}"
        return f"{self.scheme}://{host}:{self.port}"


def origin_of(url: str) -> Origin:
    """Derive the origin of ``url``.

    Raises:
        MalformedUrlError: when the URL has no scheme, no host, a host with
            forbidden characters, or a bad port.
    """
    try:
        parts = urlsplit(url.strip())
        port = parts.port
    except ValueError as exc:
        raise MalformedUrlError(url, str(exc)) from exc

    scheme = parts.scheme.lower()
    if not scheme:
        raise MalformedUrlError(url, "missing scheme")
    host = parts.hostname
    if not host:
        raise MalformedUrlError(url, "missing host")
    if not _is_valid_host(host):
        raise MalformedUrlError(url, "invalid host")

    if port is None:
        port = DEFAULT_PORTS.get(scheme)
    return Origin(scheme=scheme, host=host, port=port)


def _is_valid_host(host: str) -> bool:
    if ":" in host:
        try:
            ipaddress.IPv6Address(host)
        except ValueError:
            return False
        return True
    try:
        ascii_host = host.encode("idna").decode("ascii")
    except UnicodeError:
        return False
    return _HOST_PATTERN.fullmatch(ascii_host) is not None


def cookie_url(observation: CookieObservation) -> str:
    """Rebuild the URL a cookie change is attributed to."""
    protocol = "https" if observation.secure else "http"
    domain = observation.domain[1:] if observation.domain.startswith(".") else observation.domain
    path = observation.path if observation.path.startswith("/") else f"/{observation.path}"
    return f"{protocol}://{domain}{path}"
