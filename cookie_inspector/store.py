"""Per-origin finding store with dedup."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable

from cookie_inspector.origin import Origin
from cookie_inspector.rules.base import Finding

_LOG = logging.getLogger(__name__)


class FindingStore:
    """Deduplicated findings keyed by origin.

    Within one origin no two findings share ``(cookie_name, type)``; the first
    occurrence is kept at its original position. An origin entry exists only
    while it holds findings: it is created by the first merge that adds one
    and removed by :meth:`clear`. Entries never expire on their own.

    A single re-entrant lock serialises merges, clears and reads, so a reader
    never observes a partially merged sequence.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._findings: dict[Origin, list[Finding]] = {}
        self._keys: dict[Origin, set[tuple[str, str]]] = {}

    def merge(self, origin: Origin, findings: Iterable[Finding]) -> list[Finding]:
        """Append findings whose dedup key is new for ``origin``.

        Returns the findings that were actually added. Merging the same
        findings again adds nothing.
        """
        _require_origin(origin)
        incoming = list(findings)
        if not incoming:
            return []

        added: list[Finding] = []
        with self._lock:
            seen = self._keys.get(origin, set())
            for finding in incoming:
                key = finding.dedup_key
                if key in seen:
                    continue
                seen.add(key)
                added.append(finding)

            if added:
                self._keys[origin] = seen
                self._findings.setdefault(origin, []).extend(added)

        if added:
            _LOG.debug("Merged %d new finding(s) into %s", len(added), origin)
        return added

    def get(self, origin: Origin) -> list[Finding]:
        """Return a copy of the findings stored for ``origin``."""
        _require_origin(origin)
        with self._lock:
            return list(self._findings.get(origin, []))

    def clear(self, origin: Origin) -> bool:
        """Drop the entry for ``origin``; returns whether one existed."""
        _require_origin(origin)
        with self._lock:
            self._keys.pop(origin, None)
            removed = self._findings.pop(origin, None) is not None
        if removed:
            _LOG.debug("Cleared findings for %s", origin)
        return removed

    def origins(self) -> list[Origin]:
        """Return a sorted snapshot of origins with findings."""
        with self._lock:
            return sorted(self._findings, key=str)

    def snapshot(self) -> dict[Origin, list[Finding]]:
        """Return a point-in-time copy of the whole store."""
        with self._lock:
            return {origin: list(items) for origin, items in self._findings.items()}

    def __contains__(self, origin: object) -> bool:
        with self._lock:
            return origin in self._findings

    def __len__(self) -> int:
        with self._lock:
            return len(self._findings)


def _require_origin(origin: object) -> None:
    if not isinstance(origin, Origin):
        raise TypeError(f"origin must be an Origin, got {type(origin).__name__}")
