"""Glue between observation events, rule evaluation and the finding store."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from cookie_inspector.observations import (
    BeforeRequest,
    CookieChanged,
    CookieObservation,
    Event,
    HeadersReceived,
)
from cookie_inspector.origin import MalformedUrlError, cookie_url, origin_of
from cookie_inspector.rules import (
    default_rules,
    evaluate_cookie,
    evaluate_set_cookie_header,
    evaluate_url_for_tokens,
)
from cookie_inspector.rules.base import Finding, Rule
from cookie_inspector.scoring import OriginReport, summarize
from cookie_inspector.store import FindingStore

_LOG = logging.getLogger(__name__)

SET_COOKIE_HEADER = "set-cookie"


@dataclass(slots=True)
class WatchStats:
    """Counters for one pass over an event stream."""

    events: int = 0
    findings_added: int = 0
    skipped: int = 0


class ObservationWatcher:
    """Feeds observation events through the rules into a shared store.

    Handlers raise :class:`MalformedUrlError` when a finding cannot be
    attributed to an origin. :meth:`process` isolates events from each other:
    a failing event is logged and skipped, the rest of the stream continues.
    """

    def __init__(
        self,
        store: FindingStore,
        *,
        rules: list[Rule] | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.store = store
        self.rules = rules if rules is not None else default_rules()
        self._clock = clock

    def on_cookie_changed(
        self, observation: CookieObservation, *, removed: bool = False
    ) -> list[Finding]:
        if removed:
            return []
        findings = evaluate_cookie(observation, now=self._clock(), rules=self.rules)
        if not findings:
            return []
        return self.store.merge(origin_of(cookie_url(observation)), findings)

    def on_headers_received(
        self, request_url: str, headers: Iterable[tuple[str, str]]
    ) -> list[Finding]:
        added: list[Finding] = []
        for name, value in headers:
            if name.lower() != SET_COOKIE_HEADER:
                continue
            findings = evaluate_set_cookie_header(value, request_url, rules=self.rules)
            if findings:
                added.extend(self.store.merge(origin_of(request_url), findings))
        return added

    def on_before_request(self, url: str) -> list[Finding]:
        findings = evaluate_url_for_tokens(url, rules=self.rules)
        if not findings:
            return []
        return self.store.merge(origin_of(url), findings)

    def dispatch(self, event: Event) -> list[Finding]:
        """Route one parsed event to its handler."""
        if isinstance(event, CookieChanged):
            return self.on_cookie_changed(event.cookie, removed=event.removed)
        if isinstance(event, HeadersReceived):
            return self.on_headers_received(event.url, event.headers)
        if isinstance(event, BeforeRequest):
            return self.on_before_request(event.url)
        raise TypeError(f"unsupported event: {type(event).__name__}")

    def process(self, events: Iterable[Event]) -> WatchStats:
        """Dispatch a stream of events, skipping the ones that fail."""
        stats = WatchStats()
        for event in events:
            stats.events += 1
            try:
                added = self.dispatch(event)
            except MalformedUrlError as exc:
                stats.skipped += 1
                _LOG.warning("Skipping event %d: %s", stats.events, exc)
                continue
            except Exception:
                stats.skipped += 1
                _LOG.exception("Failed to process event %d", stats.events)
                continue
            stats.findings_added += len(added)
        _LOG.debug(
            "Processed %d event(s): %d finding(s) added, %d skipped",
            stats.events,
            stats.findings_added,
            stats.skipped,
        )
        return stats

    def report(self, url: str) -> OriginReport:
        """Summarise stored findings for the origin of ``url``."""
        origin = origin_of(url)
        return summarize(origin, self.store.get(origin))

    def clear(self, url: str) -> bool:
        return self.store.clear(origin_of(url))
