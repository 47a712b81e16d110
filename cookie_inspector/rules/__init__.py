"""Rules package."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass

from cookie_inspector.config import ThresholdsConfig
from cookie_inspector.observations import CookieObservation, HeaderObservation, UrlObservation
from cookie_inspector.rules.base import Finding, Rule, RuleKind
from cookie_inspector.rules.cookie_flags import (
    MissingHttpOnlyRule,
    MissingSecureRule,
    SameSiteNoneInsecureRule,
)
from cookie_inspector.rules.long_lived import LongLivedCookieRule
from cookie_inspector.rules.set_cookie_header import SetCookieHeaderRule
from cookie_inspector.rules.url_tokens import UrlTokenRule


@dataclass(frozen=True, slots=True)
class RuleInfo:
    """Rule metadata for listing and selection."""

    rule_id: str
    name: str
    description: str
    kind: str


@dataclass(frozen=True, slots=True)
class _RuleSpec:
    rule_id: str
    factory: Callable[[], Rule]
    name: str
    description: str
    kind: RuleKind


def default_rules() -> list[Rule]:
    """Return every known rule with default thresholds."""
    return build_rules()


def build_rules(
    *,
    enabled_rule_ids: list[str] | None = None,
    disabled_rule_ids: list[str] | None = None,
    thresholds: ThresholdsConfig | None = None,
) -> list[Rule]:
    """Build rule instances applying enable/disable filters.

    Order follows the registry, which fixes the order findings are emitted in.
    """
    specs = _ordered_rule_specs(thresholds or ThresholdsConfig())
    registry = {spec.rule_id: spec for spec in specs}
    requested_ids = set(enabled_rule_ids or []) | set(disabled_rule_ids or [])

    unknown = [rule_id for rule_id in requested_ids if rule_id not in registry]
    if unknown:
        joined = ", ".join(sorted(unknown))
        raise ValueError(f"Unknown rule ids: {joined}")

    enabled_set = set(enabled_rule_ids) if enabled_rule_ids is not None else set(registry)
    disabled_set = set(disabled_rule_ids or [])
    return [
        spec.factory()
        for spec in specs
        if spec.rule_id in enabled_set and spec.rule_id not in disabled_set
    ]


def list_rule_info() -> list[RuleInfo]:
    """Return metadata for all known rules."""
    return [
        RuleInfo(
            rule_id=spec.rule_id,
            name=spec.name,
            description=spec.description,
            kind=spec.kind,
        )
        for spec in _ordered_rule_specs(ThresholdsConfig())
    ]


def evaluate_cookie(
    observation: CookieObservation,
    *,
    now: float | None = None,
    rules: list[Rule] | None = None,
) -> list[Finding]:
    """Run every cookie rule; rules are independent and never short-circuit."""
    return _evaluate(observation, kind="cookie", now=now, rules=rules)


def evaluate_set_cookie_header(
    header_value: str,
    request_url: str,
    *,
    rules: list[Rule] | None = None,
) -> list[Finding]:
    """Run header rules against one raw Set-Cookie value."""
    observation = HeaderObservation(header_value=header_value, request_url=request_url)
    return _evaluate(observation, kind="header", now=None, rules=rules)


def evaluate_url_for_tokens(url: str, *, rules: list[Rule] | None = None) -> list[Finding]:
    """Run URL rules against one request URL."""
    return _evaluate(UrlObservation(url=url), kind="url", now=None, rules=rules)


def _evaluate(
    observation: object,
    *,
    kind: RuleKind,
    now: float | None,
    rules: list[Rule] | None,
) -> list[Finding]:
    active_rules = rules if rules is not None else default_rules()
    evaluated_at = time.time() if now is None else now
    findings: list[Finding] = []
    for rule in active_rules:
        if rule.kind != kind:
            continue
        findings.extend(rule.evaluate(observation, now=evaluated_at))
    return findings


def _ordered_rule_specs(thresholds: ThresholdsConfig) -> list[_RuleSpec]:
    return [
        _spec(MissingHttpOnlyRule),
        _spec(MissingSecureRule),
        _spec(SameSiteNoneInsecureRule),
        _spec(
            LongLivedCookieRule,
            factory=lambda: LongLivedCookieRule(max_age_days=thresholds.long_lived_days),
        ),
        _spec(SetCookieHeaderRule),
        _spec(
            UrlTokenRule,
            factory=lambda: UrlTokenRule(
                keywords=tuple(thresholds.suspicious_keywords),
                min_length=thresholds.token_min_length,
            ),
        ),
    ]


def _spec(rule_cls: type, *, factory: Callable[[], Rule] | None = None) -> _RuleSpec:
    return _RuleSpec(
        rule_id=rule_cls.rule_id,
        factory=factory or rule_cls,
        name=rule_cls.__name__,
        description=(rule_cls.__doc__ or "").strip().partition("\n")[0],
        kind=rule_cls.kind,
    )
