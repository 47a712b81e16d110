"""Tests for cookie, header and URL detection rules."""

from __future__ import annotations

import pytest

from cookie_inspector.config import ThresholdsConfig
from cookie_inspector.observations import SameSite
from cookie_inspector.rules import (
    build_rules,
    default_rules,
    evaluate_cookie,
    evaluate_set_cookie_header,
    evaluate_url_for_tokens,
    list_rule_info,
)
from cookie_inspector.rules.base import URL_PARAM_SENTINEL, Severity
from cookie_inspector.rules.long_lived import LongLivedCookieRule
from cookie_inspector.rules.set_cookie_header import cookie_name_from_header
from cookie_inspector.scoring import score
from tests.helpers_events import DAY, NOW, hardened_cookie


def test_hardened_cookie_yields_no_findings() -> None:
    findings = evaluate_cookie(hardened_cookie(), now=NOW)
    assert findings == []
    assert score(findings) == 100


def test_cookie_rules_are_independent() -> None:
    cookie = hardened_cookie(
        http_only=False,
        secure=False,
        same_site=SameSite.NONE,
        expiration_epoch_seconds=None,
    )
    findings = evaluate_cookie(cookie, now=NOW)
    assert [(f.type, f.severity) for f in findings] == [
        ("Missing HttpOnly", Severity.HIGH),
        ("Missing Secure", Severity.HIGH),
        ("SameSite=None without Secure", Severity.CRITICAL),
    ]
    assert all(f.cookie_name == "sid" for f in findings)
    assert all("'sid'" in f.description for f in findings)


def test_unspecified_samesite_is_treated_as_none() -> None:
    cookie = hardened_cookie(secure=False, same_site=SameSite.UNSPECIFIED)
    types = {f.type for f in evaluate_cookie(cookie, now=NOW)}
    assert "SameSite=None without Secure" in types


@pytest.mark.parametrize("same_site", [SameSite.LAX, SameSite.STRICT])
def test_restricted_samesite_without_secure_only_flags_secure(same_site: SameSite) -> None:
    cookie = hardened_cookie(secure=False, same_site=same_site)
    findings = evaluate_cookie(cookie, now=NOW)
    assert [f.type for f in findings] == ["Missing Secure"]


def test_samesite_none_with_secure_is_not_flagged() -> None:
    cookie = hardened_cookie(same_site=SameSite.NONE)
    assert evaluate_cookie(cookie, now=NOW) == []


def test_long_lived_cookie_reports_rounded_days() -> None:
    cookie = hardened_cookie(expiration_epoch_seconds=NOW + 45.6 * DAY)
    findings = evaluate_cookie(cookie, now=NOW)
    assert len(findings) == 1
    assert findings[0].type == "Long-lived Cookie"
    assert findings[0].severity is Severity.MEDIUM
    assert "persists for 46 days" in findings[0].description


def test_long_lived_boundary_is_exclusive() -> None:
    at_limit = hardened_cookie(expiration_epoch_seconds=NOW + 30 * DAY)
    assert evaluate_cookie(at_limit, now=NOW) == []

    just_over = hardened_cookie(expiration_epoch_seconds=NOW + 30 * DAY + 1)
    findings = evaluate_cookie(just_over, now=NOW)
    assert [f.type for f in findings] == ["Long-lived Cookie"]
    assert "persists for 30 days" in findings[0].description


def test_session_cookie_never_long_lived() -> None:
    cookie = hardened_cookie(
        http_only=False,
        secure=False,
        same_site=SameSite.NONE,
        expiration_epoch_seconds=None,
    )
    types = {f.type for f in evaluate_cookie(cookie, now=NOW)}
    assert "Long-lived Cookie" not in types


def test_long_lived_rule_skips_session_cookie_even_with_short_window() -> None:
    session_cookie = hardened_cookie(expiration_epoch_seconds=None)
    assert session_cookie.is_session
    assert LongLivedCookieRule(max_age_days=1).evaluate(session_cookie, now=NOW) == []


def test_cookie_with_empty_name_and_domain_is_still_evaluated() -> None:
    cookie = hardened_cookie(name="", domain="", http_only=False)
    findings = evaluate_cookie(cookie, now=NOW)
    assert [f.type for f in findings] == ["Missing HttpOnly"]
    assert findings[0].cookie_name == ""


def test_long_lived_threshold_is_configurable() -> None:
    rules = build_rules(thresholds=ThresholdsConfig(long_lived_days=7))
    cookie = hardened_cookie(expiration_epoch_seconds=NOW + 10 * DAY)
    findings = evaluate_cookie(cookie, now=NOW, rules=rules)
    assert [f.type for f in findings] == ["Long-lived Cookie"]


def test_set_cookie_header_without_flags_yields_two_high_findings() -> None:
    findings = evaluate_set_cookie_header("id=abc123; Path=/", "https://example.com/")
    assert [(f.type, f.severity, f.cookie_name) for f in findings] == [
        ("Missing HttpOnly (Header)", Severity.HIGH, "id"),
        ("Missing Secure (Header)", Severity.HIGH, "id"),
    ]


def test_set_cookie_header_flags_are_case_insensitive() -> None:
    header = "id=abc123; Path=/; SECURE; httpOnly"
    assert evaluate_set_cookie_header(header, "https://example.com/") == []


def test_set_cookie_header_matches_tokens_inside_values() -> None:
    header = "pref=insecure_httponly_mode; Path=/"
    assert evaluate_set_cookie_header(header, "https://example.com/") == []


def test_set_cookie_header_without_equals_has_empty_name() -> None:
    findings = evaluate_set_cookie_header("garbage; Path=/", "https://example.com/")
    assert len(findings) == 2
    assert {f.cookie_name for f in findings} == {""}


def test_cookie_name_from_header_splits_on_first_equals() -> None:
    assert cookie_name_from_header(" token = a=b=c ; Secure") == "token"
    assert cookie_name_from_header("=value") == ""
    assert cookie_name_from_header("") == ""


def test_header_and_attribute_types_differ() -> None:
    attribute_types = {
        f.type
        for f in evaluate_cookie(
            hardened_cookie(http_only=False, secure=False), now=NOW
        )
    }
    header_types = {f.type for f in evaluate_set_cookie_header("sid=1", "https://example.com/")}
    assert attribute_types.isdisjoint(header_types)


def test_url_token_longer_than_twenty_chars_is_critical() -> None:
    url = "https://example.com/callback?token=aRandomLookingStringOfOver20Chars"
    findings = evaluate_url_for_tokens(url)
    assert len(findings) == 1
    assert findings[0].type == "Session Token in URL"
    assert findings[0].severity is Severity.CRITICAL
    assert findings[0].cookie_name == URL_PARAM_SENTINEL
    assert "'token'" in findings[0].description


def test_url_short_token_is_ignored() -> None:
    assert evaluate_url_for_tokens("https://example.com/callback?token=short") == []


def test_url_token_of_exactly_twenty_chars_is_ignored() -> None:
    assert evaluate_url_for_tokens("https://example.com/?jwt=" + "a" * 20) == []
    assert len(evaluate_url_for_tokens("https://example.com/?jwt=" + "a" * 21)) == 1


def test_url_keyword_match_is_case_insensitive_substring() -> None:
    value = "x" * 32
    url = f"https://example.com/?X-Auth-Code={value}&MySessionId={value}&page={value}"
    findings = evaluate_url_for_tokens(url)
    assert len(findings) == 2
    assert "'X-Auth-Code'" in findings[0].description
    assert "'MySessionId'" in findings[1].description


def test_url_parameter_matching_several_keywords_yields_one_finding() -> None:
    url = "https://example.com/?session_token=" + "z" * 40
    assert len(evaluate_url_for_tokens(url)) == 1


def test_url_without_query_or_unparseable_yields_nothing() -> None:
    assert evaluate_url_for_tokens("https://example.com/path") == []
    assert evaluate_url_for_tokens("http://[::1/?token=" + "a" * 30) == []


def test_url_token_rule_respects_configured_keywords() -> None:
    rules = build_rules(
        thresholds=ThresholdsConfig(suspicious_keywords=["apikey"], token_min_length=5)
    )
    url = "https://example.com/?apikey=abcdef&token=" + "a" * 40
    findings = evaluate_url_for_tokens(url, rules=rules)
    assert len(findings) == 1
    assert "'apikey'" in findings[0].description


def test_default_rules_cover_all_kinds() -> None:
    rules = default_rules()
    assert [rule.rule_id for rule in rules] == [info.rule_id for info in list_rule_info()]
    assert {rule.kind for rule in rules} == {"cookie", "header", "url"}


def test_build_rules_applies_enable_and_disable() -> None:
    rules = build_rules(
        enabled_rule_ids=["missing_secure", "long_lived_cookie"],
        disabled_rule_ids=["long_lived_cookie"],
    )
    assert [rule.rule_id for rule in rules] == ["missing_secure"]

    cookie = hardened_cookie(http_only=False, secure=False)
    findings = evaluate_cookie(cookie, now=NOW, rules=rules)
    assert [f.type for f in findings] == ["Missing Secure"]


def test_build_rules_rejects_unknown_ids() -> None:
    with pytest.raises(ValueError, match="Unknown rule ids: nope"):
        build_rules(disabled_rule_ids=["nope"])
