"""Configuration loading for cookie-inspector."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

CONFIG_FILENAMES = (".cookie-inspector.toml", "cookie-inspector.toml")
PYPROJECT_FILENAME = "pyproject.toml"
PYPROJECT_TOOL_KEYS = ("cookie_inspector", "cookie-inspector")

DEFAULT_SUSPICIOUS_KEYWORDS = ["session", "token", "auth", "sid", "jwt", "bearer"]


@dataclass(slots=True)
class ThresholdsConfig:
    """Tunable rule thresholds."""

    long_lived_days: int = 30
    token_min_length: int = 20
    suspicious_keywords: list[str] = field(
        default_factory=lambda: list(DEFAULT_SUSPICIOUS_KEYWORDS)
    )

    def to_dict(self) -> dict[str, Any]:
        return {
            "long_lived_days": self.long_lived_days,
            "token_min_length": self.token_min_length,
            "suspicious_keywords": list(self.suspicious_keywords),
        }


@dataclass(slots=True)
class AppConfig:
    """Runtime configuration values resolved from project files."""

    format: str = "human"
    fail_below: int | None = None
    rule_enable: list[str] | None = None
    rule_disable: list[str] = field(default_factory=list)
    thresholds: ThresholdsConfig = field(default_factory=ThresholdsConfig)
    source: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "format": self.format,
            "fail_below": self.fail_below,
            "rules": {
                "enable": list(self.rule_enable) if self.rule_enable is not None else None,
                "disable": list(self.rule_disable),
            },
            "thresholds": self.thresholds.to_dict(),
            "source": self.source,
        }


def load_app_config(root: Path, config_path: Path | None = None) -> AppConfig:
    """Load config from explicit path or directory-local files with precedence."""
    root = root.resolve()
    if config_path is not None:
        resolved = config_path if config_path.is_absolute() else (root / config_path)
        if not resolved.exists():
            raise ValueError(f"Config file does not exist: {resolved}")
        mapping = _extract_config_mapping(_load_toml(resolved), source_path=resolved)
        return _from_mapping(mapping, source=str(resolved))

    for filename in CONFIG_FILENAMES:
        resolved = root / filename
        if resolved.exists():
            mapping = _extract_config_mapping(_load_toml(resolved), source_path=resolved)
            return _from_mapping(mapping, source=str(resolved))

    pyproject_path = root / PYPROJECT_FILENAME
    if pyproject_path.exists():
        mapping = _extract_config_mapping(_load_toml(pyproject_path), source_path=pyproject_path)
        if mapping:
            return _from_mapping(mapping, source=str(pyproject_path))

    return AppConfig()


def default_config_template() -> str:
    """Return a starter config template."""
    return "\n".join(
        [
            'format = "human"',
            "fail_below = 50",
            "",
            "[rules]",
            "enable = [",
            '  "missing_httponly",',
            '  "missing_secure",',
            '  "samesite_none_insecure",',
            '  "long_lived_cookie",',
            '  "set_cookie_header_flags",',
            '  "session_token_in_url",',
            "]",
            "disable = []",
            "",
            "[thresholds]",
            "long_lived_days = 30",
            "token_min_length = 20",
            'suspicious_keywords = ["session", "token", "auth", "sid", "jwt", "bearer"]',
            "",
        ]
    )


def _load_toml(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as file_obj:
            loaded = tomllib.load(file_obj)
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Invalid TOML in {path}: {exc}") from exc
    if not isinstance(loaded, dict):
        return {}
    return loaded


def _extract_config_mapping(loaded: dict[str, Any], *, source_path: Path) -> dict[str, Any]:
    if source_path.name == PYPROJECT_FILENAME:
        section = _find_pyproject_tool_section(loaded)
        return section if section is not None else {}

    tool_section = _find_pyproject_tool_section(loaded)
    if tool_section is not None:
        return tool_section
    return loaded


def _find_pyproject_tool_section(loaded: dict[str, Any]) -> dict[str, Any] | None:
    tool = loaded.get("tool")
    if not isinstance(tool, dict):
        return None
    for key in PYPROJECT_TOOL_KEYS:
        section = tool.get(key)
        if isinstance(section, dict):
            return section
    return None


def _from_mapping(mapping: dict[str, Any], *, source: str) -> AppConfig:
    rules_mapping = _as_table(mapping.get("rules"), "rules")
    thresholds_mapping = _as_table(mapping.get("thresholds"), "thresholds")

    raw_format = mapping.get("format", "human")
    format_value = str(raw_format).lower()
    if format_value not in {"human", "json"}:
        format_value = "human"

    raw_fail = mapping.get("fail_below")
    if raw_fail is None:
        fail_value: int | None = None
    else:
        fail_value = _as_int(raw_fail, "fail_below")
        if not 0 <= fail_value <= 100:
            raise ValueError("fail_below must be between 0 and 100")

    return AppConfig(
        format=format_value,
        fail_below=fail_value,
        rule_enable=_as_str_list_or_none(rules_mapping.get("enable")),
        rule_disable=_as_str_list(rules_mapping.get("disable")),
        thresholds=_parse_thresholds_config(thresholds_mapping),
        source=source,
    )


def _parse_thresholds_config(value: dict[str, Any]) -> ThresholdsConfig:
    long_lived_days = _as_int(value.get("long_lived_days", 30), "thresholds.long_lived_days")
    if long_lived_days <= 0:
        raise ValueError("thresholds.long_lived_days must be > 0")
    token_min_length = _as_int(value.get("token_min_length", 20), "thresholds.token_min_length")
    if token_min_length < 0:
        raise ValueError("thresholds.token_min_length must be >= 0")

    keywords = _as_str_list(value.get("suspicious_keywords"))
    if "suspicious_keywords" in value and not keywords:
        raise ValueError("thresholds.suspicious_keywords must not be empty")

    return ThresholdsConfig(
        long_lived_days=long_lived_days,
        token_min_length=token_min_length,
        suspicious_keywords=[item.lower() for item in keywords]
        or list(DEFAULT_SUSPICIOUS_KEYWORDS),
    )


def _as_table(value: Any, field_name: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"{field_name} must be a table/object")
    return value


def _as_str_list(value: Any) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError("Expected a list of strings")
    items: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise ValueError("Expected a list of strings")
        items.append(item)
    return items


def _as_str_list_or_none(value: Any) -> list[str] | None:
    if value is None:
        return None
    return _as_str_list(value)


def _as_int(raw: Any, field_name: str) -> int:
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise ValueError(f"{field_name} must be an integer")
    return raw
