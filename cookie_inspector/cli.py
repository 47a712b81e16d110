"""CLI entrypoint for cookie-inspector."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Annotated

import typer

from cookie_inspector import __version__
from cookie_inspector.config import AppConfig, default_config_template, load_app_config
from cookie_inspector.observations import EventParseError, parse_events
from cookie_inspector.origin import MalformedUrlError, origin_of
from cookie_inspector.output import render_human, render_json
from cookie_inspector.rules import build_rules, list_rule_info
from cookie_inspector.rules.base import Rule
from cookie_inspector.scoring import OriginReport, summarize
from cookie_inspector.store import FindingStore
from cookie_inspector.watcher import ObservationWatcher

app = typer.Typer(
    name="cookie-inspector",
    no_args_is_help=True,
    help="Flag insecure cookies and leaked session tokens in observed web traffic.",
)


def version_callback(value: bool) -> None:
    """Print version and exit when --version is provided."""
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@app.callback()
def main_callback(
    version: Annotated[
        bool,
        typer.Option("--version", help="Show version and exit.", callback=version_callback),
    ] = False,
) -> None:
    """Root command callback."""
    _ = version


@app.command("analyze")
def analyze_command(
    events_file: Annotated[
        Path | None, typer.Option(help="Path to a JSON Lines observation stream.")
    ] = None,
    stdin: Annotated[bool, typer.Option(help="Read the observation stream from stdin.")] = False,
    origin: Annotated[
        str | None, typer.Option(help="Only report the origin of this URL.")
    ] = None,
    root: Annotated[Path, typer.Option(help="Directory to look for config in.")] = Path("."),
    format: Annotated[
        str | None, typer.Option(help="Output format: human|json.", show_default="human")
    ] = None,
    fail_below: Annotated[
        int | None, typer.Option(help="Exit nonzero if any reported score is below this value.")
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to config TOML file."),
    ] = None,
) -> None:
    """Evaluate observed cookies, headers and requests and report per origin."""
    _configure_logging(verbose)
    app_config = _load_config_or_raise(root, config_file)
    output_format = (format or app_config.format).lower()
    if output_format not in {"human", "json"}:
        raise typer.BadParameter("format must be one of: human, json", param_hint="--format")

    if events_file and stdin:
        raise typer.BadParameter("Use either --events-file or --stdin, not both.")
    if not events_file and not stdin:
        raise typer.BadParameter("Provide --events-file or --stdin.")

    lines, input_source = _read_event_lines(events_file=events_file, stdin=stdin)
    store = FindingStore()
    watcher = ObservationWatcher(store, rules=_build_configured_rules_or_raise(app_config))
    try:
        stats = watcher.process(parse_events(lines))
    except EventParseError as exc:
        raise typer.BadParameter(str(exc), param_hint="events") from exc

    reports = _collect_reports(store, origin)
    if output_format == "json":
        typer.echo(render_json(reports, input_source=input_source, stats=stats))
    else:
        typer.echo(render_human(reports))

    fail_threshold = fail_below if fail_below is not None else app_config.fail_below
    if fail_threshold is not None and any(report.score < fail_threshold for report in reports):
        raise typer.Exit(code=1)


@app.command("rules")
def rules_command(
    root: Annotated[Path, typer.Option(help="Directory to look for config in.")] = Path("."),
    format: Annotated[str, typer.Option(help="Output format: human|json.")] = "human",
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to config TOML file."),
    ] = None,
) -> None:
    """List available detection rules."""
    output_format = format.lower()
    if output_format not in {"human", "json"}:
        raise typer.BadParameter("format must be one of: human, json", param_hint="--format")

    app_config = _load_config_or_raise(root, config_file)
    active_ids = {rule.rule_id for rule in _build_configured_rules_or_raise(app_config)}
    rule_info = list_rule_info()

    if output_format == "json":
        payload = {
            "rules": [
                {
                    "rule_id": item.rule_id,
                    "name": item.name,
                    "description": item.description,
                    "kind": item.kind,
                    "enabled": item.rule_id in active_ids,
                }
                for item in rule_info
            ],
            "meta": {"config_source": app_config.source},
        }
        typer.echo(json.dumps(payload, sort_keys=True))
        return

    lines = ["Available rules:"]
    for item in rule_info:
        status = "enabled" if item.rule_id in active_ids else "disabled"
        lines.append(f"- {item.rule_id} ({item.kind}) [{status}] - {item.description}")
    typer.echo("\n".join(lines))


@app.command("config")
def config_command(
    root: Annotated[Path, typer.Option(help="Directory to look for config in.")] = Path("."),
    format: Annotated[str, typer.Option(help="Output format: human|json.")] = "human",
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to config TOML file."),
    ] = None,
) -> None:
    """Show resolved configuration."""
    output_format = format.lower()
    if output_format not in {"human", "json"}:
        raise typer.BadParameter("format must be one of: human, json", param_hint="--format")

    app_config = _load_config_or_raise(root, config_file)
    active_rules = _build_configured_rules_or_raise(app_config)
    payload = app_config.to_dict()
    payload["active_rule_ids"] = [rule.rule_id for rule in active_rules]

    if output_format == "json":
        typer.echo(json.dumps(payload, sort_keys=True))
        return

    thresholds = payload["thresholds"]
    lines = [
        "Resolved configuration:",
        f"- source: {payload['source'] or 'defaults'}",
        f"- format: {payload['format']}",
        f"- fail_below: {payload['fail_below']}",
        f"- rules.enable: {payload['rules']['enable']}",
        f"- rules.disable: {payload['rules']['disable']}",
        f"- thresholds.long_lived_days: {thresholds['long_lived_days']}",
        f"- thresholds.token_min_length: {thresholds['token_min_length']}",
        f"- thresholds.suspicious_keywords: {thresholds['suspicious_keywords']}",
        f"- active_rule_ids: {payload['active_rule_ids']}",
    ]
    typer.echo("\n".join(lines))


@app.command("config-init")
def config_init_command(
    out: Annotated[Path, typer.Option(help="Output path for starter config TOML.")] = Path(
        ".cookie-inspector.toml"
    ),
    force: Annotated[
        bool,
        typer.Option("--force", help="Overwrite if file already exists."),
    ] = False,
) -> None:
    """Create a starter config file."""
    out_path = out.resolve()
    if out_path.exists() and not force:
        raise typer.BadParameter(
            f"Refusing to overwrite existing file: {out_path}. Use --force to overwrite."
        )
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(default_config_template(), encoding="utf-8")
    typer.echo(f"Wrote starter config: {out_path}")


@app.command("config-validate")
def config_validate_command(
    root: Annotated[Path, typer.Option(help="Directory to look for config in.")] = Path("."),
    config_file: Annotated[
        Path,
        typer.Option("--config", help="Path to config TOML file to validate."),
    ] = Path(".cookie-inspector.toml"),
    format: Annotated[str, typer.Option(help="Output format: human|json.")] = "human",
) -> None:
    """Validate a config file and report active rules."""
    output_format = format.lower()
    if output_format not in {"human", "json"}:
        raise typer.BadParameter("format must be one of: human, json", param_hint="--format")

    app_config = _load_config_or_raise(root, config_file)
    active_rules = _build_configured_rules_or_raise(app_config)
    payload = {
        "ok": True,
        "source": app_config.source,
        "active_rule_ids": [rule.rule_id for rule in active_rules],
    }
    if output_format == "json":
        typer.echo(json.dumps(payload, sort_keys=True))
        return
    typer.echo(
        "\n".join(
            [
                "Config is valid.",
                f"- source: {payload['source']}",
                f"- active_rule_ids: {payload['active_rule_ids']}",
            ]
        )
    )


def main() -> None:
    """Console script entrypoint."""
    app()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
        force=True,
    )


def _read_event_lines(*, events_file: Path | None, stdin: bool) -> tuple[list[str], str]:
    if events_file is not None:
        try:
            text = events_file.read_text(encoding="utf-8")
        except OSError as exc:
            raise typer.BadParameter(str(exc), param_hint="--events-file") from exc
        return (text.splitlines(), f"events_file:{events_file}")
    return (sys.stdin.read().splitlines(), "stdin")


def _collect_reports(store: FindingStore, origin_url: str | None) -> list[OriginReport]:
    if origin_url is None:
        return [summarize(origin, store.get(origin)) for origin in store.origins()]
    try:
        origin = origin_of(origin_url)
    except MalformedUrlError as exc:
        raise typer.BadParameter(str(exc), param_hint="--origin") from exc
    return [summarize(origin, store.get(origin))]


def _load_config_or_raise(root: Path, config_file: Path | None = None) -> AppConfig:
    try:
        return load_app_config(root, config_path=config_file)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="config") from exc


def _build_configured_rules_or_raise(app_config: AppConfig) -> list[Rule]:
    try:
        return build_rules(
            enabled_rule_ids=app_config.rule_enable,
            disabled_rule_ids=app_config.rule_disable,
            thresholds=app_config.thresholds,
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="config.rules") from exc
