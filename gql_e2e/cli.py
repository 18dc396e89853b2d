"""CLI entry point for gql-e2e.

Usage:
    gql-e2e run <scenario.yaml> [options]
    gql-e2e validate <scenario.yaml>

Every command prints one JSON envelope on stdout:
    {"success": bool, "command": str, "data": {...}, "message": str}
Progress and diagnostics go to stderr.
"""

import json
import re
import sys
import time
from pathlib import Path
from typing import Optional

import click

from .config import FalsyGating, load_config
from .reporting.json_reporter import JsonReporter
from .runner.executor import GroupRunner
from .runner.registration import SequentialRegistrar, run
from .scenario.parser import parse_scenario
from .scenario.validator import validate_group, validate_steps


@click.group()
def main():
    """Run declarative GraphQL scenario files."""


@main.command("run")
@click.argument("scenario", type=click.Path(dir_okay=False))
@click.option("--endpoint", help="GraphQL endpoint URL (overrides config).")
@click.option("--config", "config_path", type=click.Path(dir_okay=False), help="YAML config file.")
@click.option("--verbose", is_flag=True, help="Print step progress to stderr.")
@click.option(
    "--falsy-gating",
    type=click.Choice([g.value for g in FalsyGating], case_sensitive=False),
    help="When test_falsy handlers run.",
)
@click.option("--save-report", is_flag=True, help="Save report to file.")
@click.option("--report-dir", type=click.Path(file_okay=False), help="Directory for saved reports.")
@click.option("--pretty", is_flag=True, help="Pretty print output.")
def run_command(
    scenario: str,
    endpoint: Optional[str],
    config_path: Optional[str],
    verbose: bool,
    falsy_gating: Optional[str],
    save_report: bool,
    report_dir: Optional[str],
    pretty: bool,
):
    """Run the scenario group in SCENARIO."""
    overrides: dict = {}
    if endpoint:
        overrides["endpoint"] = endpoint
    if verbose:
        overrides["verbose"] = True
    if falsy_gating:
        overrides["falsy_gating"] = falsy_gating

    try:
        group = parse_scenario(scenario)
        config = load_config(config_path, defaults=group.config, **overrides)
        config.initial_variables = {**config.initial_variables, **group.variables}

        validation = validate_steps(group.steps, config.falsy_gating)
        if not validation.valid:
            errors_str = "; ".join(f"{e.path}: {e.message}" for e in validation.errors)
            output_error(f"Invalid scenario: {errors_str}")
            sys.exit(1)

    except (FileNotFoundError, ValueError, TypeError) as e:
        output_error(f"Failed to load scenario: {e}")
        sys.exit(1)

    registrar = SequentialRegistrar()
    start_time = time.time()

    try:
        runner = run(group.name, config, group.steps, registrar=registrar)
    except KeyboardInterrupt:
        duration_ms = int((time.time() - start_time) * 1000)
        output_error("Run interrupted by user", duration_ms=duration_ms)
        sys.exit(130)

    result = registrar.result
    result.variables_written = written_variables(runner)

    reporter = JsonReporter()
    report = reporter.generate(result, endpoint=config.endpoint)

    report_path = None
    if save_report:
        target = Path(report_dir or ".") / f"gql_e2e_report_{_file_slug(group.name)}.json"
        try:
            report_path = str(reporter.save(report, target))
        except OSError as e:
            print(f"Warning: Failed to save report: {e}", file=sys.stderr)

    output = reporter.generate_cli_output(report, report_path)
    click.echo(reporter.to_json_string(output, pretty=pretty))

    if not output["success"]:
        sys.exit(1)


@main.command("validate")
@click.argument("scenario", type=click.Path(dir_okay=False))
def validate_command(scenario: str):
    """Check SCENARIO without running it."""
    try:
        group = parse_scenario(scenario)
    except (FileNotFoundError, ValueError) as e:
        output_error(f"Failed to parse scenario: {e}", command="validate")
        sys.exit(1)

    validation = validate_group(group)
    output = {
        "success": validation.valid,
        "command": "validate",
        "data": {
            "group": group.name,
            "steps": group.total_steps,
            "errors": [{"path": e.path, "message": e.message} for e in validation.errors],
            "warnings": [{"path": w.path, "message": w.message} for w in validation.warnings],
        },
        "message": str(validation),
    }
    click.echo(json.dumps(output, ensure_ascii=False))

    if not validation.valid:
        sys.exit(1)


def written_variables(runner: GroupRunner) -> list[str]:
    """Variable names written during the run, in first-write order."""
    seen: dict[str, None] = {}
    for record in runner.store.history:
        for key in record.keys:
            seen.setdefault(key, None)
    return list(seen)


def output_error(message: str, command: str = "run", **extra):
    """Output error as a JSON envelope."""
    output = {
        "success": False,
        "command": command,
        "data": extra or None,
        "message": message,
    }
    click.echo(json.dumps(output, ensure_ascii=False))


def _file_slug(name: str) -> str:
    return re.sub(r"[^0-9a-zA-Z]+", "_", name).strip("_").lower() or "group"


if __name__ == "__main__":
    main()
