from __future__ import annotations

import json
from pathlib import Path

import typer

from love_index.config import DEFAULT_CONFIG_PATH, AppConfig, load_config
from love_index.errors import PipelineError
from love_index.io.read import load_raw_table
from love_index.io.schema import REQUIRED_ROLES, resolve_columns
from love_index.logging import configure_logging
from love_index.pipeline.run_all import run_view
from love_index.report.contracts import build_diagnostic_payload, build_result_payload

app = typer.Typer(no_args_is_help=True, add_completion=False)


def _load_app_config(config_path: Path | None) -> AppConfig:
    if config_path is None:
        if DEFAULT_CONFIG_PATH.exists():
            return load_config(DEFAULT_CONFIG_PATH)
        return AppConfig()
    return load_config(config_path)


def _resolve_source(csv: Path | None, cfg: AppConfig) -> str:
    if csv is not None:
        return str(csv)
    if cfg.input.csv_path:
        return cfg.input.csv_path
    raise typer.BadParameter("Missing --csv. Required when input.csv_path is not configured.")


def _echo_json(payload: dict) -> None:
    typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))


@app.command()
def run(
    csv: Path | None = typer.Option(None, exists=True, readable=True, resolve_path=True),
    config: Path | None = typer.Option(None, exists=True, readable=True, resolve_path=True),
    view: str | None = typer.Option(
        None,
        help="Named view policy (century window and minimum yield). Defaults to default_view.",
    ),
    log_level: str = typer.Option("INFO"),
) -> None:
    """Run the pipeline once and print the result (or diagnostic) payload as JSON."""
    configure_logging(log_level)
    cfg = _load_app_config(config)
    source = _resolve_source(csv, cfg)
    try:
        cfg.policy_for(view)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--view") from exc

    outcome = run_view(cfg, view=view, source=source)
    if outcome.diagnostic is not None:
        _echo_json(build_diagnostic_payload(outcome.diagnostic))
        raise typer.Exit(code=1)
    _echo_json(build_result_payload(outcome.result))


@app.command()
def columns(
    csv: Path | None = typer.Option(None, exists=True, readable=True, resolve_path=True),
    config: Path | None = typer.Option(None, exists=True, readable=True, resolve_path=True),
) -> None:
    """Show which header each semantic role resolves to."""
    configure_logging(quiet=True)
    cfg = _load_app_config(config)
    source = _resolve_source(csv, cfg)
    try:
        table = load_raw_table(source, cfg.input)
    except PipelineError as exc:
        _echo_json(build_diagnostic_payload(exc.diagnostic))
        raise typer.Exit(code=1) from exc

    column_map = resolve_columns(table.headers, cfg.columns)
    typer.echo(f"Columns found: {', '.join(table.headers)}")
    for role, column in column_map.as_dict().items():
        typer.echo(f"- {role}: {column or 'none'}")
    missing = column_map.missing(REQUIRED_ROLES)
    if missing:
        typer.echo(f"Missing required roles: {', '.join(role.value for role in missing)}")
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
