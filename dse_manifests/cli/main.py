from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer

from dse_manifests.core.config import (
    DEFAULT_CONFIG_BUILDER_IMAGE,
    ENV_CONFIG_BUILDER_IMAGE,
    ENV_REPOSITORY,
    BuildConfig,
)
from dse_manifests.core.orchestrator import build_all
from dse_manifests.models.spec import DEFAULT_REPOSITORY
from dse_manifests.output.render import render_json, render_table, render_yaml
from dse_manifests.parsers.yaml_parser import parse_files
from dse_manifests.utils.logger import configure_logging


app = typer.Typer(add_completion=False, help="DSE datacenter manifest builder")


@app.callback()
def main() -> None:
    """Build the platform objects for DSE datacenters without applying them."""


@app.command("render")
def render(
    files: List[Path] = typer.Argument(..., help="YAML files holding DseDatacenter specs"),
    output: str = typer.Option(
        "yaml",
        "--output",
        case_sensitive=False,
        help="Output format: yaml|json|table",
    ),
    rack: Optional[str] = typer.Option(
        None,
        "--rack",
        help="Only build this rack's statefulset and disruption budget",
    ),
    config_builder_image: str = typer.Option(
        DEFAULT_CONFIG_BUILDER_IMAGE,
        "--config-builder-image",
        envvar=ENV_CONFIG_BUILDER_IMAGE,
        help="Image of the config init container",
    ),
    repository: str = typer.Option(
        DEFAULT_REPOSITORY,
        "--repository",
        envvar=ENV_REPOSITORY,
        help="Server image repository used when a datacenter does not set one",
    ),
    debug: bool = typer.Option(False, "--debug/--no-debug", help="Verbose logging to stderr"),
):
    """Render services, statefulsets and disruption budgets for each datacenter."""
    configure_logging(debug)
    try:
        cfg = BuildConfig(
            config_builder_image=config_builder_image,
            default_repository=repository,
        )
        specs = parse_files([str(p) for p in files])
        if rack is not None:
            specs = [
                s.model_copy(update={"racks": [r for r in s.racks if r.name == rack]})
                for s in specs
                if any(r.name == rack for r in s.racks)
            ]
            if not specs:
                raise ValueError(f"No datacenter has a rack named {rack!r}")
        results = build_all(specs, cfg)
    except Exception as exc:  # noqa: BLE001
        typer.echo(f"Fatal error: {exc}", err=True)
        raise typer.Exit(code=1)

    fmt = output.lower()
    if fmt == "yaml":
        typer.echo(render_yaml(results), nl=False)
    elif fmt == "json":
        typer.echo(render_json(results))
    elif fmt == "table":
        render_table(results)
    else:
        typer.echo("Unknown output format. Use yaml|json|table.", err=True)
        raise typer.Exit(code=2)

    raise typer.Exit(code=0)


if __name__ == "__main__":  # pragma: no cover
    app()
