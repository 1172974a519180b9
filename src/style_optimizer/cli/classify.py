"""CLI command: style-optimizer classify -- show the verdict for each stylesheet."""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from style_optimizer.classifier import classify as run_classify
from style_optimizer.errors import ArtifactError
from style_optimizer.model.record import select_strategy
from style_optimizer.model.telemetry import load_artifacts, load_unused_audits


@click.command()
@click.option(
    "--artifacts",
    "artifacts_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Page-load artifacts JSON",
)
@click.option(
    "--audits",
    "audits_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help="Lighthouse result JSON holding the unused-css-rules audit",
)
@click.option("--json", "as_json", is_flag=True, help="Emit records as a JSON array")
def classify(artifacts_path: str, audits_path: str | None, as_json: bool) -> None:
    """Classify the page's stylesheets without touching any file."""
    try:
        artifacts = load_artifacts(Path(artifacts_path))
        audits = load_unused_audits(Path(audits_path) if audits_path else None)
    except ArtifactError as exc:
        click.echo(f"Telemetry error: {exc}", err=True)
        sys.exit(1)

    records = run_classify(
        artifacts.stylesheets,
        artifacts.rules,
        audits,
        artifacts.page_url,
        artifacts.blocking_urls,
    )

    if as_json:
        click.echo(json.dumps([r.to_dict() for r in records], indent=2))
        return

    click.echo(f"Page: {artifacts.page_url}")
    click.echo(f"Stylesheets: {len(records)}")
    for record in records:
        flags = [
            name
            for name, on in (
                ("same-site", record.is_from_same_site),
                ("small", record.is_small_size),
                ("critical", record.is_critical),
                ("low-usage", record.is_low_usage),
            )
            if on
        ]
        click.echo(f"  {select_strategy(record).value:<18} {record.src}  [{', '.join(flags)}]")
