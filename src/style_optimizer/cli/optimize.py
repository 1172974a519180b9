"""CLI command: style-optimizer optimize -- rewrite the stylesheets of an HTML page."""

from __future__ import annotations

import sys
from pathlib import Path

import click

from style_optimizer.config import OptimizerConfig
from style_optimizer.dom import SoupDocument
from style_optimizer.errors import ArtifactError
from style_optimizer.model.diagnostic import Severity
from style_optimizer.model.telemetry import load_artifacts, load_unused_audits
from style_optimizer.optimizer import optimize as run_optimize


@click.command()
@click.argument("html_file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--artifacts",
    "artifacts_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Page-load artifacts JSON (URL, CSSUsage, TagsBlockingFirstPaint)",
)
@click.option(
    "--audits",
    "audits_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help="Lighthouse result JSON holding the unused-css-rules audit",
)
@click.option("--src-dir", default=".", help="Directory the page's stylesheets are served from")
@click.option("--dest-dir", default="dist", help="Directory transformed stylesheets are written to")
@click.option("--output", default=None, help="Where to write the rewritten HTML")
@click.option("--workers", default=4, type=int, help="Concurrent stylesheet transforms")
@click.option("--timeout", default=30.0, type=float, help="Per-stylesheet transform timeout (seconds)")
def optimize(
    html_file: str,
    artifacts_path: str,
    audits_path: str | None,
    src_dir: str,
    dest_dir: str,
    output: str | None,
    workers: int,
    timeout: float,
) -> None:
    """Rewrite the stylesheet links of HTML_FILE using page-load telemetry.

    Small stylesheets are inlined, rarely used ones are reduced to their used
    rules, the rest are preloaded. Transformed CSS is written under --dest-dir.
    """
    try:
        artifacts = load_artifacts(Path(artifacts_path))
        audits = load_unused_audits(Path(audits_path) if audits_path else None)
    except ArtifactError as exc:
        click.echo(f"Telemetry error: {exc}", err=True)
        sys.exit(1)

    config = OptimizerConfig(
        src_dir=src_dir,
        dest_dir=dest_dir,
        max_workers=workers,
        transform_timeout=timeout,
    )
    document = SoupDocument.load(html_file)
    report = run_optimize(document, artifacts, audits, config)

    out_path = Path(output) if output else Path(dest_dir) / Path(html_file).name
    document.write(out_path)

    for url, strategy in report.applied.items():
        click.echo(f"  {strategy.value:<18} {url}")
    for diag in report.diagnostics:
        if diag.severity is not Severity.INFO:
            click.echo(str(diag), err=True)

    click.echo(
        f"Rewrote {len(report.applied)} stylesheet(s), "
        f"wrote {len(report.written_files)} file(s); page saved to {out_path}"
    )
