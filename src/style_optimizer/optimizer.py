"""Optimize pass: classify, transform, rewrite."""

from __future__ import annotations

import logging

from style_optimizer.classifier import TokenLength, classify
from style_optimizer.config import OptimizerConfig
from style_optimizer.dom import Document
from style_optimizer.model.diagnostic import OptimizeReport
from style_optimizer.model.telemetry import PageArtifacts, UnusedCSSAudit
from style_optimizer.rewriter import insert_reconcile_script, rewrite_stylesheets
from style_optimizer.tokens import compute_css_token_length
from style_optimizer.transform import CssTransformer, default_transformer, transform_all

logger = logging.getLogger(__name__)


def optimize(
    document: Document,
    artifacts: PageArtifacts,
    unused_audits: list[UnusedCSSAudit],
    config: OptimizerConfig | None = None,
    transformer: CssTransformer | None = None,
    token_length: TokenLength = compute_css_token_length,
) -> OptimizeReport:
    """Rewrite the stylesheet links of *document* in place.

    Every transformed stylesheet is on disk under ``config.dest_dir`` before
    the DOM is touched. Per-stylesheet failures end up in the report's
    diagnostics and leave the original ``<link>`` in place.
    """
    config = config or OptimizerConfig()
    transformer = transformer or default_transformer()
    logger.info("Optimizing stylesheets of %s", artifacts.page_url)

    records = classify(
        artifacts.stylesheets,
        artifacts.rules,
        unused_audits,
        artifacts.page_url,
        artifacts.blocking_urls,
        token_length=token_length,
        small_file_token_length=config.small_file_token_length,
        waste_threshold=config.waste_threshold,
    )

    batch = transform_all(records, transformer, config)
    applied, diagnostics = rewrite_stylesheets(
        document,
        [result.record for result in batch.results],
        artifacts.page_url,
        skipped_urls=batch.failed_urls,
    )
    insert_reconcile_script(document)

    logger.info(
        "Rewrote %d of %d stylesheet link(s) on %s",
        len(applied),
        len(records),
        artifacts.page_url,
    )
    return OptimizeReport(
        records=records,
        applied=applied,
        written_files=batch.written_files,
        diagnostics=batch.diagnostics + diagnostics,
    )
