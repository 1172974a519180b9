"""Stylesheet classifier: turns usage telemetry into one record per stylesheet."""

from __future__ import annotations

import logging
from typing import Callable, Iterable
from urllib.parse import urlsplit

from style_optimizer.config import SMALL_FILE_TOKEN_LENGTH, WASTE_THRESHOLD
from style_optimizer.model.record import ClassificationRecord
from style_optimizer.model.telemetry import Stylesheet, UnusedCSSAudit, UsageRule
from style_optimizer.tokens import compute_css_token_length

__all__ = ["classify", "extract_used_content", "is_same_site", "origin_of"]

logger = logging.getLogger(__name__)

TokenLength = Callable[[str], int]

_DEFAULT_PORTS = {"http": 80, "https": 443}


def origin_of(url: str) -> tuple[str, str, int | None]:
    """Return the ``(scheme, host, port)`` origin of *url* with default ports filled in."""
    parts = urlsplit(url)
    scheme = parts.scheme.lower()
    try:
        port = parts.port
    except ValueError:
        port = None
    if port is None:
        port = _DEFAULT_PORTS.get(scheme)
    return scheme, (parts.hostname or "").lower(), port


def is_same_site(page_url: str, url: str) -> bool:
    """True if *url* shares scheme, host and port with *page_url*."""
    return origin_of(page_url) == origin_of(url)


def _slice_utf16(encoded: bytes, start: object, end: object) -> str | None:
    """Slice UTF-16-LE *encoded* text by code-unit offsets; None if the span is invalid."""
    if not isinstance(start, int) or not isinstance(end, int):
        return None
    if isinstance(start, bool) or isinstance(end, bool):
        return None
    if start < 0 or start > end or end * 2 > len(encoded):
        return None
    try:
        return encoded[start * 2 : end * 2].decode("utf-16-le")
    except UnicodeDecodeError:
        # span cuts a surrogate pair
        return None


def extract_used_content(stylesheet: Stylesheet, rules: Iterable[UsageRule]) -> str:
    """Join the text of every rule of *stylesheet* that fired, in rule order.

    Rules with spans outside the content are skipped as if they never fired.
    """
    sheet_id = stylesheet.header.style_sheet_id
    encoded = stylesheet.content.encode("utf-16-le")
    slices: list[str] = []
    for rule in rules:
        if rule.style_sheet_id != sheet_id:
            continue
        text = _slice_utf16(encoded, rule.start_offset, rule.end_offset)
        if text is None:
            logger.debug(
                "Skipping rule [%s, %s) outside stylesheet %s",
                rule.start_offset,
                rule.end_offset,
                stylesheet.header.source_url,
            )
            continue
        slices.append(text)
    return "\n".join(slices)


def classify(
    stylesheets: Iterable[Stylesheet],
    rules: Iterable[UsageRule],
    unused_audits: Iterable[UnusedCSSAudit],
    page_url: str,
    blocking_urls: Iterable[str],
    token_length: TokenLength = compute_css_token_length,
    small_file_token_length: int = SMALL_FILE_TOKEN_LENGTH,
    waste_threshold: float = WASTE_THRESHOLD,
) -> list[ClassificationRecord]:
    """Classify every external stylesheet of the page, in input order.

    Inline stylesheets and stylesheets without a source URL are left out.
    """
    rules = list(rules)
    # Later audit entries for the same URL overwrite earlier ones.
    audits_by_url = {audit.url: audit for audit in unused_audits}
    blocking = set(blocking_urls)

    records: list[ClassificationRecord] = []
    for stylesheet in stylesheets:
        header = stylesheet.header
        if header.is_inline or not header.source_url:
            continue

        src = header.source_url
        audit = audits_by_url.get(src)
        records.append(
            ClassificationRecord(
                src=src,
                is_from_same_site=is_same_site(page_url, src),
                content=stylesheet.content,
                used_content=extract_used_content(stylesheet, rules),
                is_small_size=token_length(stylesheet.content) <= small_file_token_length,
                is_critical=src in blocking,
                is_low_usage=audit.wasted_percent > waste_threshold if audit else False,
            )
        )

    logger.info("Classified %d stylesheet(s) for %s", len(records), page_url)
    return records
