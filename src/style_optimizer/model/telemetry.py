"""Telemetry model: usage rules, stylesheets and audits recorded during a page load."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from style_optimizer.errors import ArtifactError

UNUSED_CSS_AUDIT_ID = "unused-css-rules"


@dataclass(frozen=True)
class UsageRule:
    """A span of stylesheet text exercised during the observed page load.

    Offsets are half-open ``[start_offset, end_offset)`` and count UTF-16 code
    units, the unit browsers report them in.
    """

    style_sheet_id: str
    start_offset: int
    end_offset: int

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> UsageRule:
        return cls(
            style_sheet_id=data.get("styleSheetId", ""),
            start_offset=data.get("startOffset", -1),
            end_offset=data.get("endOffset", -1),
        )


@dataclass(frozen=True)
class StylesheetHeader:
    style_sheet_id: str
    is_inline: bool = False
    source_url: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StylesheetHeader:
        return cls(
            style_sheet_id=data.get("styleSheetId", ""),
            is_inline=bool(data.get("isInline", False)),
            source_url=data.get("sourceURL") or None,
        )


@dataclass(frozen=True)
class Stylesheet:
    """Full on-page CSS text paired with its header."""

    header: StylesheetHeader
    content: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Stylesheet:
        return cls(
            header=StylesheetHeader.from_dict(data.get("header", {})),
            content=data.get("content") or "",
        )


@dataclass(frozen=True)
class UnusedCSSAudit:
    """Aggregate waste reported for one stylesheet URL."""

    url: str
    wasted_percent: float

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> UnusedCSSAudit:
        return cls(url=data.get("url", ""), wasted_percent=float(data.get("wastedPercent", 0)))

    @classmethod
    def from_audits(cls, audits: dict[str, Any]) -> list[UnusedCSSAudit]:
        """Extract unused-CSS items from a Lighthouse result or its ``audits`` mapping.

        A missing audit yields an empty list.
        """
        if "audits" in audits and isinstance(audits["audits"], dict):
            audits = audits["audits"]
        audit = audits.get(UNUSED_CSS_AUDIT_ID) or {}
        details = audit.get("details") or {}
        return [cls.from_dict(item) for item in details.get("items", []) if item.get("url")]


@dataclass(frozen=True)
class PageArtifacts:
    """Everything one optimize pass reads from page-load instrumentation."""

    page_url: str
    rules: list[UsageRule] = field(default_factory=list)
    stylesheets: list[Stylesheet] = field(default_factory=list)
    blocking_urls: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PageArtifacts:
        """Build from Lighthouse-style artifacts (``URL``, ``CSSUsage``, ``TagsBlockingFirstPaint``)."""
        url_info = data.get("URL") or {}
        page_url = (
            url_info.get("finalUrl")
            or url_info.get("finalDisplayedUrl")
            or url_info.get("mainDocumentUrl")
        )
        if not page_url:
            raise ArtifactError("Artifacts carry no final page URL (URL.finalUrl)")

        usage = data.get("CSSUsage") or {}
        blocking: list[str] = []
        for entry in data.get("TagsBlockingFirstPaint") or []:
            url = entry.get("url") or (entry.get("tag") or {}).get("url")
            if url:
                blocking.append(url)

        return cls(
            page_url=page_url,
            rules=[UsageRule.from_dict(r) for r in usage.get("rules") or []],
            stylesheets=[Stylesheet.from_dict(s) for s in usage.get("stylesheets") or []],
            blocking_urls=blocking,
        )


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise ArtifactError(f"Cannot read telemetry from {path}: {exc}", cause=exc) from exc
    if not isinstance(data, dict):
        raise ArtifactError(f"Telemetry in {path} is not a JSON object")
    return data


def load_artifacts(path: Path) -> PageArtifacts:
    """Read Lighthouse-style artifacts JSON from *path*."""
    return PageArtifacts.from_dict(_read_json(path))


def load_unused_audits(path: Path | None) -> list[UnusedCSSAudit]:
    """Read unused-CSS audit items from a Lighthouse result at *path* (none if *path* is None)."""
    if path is None:
        return []
    return UnusedCSSAudit.from_audits(_read_json(path))
