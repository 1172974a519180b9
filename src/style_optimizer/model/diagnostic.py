"""Diagnostic model: per-stylesheet findings and the report of one optimize pass."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from style_optimizer.model.record import ClassificationRecord, DeliveryStrategy


class Severity(Enum):
    """Severity level for a diagnostic message."""

    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"


@dataclass(frozen=True)
class Diagnostic:
    """A single non-fatal finding raised while optimizing a page.

    Attributes:
        rule: Identifier of the condition, e.g. ``lookup_miss`` or ``transform_error``.
        severity: How serious the issue is.
        message: Human-readable description.
        url: The stylesheet URL involved, if any.
    """

    rule: str
    severity: Severity
    message: str
    url: str | None = None

    def __str__(self) -> str:
        location = f" [url={self.url}]" if self.url else ""
        return f"{self.severity.value}{location}: {self.message}"


@dataclass
class OptimizeReport:
    """Outcome of one optimize pass over a page."""

    records: list[ClassificationRecord] = field(default_factory=list)
    applied: dict[str, DeliveryStrategy] = field(default_factory=dict)
    written_files: list[str] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    def diagnostics_for(self, rule: str) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.rule == rule]
