from style_optimizer.model.diagnostic import Diagnostic, OptimizeReport, Severity
from style_optimizer.model.record import ClassificationRecord, DeliveryStrategy, select_strategy
from style_optimizer.model.telemetry import (
    PageArtifacts,
    Stylesheet,
    StylesheetHeader,
    UnusedCSSAudit,
    UsageRule,
    load_artifacts,
    load_unused_audits,
)

__all__ = [
    "ClassificationRecord",
    "DeliveryStrategy",
    "Diagnostic",
    "OptimizeReport",
    "PageArtifacts",
    "Severity",
    "Stylesheet",
    "StylesheetHeader",
    "UnusedCSSAudit",
    "UsageRule",
    "load_artifacts",
    "load_unused_audits",
    "select_strategy",
]
