"""style_optimizer: telemetry-driven rewriting of render-blocking stylesheets."""
from __future__ import annotations

__version__ = "0.1.0"

from style_optimizer.classifier import classify
from style_optimizer.config import OptimizerConfig
from style_optimizer.dom import Document, SoupDocument
from style_optimizer.optimizer import optimize

__all__ = [
    "Document",
    "OptimizerConfig",
    "SoupDocument",
    "__version__",
    "classify",
    "optimize",
]
