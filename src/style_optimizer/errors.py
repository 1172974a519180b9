"""Error hierarchy for the stylesheet optimizer."""
from __future__ import annotations


class OptimizerError(Exception):
    """Base error for all style_optimizer errors."""

    def __init__(self, message: str, *, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class TransformError(OptimizerError):
    """The CSS pipeline rejected a stylesheet or its output could not be written."""

    def __init__(
        self,
        message: str,
        *,
        url: str = "",
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message, cause=cause)
        self.url = url


class ArtifactError(OptimizerError):
    """Telemetry input is missing data required to run a pass."""
