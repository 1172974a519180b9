"""Classification record and delivery strategy for a single stylesheet."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class DeliveryStrategy(Enum):
    """How a stylesheet reference is rewritten in the page."""

    INLINE = "inline"
    EXTRACT_AND_DEFER = "extract_and_defer"
    PRELOAD_DEFER = "preload_defer"


@dataclass(frozen=True)
class ClassificationRecord:
    """Per-stylesheet verdict produced by the classifier.

    The transform step may swap ``src``, ``content`` and ``used_content`` for
    their processed versions; the flags are fixed at classification time.

    Attributes:
        src: Absolute source URL, or the URL path once transformed.
        is_from_same_site: Whether the stylesheet shares the page's origin.
        content: Full stylesheet text.
        used_content: Rule slices exercised during the page load, newline-joined.
        is_small_size: Estimated token length is within the inlining budget.
        is_critical: The stylesheet blocked first paint.
        is_low_usage: The unused-CSS audit reported waste above the threshold.
    """

    src: str
    is_from_same_site: bool
    content: str
    used_content: str
    is_small_size: bool
    is_critical: bool
    is_low_usage: bool

    def to_dict(self, include_content: bool = False) -> dict[str, object]:
        data: dict[str, object] = {
            "src": self.src,
            "is_from_same_site": self.is_from_same_site,
            "is_small_size": self.is_small_size,
            "is_critical": self.is_critical,
            "is_low_usage": self.is_low_usage,
            "strategy": select_strategy(self).value,
        }
        if include_content:
            data["content"] = self.content
            data["used_content"] = self.used_content
        return data


def select_strategy(record: ClassificationRecord) -> DeliveryStrategy:
    """Pick the delivery strategy for *record*.

    Small files are inlined. Large files with low usage ship only their used
    rules up front. Everything else is preloaded off the render-blocking path.
    ``is_critical`` does not take part in the decision.
    """
    if record.is_small_size:
        return DeliveryStrategy.INLINE
    if record.is_low_usage:
        return DeliveryStrategy.EXTRACT_AND_DEFER
    return DeliveryStrategy.PRELOAD_DEFER
