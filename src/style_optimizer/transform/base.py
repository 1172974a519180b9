"""Base protocol for CSS transformers."""

from __future__ import annotations

from typing import Protocol


class CssTransformer(Protocol):
    """A stylesheet-text to stylesheet-text processing step (prefixing, minification, ...).

    Implementations raise :class:`~style_optimizer.errors.TransformError` when
    they reject their input.
    """

    def transform(self, css: str, *, source_path: str, dest_path: str) -> str: ...


class TransformerChain:
    """Run several transformers in order, feeding each the previous output."""

    def __init__(self, transformers: list[CssTransformer]) -> None:
        self.transformers = list(transformers)

    def transform(self, css: str, *, source_path: str, dest_path: str) -> str:
        for t in self.transformers:
            css = t.transform(css, source_path=source_path, dest_path=dest_path)
        return css


def chain(*transformers: CssTransformer) -> TransformerChain:
    return TransformerChain(list(transformers))
