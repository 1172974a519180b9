from style_optimizer.transform.adapter import TransformResult, transform_all, transform_record, write_output
from style_optimizer.transform.base import CssTransformer, TransformerChain, chain
from style_optimizer.transform.minify import CssutilsMinifier, RcssminMinifier

__all__ = [
    "CssTransformer",
    "CssutilsMinifier",
    "RcssminMinifier",
    "TransformResult",
    "TransformerChain",
    "chain",
    "default_transformer",
    "transform_all",
    "transform_record",
    "write_output",
]


def default_transformer() -> CssTransformer:
    """Return the transformer used when the caller supplies none."""
    return RcssminMinifier()
