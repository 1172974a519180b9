"""CSS minifiers: rcssmin for the default pipeline, cssutils for a strict parse."""

from __future__ import annotations

import logging
import threading
import xml.dom

import cssutils
import rcssmin
from cssutils.serialize import CSSSerializer

from style_optimizer.errors import TransformError

logger = logging.getLogger(__name__)

# cssutils keeps its serializer and raise-on-error switch in module globals.
_CSSUTILS_LOCK = threading.Lock()


class RcssminMinifier:
    """Strip whitespace and comments without parsing the stylesheet.

    Selectors, at-rules and values pass through as written, so syntax newer
    than any CSS parser (nesting, ``:has()``, ``@layer``) survives unchanged.
    """

    def __init__(self, keep_bang_comments: bool = False) -> None:
        self._keep_bang_comments = keep_bang_comments

    def transform(self, css: str, *, source_path: str, dest_path: str) -> str:
        if not css.strip():
            return ""
        text = rcssmin.cssmin(css, keep_bang_comments=self._keep_bang_comments)
        logger.debug("Minified %s: %d -> %d chars", source_path, len(css), len(text))
        return text


def _no_fetch(url: str) -> tuple[None, None]:
    """Fetcher that refuses to resolve ``@import`` targets."""
    return None, None


class CssutilsMinifier:
    """Minify stylesheets by round-tripping them through cssutils.

    Any parse error raises :class:`TransformError`, so only CSS that cssutils
    fully understands is rewritten. At-rules it does not model, such as
    ``@keyframes`` and ``@layer``, are serialised as written. ``@import``
    rules are kept and never fetched.

    Transforms hold a process-wide lock while cssutils runs.
    """

    def __init__(self, loglevel: int = logging.CRITICAL) -> None:
        self._serializer = CSSSerializer()
        self._serializer.prefs.useMinified()
        self._serializer.prefs.keepUnknownAtRules = True
        self._loglevel = loglevel

    def transform(self, css: str, *, source_path: str, dest_path: str) -> str:
        if not css.strip():
            return ""
        with _CSSUTILS_LOCK:
            raising = cssutils.log.raiseExceptions
            previous = cssutils.ser
            try:
                parser = cssutils.CSSParser(
                    loglevel=self._loglevel,
                    raiseExceptions=True,
                    fetcher=_no_fetch,
                    validate=False,
                )
                sheet = parser.parseString(css)
                cssutils.setSerializer(self._serializer)
                text = sheet.cssText
            except (xml.dom.DOMException, ValueError) as exc:
                raise TransformError(
                    f"cssutils rejected {source_path}: {exc}", url=source_path, cause=exc
                ) from exc
            finally:
                cssutils.setSerializer(previous)
                cssutils.log.raiseExceptions = raising

        if isinstance(text, bytes):
            text = text.decode(sheet.encoding or "utf-8")
        logger.debug("Minified %s: %d -> %d chars", source_path, len(css), len(text))
        return text
