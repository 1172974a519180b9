"""Delivery rewriter: swaps stylesheet links for their optimized markup."""

from __future__ import annotations

import logging
from typing import Any, Iterable
from urllib.parse import urljoin, urlsplit

from style_optimizer.classifier import is_same_site
from style_optimizer.dom import Document
from style_optimizer.model.diagnostic import Diagnostic, Severity
from style_optimizer.model.record import ClassificationRecord, DeliveryStrategy, select_strategy

__all__ = [
    "LINK_SELECTOR",
    "RECONCILE_MARKER",
    "RECONCILE_SCRIPT",
    "REPLACED_URL_ATTR",
    "apply_strategy",
    "insert_reconcile_script",
    "rewrite_stylesheets",
]

logger = logging.getLogger(__name__)

LINK_SELECTOR = 'link[href][rel~="stylesheet" i]'
REPLACED_URL_ATTR = "data-replaced-url"
RECONCILE_MARKER = "data-style-reconciler"

PRELOAD_ONLOAD = "this.onload=null;this.rel='stylesheet'"

# Once the page has loaded, swap every extracted <style> back for the full stylesheet.
RECONCILE_SCRIPT = """
window.addEventListener('load', function () {
  var tempStyles = document.querySelectorAll('[data-replaced-url]');
  Array.prototype.forEach.call(tempStyles, function (ele) {
    var link = document.createElement('link');
    link.rel = 'stylesheet';
    link.href = ele.getAttribute('data-replaced-url');
    ele.parentNode.insertBefore(link, ele);
    ele.parentNode.removeChild(ele);
  });
});
"""


def _normalize_path(path: str) -> str:
    return "/" + path.lstrip("/")


def apply_strategy(document: Document, element: Any, record: ClassificationRecord) -> DeliveryStrategy:
    """Replace the stylesheet *element* with the markup for *record*'s strategy."""
    strategy = select_strategy(record)
    if strategy is DeliveryStrategy.INLINE:
        document.insert_before(element, document.create_element("style", text=record.content))
    elif strategy is DeliveryStrategy.EXTRACT_AND_DEFER:
        document.insert_before(
            element,
            document.create_element(
                "style", {REPLACED_URL_ATTR: record.src}, text=record.used_content
            ),
        )
    else:
        preload = document.create_element(
            "link",
            {"rel": "preload", "href": record.src, "as": "style", "onload": PRELOAD_ONLOAD},
        )
        fallback = document.create_element("noscript")
        document.append_child(
            fallback, document.create_element("link", {"rel": "stylesheet", "href": record.src})
        )
        document.insert_before(element, preload)
        document.insert_before(element, fallback)
    document.remove(element)
    return strategy


def rewrite_stylesheets(
    document: Document,
    records: Iterable[ClassificationRecord],
    page_url: str,
    skipped_urls: Iterable[str] = (),
) -> tuple[dict[str, DeliveryStrategy], list[Diagnostic]]:
    """Rewrite every stylesheet link of *document* that has a transformed record.

    Same-site records are matched by URL path, cross-site records by absolute
    URL and left in place. Links whose URL is in *skipped_urls* (stylesheets
    that failed earlier) are left alone without a further diagnostic.

    Returns the strategy applied per link URL and the diagnostics raised.
    """
    same_site: dict[str, ClassificationRecord] = {}
    cross_site: dict[str, ClassificationRecord] = {}
    for record in records:
        if record.is_from_same_site:
            same_site[_normalize_path(record.src)] = record
        else:
            cross_site[record.src] = record
    skipped = set(skipped_urls)

    applied: dict[str, DeliveryStrategy] = {}
    diagnostics: list[Diagnostic] = []
    for element in document.query(LINK_SELECTOR):
        href = document.get_attribute(element, "href") or ""
        url = urljoin(page_url, href)

        if url in skipped:
            continue
        if not is_same_site(page_url, url):
            if url in cross_site:
                diagnostics.append(
                    Diagnostic(
                        rule="cross_origin",
                        severity=Severity.INFO,
                        message="Cross-origin stylesheet left unmodified",
                        url=url,
                    )
                )
                continue
        else:
            record = same_site.get(_normalize_path(urlsplit(url).path))
            if record is not None:
                applied[url] = apply_strategy(document, element, record)
                logger.debug("Applied %s to %s", applied[url].value, url)
                continue

        logger.warning("Lack information of stylesheet which url is %s", url)
        diagnostics.append(
            Diagnostic(
                rule="lookup_miss",
                severity=Severity.WARNING,
                message="No classification record for stylesheet, left unmodified",
                url=url,
            )
        )

    return applied, diagnostics


def insert_reconcile_script(document: Document) -> bool:
    """Append the load-time reconciliation script once per document.

    Returns False if the document already carries it.
    """
    if document.query(f"script[{RECONCILE_MARKER}]"):
        return False
    script = document.create_element("script", {RECONCILE_MARKER: ""}, text=RECONCILE_SCRIPT)
    document.append_child(document.body(), script)
    return True
