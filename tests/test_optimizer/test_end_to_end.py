"""End-to-end tests for a full optimize pass."""

import threading

from style_optimizer.config import OptimizerConfig
from style_optimizer.dom import SoupDocument
from style_optimizer.errors import TransformError
from style_optimizer.model.record import DeliveryStrategy
from style_optimizer.model.telemetry import PageArtifacts, UnusedCSSAudit
from style_optimizer.optimizer import optimize
from style_optimizer.rewriter import RECONCILE_MARKER

PAGE = "https://example.com/"
SMALL_CSS = "body{margin:0}" + "".join(f".s{i}{{color:red}}" for i in range(100))
LARGE_CSS = "".join(f".rule-{i}{{color:#123456;margin:{i}px}}" for i in range(1500))


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class IdentityTransformer:
    def __init__(self) -> None:
        self.calls: list[str] = []
        self._lock = threading.Lock()

    def transform(self, css: str, *, source_path: str, dest_path: str) -> str:
        with self._lock:
            self.calls.append(source_path)
        return css


def _sheet(sheet_id: str, url: str, content: str) -> dict:
    return {"header": {"styleSheetId": sheet_id, "isInline": False, "sourceURL": url}, "content": content}


def _artifacts(stylesheets: list[dict], rules: list[dict] | None = None, blocking: list[str] | None = None) -> PageArtifacts:
    return PageArtifacts.from_dict(
        {
            "URL": {"finalUrl": PAGE},
            "CSSUsage": {"rules": rules or [], "stylesheets": stylesheets},
            "TagsBlockingFirstPaint": [{"tag": {"url": u}} for u in blocking or []],
        }
    )


def _page(*hrefs: str) -> SoupDocument:
    links = "".join(f'<link rel="stylesheet" href="{h}">' for h in hrefs)
    return SoupDocument.from_html(f"<html><head>{links}</head><body><main>content</main></body></html>")


def _config(tmp_path) -> OptimizerConfig:
    return OptimizerConfig(src_dir=str(tmp_path / "site"), dest_dir=str(tmp_path / "dist"))


# ---------------------------------------------------------------------------
# Scenarios
# ---------------------------------------------------------------------------


class TestScenarios:
    def test_small_stylesheet_inlined(self, tmp_path):
        doc = _page("/css/small.css")
        artifacts = _artifacts([_sheet("1", "https://example.com/css/small.css", SMALL_CSS)])
        report = optimize(doc, artifacts, [], _config(tmp_path), transformer=IdentityTransformer())

        assert report.applied == {"https://example.com/css/small.css": DeliveryStrategy.INLINE}
        assert doc.query("link") == []
        [style] = doc.query("style")
        assert style.string == SMALL_CSS
        assert (tmp_path / "dist" / "css" / "small.css").read_text(encoding="utf-8") == SMALL_CSS

    def test_low_usage_stylesheet_extracted(self, tmp_path):
        url = "https://example.com/css/large.css"
        doc = _page("/css/large.css")
        artifacts = _artifacts(
            [_sheet("1", url, LARGE_CSS)],
            rules=[
                {"styleSheetId": "1", "startOffset": 0, "endOffset": 100},
                {"styleSheetId": "1", "startOffset": 500, "endOffset": 600},
            ],
        )
        report = optimize(
            doc, artifacts, [UnusedCSSAudit(url, 75)], _config(tmp_path), transformer=IdentityTransformer()
        )

        assert report.applied == {url: DeliveryStrategy.EXTRACT_AND_DEFER}
        [style] = doc.query('style[data-replaced-url="/css/large.css"]')
        assert style.string == LARGE_CSS[0:100] + "\n" + LARGE_CSS[500:600]
        assert len(doc.query(f"script[{RECONCILE_MARKER}]")) == 1
        assert doc.query('link[rel="stylesheet"]') == []

    def test_well_used_large_stylesheet_preloaded(self, tmp_path):
        url = "https://example.com/css/large.css"
        for audits in ([UnusedCSSAudit(url, 30)], []):
            doc = _page("/css/large.css")
            artifacts = _artifacts([_sheet("1", url, LARGE_CSS)])
            report = optimize(doc, artifacts, audits, _config(tmp_path), transformer=IdentityTransformer())

            assert report.applied == {url: DeliveryStrategy.PRELOAD_DEFER}
            assert len(doc.query('link[rel="preload"][as="style"]')) == 1
            assert len(doc.query('noscript > link[rel="stylesheet"]')) == 1
            assert doc.query("style") == []

    def test_cross_site_stylesheet_passed_through(self, tmp_path):
        url = "https://cdn.other.net/lib.css"
        transformer = IdentityTransformer()
        doc = _page(url)
        artifacts = _artifacts([_sheet("1", url, SMALL_CSS)])
        report = optimize(doc, artifacts, [UnusedCSSAudit(url, 90)], _config(tmp_path), transformer=transformer)

        assert report.applied == {}
        assert transformer.calls == []
        assert report.written_files == []
        assert not (tmp_path / "dist").exists()
        [link] = doc.query('link[rel="stylesheet"]')
        assert link["href"] == url

    def test_unmatched_link_reported_once(self, tmp_path):
        doc = _page("/css/small.css", "/css/unknown.css")
        artifacts = _artifacts([_sheet("1", "https://example.com/css/small.css", SMALL_CSS)])
        report = optimize(doc, artifacts, [], _config(tmp_path), transformer=IdentityTransformer())

        misses = report.diagnostics_for("lookup_miss")
        assert [d.url for d in misses] == ["https://example.com/css/unknown.css"]
        assert [link["href"] for link in doc.query('link[rel="stylesheet"]')] == ["/css/unknown.css"]


# ---------------------------------------------------------------------------
# Pass-level behaviour
# ---------------------------------------------------------------------------


class TestOptimizePass:
    def test_mixed_page(self, tmp_path):
        large = "https://example.com/css/large.css"
        doc = _page("/css/small.css", "/css/large.css", "/css/other.css", "https://cdn.other.net/lib.css")
        artifacts = _artifacts(
            [
                _sheet("1", "https://example.com/css/small.css", SMALL_CSS),
                _sheet("2", large, LARGE_CSS),
                _sheet("3", "https://example.com/css/other.css", LARGE_CSS),
                _sheet("4", "https://cdn.other.net/lib.css", LARGE_CSS),
                {"header": {"styleSheetId": "5", "isInline": True, "sourceURL": PAGE}, "content": "p{}"},
            ],
            rules=[{"styleSheetId": "2", "startOffset": 0, "endOffset": 10}],
            blocking=[large],
        )
        report = optimize(doc, artifacts, [UnusedCSSAudit(large, 80)], _config(tmp_path), transformer=IdentityTransformer())

        assert [r.src for r in report.records] == [
            "https://example.com/css/small.css",
            large,
            "https://example.com/css/other.css",
            "https://cdn.other.net/lib.css",
        ]
        assert report.records[1].is_critical is True
        assert list(report.applied.values()) == [
            DeliveryStrategy.INLINE,
            DeliveryStrategy.EXTRACT_AND_DEFER,
            DeliveryStrategy.PRELOAD_DEFER,
        ]
        assert len(report.written_files) == 3
        assert len(doc.query(f"script[{RECONCILE_MARKER}]")) == 1

    def test_transform_failure_leaves_link(self, tmp_path):
        class Rejecting(IdentityTransformer):
            def transform(self, css, *, source_path, dest_path):
                if source_path.endswith("bad.css"):
                    raise TransformError("parse error", url=source_path)
                return super().transform(css, source_path=source_path, dest_path=dest_path)

        doc = _page("/css/bad.css", "/css/small.css")
        artifacts = _artifacts(
            [
                _sheet("1", "https://example.com/css/bad.css", SMALL_CSS),
                _sheet("2", "https://example.com/css/small.css", SMALL_CSS),
            ]
        )
        report = optimize(doc, artifacts, [], _config(tmp_path), transformer=Rejecting())

        assert list(report.applied) == ["https://example.com/css/small.css"]
        assert [d.rule for d in report.diagnostics] == ["transform_error"]
        assert [link["href"] for link in doc.query('link[rel="stylesheet"]')] == ["/css/bad.css"]
        assert not (tmp_path / "dist" / "css" / "bad.css").exists()

    def test_default_transformer_minifies_output(self, tmp_path):
        doc = _page("/css/small.css")
        artifacts = _artifacts([_sheet("1", "https://example.com/css/small.css", "body {\n  margin : 0 ;\n}\n")])
        report = optimize(doc, artifacts, [], _config(tmp_path))

        assert report.applied["https://example.com/css/small.css"] is DeliveryStrategy.INLINE
        written = (tmp_path / "dist" / "css" / "small.css").read_text(encoding="utf-8")
        assert "\n" not in written
        assert doc.query("style")[0].string == written

    def test_default_transformer_keeps_keyframes(self, tmp_path):
        css = (
            ".spin { animation: spin 1s linear infinite }\n"
            "@keyframes spin { from { transform: rotate(0deg) } to { transform: rotate(360deg) } }\n"
            "@media (min-width: 600px) { a { color: red } }\n"
        )
        doc = _page("/css/anim.css")
        artifacts = _artifacts([_sheet("1", "https://example.com/css/anim.css", css)])
        report = optimize(doc, artifacts, [], _config(tmp_path))

        assert report.diagnostics == []
        written = (tmp_path / "dist" / "css" / "anim.css").read_text(encoding="utf-8")
        for fragment in ("@keyframes spin", "rotate(360deg)", "@media", "animation:spin 1s linear infinite"):
            assert fragment in written
        assert doc.query("style")[0].string == written

    def test_script_emitted_without_extraction(self, tmp_path):
        doc = _page()
        report = optimize(doc, _artifacts([]), [], _config(tmp_path), transformer=IdentityTransformer())
        assert report.records == []
        assert len(doc.query(f"script[{RECONCILE_MARKER}]")) == 1
