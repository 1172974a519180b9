"""Transform adapter: run the CSS pipeline over classified stylesheets and persist the output."""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass, field, replace
from pathlib import Path
from urllib.parse import unquote, urlsplit

from style_optimizer.config import OptimizerConfig
from style_optimizer.errors import TransformError
from style_optimizer.model.diagnostic import Diagnostic, Severity
from style_optimizer.model.record import ClassificationRecord
from style_optimizer.transform.base import CssTransformer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransformResult:
    """A record after transformation and where its full content goes on disk.

    ``dest_path`` is None for cross-site records, which are never transformed.
    """

    record: ClassificationRecord
    dest_path: Path | None = None


@dataclass
class TransformBatch:
    """Joined outcome of transforming every record of a page."""

    results: list[TransformResult] = field(default_factory=list)
    failed_urls: set[str] = field(default_factory=set)
    written_files: list[str] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)


def write_output(path: Path, content: str) -> None:
    """Write *content* to *path*, creating parent directories as needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def _resolve_paths(url: str, src_dir: str, dest_dir: str) -> tuple[str, Path, Path]:
    pathname = urlsplit(url).path or "/"
    relative = unquote(pathname).lstrip("/")
    dest_root = Path(dest_dir).resolve()
    dest_path = (dest_root / relative).resolve()
    if dest_root not in dest_path.parents:
        raise TransformError(f"{url} does not map to a file under {dest_root}", url=url)
    source_path = Path(src_dir).resolve() / relative
    return pathname, source_path, dest_path


def transform_record(
    record: ClassificationRecord,
    transformer: CssTransformer,
    src_dir: str,
    dest_dir: str,
) -> TransformResult:
    """Run *transformer* over the full and used content of a same-site *record*.

    The returned record's ``src`` becomes the URL path. Cross-site records
    come back unchanged. Nothing is written here.
    """
    if not record.is_from_same_site:
        return TransformResult(record=record)

    pathname, source_path, dest_path = _resolve_paths(record.src, src_dir, dest_dir)
    content = transformer.transform(
        record.content, source_path=str(source_path), dest_path=str(dest_path)
    )
    used_content = transformer.transform(
        record.used_content, source_path=str(source_path), dest_path=str(dest_path)
    )
    return TransformResult(
        record=replace(record, src=pathname, content=content, used_content=used_content),
        dest_path=dest_path,
    )


def _failure(url: str, reason: str) -> Diagnostic:
    logger.warning("Leaving stylesheet %s unmodified: %s", url, reason)
    return Diagnostic(
        rule="transform_error",
        severity=Severity.WARNING,
        message=f"Transform failed, stylesheet left unmodified: {reason}",
        url=url,
    )


def transform_all(
    records: list[ClassificationRecord],
    transformer: CssTransformer,
    config: OptimizerConfig,
) -> TransformBatch:
    """Transform every same-site record concurrently, then write the results.

    All transforms are joined before anything is written, so a stylesheet
    that failed or timed out never leaves a file behind. A failure only
    drops that one stylesheet from the batch.
    """
    batch = TransformBatch()
    slots: list[TransformResult | None] = [None] * len(records)
    futures: dict[int, Future[TransformResult]] = {}

    pool = ThreadPoolExecutor(max_workers=max(1, config.max_workers))
    try:
        for i, record in enumerate(records):
            if record.is_from_same_site:
                futures[i] = pool.submit(
                    transform_record, record, transformer, config.src_dir, config.dest_dir
                )
            else:
                slots[i] = TransformResult(record=record)

        for i, future in futures.items():
            url = records[i].src
            try:
                slots[i] = future.result(timeout=config.transform_timeout)
            except FutureTimeoutError:
                future.cancel()
                batch.failed_urls.add(url)
                batch.diagnostics.append(
                    _failure(url, f"timed out after {config.transform_timeout}s")
                )
            except TransformError as exc:
                batch.failed_urls.add(url)
                batch.diagnostics.append(_failure(url, str(exc)))
            except Exception as exc:
                batch.failed_urls.add(url)
                batch.diagnostics.append(_failure(url, f"{type(exc).__name__}: {exc}"))
    finally:
        pool.shutdown(wait=False, cancel_futures=True)

    for i, result in enumerate(slots):
        if result is None:
            continue
        if result.dest_path is not None:
            try:
                write_output(result.dest_path, result.record.content)
            except OSError as exc:
                batch.failed_urls.add(records[i].src)
                batch.diagnostics.append(_failure(records[i].src, f"cannot write output: {exc}"))
                continue
            batch.written_files.append(str(result.dest_path))
        batch.results.append(result)

    logger.info(
        "Transformed %d of %d same-site stylesheet(s), %d failed",
        len(batch.written_files),
        len(futures),
        len(batch.failed_urls),
    )
    return batch
