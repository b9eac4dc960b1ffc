"""Batch orchestration: export pages to Markdown, import Markdown as pages"""

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from pathlib import Path
from typing import Any, Callable, Generic, Optional, TypeVar

from pydantic import ValidationError

from pagemd.core.blocks import ImageHook
from pagemd.core.cache import Clock, TTLCache, cache_key
from pagemd.core.document import document_from_markdown, document_to_markdown, export_file_name
from pagemd.core.errors import (
    BatchRequestError,
    BatchStateError,
    ConversionFailure,
    NotFoundError,
    UnavailableError,
    ValidationFailure,
)
from pagemd.core.filters import filter_pages
from pagemd.core.models import (
    BatchResult,
    BatchState,
    BlockNode,
    Document,
    ExportedPage,
    FilterCriteria,
    ImportedPage,
    ItemError,
    PageProperties,
    SourceFile,
    ValidationReport,
    plain_text,
)
from pagemd.core.ports import PageSink, PageSource
from pagemd.core.validate import validate_document, validate_documents


logger = logging.getLogger(__name__)

P = TypeVar("P")
R = TypeVar("R")


def _item_error(item_id: str, exc: Exception) -> ItemError:
    return ItemError(item_id=item_id, message=str(exc) or type(exc).__name__, kind=getattr(exc, "kind", "error"))


class BatchRun(Generic[P, R]):
    """One batch: pending -> running -> completed, never re-entering running.

    Items run on a pool of at most `max_workers` threads. A failing item is
    recorded and never affects its siblings.
    """

    def __init__(
        self,
        label: str,
        items: list[tuple[str, P]],
        work: Callable[[P], R],
        max_workers: int = 4,
        ):
        self.label = label
        self.items = items
        self.work = work
        self.max_workers = max(1, max_workers)
        self.state = BatchState.pending

    def _attempt(self, item_id: str, payload: P) -> tuple[bool, Any]:
        try:
            return True, self.work(payload)
        except Exception as e:
            logger.warning(
                "Batch item failed",
                extra={"batch": self.label, "item_id": item_id, "error": str(e)},
            )
            return False, _item_error(item_id, e)

    def run(self, batch_errors: Optional[list[ItemError]] = None) -> BatchResult:
        if self.state is not BatchState.pending:
            raise BatchStateError(f"Batch '{self.label}' already {self.state.value}")
        self.state = BatchState.running
        logger.info("Starting batch", extra={"batch": self.label, "item_count": len(self.items)})

        outcomes: list[tuple[bool, Any]] = []
        if self.items:
            with ThreadPoolExecutor(max_workers=min(self.max_workers, len(self.items))) as pool:
                futures = [pool.submit(self._attempt, item_id, payload) for item_id, payload in self.items]
                outcomes = [f.result() for f in futures]

        results = [value for ok, value in outcomes if ok]
        errors = [value for ok, value in outcomes if not ok]
        self.state = BatchState.completed
        logger.info(
            "Completed batch",
            extra={"batch": self.label, "succeeded": len(results), "failed": len(errors)},
        )
        return BatchResult(
            total=len(self.items),
            succeeded=len(results),
            failed=len(errors),
            per_item_results=results,
            per_item_errors=errors,
            batch_errors=batch_errors or [],
            state=self.state,
        )


class BatchOrchestrator:
    """Drives export and import batches against a page source and sink.

    Owns a read-through TTL cache in front of the metadata listing; the cache
    lives and dies with the orchestrator instance.
    """

    def __init__(
        self,
        source: PageSource,
        sink: Optional[PageSink] = None,
        *,
        max_workers: int = 4,
        cache_ttl: float = 300.0,
        clock: Clock = time.monotonic,
        timeout: Optional[float] = None,
        image_hook: Optional[ImageHook] = None,
        custom_fields: Optional[dict[str, Any]] = None,
        default_status: Optional[str] = None,
        ):
        self.source = source
        self.sink = sink
        self.max_workers = max(1, max_workers)
        self.timeout = timeout
        self.image_hook = image_hook
        self.custom_fields = custom_fields or {}
        self.default_status = default_status
        self.cache: TTLCache[tuple[PageProperties, ...]] = TTLCache(cache_ttl, clock)
        self.last_listing_error: Optional[ItemError] = None
        # A slot is held until the external call returns, even after its caller timed out.
        self._slots = threading.BoundedSemaphore(self.max_workers)
        self._calls: Optional[ThreadPoolExecutor] = None
        self._calls_lock = threading.Lock()

    def __enter__(self) -> "BatchOrchestrator":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        with self._calls_lock:
            if self._calls is not None:
                self._calls.shutdown(wait=False, cancel_futures=True)
                self._calls = None

    def _call_pool(self) -> ThreadPoolExecutor:
        with self._calls_lock:
            if self._calls is None:
                self._calls = ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="pagemd-call")
            return self._calls

    def _call(self, fn: Callable[..., R], *args: Any) -> R:
        """Invoke an external operation with at most `max_workers` calls in flight.

        With a timeout set, waiting for a free slot and running the call are
        each bounded by it, and either overrun becomes UnavailableError. A
        timed-out call keeps its slot until it actually returns.
        """
        name = getattr(fn, "__name__", "call")
        if self.timeout is None:
            with self._slots:
                return fn(*args)

        if not self._slots.acquire(timeout=self.timeout):
            raise UnavailableError(f"{name} timed out after {self.timeout}s waiting for a free call slot")
        try:
            future = self._call_pool().submit(fn, *args)
        except BaseException:
            self._slots.release()
            raise
        future.add_done_callback(lambda _: self._slots.release())
        try:
            return future.result(timeout=self.timeout)
        except FutureTimeout:
            logger.warning("External call timed out", extra={"call": name, "timeout": self.timeout})
            raise UnavailableError(f"{name} timed out after {self.timeout}s")

    # --- listing ---

    def list_pages(self, scope: Optional[dict[str, Any]] = None) -> list[PageProperties]:
        """Cached page metadata; a failed listing yields [] and sets `last_listing_error`."""
        self.last_listing_error = None
        key = cache_key("list_page_metadata", scope)
        try:
            return list(self.cache.get_or_load(key, lambda: tuple(self._call(self.source.list_page_metadata, scope))))
        except Exception as e:
            self.last_listing_error = _item_error("listing", e)
            logger.error("Page listing failed", extra={"scope": scope, "error": str(e)})
            return []

    # --- export ---

    def export_page(self, page_id: str, pages: Optional[dict[str, PageProperties]] = None) -> ExportedPage:
        """Fetch one page's blocks and render it as a Markdown document."""
        if pages is None:
            pages = {p.id: p for p in self.list_pages()}
        props = pages.get(page_id)
        if props is None:
            if self.last_listing_error is not None:
                raise UnavailableError(f"Page metadata unavailable: {self.last_listing_error.message}")
            raise NotFoundError(page_id)

        nodes = self._call(self.source.fetch_block_tree, page_id)
        try:
            doc = Document.build(props, [BlockNode.model_validate(n) for n in nodes])
        except ValidationError as e:
            raise ConversionFailure(
                f"Page {page_id} has an unreadable block structure ({e.error_count()} error(s))"
            ) from e
        markdown = document_to_markdown(doc, image_hook=self.image_hook, custom_fields=self.custom_fields)
        return ExportedPage(
            page_id=page_id,
            title=props.title or "Untitled",
            slug=props.slug or page_id,
            file_name=export_file_name(props),
            markdown=markdown,
            word_count=sum(len(plain_text(n.runs).split()) for n in doc.walk()),
        )

    def export_batch(
        self,
        page_ids: Optional[list[str]] = None,
        criteria: Optional[FilterCriteria] = None,
        scope: Optional[dict[str, Any]] = None,
        ) -> BatchResult:
        """Export the given pages, or every listed page matching criteria when none are given."""
        if not page_ids and criteria is None:
            raise BatchRequestError("No page ids given and no filter criteria to derive them from")

        listed = self.list_pages(scope)
        listing_errors = [self.last_listing_error] if self.last_listing_error else []
        if not page_ids:
            page_ids = [p.id for p in filter_pages(listed, criteria)]
        pages = {p.id: p for p in listed}

        run = BatchRun("export", [(pid, pid) for pid in page_ids], lambda pid: self.export_page(pid, pages), self.max_workers)
        return run.run(batch_errors=listing_errors)

    # --- import ---

    def import_file(self, file: SourceFile) -> ImportedPage:
        """Validate, transcode and write one Markdown document as a page."""
        if self.sink is None:
            raise BatchRequestError("A page sink is required for import")
        outcome = validate_document(file.content, file.file_name)
        if not outcome.valid:
            raise ValidationFailure(file.file_name, outcome.issues)

        parsed = document_from_markdown(file.content, file.file_name)
        props = parsed.document.properties
        if props.status is None and self.default_status:
            props = props.model_copy(update={"status": self.default_status})
        blocks = list(parsed.document.walk())
        written = self._call(self.sink.create_or_update_page, props, blocks)
        return ImportedPage(
            file_name=file.file_name,
            page_id=written.page_id,
            url=written.url,
            title=props.title,
            block_count=len(blocks),
        )

    def import_batch(self, files: list[SourceFile]) -> BatchResult:
        if not files:
            raise BatchRequestError("No files provided")
        if self.sink is None:
            raise BatchRequestError("A page sink is required for import")
        run = BatchRun("import", [(f.file_name, f) for f in files], self.import_file, self.max_workers)
        return run.run()

    def validate_batch(self, files: list[SourceFile]) -> ValidationReport:
        return validate_documents(files)


def write_exports(result: BatchResult, output_dir: Path) -> list[Path]:
    """Write each exported page to `output_dir/<slug or id>.md`."""
    output_dir.mkdir(parents=True, exist_ok=True)
    written = []
    for page in result.per_item_results:
        if not isinstance(page, ExportedPage):
            continue
        path = output_dir / Path(page.file_name).name
        path.write_text(page.markdown, encoding="utf-8")
        written.append(path)
    return written
