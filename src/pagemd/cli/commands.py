"""CLI command implementations"""

from pathlib import Path
from typing import Annotated, Optional

import typer

from pagemd.config import Settings, load_config
from pagemd.core.errors import PagemdError
from pagemd.core.files import load_sources
from pagemd.core.filters import filter_pages
from pagemd.core.models import BatchResult, DateRange, FilterCriteria
from pagemd.core.pipeline import BatchOrchestrator, write_exports
from pagemd.core.validate import validate_documents
from pagemd.crud.database import init_db, make_engine, reset_db
from pagemd.crud.pages import SQLPageStore
from pagemd.log import configure_logging


StatusOpt = Annotated[Optional[str], typer.Option("--status", help="Only pages with this status")]
TypeOpt = Annotated[Optional[str], typer.Option("--type", help="Only pages of this type")]
CategoryOpt = Annotated[Optional[str], typer.Option("--category", help="Only pages in this category")]
TagOpt = Annotated[Optional[list[str]], typer.Option("--tag", help="Pages sharing any of these tags (repeatable)")]
StartOpt = Annotated[Optional[str], typer.Option("--from", help="Earliest page date (inclusive)")]
EndOpt = Annotated[Optional[str], typer.Option("--to", help="Latest page date (inclusive)")]
KeywordOpt = Annotated[Optional[str], typer.Option("--keyword", help="Substring of title, summary or category")]
VerboseOpt = Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")]


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None, verbose: bool = False) -> Settings:
    """Load config with standard CLI error handling."""
    try:
        settings = load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))
    configure_logging(settings.log_level, verbose)
    return settings


def _store(settings: Settings) -> SQLPageStore:
    engine = make_engine(settings.db_url)
    init_db(engine)
    return SQLPageStore(engine, base_url=settings.base_url)


def _orchestrator(settings: Settings) -> BatchOrchestrator:
    store = _store(settings)
    return BatchOrchestrator(
        store, store,
        max_workers=settings.max_workers,
        cache_ttl=settings.cache_ttl,
        timeout=settings.call_timeout,
        default_status=settings.default_status,
    )


def _criteria(status, type_, category, tags, start, end, keyword) -> Optional[FilterCriteria]:
    """Build criteria from options; None when no option was given."""
    if not any([status, type_, category, tags, start, end, keyword]):
        return None
    return FilterCriteria(
        status=status, type=type_, category=category, tags=tags or None,
        date_range=DateRange(start=start, end=end) if (start or end) else None,
        keyword=keyword,
    )


def _echo_errors(result: BatchResult) -> None:
    for err in result.batch_errors:
        typer.echo(f"  ! {err.item_id}: {err.message}", err=True)
    for err in result.per_item_errors:
        typer.echo(f"  failed [{err.kind}]: {err.item_id}: {err.message}", err=True)


def init_cmd(
    reset: Annotated[bool, typer.Option("--reset", help="Drop and recreate all tables")] = False,
    ):
    """Initialize the local page store. Use --reset to clear existing data."""
    settings = _settings()
    engine = make_engine(settings.db_url)
    if reset:
        reset_db(engine)
        typer.echo("Existing data cleared.")
    else:
        init_db(engine)
    typer.echo(f"Page store initialized at: {settings.db_url}")


def list_cmd(
    status: StatusOpt = None,
    type_: TypeOpt = None,
    category: CategoryOpt = None,
    tag: TagOpt = None,
    start: StartOpt = None,
    end: EndOpt = None,
    keyword: KeywordOpt = None,
    verbose: VerboseOpt = False,
    ):
    """List pages matching the filter options."""
    settings = _settings(verbose=verbose)
    orchestrator = _orchestrator(settings)
    pages = orchestrator.list_pages()
    if orchestrator.last_listing_error:
        _fail("Page listing failed", Exception(orchestrator.last_listing_error.message))
    pages = filter_pages(pages, _criteria(status, type_, category, tag, start, end, keyword))
    if not pages:
        typer.echo("No pages found.")
        raise typer.Exit(1)
    for p in pages:
        tags = ", ".join(p.tags or [])
        typer.echo(f"{p.id}\t{p.title}\t{p.status or '-'}\t{p.date or '-'}\t{tags}")
    typer.echo(f"{len(pages)} page(s)")


def export_cmd(
    page: Annotated[Optional[list[str]], typer.Option("--page", help="Page id to export (repeatable)")] = None,
    all_pages: Annotated[bool, typer.Option("--all", help="Export every page")] = False,
    out: Annotated[Optional[str], typer.Option("--out-dir", help="Output directory")] = None,
    status: StatusOpt = None,
    type_: TypeOpt = None,
    category: CategoryOpt = None,
    tag: TagOpt = None,
    start: StartOpt = None,
    end: EndOpt = None,
    keyword: KeywordOpt = None,
    workers: Annotated[Optional[int], typer.Option("--workers", help="Max concurrent page fetches")] = None,
    verbose: VerboseOpt = False,
    ):
    """Export pages to Markdown files with front matter."""
    settings = _settings(overrides={"output_dir": out, "max_workers": workers}, verbose=verbose)
    criteria = _criteria(status, type_, category, tag, start, end, keyword)
    if criteria is None and all_pages:
        criteria = FilterCriteria()
    output_dir = Path(settings.output_dir)

    try:
        with _orchestrator(settings) as orchestrator:
            result = orchestrator.export_batch(page_ids=page, criteria=criteria)
        paths = write_exports(result, output_dir)
    except PagemdError as e:
        _fail(str(e))
    except OSError as e:
        _fail("Writing exports failed", e)

    for path in paths:
        typer.echo(f"  -> {path}")
    _echo_errors(result)
    typer.echo(
        f"Export complete - {result.succeeded} exported, {result.failed} failed, "
        f"{result.total} total ({output_dir}/)"
    )
    if result.failed or result.batch_errors:
        raise typer.Exit(1)


def import_cmd(
    paths: Annotated[list[Path], typer.Argument(help="Markdown files or directories to import")],
    workers: Annotated[Optional[int], typer.Option("--workers", help="Max concurrent page writes")] = None,
    default_status: Annotated[Optional[str], typer.Option("--default-status", help="Status for files without one")] = None,
    verbose: VerboseOpt = False,
    ):
    """Import Markdown files as pages."""
    settings = _settings(overrides={"max_workers": workers, "default_status": default_status}, verbose=verbose)
    try:
        files = load_sources(paths)
        with _orchestrator(settings) as orchestrator:
            result = orchestrator.import_batch(files)
    except PagemdError as e:
        _fail(str(e))
    except OSError as e:
        _fail("Reading input files failed", e)

    for page in result.per_item_results:
        typer.echo(f"  {page.file_name} -> {page.url} ({page.block_count} blocks)")
    _echo_errors(result)
    typer.echo(
        f"Import complete - {result.succeeded} imported, {result.failed} failed, {result.total} total"
    )
    if result.failed:
        raise typer.Exit(1)


def validate_cmd(
    paths: Annotated[list[Path], typer.Argument(help="Markdown files or directories to check")],
    ):
    """Check Markdown files for front-matter and content issues."""
    _settings()
    try:
        files = load_sources(paths)
    except OSError as e:
        _fail("Reading input files failed", e)
    if not files:
        _fail("No Markdown files found")

    report = validate_documents(files)
    for outcome in report.results:
        typer.echo(f"{'ok' if outcome.valid else 'INVALID'}: {outcome.file_name}")
        for issue in outcome.issues:
            typer.echo(f"  - {issue}")
        for warning in outcome.warnings:
            typer.echo(f"  ~ {warning}")
    typer.echo(f"{report.valid_files} valid, {report.invalid_files} invalid, {report.total_files} total")
    if report.invalid_files:
        raise typer.Exit(1)
