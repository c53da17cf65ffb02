"""CLI command implementations"""

import json
import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from sqlmodel import Session, SQLModel

from contentidx.config import Settings, load_config
from contentidx.core.engine import BuildReport, ContentEngine
from contentidx.core.errors import ContentError
from contentidx.core.loader import load_content_dir
from contentidx.core.models import Document
from contentidx.core.schemas import load_registry
from contentidx.crud.builds import list_builds, record_build
from contentidx.crud.database import init_db, make_engine


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling and configure logging."""
    try:
        settings = load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))
    logging.basicConfig(level=settings.log_level, format="%(levelname)s %(name)s: %(message)s")
    return settings


def _rebuild(path: str, settings: Settings) -> tuple[ContentEngine, BuildReport]:
    """Load the content directory and run one rebuild on a fresh engine."""
    try:
        registry = load_registry(Path(settings.schema_file) if settings.schema_file else None)
        engine = ContentEngine(registry, conflict_policy=settings.conflict_policy)
        raw = load_content_dir(Path(path), settings.kind_dirs)
    except (ContentError, ValueError, OSError) as e:
        _fail("Could not load content", e)
    return engine, engine.rebuild(raw)


def _echo_report(report: BuildReport) -> None:
    """Print record errors, fatal errors, and a summary line."""
    for e in report.record_errors:
        typer.echo(f"  {e.code}: {e}")
    for e in report.fatal_errors:
        typer.echo(f"  FATAL {e.code}: {e}", err=True)
    counts = ", ".join(f"{kind}={n}" for kind, n in report.accepted.items())
    rejected = sum(report.rejected.values())
    if report.published:
        typer.echo(f"Build published {report.digest[:12]} - {counts}; {rejected} rejected")
    else:
        typer.echo("Build failed - previous snapshot remains current")


def validate_cmd(
    path: Annotated[str, typer.Argument(help="Content directory")],
    as_json: Annotated[bool, typer.Option("--json", help="Print the build report as JSON")] = False,
    ):
    """Validate and index content without recording history. Exits 1 on any error."""
    settings = _settings()
    _, report = _rebuild(path, settings)
    if as_json:
        typer.echo(json.dumps(report.to_dict(), indent=2))
    else:
        _echo_report(report)
    if report.record_errors or report.fatal_errors:
        raise typer.Exit(1)


def build_cmd(
    path: Annotated[str, typer.Argument(help="Content directory")],
    db_url: Annotated[Optional[str], typer.Option("--db-url", help="Database URL for build history")] = None,
    policy: Annotated[Optional[str], typer.Option("--conflict-policy", help="wait or reject")] = None,
    ):
    """Rebuild and publish a snapshot, recording the outcome in build history."""
    settings = _settings(overrides={"db_url": db_url, "conflict_policy": policy})
    _, report = _rebuild(path, settings)
    _echo_report(report)

    try:
        engine = make_engine(settings.db_url)
        init_db(engine)
        with Session(engine) as session:
            run = record_build(session, report)
            status = run.status.value
            session.commit()
    except Exception as e:
        _fail("Recording build history failed", e)
    typer.echo(f"Recorded build: {status}")
    if not report.published:
        raise typer.Exit(1)


def _page(records: tuple, offset: int, limit: Optional[int]) -> tuple:
    """Slice filter results the way list_by_order clamps offset/limit."""
    start = max(offset, 0)
    end = None if limit is None else start + max(limit, 0)
    return records[start:end]


def list_cmd(
    path: Annotated[str, typer.Argument(help="Content directory")],
    kind: Annotated[str, typer.Argument(help="team-member, product, or document")],
    tag: Annotated[Optional[str], typer.Option("--tag", help="Only records with this tag")] = None,
    difficulty: Annotated[Optional[str], typer.Option("--difficulty", help="Only documents at this difficulty")] = None,
    offset: Annotated[int, typer.Option("--offset", help="Records to skip")] = 0,
    limit: Annotated[Optional[int], typer.Option("--limit", help="Max records to list")] = None,
    ):
    """Build the content in memory and list records of one kind in display order."""
    settings = _settings()
    engine, report = _rebuild(path, settings)
    if not report.published:
        _echo_report(report)
        raise typer.Exit(1)

    query = engine.query
    try:
        if tag is not None:
            records = _page(query.filter_by_tag(kind, tag), offset, limit)
        elif difficulty is not None:
            records = _page(query.filter_by_difficulty(kind, difficulty), offset, limit)
        else:
            records = query.list_by_order(kind, offset, limit)
    except ContentError as e:
        _fail(str(e))

    if not records:
        typer.echo(f"No {kind} records found.")
        raise typer.Exit(1)
    for r in records:
        label = r.slug if isinstance(r, Document) else r.fields.get("name", "")
        order = "-" if r.order is None else r.order
        typer.echo(f"{order}\t{r.id}\t{label}")


def history_cmd(
    limit: Annotated[int, typer.Option("--limit", help="Max runs to show")] = 20,
    db_url: Annotated[Optional[str], typer.Option("--db-url", help="Database URL for build history")] = None,
    ):
    """Show recent rebuilds, newest first."""
    settings = _settings(overrides={"db_url": db_url})
    engine = make_engine(settings.db_url)
    init_db(engine)
    with Session(engine) as session:
        runs = list_builds(session, limit)
    if not runs:
        typer.echo("No builds recorded.")
        raise typer.Exit(1)
    for run in runs:
        digest = run.digest[:12] if run.digest else "-"
        typer.echo(f"{run.started_at.isoformat()}\t{run.status.value}\t{digest}\t{len(run.errors)} error(s)")


def init_cmd(
    reset: Annotated[bool, typer.Option("--reset", help="Drop and recreate all tables")] = False,
    db_url: Annotated[Optional[str], typer.Option("--db-url", help="Database URL for build history")] = None,
    ):
    """Initialize the build history database. Use --reset to clear existing data."""
    settings = _settings(overrides={"db_url": db_url})
    engine = make_engine(settings.db_url)
    if reset:
        SQLModel.metadata.drop_all(engine)
        typer.echo("Existing history cleared.")
    init_db(engine)
    typer.echo(f"Database initialized at: {settings.db_url}")
