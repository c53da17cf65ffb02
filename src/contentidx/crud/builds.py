"""Build history persistence: record rebuild outcomes and look up prior runs"""

from sqlmodel import Session, select

from contentidx.core.engine import BuildReport
from contentidx.crud.models import BuildRun, BuildStatusEnum


def get_last_published(session: Session) -> BuildRun | None:
    """Return the most recent run that published new content, or None."""
    return session.exec(
        select(BuildRun)
        .where(BuildRun.status == BuildStatusEnum.published)
        .order_by(BuildRun.started_at.desc())
    ).first()


def list_builds(session: Session, limit: int = 20) -> list[BuildRun]:
    """Return up to limit runs, newest first."""
    return list(session.exec(select(BuildRun).order_by(BuildRun.started_at.desc()).limit(limit)).all())


def record_build(session: Session, report: BuildReport) -> BuildRun:
    """Persist a BuildReport as a BuildRun.

    Status is 'failed' when nothing was published, 'unchanged' when the
    published digest equals the last published run's, else 'published'.
    Flushes but does not commit; caller controls the transaction.
    """
    if not report.published:
        status = BuildStatusEnum.failed
    else:
        last = get_last_published(session)
        status = BuildStatusEnum.unchanged if last and last.digest == report.digest else BuildStatusEnum.published

    run = BuildRun(
        started_at=report.started_at,
        finished_at=report.finished_at,
        status=status,
        digest=report.digest,
        counts={"accepted": dict(report.accepted), "rejected": dict(report.rejected)},
        errors=[e.to_dict() for e in report.fatal_errors + report.record_errors],
    )
    session.add(run)
    session.flush()
    return run
