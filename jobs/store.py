"""
jobs/store.py -- SQLAlchemy-backed document store for job postings.

Each job is one row: a handful of server-owned columns (id, author_email,
timestamps) plus a JSON column holding the client document verbatim. That
keeps the "arbitrary structured fields" shape of a document database while
staying on SQLAlchemy Core, so SQLite and PostgreSQL both work unchanged.

Ownership:
  update_owned() and delete_owned() match on (id, author_email) together. A
  job that does not exist and a job owned by someone else are the same
  outcome (None / False) -- callers cannot tell which one happened, and must
  not try to.

Security: all queries use bound parameters. No f-strings in SQL.

Usage:
    store = JobStore(engine)
    job_id = store.create_job(Job(author_email="a@x.com", fields={"title": "T"}))
    jobs = store.list_jobs()
    updated = store.update_owned(job_id, "a@x.com", {"title": "T2"})
    store.delete_owned(job_id, "a@x.com")
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import JSON, Column, Index, MetaData, String, Table
from sqlalchemy.engine import Engine

from core.database import is_valid_id, new_id
from jobs.models import Job, pick_updatable, strip_reserved

logger = logging.getLogger("quantumedge.jobs")

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_jobs = Table(
    "jobs",
    _metadata,
    Column("id", String(32), primary_key=True),
    Column("author_email", String(320), nullable=False),
    Column("body", JSON, nullable=False),
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
    Index("ix_jobs_author_email", "author_email"),
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class JobStore:
    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        _metadata.create_all(self.engine)

    def create_job(self, job: Job) -> str:
        """Insert a new job and return its assigned id.

        Server-owned keys in job.fields are dropped; author_email on the Job
        is the only owner value that gets written.
        """
        job_id = new_id()
        now = _now_iso()
        with self.engine.begin() as conn:
            conn.execute(
                _jobs.insert().values(
                    id=job_id,
                    author_email=job.author_email,
                    body=strip_reserved(job.fields),
                    created_at=now,
                    updated_at=now,
                )
            )
        logger.info("Job %s created by %s", job_id, job.author_email)
        return job_id

    def list_jobs(self) -> list[Job]:
        """Return every job, oldest first. No filtering, no pagination."""
        with self.engine.connect() as conn:
            rows = conn.execute(_jobs.select().order_by(_jobs.c.created_at, _jobs.c.id)).fetchall()
        return [_row_to_job(r) for r in rows]

    def get_job(self, job_id: str) -> Optional[Job]:
        """Look up a job by id. Returns None if absent or malformed."""
        if not is_valid_id(job_id):
            return None
        with self.engine.connect() as conn:
            row = conn.execute(_jobs.select().where(_jobs.c.id == job_id)).fetchone()
        return _row_to_job(row) if row is not None else None

    def update_owned(self, job_id: str, author_email: str, changes: dict[str, Any]) -> Optional[Job]:
        """Overwrite the allow-listed fields of a job owned by author_email.

        Only keys in jobs.models.UPDATABLE_FIELDS are applied; everything
        else in changes (including authorEmail) is ignored. updated_at is
        always bumped. The ownership check and the write share one
        transaction.

        Returns the post-update Job, or None when no job matches both id and
        owner.
        """
        if not is_valid_id(job_id):
            return None
        owned = (_jobs.c.id == job_id) & (_jobs.c.author_email == author_email)
        with self.engine.begin() as conn:
            row = conn.execute(_jobs.select().where(owned)).fetchone()
            if row is None:
                return None
            body = dict(row.body or {})
            body.update(pick_updatable(changes))
            conn.execute(_jobs.update().where(owned).values(body=body, updated_at=_now_iso()))
            row = conn.execute(_jobs.select().where(_jobs.c.id == job_id)).fetchone()
        logger.info("Job %s updated by %s", job_id, author_email)
        return _row_to_job(row)

    def delete_owned(self, job_id: str, author_email: str) -> bool:
        """Delete a job owned by author_email. Returns False if nothing matched."""
        if not is_valid_id(job_id):
            return False
        with self.engine.begin() as conn:
            result = conn.execute(
                _jobs.delete().where((_jobs.c.id == job_id) & (_jobs.c.author_email == author_email))
            )
        deleted = result.rowcount > 0
        if deleted:
            logger.info("Job %s deleted by %s", job_id, author_email)
        return deleted


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern -- DB row -> domain dataclass)
# ---------------------------------------------------------------------------


def _row_to_job(row) -> Job:
    return Job(
        id=row.id,
        author_email=row.author_email,
        fields=dict(row.body or {}),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
