"""
api/routes/jobs.py -- Job posting routes.

Routes:
  GET    /api/jobs        -- list all jobs (public)
  GET    /api/jobs/{id}   -- single job (requires session)
  POST   /api/jobs        -- create job (requires session)
  PUT    /api/jobs/{id}   -- update allow-listed fields (owner only)
  DELETE /api/jobs/{id}   -- delete job (owner only)

Ownership:
  POST stamps authorEmail from the session identity; a client-supplied
  authorEmail is discarded.
  PUT and DELETE match on (id, authorEmail) together. A missing job and a job
  owned by someone else both answer 404 "Job not found or unauthorized", so a
  non-owner cannot probe which ids exist.
"""

from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Request

from api.models import JobEnvelope, MessageResponse
from auth.dependencies import get_identity
from auth.models import Identity
from core.database import is_valid_id
from jobs.models import Job
from jobs.store import JobStore

router = APIRouter()

_INVALID_ID = {"code": "invalid_id", "message": "Invalid job ID"}
_NOT_FOUND_OR_FORBIDDEN = {"code": "not_found_or_unauthorized", "message": "Job not found or unauthorized"}


def _require_valid_id(job_id: str) -> None:
    if not is_valid_id(job_id):
        raise HTTPException(status_code=400, detail=_INVALID_ID)


# ---------------------------------------------------------------------------
# GET /jobs -- public listing
# ---------------------------------------------------------------------------


@router.get("/jobs", response_model=list[dict[str, Any]])
def list_jobs(request: Request) -> list[dict[str, Any]]:
    """Return every job. No filtering, no pagination."""
    store: JobStore = request.app.state.job_store
    return [job.to_document() for job in store.list_jobs()]


# ---------------------------------------------------------------------------
# GET /jobs/{job_id}
# ---------------------------------------------------------------------------


@router.get("/jobs/{job_id}", response_model=dict[str, Any])
def get_job(request: Request, job_id: str, identity: Identity = Depends(get_identity)) -> dict[str, Any]:
    _require_valid_id(job_id)
    store: JobStore = request.app.state.job_store
    job = store.get_job(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail={"code": "not_found", "message": "Job not found"})
    return job.to_document()


# ---------------------------------------------------------------------------
# POST /jobs
# ---------------------------------------------------------------------------


@router.post("/jobs", response_model=JobEnvelope, status_code=201)
def create_job(
    request: Request,
    body: dict[str, Any] = Body(...),
    identity: Identity = Depends(get_identity),
) -> JobEnvelope:
    """Store the posted document verbatim, owned by the session identity."""
    store: JobStore = request.app.state.job_store
    job_id = store.create_job(Job(author_email=identity.email, fields=body))
    created = store.get_job(job_id)
    return JobEnvelope(message="Job posted successfully", job=created.to_document())


# ---------------------------------------------------------------------------
# PUT /jobs/{job_id}
# ---------------------------------------------------------------------------


@router.put("/jobs/{job_id}", response_model=JobEnvelope)
def update_job(
    request: Request,
    job_id: str,
    body: Optional[dict[str, Any]] = Body(default=None),
    identity: Identity = Depends(get_identity),
) -> JobEnvelope:
    """Overwrite the allow-listed fields of a job the caller owns.

    Only title, price, pricingType, description, location, experienceLevel,
    vacancy and skills are written, and only when present in the body.
    authorEmail never changes; updatedAt always advances.
    Absent fields are kept, unlike a full-replace PUT that would clear them.
    """
    _require_valid_id(job_id)
    store: JobStore = request.app.state.job_store
    updated = store.update_owned(job_id, identity.email, body or {})
    if updated is None:
        raise HTTPException(status_code=404, detail=_NOT_FOUND_OR_FORBIDDEN)
    return JobEnvelope(message="Job updated successfully", job=updated.to_document())


# ---------------------------------------------------------------------------
# DELETE /jobs/{job_id}
# ---------------------------------------------------------------------------


@router.delete("/jobs/{job_id}", response_model=MessageResponse)
def delete_job(request: Request, job_id: str, identity: Identity = Depends(get_identity)) -> MessageResponse:
    """Delete a job the caller owns. Same merged 404 as update."""
    _require_valid_id(job_id)
    store: JobStore = request.app.state.job_store
    if not store.delete_owned(job_id, identity.email):
        raise HTTPException(status_code=404, detail=_NOT_FOUND_OR_FORBIDDEN)
    return MessageResponse(message="Job deleted successfully")
