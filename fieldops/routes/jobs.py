from typing import List, Optional

from fastapi import APIRouter, Depends, Header, HTTPException

from ..db import get_store
from ..schemas.jobs import (
    Job,
    JobReopen,
    JobStatus,
    JobStatusUpdate,
    RescheduleApproval,
    RescheduleRequestCreate,
)
from ..services import jobs as job_service
from ..storage.provider import DocumentStore


router = APIRouter(prefix="/jobs", tags=["jobs"])


def expected_version(if_match: Optional[str] = Header(default=None)) -> Optional[int]:
    """Precondition token from If-Match (the document version the caller last read)."""
    if if_match is None:
        return None
    try:
        return int(if_match.strip().strip('"'))
    except ValueError:
        raise HTTPException(status_code=400, detail="If-Match must be a document version number")


# ---------- EMPLOYEE VIEWS ----------
@router.get("/employee/{employee_id}/today", response_model=List[Job])
def employee_jobs_today(employee_id: str, store: DocumentStore = Depends(get_store)):
    """Jobs assigned to the employee or one of their teams, scheduled today"""
    return job_service.employee_jobs_for_today(store, employee_id)


@router.get("/employee/{employee_id}/history", response_model=List[Job])
def employee_job_history(employee_id: str, store: DocumentStore = Depends(get_store)):
    """All jobs visible to the employee, newest first"""
    return job_service.employee_job_history(store, employee_id)


# ---------- ADMIN VIEWS ----------
@router.get("/today", response_model=List[Job])
def all_jobs_today(store: DocumentStore = Depends(get_store)):
    return job_service.admin_jobs_for_today(store)


@router.get("/reschedule-requests/pending", response_model=List[Job])
def pending_reschedule_requests(store: DocumentStore = Depends(get_store)):
    return job_service.pending_reschedule_requests(store)


@router.get("/{job_id}", response_model=Job)
def get_job(job_id: str, store: DocumentStore = Depends(get_store)):
    return job_service.get_job(store, job_id)


# ---------- STATUS ----------
@router.put("/{job_id}/status", response_model=Job)
def update_job_status(
    job_id: str,
    payload: JobStatusUpdate,
    store: DocumentStore = Depends(get_store),
    version: Optional[int] = Depends(expected_version),
):
    return job_service.set_status(store, job_id, payload.status, expected_version=version)


@router.post("/{job_id}/advance", response_model=Job)
def advance_job_status(
    job_id: str,
    store: DocumentStore = Depends(get_store),
    version: Optional[int] = Depends(expected_version),
):
    """Move the job to the next workflow step (picking up -> picked up -> en route -> complete)"""
    return job_service.advance_status(store, job_id, expected_version=version)


# ---------- RESCHEDULE ----------
@router.post("/{job_id}/reschedule-request", response_model=Job)
def request_reschedule(
    job_id: str,
    payload: RescheduleRequestCreate,
    store: DocumentStore = Depends(get_store),
    version: Optional[int] = Depends(expected_version),
):
    return job_service.request_reschedule(
        store,
        job_id,
        payload.requested_by,
        payload.reason,
        payload.new_proposed_date,
        expected_version=version,
    )


@router.post("/{job_id}/reschedule-request/approve", response_model=Job)
def approve_reschedule(
    job_id: str,
    payload: Optional[RescheduleApproval] = None,
    store: DocumentStore = Depends(get_store),
    version: Optional[int] = Depends(expected_version),
):
    new_date = payload.new_date if payload else None
    return job_service.approve_reschedule(store, job_id, new_date, expected_version=version)


@router.post("/{job_id}/reschedule-request/decline", response_model=Job)
def decline_reschedule(
    job_id: str,
    store: DocumentStore = Depends(get_store),
    version: Optional[int] = Depends(expected_version),
):
    return job_service.decline_reschedule(store, job_id, expected_version=version)


@router.post("/{job_id}/reopen", response_model=Job)
def reopen_job(
    job_id: str,
    payload: Optional[JobReopen] = None,
    store: DocumentStore = Depends(get_store),
    version: Optional[int] = Depends(expected_version),
):
    """Clear the reschedule lock so the job can move through the workflow again"""
    status = payload.status if payload else JobStatus.scheduled
    return job_service.reopen_job(store, job_id, status, expected_version=version)
