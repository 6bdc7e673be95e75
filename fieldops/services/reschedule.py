"""
Reschedule workflow and job status advancement.

Every operation mutates the given Job in place and returns the partial
field-update map to write to the job document. Requests live at
`requests.reschedule`; writes also drop the legacy top-level
`rescheduleRequest` so the two variants cannot disagree.

Submitting a request leaves the job status untouched. Only approval moves
the job to `rescheduled`.
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import structlog

from ..errors import PreconditionFailed
from ..schemas.jobs import Job, JobStatus, RescheduleRequest
from ..storage.provider import DELETE_FIELD


logger = structlog.get_logger(__name__)

WORKFLOW_SEQUENCE = [
    JobStatus.picking_up,
    JobStatus.pick_up,
    JobStatus.en_route,
    JobStatus.complete,
]

RESCHEDULE_PATH = "requests.reschedule"
RESCHEDULE_HISTORY_PATH = "requests.rescheduleHistory"
LEGACY_RESCHEDULE_FIELD = "rescheduleRequest"


def _now(now: Optional[datetime]) -> datetime:
    return now or datetime.now(timezone.utc)


def is_locked(job: Job) -> bool:
    """Locked jobs wait for admin re-coordination and cannot move through the workflow."""
    request = job.reschedule_request
    if request is not None and request.is_approved is True:
        return True
    return job.status is JobStatus.rescheduled


def advance_status(job: Job) -> Optional[JobStatus]:
    """
    Next workflow status, or None when the job is complete or locked.

    A status outside the sequence counts as "before picking up".
    """
    if is_locked(job) or job.status.is_complete:
        return None
    if job.status not in WORKFLOW_SEQUENCE:
        return WORKFLOW_SEQUENCE[0]
    idx = WORKFLOW_SEQUENCE.index(job.status)
    if idx + 1 < len(WORKFLOW_SEQUENCE):
        return WORKFLOW_SEQUENCE[idx + 1]
    return None


def can_advance_status(job: Job) -> bool:
    return advance_status(job) is not None


def _status_updates(job: Job, status: JobStatus, now: datetime) -> Dict[str, Any]:
    job.status = status
    job.updated_at = now
    return {
        "status": status.value,
        "requests.status": status.value,
        "updatedAt": now,
    }


def advance_job(job: Job, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Move the job one step along the workflow."""
    next_status = advance_status(job)
    if next_status is None:
        if is_locked(job):
            raise PreconditionFailed("Job is locked pending reschedule resolution")
        raise PreconditionFailed("Job is already complete")
    return _status_updates(job, next_status, _now(now))


def set_job_status(job: Job, status: JobStatus, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Set an explicit status. A locked job cannot be moved into the workflow."""
    if is_locked(job) and (status in WORKFLOW_SEQUENCE or status.is_complete):
        raise PreconditionFailed("Job is locked pending reschedule resolution")
    return _status_updates(job, status, _now(now))


def _request_document(request: RescheduleRequest) -> Dict[str, Any]:
    doc = {
        "requestedBy": request.requested_by,
        "requestedDate": request.requested_date,
        "reason": request.reason,
        "newProposedDate": request.new_proposed_date,
        "isApproved": request.is_approved,
        "approvedDate": request.approved_date,
    }
    return {k: v for k, v in doc.items() if v is not None}


def submit_reschedule_request(
    job: Job,
    requested_by: str,
    reason: str,
    new_proposed_date: Optional[datetime] = None,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Attach a pending request, replacing any earlier one.

    The reason is not validated here; request bodies enforce it.
    """
    now = _now(now)
    request = RescheduleRequest(
        requested_by=requested_by,
        requested_date=now,
        reason=reason,
        new_proposed_date=new_proposed_date,
    )
    job.reschedule_request = request
    job.updated_at = now
    logger.info("reschedule_requested", job_id=job.id, requested_by=requested_by)
    return {
        RESCHEDULE_PATH: _request_document(request),
        LEGACY_RESCHEDULE_FIELD: DELETE_FIELD,
        "updatedAt": now,
    }


def _pending_request(job: Job) -> RescheduleRequest:
    request = job.reschedule_request
    if request is None:
        raise PreconditionFailed("Job has no reschedule request")
    if not request.is_pending:
        raise PreconditionFailed("Reschedule request was already resolved")
    return request


def approve_reschedule(
    job: Job,
    new_date: Optional[datetime] = None,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Approve the pending request (admin only).

    Sets status to `rescheduled`. When `new_date` is given it becomes both the
    job's scheduled date and the request's proposed date.
    """
    request = _pending_request(job)
    now = _now(now)
    approved = request.model_copy(update={
        "is_approved": True,
        "approved_date": now,
        "new_proposed_date": new_date or request.new_proposed_date,
    })
    job.reschedule_request = approved
    updates = _status_updates(job, JobStatus.rescheduled, now)
    updates[RESCHEDULE_PATH] = _request_document(approved)
    updates[LEGACY_RESCHEDULE_FIELD] = DELETE_FIELD
    if new_date is not None:
        job.scheduled_date = new_date
        updates["installDate"] = new_date
    logger.info("reschedule_approved", job_id=job.id, new_date=new_date.isoformat() if new_date else None)
    return updates


def decline_reschedule(job: Job, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Decline the pending request. Status and date are left as they are."""
    request = _pending_request(job)
    now = _now(now)
    declined = request.model_copy(update={"is_approved": False, "approved_date": now})
    job.reschedule_request = declined
    job.updated_at = now
    logger.info("reschedule_declined", job_id=job.id)
    return {
        RESCHEDULE_PATH: _request_document(declined),
        LEGACY_RESCHEDULE_FIELD: DELETE_FIELD,
        "updatedAt": now,
    }


def reopen_job(
    job: Job,
    status: JobStatus = JobStatus.scheduled,
    history: Optional[List[Dict[str, Any]]] = None,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Clear the reschedule lock (admin only).

    The resolved request is appended to `requests.rescheduleHistory` and the
    job gets `status`, which must not itself be `rescheduled`.
    """
    if not is_locked(job):
        raise PreconditionFailed("Job is not locked")
    if status is JobStatus.rescheduled:
        raise PreconditionFailed("Reopening must leave the rescheduled status")
    now = _now(now)
    archived = list(history or [])
    if job.reschedule_request is not None:
        archived.append(_request_document(job.reschedule_request))
    job.reschedule_request = None
    updates = _status_updates(job, status, now)
    updates[RESCHEDULE_PATH] = DELETE_FIELD
    updates[LEGACY_RESCHEDULE_FIELD] = DELETE_FIELD
    updates[RESCHEDULE_HISTORY_PATH] = archived
    logger.info("job_reopened", job_id=job.id, status=status.value)
    return updates


def pending_sort_key(job: Job) -> datetime:
    request = job.reschedule_request
    if request is None:
        return datetime.max.replace(tzinfo=timezone.utc)
    return request.new_proposed_date or request.requested_date or datetime.max.replace(tzinfo=timezone.utc)
