"""
Job reads and writes against the document store.
Resolution and workflow rules live in job_resolver and reschedule; this
module only does the round-trips, day-range filtering and ordering.
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import structlog

from ..config import settings
from ..errors import NotFound
from ..schemas.jobs import Job, JobStatus
from ..storage.provider import Document, DocumentStore, get_path
from . import reschedule
from .job_resolver import resolve_job_for_admin, resolve_job_for_requester
from .people import get_team_ids
from .time_rules import local_day_bounds, localize


logger = structlog.get_logger(__name__)

JOBS = "jobs"


def _now(now: Optional[datetime]) -> datetime:
    return now or datetime.now(timezone.utc)


def scheduled_within(job: Job, start: datetime, end: datetime) -> bool:
    """Undated jobs never fall on a specific day."""
    if job.scheduled_date is None:
        return False
    return start <= job.scheduled_date < end


def _by_date(jobs: List[Job], descending: bool = False) -> List[Job]:
    dated = [j for j in jobs if j.scheduled_date is not None]
    undated = [j for j in jobs if j.scheduled_date is None]
    dated.sort(key=lambda j: j.scheduled_date, reverse=descending)
    return dated + undated


def _admin_job(doc: Document) -> Job:
    return resolve_job_for_admin(doc.data, job_id=doc.id, version=doc.version, timezone_str=settings.tz_default)


def load_job_document(store: DocumentStore, job_id: str) -> Document:
    doc = store.get(JOBS, job_id)
    if doc is None:
        raise NotFound("Job not found")
    return doc


def get_job(store: DocumentStore, job_id: str) -> Job:
    return _admin_job(load_job_document(store, job_id))


def employee_jobs(store: DocumentStore, employee_id: str, limit: int) -> List[Job]:
    team_ids = get_team_ids(store, employee_id)
    jobs: List[Job] = []
    for doc in store.list(JOBS, descending=True, limit=limit):
        job = resolve_job_for_requester(
            doc.data,
            employee_id,
            team_ids,
            job_id=doc.id,
            version=doc.version,
            timezone_str=settings.tz_default,
        )
        if job is not None:
            jobs.append(job)
    return jobs


def employee_jobs_for_today(store: DocumentStore, employee_id: str, now: Optional[datetime] = None) -> List[Job]:
    start, end = local_day_bounds(_now(now), settings.tz_default)
    jobs = employee_jobs(store, employee_id, settings.jobs_fetch_limit_employee)
    return _by_date([j for j in jobs if scheduled_within(j, start, end)])


def employee_job_history(store: DocumentStore, employee_id: str) -> List[Job]:
    jobs = employee_jobs(store, employee_id, settings.jobs_fetch_limit_history)
    return _by_date(jobs, descending=True)


def admin_jobs_for_today(store: DocumentStore, now: Optional[datetime] = None) -> List[Job]:
    start, end = local_day_bounds(_now(now), settings.tz_default)
    jobs = [_admin_job(doc) for doc in store.list(JOBS, descending=True, limit=settings.jobs_fetch_limit_admin)]
    return _by_date([j for j in jobs if scheduled_within(j, start, end)])


def pending_reschedule_requests(store: DocumentStore) -> List[Job]:
    jobs = [_admin_job(doc) for doc in store.list(JOBS, descending=True, limit=settings.jobs_fetch_limit_pending)]
    pending = [j for j in jobs if j.has_pending_reschedule]
    return sorted(pending, key=reschedule.pending_sort_key)


def _write(store: DocumentStore, job_id: str, updates: Dict[str, Any], expected_version: Optional[int]) -> Job:
    doc = store.update(JOBS, job_id, updates, expected_version=expected_version)
    return _admin_job(doc)


def set_status(
    store: DocumentStore,
    job_id: str,
    status: JobStatus,
    expected_version: Optional[int] = None,
    now: Optional[datetime] = None,
) -> Job:
    job = get_job(store, job_id)
    updates = reschedule.set_job_status(job, status, now)
    logger.info("job_status_set", job_id=job_id, status=status.value)
    return _write(store, job_id, updates, expected_version)


def advance_status(
    store: DocumentStore,
    job_id: str,
    expected_version: Optional[int] = None,
    now: Optional[datetime] = None,
) -> Job:
    job = get_job(store, job_id)
    updates = reschedule.advance_job(job, now)
    logger.info("job_status_advanced", job_id=job_id, status=job.status.value)
    return _write(store, job_id, updates, expected_version)


def request_reschedule(
    store: DocumentStore,
    job_id: str,
    requested_by: str,
    reason: str,
    new_proposed_date: Optional[datetime] = None,
    expected_version: Optional[int] = None,
    now: Optional[datetime] = None,
) -> Job:
    if new_proposed_date is not None:
        new_proposed_date = localize(new_proposed_date, settings.tz_default)
    job = get_job(store, job_id)
    updates = reschedule.submit_reschedule_request(job, requested_by, reason, new_proposed_date, now)
    return _write(store, job_id, updates, expected_version)


def _redated_assignments(doc: Document, new_date: datetime) -> Optional[List[Any]]:
    """Assignment entries carrying `new_date`, so the entry date no longer shadows installDate."""
    assignments = doc.data.get("assignments")
    if not isinstance(assignments, list) or not assignments:
        return None
    return [
        {**entry, "date": new_date} if isinstance(entry, dict) else entry
        for entry in assignments
    ]


def approve_reschedule(
    store: DocumentStore,
    job_id: str,
    new_date: Optional[datetime] = None,
    expected_version: Optional[int] = None,
    now: Optional[datetime] = None,
) -> Job:
    # Naive request values (date-only input) are local, like stored YYYY-MM-DD dates
    if new_date is not None:
        new_date = localize(new_date, settings.tz_default)
    doc = load_job_document(store, job_id)
    job = _admin_job(doc)
    updates = reschedule.approve_reschedule(job, new_date, now)
    if new_date is not None:
        redated = _redated_assignments(doc, new_date)
        if redated is not None:
            updates["assignments"] = redated
    return _write(store, job_id, updates, expected_version)


def decline_reschedule(
    store: DocumentStore,
    job_id: str,
    expected_version: Optional[int] = None,
    now: Optional[datetime] = None,
) -> Job:
    job = get_job(store, job_id)
    updates = reschedule.decline_reschedule(job, now)
    return _write(store, job_id, updates, expected_version)


def reopen_job(
    store: DocumentStore,
    job_id: str,
    status: JobStatus = JobStatus.scheduled,
    expected_version: Optional[int] = None,
    now: Optional[datetime] = None,
) -> Job:
    doc = load_job_document(store, job_id)
    job = _admin_job(doc)
    history = get_path(doc.data, reschedule.RESCHEDULE_HISTORY_PATH)
    updates = reschedule.reopen_job(job, status, history if isinstance(history, list) else None, now)
    return _write(store, job_id, updates, expected_version)
