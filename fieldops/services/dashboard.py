"""
Aggregate counts for the admin and employee dashboards.
"""
from datetime import datetime, timezone
from typing import Dict, List, Optional

from ..config import settings
from ..schemas.dashboard import AdminDashboardResponse, EmployeeDashboardResponse
from ..schemas.jobs import Job, JobStatus
from ..schemas.people import Employee, EmployeeStatus, TimeEntry
from ..storage.provider import DocumentStore
from . import jobs as job_service
from .people import list_active_employees, list_teams
from .time_clock import TIME_ENTRIES, entries_from_documents, recent_time_entries, today_clock_status
from .time_rules import local_day_bounds


ACTIVE_WORK_STATUSES = (
    JobStatus.in_progress,
    JobStatus.picking_up,
    JobStatus.pick_up,
    JobStatus.en_route,
)

CLOCKED_IN = "Clocked In"
CLOCKED_OUT = "Clocked Out"
NOT_CLOCKED_IN = "Not Clocked In"


def employee_status(employee: Employee, entries: List[TimeEntry], day_start: datetime) -> EmployeeStatus:
    """
    Status from the employee's entries (newest first).

    An open entry means clocked in whatever day it started; otherwise the
    latest entry started today means clocked out.
    """
    active = next((e for e in entries if e.is_active), None)
    if active is not None:
        return EmployeeStatus(employee=employee, status=CLOCKED_IN, clock_in_time=active.clock_in)
    today = next((e for e in entries if e.clock_in >= day_start), None)
    if today is None:
        return EmployeeStatus(employee=employee, status=NOT_CLOCKED_IN)
    return EmployeeStatus(
        employee=employee,
        status=CLOCKED_OUT,
        clock_in_time=today.clock_in,
        clock_out_time=today.clock_out,
        hours_worked=today.duration,
    )


def count_by_status(jobs: List[Job]) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for job in jobs:
        # complete and completed are reported together
        key = JobStatus.complete.value if job.status.is_complete else job.status.value
        counts[key] = counts.get(key, 0) + 1
    return counts


def admin_dashboard(store: DocumentStore, now: Optional[datetime] = None) -> AdminDashboardResponse:
    now = now or datetime.now(timezone.utc)
    day_start, _ = local_day_bounds(now, settings.tz_default)

    all_entries = entries_from_documents(store.list(TIME_ENTRIES))
    by_employee: Dict[str, List[TimeEntry]] = {}
    for entry in all_entries:
        by_employee.setdefault(entry.employee_id, []).append(entry)

    statuses = [
        employee_status(employee, by_employee.get(employee.id, []), day_start)
        for employee in list_active_employees(store)
    ]

    todays_jobs = job_service.admin_jobs_for_today(store, now)
    teams = list_teams(store)
    recent = recent_time_entries(store)

    return AdminDashboardResponse(
        clocked_in_count=sum(1 for s in statuses if s.status == CLOCKED_IN),
        clocked_out_count=sum(1 for s in statuses if s.status == CLOCKED_OUT),
        employee_statuses=statuses,
        jobs_today=len(todays_jobs),
        completed_today=sum(1 for j in todays_jobs if j.status.is_complete),
        jobs_by_status=count_by_status(todays_jobs),
        pending_reschedules=len(job_service.pending_reschedule_requests(store)),
        team_count=len(teams),
        team_member_count=sum(len(t.members) for t in teams),
        time_entry_count=len(recent),
        active_time_entry_count=sum(1 for e in recent if e.is_active),
    )


def employee_dashboard(store: DocumentStore, employee_id: str, now: Optional[datetime] = None) -> EmployeeDashboardResponse:
    now = now or datetime.now(timezone.utc)
    todays_jobs = job_service.employee_jobs_for_today(store, employee_id, now)
    return EmployeeDashboardResponse(
        employee_id=employee_id,
        clock_record=today_clock_status(store, employee_id),
        jobs=todays_jobs,
        in_progress_count=sum(1 for j in todays_jobs if j.status in ACTIVE_WORK_STATUSES),
        team_job_count=sum(1 for j in todays_jobs if j.is_team_job),
    )
