"""
Job assignment resolution.

Decodes raw job documents (loosely typed, several legacy schema variants) into
normalized Job records, and decides which jobs a requester may see. Pure: no
store access; team membership is computed by the caller.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, List, Mapping, Optional

from ..schemas.jobs import Job, JobStatus, RescheduleRequest
from .time_rules import format_short_time, parse_timestamp


ASSIGNMENT_TEAM_MEMBER = "team-member"
ASSIGNMENT_TEAM = "team"
TEAM_JOB_LABEL = "Team Job"
UNASSIGNED = "unassigned"

# Normalized raw token -> status. Tokens are lowercased with spaces/hyphens as underscores.
_STATUS_TOKENS = {
    "scheduled": JobStatus.scheduled,
    "picking_up": JobStatus.picking_up,
    "pickingup": JobStatus.picking_up,
    "pick_up": JobStatus.pick_up,
    "pickup": JobStatus.pick_up,
    "picked_up": JobStatus.pick_up,
    "en_route": JobStatus.en_route,
    "enroute": JobStatus.en_route,
    "in_progress": JobStatus.in_progress,
    "inprogress": JobStatus.in_progress,
    "delivering": JobStatus.in_progress,
    "started": JobStatus.in_progress,
    "complete": JobStatus.complete,
    "completed": JobStatus.completed,
    "rescheduled": JobStatus.rescheduled,
    "cancelled": JobStatus.cancelled,
    "canceled": JobStatus.cancelled,
}


def clean_string(value: Any) -> Optional[str]:
    """Trimmed string, or None for non-strings and blank strings."""
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def first_present(*values):
    for value in values:
        if value is not None:
            return value
    return None


def string_list(value: Any) -> Optional[List[str]]:
    """Non-empty list of the non-blank strings in `value`, else None."""
    if not isinstance(value, (list, tuple)):
        return None
    cleaned = [s for s in (clean_string(v) for v in value) if s]
    return cleaned or None


def map_status(raw: Any) -> JobStatus:
    """Map a raw status string to JobStatus; anything unrecognized is `scheduled`."""
    token = clean_string(raw)
    if token is None:
        return JobStatus.scheduled
    token = token.lower().replace(" ", "_").replace("-", "_")
    return _STATUS_TOKENS.get(token, JobStatus.scheduled)


def statuses_equal(a: Optional[JobStatus], b: Optional[JobStatus]) -> bool:
    if a is None or b is None:
        return a is b
    return a.same_as(b)


@dataclass
class AssignmentMatch:
    employee_id: Optional[str] = None
    employee_name: Optional[str] = None
    team_id: Optional[str] = None
    team_name: Optional[str] = None
    team_members: Optional[List[str]] = None
    employee_date: Optional[datetime] = None
    team_date: Optional[datetime] = None

    @property
    def scheduled_date(self) -> Optional[datetime]:
        # Employee entry wins over team entry when both matched
        return first_present(self.employee_date, self.team_date)


def _entries(raw_job: Mapping[str, Any]) -> List[Mapping[str, Any]]:
    assignments = raw_job.get("assignments")
    if not isinstance(assignments, list):
        return []
    return [a for a in assignments if isinstance(a, Mapping)]


def match_assignments(
    raw_job: Mapping[str, Any],
    employee_id: str,
    team_ids: Iterable[str],
    timezone_str: Optional[str] = None,
) -> Optional[AssignmentMatch]:
    """
    Scan every assignment entry for ones that name the requester.

    A `team-member` entry matches on employee id; a `team` entry matches when
    its team id is one of `team_ids`. Later entries of the same kind overwrite
    earlier ones. Returns None when nothing matched.
    """
    team_ids = set(team_ids or ())
    employee_id = clean_string(employee_id)
    match = AssignmentMatch()
    matched = False

    for entry in _entries(raw_job):
        entry_type = clean_string(entry.get("type")) or ""
        if entry_type == ASSIGNMENT_TEAM_MEMBER:
            eid = clean_string(entry.get("employeeId"))
            if eid is None or eid != employee_id:
                continue
            matched = True
            match.employee_id = eid
            match.employee_name = clean_string(entry.get("employeeName"))
            match.employee_date = parse_timestamp(entry.get("date"), timezone_str)
        elif entry_type == ASSIGNMENT_TEAM:
            tid = clean_string(entry.get("teamId"))
            if tid is None or tid not in team_ids:
                continue
            matched = True
            match.team_id = tid
            match.team_name = clean_string(entry.get("teamName"))
            match.team_members = string_list(entry.get("teamMembers")) or match.team_members
            match.team_date = parse_timestamp(entry.get("date"), timezone_str)

    return match if matched else None


def first_assignment(raw_job: Mapping[str, Any], timezone_str: Optional[str] = None) -> AssignmentMatch:
    """The first entry taken as-is, whatever its type."""
    entries = _entries(raw_job)
    if not entries:
        return AssignmentMatch()
    entry = entries[0]
    return AssignmentMatch(
        employee_id=clean_string(entry.get("employeeId")),
        employee_name=clean_string(entry.get("employeeName")),
        team_id=clean_string(entry.get("teamId")),
        team_name=clean_string(entry.get("teamName")),
        team_members=string_list(entry.get("teamMembers")),
        employee_date=parse_timestamp(entry.get("date"), timezone_str),
    )


def extract_scheduled_date(raw_job: Mapping[str, Any], timezone_str: Optional[str] = None) -> Optional[datetime]:
    return first_present(
        parse_timestamp(raw_job.get("installDate"), timezone_str),
        parse_timestamp(raw_job.get("date"), timezone_str),
    )


def decode_reschedule_request(
    raw_job: Mapping[str, Any],
    timezone_str: Optional[str] = None,
) -> Optional[RescheduleRequest]:
    """Read the reschedule request from the top-level field, else from `requests.reschedule`."""
    source = raw_job.get("rescheduleRequest")
    if not isinstance(source, Mapping):
        requests = raw_job.get("requests")
        source = requests.get("reschedule") if isinstance(requests, Mapping) else None
    if not isinstance(source, Mapping):
        return None

    approved = source.get("isApproved")
    return RescheduleRequest(
        requested_by=clean_string(source.get("requestedBy")) or "",
        requested_date=parse_timestamp(source.get("requestedDate"), timezone_str),
        reason=clean_string(source.get("reason")) or "",
        new_proposed_date=parse_timestamp(source.get("newProposedDate"), timezone_str),
        is_approved=approved if isinstance(approved, bool) else None,
        approved_date=parse_timestamp(source.get("approvedDate"), timezone_str),
    )


def _items(raw_job: Mapping[str, Any]) -> Optional[str]:
    items = raw_job.get("items")
    if isinstance(items, list):
        joined = ", ".join(s for s in (clean_string(i) for i in items) if s)
        return joined or None
    return first_present(clean_string(items), clean_string(raw_job.get("item")))


def _build_job(
    raw_job: Mapping[str, Any],
    match: AssignmentMatch,
    job_id: Optional[str],
    version: Optional[int],
    timezone_str: Optional[str],
) -> Job:
    data = raw_job
    requests = data.get("requests") if isinstance(data.get("requests"), Mapping) else {}

    scheduled_date = first_present(match.scheduled_date, extract_scheduled_date(data, timezone_str))
    scheduled_time = clean_string(data.get("scheduledTime"))
    if scheduled_time is None and scheduled_date is not None:
        scheduled_time = format_short_time(scheduled_date, timezone_str)

    job_number = clean_string(data.get("jobNumber"))
    team_id = first_present(match.team_id, clean_string(data.get("assignedTeamId")))
    team_name = first_present(match.team_name, clean_string(data.get("assignedTeamName")))

    return Job(
        id=job_id,
        version=version,
        job_number=job_number,
        doli_number=first_present(clean_string(data.get("dolibarrId")), clean_string(data.get("doliNumber"))),
        store_company=first_present(clean_string(requests.get("storeCompany")), clean_string(data.get("storeCompany"))),
        client_name=first_present(clean_string(data.get("customerName")), job_number),
        client_address=first_present(
            clean_string(data.get("clientAddress")),
            clean_string(data.get("address")),
            clean_string(data.get("location")),
        ),
        client_phone=clean_string(data.get("phoneNumber")),
        pickup_address=first_present(clean_string(data.get("pickUpAddress")), clean_string(data.get("pickupAddress"))),
        install_type=first_present(clean_string(data.get("installType")), clean_string(data.get("jobType"))),
        description=clean_string(data.get("description")),
        items=_items(data),
        notes=clean_string(data.get("notes")),
        scheduled_date=scheduled_date,
        scheduled_time=scheduled_time,
        time_frame=first_present(clean_string(requests.get("timeFrame")), clean_string(data.get("timeFrame"))),
        assigned_employee_id=first_present(
            match.employee_id,
            clean_string(data.get("assignedEmployeeId")),
            match.team_id,
            UNASSIGNED,
        ),
        assigned_employee_name=first_present(
            match.employee_name,
            clean_string(data.get("assignedEmployeeName")),
            team_name,
            TEAM_JOB_LABEL,
        ),
        assigned_team_id=team_id,
        assigned_team_name=team_name,
        assigned_team_members=first_present(
            string_list(data.get("assignedTeamMembers")),
            match.team_members,
            string_list(data.get("teamMembers")),
        ),
        status=map_status(first_present(clean_string(requests.get("status")), clean_string(data.get("status")))),
        created_at=parse_timestamp(data.get("createdAt"), timezone_str),
        updated_at=parse_timestamp(data.get("updatedAt"), timezone_str),
        reschedule_request=decode_reschedule_request(data, timezone_str),
    )


def resolve_job_for_requester(
    raw_job: Mapping[str, Any],
    employee_id: str,
    team_ids: Iterable[str],
    job_id: Optional[str] = None,
    version: Optional[int] = None,
    timezone_str: Optional[str] = None,
) -> Optional[Job]:
    """
    Resolve a raw job for one employee.

    Returns None when no assignment entry names the employee or one of their
    teams; the caller drops such jobs from that employee's view.
    """
    match = match_assignments(raw_job, employee_id, team_ids, timezone_str)
    if match is None:
        return None
    return _build_job(raw_job, match, job_id, version, timezone_str)


def resolve_job_for_admin(
    raw_job: Mapping[str, Any],
    job_id: Optional[str] = None,
    version: Optional[int] = None,
    timezone_str: Optional[str] = None,
) -> Job:
    """Resolve a raw job for the admin view: no filtering, first assignment entry is authoritative."""
    return _build_job(raw_job, first_assignment(raw_job, timezone_str), job_id, version, timezone_str)
