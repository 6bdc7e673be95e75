"""
Clock in/out over the `timeEntries` collection.

An entry is active while `clockOut` is null; an employee has at most one
active entry. Vehicles picked at clock-in are released at clock-out.
"""
from datetime import datetime, timezone
from typing import List, Optional

import structlog

from ..config import settings
from ..errors import FieldOpsError, PreconditionFailed
from ..schemas.people import ClockRecord, TimeEntry
from ..storage.provider import Document, DocumentStore
from . import fleet
from .job_resolver import clean_string
from .people import EMPLOYEES, get_teams_for_employee
from .time_rules import hours_between, local_date_string, parse_timestamp
from .vehicle_assignment import classify


logger = structlog.get_logger(__name__)

TIME_ENTRIES = "timeEntries"


def _now(now: Optional[datetime]) -> datetime:
    return now or datetime.now(timezone.utc)


def time_entry_from_document(doc: Document) -> Optional[TimeEntry]:
    """Decode an entry; entries without an employee or clock-in time are skipped."""
    employee_id = clean_string(doc.data.get("employeeId"))
    clock_in = parse_timestamp(doc.data.get("clockIn"))
    if not employee_id or clock_in is None:
        return None
    duration = doc.data.get("duration")
    return TimeEntry(
        id=doc.id,
        employee_id=employee_id,
        clock_in=clock_in,
        clock_out=parse_timestamp(doc.data.get("clockOut")),
        duration=float(duration) if isinstance(duration, (int, float)) and not isinstance(duration, bool) else None,
        pay_period_id=clean_string(doc.data.get("payPeriodId")) or "unassigned",
    )


def _record(entry: TimeEntry, employee_name: str) -> ClockRecord:
    return ClockRecord(
        id=entry.id,
        employee_id=entry.employee_id,
        employee_name=employee_name,
        clock_in_time=entry.clock_in,
        clock_out_time=entry.clock_out,
        date=local_date_string(entry.clock_in, settings.tz_default),
    )


def active_entry(store: DocumentStore, employee_id: str) -> Optional[TimeEntry]:
    docs = store.list(TIME_ENTRIES, where={"employeeId": employee_id, "clockOut": None})
    for doc in docs:
        entry = time_entry_from_document(doc)
        if entry is not None:
            return entry
    return None


def clock_in(
    store: DocumentStore,
    employee_id: str,
    employee_name: str,
    plate_id: Optional[str] = None,
    team_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> ClockRecord:
    """
    Open a time entry, optionally taking a vehicle for the employee (and team).

    The vehicle is assigned before the entry is written. If the entry cannot
    be written, a vehicle taken by this call is released again.
    """
    now = _now(now)
    if active_entry(store, employee_id) is not None:
        raise PreconditionFailed("Already clocked in")

    team = None
    if team_id is not None:
        team = next((t for t in get_teams_for_employee(store, employee_id) if t.id == team_id), None)
        if team is None:
            raise PreconditionFailed("Employee is not a member of that team")

    taken_plate_id = None
    if plate_id is not None:
        plate = fleet.get_plate(store, plate_id)
        held_before = classify(plate, employee_id, team_id).held_by_self
        fleet.assign(
            store,
            plate.id,
            employee_id,
            employee_name,
            team_id=team.id if team else None,
            team_name=team.name if team else None,
            team_members=team.members if team else None,
            now=now,
        )
        if not held_before:
            taken_plate_id = plate.id

    try:
        doc = store.add(TIME_ENTRIES, {
            "employeeId": employee_id,
            "clockIn": now,
            "clockOut": None,
            "duration": None,
            "payPeriodId": "unassigned",
        })
    except FieldOpsError:
        if taken_plate_id is not None:
            fleet.release(store, taken_plate_id)
            logger.warning("clock_in_vehicle_released", employee_id=employee_id, plate_id=taken_plate_id)
        raise

    logger.info("clocked_in", employee_id=employee_id, entry_id=doc.id, plate_id=plate_id)
    return _record(time_entry_from_document(doc), employee_name)


def clock_out(store: DocumentStore, employee_id: str, now: Optional[datetime] = None) -> TimeEntry:
    """Close the active entry with its duration in hours and release held vehicles."""
    now = _now(now)
    entry = active_entry(store, employee_id)
    if entry is None:
        raise PreconditionFailed("No active clock in found")

    doc = store.update(TIME_ENTRIES, entry.id, {
        "clockOut": now,
        "duration": hours_between(entry.clock_in, now),
    })
    released = fleet.release_plates_held_by(store, employee_id)
    logger.info("clocked_out", employee_id=employee_id, entry_id=entry.id, released_plates=len(released))
    return time_entry_from_document(doc)


def today_clock_status(store: DocumentStore, employee_id: str) -> Optional[ClockRecord]:
    entry = active_entry(store, employee_id)
    if entry is None:
        return None
    return _record(entry, "")


def clocked_in_employees(store: DocumentStore) -> List[ClockRecord]:
    """Every open entry whose employee is known, most recent clock-in first."""
    names = {
        doc.id: clean_string(doc.data.get("name"))
        for doc in store.list(EMPLOYEES)
    }
    records: List[ClockRecord] = []
    for doc in store.list(TIME_ENTRIES, where={"clockOut": None}):
        entry = time_entry_from_document(doc)
        if entry is None:
            continue
        name = names.get(entry.employee_id)
        if not name:
            logger.warning("clock_record_unknown_employee", employee_id=entry.employee_id)
            continue
        records.append(_record(entry, name))
    records.sort(key=lambda r: r.clock_in_time, reverse=True)
    return records


def entries_from_documents(docs: List[Document]) -> List[TimeEntry]:
    entries = [time_entry_from_document(doc) for doc in docs]
    entries = [e for e in entries if e is not None]
    entries.sort(key=lambda e: e.clock_in, reverse=True)
    return entries


def recent_time_entries(store: DocumentStore, limit: Optional[int] = None) -> List[TimeEntry]:
    entries = entries_from_documents(store.list(TIME_ENTRIES))
    if limit is None:
        limit = settings.time_entries_recent_limit
    return entries[:limit]


def time_entries_for_employee(store: DocumentStore, employee_id: str) -> List[TimeEntry]:
    return entries_from_documents(store.list(TIME_ENTRIES, where={"employeeId": employee_id}))
