from __future__ import annotations

from typing import List, Set

from ..schemas.people import Employee, Team, TeamMember, TeamMembership
from ..storage.provider import Document, DocumentStore
from .job_resolver import clean_string
from .time_rules import parse_timestamp


TEAMS = "teams"
EMPLOYEES = "employees"


def _member_dicts(doc: Document) -> List[dict]:
    members = doc.data.get("members")
    if not isinstance(members, list):
        return []
    return [m for m in members if isinstance(m, dict)]


def _is_member(doc: Document, employee_id: str) -> bool:
    return any(clean_string(m.get("employeeId")) == employee_id for m in _member_dicts(doc))


def team_from_document(doc: Document) -> Team:
    members = []
    for m in _member_dicts(doc):
        eid = clean_string(m.get("employeeId"))
        if not eid:
            continue
        members.append(TeamMember(
            employee_id=eid,
            employee_name=clean_string(m.get("employeeName")) or "",
            employee_role=clean_string(m.get("employeeRole")),
        ))
    return Team(
        id=doc.id,
        name=clean_string(doc.data.get("name")) or "Team",
        leader_id=clean_string(doc.data.get("leaderId")),
        leader_name=clean_string(doc.data.get("leaderName")),
        members=members,
    )


def get_team_ids(store: DocumentStore, employee_id: str) -> Set[str]:
    """Ids of every team listing the employee as a member."""
    if not employee_id:
        return set()
    return {doc.id for doc in store.list(TEAMS) if _is_member(doc, employee_id)}


def get_teams_for_employee(store: DocumentStore, employee_id: str) -> List[TeamMembership]:
    out: List[TeamMembership] = []
    for doc in store.list(TEAMS, order_by="name"):
        if not _is_member(doc, employee_id):
            continue
        names = [n for n in (clean_string(m.get("employeeName")) for m in _member_dicts(doc)) if n]
        out.append(TeamMembership(id=doc.id, name=clean_string(doc.data.get("name")) or "Team", members=names))
    return out


def list_teams(store: DocumentStore) -> List[Team]:
    return [team_from_document(doc) for doc in store.list(TEAMS, order_by="name")]


def employee_from_document(doc: Document) -> Employee:
    return Employee(
        id=doc.id,
        name=clean_string(doc.data.get("name")) or "",
        email=clean_string(doc.data.get("email")),
        role=clean_string(doc.data.get("role")),
        status=clean_string(doc.data.get("status")) or "active",
        created_at=parse_timestamp(doc.data.get("createdAt")),
    )


def list_active_employees(store: DocumentStore) -> List[Employee]:
    """Active employees by name; a missing status counts as active."""
    employees = [employee_from_document(doc) for doc in store.list(EMPLOYEES, order_by="name")]
    return [e for e in employees if e.is_active]
