"""
Vehicle (license plate) assignment rules used at clock-in.
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

import structlog

from ..errors import PreconditionFailed
from ..schemas.fleet import LicensePlate, VehicleClassification
from ..storage.provider import DELETE_FIELD, Document
from .job_resolver import clean_string, string_list
from .time_rules import parse_timestamp


logger = structlog.get_logger(__name__)

_ASSIGNMENT_FIELDS = (
    "currentDriverId",
    "currentDriverName",
    "currentTeamId",
    "currentTeamName",
    "currentTeamMembers",
    "assignedAt",
)


def plate_from_document(doc: Document) -> LicensePlate:
    data: Mapping[str, Any] = doc.data
    available = data.get("available")
    return LicensePlate(
        id=doc.id,
        version=doc.version,
        plate_num=clean_string(data.get("plateNum")) or "",
        current_driver_id=clean_string(data.get("currentDriverId")),
        current_driver_name=clean_string(data.get("currentDriverName")),
        current_team_id=clean_string(data.get("currentTeamId")),
        current_team_name=clean_string(data.get("currentTeamName")),
        current_team_members=string_list(data.get("currentTeamMembers")),
        assigned_at=parse_timestamp(data.get("assignedAt")),
        available=available if isinstance(available, bool) else True,
    )


def classify(
    plate: LicensePlate,
    employee_id: str,
    team_id: Optional[str] = None,
) -> VehicleClassification:
    """
    Classify a plate for one requester.

    A plate held by the requester (directly or through `team_id`) is always
    selectable; only a plate held by someone else disables selection.
    """
    held_by_self = bool(employee_id) and plate.current_driver_id == employee_id
    if team_id is not None and plate.current_team_id == team_id:
        held_by_self = True
    available = plate.available or held_by_self
    return VehicleClassification(
        available=available,
        held_by_self=held_by_self,
        held_by_other=not available and not held_by_self,
    )


def new_plate_document(plate_num: str, now: Optional[datetime] = None) -> Dict[str, Any]:
    return {
        "plateNum": plate_num,
        "available": True,
        "createdAt": now or datetime.now(timezone.utc),
    }


def assign_plate(
    plate: LicensePlate,
    driver_id: str,
    driver_name: str,
    team_id: Optional[str] = None,
    team_name: Optional[str] = None,
    team_members: Optional[List[str]] = None,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Hand a plate to a driver (and optionally their team).

    Raises PreconditionFailed when the plate is held by another party.
    Re-selecting a plate the driver already holds is a plain re-assignment.
    """
    if classify(plate, driver_id, team_id).held_by_other:
        raise PreconditionFailed(f"Vehicle {plate.plate_num} is assigned to someone else")
    now = now or datetime.now(timezone.utc)

    updates: Dict[str, Any] = {
        "currentDriverId": driver_id,
        "currentDriverName": driver_name,
        "assignedAt": now,
        "available": False,
    }
    if team_id is not None:
        updates["currentTeamId"] = team_id
        updates["currentTeamName"] = team_name if team_name is not None else DELETE_FIELD
        updates["currentTeamMembers"] = list(team_members) if team_members else DELETE_FIELD
    else:
        updates["currentTeamId"] = DELETE_FIELD
        updates["currentTeamName"] = DELETE_FIELD
        updates["currentTeamMembers"] = DELETE_FIELD

    plate.current_driver_id = driver_id
    plate.current_driver_name = driver_name
    plate.current_team_id = team_id
    plate.current_team_name = team_name if team_id is not None else None
    plate.current_team_members = list(team_members) if (team_id is not None and team_members) else None
    plate.assigned_at = now
    plate.available = False
    logger.info("plate_assigned", plate_id=plate.id, driver_id=driver_id, team_id=team_id)
    return updates


def release_plate(plate: LicensePlate) -> Dict[str, Any]:
    """Clear every driver/team field and mark the plate available."""
    plate.current_driver_id = None
    plate.current_driver_name = None
    plate.current_team_id = None
    plate.current_team_name = None
    plate.current_team_members = None
    plate.assigned_at = None
    plate.available = True
    updates: Dict[str, Any] = {field: DELETE_FIELD for field in _ASSIGNMENT_FIELDS}
    updates["available"] = True
    logger.info("plate_released", plate_id=plate.id)
    return updates
