from datetime import datetime, timezone

import pytest

from fieldops.errors import PreconditionFailed
from fieldops.schemas.fleet import LicensePlate
from fieldops.services.vehicle_assignment import (
    assign_plate,
    classify,
    new_plate_document,
    plate_from_document,
    release_plate,
)
from fieldops.storage.provider import DELETE_FIELD, Document


NOW = datetime(2024, 1, 5, 15, 0, tzinfo=timezone.utc)


def test_plate_held_by_requester_is_selectable():
    plate = LicensePlate(plate_num="ABC123", available=False, current_driver_id="emp1")

    mine = classify(plate, "emp1")
    theirs = classify(plate, "emp2")

    assert (mine.held_by_self, mine.available, mine.held_by_other) == (True, True, False)
    assert theirs.held_by_other
    assert not theirs.available
    assert not theirs.held_by_self


def test_plate_held_by_requesters_team_is_selectable():
    plate = LicensePlate(plate_num="ABC123", available=False, current_driver_id="emp9", current_team_id="t1")

    result = classify(plate, "emp2", team_id="t1")

    assert result.held_by_self
    assert result.available
    assert not result.held_by_other


def test_free_plate_is_available_and_not_held():
    result = classify(LicensePlate(plate_num="ABC123"), "emp1")

    assert result.available
    assert not result.held_by_self
    assert not result.held_by_other


def test_blank_requester_never_holds_a_plate():
    plate = LicensePlate(plate_num="ABC123", available=False)

    assert classify(plate, "").held_by_other


def test_assign_writes_driver_and_clears_team_fields():
    plate = LicensePlate(id="p1", plate_num="ABC123")

    updates = assign_plate(plate, "emp1", "Alice", now=NOW)

    assert updates["currentDriverId"] == "emp1"
    assert updates["currentDriverName"] == "Alice"
    assert updates["assignedAt"] == NOW
    assert updates["available"] is False
    assert updates["currentTeamId"] is DELETE_FIELD
    assert updates["currentTeamMembers"] is DELETE_FIELD
    assert plate.current_driver_id == "emp1"
    assert not plate.available


def test_assign_with_team_records_team_fields():
    plate = LicensePlate(id="p1", plate_num="ABC123")

    updates = assign_plate(plate, "emp1", "Alice", "t1", "North Crew", ["Alice", "Bruno"], now=NOW)

    assert updates["currentTeamId"] == "t1"
    assert updates["currentTeamName"] == "North Crew"
    assert updates["currentTeamMembers"] == ["Alice", "Bruno"]
    assert plate.current_team_members == ["Alice", "Bruno"]


def test_assign_refuses_plate_held_by_someone_else():
    plate = LicensePlate(plate_num="ABC123", available=False, current_driver_id="emp2")

    with pytest.raises(PreconditionFailed):
        assign_plate(plate, "emp1", "Alice", now=NOW)


def test_reassigning_own_plate_is_allowed():
    plate = LicensePlate(plate_num="ABC123", available=False, current_driver_id="emp1")

    updates = assign_plate(plate, "emp1", "Alice", now=NOW)

    assert updates["currentDriverId"] == "emp1"


def test_release_clears_every_assignment_field():
    plate = LicensePlate(plate_num="ABC123")
    assign_plate(plate, "emp1", "Alice", "t1", "North Crew", ["Alice"], now=NOW)

    updates = release_plate(plate)

    assert updates["available"] is True
    for field in ("currentDriverId", "currentDriverName", "currentTeamId",
                  "currentTeamName", "currentTeamMembers", "assignedAt"):
        assert updates[field] is DELETE_FIELD
    assert plate.available
    assert plate.current_driver_id is None
    assert plate.current_team_members is None


def test_plate_document_defaults():
    doc = Document(id="p1", data={"plateNum": " XYZ 789 ", "available": "no"}, version=3)

    plate = plate_from_document(doc)

    assert plate.plate_num == "XYZ 789"
    assert plate.available is True
    assert plate.version == 3
    assert new_plate_document("XYZ 789", now=NOW) == {"plateNum": "XYZ 789", "available": True, "createdAt": NOW}
