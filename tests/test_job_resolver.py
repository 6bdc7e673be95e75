from datetime import date, datetime, timezone

from fieldops.schemas.jobs import JobStatus
from fieldops.services.job_resolver import (
    TEAM_JOB_LABEL,
    map_status,
    resolve_job_for_admin,
    resolve_job_for_requester,
    statuses_equal,
)


def _member(employee_id, name, when="2024-01-05"):
    return {"type": "team-member", "employeeId": employee_id, "employeeName": name, "date": when}


def _team(team_id, name, members=None, when="2024-01-05"):
    return {"type": "team", "teamId": team_id, "teamName": name, "teamMembers": members or [], "date": when}


def test_resolves_employee_assignment_end_to_end():
    raw = {
        "assignments": [_member("e1", "Alice")],
        "status": "picking_up",
    }
    job = resolve_job_for_requester(raw, "e1", set(), job_id="j1")

    assert job is not None
    assert job.id == "j1"
    assert job.assigned_employee_name == "Alice"
    assert job.assigned_employee_id == "e1"
    assert job.status is JobStatus.picking_up
    assert job.scheduled_date.date() == date(2024, 1, 5)
    assert job.scheduled_time == "12:00 AM"


def test_matching_entry_name_wins_among_several_entries():
    raw = {"assignments": [_member("e2", "Bob"), _member("e1", "Alice"), _member("e3", "Cara")]}

    job = resolve_job_for_requester(raw, "e1", set())

    assert job.assigned_employee_name == "Alice"


def test_job_not_visible_without_matching_entry():
    raw = {"assignments": [_member("e2", "Bob"), _team("t9", "Other Crew")]}

    assert resolve_job_for_requester(raw, "e1", {"t1"}) is None


def test_job_without_assignments_is_not_visible():
    assert resolve_job_for_requester({"status": "scheduled"}, "e1", {"t1"}) is None
    assert resolve_job_for_requester({"assignments": "bogus"}, "e1", set()) is None


def test_blank_employee_id_never_matches():
    raw = {"assignments": [{"type": "team-member", "employeeId": "  ", "employeeName": "Ghost"}]}

    assert resolve_job_for_requester(raw, "", set()) is None


def test_team_assignment_visible_to_member():
    raw = {"assignments": [_team("t1", "North Crew", ["Bruno", "Chen"])]}

    job = resolve_job_for_requester(raw, "e1", {"t1"})

    assert job.assigned_team_id == "t1"
    assert job.assigned_team_name == "North Crew"
    assert job.assigned_team_members == ["Bruno", "Chen"]
    assert job.assigned_employee_name == "North Crew"
    assert job.assigned_employee_id == "t1"
    assert job.is_team_job


def test_team_job_without_names_uses_team_job_label():
    raw = {"assignments": [{"type": "team", "teamId": "t1"}]}

    job = resolve_job_for_requester(raw, "e1", {"t1"})

    assert job.assigned_employee_name == TEAM_JOB_LABEL


def test_employee_and_team_matches_both_populate():
    raw = {
        "assignments": [
            _team("t1", "North Crew", ["Bruno"], when="2024-02-02"),
            _member("e1", "Alice", when="2024-02-01"),
        ]
    }

    job = resolve_job_for_requester(raw, "e1", {"t1"})

    assert job.assigned_employee_name == "Alice"
    assert job.assigned_team_id == "t1"
    assert job.assigned_team_name == "North Crew"
    assert job.scheduled_date.date() == date(2024, 2, 1)


def test_scheduled_date_fallback_chain():
    entry = {"type": "team-member", "employeeId": "e1", "employeeName": "Alice"}

    from_install = resolve_job_for_requester(
        {"assignments": [entry], "installDate": "2024-03-01", "date": "2024-04-01"}, "e1", set()
    )
    from_date = resolve_job_for_requester({"assignments": [entry], "date": "2024-04-01"}, "e1", set())
    undated = resolve_job_for_requester({"assignments": [entry], "installDate": "not a date"}, "e1", set())

    assert from_install.scheduled_date.date() == date(2024, 3, 1)
    assert from_date.scheduled_date.date() == date(2024, 4, 1)
    assert undated is not None
    assert undated.scheduled_date is None
    assert undated.scheduled_time is None


def test_iso_timestamps_are_accepted():
    raw = {"assignments": [_member("e1", "Alice", when="2024-01-05T17:30:00+00:00")]}

    job = resolve_job_for_requester(raw, "e1", set(), timezone_str="UTC")

    assert job.scheduled_date == datetime(2024, 1, 5, 17, 30, tzinfo=timezone.utc)
    assert job.scheduled_time == "5:30 PM"


def test_explicit_scheduled_time_is_kept():
    raw = {"assignments": [_member("e1", "Alice")], "scheduledTime": " 9:00 AM "}

    job = resolve_job_for_requester(raw, "e1", set())

    assert job.scheduled_time == "9:00 AM"


def test_blank_strings_are_absent():
    raw = {
        "assignments": [_member("e1", "Alice")],
        "jobNumber": "1001",
        "customerName": "   ",
        "clientAddress": "",
        "address": "48 Harbour Rd",
        "storeCompany": "Costco",
        "requests": {"storeCompany": " "},
    }

    job = resolve_job_for_requester(raw, "e1", set())

    assert job.client_name == "1001"
    assert job.client_address == "48 Harbour Rd"
    assert job.store_company == "Costco"


def test_items_list_or_string():
    entry = _member("e1", "Alice")

    as_list = resolve_job_for_requester({"assignments": [entry], "items": ["TV", " ", "Mount"]}, "e1", set())
    as_string = resolve_job_for_requester({"assignments": [entry], "items": " Washer "}, "e1", set())
    legacy = resolve_job_for_requester({"assignments": [entry], "item": "Dryer"}, "e1", set())

    assert as_list.items == "TV, Mount"
    assert as_string.items == "Washer"
    assert legacy.items == "Dryer"


def test_request_status_takes_precedence():
    raw = {"assignments": [_member("e1", "Alice")], "status": "scheduled", "requests": {"status": "En Route"}}

    job = resolve_job_for_requester(raw, "e1", set())

    assert job.status is JobStatus.en_route


def test_status_mapping_is_total():
    assert map_status("something odd") is JobStatus.scheduled
    assert map_status(None) is JobStatus.scheduled
    assert map_status(42) is JobStatus.scheduled
    assert map_status("In Progress") is JobStatus.in_progress
    assert map_status("delivering") is JobStatus.in_progress
    assert map_status("Pick Up") is JobStatus.pick_up
    assert map_status("CANCELLED") is JobStatus.cancelled
    assert map_status(map_status("En Route").value) is JobStatus.en_route


def test_complete_and_completed_compare_equal():
    complete = map_status("complete")
    completed = map_status("Completed")

    assert statuses_equal(complete, completed)
    assert complete.same_as(completed)
    assert complete.display_name == completed.display_name == "Complete"
    assert not statuses_equal(complete, JobStatus.en_route)


def test_admin_resolver_takes_first_entry_without_filtering():
    raw = {
        "assignments": [
            _team("t1", "North Crew", ["Bruno"], when="2024-05-01"),
            _member("e1", "Alice", when="2024-06-01"),
        ],
    }

    job = resolve_job_for_admin(raw, job_id="j7")

    assert job.id == "j7"
    assert job.assigned_team_id == "t1"
    assert job.assigned_employee_name == "North Crew"
    assert job.scheduled_date.date() == date(2024, 5, 1)


def test_admin_resolver_handles_unassigned_job():
    job = resolve_job_for_admin({"installDate": "2024-05-01"})

    assert job.assigned_employee_id == "unassigned"
    assert job.assigned_employee_name == TEAM_JOB_LABEL
    assert job.scheduled_date.date() == date(2024, 5, 1)


def test_reschedule_request_read_from_either_variant():
    nested = {
        "assignments": [_member("e1", "Alice")],
        "requests": {"reschedule": {"requestedBy": "Alice", "reason": "Sick", "requestedDate": "2024-01-04T10:00:00+00:00"}},
    }
    legacy = dict(nested, rescheduleRequest={"requestedBy": "Alice", "reason": "Legacy", "isApproved": True})

    pending = resolve_job_for_requester(nested, "e1", set()).reschedule_request
    approved = resolve_job_for_requester(legacy, "e1", set()).reschedule_request

    assert pending.reason == "Sick"
    assert pending.is_pending
    assert approved.reason == "Legacy"
    assert approved.is_approved is True


def test_non_boolean_approval_flag_is_pending():
    raw = {"requests": {"reschedule": {"reason": "x", "isApproved": "yes"}}}

    job = resolve_job_for_admin(raw)

    assert job.reschedule_request.is_pending
    assert job.has_pending_reschedule
