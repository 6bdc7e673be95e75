from datetime import datetime, timedelta, timezone

from fieldops.services import time_clock
from fieldops.services.dashboard import (
    CLOCKED_IN,
    CLOCKED_OUT,
    NOT_CLOCKED_IN,
    admin_dashboard,
    count_by_status,
    employee_dashboard,
)
from fieldops.schemas.jobs import Job, JobStatus


# 2024-01-05 10:00 in Vancouver
NOW = datetime(2024, 1, 5, 18, 0, tzinfo=timezone.utc)


def _seed(store):
    store.add("employees", {"name": "Alice"}, doc_id="e1")
    store.add("employees", {"name": "Bruno", "status": "active"}, doc_id="e2")
    store.add("employees", {"name": "Chen", "status": "active"}, doc_id="e3")
    store.add("employees", {"name": "Dee", "status": "inactive"}, doc_id="e4")
    store.add("teams", {
        "name": "North Crew",
        "members": [
            {"employeeId": "e2", "employeeName": "Bruno"},
            {"employeeId": "e3", "employeeName": "Chen"},
        ],
    }, doc_id="t1")
    store.add("jobs", {
        "installDate": "2024-01-05",
        "status": "en_route",
        "assignments": [{"type": "team-member", "employeeId": "e1", "employeeName": "Alice"}],
    }, doc_id="j1")
    store.add("jobs", {
        "installDate": "2024-01-05",
        "status": "Completed",
        "assignments": [{"type": "team", "teamId": "t1", "teamName": "North Crew"}],
    }, doc_id="j2")
    store.add("jobs", {
        "installDate": "2024-01-05",
        "status": "complete",
        "assignments": [{"type": "team-member", "employeeId": "e3", "employeeName": "Chen"}],
        "requests": {"reschedule": {"requestedBy": "Chen", "reason": "Rain"}},
    }, doc_id="j3")
    store.add("jobs", {
        "installDate": "2024-01-06",
        "assignments": [{"type": "team-member", "employeeId": "e1", "employeeName": "Alice"}],
    }, doc_id="j4")


def test_admin_dashboard_counts(store):
    _seed(store)
    time_clock.clock_in(store, "e1", "Alice", now=NOW - timedelta(hours=2))
    time_clock.clock_in(store, "e2", "Bruno", now=NOW - timedelta(hours=3))
    time_clock.clock_out(store, "e2", now=NOW - timedelta(hours=1))

    dash = admin_dashboard(store, now=NOW)

    statuses = {s.employee.id: s.status for s in dash.employee_statuses}
    assert statuses == {"e1": CLOCKED_IN, "e2": CLOCKED_OUT, "e3": NOT_CLOCKED_IN}
    assert dash.clocked_in_count == 1
    assert dash.clocked_out_count == 1
    assert dash.jobs_today == 3
    assert dash.completed_today == 2
    assert dash.jobs_by_status == {"en_route": 1, "complete": 2}
    assert dash.pending_reschedules == 1
    assert dash.team_count == 1
    assert dash.team_member_count == 2
    assert dash.time_entry_count == 2
    assert dash.active_time_entry_count == 1


def test_yesterdays_closed_entry_is_not_clocked_out(store):
    _seed(store)
    time_clock.clock_in(store, "e3", "Chen", now=NOW - timedelta(days=1))
    time_clock.clock_out(store, "e3", now=NOW - timedelta(days=1, hours=-4))

    dash = admin_dashboard(store, now=NOW)

    chen = next(s for s in dash.employee_statuses if s.employee.id == "e3")
    assert chen.status == NOT_CLOCKED_IN


def test_employee_dashboard(store):
    _seed(store)
    time_clock.clock_in(store, "e3", "Chen", now=NOW)

    dash = employee_dashboard(store, "e3", now=NOW)

    assert {j.id for j in dash.jobs} == {"j2", "j3"}
    assert dash.team_job_count == 1
    assert dash.in_progress_count == 0
    assert dash.clock_record is not None

    alice = employee_dashboard(store, "e1", now=NOW)
    assert [j.id for j in alice.jobs] == ["j1"]
    assert alice.in_progress_count == 1
    assert alice.clock_record is None


def test_count_by_status_merges_complete_spellings():
    jobs = [Job(status=JobStatus.complete), Job(status=JobStatus.completed), Job(status=JobStatus.scheduled)]

    assert count_by_status(jobs) == {"complete": 2, "scheduled": 1}


def test_admin_dashboard_endpoint(client, store):
    _seed(store)

    r = client.get("/dashboard/admin")

    assert r.status_code == 200
    assert r.json()["team_count"] == 1
    assert len(r.json()["employee_statuses"]) == 3
