from typing import Dict, List, Optional

from pydantic import BaseModel

from .jobs import Job
from .people import ClockRecord, EmployeeStatus


class AdminDashboardResponse(BaseModel):
    clocked_in_count: int
    clocked_out_count: int
    employee_statuses: List[EmployeeStatus]
    jobs_today: int
    completed_today: int
    jobs_by_status: Dict[str, int]
    pending_reschedules: int
    team_count: int
    team_member_count: int
    time_entry_count: int
    active_time_entry_count: int


class EmployeeDashboardResponse(BaseModel):
    employee_id: str
    clock_record: Optional[ClockRecord] = None
    jobs: List[Job]
    in_progress_count: int
    team_job_count: int
