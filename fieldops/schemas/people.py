from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class Employee(BaseModel):
    id: str
    name: str
    email: Optional[str] = None
    role: Optional[str] = None
    status: str = "active"
    created_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.status.lower() == "active"


class TeamMember(BaseModel):
    employee_id: str
    employee_name: str
    employee_role: Optional[str] = None


class Team(BaseModel):
    id: str
    name: str
    leader_id: Optional[str] = None
    leader_name: Optional[str] = None
    members: List[TeamMember] = []


class TeamMembership(BaseModel):
    """A team the requester belongs to, as needed at clock-in and for team jobs."""
    id: str
    name: str
    members: List[str] = []


class TimeEntry(BaseModel):
    id: str
    employee_id: str
    clock_in: datetime
    clock_out: Optional[datetime] = None
    duration: Optional[float] = None  # Hours
    pay_period_id: str = "unassigned"

    @property
    def is_active(self) -> bool:
        return self.clock_out is None


class ClockRecord(BaseModel):
    id: Optional[str] = None
    employee_id: str
    employee_name: str = ""
    clock_in_time: datetime
    clock_out_time: Optional[datetime] = None
    date: str  # YYYY-MM-DD, local


class EmployeeStatus(BaseModel):
    employee: Employee
    status: str  # Clocked In|Clocked Out|Not Clocked In
    clock_in_time: Optional[datetime] = None
    clock_out_time: Optional[datetime] = None
    hours_worked: Optional[float] = None


class ClockInRequest(BaseModel):
    employee_id: str
    employee_name: str
    plate_id: Optional[str] = None
    team_id: Optional[str] = None


class ClockOutRequest(BaseModel):
    employee_id: str
