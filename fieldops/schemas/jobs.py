from datetime import datetime
from typing import List, Optional
from enum import Enum

from pydantic import BaseModel, field_validator

from ..config import settings


# Enums
class JobStatus(str, Enum):
    scheduled = "scheduled"
    picking_up = "picking_up"
    pick_up = "pick_up"
    en_route = "en_route"
    in_progress = "in_progress"
    complete = "complete"
    completed = "completed"  # legacy spelling of complete
    rescheduled = "rescheduled"
    cancelled = "cancelled"

    @property
    def is_complete(self) -> bool:
        return self in (JobStatus.complete, JobStatus.completed)

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    def same_as(self, other: Optional["JobStatus"]) -> bool:
        """Equality that treats complete and completed as one status."""
        if other is None:
            return False
        if self.is_complete and other.is_complete:
            return True
        return self is other


_DISPLAY_NAMES = {
    JobStatus.scheduled: "Scheduled",
    JobStatus.picking_up: "Picking Up",
    JobStatus.pick_up: "Picked Up",
    JobStatus.en_route: "En Route",
    JobStatus.in_progress: "In Progress",
    JobStatus.complete: "Complete",
    JobStatus.completed: "Complete",
    JobStatus.rescheduled: "Rescheduled",
    JobStatus.cancelled: "Cancelled",
}


class RescheduleRequest(BaseModel):
    requested_by: str = ""
    requested_date: Optional[datetime] = None
    reason: str = ""
    new_proposed_date: Optional[datetime] = None
    is_approved: Optional[bool] = None  # None = pending
    approved_date: Optional[datetime] = None  # Decision time, approve or decline

    @property
    def is_pending(self) -> bool:
        return self.is_approved is None


class Job(BaseModel):
    id: Optional[str] = None
    version: Optional[int] = None
    job_number: Optional[str] = None
    doli_number: Optional[str] = None
    store_company: Optional[str] = None
    client_name: Optional[str] = None
    client_address: Optional[str] = None
    client_phone: Optional[str] = None
    pickup_address: Optional[str] = None
    install_type: Optional[str] = None
    description: Optional[str] = None
    items: Optional[str] = None
    notes: Optional[str] = None
    scheduled_date: Optional[datetime] = None
    scheduled_time: Optional[str] = None  # e.g. "9:00 AM"
    time_frame: Optional[str] = None  # e.g. "08:00 - 12:00"
    assigned_employee_id: Optional[str] = None
    assigned_employee_name: Optional[str] = None
    assigned_team_id: Optional[str] = None
    assigned_team_name: Optional[str] = None
    assigned_team_members: Optional[List[str]] = None
    status: JobStatus = JobStatus.scheduled
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    reschedule_request: Optional[RescheduleRequest] = None

    @property
    def is_team_job(self) -> bool:
        return self.assigned_team_id is not None

    @property
    def has_pending_reschedule(self) -> bool:
        return self.reschedule_request is not None and self.reschedule_request.is_pending


# Request bodies
class JobStatusUpdate(BaseModel):
    status: JobStatus


class RescheduleRequestCreate(BaseModel):
    requested_by: str
    reason: str
    new_proposed_date: Optional[datetime] = None

    @field_validator("reason")
    @classmethod
    def reason_required(cls, v: str) -> str:
        v = (v or "").strip()
        if len(v) < max(settings.reschedule_reason_min_chars, 1):
            raise ValueError("A reason is required for a reschedule request")
        return v

    @field_validator("requested_by")
    @classmethod
    def requester_required(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("requested_by is required")
        return v


class RescheduleApproval(BaseModel):
    new_date: Optional[datetime] = None


class JobReopen(BaseModel):
    status: JobStatus = JobStatus.scheduled
