from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, field_validator


class LicensePlate(BaseModel):
    id: Optional[str] = None
    version: Optional[int] = None
    plate_num: str
    current_driver_id: Optional[str] = None
    current_driver_name: Optional[str] = None
    current_team_id: Optional[str] = None
    current_team_name: Optional[str] = None
    current_team_members: Optional[List[str]] = None
    assigned_at: Optional[datetime] = None
    available: bool = True


class VehicleClassification(BaseModel):
    available: bool
    held_by_self: bool
    held_by_other: bool


class LicensePlateView(LicensePlate):
    """Plate as presented to one requester in a picker."""
    classification: Optional[VehicleClassification] = None


class LicensePlateCreate(BaseModel):
    plate_num: str

    @field_validator("plate_num")
    @classmethod
    def plate_required(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("plate_num is required")
        return v


class LicensePlateAssign(BaseModel):
    driver_id: str
    driver_name: str
    team_id: Optional[str] = None
    team_name: Optional[str] = None
    team_members: Optional[List[str]] = None
