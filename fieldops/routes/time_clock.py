"""
Time clock API routes.
Clock in/out, current status and time entry listings.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from ..db import get_store
from ..schemas.people import ClockInRequest, ClockOutRequest, ClockRecord, TimeEntry
from ..services import time_clock
from ..storage.provider import DocumentStore


router = APIRouter(prefix="/time", tags=["time"])


@router.post("/clock-in", response_model=ClockRecord)
def clock_in(payload: ClockInRequest, store: DocumentStore = Depends(get_store)):
    """
    Clock an employee in.
    Optionally takes a vehicle for the employee (and the chosen team).
    """
    return time_clock.clock_in(
        store,
        payload.employee_id,
        payload.employee_name,
        plate_id=payload.plate_id,
        team_id=payload.team_id,
    )


@router.post("/clock-out", response_model=TimeEntry)
def clock_out(payload: ClockOutRequest, store: DocumentStore = Depends(get_store)):
    return time_clock.clock_out(store, payload.employee_id)


@router.get("/status/{employee_id}", response_model=Optional[ClockRecord])
def clock_status(employee_id: str, store: DocumentStore = Depends(get_store)):
    return time_clock.today_clock_status(store, employee_id)


@router.get("/clocked-in", response_model=List[ClockRecord])
def clocked_in(store: DocumentStore = Depends(get_store)):
    return time_clock.clocked_in_employees(store)


@router.get("/entries", response_model=List[TimeEntry])
def recent_entries(limit: Optional[int] = Query(None, ge=0), store: DocumentStore = Depends(get_store)):
    return time_clock.recent_time_entries(store, limit)


@router.get("/entries/{employee_id}", response_model=List[TimeEntry])
def employee_entries(employee_id: str, store: DocumentStore = Depends(get_store)):
    return time_clock.time_entries_for_employee(store, employee_id)
