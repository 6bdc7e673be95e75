from typing import List, Optional

from fastapi import APIRouter, Depends

from ..db import get_store
from ..routes.jobs import expected_version  # reuse precondition dep
from ..schemas.fleet import (
    LicensePlate,
    LicensePlateAssign,
    LicensePlateCreate,
    LicensePlateView,
    VehicleClassification,
)
from ..services import fleet as fleet_service
from ..services.vehicle_assignment import classify
from ..storage.provider import DocumentStore


router = APIRouter(prefix="/fleet", tags=["fleet"])


# ---------- LICENSE PLATES ----------
@router.get("/plates", response_model=List[LicensePlateView])
def list_plates(
    employee_id: Optional[str] = None,
    team_id: Optional[str] = None,
    store: DocumentStore = Depends(get_store),
):
    """List plates by number; pass employee_id (and team_id) to classify them for a vehicle picker"""
    return fleet_service.list_plates(store, employee_id, team_id)


@router.post("/plates", response_model=LicensePlate)
def create_plate(payload: LicensePlateCreate, store: DocumentStore = Depends(get_store)):
    return fleet_service.create_plate(store, payload.plate_num)


@router.get("/plates/by-number/{plate_num}", response_model=LicensePlate)
def get_plate_by_number(plate_num: str, store: DocumentStore = Depends(get_store)):
    return fleet_service.find_plate_by_number(store, plate_num)


@router.get("/plates/{plate_id}", response_model=LicensePlate)
def get_plate(plate_id: str, store: DocumentStore = Depends(get_store)):
    return fleet_service.get_plate(store, plate_id)


@router.get("/plates/{plate_id}/classification", response_model=VehicleClassification)
def classify_plate(
    plate_id: str,
    employee_id: str,
    team_id: Optional[str] = None,
    store: DocumentStore = Depends(get_store),
):
    return classify(fleet_service.get_plate(store, plate_id), employee_id, team_id)


@router.post("/plates/{plate_id}/assign", response_model=LicensePlate)
def assign_plate(
    plate_id: str,
    payload: LicensePlateAssign,
    store: DocumentStore = Depends(get_store),
    version: Optional[int] = Depends(expected_version),
):
    """Assign a plate to a driver; 409 when someone else holds it"""
    return fleet_service.assign(
        store,
        plate_id,
        payload.driver_id,
        payload.driver_name,
        team_id=payload.team_id,
        team_name=payload.team_name,
        team_members=payload.team_members,
        expected_version=version,
    )


@router.post("/plates/{plate_id}/release", response_model=LicensePlate)
def release_plate(
    plate_id: str,
    store: DocumentStore = Depends(get_store),
    version: Optional[int] = Depends(expected_version),
):
    return fleet_service.release(store, plate_id, expected_version=version)
