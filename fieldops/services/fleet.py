"""
License plate reads and writes against the document store.
"""
from datetime import datetime
from typing import List, Optional

import structlog

from ..errors import NotFound
from ..schemas.fleet import LicensePlate, LicensePlateView
from ..storage.provider import DocumentStore
from .vehicle_assignment import (
    assign_plate,
    classify,
    new_plate_document,
    plate_from_document,
    release_plate,
)


logger = structlog.get_logger(__name__)

PLATES = "LicensePlate"


def get_plate(store: DocumentStore, plate_id: str) -> LicensePlate:
    doc = store.get(PLATES, plate_id)
    if doc is None:
        raise NotFound("Vehicle not found")
    return plate_from_document(doc)


def find_plate_by_number(store: DocumentStore, plate_num: str) -> LicensePlate:
    docs = store.list(PLATES, where={"plateNum": plate_num}, limit=1)
    if not docs:
        raise NotFound("Vehicle not found")
    return plate_from_document(docs[0])


def list_plates(
    store: DocumentStore,
    employee_id: Optional[str] = None,
    team_id: Optional[str] = None,
) -> List[LicensePlateView]:
    """All plates by number; classified for the requester when one is given."""
    out: List[LicensePlateView] = []
    for doc in store.list(PLATES, order_by="plateNum"):
        plate = plate_from_document(doc)
        view = LicensePlateView(**plate.model_dump())
        if employee_id:
            view.classification = classify(plate, employee_id, team_id)
        out.append(view)
    return out


def create_plate(store: DocumentStore, plate_num: str, now: Optional[datetime] = None) -> LicensePlate:
    doc = store.add(PLATES, new_plate_document(plate_num, now))
    logger.info("plate_created", plate_id=doc.id, plate_num=plate_num)
    return plate_from_document(doc)


def assign(
    store: DocumentStore,
    plate_id: str,
    driver_id: str,
    driver_name: str,
    team_id: Optional[str] = None,
    team_name: Optional[str] = None,
    team_members: Optional[List[str]] = None,
    expected_version: Optional[int] = None,
    now: Optional[datetime] = None,
) -> LicensePlate:
    plate = get_plate(store, plate_id)
    updates = assign_plate(plate, driver_id, driver_name, team_id, team_name, team_members, now)
    doc = store.update(PLATES, plate_id, updates, expected_version=expected_version)
    return plate_from_document(doc)


def release(store: DocumentStore, plate_id: str, expected_version: Optional[int] = None) -> LicensePlate:
    plate = get_plate(store, plate_id)
    doc = store.update(PLATES, plate_id, release_plate(plate), expected_version=expected_version)
    return plate_from_document(doc)


def release_plates_held_by(store: DocumentStore, employee_id: str) -> List[LicensePlate]:
    released = []
    for doc in store.list(PLATES, where={"currentDriverId": employee_id}):
        plate = plate_from_document(doc)
        released.append(plate_from_document(store.update(PLATES, doc.id, release_plate(plate))))
    return released
