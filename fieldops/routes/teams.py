from typing import List

from fastapi import APIRouter, Depends

from ..db import get_store
from ..schemas.people import Team, TeamMembership
from ..services.people import get_teams_for_employee, list_teams
from ..storage.provider import DocumentStore


router = APIRouter(prefix="/teams", tags=["teams"])


@router.get("", response_model=List[Team])
def all_teams(store: DocumentStore = Depends(get_store)):
    return list_teams(store)


@router.get("/employee/{employee_id}", response_model=List[TeamMembership])
def teams_for_employee(employee_id: str, store: DocumentStore = Depends(get_store)):
    return get_teams_for_employee(store, employee_id)
