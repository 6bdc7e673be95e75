from typing import List

from fastapi import APIRouter, Depends

from ..db import get_store
from ..schemas.people import Employee
from ..services.people import list_active_employees
from ..storage.provider import DocumentStore


router = APIRouter(prefix="/employees", tags=["employees"])


@router.get("", response_model=List[Employee])
def list_employees(store: DocumentStore = Depends(get_store)):
    return list_active_employees(store)
