from fastapi import APIRouter, Depends

from ..db import get_store
from ..schemas.dashboard import AdminDashboardResponse, EmployeeDashboardResponse
from ..services.dashboard import admin_dashboard, employee_dashboard
from ..storage.provider import DocumentStore


router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/admin", response_model=AdminDashboardResponse)
def get_admin_dashboard(store: DocumentStore = Depends(get_store)):
    return admin_dashboard(store)


@router.get("/employee/{employee_id}", response_model=EmployeeDashboardResponse)
def get_employee_dashboard(employee_id: str, store: DocumentStore = Depends(get_store)):
    return employee_dashboard(store, employee_id)
