"""Staff roster routes; writes are limited to managers."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.dependencies import get_current_user, get_session, require_roles
from app.schemas import EmployeeCreate, EmployeeRead, EmployeeUpdate
from models.records import EmployeeRole, UserRole
from services.employees import EmployeeService

router = APIRouter(prefix="/employees", tags=["employees"], dependencies=[Depends(get_current_user)])

_manager_only = [Depends(require_roles(UserRole.manager))]


def get_employee_service(session: Session = Depends(get_session)) -> EmployeeService:
    return EmployeeService(session)


@router.get("", response_model=List[EmployeeRead])
def list_employees(
    active: Optional[bool] = Query(None),
    role: Optional[EmployeeRole] = Query(None),
    service: EmployeeService = Depends(get_employee_service),
) -> List[EmployeeRead]:
    return [EmployeeRead.model_validate(item) for item in service.list_employees(active=active, role=role)]


@router.post("", status_code=status.HTTP_201_CREATED, response_model=EmployeeRead, dependencies=_manager_only)
def create_employee(
    payload: EmployeeCreate,
    service: EmployeeService = Depends(get_employee_service),
) -> EmployeeRead:
    return EmployeeRead.model_validate(service.create_employee(**payload.model_dump()))


@router.put("/{employee_id}", response_model=EmployeeRead, dependencies=_manager_only)
def update_employee(
    employee_id: int,
    payload: EmployeeUpdate,
    service: EmployeeService = Depends(get_employee_service),
) -> EmployeeRead:
    employee = service.update_employee(employee_id, payload.model_dump(exclude_unset=True))
    return EmployeeRead.model_validate(employee)
