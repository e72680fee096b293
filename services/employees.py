"""Mill staff records (distinct from login accounts)."""

from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from models.records import EmployeeRole
from models.tables import Employee
from services.errors import NotFoundError

logger = logging.getLogger(__name__)

_EDITABLE_FIELDS = ("firstname", "lastname", "role", "hire_date", "phone", "active")


class EmployeeService:
    def __init__(self, session: Session) -> None:
        self._session = session

    def list_employees(
        self,
        *,
        active: Optional[bool] = None,
        role: Optional[EmployeeRole] = None,
    ) -> List[Employee]:
        statement = select(Employee).order_by(Employee.lastname.asc(), Employee.firstname.asc())
        if active is not None:
            statement = statement.where(Employee.active.is_(active))
        if role is not None:
            statement = statement.where(Employee.role == role)
        return list(self._session.scalars(statement))

    def get_employee(self, employee_id: int) -> Employee:
        employee = self._session.get(Employee, employee_id)
        if employee is None:
            raise NotFoundError("Employee not found")
        return employee

    def create_employee(self, **fields: Any) -> Employee:
        employee = Employee(**{key: fields[key] for key in _EDITABLE_FIELDS if key in fields})
        self._session.add(employee)
        self._session.commit()
        logger.info("Hired employee", extra={"reason": employee.role.value})
        return employee

    def update_employee(self, employee_id: int, changes: Mapping[str, Any]) -> Employee:
        employee = self.get_employee(employee_id)
        for field_name in _EDITABLE_FIELDS:
            if changes.get(field_name) is not None:
                setattr(employee, field_name, changes[field_name])
        self._session.commit()
        return employee
