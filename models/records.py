"""Domain enumerations shared across services."""

from __future__ import annotations

from enum import Enum
from typing import Dict, Optional


class UserRole(str, Enum):
    """Application roles carried in the access token."""

    admin = "admin"
    manager = "manager"
    employee = "employee"
    scanner = "scanner"

    @property
    def arabic_label(self) -> str:
        return ROLE_EN_TO_AR[self]


ROLE_EN_TO_AR: Dict[UserRole, str] = {
    UserRole.admin: "مدير النظام",
    UserRole.manager: "مدير",
    UserRole.employee: "مشغل",
    UserRole.scanner: "ماسح",
}

# Several Arabic spellings map onto one role, so this is not a plain inverse.
ROLE_AR_TO_EN: Dict[str, UserRole] = {
    "مدير": UserRole.manager,
    "مشغل": UserRole.employee,
    "ماسح": UserRole.scanner,
    "مسؤول": UserRole.admin,
    "مدير النظام": UserRole.admin,
}


def normalize_role(raw: object) -> Optional[UserRole]:
    """Map an English or Arabic role name onto :class:`UserRole`.

    Returns ``None`` for empty or unknown values.
    """
    if raw is None:
        return None
    if isinstance(raw, UserRole):
        return raw
    candidate = str(raw).strip()
    if not candidate:
        return None
    try:
        return UserRole(candidate.lower())
    except ValueError:
        return ROLE_AR_TO_EN.get(candidate)


class BatchStatus(str, Enum):
    received = "received"
    in_process = "in_process"
    completed = "completed"


class TicketStatus(str, Enum):
    """Status vocabulary used on printed tickets."""

    draft = "draft"
    confirmed = "confirmed"
    paid = "paid"

    def to_batch_status(self) -> BatchStatus:
        return _TICKET_TO_BATCH[self]

    @classmethod
    def from_batch_status(cls, status: BatchStatus) -> "TicketStatus":
        if status == BatchStatus.received:
            return cls.draft
        if status == BatchStatus.in_process:
            return cls.confirmed
        return cls.paid


_TICKET_TO_BATCH = {
    TicketStatus.draft: BatchStatus.received,
    TicketStatus.confirmed: BatchStatus.in_process,
    TicketStatus.paid: BatchStatus.completed,
}


class DecisionType(str, Enum):
    milling = "milling"
    selling = "selling"


class OilGrade(str, Enum):
    extra_virgin = "extra_virgin"
    virgin = "virgin"
    ordinary = "ordinary"


class EmployeeRole(str, Enum):
    operator = "operator"
    manager = "manager"
    quality_tester = "quality_tester"
    admin = "admin"


class InvoiceStatus(str, Enum):
    draft = "draft"
    sent = "sent"
    paid = "paid"
    overdue = "overdue"


class PaymentMethod(str, Enum):
    cash = "cash"
    check = "check"
    bank_transfer = "bank_transfer"


class ContainerTransactionType(str, Enum):
    add = "add"
    sell = "sell"
