"""Offset pagination over SQLAlchemy select statements."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Generic, List, TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session

from services.errors import ValidationError

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


@dataclass
class Page(Generic[T]):
    items: List[T]
    total: int
    page: int
    pages: int


def paginate(session: Session, statement: Select, *, page: int = 1, limit: int = DEFAULT_PAGE_SIZE) -> Page:
    if page < 1:
        raise ValidationError("page must be at least 1")
    if limit < 1 or limit > MAX_PAGE_SIZE:
        raise ValidationError(f"limit must be between 1 and {MAX_PAGE_SIZE}")

    total = session.scalar(select(func.count()).select_from(statement.order_by(None).subquery())) or 0
    items = list(session.scalars(statement.limit(limit).offset((page - 1) * limit)).unique())
    return Page(items=items, total=total, page=page, pages=math.ceil(total / limit))
