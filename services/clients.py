"""Client registry use cases."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from sqlalchemy import or_, select
from sqlalchemy.orm import Session, selectinload

from models.tables import Batch, Client
from services.errors import NotFoundError, ValidationError
from services.pagination import DEFAULT_PAGE_SIZE, Page, paginate

logger = logging.getLogger(__name__)

_EDITABLE_FIELDS = ("firstname", "lastname", "phone", "address")


class ClientService:
    def __init__(self, session: Session) -> None:
        self._session = session

    def list_clients(
        self,
        *,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
        search: Optional[str] = None,
    ) -> Page[Client]:
        statement = (
            select(Client)
            .options(selectinload(Client.batches))
            .order_by(Client.created_at.desc(), Client.id.desc())
        )
        if search:
            pattern = f"%{search.strip()}%"
            statement = statement.where(
                or_(
                    Client.firstname.ilike(pattern),
                    Client.lastname.ilike(pattern),
                    Client.phone.ilike(pattern),
                )
            )
        return paginate(self._session, statement, page=page, limit=limit)

    def get_client(self, client_id: int) -> Client:
        client = self._session.scalars(
            select(Client)
            .where(Client.id == client_id)
            .options(
                selectinload(Client.batches).selectinload(Batch.processing_decisions),
                selectinload(Client.invoices),
            )
        ).first()
        if client is None:
            raise NotFoundError("Client not found")
        return client

    def create_client(
        self,
        *,
        firstname: str,
        lastname: str,
        phone: str,
        address: Optional[str] = None,
    ) -> Client:
        client = Client(firstname=firstname, lastname=lastname, phone=phone, address=address)
        self._session.add(client)
        self._session.commit()
        logger.info("Created client", extra={"client_id": client.id})
        return client

    def update_client(self, client_id: int, changes: Mapping[str, Any]) -> Client:
        client = self._session.get(Client, client_id)
        if client is None:
            raise NotFoundError("Client not found")
        for field_name in _EDITABLE_FIELDS:
            if field_name in changes and changes[field_name] is not None:
                setattr(client, field_name, changes[field_name])
        self._session.commit()
        logger.info("Updated client", extra={"client_id": client.id})
        return client

    def delete_client(self, client_id: int) -> None:
        client = self._session.get(Client, client_id)
        if client is None:
            raise NotFoundError("Client not found")
        if client.batches or client.invoices:
            raise ValidationError("Client has batches or invoices and cannot be deleted")
        self._session.delete(client)
        self._session.commit()
        logger.info("Deleted client", extra={"client_id": client_id})
