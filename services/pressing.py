"""Pressing rooms and the pressing sessions that run in them."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from models.tables import OilBatch, PressingRoom, PressingSession
from services.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


class PressingRoomService:
    def __init__(self, session: Session) -> None:
        self._session = session

    def list_rooms(self) -> List[PressingRoom]:
        statement = (
            select(PressingRoom)
            .options(selectinload(PressingRoom.sessions))
            .order_by(PressingRoom.created_at.asc(), PressingRoom.id.asc())
        )
        return list(self._session.scalars(statement))

    def get_room(self, room_id: int) -> PressingRoom:
        room = self._session.get(PressingRoom, room_id)
        if room is None:
            raise NotFoundError("Pressing room not found")
        return room

    def create_room(self, *, name: str, capacity: Optional[int] = None) -> PressingRoom:
        room = PressingRoom(name=name, capacity=capacity)
        self._session.add(room)
        self._session.commit()
        logger.info("Created pressing room", extra={"reason": name})
        return room

    def update_room(self, room_id: int, changes: Mapping[str, Any]) -> PressingRoom:
        room = self.get_room(room_id)
        if changes.get("name") is not None:
            room.name = changes["name"]
        if "capacity" in changes:
            room.capacity = changes["capacity"]
        self._session.commit()
        return room

    def delete_room(self, room_id: int) -> None:
        room = self.get_room(room_id)
        # Past sessions stay on record without a room.
        for pressing_session in room.sessions:
            pressing_session.pressing_room_id = None
        self._session.delete(room)
        self._session.commit()
        logger.info("Deleted pressing room", extra={"reason": str(room_id)})


class PressingSessionService:
    def __init__(self, session: Session) -> None:
        self._session = session

    def list_sessions(
        self,
        *,
        active: Optional[bool] = None,
        pressing_room_id: Optional[int] = None,
    ) -> List[PressingSession]:
        statement = (
            select(PressingSession)
            .options(
                selectinload(PressingSession.room).selectinload(PressingRoom.sessions),
                selectinload(PressingSession.oil_batches),
            )
            .order_by(PressingSession.start.desc(), PressingSession.id.desc())
        )
        if active:
            statement = statement.where(PressingSession.finish.is_(None))
        if pressing_room_id is not None:
            statement = statement.where(PressingSession.pressing_room_id == pressing_room_id)
        return list(self._session.scalars(statement))

    def get_session(self, session_id: int) -> PressingSession:
        pressing_session = self._session.scalars(
            select(PressingSession)
            .where(PressingSession.id == session_id)
            .options(
                selectinload(PressingSession.room).selectinload(PressingRoom.sessions),
                selectinload(PressingSession.oil_batches).selectinload(OilBatch.batch),
            )
        ).first()
        if pressing_session is None:
            raise NotFoundError("Pressing session not found")
        return pressing_session

    def start_session(self, *, pressing_room_id: int, number_of_boxes: int) -> PressingSession:
        if self._session.get(PressingRoom, pressing_room_id) is None:
            raise NotFoundError("Pressing room not found")

        busy = self._session.scalars(
            select(PressingSession.id).where(
                PressingSession.pressing_room_id == pressing_room_id,
                PressingSession.finish.is_(None),
            )
        ).first()
        if busy is not None:
            raise ValidationError("Pressing room is already in use")

        pressing_session = PressingSession(
            pressing_room_id=pressing_room_id,
            number_of_boxes=number_of_boxes,
            start=datetime.now(timezone.utc),
        )
        self._session.add(pressing_session)
        self._session.commit()
        logger.info("Started pressing session", extra={"session_id": pressing_session.id})
        return self.get_session(pressing_session.id)

    def finish_session(self, session_id: int) -> PressingSession:
        pressing_session = self._session.get(PressingSession, session_id)
        if pressing_session is None:
            raise NotFoundError("Pressing session not found")
        if pressing_session.finish is not None:
            raise ValidationError("Session already finished")

        pressing_session.finish = datetime.now(timezone.utc)
        self._session.commit()
        logger.info("Finished pressing session", extra={"session_id": pressing_session.id})
        return self.get_session(pressing_session.id)
