"""Pressing room and pressing session routes."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.dependencies import get_current_user, get_session
from app.schemas import (
    PressingRoomCreate,
    PressingRoomRead,
    PressingRoomUpdate,
    PressingSessionCreate,
    PressingSessionDetail,
    PressingSessionWithRoom,
)
from services.pressing import PressingRoomService, PressingSessionService

rooms_router = APIRouter(
    prefix="/pressing-rooms",
    tags=["pressing-rooms"],
    dependencies=[Depends(get_current_user)],
)
sessions_router = APIRouter(
    prefix="/pressing-sessions",
    tags=["pressing-sessions"],
    dependencies=[Depends(get_current_user)],
)


def get_room_service(session: Session = Depends(get_session)) -> PressingRoomService:
    return PressingRoomService(session)


def get_session_service(session: Session = Depends(get_session)) -> PressingSessionService:
    return PressingSessionService(session)


@rooms_router.get("", response_model=List[PressingRoomRead])
def list_rooms(service: PressingRoomService = Depends(get_room_service)) -> List[PressingRoomRead]:
    return [PressingRoomRead.model_validate(room) for room in service.list_rooms()]


@rooms_router.post("", status_code=status.HTTP_201_CREATED, response_model=PressingRoomRead)
def create_room(
    payload: PressingRoomCreate,
    service: PressingRoomService = Depends(get_room_service),
) -> PressingRoomRead:
    return PressingRoomRead.model_validate(service.create_room(**payload.model_dump()))


@rooms_router.get("/{room_id}", response_model=PressingRoomRead)
def get_room(
    room_id: int,
    service: PressingRoomService = Depends(get_room_service),
) -> PressingRoomRead:
    return PressingRoomRead.model_validate(service.get_room(room_id))


@rooms_router.put("/{room_id}", response_model=PressingRoomRead)
def update_room(
    room_id: int,
    payload: PressingRoomUpdate,
    service: PressingRoomService = Depends(get_room_service),
) -> PressingRoomRead:
    room = service.update_room(room_id, payload.model_dump(exclude_unset=True))
    return PressingRoomRead.model_validate(room)


@rooms_router.delete("/{room_id}")
def delete_room(
    room_id: int,
    service: PressingRoomService = Depends(get_room_service),
) -> dict[str, bool]:
    service.delete_room(room_id)
    return {"success": True}


@sessions_router.get("", response_model=List[PressingSessionWithRoom])
def list_sessions(
    active: Optional[bool] = Query(None, description="Only sessions without a finish time."),
    pressing_room_id: Optional[int] = Query(None, alias="pressingRoomId"),
    service: PressingSessionService = Depends(get_session_service),
) -> List[PressingSessionWithRoom]:
    sessions = service.list_sessions(active=active, pressing_room_id=pressing_room_id)
    return [PressingSessionWithRoom.model_validate(item) for item in sessions]


@sessions_router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=PressingSessionDetail,
    summary="Start pressing in a room that has no running session.",
)
def start_session(
    payload: PressingSessionCreate,
    service: PressingSessionService = Depends(get_session_service),
) -> PressingSessionDetail:
    pressing_session = service.start_session(
        pressing_room_id=payload.pressing_room_id,
        number_of_boxes=payload.number_of_boxes,
    )
    return PressingSessionDetail.model_validate(pressing_session)


@sessions_router.get("/{session_id}", response_model=PressingSessionDetail)
def get_session_detail(
    session_id: int,
    service: PressingSessionService = Depends(get_session_service),
) -> PressingSessionDetail:
    return PressingSessionDetail.model_validate(service.get_session(session_id))


@sessions_router.put("/{session_id}/finish", response_model=PressingSessionDetail)
def finish_session(
    session_id: int,
    service: PressingSessionService = Depends(get_session_service),
) -> PressingSessionDetail:
    return PressingSessionDetail.model_validate(service.finish_session(session_id))
