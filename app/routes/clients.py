"""Client registry routes."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from app.dependencies import get_current_user, get_session
from app.schemas import ClientCreate, ClientDetail, ClientListItem, ClientPage, ClientRead, ClientUpdate, Pagination
from services.clients import ClientService
from services.pagination import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE

router = APIRouter(prefix="/clients", tags=["clients"], dependencies=[Depends(get_current_user)])


def get_client_service(session: Session = Depends(get_session)) -> ClientService:
    return ClientService(session)


@router.get("", response_model=ClientPage, summary="List clients, newest first.")
def list_clients(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    search: Optional[str] = Query(None, description="Matches first name, last name or phone."),
    service: ClientService = Depends(get_client_service),
) -> ClientPage:
    result = service.list_clients(page=page, limit=limit, search=search)
    return ClientPage(
        clients=[ClientListItem.model_validate(client) for client in result.items],
        pagination=Pagination(total=result.total, page=result.page, pages=result.pages),
    )


@router.post("", status_code=status.HTTP_201_CREATED, response_model=ClientRead)
def create_client(
    payload: ClientCreate,
    service: ClientService = Depends(get_client_service),
) -> ClientRead:
    client = service.create_client(**payload.model_dump())
    return ClientRead.model_validate(client)


@router.get("/{client_id}", response_model=ClientDetail)
def get_client(
    client_id: int,
    service: ClientService = Depends(get_client_service),
) -> ClientDetail:
    return ClientDetail.model_validate(service.get_client(client_id))


@router.put("/{client_id}", response_model=ClientRead)
def update_client(
    client_id: int,
    payload: ClientUpdate,
    service: ClientService = Depends(get_client_service),
) -> ClientRead:
    client = service.update_client(client_id, payload.model_dump(exclude_unset=True))
    return ClientRead.model_validate(client)


@router.delete("/{client_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
def delete_client(
    client_id: int,
    service: ClientService = Depends(get_client_service),
) -> Response:
    service.delete_client(client_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
