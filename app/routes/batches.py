"""Batch (weigh ticket) and processing-decision routes."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.dependencies import get_current_user, get_session
from app.schemas import (
    BatchCreate,
    BatchDeleted,
    BatchDetail,
    BatchPage,
    BatchRead,
    BatchStatusUpdate,
    BatchUpdate,
    Pagination,
    ProcessingDecisionCreate,
    ProcessingDecisionDetail,
)
from models.records import BatchStatus
from services.batches import BatchService, ProcessingDecisionService
from services.pagination import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE

router = APIRouter(prefix="/batches", tags=["batches"], dependencies=[Depends(get_current_user)])
decisions_router = APIRouter(
    prefix="/processing-decisions",
    tags=["processing-decisions"],
    dependencies=[Depends(get_current_user)],
)


def get_batch_service(session: Session = Depends(get_session)) -> BatchService:
    return BatchService(session)


def get_decision_service(session: Session = Depends(get_session)) -> ProcessingDecisionService:
    return ProcessingDecisionService(session)


@router.get("", response_model=BatchPage, summary="List batches, most recently received first.")
def list_batches(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    status_filter: Optional[BatchStatus] = Query(None, alias="status"),
    client_id: Optional[int] = Query(None, alias="clientId"),
    service: BatchService = Depends(get_batch_service),
) -> BatchPage:
    result = service.list_batches(page=page, limit=limit, status=status_filter, client_id=client_id)
    return BatchPage(
        batches=[BatchRead.model_validate(batch) for batch in result.items],
        pagination=Pagination(total=result.total, page=result.page, pages=result.pages),
    )


@router.post("", status_code=status.HTTP_201_CREATED, response_model=BatchDetail)
def create_batch(
    payload: BatchCreate,
    service: BatchService = Depends(get_batch_service),
) -> BatchDetail:
    batch = service.create_batch(**payload.model_dump())
    return BatchDetail.model_validate(batch)


@router.get("/{batch_id}", response_model=BatchDetail)
def get_batch(
    batch_id: int,
    service: BatchService = Depends(get_batch_service),
) -> BatchDetail:
    return BatchDetail.model_validate(service.get_batch(batch_id))


@router.put(
    "/{batch_id}",
    response_model=BatchDetail,
    summary="Partially update a batch; keys may be camelCase or snake_case.",
)
def update_batch(
    batch_id: int,
    payload: BatchUpdate,
    service: BatchService = Depends(get_batch_service),
) -> BatchDetail:
    batch = service.update_batch(batch_id, payload.model_dump(exclude_unset=True))
    return BatchDetail.model_validate(batch)


@router.put("/{batch_id}/status", response_model=BatchDetail)
def update_batch_status(
    batch_id: int,
    payload: BatchStatusUpdate,
    service: BatchService = Depends(get_batch_service),
) -> BatchDetail:
    return BatchDetail.model_validate(service.update_status(batch_id, payload.status))


@router.delete("/{batch_id}", response_model=BatchDeleted)
def delete_batch(
    batch_id: int,
    service: BatchService = Depends(get_batch_service),
) -> BatchDeleted:
    service.delete_batch(batch_id)
    return BatchDeleted(id=batch_id)


@decisions_router.get("", response_model=List[ProcessingDecisionDetail])
def list_decisions(
    service: ProcessingDecisionService = Depends(get_decision_service),
) -> List[ProcessingDecisionDetail]:
    return [ProcessingDecisionDetail.model_validate(decision) for decision in service.list_decisions()]


@decisions_router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=ProcessingDecisionDetail,
    summary="Decide to mill or sell a batch; moves the batch to in_process.",
)
def create_decision(
    payload: ProcessingDecisionCreate,
    service: ProcessingDecisionService = Depends(get_decision_service),
) -> ProcessingDecisionDetail:
    decision = service.create_decision(**payload.model_dump())
    return ProcessingDecisionDetail.model_validate(decision)


@decisions_router.get("/{decision_id}", response_model=ProcessingDecisionDetail)
def get_decision(
    decision_id: int,
    service: ProcessingDecisionService = Depends(get_decision_service),
) -> ProcessingDecisionDetail:
    return ProcessingDecisionDetail.model_validate(service.get_decision(decision_id))
