"""Oil batch, quality test and storage container routes."""

from __future__ import annotations

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.dependencies import get_current_user, get_session
from app.schemas import (
    ContainerCreate,
    ContainerRead,
    ContainerTransaction,
    OilBatchCreate,
    OilBatchDetail,
    QualityStatistics,
    QualityTestCreate,
    QualityTestDetail,
    QualityTestListItem,
    Traceability,
)
from models.records import OilGrade
from services.oil import ContainerService, OilBatchService, QualityTestService

oil_batches_router = APIRouter(
    prefix="/oil-batches",
    tags=["oil-batches"],
    dependencies=[Depends(get_current_user)],
)
quality_router = APIRouter(
    prefix="/quality-tests",
    tags=["quality-tests"],
    dependencies=[Depends(get_current_user)],
)
containers_router = APIRouter(
    prefix="/containers",
    tags=["containers"],
    dependencies=[Depends(get_current_user)],
)


def get_oil_batch_service(session: Session = Depends(get_session)) -> OilBatchService:
    return OilBatchService(session)


def get_quality_service(session: Session = Depends(get_session)) -> QualityTestService:
    return QualityTestService(session)


def get_container_service(session: Session = Depends(get_session)) -> ContainerService:
    return ContainerService(session)


@oil_batches_router.get("", response_model=List[OilBatchDetail])
def list_oil_batches(
    batch_id: Optional[int] = Query(None, alias="batchId"),
    pressing_session_id: Optional[int] = Query(None, alias="pressingSessionId"),
    tested: Optional[bool] = Query(None, description="true: has quality tests, false: untested."),
    service: OilBatchService = Depends(get_oil_batch_service),
) -> List[OilBatchDetail]:
    oil_batches = service.list_oil_batches(
        batch_id=batch_id,
        pressing_session_id=pressing_session_id,
        tested=tested,
    )
    return [OilBatchDetail.model_validate(item) for item in oil_batches]


@oil_batches_router.post("", status_code=status.HTTP_201_CREATED, response_model=OilBatchDetail)
def create_oil_batch(
    payload: OilBatchCreate,
    service: OilBatchService = Depends(get_oil_batch_service),
) -> OilBatchDetail:
    return OilBatchDetail.model_validate(service.create_oil_batch(**payload.model_dump()))


@oil_batches_router.get("/{oil_batch_id}", response_model=OilBatchDetail)
def get_oil_batch(
    oil_batch_id: int,
    service: OilBatchService = Depends(get_oil_batch_service),
) -> OilBatchDetail:
    return OilBatchDetail.model_validate(service.get_oil_batch(oil_batch_id))


@oil_batches_router.get(
    "/{oil_batch_id}/traceability",
    response_model=Traceability,
    summary="Trace an oil batch from the delivering client to its containers.",
)
def get_traceability(
    oil_batch_id: int,
    service: OilBatchService = Depends(get_oil_batch_service),
) -> Traceability:
    report = service.traceability(oil_batch_id)
    return Traceability.model_validate(report, from_attributes=True)


@quality_router.get("", response_model=List[QualityTestListItem])
def list_quality_tests(
    oil_batch_id: Optional[int] = Query(None, alias="oilBatchId"),
    grade: Optional[OilGrade] = Query(None),
    service: QualityTestService = Depends(get_quality_service),
) -> List[QualityTestListItem]:
    tests = service.list_tests(oil_batch_id=oil_batch_id, grade=grade)
    return [QualityTestListItem.model_validate(test) for test in tests]


@quality_router.post("", status_code=status.HTTP_201_CREATED, response_model=QualityTestDetail)
def create_quality_test(
    payload: QualityTestCreate,
    service: QualityTestService = Depends(get_quality_service),
) -> QualityTestDetail:
    return QualityTestDetail.model_validate(service.create_test(**payload.model_dump()))


# Declared before "/{test_id}" so the literal segment wins.
@quality_router.get("/statistics", response_model=QualityStatistics)
def quality_statistics(
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    service: QualityTestService = Depends(get_quality_service),
) -> QualityStatistics:
    stats = service.statistics(start_date=start_date, end_date=end_date)
    return QualityStatistics.model_validate(stats, from_attributes=True)


@quality_router.get("/{test_id}", response_model=QualityTestDetail)
def get_quality_test(
    test_id: int,
    service: QualityTestService = Depends(get_quality_service),
) -> QualityTestDetail:
    return QualityTestDetail.model_validate(service.get_test(test_id))


@containers_router.get("", response_model=List[ContainerRead])
def list_containers(service: ContainerService = Depends(get_container_service)) -> List[ContainerRead]:
    return [ContainerRead.model_validate(level, from_attributes=True) for level in service.list_containers()]


@containers_router.post("", status_code=status.HTTP_201_CREATED, response_model=ContainerRead)
def create_container(
    payload: ContainerCreate,
    service: ContainerService = Depends(get_container_service),
) -> ContainerRead:
    level = service.create_container(**payload.model_dump())
    return ContainerRead.model_validate(level, from_attributes=True)


@containers_router.post(
    "/{container_id}/transactions",
    status_code=status.HTTP_201_CREATED,
    response_model=ContainerRead,
    summary="Add oil to or sell oil from a container.",
)
def record_transaction(
    container_id: int,
    payload: ContainerTransaction,
    service: ContainerService = Depends(get_container_service),
) -> ContainerRead:
    level = service.record_transaction(container_id, **payload.model_dump())
    return ContainerRead.model_validate(level, from_attributes=True)
