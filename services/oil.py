"""Oil batches, their quality tests, storage containers and traceability."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from models.records import ContainerTransactionType, OilGrade
from models.tables import (
    Batch,
    Client,
    Container,
    ContainerContent,
    ContainerOilBatch,
    Employee,
    OilBatch,
    PressingRoom,
    PressingSession,
    ProcessingDecision,
    QualityTest,
)
from services.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

STORAGE_CURRENCY = "SAR"


def _oil_batch_loader():
    return (
        selectinload(OilBatch.batch).selectinload(Batch.client),
        selectinload(OilBatch.pressing_session),
        selectinload(OilBatch.quality_tests),
        selectinload(OilBatch.container_links).selectinload(ContainerOilBatch.container_content),
    )


class OilBatchService:
    def __init__(self, session: Session) -> None:
        self._session = session

    def list_oil_batches(
        self,
        *,
        batch_id: Optional[int] = None,
        pressing_session_id: Optional[int] = None,
        tested: Optional[bool] = None,
    ) -> List[OilBatch]:
        statement = (
            select(OilBatch)
            .options(*_oil_batch_loader())
            .order_by(OilBatch.created_at.desc(), OilBatch.id.desc())
        )
        if batch_id is not None:
            statement = statement.where(OilBatch.batch_id == batch_id)
        if pressing_session_id is not None:
            statement = statement.where(OilBatch.pressing_session_id == pressing_session_id)
        if tested is True:
            statement = statement.where(OilBatch.quality_tests.any())
        elif tested is False:
            statement = statement.where(~OilBatch.quality_tests.any())
        return list(self._session.scalars(statement))

    def get_oil_batch(self, oil_batch_id: int) -> OilBatch:
        oil_batch = self._session.scalars(
            select(OilBatch).where(OilBatch.id == oil_batch_id).options(*_oil_batch_loader())
        ).first()
        if oil_batch is None:
            raise NotFoundError("Oil batch not found")
        return oil_batch

    def create_oil_batch(
        self,
        *,
        weight: int,
        residue: Optional[int] = None,
        batch_id: Optional[int] = None,
        pressing_session_id: Optional[int] = None,
    ) -> OilBatch:
        if batch_id is not None and self._session.get(Batch, batch_id) is None:
            raise NotFoundError("Batch not found")
        if pressing_session_id is not None and self._session.get(PressingSession, pressing_session_id) is None:
            raise NotFoundError("Pressing session not found")

        oil_batch = OilBatch(
            weight=weight,
            residue=residue,
            batch_id=batch_id,
            pressing_session_id=pressing_session_id,
        )
        self._session.add(oil_batch)
        self._session.commit()
        logger.info("Recorded oil batch", extra={"batch_id": batch_id, "session_id": pressing_session_id})
        return self.get_oil_batch(oil_batch.id)

    def traceability(self, oil_batch_id: int) -> "TraceabilityReport":
        """Follow an oil batch back to its client and forward to its containers."""
        oil_batch = self._session.scalars(
            select(OilBatch)
            .where(OilBatch.id == oil_batch_id)
            .options(
                selectinload(OilBatch.batch).selectinload(Batch.client),
                selectinload(OilBatch.batch).selectinload(Batch.processing_decisions),
                selectinload(OilBatch.pressing_session)
                .selectinload(PressingSession.room)
                .selectinload(PressingRoom.sessions),
                selectinload(OilBatch.quality_tests),
                selectinload(OilBatch.container_links).selectinload(ContainerOilBatch.container_content),
            )
        ).first()
        if oil_batch is None:
            raise NotFoundError("Oil batch not found")

        batch = oil_batch.batch
        return TraceabilityReport(
            oil_batch=oil_batch,
            origin=TraceabilityOrigin(
                client=batch.client if batch else None,
                original_batch=batch,
                net_weight=batch.net_weight if batch else None,
                number_of_boxes=batch.number_of_boxes if batch else None,
            ),
            processing=TraceabilityProcessing(
                pressing_session=oil_batch.pressing_session,
                decisions=list(batch.processing_decisions) if batch else [],
            ),
            quality=list(oil_batch.quality_tests),
            storage=list(oil_batch.container_links),
        )


@dataclass
class TraceabilityOrigin:
    client: Optional[Client] = None
    original_batch: Optional[Batch] = None
    net_weight: Optional[int] = None
    number_of_boxes: Optional[int] = None


@dataclass
class TraceabilityProcessing:
    pressing_session: Optional[PressingSession] = None
    decisions: List[ProcessingDecision] = field(default_factory=list)


@dataclass
class TraceabilityReport:
    oil_batch: OilBatch
    origin: TraceabilityOrigin
    processing: TraceabilityProcessing
    quality: List[QualityTest] = field(default_factory=list)
    storage: List[ContainerOilBatch] = field(default_factory=list)


@dataclass
class QualityStatistics:
    total_tests: int
    grade_distribution: dict
    average_acidity: float
    total_oil_tested: int


class QualityTestService:
    def __init__(self, session: Session) -> None:
        self._session = session

    def list_tests(
        self,
        *,
        oil_batch_id: Optional[int] = None,
        grade: Optional[OilGrade] = None,
    ) -> List[QualityTest]:
        statement = (
            select(QualityTest)
            .options(selectinload(QualityTest.oil_batch), selectinload(QualityTest.tested_by))
            .order_by(QualityTest.test_date.desc(), QualityTest.id.desc())
        )
        if oil_batch_id is not None:
            statement = statement.where(QualityTest.oil_batch_id == oil_batch_id)
        if grade is not None:
            statement = statement.where(QualityTest.grade == grade)
        return list(self._session.scalars(statement))

    def get_test(self, test_id: int) -> QualityTest:
        test = self._session.scalars(
            select(QualityTest)
            .where(QualityTest.id == test_id)
            .options(
                selectinload(QualityTest.oil_batch).selectinload(OilBatch.batch).selectinload(Batch.client),
                selectinload(QualityTest.tested_by),
            )
        ).first()
        if test is None:
            raise NotFoundError("Quality test not found")
        return test

    def create_test(
        self,
        *,
        oil_batch_id: int,
        grade: OilGrade,
        acidity_level: Optional[float] = None,
        tested_by_employee_id: Optional[int] = None,
        test_date: Optional[date] = None,
    ) -> QualityTest:
        if self._session.get(OilBatch, oil_batch_id) is None:
            raise NotFoundError("Oil batch not found")
        if tested_by_employee_id is not None and self._session.get(Employee, tested_by_employee_id) is None:
            raise NotFoundError("Employee not found")

        test = QualityTest(
            oil_batch_id=oil_batch_id,
            grade=grade,
            acidity_level=acidity_level,
            tested_by_employee_id=tested_by_employee_id,
            test_date=test_date or datetime.now(timezone.utc).date(),
        )
        self._session.add(test)
        self._session.commit()
        logger.info("Recorded quality test", extra={"reason": grade.value})
        return self.get_test(test.id)

    def statistics(
        self,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> QualityStatistics:
        statement = select(QualityTest).options(selectinload(QualityTest.oil_batch))
        if start_date is not None and end_date is not None:
            if start_date > end_date:
                raise ValidationError("start_date must not be after end_date")
            statement = statement.where(QualityTest.test_date.between(start_date, end_date))
        tests = list(self._session.scalars(statement))

        distribution = {grade: 0 for grade in OilGrade}
        for test in tests:
            distribution[test.grade] += 1

        acidities = [test.acidity_level for test in tests if test.acidity_level is not None]
        return QualityStatistics(
            total_tests=len(tests),
            grade_distribution=distribution,
            average_acidity=sum(acidities) / len(acidities) if acidities else 0.0,
            total_oil_tested=sum(test.oil_batch.weight for test in tests if test.oil_batch is not None),
        )


@dataclass
class ContainerLevel:
    """A container together with its latest fill snapshot."""

    id: int
    label: str
    capacity: int
    current_weight: int
    last_updated: datetime


def _container_level(container: Container, latest: Optional[ContainerContent]) -> ContainerLevel:
    return ContainerLevel(
        id=container.id,
        label=container.label,
        capacity=container.capacity,
        current_weight=latest.total_weight if latest else 0,
        last_updated=latest.recorded_at if latest else container.updated_at,
    )


class ContainerService:
    def __init__(self, session: Session) -> None:
        self._session = session

    def list_containers(self) -> List[ContainerLevel]:
        containers = self._session.scalars(
            select(Container).order_by(Container.created_at.asc(), Container.id.asc())
        ).all()
        return [_container_level(container, self._latest(container)) for container in containers]

    def create_container(self, *, label: str, capacity: int) -> ContainerLevel:
        container = Container(label=label, capacity=capacity)
        self._session.add(container)
        self._session.commit()
        logger.info("Created container", extra={"reason": label})
        return _container_level(container, None)

    def record_transaction(
        self,
        container_id: int,
        *,
        type: ContainerTransactionType,
        weight: float,
        price_per_kg: Optional[float] = None,
        oil_batch_id: Optional[int] = None,
    ) -> ContainerLevel:
        """Add oil to or sell oil from a container; selling never drops below empty."""
        container = self._session.get(Container, container_id)
        if container is None:
            raise NotFoundError("Container not found")
        if oil_batch_id is not None and self._session.get(OilBatch, oil_batch_id) is None:
            raise NotFoundError("Oil batch not found")

        latest = self._latest(container)
        current = latest.total_weight if latest else 0
        if type == ContainerTransactionType.add:
            next_weight = current + weight
        else:
            next_weight = max(0.0, current - weight)

        value = price_per_kg * weight if price_per_kg is not None else None
        entry = ContainerContent(
            container_id=container.id,
            total_weight=round(next_weight),
            value=value,
            currency=STORAGE_CURRENCY if value is not None else None,
            recorded_at=datetime.now(timezone.utc),
        )
        self._session.add(entry)
        if oil_batch_id is not None and type == ContainerTransactionType.add:
            entry.oil_links.append(ContainerOilBatch(oil_batch_id=oil_batch_id, weight=round(weight)))
        self._session.commit()
        logger.info(
            "Recorded container transaction",
            extra={"reason": type.value, "endpoint": f"containers/{container.id}"},
        )
        return _container_level(container, entry)

    def _latest(self, container: Container) -> Optional[ContainerContent]:
        return self._session.scalars(
            select(ContainerContent)
            .where(ContainerContent.container_id == container.id)
            .order_by(ContainerContent.recorded_at.desc(), ContainerContent.id.desc())
        ).first()
