"""Olive deliveries (weigh tickets) and the processing decisions taken on them."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from models.records import BatchStatus, DecisionType
from models.tables import Batch, Client, Price, ProcessingDecision
from services.errors import NotFoundError, ValidationError
from services.pagination import DEFAULT_PAGE_SIZE, Page, paginate

logger = logging.getLogger(__name__)

_EDITABLE_FIELDS = (
    "client_id",
    "weight_in",
    "weight_out",
    "net_weight",
    "number_of_boxes",
    "status",
    "unit_price",
    "total_amount",
    "amount_paid",
    "is_paid",
    "date_paid",
)


def _check_weights(weight_in: Optional[int], weight_out: Optional[int]) -> None:
    if weight_in is not None and weight_in <= 0:
        raise ValidationError("weight_in must be greater than zero")
    if weight_in is not None and weight_out is not None and weight_out >= weight_in:
        raise ValidationError("weight_out must be less than weight_in")


class BatchService:
    def __init__(self, session: Session) -> None:
        self._session = session

    def list_batches(
        self,
        *,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
        status: Optional[BatchStatus] = None,
        client_id: Optional[int] = None,
    ) -> Page[Batch]:
        statement = (
            select(Batch)
            .options(selectinload(Batch.client))
            .order_by(Batch.date_received.desc(), Batch.id.desc())
        )
        if status is not None:
            statement = statement.where(Batch.status == status)
        if client_id is not None:
            statement = statement.where(Batch.client_id == client_id)
        return paginate(self._session, statement, page=page, limit=limit)

    def get_batch(self, batch_id: int) -> Batch:
        batch = self._session.scalars(
            select(Batch)
            .where(Batch.id == batch_id)
            .options(
                selectinload(Batch.client),
                selectinload(Batch.processing_decisions),
                selectinload(Batch.oil_batches),
            )
        ).first()
        if batch is None:
            raise NotFoundError("Batch not found")
        return batch

    def create_batch(
        self,
        *,
        client_id: int,
        net_weight: int,
        number_of_boxes: int,
        weight_in: Optional[int] = None,
        weight_out: Optional[int] = None,
        unit_price: Optional[float] = None,
    ) -> Batch:
        if self._session.get(Client, client_id) is None:
            raise NotFoundError("Client not found")
        _check_weights(weight_in, weight_out)

        batch = Batch(
            client_id=client_id,
            weight_in=weight_in,
            weight_out=weight_out,
            net_weight=net_weight,
            number_of_boxes=number_of_boxes,
            unit_price=unit_price,
            status=BatchStatus.received,
        )
        if unit_price is not None:
            batch.total_amount = round(net_weight * unit_price, 2)
        self._session.add(batch)
        self._session.commit()
        logger.info("Created batch", extra={"batch_id": batch.id, "client_id": client_id})
        return self.get_batch(batch.id)

    def update_batch(self, batch_id: int, changes: Mapping[str, Any]) -> Batch:
        """Apply a partial update; keys left out or set to ``None`` are untouched."""
        batch = self._session.get(Batch, batch_id)
        if batch is None:
            raise NotFoundError("Batch not found")

        updates = {key: value for key, value in changes.items() if key in _EDITABLE_FIELDS and value is not None}
        if "client_id" in updates and self._session.get(Client, updates["client_id"]) is None:
            raise NotFoundError("Client not found")
        if "weight_in" in updates or "weight_out" in updates:
            _check_weights(
                updates.get("weight_in", batch.weight_in),
                updates.get("weight_out", batch.weight_out),
            )

        for field_name, value in updates.items():
            setattr(batch, field_name, value)
        if updates.get("is_paid") and batch.date_paid is None:
            batch.date_paid = datetime.now(timezone.utc)
        self._session.commit()
        logger.info("Updated batch", extra={"batch_id": batch.id})
        return self.get_batch(batch.id)

    def update_status(self, batch_id: int, status: BatchStatus) -> Batch:
        batch = self._session.get(Batch, batch_id)
        if batch is None:
            raise NotFoundError("Batch not found")
        batch.status = status
        self._session.commit()
        logger.info("Changed batch status", extra={"batch_id": batch.id, "reason": status.value})
        return self.get_batch(batch.id)

    def delete_batch(self, batch_id: int) -> None:
        batch = self.get_batch(batch_id)
        if batch.oil_batches or batch.invoices:
            raise ValidationError("Batch has oil batches or invoices and cannot be deleted")
        self._session.delete(batch)
        self._session.commit()
        logger.info("Deleted batch", extra={"batch_id": batch_id})


class ProcessingDecisionService:
    def __init__(self, session: Session) -> None:
        self._session = session

    def list_decisions(self) -> List[ProcessingDecision]:
        statement = (
            select(ProcessingDecision)
            .options(
                selectinload(ProcessingDecision.batch).selectinload(Batch.client),
                selectinload(ProcessingDecision.price),
            )
            .order_by(ProcessingDecision.date.desc(), ProcessingDecision.id.desc())
        )
        return list(self._session.scalars(statement))

    def get_decision(self, decision_id: int) -> ProcessingDecision:
        decision = self._session.scalars(
            select(ProcessingDecision)
            .where(ProcessingDecision.id == decision_id)
            .options(
                selectinload(ProcessingDecision.batch).selectinload(Batch.client),
                selectinload(ProcessingDecision.price),
            )
        ).first()
        if decision is None:
            raise NotFoundError("Processing decision not found")
        return decision

    def create_decision(
        self,
        *,
        batch_id: int,
        type: DecisionType,
        unit_price: Optional[int] = None,
        price_id: Optional[int] = None,
    ) -> ProcessingDecision:
        batch = self._session.get(Batch, batch_id)
        if batch is None:
            raise NotFoundError("Batch not found")
        if batch.status == BatchStatus.completed:
            raise ValidationError("Batch already processed")
        if price_id is not None and self._session.get(Price, price_id) is None:
            raise NotFoundError("Price not found")

        decision = ProcessingDecision(
            batch_id=batch.id,
            type=type,
            unit_price=unit_price,
            price_id=price_id,
        )
        self._session.add(decision)
        # The decision and the status move are committed together.
        batch.status = BatchStatus.in_process
        self._session.commit()
        logger.info("Recorded processing decision", extra={"batch_id": batch.id, "reason": type.value})
        return self.get_decision(decision.id)
