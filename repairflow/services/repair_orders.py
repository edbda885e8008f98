from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Iterable, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from repairflow.core.config import get_settings
from repairflow.models import RepairOrder, RepairOrderNote
from repairflow.schemas.repair_order import RepairOrderCreate, WorkerRef
from repairflow.services.stages import (
    active_repair_stages,
    coerce_repair_stage,
    is_delivery_stage,
    is_open_repair_stage,
    is_repair_stage,
)
from repairflow.utils.enums import DeliveryStage, RepairStage

logger = logging.getLogger(__name__)

settings = get_settings()


class RepairOrderError(Exception):
    """Signals a failure when handling repair orders."""


class OrderNotFoundError(RepairOrderError):
    """Raised when an order id does not exist."""


class InvalidStageError(RepairOrderError):
    """Raised when a stage string is not part of the relevant flow."""


@dataclass
class Board:
    unassigned: list[RepairOrder] = field(default_factory=list)
    my_active: list[RepairOrder] = field(default_factory=list)
    completed: list[RepairOrder] = field(default_factory=list)


@dataclass
class StageCounts:
    per_stage: dict[RepairStage, int]
    unassigned: int
    total: int


def _intake_note(payload: RepairOrderCreate) -> str:
    lines = [
        "Repair request created by the storefront.",
        f"Service: {payload.service_name} ({payload.service_slug}).",
    ]
    contact = payload.customer_phone
    if payload.customer_email:
        contact = f"{contact}, {payload.customer_email}"
    lines.append(f"Customer: {payload.customer_name} ({contact}).")

    if payload.customer_message:
        lines.append(f"Customer comment: {payload.customer_message}")

    flags = []
    if payload.urgent:
        flags.append("urgent repair")
    if payload.needs_pickup:
        flags.append("device pickup required")
    if flags:
        lines.append(f"Special conditions: {', '.join(flags)}.")

    return "\n".join(lines)


async def add_note(session: AsyncSession, order_id: int, message: str) -> RepairOrderNote:
    note = RepairOrderNote(order_id=order_id, message=message)
    session.add(note)
    await session.flush()
    return note


async def list_notes(session: AsyncSession, order_id: int) -> list[RepairOrderNote]:
    await get_order(session, order_id)
    result = await session.execute(
        select(RepairOrderNote).where(RepairOrderNote.order_id == order_id).order_by(RepairOrderNote.id.asc())
    )
    return list(result.scalars())


async def create_order(session: AsyncSession, payload: RepairOrderCreate) -> RepairOrder:
    """Persist a new order at the start of the repair flow."""

    now = datetime.utcnow()
    estimate = payload.price_estimate
    order = RepairOrder(
        customer_name=payload.customer_name.strip(),
        customer_phone=payload.customer_phone.strip(),
        customer_email=(payload.customer_email or "").strip() or None,
        preferred_contact=payload.preferred_contact,
        customer_message=payload.customer_message,
        device_type=payload.device_type,
        service_slug=payload.service_slug,
        service_name=payload.service_name,
        worker_group=settings.worker_group_name,
        urgent=payload.urgent,
        needs_pickup=payload.needs_pickup,
        estimate_min=estimate.min if estimate else None,
        estimate_max=estimate.max if estimate else None,
        estimate_currency=estimate.currency if estimate else None,
        stage=RepairStage.PENDING_ASSIGNMENT.value,
        stage_updated_at=now,
        delivery_stage=(
            DeliveryStage.PENDING_ASSIGNMENT.value if payload.needs_pickup else DeliveryStage.NOT_REQUIRED.value
        ),
    )
    if settings.lead_priority_enabled:
        order.lead_group = settings.lead_worker_group_name
        order.lead_priority_until = now + timedelta(minutes=settings.lead_priority_minutes)

    session.add(order)
    await session.flush()
    await add_note(session, order.id, _intake_note(payload)[: settings.note_max_length])
    logger.info("Created repair order %s for service %s", order.id, order.service_slug)
    return order


async def get_order(session: AsyncSession, order_id: int) -> RepairOrder:
    order = await session.get(RepairOrder, order_id)
    if not order:
        raise OrderNotFoundError(f"Repair order {order_id} not found")
    return order


def is_visible_to(order: RepairOrder, viewer_id: str, is_lead: bool, now: datetime) -> bool:
    """Whether a worker may see ``order`` on their board."""

    if order.worker_id == viewer_id or is_lead:
        return True
    if order.lead_priority_until is None:
        return True
    return order.lead_priority_until <= now


async def list_orders(
    session: AsyncSession,
    viewer_id: Optional[str] = None,
    is_lead: bool = False,
    stage: Optional[str] = None,
) -> list[RepairOrder]:
    query = (
        select(RepairOrder)
        .where(RepairOrder.worker_group == settings.worker_group_name)
        .order_by(RepairOrder.created_at.desc(), RepairOrder.id.desc())
    )
    if stage is not None:
        if not is_repair_stage(stage):
            raise InvalidStageError(f"Unknown repair stage '{stage}'")
        query = query.where(RepairOrder.stage == stage)

    result = await session.execute(query)
    orders = list(result.scalars())
    if viewer_id is None:
        return orders

    now = datetime.utcnow()
    return [order for order in orders if is_visible_to(order, viewer_id, is_lead, now)]


def build_board(orders: Iterable[RepairOrder], viewer_id: str) -> Board:
    """Split orders into the staff board's columns for ``viewer_id``."""

    board = Board()
    for order in orders:
        stage = coerce_repair_stage(order.stage)
        if not order.worker_id:
            board.unassigned.append(order)
        elif order.worker_id == viewer_id:
            if is_open_repair_stage(stage):
                board.my_active.append(order)
            elif stage is RepairStage.COMPLETED:
                board.completed.append(order)
    return board


async def claim_order(session: AsyncSession, order_id: int, worker: WorkerRef) -> RepairOrder:
    """Assign ``worker`` to the order and start diagnostics."""

    order = await get_order(session, order_id)
    order.worker_id = worker.worker_id
    order.worker_email = worker.worker_email
    order.worker_name = worker.display_name
    order.stage = RepairStage.DIAGNOSTICS.value
    order.stage_updated_at = datetime.utcnow()
    await add_note(
        session,
        order.id,
        f"Worker {worker.display_name} took the order. Stage: {RepairStage.DIAGNOSTICS.value}.",
    )
    logger.info("Repair order %s claimed by %s", order.id, worker.worker_id)
    return order


async def update_stage(session: AsyncSession, order_id: int, stage: str) -> RepairOrder:
    """Move an order to ``stage``; returning to pending assignment releases it."""

    if not is_repair_stage(stage):
        logger.warning("Rejected repair stage %r for order %s", stage, order_id)
        raise InvalidStageError(f"Unknown repair stage '{stage}'")

    order = await get_order(session, order_id)
    new_stage = RepairStage(stage)
    previous = order.stage
    order.stage = new_stage.value
    order.stage_updated_at = datetime.utcnow()

    if new_stage is RepairStage.PENDING_ASSIGNMENT:
        order.worker_id = None
        order.worker_email = None
        order.worker_name = None

    await add_note(session, order.id, f"Repair stage updated: {new_stage.value}.")
    logger.info("Repair order %s stage %s -> %s", order.id, previous, new_stage.value)
    return order


async def update_delivery_stage(session: AsyncSession, order_id: int, stage: str) -> RepairOrder:
    if not is_delivery_stage(stage):
        logger.warning("Rejected delivery stage %r for order %s", stage, order_id)
        raise InvalidStageError(f"Unknown delivery stage '{stage}'")

    order = await get_order(session, order_id)
    new_stage = DeliveryStage(stage)
    order.delivery_stage = new_stage.value
    order.delivery_stage_updated_at = datetime.utcnow()
    await add_note(session, order.id, f"Delivery stage updated: {new_stage.value}.")
    logger.info("Repair order %s delivery stage -> %s", order.id, new_stage.value)
    return order


async def stage_counts(session: AsyncSession) -> StageCounts:
    """Count orders per active stage, zero-filled in flow order."""

    in_group = RepairOrder.worker_group == settings.worker_group_name
    result = await session.execute(
        select(RepairOrder.stage, func.count()).where(in_group).group_by(RepairOrder.stage)
    )
    raw = {stage: count for stage, count in result.all()}

    per_stage = {stage: raw.get(stage.value, 0) for stage in active_repair_stages()}
    unassigned = await session.scalar(
        select(func.count()).select_from(RepairOrder).where(in_group, RepairOrder.worker_id.is_(None))
    )
    return StageCounts(per_stage=per_stage, unassigned=unassigned or 0, total=sum(raw.values()))
