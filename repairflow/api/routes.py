from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from repairflow.core.database import get_db_session
from repairflow.models import RepairOrder, RepairOrderNote
from repairflow.schemas.repair_order import (
    NoteCreate,
    NoteList,
    NoteOut,
    PriceEstimate,
    RepairOrderCreate,
    RepairOrderList,
    RepairOrderOut,
    StaffBoard,
    StageUpdate,
    WorkerRef,
)
from repairflow.schemas.stages import StageCatalog, StageCount, StageDashboard
from repairflow.services import repair_orders as order_service
from repairflow.services.stages import (
    DELIVERY_STAGE_FLOW,
    REPAIR_STAGE_FLOW,
    active_repair_stages,
    coerce_delivery_stage,
    coerce_repair_stage,
    stage_progress,
)
from repairflow.utils.enums import RepairStage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


async def get_session() -> AsyncSession:
    async for session in get_db_session():
        yield session


async def _commit(session: AsyncSession, detail: str) -> None:
    try:
        await session.commit()
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.exception(detail)
        raise HTTPException(status_code=500, detail=detail) from exc


def _http_error(exc: order_service.RepairOrderError) -> HTTPException:
    if isinstance(exc, order_service.OrderNotFoundError):
        return HTTPException(status_code=404, detail=str(exc))
    return HTTPException(status_code=400, detail=str(exc))


@router.get("/health")
def health_check() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/stages", response_model=StageCatalog)
def list_stages() -> StageCatalog:
    return StageCatalog(
        repair_stages=[stage.value for stage in REPAIR_STAGE_FLOW],
        delivery_stages=[stage.value for stage in DELIVERY_STAGE_FLOW],
        active_repair_stages=[stage.value for stage in active_repair_stages()],
    )


@router.post("/orders", response_model=RepairOrderOut, status_code=201)
async def create_order(payload: RepairOrderCreate, session: AsyncSession = Depends(get_session)) -> RepairOrderOut:
    order = await order_service.create_order(session, payload)
    await _commit(session, "Failed to create repair order")
    return _serialize_order(order)


@router.get("/orders", response_model=RepairOrderList)
async def list_orders(
    worker_id: Optional[str] = None,
    lead: bool = False,
    stage: Optional[str] = None,
    session: AsyncSession = Depends(get_session),
) -> RepairOrderList:
    try:
        orders = await order_service.list_orders(session, viewer_id=worker_id, is_lead=lead, stage=stage)
    except order_service.RepairOrderError as exc:
        raise _http_error(exc) from exc
    return RepairOrderList(items=[_serialize_order(order, worker_id) for order in orders])


@router.get("/orders/board", response_model=StaffBoard)
async def staff_board(
    worker_id: str,
    lead: bool = False,
    session: AsyncSession = Depends(get_session),
) -> StaffBoard:
    orders = await order_service.list_orders(session, viewer_id=worker_id, is_lead=lead)
    board = order_service.build_board(orders, worker_id)
    return StaffBoard(
        unassigned=[_serialize_order(order, worker_id) for order in board.unassigned],
        my_active=[_serialize_order(order, worker_id) for order in board.my_active],
        completed=[_serialize_order(order, worker_id) for order in board.completed],
    )


@router.get("/orders/{order_id}", response_model=RepairOrderOut)
async def get_order(order_id: int, session: AsyncSession = Depends(get_session)) -> RepairOrderOut:
    try:
        order = await order_service.get_order(session, order_id)
    except order_service.RepairOrderError as exc:
        raise _http_error(exc) from exc
    return _serialize_order(order)


@router.post("/orders/{order_id}/claim", response_model=RepairOrderOut)
async def claim_order(
    order_id: int, worker: WorkerRef, session: AsyncSession = Depends(get_session)
) -> RepairOrderOut:
    try:
        order = await order_service.claim_order(session, order_id, worker)
    except order_service.RepairOrderError as exc:
        raise _http_error(exc) from exc
    await _commit(session, "Failed to claim repair order")
    return _serialize_order(order, worker.worker_id)


@router.post("/orders/{order_id}/release", response_model=RepairOrderOut)
async def release_order(order_id: int, session: AsyncSession = Depends(get_session)) -> RepairOrderOut:
    try:
        order = await order_service.update_stage(session, order_id, RepairStage.PENDING_ASSIGNMENT.value)
    except order_service.RepairOrderError as exc:
        raise _http_error(exc) from exc
    await _commit(session, "Failed to release repair order")
    return _serialize_order(order)


@router.put("/orders/{order_id}/stage", response_model=RepairOrderOut)
async def update_stage(
    order_id: int, payload: StageUpdate, session: AsyncSession = Depends(get_session)
) -> RepairOrderOut:
    try:
        order = await order_service.update_stage(session, order_id, payload.stage)
    except order_service.RepairOrderError as exc:
        raise _http_error(exc) from exc
    await _commit(session, "Failed to update repair stage")
    return _serialize_order(order)


@router.put("/orders/{order_id}/delivery-stage", response_model=RepairOrderOut)
async def update_delivery_stage(
    order_id: int, payload: StageUpdate, session: AsyncSession = Depends(get_session)
) -> RepairOrderOut:
    try:
        order = await order_service.update_delivery_stage(session, order_id, payload.stage)
    except order_service.RepairOrderError as exc:
        raise _http_error(exc) from exc
    await _commit(session, "Failed to update delivery stage")
    return _serialize_order(order)


@router.get("/orders/{order_id}/notes", response_model=NoteList)
async def list_notes(order_id: int, session: AsyncSession = Depends(get_session)) -> NoteList:
    try:
        notes = await order_service.list_notes(session, order_id)
    except order_service.RepairOrderError as exc:
        raise _http_error(exc) from exc
    return NoteList(items=[_serialize_note(note) for note in notes])


@router.post("/orders/{order_id}/notes", response_model=NoteOut, status_code=201)
async def add_note(
    order_id: int, payload: NoteCreate, session: AsyncSession = Depends(get_session)
) -> NoteOut:
    try:
        await order_service.get_order(session, order_id)
    except order_service.RepairOrderError as exc:
        raise _http_error(exc) from exc
    note = await order_service.add_note(session, order_id, payload.message)
    await _commit(session, "Failed to add order note")
    return _serialize_note(note)


@router.get("/dashboard/stages", response_model=StageDashboard)
async def stage_dashboard(session: AsyncSession = Depends(get_session)) -> StageDashboard:
    counts = await order_service.stage_counts(session)
    return StageDashboard(
        stages=[StageCount(stage=stage.value, count=count) for stage, count in counts.per_stage.items()],
        unassigned=counts.unassigned,
        total=counts.total,
    )


def _serialize_order(order: RepairOrder, viewer_id: Optional[str] = None) -> RepairOrderOut:
    stage = coerce_repair_stage(order.stage)
    estimate = None
    if order.estimate_currency:
        estimate = PriceEstimate(
            currency=order.estimate_currency,
            min=order.estimate_min,
            max=order.estimate_max,
        )
    return RepairOrderOut(
        id=order.id,
        customer_name=order.customer_name,
        customer_phone=order.customer_phone,
        customer_email=order.customer_email,
        preferred_contact=order.preferred_contact,
        customer_message=order.customer_message,
        device_type=order.device_type,
        service_slug=order.service_slug,
        service_name=order.service_name,
        urgent=order.urgent,
        needs_pickup=order.needs_pickup,
        price_estimate=estimate,
        stage=stage.value,
        stage_progress=stage_progress(stage),
        stage_updated_at=order.stage_updated_at,
        delivery_stage=coerce_delivery_stage(order.delivery_stage).value,
        delivery_stage_updated_at=order.delivery_stage_updated_at,
        worker_id=order.worker_id,
        worker_email=order.worker_email,
        worker_name=order.worker_name,
        worker_group=order.worker_group,
        lead_group=order.lead_group,
        lead_priority_until=order.lead_priority_until,
        is_mine=(order.worker_id == viewer_id) if viewer_id is not None else None,
        is_unassigned=not order.worker_id,
        created_at=order.created_at,
        updated_at=order.updated_at,
    )


def _serialize_note(note: RepairOrderNote) -> NoteOut:
    return NoteOut(id=note.id, message=note.message, created_at=note.created_at)
