from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import Boolean, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from repairflow.core.database import Base
from repairflow.models.mixins import TimestampMixin
from repairflow.utils.enums import DeliveryStage, RepairStage


class RepairOrder(Base, TimestampMixin):
    """A customer's device repair request and its workflow position."""

    __tablename__ = "repair_orders"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)

    customer_name: Mapped[str] = mapped_column(String(255), nullable=False)
    customer_phone: Mapped[str] = mapped_column(String(64), nullable=False)
    customer_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    preferred_contact: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    customer_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    device_type: Mapped[str] = mapped_column(String(128), nullable=False)
    service_slug: Mapped[str] = mapped_column(String(255), index=True, nullable=False)
    service_name: Mapped[str] = mapped_column(String(255), nullable=False)
    urgent: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    needs_pickup: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    estimate_min: Mapped[Optional[float]] = mapped_column(Numeric(12, 2, asdecimal=False), nullable=True)
    estimate_max: Mapped[Optional[float]] = mapped_column(Numeric(12, 2, asdecimal=False), nullable=True)
    estimate_currency: Mapped[Optional[str]] = mapped_column(String(8), nullable=True)

    stage: Mapped[str] = mapped_column(
        String(32), index=True, nullable=False, default=RepairStage.PENDING_ASSIGNMENT.value
    )
    stage_updated_at: Mapped[Optional[datetime]] = mapped_column(nullable=True)
    delivery_stage: Mapped[str] = mapped_column(
        String(32), nullable=False, default=DeliveryStage.NOT_REQUIRED.value
    )
    delivery_stage_updated_at: Mapped[Optional[datetime]] = mapped_column(nullable=True)

    worker_id: Mapped[Optional[str]] = mapped_column(String(255), index=True, nullable=True)
    worker_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    worker_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    worker_group: Mapped[str] = mapped_column(String(255), index=True, nullable=False)
    lead_group: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    lead_priority_until: Mapped[Optional[datetime]] = mapped_column(nullable=True)

    notes: Mapped[List["RepairOrderNote"]] = relationship(
        back_populates="order", cascade="all, delete-orphan", order_by="RepairOrderNote.id"
    )


from repairflow.models.note import RepairOrderNote  # noqa: E402  (circular import resolution)
