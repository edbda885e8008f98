from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from repairflow.core.config import get_settings


class PriceEstimate(BaseModel):
    """Price range quoted to the customer by the storefront estimator."""

    currency: str = Field(min_length=1, max_length=8)
    min: Optional[float] = Field(default=None, ge=0)
    max: Optional[float] = Field(default=None, ge=0)

    @model_validator(mode="after")
    def _check_bounds(self) -> "PriceEstimate":
        if self.min is not None and self.max is not None and self.min > self.max:
            raise ValueError("estimate min must not exceed max")
        return self


class RepairOrderCreate(BaseModel):
    """Payload submitted by the storefront service request form."""

    customer_name: str = Field(min_length=1, max_length=255)
    customer_phone: str = Field(min_length=1, max_length=64)
    customer_email: Optional[str] = Field(default=None, max_length=255)
    preferred_contact: Optional[str] = Field(default=None, max_length=64)
    customer_message: Optional[str] = None
    device_type: str = Field(min_length=1, max_length=128)
    service_slug: str = Field(min_length=1, max_length=255)
    service_name: str = Field(min_length=1, max_length=255)
    urgent: bool = False
    needs_pickup: bool = False
    price_estimate: Optional[PriceEstimate] = None

    model_config = {
        "json_schema_extra": {
            "example": {
                "customer_name": "Ivan Petrov",
                "customer_phone": "+79990000000",
                "device_type": "smartphone",
                "service_slug": "screen-replacement",
                "service_name": "Screen replacement",
                "urgent": True,
                "needs_pickup": False,
            }
        }
    }


class WorkerRef(BaseModel):
    """Staff member acting on an order."""

    worker_id: str = Field(min_length=1)
    worker_email: str = Field(min_length=1)
    worker_name: Optional[str] = None

    @property
    def display_name(self) -> str:
        name = (self.worker_name or "").strip()
        return name or self.worker_email


class StageUpdate(BaseModel):
    stage: str


class NoteCreate(BaseModel):
    message: str = Field(min_length=1)

    @field_validator("message")
    @classmethod
    def _check_length(cls, value: str) -> str:
        limit = get_settings().note_max_length
        if len(value) > limit:
            raise ValueError(f"note must be at most {limit} characters")
        return value


class NoteOut(BaseModel):
    id: int
    message: str
    created_at: datetime


class NoteList(BaseModel):
    items: list[NoteOut]


class RepairOrderOut(BaseModel):
    """Represents a repair order in responses."""

    id: int
    customer_name: str
    customer_phone: str
    customer_email: Optional[str] = None
    preferred_contact: Optional[str] = None
    customer_message: Optional[str] = None
    device_type: str
    service_slug: str
    service_name: str
    urgent: bool
    needs_pickup: bool
    price_estimate: Optional[PriceEstimate] = None

    stage: str
    stage_progress: int
    stage_updated_at: Optional[datetime] = None
    delivery_stage: str
    delivery_stage_updated_at: Optional[datetime] = None

    worker_id: Optional[str] = None
    worker_email: Optional[str] = None
    worker_name: Optional[str] = None
    worker_group: str
    lead_group: Optional[str] = None
    lead_priority_until: Optional[datetime] = None

    is_mine: Optional[bool] = None
    is_unassigned: bool

    created_at: datetime
    updated_at: datetime


class RepairOrderList(BaseModel):
    """Collection wrapper for order listings."""

    items: list[RepairOrderOut]


class StaffBoard(BaseModel):
    """Orders grouped the way the staff board renders them."""

    unassigned: list[RepairOrderOut]
    my_active: list[RepairOrderOut]
    completed: list[RepairOrderOut]
