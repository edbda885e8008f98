"""Repair and delivery stage tables plus their membership checks.

Stages are stored on orders as plain strings, so every value read from the
database or a request body goes through these helpers before it is trusted.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from repairflow.utils.enums import DeliveryStage, RepairStage

REPAIR_STAGE_FLOW: tuple[RepairStage, ...] = tuple(RepairStage)
DELIVERY_STAGE_FLOW: tuple[DeliveryStage, ...] = tuple(DeliveryStage)

ACTIVE_REPAIR_STAGES: tuple[RepairStage, ...] = tuple(
    stage
    for stage in REPAIR_STAGE_FLOW
    if stage not in (RepairStage.PENDING_ASSIGNMENT, RepairStage.CANCELLED)
)

_REPAIR_VALUES = frozenset(stage.value for stage in REPAIR_STAGE_FLOW)
_DELIVERY_VALUES = frozenset(stage.value for stage in DELIVERY_STAGE_FLOW)


def _raw_value(value: Any) -> Optional[str]:
    # str-mixin enum members hash by name, so unwrap them before set lookups.
    if isinstance(value, Enum):
        value = value.value
    if not isinstance(value, str):
        return None
    return value


def is_repair_stage(value: Any) -> bool:
    """Return True when ``value`` is exactly one of the repair stage names."""

    raw = _raw_value(value)
    return raw is not None and raw in _REPAIR_VALUES


def is_delivery_stage(value: Any) -> bool:
    """Return True when ``value`` is exactly one of the delivery stage names."""

    raw = _raw_value(value)
    return raw is not None and raw in _DELIVERY_VALUES


def active_repair_stages() -> tuple[RepairStage, ...]:
    """Stages counted as in-flight work on dashboards."""

    return ACTIVE_REPAIR_STAGES


def coerce_repair_stage(value: Optional[str]) -> RepairStage:
    """Map a stored value to a stage, falling back to pending assignment."""

    if not is_repair_stage(value):
        return RepairStage.PENDING_ASSIGNMENT
    return RepairStage(_raw_value(value))


def coerce_delivery_stage(value: Optional[str]) -> DeliveryStage:
    if not is_delivery_stage(value):
        return DeliveryStage.NOT_REQUIRED
    return DeliveryStage(_raw_value(value))


def is_open_repair_stage(stage: RepairStage) -> bool:
    return stage not in (RepairStage.COMPLETED, RepairStage.CANCELLED)


def stage_progress(stage: RepairStage) -> int:
    """Percentage of the active flow reached by ``stage``."""

    if stage not in ACTIVE_REPAIR_STAGES:
        return 0
    position = ACTIVE_REPAIR_STAGES.index(stage) + 1
    return round(100 * position / len(ACTIVE_REPAIR_STAGES))
