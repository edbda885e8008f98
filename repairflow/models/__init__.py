"""Application data models."""

from repairflow.models.note import RepairOrderNote
from repairflow.models.repair_order import RepairOrder

__all__ = ["RepairOrder", "RepairOrderNote"]
