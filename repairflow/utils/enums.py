from enum import Enum


class RepairStage(str, Enum):
    """Lifecycle position of a device repair job, in flow order."""

    PENDING_ASSIGNMENT = "pending_assignment"
    DIAGNOSTICS = "diagnostics"
    WAITING_FOR_PARTS = "waiting_for_parts"
    IN_PROGRESS = "in_progress"
    QUALITY_CHECK = "quality_check"
    READY_FOR_DELIVERY = "ready_for_delivery"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class DeliveryStage(str, Enum):
    """Logistics state of the courier leg attached to a repair job."""

    NOT_REQUIRED = "not_required"
    PENDING_ASSIGNMENT = "pending_assignment"
    PICKUP_SCHEDULED = "pickup_scheduled"
    PICKED_UP = "picked_up"
    DELIVERED_TO_SERVICE = "delivered_to_service"
    READY_FOR_RETURN = "ready_for_return"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
