from sqlalchemy import ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from repairflow.core.database import Base
from repairflow.models.mixins import CreatedAtMixin


class RepairOrderNote(Base, CreatedAtMixin):
    """Append-only log line attached to a repair order."""

    __tablename__ = "repair_order_notes"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    order_id: Mapped[int] = mapped_column(
        ForeignKey("repair_orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    message: Mapped[str] = mapped_column(Text, nullable=False)

    order: Mapped["RepairOrder"] = relationship(back_populates="notes")


from repairflow.models.repair_order import RepairOrder  # noqa: E402
