from datetime import datetime

from sqlalchemy.orm import Mapped, mapped_column


class CreatedAtMixin:
    """Mixin for append-only rows that are never updated."""

    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, nullable=False)


class TimestampMixin(CreatedAtMixin):
    """Adds an update timestamp on top of the creation time."""

    updated_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
