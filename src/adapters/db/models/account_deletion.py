import math
from datetime import datetime
from sqlalchemy import TIMESTAMP, ForeignKey, Enum as SAEnum, func
from sqlalchemy.orm import Mapped, mapped_column

from src.adapters.db.base import Base
from src.data.enums.deletion_status import DeletionStatus
from src.util.time import ensure_utc, utcnow

SECONDS_PER_DAY = 24 * 60 * 60


class AccountDeletionModel(Base):
    __tablename__ = "account_deletions"

    id: Mapped[int] = mapped_column(primary_key=True)

    # nulled rather than cascaded so a completed row outlives its account
    user_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    requested_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)

    scheduled_deletion_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        index=True,
    )

    status: Mapped[DeletionStatus] = mapped_column(
        SAEnum(
            DeletionStatus,
            name="deletion_status",
            values_callable=lambda enum: [member.value for member in enum],
        ),
        nullable=False,
        default=DeletionStatus.PENDING,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    @property
    def is_pending(self) -> bool:
        return self.status == DeletionStatus.PENDING

    def is_due(self, now: datetime | None = None) -> bool:
        return self.is_pending and ensure_utc(self.scheduled_deletion_at) <= (now or utcnow())

    def days_remaining(self, now: datetime | None = None) -> int:
        """Whole days left in the grace period, rounded up; 0 once not pending."""
        if not self.is_pending:
            return 0
        left = ensure_utc(self.scheduled_deletion_at) - (now or utcnow())
        return max(0, math.ceil(left.total_seconds() / SECONDS_PER_DAY))

    def __repr__(self):
        return f"<AccountDeletion user={self.user_id} {self.status.value}>"
