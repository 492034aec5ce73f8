from datetime import datetime
from sqlalchemy import TIMESTAMP, ForeignKey, String, func
from sqlalchemy.orm import Mapped, mapped_column

from src.adapters.db.base import Base
from src.util.time import ensure_utc, utcnow


class EmailVerificationModel(Base):
    __tablename__ = "email_verifications"

    id: Mapped[int] = mapped_column(primary_key=True)

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    new_email: Mapped[str] = mapped_column(String(255), nullable=False)

    # sha256 hex of the emailed token; the plaintext is never stored
    token: Mapped[str] = mapped_column(String(64), nullable=False)

    expires_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    def is_expired(self, now: datetime | None = None) -> bool:
        return (now or utcnow()) > ensure_utc(self.expires_at)

    def __repr__(self):
        return f"<EmailVerification user={self.user_id} -> {self.new_email}>"
