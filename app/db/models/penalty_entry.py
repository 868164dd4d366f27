# app/db/models/penalty_entry.py
from sqlalchemy import Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from datetime import datetime
from app.db.session import Base
from app.core.timeutils import utcnow


class PenaltyEntry(Base):
    """Penalización de tiempo aplicada por los comisarios después de la sesión."""

    __tablename__ = "penalty_entries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    result_id: Mapped[int] = mapped_column(Integer, ForeignKey("base_results.id"), nullable=False, index=True)
    seconds: Mapped[int] = mapped_column(Integer, nullable=False)
    reason: Mapped[str] = mapped_column(String, nullable=False)
    created_by: Mapped[str] = mapped_column(String, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    # Una penalización retirada sigue en el historial pero no suma
    removed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    removed_by: Mapped[str | None] = mapped_column(String, nullable=True)

    # Relaciones
    result: Mapped["BaseResult"] = relationship("BaseResult", back_populates="penalties")

    @property
    def is_active(self) -> bool:
        return self.removed_at is None
