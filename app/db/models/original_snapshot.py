# app/db/models/original_snapshot.py
from sqlalchemy import Integer, String, Boolean, DateTime, ForeignKey, Float, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from datetime import datetime
from app.db.session import Base
from app.core.timeutils import utcnow


class OriginalSnapshot(Base):
    """
    Copia congelada de un resultado en el momento de la ingesta.
    Nunca se modifica salvo para marcarla como restaurada.
    """

    __tablename__ = "original_snapshots"
    __table_args__ = (
        UniqueConstraint("session_id", "result_id", name="uq_snapshot_session_result"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    session_id: Mapped[int] = mapped_column(Integer, ForeignKey("sessions.id"), nullable=False, index=True)
    result_id: Mapped[int] = mapped_column(Integer, ForeignKey("base_results.id"), nullable=False)
    competitor_id: Mapped[int | None] = mapped_column(Integer, nullable=True)

    original_position: Mapped[int | None] = mapped_column(Integer, nullable=True)
    original_grid_position: Mapped[int | None] = mapped_column(Integer, nullable=True)
    original_points: Mapped[float] = mapped_column(Float, default=0)
    original_total_time_ms: Mapped[int | None] = mapped_column(Integer, nullable=True)
    original_in_session_penalty_seconds: Mapped[int] = mapped_column(Integer, default=0)
    original_warnings: Mapped[int] = mapped_column(Integer, default=0)
    original_result_status: Mapped[int] = mapped_column(Integer, nullable=False)
    original_dnf_reason: Mapped[str | None] = mapped_column(String, nullable=True)

    is_restored: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    # Relaciones
    result: Mapped["BaseResult"] = relationship("BaseResult", back_populates="snapshot")
