# app/db/models/audit_entry.py
from sqlalchemy import Integer, String, Boolean, DateTime, ForeignKey, JSON
from sqlalchemy.orm import Mapped, mapped_column, relationship
from datetime import datetime
import enum
from typing import Optional
from app.db.session import Base
from app.core.timeutils import utcnow


class EditType(str, enum.Enum):
    PENALTY_ADD = "penalty_add"
    PENALTY_REMOVE = "penalty_remove"
    POSITION_CHANGE = "position_change"
    DISQUALIFICATION = "disqualification"
    RESET = "reset"
    USER_MAPPING = "user_mapping"


class AuditEntry(Base):
    """
    Historial de ediciones. Solo se añaden filas: revertir marca `is_reverted`
    y aplica el efecto inverso, nunca borra la entrada.
    """

    __tablename__ = "audit_entries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    session_id: Mapped[int] = mapped_column(Integer, ForeignKey("sessions.id"), nullable=False, index=True)
    # Se pone a NULL si el resultado se reemplaza por una reingesta
    result_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("base_results.id"), nullable=True, index=True)
    competitor_id: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)
    edit_type: Mapped[str] = mapped_column(String, nullable=False)
    old_value: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    new_value: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    reason: Mapped[str] = mapped_column(String, nullable=False)
    edited_by: Mapped[str] = mapped_column(String, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    is_reverted: Mapped[bool] = mapped_column(Boolean, default=False)
    reverted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    reverted_by: Mapped[str | None] = mapped_column(String, nullable=True)

    # Relaciones
    session: Mapped["RaceSession"] = relationship("RaceSession")
    result: Mapped[Optional["BaseResult"]] = relationship("BaseResult")
