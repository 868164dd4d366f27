# app/db/models/orphaned_session.py
from sqlalchemy import Integer, String, DateTime, ForeignKey, JSON
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime
import enum
from app.db.session import Base
from app.core.timeutils import utcnow


class OrphanStatus(str, enum.Enum):
    PENDING = "pending"
    PROCESSED = "processed"
    IGNORED = "ignored"


class OrphanedSession(Base):
    """Sesión recibida que no encaja con ningún evento programado."""

    __tablename__ = "orphaned_sessions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    season_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("seasons.id"), nullable=True)
    track_name: Mapped[str] = mapped_column(String, nullable=False)
    session_type: Mapped[int] = mapped_column(Integer, nullable=False)
    simulator_session_id: Mapped[str | None] = mapped_column(String, nullable=True)
    # Payload tal cual llegó, para reintentar la ingesta a mano
    session_data: Mapped[dict] = mapped_column(JSON, nullable=False)
    status: Mapped[str] = mapped_column(String, default=OrphanStatus.PENDING.value, nullable=False, index=True)
    processed_event_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("events.id"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    resolved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
