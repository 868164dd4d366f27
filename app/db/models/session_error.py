from sqlalchemy import Integer, String, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime
from app.db.session import Base
from app.core.timeutils import utcnow


class SessionError(Base):
    """Registro de una ingesta fallida (para depurar, no se reintenta sola)."""

    __tablename__ = "session_errors"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    error_type: Mapped[str] = mapped_column(String, nullable=False)
    error_message: Mapped[str] = mapped_column(String, nullable=False)
    track_name: Mapped[str | None] = mapped_column(String, nullable=True)
    event_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    session_data: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
