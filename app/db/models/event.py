# app/db/models/event.py
from sqlalchemy import Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from datetime import datetime
from typing import List, TYPE_CHECKING
import enum
from app.db.session import Base
from app.core.timeutils import utcnow

if TYPE_CHECKING:
    from app.db.models.season import Season
    from app.db.models.race_session import RaceSession


class EventStatus(str, enum.Enum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Event(Base):
    """Un fin de semana de carrera del calendario (un circuito, varias sesiones)."""

    __tablename__ = "events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    season_id: Mapped[int] = mapped_column(Integer, ForeignKey("seasons.id"), nullable=False, index=True)
    track_name: Mapped[str] = mapped_column(String, nullable=False, index=True)
    race_datetime: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    # Guardamos el valor del enum como texto plano: scheduled / completed / cancelled
    status: Mapped[str] = mapped_column(String, default=EventStatus.SCHEDULED.value, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    # Relaciones
    season: Mapped["Season"] = relationship("Season", back_populates="events")
    sessions: Mapped[List["RaceSession"]] = relationship("RaceSession", back_populates="event")
