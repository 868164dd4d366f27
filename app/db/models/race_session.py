# app/db/models/race_session.py
from sqlalchemy import Integer, String, DateTime, ForeignKey, JSON, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from datetime import datetime
from typing import List, TYPE_CHECKING
import enum
from app.db.session import Base
from app.core.timeutils import utcnow

if TYPE_CHECKING:
    from app.db.models.event import Event
    from app.db.models.base_result import BaseResult


class SessionKind(str, enum.Enum):
    PRACTICE = "practice"
    QUALIFYING = "qualifying"
    RACE = "race"


# Numeración de sesiones del simulador
SESSION_TYPE_NAMES = {
    1: "Practice 1",
    2: "Practice 2",
    3: "Practice 3",
    4: "Short Practice",
    5: "Q1",
    6: "Q2",
    7: "Q3",
    8: "Short Qualifying",
    9: "One Shot Qualifying",
    10: "Race",
    11: "Race 2",
    12: "Race 3",
}

SESSION_TYPES_BY_KIND = {
    SessionKind.PRACTICE: (1, 2, 3, 4),
    SessionKind.QUALIFYING: (5, 6, 7, 8, 9),
    SessionKind.RACE: (10, 11, 12),
}

DEFAULT_SESSION_TYPE = {
    SessionKind.PRACTICE: 1,
    SessionKind.QUALIFYING: 5,
    SessionKind.RACE: 10,
}


def session_kind_of(session_type: int) -> SessionKind | None:
    for kind, types in SESSION_TYPES_BY_KIND.items():
        if session_type in types:
            return kind
    return None


def session_type_name(session_type: int) -> str:
    return SESSION_TYPE_NAMES.get(session_type, "Unknown")


class RaceSession(Base):
    """Una sesión completada (libres, clasificación o carrera) de un evento."""

    __tablename__ = "sessions"
    __table_args__ = (
        # Solo una sesión de cada tipo por evento
        UniqueConstraint("event_id", "session_type", name="uq_event_session_type"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    event_id: Mapped[int] = mapped_column(Integer, ForeignKey("events.id"), nullable=False, index=True)
    session_type: Mapped[int] = mapped_column(Integer, nullable=False)
    session_name: Mapped[str] = mapped_column(String, nullable=False)
    # El UID del simulador es un uint64: lo guardamos como texto
    simulator_session_id: Mapped[str | None] = mapped_column(String, unique=True, nullable=True)
    completed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    additional_data: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    # Relaciones
    event: Mapped["Event"] = relationship("Event", back_populates="sessions")
    results: Mapped[List["BaseResult"]] = relationship(
        "BaseResult", back_populates="session", order_by="BaseResult.position"
    )

    @property
    def kind(self) -> SessionKind | None:
        return session_kind_of(self.session_type)
