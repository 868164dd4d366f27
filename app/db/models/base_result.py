# app/db/models/base_result.py
from sqlalchemy import Integer, String, Boolean, DateTime, ForeignKey, Float
from sqlalchemy.orm import Mapped, mapped_column, relationship
from datetime import datetime
from typing import List, Optional, TYPE_CHECKING
import enum
from app.db.session import Base
from app.core.timeutils import utcnow

if TYPE_CHECKING:
    from app.db.models.race_session import RaceSession
    from app.db.models.competitor import Competitor
    from app.db.models.penalty_entry import PenaltyEntry
    from app.db.models.original_snapshot import OriginalSnapshot


class ResultStatus(int, enum.Enum):
    """Códigos de estado final que reporta el simulador."""

    INVALID = 0
    INACTIVE = 1
    ACTIVE = 2
    FINISHED = 3
    DNF = 4
    DISQUALIFIED = 5
    NOT_CLASSIFIED = 6
    RETIRED = 7


# Estado que cuenta como "clasificado" al reordenar
CLASSIFIED_STATUS = ResultStatus.FINISHED


class BaseResult(Base):
    """
    Resultado de un piloto en una sesión tal y como llegó del simulador.
    Solo `position`, `total_time_ms` y los campos de penalización post-carrera
    cambian tras la ingesta (y el estado si hay descalificación).
    """

    __tablename__ = "base_results"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    session_id: Mapped[int] = mapped_column(Integer, ForeignKey("sessions.id"), nullable=False, index=True)
    # NULL hasta que el resolver encuentra al miembro de la liga
    competitor_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("competitors.id"), nullable=True, index=True)

    # Identidad dentro del simulador
    sim_driver_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    sim_driver_name: Mapped[str] = mapped_column(String, nullable=False)
    sim_team_name: Mapped[str | None] = mapped_column(String, nullable=True)
    sim_car_number: Mapped[int | None] = mapped_column(Integer, nullable=True)
    platform_id: Mapped[str | None] = mapped_column(String, nullable=True)

    position: Mapped[int | None] = mapped_column(Integer, nullable=True)
    grid_position: Mapped[int | None] = mapped_column(Integer, nullable=True)
    points: Mapped[float] = mapped_column(Float, default=0)
    num_laps: Mapped[int] = mapped_column(Integer, default=0)
    best_lap_time_ms: Mapped[int | None] = mapped_column(Integer, nullable=True)
    sector1_time_ms: Mapped[int | None] = mapped_column(Integer, nullable=True)
    sector2_time_ms: Mapped[int | None] = mapped_column(Integer, nullable=True)
    sector3_time_ms: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # total = base + penalizaciones post-carrera activas * 1000
    total_time_ms: Mapped[int | None] = mapped_column(Integer, nullable=True)
    base_time_ms: Mapped[int | None] = mapped_column(Integer, nullable=True)
    in_session_penalty_seconds: Mapped[int] = mapped_column(Integer, default=0)
    post_race_penalty_seconds: Mapped[int] = mapped_column(Integer, default=0)
    warnings: Mapped[int] = mapped_column(Integer, default=0)

    result_status: Mapped[int] = mapped_column(Integer, default=ResultStatus.FINISHED.value)
    dnf_reason: Mapped[str | None] = mapped_column(String, nullable=True)
    fastest_lap: Mapped[bool] = mapped_column(Boolean, default=False)
    pole_position: Mapped[bool] = mapped_column(Boolean, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    # Relaciones
    session: Mapped["RaceSession"] = relationship("RaceSession", back_populates="results")
    competitor: Mapped[Optional["Competitor"]] = relationship("Competitor")
    penalties: Mapped[List["PenaltyEntry"]] = relationship(
        "PenaltyEntry", back_populates="result", order_by="PenaltyEntry.created_at"
    )
    snapshot: Mapped[Optional["OriginalSnapshot"]] = relationship(
        "OriginalSnapshot", back_populates="result", uselist=False
    )

    @property
    def is_mapped(self) -> bool:
        return self.competitor_id is not None

    @property
    def status_name(self) -> str:
        try:
            return ResultStatus(self.result_status).name
        except ValueError:
            return "UNKNOWN"
