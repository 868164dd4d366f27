from sqlalchemy import Integer, String, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.db.session import Base


class CompetitorMapping(Base):
    __tablename__ = "competitor_mappings"
    __table_args__ = (
        # Un identificador de plataforma solo apunta a un piloto por temporada
        UniqueConstraint("season_id", "platform_id", name="uq_season_platform_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    season_id: Mapped[int] = mapped_column(Integer, ForeignKey("seasons.id"), nullable=False, index=True)
    competitor_id: Mapped[int] = mapped_column(Integer, ForeignKey("competitors.id"), nullable=False)
    sim_driver_name: Mapped[str | None] = mapped_column(String, nullable=True, index=True)
    sim_car_number: Mapped[int | None] = mapped_column(Integer, nullable=True)
    platform_id: Mapped[str | None] = mapped_column(String, nullable=True)

    # Relaciones
    season: Mapped["Season"] = relationship("Season", back_populates="competitor_mappings")
    competitor: Mapped["Competitor"] = relationship("Competitor")
