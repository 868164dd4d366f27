from sqlalchemy import Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column
from app.db.session import Base


class Competitor(Base):
    """Miembro de la liga. Lo gestiona el roster; el motor solo lo referencia."""

    __tablename__ = "competitors"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False, index=True)
    team: Mapped[str | None] = mapped_column(String, nullable=True)
    car_number: Mapped[int | None] = mapped_column(Integer, nullable=True)
    # Identificador de la plataforma (Steam, PSN...) que usa el simulador
    platform_id: Mapped[str | None] = mapped_column(String, nullable=True, index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
