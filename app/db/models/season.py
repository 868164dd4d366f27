from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import List, TYPE_CHECKING
from app.db.session import Base

if TYPE_CHECKING:
    from app.db.models.event import Event
    from app.db.models.competitor_mapping import CompetitorMapping


class Season(Base):
    __tablename__ = "seasons"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    name: Mapped[str] = mapped_column(String, nullable=False)

    # Relaciones
    events: Mapped[List["Event"]] = relationship("Event", back_populates="season")
    competitor_mappings: Mapped[List["CompetitorMapping"]] = relationship(
        "CompetitorMapping", back_populates="season"
    )
