from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import Optional


# Esquemas para Temporadas
class SeasonCreate(BaseModel):
    year: int
    name: str


class SeasonOut(SeasonCreate):
    id: int
    model_config = ConfigDict(from_attributes=True)


# Esquemas para Eventos (fines de semana de carrera)
class EventCreate(BaseModel):
    season_id: int
    track_name: str
    race_datetime: Optional[datetime] = None


class EventOut(BaseModel):
    id: int
    season_id: int
    track_name: str
    race_datetime: Optional[datetime] = None
    status: str
    model_config = ConfigDict(from_attributes=True)


# Roster de la liga
class CompetitorCreate(BaseModel):
    name: str
    team: Optional[str] = None
    car_number: Optional[int] = None
    platform_id: Optional[str] = None
    is_active: bool = True


class CompetitorFullOut(CompetitorCreate):
    id: int
    model_config = ConfigDict(from_attributes=True)


class CompetitorMappingCreate(BaseModel):
    competitor_id: int
    sim_driver_name: Optional[str] = None
    sim_car_number: Optional[int] = None
    platform_id: Optional[str] = None


class CompetitorMappingOut(CompetitorMappingCreate):
    id: int
    season_id: int
    model_config = ConfigDict(from_attributes=True)
