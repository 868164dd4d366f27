from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Any, Literal, Optional

from app.db.models.race_session import SessionKind


# -----------------------
# Lectura
# -----------------------
class CompetitorOut(BaseModel):
    id: int
    name: str
    team: Optional[str] = None
    car_number: Optional[int] = None
    model_config = ConfigDict(from_attributes=True)


class PenaltyOut(BaseModel):
    id: int
    result_id: int
    seconds: int
    reason: str
    created_by: str
    created_at: datetime
    is_active: bool
    removed_at: Optional[datetime] = None
    removed_by: Optional[str] = None
    model_config = ConfigDict(from_attributes=True)


class ResultOut(BaseModel):
    id: int
    session_id: int
    position: Optional[int] = None
    grid_position: Optional[int] = None
    competitor: Optional[CompetitorOut] = None
    is_mapped: bool
    sim_driver_id: Optional[int] = None
    sim_driver_name: str
    sim_team_name: Optional[str] = None
    sim_car_number: Optional[int] = None
    num_laps: int
    best_lap_time_ms: Optional[int] = None
    sector1_time_ms: Optional[int] = None
    sector2_time_ms: Optional[int] = None
    sector3_time_ms: Optional[int] = None
    base_time_ms: Optional[int] = None
    total_time_ms: Optional[int] = None
    in_session_penalty_seconds: int
    post_race_penalty_seconds: int
    warnings: int
    result_status: int
    status_name: str
    dnf_reason: Optional[str] = None
    fastest_lap: bool
    pole_position: bool
    points: float
    penalties: list[PenaltyOut] = []
    model_config = ConfigDict(from_attributes=True)


class SessionOut(BaseModel):
    id: int
    event_id: int
    session_type: int
    session_name: str
    kind: Optional[SessionKind] = None
    simulator_session_id: Optional[str] = None
    completed_at: datetime
    model_config = ConfigDict(from_attributes=True)


class SessionResultsOut(BaseModel):
    session: SessionOut
    results: list[ResultOut]


class AuditEntryOut(BaseModel):
    id: int
    session_id: int
    result_id: Optional[int] = None
    competitor_id: Optional[int] = None
    edit_type: str
    old_value: Optional[dict[str, Any]] = None
    new_value: Optional[dict[str, Any]] = None
    reason: str
    edited_by: str
    created_at: datetime
    is_reverted: bool
    reverted_at: Optional[datetime] = None
    reverted_by: Optional[str] = None
    model_config = ConfigDict(from_attributes=True)


class IngestionOutcome(BaseModel):
    status: Literal["ingested", "orphaned", "failed"]
    event_id: Optional[int] = None
    session_id: Optional[int] = None
    orphan_id: Optional[int] = None
    results_count: int = 0
    unmapped_count: int = 0
    resubmission: bool = False
    error: Optional[str] = None


class StandingOut(BaseModel):
    competitor_id: int
    name: str
    team: Optional[str] = None
    races: int
    points: float
    wins: int
    podiums: int
    fastest_laps: int
    poles: int
    best_finish: Optional[int] = None
    in_session_penalty_seconds: int
    post_race_penalty_seconds: int
    warnings: int


# -----------------------
# Escritura (ediciones de comisarios)
# -----------------------
class PenaltyCreate(BaseModel):
    seconds: int = Field(gt=0)
    reason: str = Field(min_length=1)
    edited_by: Optional[str] = None  # Por defecto, el admin autenticado


class EditorBody(BaseModel):
    edited_by: Optional[str] = None


class PositionChange(BaseModel):
    new_position: int = Field(ge=1)
    reason: str = Field(min_length=1)
    edited_by: Optional[str] = None


class DisqualifyRequest(BaseModel):
    reason: str = Field(min_length=1)
    edited_by: Optional[str] = None


class CompetitorMappingUpdate(BaseModel):
    competitor_id: Optional[int] = None  # None = quitar el mapeo
    reason: Optional[str] = None
    edited_by: Optional[str] = None
    remember: bool = True


class SessionErrorOut(BaseModel):
    id: int
    error_type: str
    error_message: str
    track_name: Optional[str] = None
    event_id: Optional[int] = None
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)
