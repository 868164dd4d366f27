from fastapi import APIRouter, HTTPException, Depends
from sqlalchemy.orm import Session

from app.core.deps import get_db, require_admin
from app.core.exceptions import SeasonNotFoundError
from app.db.models.season import Season
from app.db.models.event import Event
from app.db.models.competitor import Competitor
from app.db.models.competitor_mapping import CompetitorMapping
from app.db.models.session_error import SessionError
from app.schemas.season import (
    SeasonCreate,
    SeasonOut,
    EventCreate,
    EventOut,
    CompetitorCreate,
    CompetitorFullOut,
    CompetitorMappingCreate,
    CompetitorMappingOut,
)
from app.schemas.results import SessionErrorOut

router = APIRouter(prefix="/admin", tags=["Admin"])


def _get_season(db: Session, season_id: int) -> Season:
    season = db.get(Season, season_id)
    if not season:
        raise SeasonNotFoundError(f"Season {season_id} not found")
    return season


# -----------------------
# Temporadas
# -----------------------
@router.get("/seasons", response_model=list[SeasonOut])
def list_seasons(db: Session = Depends(get_db)):
    return db.query(Season).order_by(Season.year.desc()).all()


@router.post("/seasons", response_model=SeasonOut, status_code=201)
def create_season(season: SeasonCreate, db: Session = Depends(get_db), current_user=Depends(require_admin)):
    new_season = Season(year=season.year, name=season.name)
    db.add(new_season)
    db.commit()
    db.refresh(new_season)
    return new_season


# -----------------------
# Eventos del calendario
# -----------------------
@router.get("/seasons/{season_id}/events", response_model=list[EventOut])
def list_events(season_id: int, db: Session = Depends(get_db)):
    _get_season(db, season_id)
    return (
        db.query(Event)
        .filter(Event.season_id == season_id)
        .order_by(Event.race_datetime.is_(None), Event.race_datetime, Event.id)
        .all()
    )


@router.post("/events", response_model=EventOut, status_code=201)
def create_event(event: EventCreate, db: Session = Depends(get_db), current_user=Depends(require_admin)):
    _get_season(db, event.season_id)
    new_event = Event(
        season_id=event.season_id,
        track_name=event.track_name,
        race_datetime=event.race_datetime,
    )
    db.add(new_event)
    db.commit()
    db.refresh(new_event)
    return new_event


# -----------------------
# Roster
# -----------------------
@router.get("/competitors", response_model=list[CompetitorFullOut])
def list_competitors(db: Session = Depends(get_db)):
    return db.query(Competitor).order_by(Competitor.name).all()


@router.post("/competitors", response_model=CompetitorFullOut, status_code=201)
def create_competitor(
    competitor: CompetitorCreate,
    db: Session = Depends(get_db),
    current_user=Depends(require_admin),
):
    new_competitor = Competitor(**competitor.model_dump())
    db.add(new_competitor)
    db.commit()
    db.refresh(new_competitor)
    return new_competitor


# -----------------------
# Mapeos simulador -> piloto de la liga
# -----------------------
@router.get("/seasons/{season_id}/mappings", response_model=list[CompetitorMappingOut])
def list_mappings(season_id: int, db: Session = Depends(get_db)):
    _get_season(db, season_id)
    return db.query(CompetitorMapping).filter(CompetitorMapping.season_id == season_id).all()


@router.post("/seasons/{season_id}/mappings", response_model=CompetitorMappingOut, status_code=201)
def create_mapping(
    season_id: int,
    mapping: CompetitorMappingCreate,
    db: Session = Depends(get_db),
    current_user=Depends(require_admin),
):
    _get_season(db, season_id)
    if not db.get(Competitor, mapping.competitor_id):
        raise HTTPException(status_code=404, detail="Competitor not found")
    if mapping.platform_id:
        duplicate = db.query(CompetitorMapping).filter(
            CompetitorMapping.season_id == season_id,
            CompetitorMapping.platform_id == mapping.platform_id,
        ).first()
        if duplicate:
            raise HTTPException(status_code=409, detail="Platform id already mapped in this season")

    new_mapping = CompetitorMapping(season_id=season_id, **mapping.model_dump())
    db.add(new_mapping)
    db.commit()
    db.refresh(new_mapping)
    return new_mapping


# -----------------------
# Ingestas fallidas
# -----------------------
@router.get("/session-errors", response_model=list[SessionErrorOut])
def list_session_errors(limit: int = 50, db: Session = Depends(get_db), current_user=Depends(require_admin)):
    return (
        db.query(SessionError)
        .order_by(SessionError.created_at.desc(), SessionError.id.desc())
        .limit(limit)
        .all()
    )
