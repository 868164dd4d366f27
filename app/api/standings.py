from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.deps import get_db
from app.schemas.results import StandingOut
from app.services.standings import season_standings

router = APIRouter(prefix="/standings", tags=["Standings"])


@router.get("/season/{season_id}", response_model=list[StandingOut])
def individual_season_standings(season_id: int, db: Session = Depends(get_db)):
    return season_standings(db, season_id)
