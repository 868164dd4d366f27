from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.deps import get_db, require_admin
from app.schemas.ingestion import DecodedSessionBody
from app.schemas.results import IngestionOutcome
from app.services.ingestion import ingest_into_event, ingest_session

router = APIRouter(prefix="/ingest", tags=["Ingestion"])


@router.post("/seasons/{season_id}", response_model=IngestionOutcome)
def ingest_season_session(
    season_id: int,
    body: DecodedSessionBody,
    db: Session = Depends(get_db),
    current_user=Depends(require_admin),
):
    """Sesión decodificada del listener: se busca el evento por circuito."""
    return ingest_session(db, season_id, body.root)


@router.post("/events/{event_id}", response_model=IngestionOutcome)
def ingest_event_session(
    event_id: int,
    body: DecodedSessionBody,
    db: Session = Depends(get_db),
    current_user=Depends(require_admin),
):
    return ingest_into_event(db, event_id, body.root)
