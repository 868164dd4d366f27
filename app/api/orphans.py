from datetime import datetime
from typing import Any, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict
from sqlalchemy.orm import Session

from app.core.deps import get_db, require_admin
from app.schemas.results import IngestionOutcome
from app.services.orphans import ignore_orphan, list_orphans, process_orphan

router = APIRouter(prefix="/orphans", tags=["Orphans"])


class OrphanOut(BaseModel):
    id: int
    season_id: Optional[int] = None
    track_name: str
    session_type: int
    simulator_session_id: Optional[str] = None
    session_data: dict[str, Any]
    status: str
    processed_event_id: Optional[int] = None
    created_at: datetime
    resolved_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


class ProcessOrphan(BaseModel):
    event_id: int


@router.get("", response_model=list[OrphanOut])
def read_orphans(status: Optional[str] = "pending", db: Session = Depends(get_db)):
    # status vacío = todas
    return list_orphans(db, status or None)


@router.post("/{orphan_id}/process", response_model=IngestionOutcome)
def process(
    orphan_id: int,
    body: ProcessOrphan,
    db: Session = Depends(get_db),
    current_user=Depends(require_admin),
):
    return process_orphan(db, orphan_id, body.event_id)


@router.post("/{orphan_id}/ignore", response_model=OrphanOut)
def ignore(orphan_id: int, db: Session = Depends(get_db), current_user=Depends(require_admin)):
    return ignore_orphan(db, orphan_id)
