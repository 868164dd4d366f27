from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.deps import get_db, require_admin
from app.schemas.results import (
    AuditEntryOut,
    CompetitorMappingUpdate,
    EditorBody,
    PenaltyCreate,
    PenaltyOut,
    ResultOut,
)
from app.services.audit import get_result_history
from app.services.identity import map_competitor
from app.services.penalties import add_penalty, list_penalties, remove_penalty
from app.services.results import get_result

router = APIRouter(prefix="/results", tags=["Results"])


@router.get("/{result_id}", response_model=ResultOut)
def read_result(result_id: int, db: Session = Depends(get_db)):
    return get_result(db, result_id)


@router.get("/{result_id}/history", response_model=list[AuditEntryOut])
def result_history(result_id: int, db: Session = Depends(get_db)):
    return get_result_history(db, result_id)


# -----------------------
# Penalizaciones post-carrera
# -----------------------
@router.get("/{result_id}/penalties", response_model=list[PenaltyOut])
def read_penalties(result_id: int, include_removed: bool = False, db: Session = Depends(get_db)):
    return list_penalties(db, result_id, include_removed)


@router.post("/{result_id}/penalties", response_model=PenaltyOut, status_code=201)
def create_penalty(
    result_id: int,
    body: PenaltyCreate,
    db: Session = Depends(get_db),
    current_user=Depends(require_admin),
):
    return add_penalty(db, result_id, body.seconds, body.reason, body.edited_by or current_user.username)


@router.delete("/{result_id}/penalties/{penalty_id}", response_model=PenaltyOut)
def delete_penalty(
    result_id: int,
    penalty_id: int,
    body: EditorBody | None = None,
    db: Session = Depends(get_db),
    current_user=Depends(require_admin),
):
    edited_by = body.edited_by if body and body.edited_by else current_user.username
    return remove_penalty(db, result_id, penalty_id, edited_by)


# -----------------------
# Mapeo de identidad
# -----------------------
@router.put("/{result_id}/competitor", response_model=list[ResultOut])
def update_competitor(
    result_id: int,
    body: CompetitorMappingUpdate,
    db: Session = Depends(get_db),
    current_user=Depends(require_admin),
):
    return map_competitor(
        db,
        result_id,
        body.competitor_id,
        body.edited_by or current_user.username,
        reason=body.reason,
        remember=body.remember,
    )
