from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.deps import get_db, require_admin
from app.schemas.results import (
    AuditEntryOut,
    DisqualifyRequest,
    PositionChange,
    ResultOut,
    SessionOut,
    SessionResultsOut,
)
from app.services import result_editor
from app.services.audit import get_session_history
from app.services.recalculation import recalculate_positions
from app.services.results import get_session_results, list_event_sessions, unmapped_results

router = APIRouter(prefix="/sessions", tags=["Sessions"])


# -----------------------
# Lectura
# -----------------------
@router.get("/event/{event_id}", response_model=list[SessionOut])
def event_sessions(event_id: int, db: Session = Depends(get_db)):
    return list_event_sessions(db, event_id)


@router.get("/{session_id}/results", response_model=SessionResultsOut)
def session_results(session_id: int, db: Session = Depends(get_db)):
    session, results = get_session_results(db, session_id)
    return {"session": session, "results": results}


@router.get("/{session_id}/unmapped", response_model=list[ResultOut])
def session_unmapped(session_id: int, db: Session = Depends(get_db)):
    """Resultados que el resolver no pudo asignar a ningún piloto de la liga."""
    return unmapped_results(db, session_id)


@router.get("/{session_id}/history", response_model=list[AuditEntryOut])
def session_history(session_id: int, db: Session = Depends(get_db)):
    return get_session_history(db, session_id)


# -----------------------
# Ediciones (solo admin)
# -----------------------
@router.post("/{session_id}/recalculate")
def recalculate(session_id: int, db: Session = Depends(get_db), current_user=Depends(require_admin)):
    changed = recalculate_positions(db, session_id)
    return {"session_id": session_id, "changed": changed}


@router.post("/{session_id}/reset", response_model=list[ResultOut])
def reset_session(session_id: int, db: Session = Depends(get_db), current_user=Depends(require_admin)):
    return result_editor.reset_session(db, session_id)


@router.put("/{session_id}/results/{result_id}/position", response_model=ResultOut)
def change_position(
    session_id: int,
    result_id: int,
    body: PositionChange,
    db: Session = Depends(get_db),
    current_user=Depends(require_admin),
):
    return result_editor.change_position(
        db,
        session_id,
        result_id,
        body.new_position,
        body.reason,
        body.edited_by or current_user.username,
    )


@router.post("/{session_id}/results/{result_id}/disqualify", response_model=ResultOut)
def disqualify(
    session_id: int,
    result_id: int,
    body: DisqualifyRequest,
    db: Session = Depends(get_db),
    current_user=Depends(require_admin),
):
    return result_editor.disqualify(
        db, session_id, result_id, body.reason, body.edited_by or current_user.username
    )


@router.post("/{session_id}/results/{result_id}/reset", response_model=ResultOut)
def reset_result(
    session_id: int,
    result_id: int,
    db: Session = Depends(get_db),
    current_user=Depends(require_admin),
):
    return result_editor.reset_to_original(db, session_id, result_id)
