from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.deps import get_db, require_admin
from app.schemas.results import AuditEntryOut, EditorBody
from app.services.audit import get_competitor_history, get_event_history
from app.services.result_editor import reset_event
from app.services.revert import revert_edit

router = APIRouter(prefix="/edits", tags=["Edits"])


@router.post("/{edit_id}/revert", response_model=AuditEntryOut)
def revert(
    edit_id: int,
    body: EditorBody | None = None,
    db: Session = Depends(get_db),
    current_user=Depends(require_admin),
):
    reverted_by = body.edited_by if body and body.edited_by else current_user.username
    return revert_edit(db, edit_id, reverted_by)


@router.get("/competitor/{competitor_id}", response_model=list[AuditEntryOut])
def competitor_history(competitor_id: int, db: Session = Depends(get_db)):
    return get_competitor_history(db, competitor_id)


@router.get("/event/{event_id}", response_model=list[AuditEntryOut])
def event_history(event_id: int, db: Session = Depends(get_db)):
    return get_event_history(db, event_id)


@router.post("/event/{event_id}/reset")
def reset_event_results(event_id: int, db: Session = Depends(get_db), current_user=Depends(require_admin)):
    count = reset_event(db, event_id)
    return {"event_id": event_id, "reset": count}
