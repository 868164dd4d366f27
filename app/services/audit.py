"""Registro del historial de ediciones (solo añade filas)."""

from sqlalchemy.orm import Session

from app.core.exceptions import MissingEditFieldError, SessionNotFoundError, ResultNotFoundError
from app.db.models.audit_entry import AuditEntry, EditType
from app.db.models.base_result import BaseResult
from app.db.models.race_session import RaceSession

SYSTEM_AUTHOR = "system"


def require_edit_fields(reason: str | None, edited_by: str | None) -> tuple[str, str]:
    """Toda edición necesita motivo y autor; se valida antes de escribir nada."""
    if reason is None or not str(reason).strip():
        raise MissingEditFieldError("A reason is required for this edit")
    if edited_by is None or not str(edited_by).strip():
        raise MissingEditFieldError("The author of the edit is required")
    return str(reason).strip(), str(edited_by).strip()


# -----------------------
# Capturas de estado para old_value / new_value
# -----------------------
def penalty_state(result: BaseResult) -> dict:
    return {
        "post_race_penalty_seconds": result.post_race_penalty_seconds,
        "total_time_ms": result.total_time_ms,
        "position": result.position,
    }


def position_state(result: BaseResult) -> dict:
    return {"position": result.position}


def status_state(result: BaseResult) -> dict:
    return {
        "result_status": result.result_status,
        "dnf_reason": result.dnf_reason,
        "position": result.position,
    }


def full_state(result: BaseResult) -> dict:
    return {
        "position": result.position,
        "grid_position": result.grid_position,
        "points": result.points,
        "base_time_ms": result.base_time_ms,
        "total_time_ms": result.total_time_ms,
        "in_session_penalty_seconds": result.in_session_penalty_seconds,
        "post_race_penalty_seconds": result.post_race_penalty_seconds,
        "warnings": result.warnings,
        "result_status": result.result_status,
        "dnf_reason": result.dnf_reason,
    }


def record_edit(
    db: Session,
    *,
    session_id: int,
    result: BaseResult | None,
    edit_type: EditType,
    old_value: dict | None,
    new_value: dict | None,
    reason: str,
    edited_by: str,
) -> AuditEntry:
    entry = AuditEntry(
        session_id=session_id,
        result_id=result.id if result is not None else None,
        competitor_id=result.competitor_id if result is not None else None,
        edit_type=edit_type.value,
        old_value=old_value,
        new_value=new_value,
        reason=reason,
        edited_by=edited_by,
    )
    db.add(entry)
    db.flush()
    return entry


# -----------------------
# Lectura del historial
# -----------------------
def _newest_first(query):
    return query.order_by(AuditEntry.created_at.desc(), AuditEntry.id.desc()).all()


def get_session_history(db: Session, session_id: int) -> list[AuditEntry]:
    if db.get(RaceSession, session_id) is None:
        raise SessionNotFoundError(f"Session {session_id} not found")
    return _newest_first(db.query(AuditEntry).filter(AuditEntry.session_id == session_id))


def get_result_history(db: Session, result_id: int) -> list[AuditEntry]:
    if db.get(BaseResult, result_id) is None:
        raise ResultNotFoundError(f"Result {result_id} not found")
    return _newest_first(db.query(AuditEntry).filter(AuditEntry.result_id == result_id))


def get_competitor_history(db: Session, competitor_id: int) -> list[AuditEntry]:
    return _newest_first(db.query(AuditEntry).filter(AuditEntry.competitor_id == competitor_id))


def get_event_history(db: Session, event_id: int) -> list[AuditEntry]:
    query = (
        db.query(AuditEntry)
        .join(RaceSession, RaceSession.id == AuditEntry.session_id)
        .filter(RaceSession.event_id == event_id)
    )
    return _newest_first(query)
