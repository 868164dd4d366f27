"""
Ediciones manuales de los comisarios: cambio de posición, descalificación y
vuelta al resultado original del simulador.
"""

from sqlalchemy.orm import Session

from app.core.exceptions import EventNotFoundError, SnapshotNotFoundError
from app.core.logging import get_logger
from app.core.timeutils import utcnow
from app.db.models.audit_entry import EditType
from app.db.models.base_result import BaseResult, ResultStatus
from app.db.models.event import Event
from app.db.models.original_snapshot import OriginalSnapshot
from app.db.models.penalty_entry import PenaltyEntry
from app.db.models.race_session import RaceSession
from app.db.session import transactional
from app.services.audit import (
    SYSTEM_AUTHOR,
    full_state,
    position_state,
    record_edit,
    require_edit_fields,
    status_state,
)
from app.services.recalculation import move_to_position
from app.services.results import get_session, get_session_result

logger = get_logger("editor")

RESET_REASON = "Reset to original simulator data"


@transactional
def change_position(
    db: Session,
    session_id: int,
    result_id: int,
    new_position: int,
    reason: str,
    edited_by: str,
) -> BaseResult:
    """Override manual: no pasa por el recálculo por tiempos."""
    reason, edited_by = require_edit_fields(reason, edited_by)
    result = get_session_result(db, session_id, result_id)

    old_state = position_state(result)
    move_to_position(db, result, new_position)

    record_edit(
        db,
        session_id=session_id,
        result=result,
        edit_type=EditType.POSITION_CHANGE,
        old_value=old_state,
        new_value=position_state(result),
        reason=reason,
        edited_by=edited_by,
    )
    logger.info("Result %s moved P%s -> P%s", result.id, old_state["position"], result.position)
    return result


@transactional
def disqualify(
    db: Session,
    session_id: int,
    result_id: int,
    reason: str,
    edited_by: str,
) -> BaseResult:
    """Marca DSQ. No reordena: el siguiente recálculo lo manda al fondo."""
    reason, edited_by = require_edit_fields(reason, edited_by)
    result = get_session_result(db, session_id, result_id)

    old_state = status_state(result)
    result.result_status = ResultStatus.DISQUALIFIED.value
    result.dnf_reason = reason
    db.flush()

    record_edit(
        db,
        session_id=session_id,
        result=result,
        edit_type=EditType.DISQUALIFICATION,
        old_value=old_state,
        new_value=status_state(result),
        reason=reason,
        edited_by=edited_by,
    )
    logger.info("Result %s disqualified in session %s", result.id, session_id)
    return result


def _get_snapshot(db: Session, result: BaseResult) -> OriginalSnapshot:
    snapshot = (
        db.query(OriginalSnapshot)
        .filter(
            OriginalSnapshot.session_id == result.session_id,
            OriginalSnapshot.result_id == result.id,
        )
        .first()
    )
    if snapshot is None:
        raise SnapshotNotFoundError(
            f"Original result not found for result {result.id}",
            context={"session_id": result.session_id, "result_id": result.id},
        )
    return snapshot


def _restore_from_snapshot(db: Session, result: BaseResult, snapshot: OriginalSnapshot) -> dict:
    """Copia los campos editables desde la foto original. Devuelve el estado previo."""
    old_state = full_state(result)

    active_penalties = (
        db.query(PenaltyEntry)
        .filter(PenaltyEntry.result_id == result.id, PenaltyEntry.removed_at.is_(None))
        .all()
    )
    now = utcnow()
    for entry in active_penalties:
        entry.removed_at = now
        entry.removed_by = SYSTEM_AUTHOR

    old_state["penalty_ids"] = [entry.id for entry in active_penalties]
    old_state["snapshot_restored"] = snapshot.is_restored

    result.position = snapshot.original_position
    result.grid_position = snapshot.original_grid_position
    result.points = snapshot.original_points
    result.base_time_ms = snapshot.original_total_time_ms
    result.total_time_ms = snapshot.original_total_time_ms
    result.in_session_penalty_seconds = snapshot.original_in_session_penalty_seconds
    result.post_race_penalty_seconds = 0
    result.warnings = snapshot.original_warnings
    result.result_status = snapshot.original_result_status
    result.dnf_reason = snapshot.original_dnf_reason

    snapshot.is_restored = True
    db.flush()
    return old_state


def _reset_results(db: Session, session_id: int, results: list[BaseResult]) -> list[BaseResult]:
    """
    Solo toca los resultados indicados: la posición vuelve a la original y el
    resto de la sesión no se reordena (eso es un recálculo aparte).
    """
    for result in results:
        old_state = _restore_from_snapshot(db, result, _get_snapshot(db, result))
        record_edit(
            db,
            session_id=session_id,
            result=result,
            edit_type=EditType.RESET,
            old_value=old_state,
            new_value=full_state(result),
            reason=RESET_REASON,
            edited_by=SYSTEM_AUTHOR,
        )
    return results


@transactional
def reset_to_original(db: Session, session_id: int, result_id: int) -> BaseResult:
    result = get_session_result(db, session_id, result_id)
    _reset_results(db, session_id, [result])
    logger.info("Result %s reset to original in session %s", result.id, session_id)
    return result


@transactional
def reset_session(db: Session, session_id: int) -> list[BaseResult]:
    get_session(db, session_id)
    results = db.query(BaseResult).filter(BaseResult.session_id == session_id).all()
    restored = _reset_results(db, session_id, results)
    logger.info("Session %s reset to original (%s results)", session_id, len(restored))
    return restored


@transactional
def reset_event(db: Session, event_id: int) -> int:
    """Vuelve todas las sesiones del evento al resultado original. Devuelve cuántos resultados."""
    if db.get(Event, event_id) is None:
        raise EventNotFoundError(f"Event {event_id} not found")

    sessions = db.query(RaceSession).filter(RaceSession.event_id == event_id).all()
    count = 0
    for session in sessions:
        count += len(reset_session(db, session.id))
    return count
