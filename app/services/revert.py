"""
Revertir una edición concreta del historial.

La entrada nunca se borra: se marca como revertida y se aplica el efecto
inverso. No hay cascada; revertir una edición antigua con otras posteriores
en pie es responsabilidad de quien lo pide.
"""

from sqlalchemy.orm import Session

from app.core.exceptions import EditAlreadyRevertedError, EditNotFoundError, ResultNotFoundError
from app.core.logging import get_logger
from app.core.timeutils import utcnow
from app.db.models.audit_entry import AuditEntry, EditType
from app.db.models.base_result import BaseResult
from app.db.models.original_snapshot import OriginalSnapshot
from app.db.models.penalty_entry import PenaltyEntry
from app.db.session import transactional
from app.services.audit import SYSTEM_AUTHOR
from app.services.identity import ensure_competitor_free
from app.services.recalculation import apply_ledger, move_to_position, recalculate_positions

logger = get_logger("revert")


def _penalty_id(edit: AuditEntry) -> int | None:
    for value in (edit.new_value, edit.old_value):
        if value and value.get("penalty_id") is not None:
            return value["penalty_id"]
    return None


def _set_penalty_active(db: Session, result: BaseResult, penalty_id: int | None, active: bool, author: str):
    if penalty_id is None:
        return
    entry = db.get(PenaltyEntry, penalty_id)
    if entry is None or entry.result_id != result.id:
        return
    if active:
        entry.removed_at = None
        entry.removed_by = None
    elif entry.removed_at is None:
        entry.removed_at = utcnow()
        entry.removed_by = author


def _revert_penalty_add(db: Session, edit: AuditEntry, result: BaseResult, author: str):
    _set_penalty_active(db, result, _penalty_id(edit), False, author)
    apply_ledger(db, result)
    recalculate_positions(db, result.session_id)


def _revert_penalty_remove(db: Session, edit: AuditEntry, result: BaseResult, author: str):
    _set_penalty_active(db, result, _penalty_id(edit), True, author)
    apply_ledger(db, result)
    recalculate_positions(db, result.session_id)


def _move_back(db: Session, result: BaseResult, old_position: int | None):
    if old_position is None:
        return
    total = db.query(BaseResult).filter(BaseResult.session_id == result.session_id).count()
    move_to_position(db, result, max(1, min(old_position, total)))


def _revert_position_change(db: Session, edit: AuditEntry, result: BaseResult, author: str):
    _move_back(db, result, (edit.old_value or {}).get("position"))


def _revert_disqualification(db: Session, edit: AuditEntry, result: BaseResult, author: str):
    old_value = edit.old_value or {}
    result.result_status = old_value.get("result_status", result.result_status)
    result.dnf_reason = old_value.get("dnf_reason")


def _revert_reset(db: Session, edit: AuditEntry, result: BaseResult, author: str):
    old_value = edit.old_value or {}
    for field in (
        "grid_position",
        "points",
        "base_time_ms",
        "in_session_penalty_seconds",
        "warnings",
        "result_status",
        "dnf_reason",
    ):
        if field in old_value:
            setattr(result, field, old_value[field])

    for penalty_id in old_value.get("penalty_ids", []):
        _set_penalty_active(db, result, penalty_id, True, author)

    snapshot = db.query(OriginalSnapshot).filter(OriginalSnapshot.result_id == result.id).first()
    if snapshot is not None:
        snapshot.is_restored = bool(old_value.get("snapshot_restored", False))

    apply_ledger(db, result)
    _move_back(db, result, old_value.get("position"))


def _revert_user_mapping(db: Session, edit: AuditEntry, result: BaseResult, author: str):
    competitor_id = (edit.old_value or {}).get("competitor_id")
    if competitor_id is not None:
        ensure_competitor_free(db, result, competitor_id, {result.id})
    result.competitor_id = competitor_id


REVERT_HANDLERS = {
    EditType.PENALTY_ADD.value: _revert_penalty_add,
    EditType.PENALTY_REMOVE.value: _revert_penalty_remove,
    EditType.POSITION_CHANGE.value: _revert_position_change,
    EditType.DISQUALIFICATION.value: _revert_disqualification,
    EditType.RESET.value: _revert_reset,
    EditType.USER_MAPPING.value: _revert_user_mapping,
}


@transactional
def revert_edit(db: Session, edit_id: int, reverted_by: str = SYSTEM_AUTHOR) -> AuditEntry:
    edit = db.get(AuditEntry, edit_id)
    if edit is None:
        raise EditNotFoundError(f"Edit {edit_id} not found")
    if edit.is_reverted:
        raise EditAlreadyRevertedError(f"Edit {edit_id} already reverted")

    result = db.get(BaseResult, edit.result_id) if edit.result_id is not None else None
    if result is None:
        # La sesión se reingirió y el resultado editado ya no existe
        raise ResultNotFoundError(
            f"Result for edit {edit_id} no longer exists",
            context={"edit_id": edit_id},
        )

    handler = REVERT_HANDLERS.get(edit.edit_type)
    if handler is None:
        raise EditNotFoundError(f"Edit {edit_id} has unknown type '{edit.edit_type}'")

    handler(db, edit, result, reverted_by)

    edit.is_reverted = True
    edit.reverted_at = utcnow()
    edit.reverted_by = reverted_by
    db.flush()

    logger.info("Reverted edit %s (%s) on result %s", edit.id, edit.edit_type, result.id)
    return edit
