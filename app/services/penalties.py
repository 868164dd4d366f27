"""
Ledger de penalizaciones post-carrera.

Las penalizaciones del propio simulador (`in_session_penalty_seconds`) ya
vienen dentro del tiempo base; las del ledger se suman aparte para que un
reset pueda descartarlas sin tocar las otras.
"""

import math

from sqlalchemy.orm import Session

from app.core.exceptions import InvalidPenaltyError, PenaltyNotFoundError
from app.core.logging import get_logger
from app.core.timeutils import utcnow
from app.db.models.audit_entry import EditType
from app.db.models.penalty_entry import PenaltyEntry
from app.db.session import transactional
from app.services.audit import penalty_state, record_edit, require_edit_fields
from app.services.recalculation import apply_ledger, recalculate_positions
from app.services.results import get_result

logger = get_logger("penalties")


def validate_penalty_seconds(seconds) -> int:
    if isinstance(seconds, bool) or not isinstance(seconds, (int, float)):
        raise InvalidPenaltyError("Penalty seconds must be a number")
    if isinstance(seconds, float):
        if not math.isfinite(seconds) or not seconds.is_integer():
            raise InvalidPenaltyError("Penalty seconds must be a whole number of seconds")
        seconds = int(seconds)
    if seconds <= 0:
        raise InvalidPenaltyError("Penalty seconds must be a positive number")
    return seconds


@transactional
def add_penalty(db: Session, result_id: int, seconds, reason: str, edited_by: str) -> PenaltyEntry:
    seconds = validate_penalty_seconds(seconds)
    reason, edited_by = require_edit_fields(reason, edited_by)
    result = get_result(db, result_id)

    old_state = penalty_state(result)

    entry = PenaltyEntry(
        result_id=result.id,
        seconds=seconds,
        reason=reason,
        created_by=edited_by,
    )
    db.add(entry)
    db.flush()

    apply_ledger(db, result)
    recalculate_positions(db, result.session_id)

    record_edit(
        db,
        session_id=result.session_id,
        result=result,
        edit_type=EditType.PENALTY_ADD,
        old_value={**old_state, "penalty_id": entry.id},
        new_value={**penalty_state(result), "penalty_id": entry.id, "seconds": seconds},
        reason=reason,
        edited_by=edited_by,
    )

    logger.info(
        "Added %ss penalty to result %s (%s): total %s ms, P%s",
        seconds, result.id, result.sim_driver_name, result.total_time_ms, result.position,
    )
    return entry


@transactional
def remove_penalty(
    db: Session,
    result_id: int,
    penalty_id: int,
    edited_by: str,
    reason: str | None = None,
) -> PenaltyEntry:
    result = get_result(db, result_id)
    entry = db.get(PenaltyEntry, penalty_id)
    if entry is None or entry.result_id != result.id or not entry.is_active:
        raise PenaltyNotFoundError(
            f"Penalty {penalty_id} not found for result {result_id}",
            context={"result_id": result_id, "penalty_id": penalty_id},
        )

    reason = reason or f"Removed {entry.seconds}s penalty ({entry.reason})"
    reason, edited_by = require_edit_fields(reason, edited_by)

    old_state = penalty_state(result)

    entry.removed_at = utcnow()
    entry.removed_by = edited_by

    apply_ledger(db, result)
    recalculate_positions(db, result.session_id)

    record_edit(
        db,
        session_id=result.session_id,
        result=result,
        edit_type=EditType.PENALTY_REMOVE,
        old_value={**old_state, "penalty_id": entry.id},
        new_value={**penalty_state(result), "penalty_id": entry.id, "seconds": -entry.seconds},
        reason=reason,
        edited_by=edited_by,
    )

    logger.info("Removed penalty %s from result %s", entry.id, result.id)
    return entry


def list_penalties(db: Session, result_id: int, include_removed: bool = False) -> list[PenaltyEntry]:
    get_result(db, result_id)
    query = db.query(PenaltyEntry).filter(PenaltyEntry.result_id == result_id)
    if not include_removed:
        query = query.filter(PenaltyEntry.removed_at.is_(None))
    return query.order_by(PenaltyEntry.created_at.desc(), PenaltyEntry.id.desc()).all()
