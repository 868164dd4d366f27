"""
Derivación del estado "actual" de una sesión.

El tiempo total de cada resultado sale siempre de `base_time_ms` más las
penalizaciones activas del ledger, y el orden de la sesión sale del tiempo total.
"""

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.exceptions import InvalidPositionError, SessionNotFoundError
from app.core.logging import get_logger
from app.db.models.base_result import BaseResult, CLASSIFIED_STATUS
from app.db.models.original_snapshot import OriginalSnapshot
from app.db.models.penalty_entry import PenaltyEntry
from app.db.models.race_session import RaceSession
from app.db.session import transactional

logger = get_logger("recalculation")


def active_penalty_seconds(db: Session, result_id: int) -> int:
    total = (
        db.query(func.coalesce(func.sum(PenaltyEntry.seconds), 0))
        .filter(
            PenaltyEntry.result_id == result_id,
            PenaltyEntry.removed_at.is_(None),
        )
        .scalar()
    )
    return int(total or 0)


def apply_ledger(db: Session, result: BaseResult) -> None:
    """total_time_ms = base_time_ms + Σ(penalizaciones activas) * 1000"""
    db.flush()

    if result.base_time_ms is None:
        # Filas antiguas sin tiempo base: el total actual pasa a ser la base
        result.base_time_ms = result.total_time_ms

    seconds = active_penalty_seconds(db, result.id)
    result.post_race_penalty_seconds = seconds
    if result.base_time_ms is None:
        result.total_time_ms = None
    else:
        result.total_time_ms = result.base_time_ms + seconds * 1000


def _session_results(db: Session, session_id: int) -> list[BaseResult]:
    return db.query(BaseResult).filter(BaseResult.session_id == session_id).all()


@transactional
def recalculate_positions(db: Session, session_id: int) -> int:
    """
    Reordena la sesión completa y asigna posiciones 1..N.

    Orden: clasificados primero, tiempo total ascendente (sin tiempo al final)
    y la posición original de la ingesta como desempate. Solo escribe las
    filas cuya posición cambia; devuelve cuántas son.
    """
    if db.get(RaceSession, session_id) is None:
        raise SessionNotFoundError(f"Session {session_id} not found")

    results = _session_results(db, session_id)
    original_positions = dict(
        db.query(OriginalSnapshot.result_id, OriginalSnapshot.original_position)
        .filter(OriginalSnapshot.session_id == session_id)
        .all()
    )

    def sort_key(result: BaseResult):
        original = original_positions.get(result.id, result.position)
        return (
            0 if result.result_status == CLASSIFIED_STATUS else 1,
            result.total_time_ms is None,
            result.total_time_ms or 0,
            original is None,
            original or 0,
            result.id,
        )

    changed = 0
    for new_position, result in enumerate(sorted(results, key=sort_key), start=1):
        if result.position != new_position:
            result.position = new_position
            changed += 1

    db.flush()
    if changed:
        logger.info("Session %s reordered: %s position(s) changed", session_id, changed)
    return changed


def move_to_position(db: Session, result: BaseResult, new_position: int) -> None:
    """
    Coloca un resultado en `new_position` desplazando una plaza a los que
    quedan entre la posición antigua y la nueva. La sesión sigue siendo 1..N.
    """
    results = _session_results(db, result.session_id)
    if not 1 <= new_position <= len(results):
        raise InvalidPositionError(
            f"Position must be between 1 and {len(results)}",
            context={"new_position": new_position},
        )

    ordered = sorted(
        (r for r in results if r.id != result.id),
        key=lambda r: (r.position is None, r.position or 0, r.id),
    )
    ordered.insert(new_position - 1, result)

    for position, row in enumerate(ordered, start=1):
        if row.position != position:
            row.position = position

    db.flush()
