"""Sesiones huérfanas: se revisan a mano y se asignan a un evento o se descartan."""

from sqlalchemy.orm import Session

from app.core.exceptions import EventNotFoundError, OrphanAlreadyResolvedError, OrphanNotFoundError
from app.core.logging import get_logger
from app.core.timeutils import utcnow
from app.db.models.event import Event
from app.db.models.orphaned_session import OrphanedSession, OrphanStatus
from app.db.session import transactional
from app.schemas.ingestion import parse_decoded_session
from app.schemas.results import IngestionOutcome
from app.services.ingestion import ingest_payload_into_event

logger = get_logger("orphans")


def list_orphans(db: Session, status: str | None = OrphanStatus.PENDING.value) -> list[OrphanedSession]:
    query = db.query(OrphanedSession)
    if status:
        query = query.filter(OrphanedSession.status == status)
    return query.order_by(OrphanedSession.created_at.desc(), OrphanedSession.id.desc()).all()


def _get_pending_orphan(db: Session, orphan_id: int) -> OrphanedSession:
    orphan = db.get(OrphanedSession, orphan_id)
    if orphan is None:
        raise OrphanNotFoundError(f"Orphaned session {orphan_id} not found")
    if orphan.status != OrphanStatus.PENDING.value:
        raise OrphanAlreadyResolvedError(
            f"Orphaned session {orphan_id} is already {orphan.status}",
            context={"orphan_id": orphan_id, "status": orphan.status},
        )
    return orphan


@transactional
def process_orphan(db: Session, orphan_id: int, event_id: int) -> IngestionOutcome:
    """Ingresa el payload guardado en el evento indicado. Si falla, la huérfana sigue pendiente."""
    orphan = _get_pending_orphan(db, orphan_id)
    event = db.get(Event, event_id)
    if event is None:
        raise EventNotFoundError(f"Event {event_id} not found")

    payload = parse_decoded_session(orphan.session_data)
    outcome = ingest_payload_into_event(db, event, payload)

    orphan = db.get(OrphanedSession, orphan_id)
    orphan.status = OrphanStatus.PROCESSED.value
    orphan.processed_event_id = event_id
    orphan.resolved_at = utcnow()
    db.flush()

    logger.info("Orphan %s processed into event %s", orphan_id, event_id)
    return outcome


@transactional
def ignore_orphan(db: Session, orphan_id: int) -> OrphanedSession:
    orphan = _get_pending_orphan(db, orphan_id)
    orphan.status = OrphanStatus.IGNORED.value
    orphan.resolved_at = utcnow()
    db.flush()
    logger.info("Orphan %s ignored", orphan_id)
    return orphan
