"""
Ingesta de sesiones decodificadas del simulador.

Flujo de una sesión:
1. Buscar el evento programado de la temporada por nombre de circuito
   (coincidencia exacta y después sinónimos). Sin evento -> huérfana.
2. Crear o reutilizar la fila de sesión (evento + tipo, o el UID del simulador
   si es un reenvío).
3. Sustituir los resultados: borrar lo anterior, insertar resultados y fotos
   originales, resolviendo la identidad de cada piloto.
4. Las carreras marcan el evento como completado.
"""

from sqlalchemy.orm import Session

from app.core.exceptions import EventNotFoundError, IngestionError, SeasonNotFoundError
from app.core.logging import get_logger
from app.core.timeutils import utcnow
from app.db.models.audit_entry import AuditEntry
from app.db.models.base_result import BaseResult
from app.db.models.event import Event, EventStatus
from app.db.models.original_snapshot import OriginalSnapshot
from app.db.models.orphaned_session import OrphanedSession
from app.db.models.penalty_entry import PenaltyEntry
from app.db.models.race_session import RaceSession, session_type_name
from app.db.models.season import Season
from app.db.models.session_error import SessionError
from app.schemas.ingestion import dump_decoded_session, parse_decoded_session
from app.schemas.results import IngestionOutcome
from app.services.identity import IdentityResolver
from app.services.track_matching import track_name_synonyms

logger = get_logger("ingestion")


def _as_payload(payload):
    if isinstance(payload, dict):
        return parse_decoded_session(payload)
    return payload


# -----------------------
# Búsqueda del evento
# -----------------------
def find_event_for_track(db: Session, season_id: int, track_name: str) -> Event | None:
    events = (
        db.query(Event)
        .filter(Event.season_id == season_id, Event.status == EventStatus.SCHEDULED.value)
        .order_by(Event.race_datetime.is_(None), Event.race_datetime, Event.id)
        .all()
    )

    for event in events:
        if event.track_name == track_name:
            return event

    for synonym in track_name_synonyms(track_name):
        lowered = synonym.lower()
        for event in events:
            if event.track_name.lower() == lowered:
                logger.info("Track '%s' matched event %s via '%s'", track_name, event.id, synonym)
                return event

    return None


def find_resubmitted_session(db: Session, simulator_session_id: str | None) -> RaceSession | None:
    if not simulator_session_id:
        return None
    return (
        db.query(RaceSession)
        .filter(RaceSession.simulator_session_id == simulator_session_id)
        .first()
    )


# -----------------------
# Huérfanas
# -----------------------
def _store_orphan(db: Session, season_id: int | None, payload) -> OrphanedSession:
    orphan = OrphanedSession(
        season_id=season_id,
        track_name=payload.track,
        session_type=payload.session_type,
        simulator_session_id=payload.simulator_session_id,
        session_data=dump_decoded_session(payload),
    )
    db.add(orphan)
    db.flush()
    logger.warning(
        "No scheduled event for track '%s' in season %s, stored as orphan %s",
        payload.track, season_id, orphan.id,
    )
    return orphan


# -----------------------
# Sustitución de resultados
# -----------------------
def _clear_session_results(db: Session, session: RaceSession) -> int:
    """Borra resultados, fotos y penalizaciones. El historial se conserva sin referencia."""
    db.flush()
    result_ids = [
        row_id
        for (row_id,) in db.query(BaseResult.id).filter(BaseResult.session_id == session.id).all()
    ]
    if result_ids:
        db.query(AuditEntry).filter(AuditEntry.result_id.in_(result_ids)).update(
            {AuditEntry.result_id: None}, synchronize_session=False
        )
        db.query(PenaltyEntry).filter(PenaltyEntry.result_id.in_(result_ids)).delete(
            synchronize_session=False
        )
    db.query(OriginalSnapshot).filter(OriginalSnapshot.session_id == session.id).delete(
        synchronize_session=False
    )
    db.query(BaseResult).filter(BaseResult.session_id == session.id).delete(
        synchronize_session=False
    )
    db.expire_all()
    return len(result_ids)


def _upsert_session(db: Session, event: Event, payload) -> tuple[RaceSession, bool]:
    existing = find_resubmitted_session(db, payload.simulator_session_id)
    if existing is not None:
        if existing.event_id != event.id:
            raise IngestionError(
                f"Simulator session {payload.simulator_session_id} already belongs to event {existing.event_id}",
                context={"event_id": event.id, "existing_event_id": existing.event_id},
            )
        session = existing
        resubmission = True
    else:
        session = (
            db.query(RaceSession)
            .filter(
                RaceSession.event_id == event.id,
                RaceSession.session_type == payload.session_type,
            )
            .first()
        )
        resubmission = False
        if session is None:
            session = RaceSession(
                event_id=event.id,
                session_type=payload.session_type,
                session_name=session_type_name(payload.session_type),
            )
            db.add(session)
        session.simulator_session_id = payload.simulator_session_id

    session.additional_data = payload.extra_data
    session.completed_at = utcnow()
    db.flush()
    return session, resubmission


def _classified_rows(payload) -> list:
    """Orden de llegada: posición reportada y, sin ella, al final en orden del payload."""
    indexed = list(enumerate(payload.results))
    indexed.sort(key=lambda item: (item[1].position is None, item[1].position or 0, item[0]))
    return [row for _, row in indexed]


def _insert_results(db: Session, session: RaceSession, payload, resolver: IdentityResolver) -> list[BaseResult]:
    results = []
    for position, row in enumerate(_classified_rows(payload), start=1):
        sector1, sector2, sector3 = row.sector_ms
        result = BaseResult(
            session_id=session.id,
            competitor_id=resolver.resolve(row.platform_id, row.name),
            sim_driver_id=row.driver_id,
            sim_driver_name=row.name,
            sim_team_name=row.team,
            sim_car_number=row.car_number,
            platform_id=row.platform_id,
            position=position,
            grid_position=row.grid_position,
            points=row.points,
            num_laps=row.lap_count,
            best_lap_time_ms=row.best_lap_ms,
            sector1_time_ms=sector1,
            sector2_time_ms=sector2,
            sector3_time_ms=sector3,
            total_time_ms=row.total_time_ms,
            base_time_ms=row.total_time_ms,
            in_session_penalty_seconds=row.in_session_penalty_seconds,
            post_race_penalty_seconds=0,
            warnings=row.warnings,
            result_status=row.status.value,
            dnf_reason=row.dnf_reason,
            fastest_lap=row.fastest_lap,
            pole_position=row.pole,
        )
        db.add(result)
        results.append(result)
    db.flush()

    for result in results:
        db.add(
            OriginalSnapshot(
                session_id=session.id,
                result_id=result.id,
                competitor_id=result.competitor_id,
                original_position=result.position,
                original_grid_position=result.grid_position,
                original_points=result.points,
                original_total_time_ms=result.total_time_ms,
                original_in_session_penalty_seconds=result.in_session_penalty_seconds,
                original_warnings=result.warnings,
                original_result_status=result.result_status,
                original_dnf_reason=result.dnf_reason,
            )
        )
    db.flush()
    return results


def ingest_payload_into_event(db: Session, event: Event, payload) -> IngestionOutcome:
    """Escribe la sesión en el evento indicado. No hace commit."""
    payload = _as_payload(payload)
    event_id = event.id
    season_id = event.season_id

    session, resubmission = _upsert_session(db, event, payload)
    session_id = session.id
    removed = _clear_session_results(db, session)

    session = db.get(RaceSession, session_id)
    results = _insert_results(db, session, payload, IdentityResolver(db, season_id))

    if payload.is_race:
        event = db.get(Event, event_id)
        if event.status != EventStatus.COMPLETED.value:
            event.status = EventStatus.COMPLETED.value
            logger.info("Event %s marked as completed", event_id)
    db.flush()

    unmapped = sum(1 for result in results if result.competitor_id is None)
    logger.info(
        "Ingested %s into event %s: %s results (%s replaced, %s unmapped)%s",
        session.session_name, event_id, len(results), removed, unmapped,
        " [resubmission]" if resubmission else "",
    )
    return IngestionOutcome(
        status="ingested",
        event_id=event_id,
        session_id=session_id,
        results_count=len(results),
        unmapped_count=unmapped,
        resubmission=resubmission,
    )


def _record_failure(db: Session, exc: Exception, payload, event_id: int | None) -> IngestionOutcome:
    logger.error(
        "Ingestion failed for track '%s'",
        payload.track,
        exc_info=exc,
        extra={"context": {"event_id": event_id, "track": payload.track, "session_type": payload.session_type}},
    )
    db.add(
        SessionError(
            error_type=type(exc).__name__,
            error_message=str(exc),
            track_name=payload.track,
            event_id=event_id,
            session_data=dump_decoded_session(payload),
        )
    )
    db.commit()
    return IngestionOutcome(status="failed", event_id=event_id, error=str(exc))


def _ingest_and_commit(db: Session, event: Event, payload) -> IngestionOutcome:
    event_id = event.id
    try:
        outcome = ingest_payload_into_event(db, event, payload)
        db.commit()
        return outcome
    except Exception as exc:
        db.rollback()
        return _record_failure(db, exc, payload, event_id)


def ingest_session(db: Session, season_id: int, payload) -> IngestionOutcome:
    """
    Punto de entrada del listener. Una pista sin evento no es un error: la
    sesión se guarda como huérfana y se devuelve ese resultado.
    """
    payload = _as_payload(payload)
    if db.get(Season, season_id) is None:
        raise SeasonNotFoundError(f"Season {season_id} not found")

    # Un reenvío va a su sesión aunque el evento ya esté completado
    existing = find_resubmitted_session(db, payload.simulator_session_id)
    if existing is not None and existing.event.season_id != season_id:
        error = IngestionError(
            f"Simulator session {payload.simulator_session_id} already belongs to season {existing.event.season_id}",
            context={"season_id": season_id, "existing_event_id": existing.event_id},
        )
        return _record_failure(db, error, payload, existing.event_id)
    event = existing.event if existing is not None else find_event_for_track(db, season_id, payload.track)

    if event is None:
        orphan = _store_orphan(db, season_id, payload)
        db.commit()
        return IngestionOutcome(
            status="orphaned",
            orphan_id=orphan.id,
            results_count=0,
        )

    return _ingest_and_commit(db, event, payload)


def ingest_into_event(db: Session, event_id: int, payload) -> IngestionOutcome:
    """Ingesta contra un evento concreto, sin buscar por circuito."""
    payload = _as_payload(payload)
    event = db.get(Event, event_id)
    if event is None:
        raise EventNotFoundError(f"Event {event_id} not found")
    return _ingest_and_commit(db, event, payload)
