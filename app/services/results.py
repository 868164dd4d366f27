"""Lado de lectura: resultados de sesión con piloto, tiempos y penalizaciones."""

from sqlalchemy.orm import Session, joinedload, selectinload

from app.core.exceptions import EventNotFoundError, ResultNotFoundError, SessionNotFoundError
from app.db.models.base_result import BaseResult
from app.db.models.event import Event
from app.db.models.race_session import RaceSession


def get_session(db: Session, session_id: int) -> RaceSession:
    session = db.get(RaceSession, session_id)
    if session is None:
        raise SessionNotFoundError(f"Session {session_id} not found")
    return session


def get_result(db: Session, result_id: int) -> BaseResult:
    result = db.get(BaseResult, result_id)
    if result is None:
        raise ResultNotFoundError(f"Result {result_id} not found")
    return result


def get_session_result(db: Session, session_id: int, result_id: int) -> BaseResult:
    """Resultado de un piloto comprobando que pertenece a la sesión indicada."""
    get_session(db, session_id)
    result = db.get(BaseResult, result_id)
    if result is None or result.session_id != session_id:
        raise ResultNotFoundError(
            f"Result {result_id} not found in session {session_id}",
            context={"session_id": session_id, "result_id": result_id},
        )
    return result


def get_session_results(db: Session, session_id: int) -> tuple[RaceSession, list[BaseResult]]:
    session = get_session(db, session_id)
    results = (
        db.query(BaseResult)
        .options(
            joinedload(BaseResult.competitor),
            selectinload(BaseResult.penalties),
        )
        .filter(BaseResult.session_id == session_id)
        .order_by(BaseResult.position.is_(None), BaseResult.position, BaseResult.id)
        .all()
    )
    return session, results


def list_event_sessions(db: Session, event_id: int) -> list[RaceSession]:
    if db.get(Event, event_id) is None:
        raise EventNotFoundError(f"Event {event_id} not found")
    return (
        db.query(RaceSession)
        .filter(RaceSession.event_id == event_id)
        .order_by(RaceSession.session_type)
        .all()
    )


def unmapped_results(db: Session, session_id: int) -> list[BaseResult]:
    get_session(db, session_id)
    return (
        db.query(BaseResult)
        .filter(BaseResult.session_id == session_id, BaseResult.competitor_id.is_(None))
        .order_by(BaseResult.position)
        .all()
    )
