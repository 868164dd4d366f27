import pytest

from app.core.exceptions import EventNotFoundError, IngestionError, OrphanAlreadyResolvedError, OrphanNotFoundError
from app.db.models.base_result import BaseResult
from app.db.models.event import Event
from app.db.models.orphaned_session import OrphanedSession
from app.services.ingestion import ingest_into_event, ingest_session
from app.services.orphans import ignore_orphan, list_orphans, process_orphan

pytestmark = pytest.mark.unit


@pytest.fixture
def orphan(db, season, competitors, make_payload):
    outcome = ingest_session(db, season.id, make_payload(track="Imola", simulatorSessionId="900"))
    return db.get(OrphanedSession, outcome.orphan_id)


def test_process_into_event(db, season, orphan):
    imola = Event(season_id=season.id, track_name="Autodromo Internazionale Enzo e Dino Ferrari")
    db.add(imola)
    db.commit()

    outcome = process_orphan(db, orphan.id, imola.id)

    assert outcome.status == "ingested"
    assert outcome.results_count == 2
    assert db.query(BaseResult).count() == 2
    processed = db.get(OrphanedSession, orphan.id)
    assert processed.status == "processed"
    assert processed.processed_event_id == imola.id
    assert processed.resolved_at is not None
    assert db.get(Event, imola.id).status == "completed"


def test_only_pending_orphans_can_be_resolved(db, event, orphan):
    ignore_orphan(db, orphan.id)

    with pytest.raises(OrphanAlreadyResolvedError):
        process_orphan(db, orphan.id, event.id)
    with pytest.raises(OrphanAlreadyResolvedError):
        ignore_orphan(db, orphan.id)


def test_ignore(db, orphan):
    ignored = ignore_orphan(db, orphan.id)

    assert ignored.status == "ignored"
    assert list_orphans(db) == []
    assert [o.id for o in list_orphans(db, "ignored")] == [orphan.id]
    assert len(list_orphans(db, None)) == 1


def test_unknown_orphan_or_event(db, orphan):
    with pytest.raises(OrphanNotFoundError):
        ignore_orphan(db, 999)
    with pytest.raises(EventNotFoundError):
        process_orphan(db, orphan.id, 999)


def test_failed_processing_leaves_orphan_pending(db, season, event, orphan, make_payload):
    # El UID del simulador ya pertenece a otro evento
    ingest_into_event(db, event.id, make_payload(simulatorSessionId="900"))
    imola = Event(season_id=season.id, track_name="Imola")
    db.add(imola)
    db.commit()

    with pytest.raises(IngestionError):
        process_orphan(db, orphan.id, imola.id)

    assert db.get(OrphanedSession, orphan.id).status == "pending"
    assert db.get(Event, imola.id).status == "scheduled"
