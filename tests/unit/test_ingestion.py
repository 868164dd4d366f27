import pytest

from app.core.exceptions import EventNotFoundError, SeasonNotFoundError
from app.db.models.audit_entry import AuditEntry
from app.db.models.base_result import BaseResult
from app.db.models.event import Event
from app.db.models.original_snapshot import OriginalSnapshot
from app.db.models.orphaned_session import OrphanedSession
from app.db.models.penalty_entry import PenaltyEntry
from app.db.models.race_session import RaceSession
from app.db.models.season import Season
from app.db.models.session_error import SessionError
from app.services.ingestion import find_event_for_track, ingest_into_event, ingest_session
from app.services.penalties import add_penalty

pytestmark = pytest.mark.unit


def _results(db, session_id):
    return (
        db.query(BaseResult)
        .filter(BaseResult.session_id == session_id)
        .order_by(BaseResult.position)
        .all()
    )


class TestIngestSession:
    def test_race_is_written_with_snapshots(self, db, event, competitors, make_payload):
        outcome = ingest_session(db, event.season_id, make_payload(simulatorSessionId="1001"))

        assert outcome.status == "ingested"
        assert outcome.event_id == event.id
        assert outcome.results_count == 2
        assert outcome.unmapped_count == 0
        assert outcome.resubmission is False

        session = db.get(RaceSession, outcome.session_id)
        assert session.session_type == 10
        assert session.session_name == "Race"
        assert session.simulator_session_id == "1001"

        results = _results(db, outcome.session_id)
        assert [r.competitor_id for r in results] == [competitors[0].id, competitors[1].id]
        assert [r.base_time_ms for r in results] == [5_400_000, 5_401_000]
        assert all(r.total_time_ms == r.base_time_ms for r in results)
        assert results[0].platform_id == "76561198000000001"

        snapshots = db.query(OriginalSnapshot).filter_by(session_id=outcome.session_id).all()
        assert sorted(s.original_position for s in snapshots) == [1, 2]
        assert not any(s.is_restored for s in snapshots)

    def test_race_completes_event(self, db, event, competitors, make_payload):
        ingest_session(db, event.season_id, make_payload())
        assert db.get(Event, event.id).status == "completed"

    def test_qualifying_keeps_event_scheduled(self, db, event, competitors, make_payload):
        outcome = ingest_session(db, event.season_id, make_payload(kind="qualifying"))

        assert outcome.status == "ingested"
        assert db.get(RaceSession, outcome.session_id).session_type == 5
        assert db.get(Event, event.id).status == "scheduled"

    def test_positions_are_renumbered_from_one(self, db, event, competitors, make_payload, make_result):
        unplaced = make_result("Carol Pilot", 9, 5_420_000)
        unplaced["position"] = None
        payload = make_payload(results=[
            make_result("Bob Driver", 3, 5_410_000),
            unplaced,
            make_result("Alice Racer", 1, 5_400_000),
        ])

        outcome = ingest_session(db, event.season_id, payload)

        results = _results(db, outcome.session_id)
        assert [(r.sim_driver_name, r.position) for r in results] == [
            ("Alice Racer", 1),
            ("Bob Driver", 2),
            ("Carol Pilot", 3),
        ]
        snapshots = db.query(OriginalSnapshot).filter_by(session_id=outcome.session_id).all()
        assert sorted(s.original_position for s in snapshots) == [1, 2, 3]

    def test_unresolved_driver_is_unmapped(self, db, event, competitors, make_payload, make_result):
        payload = make_payload(results=[
            make_result("Alice Racer", 1, 5_400_000),
            make_result("Someone Else", 2, 5_410_000, driverId=99),
        ])
        outcome = ingest_session(db, event.season_id, payload)

        assert outcome.unmapped_count == 1
        stranger = _results(db, outcome.session_id)[1]
        assert stranger.competitor_id is None
        assert stranger.sim_driver_id == 99

    def test_unmatched_track_goes_to_orphans(self, db, event, competitors, make_payload):
        outcome = ingest_session(db, event.season_id, make_payload(track="Losail", simulatorSessionId="77"))

        assert outcome.status == "orphaned"
        orphans = db.query(OrphanedSession).all()
        assert len(orphans) == 1
        assert orphans[0].status == "pending"
        assert orphans[0].track_name == "Losail"
        assert orphans[0].session_data["sessionKind"] == "race"
        assert db.query(BaseResult).count() == 0

    def test_completed_event_is_not_matched_again(self, db, event, competitors, make_payload):
        ingest_session(db, event.season_id, make_payload(simulatorSessionId="1"))
        outcome = ingest_session(db, event.season_id, make_payload(simulatorSessionId="2"))

        assert outcome.status == "orphaned"

    def test_unknown_season(self, db, make_payload):
        with pytest.raises(SeasonNotFoundError):
            ingest_session(db, 999, make_payload())


class TestResubmission:
    def test_same_simulator_session_replaces_results(self, db, event, competitors, make_payload):
        first = ingest_session(db, event.season_id, make_payload(simulatorSessionId="555"))
        second = ingest_session(db, event.season_id, make_payload(simulatorSessionId="555"))

        assert second.status == "ingested"
        assert second.resubmission is True
        assert second.session_id == first.session_id
        results = _results(db, second.session_id)
        assert len(results) == 2
        assert sum(r.points for r in results) == 43
        assert db.query(OriginalSnapshot).count() == 2

    def test_resubmission_drops_penalties_but_keeps_history(self, db, event, competitors, make_payload):
        outcome = ingest_session(db, event.season_id, make_payload(simulatorSessionId="555"))
        alice = _results(db, outcome.session_id)[0]
        add_penalty(db, alice.id, 5, "track limits", "steward1")

        ingest_session(db, event.season_id, make_payload(simulatorSessionId="555"))

        assert db.query(PenaltyEntry).count() == 0
        history = db.query(AuditEntry).all()
        assert len(history) == 1
        assert history[0].result_id is None
        assert history[0].session_id == outcome.session_id

    def test_session_of_another_season_is_rejected(self, db, season, event, competitors, make_payload):
        first = ingest_session(db, season.id, make_payload(simulatorSessionId="555"))
        next_season = Season(year=2025, name="Season 8")
        db.add(next_season)
        db.commit()
        db.add(Event(season_id=next_season.id, track_name="Silverstone"))
        db.commit()

        outcome = ingest_session(db, next_season.id, make_payload(simulatorSessionId="555"))

        assert outcome.status == "failed"
        assert outcome.event_id == event.id
        errors = db.query(SessionError).all()
        assert len(errors) == 1
        assert errors[0].error_type == "IngestionError"
        assert db.query(RaceSession).count() == 1
        assert len(_results(db, first.session_id)) == 2

    def test_same_session_type_is_upserted(self, db, event, competitors, make_payload):
        first = ingest_into_event(db, event.id, make_payload(kind="qualifying", simulatorSessionId="a"))
        second = ingest_into_event(db, event.id, make_payload(kind="qualifying", simulatorSessionId="b"))

        assert second.session_id == first.session_id
        assert second.resubmission is False
        assert db.get(RaceSession, second.session_id).simulator_session_id == "b"
        assert db.query(RaceSession).count() == 1


class TestFailures:
    def test_failure_is_recorded_and_rolled_back(self, db, season, event, competitors, make_payload):
        other = Event(season_id=season.id, track_name="Monza")
        db.add(other)
        db.commit()
        ingest_session(db, season.id, make_payload(simulatorSessionId="shared"))

        outcome = ingest_into_event(db, other.id, make_payload(simulatorSessionId="shared"))

        assert outcome.status == "failed"
        assert outcome.event_id == other.id
        errors = db.query(SessionError).all()
        assert len(errors) == 1
        assert errors[0].error_type == "IngestionError"
        assert errors[0].event_id == other.id
        assert db.query(RaceSession).filter_by(event_id=other.id).count() == 0
        assert db.get(Event, other.id).status == "scheduled"

    def test_unknown_event(self, db, make_payload):
        with pytest.raises(EventNotFoundError):
            ingest_into_event(db, 999, make_payload())


class TestEventMatching:
    def test_exact_match(self, db, event):
        assert find_event_for_track(db, event.season_id, "Silverstone").id == event.id

    def test_synonym_match(self, db, season):
        gb = Event(season_id=season.id, track_name="Great Britain")
        db.add(gb)
        db.commit()

        assert find_event_for_track(db, season.id, "Silverstone").id == gb.id

    def test_synonym_match_ignores_case(self, db, season):
        spa = Event(season_id=season.id, track_name="spa-francorchamps")
        db.add(spa)
        db.commit()

        assert find_event_for_track(db, season.id, "Spa").id == spa.id

    def test_other_season_is_ignored(self, db, season, event):
        assert find_event_for_track(db, season.id + 1, "Silverstone") is None
