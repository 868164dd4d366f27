import pytest

from app.core.exceptions import (
    InvalidPositionError,
    MissingEditFieldError,
    ResultNotFoundError,
    SnapshotNotFoundError,
)
from app.db.models.audit_entry import AuditEntry
from app.db.models.base_result import BaseResult
from app.db.models.original_snapshot import OriginalSnapshot
from app.db.models.penalty_entry import PenaltyEntry
from app.services.ingestion import ingest_into_event, ingest_session
from app.services.penalties import add_penalty
from app.services.recalculation import recalculate_positions
from app.services.result_editor import (
    RESET_REASON,
    change_position,
    disqualify,
    reset_event,
    reset_session,
    reset_to_original,
)

pytestmark = pytest.mark.unit


@pytest.fixture
def race(db, event, competitors, make_payload, make_result):
    payload = make_payload(results=[
        make_result("Alice Racer", 1, 5_400_000, points=25),
        make_result("Bob Driver", 2, 5_401_000, points=18),
        make_result("Carol Pilot", 3, 5_402_000, points=15),
    ])
    outcome = ingest_session(db, event.season_id, payload)
    rows = (
        db.query(BaseResult)
        .filter(BaseResult.session_id == outcome.session_id)
        .order_by(BaseResult.position)
        .all()
    )
    return outcome.session_id, rows


def _order(db, session_id):
    rows = (
        db.query(BaseResult)
        .filter(BaseResult.session_id == session_id)
        .order_by(BaseResult.position)
        .all()
    )
    return [r.sim_driver_name for r in rows]


class TestChangePosition:
    def test_moves_and_shifts_others(self, db, race):
        session_id, (a, b, c) = race

        change_position(db, session_id, c.id, 1, "Blocked by marshal error", "steward1")

        assert _order(db, session_id) == ["Carol Pilot", "Alice Racer", "Bob Driver"]
        edit = db.query(AuditEntry).one()
        assert edit.edit_type == "position_change"
        assert edit.old_value == {"position": 3}
        assert edit.new_value == {"position": 1}

    def test_does_not_touch_times(self, db, race):
        session_id, (a, b, c) = race
        change_position(db, session_id, a.id, 3, "Jump start", "steward1")

        assert a.total_time_ms == 5_400_000
        assert [r.position for r in (b, c, a)] == [1, 2, 3]

    @pytest.mark.parametrize("position", [0, 4])
    def test_out_of_range(self, db, race, position):
        session_id, (a, _, _) = race
        with pytest.raises(InvalidPositionError):
            change_position(db, session_id, a.id, position, "reason", "steward1")
        assert db.query(AuditEntry).count() == 0

    def test_result_of_other_session(self, db, event, race, make_payload):
        _, (a, _, _) = race
        quali = ingest_into_event(db, event.id, make_payload(kind="qualifying"))

        with pytest.raises(ResultNotFoundError):
            change_position(db, quali.session_id, a.id, 2, "reason", "steward1")

        assert a.position == 1
        assert db.query(AuditEntry).count() == 0

    def test_reason_required(self, db, race):
        session_id, (a, _, _) = race
        with pytest.raises(MissingEditFieldError):
            change_position(db, session_id, a.id, 2, "", "steward1")
        assert a.position == 1


class TestDisqualify:
    def test_sets_status_without_reordering(self, db, race):
        session_id, (a, _, _) = race

        disqualify(db, session_id, a.id, "Illegal car", "steward1")

        assert a.result_status == 5
        assert a.dnf_reason == "Illegal car"
        assert a.position == 1
        edit = db.query(AuditEntry).one()
        assert edit.edit_type == "disqualification"
        assert edit.old_value["result_status"] == 3
        assert edit.new_value["result_status"] == 5

    def test_recalculation_sends_disqualified_to_the_back(self, db, race):
        session_id, (a, _, _) = race
        disqualify(db, session_id, a.id, "Illegal car", "steward1")

        recalculate_positions(db, session_id)

        assert _order(db, session_id) == ["Bob Driver", "Carol Pilot", "Alice Racer"]


class TestReset:
    def test_reset_restores_snapshot_and_drops_penalties(self, db, race):
        session_id, (a, b, c) = race
        entry = add_penalty(db, a.id, 5, "track limits", "steward1")
        disqualify(db, session_id, a.id, "Illegal car", "steward1")

        reset_to_original(db, session_id, a.id)

        assert a.total_time_ms == 5_400_000
        assert a.post_race_penalty_seconds == 0
        assert a.result_status == 3
        assert a.dnf_reason is None
        assert a.position == 1
        assert b.position == 1

        recalculate_positions(db, session_id)
        assert _order(db, session_id) == ["Alice Racer", "Bob Driver", "Carol Pilot"]

        penalty = db.get(PenaltyEntry, entry.id)
        assert penalty.removed_by == "system"
        assert not penalty.is_active
        assert db.query(OriginalSnapshot).filter_by(result_id=a.id).one().is_restored

        edit = db.query(AuditEntry).filter_by(edit_type="reset").one()
        assert edit.reason == RESET_REASON
        assert edit.edited_by == "system"
        assert edit.old_value["penalty_ids"] == [entry.id]
        assert edit.old_value["result_status"] == 5

    def test_reset_leaves_other_overrides_alone(self, db, race):
        session_id, (a, b, c) = race
        change_position(db, session_id, c.id, 1, "Blocked by marshal error", "steward1")

        reset_to_original(db, session_id, b.id)

        assert (c.position, a.position, b.position) == (1, 2, 2)
        carol_edits = db.query(AuditEntry).filter_by(result_id=c.id).all()
        assert [e.edit_type for e in carol_edits] == ["position_change"]

    def test_reset_then_recalculate_matches_ingestion(self, db, race):
        session_id, (a, b, c) = race
        reset_to_original(db, session_id, b.id)

        assert recalculate_positions(db, session_id) == 0
        assert [r.position for r in (a, b, c)] == [1, 2, 3]

    def test_missing_snapshot(self, db, race):
        session_id, (a, _, _) = race
        db.query(OriginalSnapshot).filter_by(result_id=a.id).delete()
        db.commit()

        with pytest.raises(SnapshotNotFoundError):
            reset_to_original(db, session_id, a.id)

    def test_reset_session_is_all_or_nothing(self, db, race):
        session_id, (a, b, c) = race
        add_penalty(db, a.id, 5, "track limits", "steward1")
        db.query(OriginalSnapshot).filter_by(result_id=c.id).delete()
        db.commit()

        with pytest.raises(SnapshotNotFoundError):
            reset_session(db, session_id)

        assert a.total_time_ms == 5_405_000
        assert db.query(AuditEntry).filter_by(edit_type="reset").count() == 0

    def test_reset_session(self, db, race):
        session_id, (a, b, c) = race
        add_penalty(db, a.id, 5, "track limits", "steward1")
        change_position(db, session_id, c.id, 1, "reason", "steward1")

        restored = reset_session(db, session_id)

        assert len(restored) == 3
        assert _order(db, session_id) == ["Alice Racer", "Bob Driver", "Carol Pilot"]
        assert db.query(AuditEntry).filter_by(edit_type="reset").count() == 3

    def test_reset_event(self, db, event, race):
        session_id, (a, _, _) = race
        add_penalty(db, a.id, 5, "track limits", "steward1")

        assert reset_event(db, event.id) == 3
        assert a.total_time_ms == 5_400_000
