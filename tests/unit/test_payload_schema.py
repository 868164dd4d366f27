import pytest
from pydantic import ValidationError

from app.db.models.base_result import ResultStatus
from app.schemas.ingestion import (
    PracticeSessionPayload,
    QualifyingSessionPayload,
    RaceSessionPayload,
    dump_decoded_session,
    parse_decoded_session,
)

pytestmark = pytest.mark.unit


def _raw(**overrides):
    data = {
        "track": "Monza",
        "sessionKind": "race",
        "results": [{"name": "Alice Racer", "position": 1, "totalTimeMs": 5_400_000}],
    }
    data.update(overrides)
    return data


class TestDiscriminator:
    @pytest.mark.parametrize(
        "kind, model, default_type",
        [
            ("practice", PracticeSessionPayload, 1),
            ("qualifying", QualifyingSessionPayload, 5),
            ("race", RaceSessionPayload, 10),
        ],
    )
    def test_variant_and_default_session_type(self, kind, model, default_type):
        payload = parse_decoded_session(_raw(sessionKind=kind))

        assert isinstance(payload, model)
        assert payload.session_type == default_type
        assert payload.is_race == (kind == "race")

    def test_unknown_kind(self):
        with pytest.raises(ValidationError):
            parse_decoded_session(_raw(sessionKind="warmup"))

    def test_session_type_must_match_kind(self):
        with pytest.raises(ValidationError):
            parse_decoded_session(_raw(sessionType=5))

    def test_explicit_session_type(self):
        assert parse_decoded_session(_raw(sessionType=11)).session_type == 11


class TestFields:
    def test_field_names_are_accepted(self):
        payload = parse_decoded_session({
            "track": "Monza",
            "sessionKind": "qualifying",
            "simulator_session_id": 123,
            "results": [{"name": "Bob", "total_time_ms": 90_000, "lap_count": 3}],
        })

        assert payload.simulator_session_id == "123"
        assert payload.results[0].total_time_ms == 90_000
        assert payload.results[0].lap_count == 3

    def test_results_required(self):
        with pytest.raises(ValidationError):
            parse_decoded_session(_raw(results=[]))

    def test_duplicated_positions(self):
        with pytest.raises(ValidationError, match="Duplicated positions"):
            parse_decoded_session(_raw(results=[
                {"name": "A", "position": 1},
                {"name": "B", "position": 1},
            ]))

    def test_missing_positions_are_not_duplicates(self):
        payload = parse_decoded_session(_raw(results=[{"name": "A"}, {"name": "B"}]))
        assert [r.position for r in payload.results] == [None, None]

    def test_sectors_are_padded(self):
        payload = parse_decoded_session(_raw(results=[{"name": "A", "sectorMs": [30000]}]))
        assert payload.results[0].sector_ms == [30000, None, None]

    def test_too_many_sectors(self):
        with pytest.raises(ValidationError):
            parse_decoded_session(_raw(results=[{"name": "A", "sectorMs": [1, 2, 3, 4]}]))

    @pytest.mark.parametrize(
        "raw_status, expected",
        [
            (3, ResultStatus.FINISHED),
            ("4", ResultStatus.DNF),
            ("DSQ", ResultStatus.DISQUALIFIED),
            ("Did Not Finish", ResultStatus.DNF),
            ("retired", ResultStatus.RETIRED),
        ],
    )
    def test_status(self, raw_status, expected):
        payload = parse_decoded_session(_raw(results=[{"name": "A", "status": raw_status}]))
        assert payload.results[0].status == expected

    def test_unknown_status(self):
        with pytest.raises(ValidationError):
            parse_decoded_session(_raw(results=[{"name": "A", "status": "parked"}]))

    def test_numeric_platform_id_becomes_text(self):
        payload = parse_decoded_session(_raw(results=[{"name": "A", "platformId": 76561198000000001}]))
        assert payload.results[0].platform_id == "76561198000000001"

    def test_metadata_is_kept(self):
        payload = parse_decoded_session(_raw(metadata={"weather": "rain"}))
        assert payload.extra_data == {"weather": "rain"}

    def test_dump_is_accepted_back(self):
        payload = parse_decoded_session(_raw(metadata={"weather": "rain"}, simulatorSessionId="9"))
        dumped = dump_decoded_session(payload)

        assert dumped["sessionKind"] == "race"
        assert dumped["metadata"] == {"weather": "rain"}
        assert parse_decoded_session(dumped) == payload
