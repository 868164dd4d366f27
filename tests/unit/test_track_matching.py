import pytest

from app.services.track_matching import map_track_id_to_name, track_name_synonyms

pytestmark = pytest.mark.unit


def test_synonyms_exclude_original_and_duplicates():
    synonyms = track_name_synonyms("Silverstone")

    assert "Silverstone" not in synonyms
    assert "Great Britain" in synonyms
    assert len(synonyms) == len(set(synonyms))


def test_reverse_lookup_from_variation():
    synonyms = track_name_synonyms("Great Britain")
    assert "Silverstone" in synonyms


def test_reverse_lookup_from_official_name():
    assert "Monza" in track_name_synonyms("Autodromo Nazionale di Monza")


def test_unknown_track_has_no_synonyms():
    assert track_name_synonyms("Nordschleife") == []


@pytest.mark.parametrize(
    "track_id, expected",
    [
        ("Spa", "Circuit de Spa-Francorchamps"),
        ("abu_dhabi", "Yas Marina Circuit"),
        ("Nordschleife", "Nordschleife"),
        ("", "Unknown Track"),
    ],
)
def test_map_track_id_to_name(track_id, expected):
    assert map_track_id_to_name(track_id) == expected
