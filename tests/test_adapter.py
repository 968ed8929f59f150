"""Tests for the external document adapter and payload validator."""

import json

import pytest

from xgsim.core.shots import Score
from xgsim.errors import MalformedMatchJsonError
from xgsim.services.adapter import (
    adapt_external_document,
    check_external_document,
    side_for_team,
    validate_payload,
)


def _document(**overrides):
    doc = {
        "partido": {
            "idPartido": "atl-mad-20240928",
            "fechaISO": "2024-09-28T19:00:00.000Z",
            "local": "Atletico Madrid",
            "visitante": "Real Madrid",
            "marcadorFinal": {"local": 2, "visitante": 1},
        },
        "disparos": [
            {"minuto": 1, "equipo": "Atletico Madrid", "xG": 0.1, "jugador": "Griezmann",
             "resultado": "Gol", "tipo_disparo": "Zurdo"},
            {"minuto": 5, "equipo": "Real Madrid", "xG": 0.15},
            {"minuto": "45+2", "equipo": "Atletico Madrid", "xG": 0.4},
        ],
    }
    doc.update(overrides)
    return doc


# ---------------------------------------------------------------------------
# Side mapping
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("team, expected", [
    ("Atletico Madrid", "home"),
    ("Real Madrid",     "away"),
    ("Atlético Madrid", "away"),   # exact comparison only
    ("",                "away"),
])
def test_side_for_team(team, expected):
    assert side_for_team(team, "Atletico Madrid", "Real Madrid") == expected


def test_unmatched_team_goes_to_away_side():
    doc = _document(disparos=[{"minuto": 3, "equipo": "Unknown FC", "xG": 0.9}])
    payload = adapt_external_document(doc)
    assert payload.shots[0].side == "away"


# ---------------------------------------------------------------------------
# Adaptation
# ---------------------------------------------------------------------------

class TestAdaptExternalDocument:

    def test_maps_match_metadata(self):
        payload = adapt_external_document(_document())
        assert payload.match.match_id == "atl-mad-20240928"
        assert payload.match.date_iso == "2024-09-28T19:00:00.000Z"
        assert payload.match.home == "Atletico Madrid"
        assert payload.match.away == "Real Madrid"
        assert payload.match.final_score == Score(2, 1)

    def test_maps_shots_in_order(self):
        payload = adapt_external_document(_document())
        assert [s.side for s in payload.shots] == ["home", "away", "home"]
        assert [s.xg for s in payload.shots] == [0.1, 0.15, 0.4]
        assert payload.shots[2].minute == "45+2"

    def test_carries_metadata(self):
        shot = adapt_external_document(_document()).shots[0]
        assert shot.player == "Griezmann"
        assert shot.outcome == "Gol"
        assert shot.shot_type == "Zurdo"

    def test_accepts_json_text(self):
        raw = json.dumps(_document())
        assert adapt_external_document(raw) == adapt_external_document(_document())

    @pytest.mark.parametrize("raw_xg, expected", [
        (1.7,   1.0),
        (-0.3,  0.0),
        (None,  0.0),
        ("abc", 0.0),
        (10**400, 1.0),
        (-10**400, 0.0),
    ])
    def test_clamps_probabilities_on_ingestion(self, raw_xg, expected):
        doc = _document(disparos=[{"minuto": 1, "equipo": "Real Madrid", "xG": raw_xg}])
        assert adapt_external_document(doc).shots[0].xg == expected

    def test_oversized_xgot_is_dropped(self):
        doc = _document(disparos=[{"minuto": 1, "equipo": "Real Madrid", "xG": 0.2, "xGOT": 10**400}])
        assert adapt_external_document(doc).shots[0].xgot is None

    def test_missing_xg_is_zero(self):
        doc = _document(disparos=[{"minuto": 1, "equipo": "Real Madrid"}])
        assert adapt_external_document(doc).shots[0].xg == 0.0

    def test_empty_shot_list(self):
        payload = adapt_external_document(_document(disparos=[]))
        assert payload.shots == ()

    def test_ignores_unknown_fields(self):
        doc = _document(fuente="sofascore")
        doc["partido"]["estadio"] = "Metropolitano"
        assert adapt_external_document(doc).match.match_id == "atl-mad-20240928"


# ---------------------------------------------------------------------------
# Structural validation
# ---------------------------------------------------------------------------

def _without(path):
    doc = _document()
    if len(path) == 1:
        del doc[path[0]]
    else:
        del doc[path[0]][path[1]]
    return doc


@pytest.mark.parametrize("raw", [
    "not-json",
    "[]",
    json.dumps({"partido": None, "disparos": []}),
    _without(["partido"]),
    _without(["disparos"]),
    _without(["partido", "idPartido"]),
    _without(["partido", "local"]),
    _without(["partido", "visitante"]),
    _without(["partido", "marcadorFinal"]),
    _document(disparos={"0": {"equipo": "x"}}),
    _document(partido={"idPartido": 7, "local": "A", "visitante": "B",
                       "marcadorFinal": {"local": 0, "visitante": 0}}),
    _document(partido={"idPartido": "x", "local": "A", "visitante": "B",
                       "marcadorFinal": {"local": -1, "visitante": 0}}),
])
def test_malformed_documents_are_rejected(raw):
    check = check_external_document(raw)
    assert check.ok is False
    assert check.error
    with pytest.raises(MalformedMatchJsonError):
        adapt_external_document(raw)


def test_check_returns_document_on_success():
    check = check_external_document(_document())
    assert check.ok is True
    assert check.error is None
    assert check.document.match.match_id == "atl-mad-20240928"


def test_check_rejects_non_mapping_objects():
    assert check_external_document(42).ok is False


# ---------------------------------------------------------------------------
# Internal payload validator
# ---------------------------------------------------------------------------

def test_validate_payload_accepts_minimal_structure():
    assert validate_payload({
        "match": {
            "idPartido": "ABC",
            "local": "A",
            "visitante": "B",
            "marcadorFinal": {"local": 1, "visitante": 2},
        },
        "shots": [],
    }) is True


@pytest.mark.parametrize("payload", [
    None,
    [],
    {"shots": []},
    {"match": {"local": "A"}, "shots": []},
    {"match": {"local": "A", "visitante": "B"}, "shots": {}},
])
def test_validate_payload_rejects(payload):
    assert validate_payload(payload) is False
