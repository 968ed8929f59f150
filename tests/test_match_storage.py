"""Tests for the Supabase Storage match reader."""

from unittest.mock import MagicMock

import pytest
import requests

from xgsim.config import Settings
from xgsim.errors import MatchStorageError
from xgsim.services.match_storage import SupabaseMatchStorage, build_object_url


def _storage(response=None, side_effect=None, bucket="matches"):
    session = MagicMock()
    if side_effect is not None:
        session.get.side_effect = side_effect
    else:
        session.get.return_value = response
    return SupabaseMatchStorage(
        "https://proj.supabase.co/", bucket, "service-key", session=session
    ), session


def _response(status=200, text="", reason="OK"):
    r = MagicMock()
    r.status_code = status
    r.ok = 200 <= status < 300
    r.reason = reason
    r.text = text
    r.content = text.encode()
    return r


@pytest.mark.parametrize("path, expected", [
    ("matches/atl.json",          "https://x.co/storage/v1/object/matches/matches/atl.json"),
    ("laliga//2024 25/atl.json",  "https://x.co/storage/v1/object/matches/laliga/2024%2025/atl.json"),
    ("a#b.json",                  "https://x.co/storage/v1/object/matches/a%23b.json"),
])
def test_build_object_url(path, expected):
    assert build_object_url("https://x.co/", "matches", path) == expected


def test_fetch_json_returns_body_text():
    storage, session = _storage(_response(text='{"partido": {}}'))

    assert storage.fetch_json("/matches/atl.json") == '{"partido": {}}'

    args, kwargs = session.get.call_args
    assert args[0] == "https://proj.supabase.co/storage/v1/object/matches/matches/atl.json"
    assert kwargs["headers"]["Authorization"] == "Bearer service-key"
    assert kwargs["headers"]["apikey"] == "service-key"


def test_leading_slash_stripped_from_bucket():
    storage, _ = _storage(_response(text="{}"), bucket="/matches")
    assert storage.bucket == "matches"


def test_non_2xx_raises_with_status_and_reason():
    storage, _ = _storage(_response(status=404, text="Object not found", reason="Not Found"))
    with pytest.raises(MatchStorageError, match="404 Not Found: Object not found"):
        storage.fetch_json("matches/missing.json")


def test_transport_error_raises():
    storage, _ = _storage(side_effect=requests.exceptions.Timeout("timed out"))
    with pytest.raises(MatchStorageError, match="timed out"):
        storage.fetch_json("matches/atl.json")


def test_from_settings():
    cfg = Settings(
        supabase_url="https://proj.supabase.co",
        supabase_service_key="k",
        matches_bucket="shots",
        http_timeout_s=3.0,
    )
    storage = SupabaseMatchStorage.from_settings(cfg)
    assert storage.bucket == "shots"
    assert storage.timeout == 3.0
    assert storage.base_url == "https://proj.supabase.co"
