"""
Match index lookup: resolve a match id to its stored JSON document.

Two backends share the :class:`MatchIndexRepository` contract:

  RestMatchIndexRepository  Supabase PostgREST over ``requests``
                            (``GET /rest/v1/matches_index?id=eq.<id>``).
  SqlMatchIndexRepository   Direct SQLAlchemy access to the same table,
                            for self-hosted Postgres or local SQLite.

Both return ``None`` for an unknown id and raise
:class:`MatchIndexRepositoryError` for backend failures.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

import requests
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from xgsim.config import Settings
from xgsim.errors import MatchIndexRepositoryError
from xgsim.models import MatchIndex

logger = logging.getLogger(__name__)

MATCH_INDEX_TABLE = "matches_index"
MATCH_INDEX_COLUMNS = "id,date,home,away,storage_path,size_bytes,checksum,created_at"


@dataclass(frozen=True)
class MatchIndexRecord:
    id: str
    date: str
    home: str
    away: str
    storage_path: str
    size_bytes: Optional[int] = None
    checksum: Optional[str] = None
    created_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "MatchIndexRecord":
        return cls(
            id=row["id"],
            date=row["date"],
            home=row["home"],
            away=row["away"],
            storage_path=row["storage_path"],
            size_bytes=row.get("size_bytes"),
            checksum=row.get("checksum"),
            created_at=row.get("created_at"),
        )


class MatchIndexRepository(ABC):
    @abstractmethod
    def find_by_id(self, match_id: str) -> Optional[MatchIndexRecord]:
        """Return the index record for ``match_id`` or ``None``."""


# ---------------------------------------------------------------------------
# PostgREST
# ---------------------------------------------------------------------------

def strip_trailing_slash(url: str) -> str:
    return url[:-1] if url.endswith("/") else url


class SupabaseRestClient:
    """Minimal PostgREST reader: one row by equality filter."""

    def __init__(
        self,
        base_url: str,
        service_key: str,
        schema: Optional[str] = None,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = strip_trailing_slash(base_url)
        self.service_key = service_key
        self.schema = schema
        self.timeout = timeout
        self.session = session or requests.Session()

    def _headers(self) -> Dict[str, str]:
        headers = {
            "apikey": self.service_key,
            "Authorization": f"Bearer {self.service_key}",
            "Accept": "application/json",
            "Prefer": "count=none",
        }
        if self.schema:
            headers["Accept-Profile"] = self.schema
            headers["Content-Profile"] = self.schema
        return headers

    def select_single(
        self, table: str, columns: str, column: str, value: str
    ) -> Optional[Dict[str, Any]]:
        """
        Fetch at most one row where ``column == value``.

        Returns:
            The row dict, or ``None`` when PostgREST returns no rows.

        Raises:
            MatchIndexRepositoryError: transport failure or non-2xx status.
        """
        url = f"{self.base_url}/rest/v1/{table}"
        params = {"select": columns, column: f"eq.{value}", "limit": "1"}

        try:
            response = self.session.get(
                url, params=params, headers=self._headers(), timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            logger.error("PostgREST request failed for %s: %s", table, e)
            raise MatchIndexRepositoryError(str(e)) from e

        text = response.text or ""
        if not response.ok:
            message = text or response.reason or "PostgREST request failed"
            logger.error("PostgREST %s responded %s: %s", table, response.status_code, message)
            raise MatchIndexRepositoryError(message)

        if not text.strip():
            return None
        try:
            parsed = response.json()
        except ValueError:
            return None

        if isinstance(parsed, list):
            return parsed[0] if parsed else None
        if isinstance(parsed, dict):
            return parsed
        return None


class RestMatchIndexRepository(MatchIndexRepository):
    def __init__(self, client: SupabaseRestClient):
        self.client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> "RestMatchIndexRepository":
        return cls(
            SupabaseRestClient(
                settings.supabase_url,
                settings.supabase_service_key,
                schema=settings.supabase_schema,
                timeout=settings.http_timeout_s,
            )
        )

    def find_by_id(self, match_id: str) -> Optional[MatchIndexRecord]:
        row = self.client.select_single(MATCH_INDEX_TABLE, MATCH_INDEX_COLUMNS, "id", match_id)
        if row is None:
            return None
        try:
            return MatchIndexRecord.from_row(row)
        except KeyError as e:
            raise MatchIndexRepositoryError(f"matches_index row missing column {e}") from e


# ---------------------------------------------------------------------------
# SQLAlchemy
# ---------------------------------------------------------------------------

class SqlMatchIndexRepository(MatchIndexRepository):
    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def find_by_id(self, match_id: str) -> Optional[MatchIndexRecord]:
        db = self.session_factory()
        try:
            row = db.query(MatchIndex).filter(MatchIndex.id == match_id).first()
            if row is None:
                return None
            return MatchIndexRecord(
                id=row.id,
                date=row.date,
                home=row.home,
                away=row.away,
                storage_path=row.storage_path,
                size_bytes=row.size_bytes,
                checksum=row.checksum,
                created_at=row.created_at.isoformat() if row.created_at else None,
            )
        except SQLAlchemyError as e:
            logger.error("matches_index query failed for %s: %s", match_id, e)
            raise MatchIndexRepositoryError(str(e)) from e
        finally:
            db.close()
