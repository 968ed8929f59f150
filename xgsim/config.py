"""Service configuration — loaded from the environment / .env, never hardcoded.

:class:`Settings` is a frozen snapshot of the environment taken by
:func:`get_settings`.  Tests build their own instance with
:func:`dataclasses.replace` instead of patching ``os.environ``.

Typical usage::

    from xgsim.config import get_settings

    settings = get_settings()
    storage = SupabaseMatchStorage.from_settings(settings)
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional, Tuple

from dotenv import load_dotenv

load_dotenv()

INDEX_BACKEND_REST = "rest"
INDEX_BACKEND_SQL = "sql"


def _split_csv(raw: str) -> Tuple[str, ...]:
    return tuple(s.strip() for s in raw.split(",") if s.strip())


@dataclass(frozen=True)
class Settings:
    """Immutable configuration bundle for the HTTP service and scripts.

    Attributes:
        supabase_url: Project URL used for both PostgREST and Storage.
        supabase_service_key: Sent as ``apikey`` and ``Bearer`` token.
        supabase_schema: Optional PostgREST schema (``Accept-Profile``).
        matches_bucket: Storage bucket holding the match JSON documents.
        match_index_backend: ``"rest"`` (PostgREST) or ``"sql"`` (SQLAlchemy).
        database_url: SQLAlchemy URL for the ``sql`` backend.
        default_runs: Iterations used when a request omits ``runs``.
        max_runs: Ceiling on requested iterations.
        body_limit_bytes: Largest accepted request body.
        http_timeout_s: Timeout for outbound ``requests`` calls.
        log_level: Root logging level name.
        cors_origins: Allowed CORS origins.
    """

    supabase_url: str = ""
    supabase_service_key: str = ""
    supabase_schema: Optional[str] = None
    matches_bucket: str = "matches"
    match_index_backend: str = INDEX_BACKEND_REST
    database_url: str = "sqlite:///./matches_index.db"
    default_runs: int = 1000
    max_runs: int = 100_000
    body_limit_bytes: int = 512 * 1024  # 512 KiB is plenty for a shots JSON
    http_timeout_s: float = 10.0
    log_level: str = "INFO"
    cors_origins: Tuple[str, ...] = field(default=("http://localhost:3000",))


def get_settings() -> Settings:
    """Read :class:`Settings` from the current environment."""
    backend = os.getenv("MATCH_INDEX_BACKEND", INDEX_BACKEND_REST).strip().lower()
    if backend not in (INDEX_BACKEND_REST, INDEX_BACKEND_SQL):
        raise ValueError(
            f"MATCH_INDEX_BACKEND={backend!r} is not supported; use 'rest' or 'sql'"
        )

    return Settings(
        supabase_url=os.getenv("SUPABASE_URL", ""),
        supabase_service_key=os.getenv("SUPABASE_SERVICE_KEY", ""),
        supabase_schema=os.getenv("SUPABASE_SCHEMA") or None,
        matches_bucket=os.getenv("MATCHES_BUCKET", "matches"),
        match_index_backend=backend,
        database_url=os.getenv("DATABASE_URL", "sqlite:///./matches_index.db"),
        default_runs=int(os.getenv("DEFAULT_RUNS", "1000")),
        max_runs=int(os.getenv("MAX_RUNS", "100000")),
        body_limit_bytes=int(os.getenv("BODY_LIMIT_BYTES", str(512 * 1024))),
        http_timeout_s=float(os.getenv("HTTP_TIMEOUT_S", "10")),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        cors_origins=_split_csv(os.getenv("CORS_ORIGINS", "http://localhost:3000")),
    )
