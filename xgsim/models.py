"""
Database models for the match index
SQLAlchemy ORM; the table mirrors Supabase's ``matches_index``.
"""

from datetime import datetime
from functools import lru_cache

from sqlalchemy import BigInteger, Column, DateTime, String, create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from xgsim.config import get_settings

Base = declarative_base()


class MatchIndex(Base):
    """One stored match document and where to find it"""

    __tablename__ = "matches_index"

    id = Column(String, primary_key=True, index=True)  # e.g. "atl-mad-20240928"
    date = Column(String, nullable=False)  # ISO timestamp of kick-off
    home = Column(String, nullable=False)
    away = Column(String, nullable=False)
    storage_path = Column(String, nullable=False)  # object path inside the bucket
    size_bytes = Column(BigInteger)
    checksum = Column(String)
    created_at = Column(DateTime, default=datetime.utcnow)


@lru_cache(maxsize=None)
def _engine_for(url: str):
    # pool_pre_ping keeps long-lived Postgres connections healthy
    return create_engine(url, pool_pre_ping=True, echo=False)


def get_engine(database_url: str = ""):
    return _engine_for(database_url or get_settings().database_url)


def get_session_factory(database_url: str = "") -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=get_engine(database_url))
