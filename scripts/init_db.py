#!/usr/bin/env python3
"""
Database initialization script
Creates the matches_index table and optionally registers a local match file
"""

import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

# Load .env file
from dotenv import load_dotenv
load_dotenv()

import hashlib
import logging
from pathlib import Path

from sqlalchemy import text, inspect

from xgsim.models import Base, MatchIndex, get_engine, get_session_factory
from xgsim.services.adapter import adapt_external_document

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def init_database(drop_existing: bool = False):
    """
    Initialize database tables

    Args:
        drop_existing: If True, drops all tables first (DANGER: data loss!)
    """
    engine = get_engine()
    logger.info("Initializing match index database...")

    if drop_existing:
        logger.warning("Dropping all existing tables!")
        response = input("Are you sure? This will delete all data. Type 'yes' to confirm: ")
        if response.lower() != 'yes':
            logger.info("Aborted.")
            return False

        Base.metadata.drop_all(bind=engine)
        logger.info("Existing tables dropped")

    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created successfully")

    inspector = inspect(engine)
    logger.info("Tables: %s", ", ".join(inspector.get_table_names()))
    return True


def register_match_file(path: str, storage_path: str = ""):
    """Add (or replace) an index row describing a local match JSON document"""
    raw = Path(path).read_bytes()
    payload = adapt_external_document(raw)
    match = payload.match

    db = get_session_factory()()
    try:
        db.merge(
            MatchIndex(
                id=match.match_id,
                date=match.date_iso or "",
                home=match.home,
                away=match.away,
                storage_path=storage_path or Path(path).name,
                size_bytes=len(raw),
                checksum="sha256:" + hashlib.sha256(raw).hexdigest(),
            )
        )
        db.commit()
        logger.info("Registered %s (%d shots) -> %s", match.match_id, len(payload.shots), storage_path or Path(path).name)
    except Exception as e:
        logger.error("Error registering %s: %s", path, e)
        db.rollback()
        raise
    finally:
        db.close()


def check_connection():
    """Test database connection"""
    try:
        with get_engine().connect() as conn:
            conn.execute(text("SELECT 1"))
        logger.info("Database connection successful")
        return True
    except Exception as e:
        logger.error("Database connection failed: %s", e)
        return False


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Initialize the match index database")
    parser.add_argument("--drop", action="store_true", help="Drop existing tables (DANGER!)")
    parser.add_argument("--check", action="store_true", help="Only check connection")
    parser.add_argument("--seed-file", help="Register a local match JSON in the index")
    parser.add_argument("--storage-path", default="", help="Object path to record for --seed-file")

    args = parser.parse_args()

    if args.check:
        sys.exit(0 if check_connection() else 1)

    if not check_connection():
        logger.error("Cannot initialize database - connection failed")
        sys.exit(1)

    init_database(drop_existing=args.drop)
    if args.seed_file:
        register_match_file(args.seed_file, args.storage_path)
    logger.info("Database initialization complete!")
