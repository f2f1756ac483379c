from courtwatch.db.base import Base
from courtwatch.db.session import get_db, engine, SessionLocal
from courtwatch.db.tables import ALL_TABLE_NAMES, SCRAPE_STATE_TABLE_NAMES

__all__ = ["get_db", "engine", "SessionLocal", "Base", "ALL_TABLE_NAMES", "SCRAPE_STATE_TABLE_NAMES"]
