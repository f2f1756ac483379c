"""
Dialect-aware INSERT .. ON CONFLICT for idempotent writes keyed by natural identity.

PostgreSQL in production, SQLite for local runs and tests; both support ON CONFLICT.
"""
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session


def insert_for(db: Session, model):
    """Return an insert() construct for model that supports on_conflict_do_update / do_nothing."""
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        return pg_insert(model)
    if dialect == "sqlite":
        return sqlite_insert(model)
    raise NotImplementedError(f"Upsert not supported for dialect {dialect}")
