# src/storage/upsert.py
from __future__ import annotations

import logging

from sqlalchemy import insert
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

_ON_CONFLICT_INSERTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}


def insert_ignore(session: Session, model, values: dict, conflict_columns: list[str]) -> bool:
    """Insert a row unless one with the same natural key already exists.

    Runs as a single ``INSERT ... ON CONFLICT DO NOTHING`` statement where the
    dialect supports it, so there is no window between the existence check and
    the insert. Other dialects fall back to a savepoint around a plain insert.

    Returns True when a new row was written.
    """
    dialect = session.get_bind().dialect.name
    dialect_insert = _ON_CONFLICT_INSERTS.get(dialect)

    if dialect_insert is not None:
        stmt = dialect_insert(model).values(**values).on_conflict_do_nothing(
            index_elements=conflict_columns,
        )
        result = session.execute(stmt)
        return result.rowcount == 1

    try:
        with session.begin_nested():
            session.execute(insert(model).values(**values))
    except IntegrityError:
        logger.debug("%s already exists for %s", model.__tablename__, conflict_columns)
        return False
    return True
