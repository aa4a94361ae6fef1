"""Sequence counters: one row per numbering scope, bumped by a single upsert."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import func
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from quoteforge.db.models import SequenceCounter

_UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def increment_counter(db: Session, scope: str, year: Optional[int] = None) -> int:
    """Atomically add one to the counter for `scope` and return the new value.

    A missing counter is created at 1. Raises LookupError when the bound
    dialect has no upsert support.
    """
    dialect = db.get_bind().dialect.name
    insert = _UPSERT_DIALECTS.get(dialect)
    if insert is None:
        raise LookupError(f"no atomic upsert for dialect {dialect!r}")

    stmt = insert(SequenceCounter).values(scope=scope, value=1, year=year)
    stmt = stmt.on_conflict_do_update(
        index_elements=[SequenceCounter.scope],
        set_={"value": SequenceCounter.value + 1, "updated_at": func.now()},
    ).returning(SequenceCounter.value)
    return int(db.execute(stmt).scalar_one())
