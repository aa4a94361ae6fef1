"""Quotes CRUD: draft inserts, status-guarded updates and listing."""

from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import func, or_, update
from sqlalchemy.orm import Session

from quoteforge.db.models import QUOTE_DRAFT, Quote

DRAFT_FIELDS = ("customer", "items", "discount", "vat_rate", "currency", "notes")
MAX_LIMIT = 200


def get_quote(db: Session, quote_id: int) -> Optional[Quote]:
    # populate_existing: status may have changed under a conditional update
    return db.query(Quote).populate_existing().filter(Quote.id == quote_id).one_or_none()


def list_quotes(db: Session, *, status: str | None = None, q: str | None = None, limit: int = 50) -> list[Quote]:
    query = db.query(Quote)
    if status:
        query = query.filter(Quote.status == status)
    if q:
        needle = f"%{q.lower()}%"
        query = query.filter(
            or_(
                func.lower(Quote.quote_number).like(needle),
                func.lower(Quote.customer["name"].as_string()).like(needle),
            )
        )
    return query.order_by(Quote.created_at.desc(), Quote.id.desc()).limit(min(limit, MAX_LIMIT)).all()


def create_quote(db: Session, data: dict[str, Any]) -> Quote:
    quote = Quote(status=QUOTE_DRAFT, **{k: data[k] for k in DRAFT_FIELDS if k in data})
    db.add(quote)
    db.flush()
    return quote


def conditional_update(db: Session, quote_id: int, expected_status: str, patch: dict[str, Any]) -> bool:
    """Apply `patch` only if the stored status still equals `expected_status`.

    The status check and the write are one statement, so two callers racing
    on the same quote cannot both succeed. Returns whether a row changed.
    """
    stmt = (
        update(Quote)
        .where(Quote.id == quote_id, Quote.status == expected_status)
        .values(**patch, updated_at=func.now())
        .execution_options(synchronize_session=False)
    )
    result = db.execute(stmt)
    return result.rowcount == 1
