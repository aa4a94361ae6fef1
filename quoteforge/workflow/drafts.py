"""Draft quote lifecycle: create and edit while status is draft."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.orm import Session

from quoteforge.core.errors import InvalidTransitionError, NotFoundError
from quoteforge.db.crud.quotes import DRAFT_FIELDS, conditional_update, create_quote, get_quote
from quoteforge.db.models import QUOTE_DRAFT, Quote
from quoteforge.validation.schemas import DRAFT, ensure_valid

logger = logging.getLogger(__name__)


def load_quote(db: Session, quote_id: int) -> Quote:
    quote = get_quote(db, quote_id)
    if quote is None:
        raise NotFoundError("Quote not found")
    return quote


def create_draft(db: Session, payload: dict[str, Any]) -> Quote:
    ensure_valid("quote", payload, DRAFT, message="Invalid draft quote")
    quote = create_quote(db, payload)
    db.commit()
    return quote


def update_draft(db: Session, quote_id: int, payload: dict[str, Any]) -> Quote:
    """Replace the editable fields of a draft. Finalized quotes are rejected."""
    ensure_valid("quote", payload, DRAFT, message="Invalid draft quote")
    patch = {k: payload[k] for k in DRAFT_FIELDS if k in payload}
    if not conditional_update(db, quote_id, QUOTE_DRAFT, patch):
        db.rollback()
        quote = load_quote(db, quote_id)
        logger.warning("edit rejected for quote %s in status %s", quote_id, quote.status)
        raise InvalidTransitionError("Cannot edit finalized quote")
    db.commit()
    return load_quote(db, quote_id)
