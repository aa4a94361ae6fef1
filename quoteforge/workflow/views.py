"""Render-ready views of a quote.

A final view reads only what finalize froze on the quote; a preview view
computes totals and a company snapshot on the fly and persists nothing.
"""

from __future__ import annotations

import copy
from typing import Any

from sqlalchemy.orm import Session

from quoteforge.core.errors import InvalidTransitionError
from quoteforge.db.crud.settings import load_company_settings
from quoteforge.db.models import QUOTE_FINALIZED, Quote
from quoteforge.numbering.sequence import DEFAULT_PREFIX, draft_number
from quoteforge.pricing.totals import compute_totals
from quoteforge.workflow.finalize import build_company_snapshot, effective_vat_rate


def build_final_view(quote: Quote) -> dict[str, Any]:
    if quote.status != QUOTE_FINALIZED:
        raise InvalidTransitionError("Quote must be finalized before PDF export")
    return {
        "id": quote.id,
        "quote_number": quote.quote_number,
        "issue_date": quote.issue_date.date().isoformat() if quote.issue_date else None,
        "customer": copy.deepcopy(quote.customer_snapshot or {}),
        "company": copy.deepcopy(quote.company_snapshot or {}),
        "items": copy.deepcopy(quote.items or []),
        "totals": dict(quote.totals or {}),
        "notes": quote.notes or "",
    }


def build_preview_view(db: Session, quote: Quote) -> dict[str, Any]:
    if quote.status == QUOTE_FINALIZED:
        return build_final_view(quote)
    settings = load_company_settings(db)
    vat_rate = effective_vat_rate(quote, settings["company"])
    company = build_company_snapshot(settings, currency=quote.currency, vat_rate=vat_rate)
    totals = compute_totals(quote.items or [], quote.discount, vat_rate)
    return {
        "id": quote.id,
        "quote_number": draft_number(settings["numbering"].get("prefix") or DEFAULT_PREFIX),
        "issue_date": None,
        "customer": copy.deepcopy(quote.customer or {}),
        "company": company,
        "items": copy.deepcopy(quote.items or []),
        "totals": totals.as_json(),
        "notes": quote.notes or "",
    }
