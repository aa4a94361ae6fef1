"""Draft → finalized transition: validate, snapshot, total, number, persist."""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy.orm import Session

from quoteforge.core.errors import InvalidTransitionError, ValidationFailedError
from quoteforge.db.crud.quotes import conditional_update
from quoteforge.db.crud.settings import load_company_settings
from quoteforge.db.models import QUOTE_DRAFT, QUOTE_FINALIZED, Quote
from quoteforge.numbering.counters import get_counter_store
from quoteforge.numbering.sequence import DEFAULT_PREFIX, CounterStore, next_quote_number
from quoteforge.pricing.totals import Totals, compute_totals
from quoteforge.validation.schemas import STRICT, validate
from quoteforge.workflow.drafts import load_quote

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FinalizeResult:
    quote_number: str
    totals: Totals


def effective_vat_rate(quote: Quote, company: dict[str, Any]) -> Any:
    return quote.vat_rate if quote.vat_rate is not None else company.get("default_vat_rate", 0)


def build_company_snapshot(settings: dict[str, Any], *, currency: str | None, vat_rate: Any) -> dict[str, Any]:
    company = settings["company"]
    letterhead = settings["letterhead"]
    numbering = settings["numbering"]
    return copy.deepcopy(
        {
            "company_name": company.get("name", ""),
            "vat_no": company.get("vat_no", ""),
            "address": list(company.get("address") or []),
            "footer_text": company.get("footer_text", ""),
            "currency": currency or company.get("currency") or "BHD",
            "vat_rate": float(vat_rate or 0),
            "letterhead_url": letterhead.get("url", ""),
            "margins": dict(letterhead.get("margins") or {}),
            "numbering_prefix": numbering.get("prefix") or DEFAULT_PREFIX,
        }
    )


def validate_for_finalize(quote: Quote) -> list[str]:
    errors = validate("customer", quote.customer or {}, STRICT, prefix="customer")
    for idx, item in enumerate(quote.items or []):
        errors += validate("item", item, STRICT, prefix=f"items.{idx}")
    return errors


def finalize_quote(
    db: Session,
    quote_id: int,
    *,
    counters: Optional[CounterStore] = None,
    now: Optional[datetime] = None,
) -> FinalizeResult:
    """Number and freeze a draft quote.

    The draft check and strict validation run before any number is
    allocated. The final write is guarded by ``status = 'draft'`` again, so
    of two racing calls on one quote exactly one succeeds.
    """
    now = now or datetime.now(timezone.utc)
    try:
        quote = load_quote(db, quote_id)
        if quote.status != QUOTE_DRAFT:
            logger.warning("finalize rejected for quote %s: status is %s", quote_id, quote.status)
            raise InvalidTransitionError("Quote already finalized")

        errors = validate_for_finalize(quote)
        if errors:
            raise ValidationFailedError("Quote is not ready to finalize", errors)

        settings = load_company_settings(db)
        vat_rate = effective_vat_rate(quote, settings["company"])
        totals = compute_totals(quote.items or [], quote.discount, vat_rate)
        customer_snapshot = copy.deepcopy(quote.customer)
        company_snapshot = build_company_snapshot(settings, currency=quote.currency, vat_rate=vat_rate)

        # Allocate as late as possible: nothing below may fail for input reasons.
        numbering = settings["numbering"]
        store = counters if counters is not None else get_counter_store(db)
        number = next_quote_number(
            store,
            prefix=numbering.get("prefix") or DEFAULT_PREFIX,
            year_reset=bool(numbering.get("year_reset")),
            now=now,
        )

        written = conditional_update(
            db,
            quote_id,
            QUOTE_DRAFT,
            {
                "status": QUOTE_FINALIZED,
                "quote_number": number,
                "issue_date": now,
                "customer_snapshot": customer_snapshot,
                "company_snapshot": company_snapshot,
                "totals": totals.as_json(),
            },
        )
        if not written:
            logger.warning("finalize lost race for quote %s", quote_id)
            raise InvalidTransitionError("Quote already finalized")
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("finalized quote %s as %s (grand total %s)", quote_id, number, totals.grand_total)
    return FinalizeResult(quote_number=number, totals=totals)
