from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from quoteforge.core.errors import (
    AllocationError,
    InvalidTransitionError,
    NotFoundError,
    ValidationFailedError,
)
from quoteforge.db.crud.settings import default_settings, save_settings
from quoteforge.db.models import QUOTE_DRAFT, QUOTE_FINALIZED
from quoteforge.workflow.drafts import create_draft, load_quote, update_draft
from quoteforge.workflow.finalize import finalize_quote

NOW = datetime(2024, 5, 17, 9, 30, tzinfo=timezone.utc)


def configure(db, **numbering):
    doc = default_settings()
    doc["company"].update(
        {"name": "Seyna Supplies", "vat_no": "200-1", "address": ["Adliya"], "footer_text": "Thanks", "currency": "USD"}
    )
    doc["letterhead"]["url"] = "/srv/letterheads/seyna.png"
    doc["numbering"].update(numbering)
    save_settings(db, doc)
    db.commit()


def test_first_finalize_of_the_year(db, draft_payload, counter_value):
    configure(db, prefix="QF", year_reset=True)
    quote = create_draft(db, draft_payload())

    result = finalize_quote(db, quote.id, now=NOW)

    assert result.quote_number == "QF-2024-001"
    assert result.totals.grand_total == Decimal("198.000")

    stored = load_quote(db, quote.id)
    assert stored.status == QUOTE_FINALIZED
    assert stored.quote_number == "QF-2024-001"
    assert stored.issue_date is not None
    assert stored.totals == {
        "subtotal": "200.000",
        "discount_amount": "20.000",
        "taxable_base": "180.000",
        "vat_amount": "18.000",
        "grand_total": "198.000",
    }
    assert stored.customer_snapshot == stored.customer
    assert stored.company_snapshot == {
        "company_name": "Seyna Supplies",
        "vat_no": "200-1",
        "address": ["Adliya"],
        "footer_text": "Thanks",
        "currency": "BHD",
        "vat_rate": 0.1,
        "letterhead_url": "/srv/letterheads/seyna.png",
        "margins": {"top": 24, "right": 24, "bottom": 24, "left": 24},
        "numbering_prefix": "QF",
    }
    assert counter_value("quote:2024") == 1


def test_company_defaults_fill_missing_vat_rate_and_settings(db, draft_payload):
    quote = create_draft(db, draft_payload(vat_rate=None, currency="BHD"))

    result = finalize_quote(db, quote.id, now=NOW)

    # No settings row: built-in defaults (prefix QF, 10% VAT).
    assert result.quote_number == "QF-2024-001"
    assert result.totals.vat_amount == Decimal("18.000")
    assert load_quote(db, quote.id).company_snapshot["vat_rate"] == 0.1


def test_second_finalize_fails_and_burns_no_number(db, draft_payload, counter_value):
    quote = create_draft(db, draft_payload())
    first = finalize_quote(db, quote.id, now=NOW)
    before = load_quote(db, quote.id)
    frozen = (before.quote_number, dict(before.totals), dict(before.customer_snapshot))

    with pytest.raises(InvalidTransitionError):
        finalize_quote(db, quote.id, now=NOW)

    after = load_quote(db, quote.id)
    assert (after.quote_number, after.totals, after.customer_snapshot) == frozen
    assert first.quote_number == "QF-2024-001"
    assert counter_value("quote:2024") == 1


def test_finalized_quote_cannot_be_edited(db, draft_payload, item_factory):
    quote = create_draft(db, draft_payload())
    finalize_quote(db, quote.id, now=NOW)

    with pytest.raises(InvalidTransitionError):
        update_draft(db, quote.id, draft_payload(items=[item_factory(unit_price=1)]))

    stored = load_quote(db, quote.id)
    assert stored.items[0]["unit_price"] == 100
    assert stored.totals["grand_total"] == "198.000"


def test_snapshots_do_not_follow_later_edits(db, draft_payload):
    configure(db, prefix="QF", year_reset=True)
    quote = create_draft(db, draft_payload())
    finalize_quote(db, quote.id, now=NOW)

    configure(db, prefix="NEW", year_reset=False)
    doc = default_settings()
    doc["company"]["name"] = "Renamed Co"
    save_settings(db, doc)
    db.commit()

    stored = load_quote(db, quote.id)
    assert stored.company_snapshot["company_name"] == "Seyna Supplies"
    assert stored.company_snapshot["numbering_prefix"] == "QF"


def test_draft_edits_are_last_write_wins(db, draft_payload, item_factory):
    quote = create_draft(db, draft_payload())
    update_draft(db, quote.id, draft_payload(items=[item_factory(quantity=5)], notes="v2"))
    stored = update_draft(db, quote.id, draft_payload(items=[item_factory(quantity=7)], notes="v3"))
    assert stored.status == QUOTE_DRAFT
    assert stored.items[0]["quantity"] == 7
    assert stored.notes == "v3"


def test_invalid_quote_aborts_before_numbering(db, draft_payload, item_factory, counter_value):
    quote = create_draft(db, draft_payload(customer={"name": ""}, items=[item_factory(product_name="")]))

    with pytest.raises(ValidationFailedError) as exc:
        finalize_quote(db, quote.id, now=NOW)

    assert {e.split(":")[0] for e in exc.value.errors} == {"customer.name", "items.0.product_name"}
    assert load_quote(db, quote.id).status == QUOTE_DRAFT
    assert counter_value("quote:2024") == 0


def test_missing_quote(db):
    with pytest.raises(NotFoundError):
        finalize_quote(db, 999, now=NOW)
    with pytest.raises(NotFoundError):
        update_draft(db, 999, {"customer": {"name": "x"}, "items": [], "discount": {"type": "none", "value": 0}, "currency": "BHD"})


def test_allocation_failure_leaves_draft_untouched(db, draft_payload):
    class BrokenCounters:
        def increment(self, scope, *, year=None):
            raise AllocationError("Could not allocate a quote number")

    quote = create_draft(db, draft_payload())
    with pytest.raises(AllocationError):
        finalize_quote(db, quote.id, counters=BrokenCounters(), now=NOW)

    stored = load_quote(db, quote.id)
    assert stored.status == QUOTE_DRAFT
    assert stored.quote_number is None
    assert stored.totals is None

    # Safe to retry once the counter store is back.
    assert finalize_quote(db, quote.id, now=NOW).quote_number == "QF-2024-001"


def test_failed_write_rolls_back_sql_increment(db, draft_payload, monkeypatch, counter_value):
    from quoteforge.workflow import finalize as finalize_mod

    quote = create_draft(db, draft_payload())
    monkeypatch.setattr(finalize_mod, "conditional_update", lambda *a, **kw: False)

    with pytest.raises(InvalidTransitionError):
        finalize_quote(db, quote.id, now=NOW)
    assert counter_value("quote:2024") == 0


def test_year_reset_scopes_counters_by_year(db, draft_payload):
    configure(db, prefix="QF", year_reset=True)
    a = create_draft(db, draft_payload())
    b = create_draft(db, draft_payload())
    c = create_draft(db, draft_payload())

    assert finalize_quote(db, a.id, now=datetime(2024, 12, 31, tzinfo=timezone.utc)).quote_number == "QF-2024-001"
    assert finalize_quote(db, b.id, now=datetime(2025, 1, 2, tzinfo=timezone.utc)).quote_number == "QF-2025-001"
    assert finalize_quote(db, c.id, now=datetime(2025, 1, 3, tzinfo=timezone.utc)).quote_number == "QF-2025-002"


def test_shared_sequence_spans_years(db, draft_payload, counter_value):
    configure(db, prefix="SY", year_reset=False)
    a = create_draft(db, draft_payload())
    b = create_draft(db, draft_payload())

    assert finalize_quote(db, a.id, now=datetime(2024, 12, 31, tzinfo=timezone.utc)).quote_number == "SY-2024-001"
    assert finalize_quote(db, b.id, now=datetime(2025, 1, 2, tzinfo=timezone.utc)).quote_number == "SY-2025-002"
    assert counter_value("quote") == 2


def test_concurrent_finalize_yields_distinct_gapless_numbers(db, session_factory, draft_payload):
    n = 8
    ids = [create_draft(db, draft_payload()).id for _ in range(n)]

    def run(quote_id):
        session = session_factory()
        try:
            return finalize_quote(session, quote_id, now=NOW).quote_number
        finally:
            session.close()

    with ThreadPoolExecutor(max_workers=n) as pool:
        numbers = list(pool.map(run, ids))

    suffixes = sorted(int(num.rsplit("-", 1)[1]) for num in numbers)
    assert suffixes == list(range(1, n + 1))


def test_racing_finalize_on_one_quote_has_one_winner(db, session_factory, draft_payload, counter_value):
    quote_id = create_draft(db, draft_payload()).id

    def run(_):
        session = session_factory()
        try:
            return finalize_quote(session, quote_id, now=NOW).quote_number
        except InvalidTransitionError:
            return None
        finally:
            session.close()

    with ThreadPoolExecutor(max_workers=4) as pool:
        outcomes = list(pool.map(run, range(4)))

    winners = [o for o in outcomes if o is not None]
    assert winners == ["QF-2024-001"]
    assert counter_value("quote:2024") == 1
