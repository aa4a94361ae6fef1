from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from quoteforge.db.crud.quotes import list_quotes as crud_list_quotes
from quoteforge.db.models import Quote
from quoteforge.db.session import get_db
from quoteforge.pricing.totals import compute_totals
from quoteforge.render.pdf import RenderedDocument, render_quote_pdf
from quoteforge.schemas.dto import (
    FinalizeResponse,
    QuoteDraftIn,
    QuoteOut,
    QuoteSummary,
    TotalsOut,
    TotalsRequest,
)
from quoteforge.validation.schemas import DRAFT, ensure_valid
from quoteforge.workflow.drafts import create_draft, load_quote, update_draft
from quoteforge.workflow.finalize import finalize_quote
from quoteforge.workflow.views import build_final_view, build_preview_view

router = APIRouter()


def _to_dto(quote: Quote) -> QuoteOut:
    return QuoteOut(
        id=int(quote.id),
        status=quote.status,  # type: ignore[arg-type]
        customer=quote.customer or {},  # type: ignore[arg-type]
        items=quote.items or [],  # type: ignore[arg-type]
        discount=quote.discount or {},  # type: ignore[arg-type]
        vat_rate=float(quote.vat_rate) if quote.vat_rate is not None else None,
        currency=quote.currency,
        notes=quote.notes or "",
        quote_number=quote.quote_number,
        issue_date=quote.issue_date,
        customer_snapshot=quote.customer_snapshot,  # type: ignore[arg-type]
        company_snapshot=quote.company_snapshot,  # type: ignore[arg-type]
        totals=quote.totals,  # type: ignore[arg-type]
        created_at=quote.created_at,
        updated_at=quote.updated_at,
    )


def _pdf_response(doc: RenderedDocument) -> Response:
    return Response(
        content=doc.content,
        media_type=doc.media_type,
        headers={"Content-Disposition": f'inline; filename="{doc.filename}"'},
    )


@router.post("", response_model=QuoteOut, status_code=201)
def create_quote(payload: QuoteDraftIn, db: Session = Depends(get_db)) -> QuoteOut:
    quote = create_draft(db, payload.model_dump())
    return _to_dto(quote)


@router.get("", response_model=list[QuoteSummary])
def list_quotes(
    status: Optional[Literal["draft", "finalized"]] = Query(default=None),
    q: Optional[str] = Query(default=None, description="Match quote number or customer name"),
    limit: int = Query(default=50, ge=1, le=200),
    db: Session = Depends(get_db),
) -> list[QuoteSummary]:
    quotes = crud_list_quotes(db, status=status, q=(q or "").strip() or None, limit=limit)
    return [
        QuoteSummary(
            id=int(qt.id),
            status=qt.status,  # type: ignore[arg-type]
            quote_number=qt.quote_number,
            customer_name=(qt.customer or {}).get("name") or "",
            currency=qt.currency,
            grand_total=(qt.totals or {}).get("grand_total"),  # type: ignore[arg-type]
            created_at=qt.created_at,
        )
        for qt in quotes
    ]


@router.post("/totals", response_model=TotalsOut)
def preview_totals(payload: TotalsRequest) -> TotalsOut:
    """Stateless totals for the composer; nothing is stored."""
    body = payload.model_dump()
    ensure_valid("totals", body, DRAFT, message="Invalid totals request")
    totals = compute_totals(body["items"], body["discount"], body["vat_rate"])
    return TotalsOut(**totals.as_json())


@router.get("/{quote_id}", response_model=QuoteOut)
def get_quote(quote_id: int, db: Session = Depends(get_db)) -> QuoteOut:
    return _to_dto(load_quote(db, quote_id))


@router.put("/{quote_id}", response_model=QuoteOut)
def edit_quote(quote_id: int, payload: QuoteDraftIn, db: Session = Depends(get_db)) -> QuoteOut:
    return _to_dto(update_draft(db, quote_id, payload.model_dump()))


@router.post("/{quote_id}/finalize", response_model=FinalizeResponse)
def finalize(quote_id: int, db: Session = Depends(get_db)) -> FinalizeResponse:
    result = finalize_quote(db, quote_id)
    return FinalizeResponse(quote_number=result.quote_number, totals=TotalsOut(**result.totals.as_json()))


@router.get("/{quote_id}/pdf")
def quote_pdf(quote_id: int, db: Session = Depends(get_db)) -> Response:
    view = build_final_view(load_quote(db, quote_id))
    return _pdf_response(render_quote_pdf(view, draft=False))


@router.get("/{quote_id}/preview")
def quote_preview_pdf(quote_id: int, db: Session = Depends(get_db)) -> Response:
    quote = load_quote(db, quote_id)
    view = build_preview_view(db, quote)
    return _pdf_response(render_quote_pdf(view, draft=quote.status != "finalized"))
