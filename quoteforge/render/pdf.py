"""Quote → PDF rendering with reportlab.

Input is a view built by `quoteforge.workflow.views`; totals are printed
exactly as given and never recomputed here. The canvas runs in invariant
mode, so the same view always produces the same bytes.
"""

from __future__ import annotations

import io
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from typing import Any, Mapping

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import ImageReader, simpleSplit
from reportlab.pdfgen import canvas as rl_canvas

from quoteforge.pricing.totals import line_amount, to_decimal

PAGE_W, PAGE_H = A4

FONT = "Helvetica"
FONT_BOLD = "Helvetica-Bold"

INK = colors.HexColor("#111111")
MUTED = colors.HexColor("#666666")
RULE = colors.HexColor("#E5E7EB")
HEAD_BG = colors.HexColor("#F9FAFB")
WATERMARK = colors.HexColor("#0B1220")

DEFAULT_MARGINS = {"top": 24, "right": 24, "bottom": 24, "left": 24}
FOOTER_H = 28
ROW_PAD = 4
LINE_H = 11

# (header, relative width, right-aligned)
COLUMNS = [
    ("Product / Service", 5, False),
    ("Unit Price", 2, True),
    ("Qty", 2, True),
    ("Unit", 1, True),
    ("Line Total", 2, True),
]


@dataclass(frozen=True)
class RenderedDocument:
    content: bytes
    filename: str
    media_type: str = "application/pdf"


def money(value: Any, currency: str) -> str:
    return f"{currency} {to_decimal(value):.3f}"


def plain_number(value: Any) -> str:
    d = to_decimal(value)
    if d == d.to_integral_value():
        return str(d.quantize(Decimal(1)))
    return format(d.normalize(), "f")


def vat_percent(rate: Any) -> str:
    return plain_number((to_decimal(rate) * 100).quantize(Decimal("0.001")))


def document_filename(view: Mapping[str, Any], *, draft: bool) -> str:
    if draft:
        return f"quote-{view.get('id')}-draft.pdf"
    return f"{view.get('quote_number') or 'quote'}.pdf"


class _QuoteCanvas:
    def __init__(self, buf: io.BytesIO, view: Mapping[str, Any], draft: bool) -> None:
        self.view = view
        self.draft = draft
        self.company = view.get("company") or {}
        self.currency = self.company.get("currency") or "BHD"
        margins = DEFAULT_MARGINS | dict(self.company.get("margins") or {})
        self.left = float(margins["left"])
        self.right = PAGE_W - float(margins["right"])
        self.top = PAGE_H - float(margins["top"])
        self.bottom = float(margins["bottom"]) + FOOTER_H
        self.width = self.right - self.left
        self.page = 1

        self.c = rl_canvas.Canvas(buf, pagesize=A4, invariant=1)
        self.c.setTitle(f"Quotation {view.get('quote_number') or ''}".strip())
        self.c.setAuthor(self.company.get("company_name") or "")
        self.y = self.top

    # page furniture

    def _letterhead(self) -> None:
        url = self.company.get("letterhead_url") or ""
        path = Path(url)
        if url and path.is_file():
            self.c.drawImage(ImageReader(str(path)), 0, 0, PAGE_W, PAGE_H, mask="auto")

    def _footer(self) -> None:
        c = self.c
        base = self.bottom - FOOTER_H
        c.setStrokeColor(RULE)
        c.line(self.left, base + FOOTER_H - 8, self.right, base + FOOTER_H - 8)
        c.setFillColor(MUTED)
        c.setFont(FONT, 8)
        footer = self.company.get("footer_text") or ""
        if footer:
            c.drawString(self.left, base + 6, simpleSplit(footer, FONT, 8, self.width - 60)[0])
        c.drawRightString(self.right, base + 6, f"Page {self.page}")

    def _watermark(self) -> None:
        if not self.draft:
            return
        c = self.c
        c.saveState()
        c.translate(PAGE_W / 2, PAGE_H / 2)
        c.rotate(45)
        c.setFillColor(WATERMARK)
        c.setFillAlpha(0.08)
        c.setFont(FONT_BOLD, 64)
        c.drawCentredString(0, 0, "DRAFT PREVIEW")
        c.setFillAlpha(0.1)
        c.setFont(FONT_BOLD, 24)
        c.drawCentredString(0, -36, "DO NOT USE")
        c.restoreState()

    def _start_page(self) -> None:
        self._letterhead()
        self.y = self.top

    def _finish_page(self) -> None:
        self._footer()
        self._watermark()

    def _new_page(self) -> None:
        self._finish_page()
        self.c.showPage()
        self.page += 1
        self._start_page()

    def _ensure_room(self, height: float) -> bool:
        if self.y - height < self.bottom:
            self._new_page()
            return True
        return False

    # content

    def _header(self) -> None:
        c = self.c
        c.setFillColor(INK)
        c.setFont(FONT_BOLD, 20)
        c.drawString(self.left, self.y - 20, "Quotation")
        meta = []
        if self.view.get("quote_number"):
            meta.append(f"# {self.view['quote_number']}")
        if self.view.get("issue_date"):
            meta.append(str(self.view["issue_date"]))
        c.setFillColor(MUTED)
        c.setFont(FONT, 10)
        c.drawString(self.left, self.y - 36, "  •  ".join(meta))

        c.setFillColor(INK)
        lines = [self.company.get("company_name") or ""]
        if self.company.get("vat_no"):
            lines.append(f"VAT: {self.company['vat_no']}")
        lines += list(self.company.get("address") or [])
        y = self.y - 12
        for i, line in enumerate(lines):
            c.setFont(FONT_BOLD if i == 0 else FONT, 10 if i == 0 else 9)
            c.drawRightString(self.right, y, line)
            y -= LINE_H
        self.y = min(self.y - 52, y - 6)

    def _bill_to(self) -> None:
        customer = self.view.get("customer") or {}
        lines = [customer.get("name") or "-"]
        if customer.get("vat_no"):
            lines.append(f"VAT: {customer['vat_no']}")
        lines += list(customer.get("address_lines") or [])
        for key in ("contact_name", "email", "phone"):
            if customer.get(key):
                lines.append(str(customer[key]))

        c = self.c
        c.setFillColor(MUTED)
        c.setFont(FONT, 9)
        c.drawString(self.left, self.y - 10, "Bill To")
        box_h = ROW_PAD * 2 + LINE_H * len(lines)
        top = self.y - 16
        c.setStrokeColor(RULE)
        c.roundRect(self.left, top - box_h, self.width / 2, box_h, 4, stroke=1, fill=0)
        c.setFillColor(INK)
        c.setFont(FONT, 10)
        y = top - ROW_PAD - 9
        for line in lines:
            c.drawString(self.left + 8, y, line)
            y -= LINE_H
        self.y = top - box_h - 14

    def _column_edges(self) -> list[tuple[float, float, bool]]:
        total = sum(w for _, w, _ in COLUMNS)
        edges = []
        x = self.left
        for _, w, right in COLUMNS:
            span = self.width * w / total
            edges.append((x, span, right))
            x += span
        return edges

    def _table_header(self) -> None:
        c = self.c
        h = LINE_H + ROW_PAD * 2
        c.setFillColor(HEAD_BG)
        c.setStrokeColor(RULE)
        c.rect(self.left, self.y - h, self.width, h, stroke=1, fill=1)
        c.setFillColor(INK)
        c.setFont(FONT_BOLD, 9)
        for (title, _, _), (x, span, right) in zip(COLUMNS, self._column_edges()):
            if right:
                c.drawRightString(x + span - 6, self.y - h + ROW_PAD + 2, title)
            else:
                c.drawString(x + 6, self.y - h + ROW_PAD + 2, title)
        self.y -= h

    def _item_row(self, item: Mapping[str, Any]) -> None:
        label = item.get("product_name") or "-"
        if item.get("description"):
            label += f" — {item['description']}"
        if item.get("is_taxable") is False:
            label += " (Non-taxable)"

        edges = self._column_edges()
        first_x, first_span, _ = edges[0]
        wrapped = simpleSplit(label, FONT, 9, first_span - 12) or [""]
        h = ROW_PAD * 2 + LINE_H * len(wrapped)
        if self._ensure_room(h):
            self._table_header()

        cells = [
            money(item.get("unit_price"), self.currency),
            plain_number(item.get("quantity")),
            str(item.get("unit_label") or ""),
            money(line_amount(item), self.currency),
        ]
        c = self.c
        c.setFillColor(INK)
        c.setFont(FONT, 9)
        y = self.y - ROW_PAD - 8
        for line in wrapped:
            c.drawString(first_x + 6, y, line)
            y -= LINE_H
        for text, (x, span, _) in zip(cells, edges[1:]):
            c.drawRightString(x + span - 6, self.y - ROW_PAD - 8, text)
        self.y -= h
        c.setStrokeColor(RULE)
        c.line(self.left, self.y, self.right, self.y)

    def _items(self) -> None:
        self._ensure_room(LINE_H * 3)
        self._table_header()
        for item in self.view.get("items") or []:
            self._item_row(item)
        self.y -= 10

    def _totals(self) -> None:
        totals = self.view.get("totals") or {}
        rows: list[tuple[str, str, bool]] = [("Subtotal", money(totals.get("subtotal"), self.currency), False)]
        if to_decimal(totals.get("discount_amount")) > 0:
            rows.append(("Discount", "- " + money(totals.get("discount_amount"), self.currency), False))
        rows.append(("Taxable Base", money(totals.get("taxable_base"), self.currency), False))
        rows.append(
            (f"VAT ({vat_percent(self.company.get('vat_rate'))}%)", money(totals.get("vat_amount"), self.currency), False)
        )
        rows.append(("Grand Total", money(totals.get("grand_total"), self.currency), True))

        block_w = 220
        x0 = self.right - block_w
        self._ensure_room(LINE_H * (len(rows) + 2))
        c = self.c
        c.setStrokeColor(RULE)
        c.line(x0, self.y, self.right, self.y)
        self.y -= 14
        for label, value, grand in rows:
            if grand:
                c.line(x0, self.y + 8, self.right, self.y + 8)
                self.y -= 6
            c.setFillColor(INK)
            c.setFont(FONT_BOLD if grand else FONT, 11 if grand else 10)
            c.drawString(x0, self.y, label)
            c.drawRightString(self.right, self.y, value)
            self.y -= LINE_H + 2
        self.y -= 8

    def _notes(self) -> None:
        notes = self.view.get("notes") or ""
        if not notes:
            return
        lines: list[str] = []
        for para in notes.splitlines():
            lines += simpleSplit(para, FONT, 9, self.width) or [""]
        self._ensure_room(LINE_H * 2)
        c = self.c
        c.setFillColor(MUTED)
        c.setFont(FONT, 9)
        c.drawString(self.left, self.y, "Notes")
        self.y -= LINE_H + 2
        c.setFillColor(INK)
        for line in lines:
            self._ensure_room(LINE_H)
            c.setFont(FONT, 9)
            c.setFillColor(INK)
            c.drawString(self.left, self.y, line)
            self.y -= LINE_H

    def render(self) -> None:
        self._start_page()
        self._header()
        self._bill_to()
        self._items()
        self._totals()
        self._notes()
        self._finish_page()
        self.c.showPage()
        self.c.save()


def render_quote_pdf(view: Mapping[str, Any], *, draft: bool = False) -> RenderedDocument:
    buf = io.BytesIO()
    _QuoteCanvas(buf, view, draft).render()
    return RenderedDocument(content=buf.getvalue(), filename=document_filename(view, draft=draft))
