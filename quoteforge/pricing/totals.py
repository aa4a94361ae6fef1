"""Monetary totals for a quote: subtotal, discount, VAT base, VAT and grand total.

Pure functions only. Bad numeric input never raises; it counts as zero so a
half-edited draft can always be previewed.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Iterable, Mapping

# Currency subunits are thousandths (e.g. BHD fils).
MONEY_PLACES = Decimal("0.001")
ZERO = Decimal("0")

DISCOUNT_NONE = "none"
DISCOUNT_PERCENT = "percent"
DISCOUNT_AMOUNT = "amount"


@dataclass(frozen=True)
class Totals:
    subtotal: Decimal
    discount_amount: Decimal
    taxable_base: Decimal
    vat_amount: Decimal
    grand_total: Decimal

    def as_json(self) -> dict[str, str]:
        return {
            "subtotal": str(self.subtotal),
            "discount_amount": str(self.discount_amount),
            "taxable_base": str(self.taxable_base),
            "vat_amount": str(self.vat_amount),
            "grand_total": str(self.grand_total),
        }

    @classmethod
    def from_json(cls, data: Mapping[str, Any] | None) -> Totals:
        data = data or {}
        return cls(
            subtotal=round_money(to_decimal(data.get("subtotal"))),
            discount_amount=round_money(to_decimal(data.get("discount_amount"))),
            taxable_base=round_money(to_decimal(data.get("taxable_base"))),
            vat_amount=round_money(to_decimal(data.get("vat_amount"))),
            grand_total=round_money(to_decimal(data.get("grand_total"))),
        )


def to_decimal(v: Any) -> Decimal:
    if v is None or isinstance(v, bool):
        return ZERO
    try:
        d = v if isinstance(v, Decimal) else Decimal(str(v).strip())
    except (InvalidOperation, ValueError):
        return ZERO
    if not d.is_finite():
        return ZERO
    return d


def round_money(v: Decimal) -> Decimal:
    return v.quantize(MONEY_PLACES, rounding=ROUND_HALF_UP)


def line_amount(item: Mapping[str, Any]) -> Decimal:
    return round_money(to_decimal(item.get("unit_price")) * to_decimal(item.get("quantity")))


def discount_amount_for(subtotal: Decimal, discount: Mapping[str, Any] | None) -> Decimal:
    """Discount in currency, clamped to [0, subtotal]."""
    discount = discount or {}
    kind = discount.get("type") or DISCOUNT_NONE
    value = to_decimal(discount.get("value"))
    if kind == DISCOUNT_PERCENT:
        amount = subtotal * value / Decimal(100)
    elif kind == DISCOUNT_AMOUNT:
        amount = value
    else:
        amount = ZERO
    return max(ZERO, min(amount, subtotal))


def compute_totals(
    items: Iterable[Mapping[str, Any]],
    discount: Mapping[str, Any] | None,
    vat_rate: Any,
) -> Totals:
    items = list(items or [])

    subtotal = sum((line_amount(it) for it in items), ZERO)
    discount_amount = discount_amount_for(subtotal, discount)
    after_discount = max(ZERO, subtotal - discount_amount)

    taxable_subtotal = sum(
        (line_amount(it) for it in items if it.get("is_taxable") is not False), ZERO
    )
    if subtotal <= ZERO:
        taxable_base = ZERO
    elif discount_amount > ZERO:
        # Discount reduces the VAT base in proportion to the taxable share of the order.
        taxable_base = taxable_subtotal - discount_amount * (taxable_subtotal / subtotal)
    else:
        taxable_base = taxable_subtotal
    taxable_base = max(ZERO, min(taxable_base, subtotal))

    vat_amount = max(ZERO, taxable_base * to_decimal(vat_rate))
    grand_total = max(ZERO, after_discount + vat_amount)

    return Totals(
        subtotal=round_money(subtotal),
        discount_amount=round_money(discount_amount),
        taxable_base=round_money(taxable_base),
        vat_amount=round_money(vat_amount),
        grand_total=round_money(grand_total),
    )
