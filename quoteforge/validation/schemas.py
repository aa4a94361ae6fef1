"""JSON Schemas for stored documents, in a lenient (draft) and a strict (finalize) mode.

Both modes describe the same shape; strict mode only tightens the fields a
finalized quote cannot do without.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from functools import lru_cache
from typing import Any, Literal

from jsonschema import Draft202012Validator, ValidationError, validators

from quoteforge.core.errors import ValidationFailedError

Mode = Literal["draft", "strict"]
Kind = Literal["customer", "item", "quote", "settings", "totals"]

DRAFT: Mode = "draft"
STRICT: Mode = "strict"

_NON_NEGATIVE = {"type": "number", "minimum": 0}

# Quote.vat_rate is Numeric(6, 4); finer rates would be rounded on save.
VAT_RATE_PLACES = 4
_VAT_RATE = {"type": "number", "minimum": 0, "maxDecimalPlaces": VAT_RATE_PLACES}


def _text(strict: bool) -> dict:
    return {"type": "string", "minLength": 1} if strict else {"type": "string"}


def customer_schema(mode: Mode) -> dict:
    strict = mode == STRICT
    return {
        "type": "object",
        "required": ["name"],
        "properties": {
            "name": _text(strict),
            "vat_no": {"type": "string"},
            "address_lines": {"type": "array", "items": {"type": "string"}},
            "contact_name": {"type": "string"},
            "phone": {"type": "string"},
            "email": {"type": "string"},
        },
    }


def item_schema(mode: Mode) -> dict:
    strict = mode == STRICT
    required = ["product_name"]
    if strict:
        required += ["unit_price", "quantity", "unit_label", "is_taxable"]
    return {
        "type": "object",
        "required": required,
        "properties": {
            "product_id": {"type": ["string", "integer", "null"]},
            "product_name": _text(strict),
            "description": {"type": ["string", "null"]},
            "unit_price": _NON_NEGATIVE,
            "quantity": _NON_NEGATIVE,
            "unit_label": _text(strict),
            "is_taxable": {"type": "boolean"},
        },
    }


DISCOUNT_SCHEMA: dict = {
    "type": "object",
    "required": ["type", "value"],
    "properties": {
        "type": {"enum": ["none", "percent", "amount"]},
        "value": _NON_NEGATIVE,
    },
}


def quote_schema(mode: Mode) -> dict:
    return {
        "type": "object",
        "required": ["customer", "items", "discount", "currency"],
        "properties": {
            "customer": customer_schema(mode),
            "items": {"type": "array", "items": item_schema(mode)},
            "discount": DISCOUNT_SCHEMA,
            "vat_rate": {**_VAT_RATE, "type": ["number", "null"]},
            "currency": {"type": "string", "minLength": 1},
            "notes": {"type": ["string", "null"]},
        },
    }


def settings_schema(mode: Mode) -> dict:
    strict = mode == STRICT
    margin = {"type": "number", "minimum": 0}
    return {
        "type": "object",
        "required": ["company", "letterhead", "numbering"],
        "properties": {
            "company": {
                "type": "object",
                "required": ["name", "currency", "default_vat_rate"],
                "properties": {
                    "name": _text(strict),
                    "vat_no": {"type": "string"},
                    "address": {"type": "array", "items": {"type": "string"}},
                    "footer_text": {"type": "string"},
                    "currency": {"type": "string", "minLength": 1},
                    "default_vat_rate": _VAT_RATE,
                },
            },
            "letterhead": {
                "type": "object",
                "properties": {
                    "url": {"type": "string"},
                    "margins": {
                        "type": "object",
                        "required": ["top", "right", "bottom", "left"],
                        "properties": {k: margin for k in ("top", "right", "bottom", "left")},
                    },
                },
            },
            "numbering": {
                "type": "object",
                "required": ["prefix", "year_reset"],
                "properties": {
                    "prefix": {"type": "string", "minLength": 1},
                    "year_reset": {"type": "boolean"},
                },
            },
        },
    }


def totals_schema(mode: Mode) -> dict:
    """Stateless totals request: the pricing half of a quote."""
    return {
        "type": "object",
        "properties": {
            "items": {"type": "array", "items": item_schema(mode)},
            "discount": DISCOUNT_SCHEMA,
            "vat_rate": _VAT_RATE,
        },
    }


_FACTORIES = {
    "customer": customer_schema,
    "item": item_schema,
    "quote": quote_schema,
    "settings": settings_schema,
    "totals": totals_schema,
}


def _max_decimal_places(validator: Any, places: int, instance: Any, schema: dict) -> Any:
    if not validator.is_type(instance, "number"):
        return
    try:
        exponent = Decimal(str(instance)).as_tuple().exponent
    except InvalidOperation:
        return
    if isinstance(exponent, int) and -exponent > places:
        yield ValidationError(f"{instance!r} has more than {places} decimal places")


QuoteForgeValidator = validators.extend(Draft202012Validator, {"maxDecimalPlaces": _max_decimal_places})


@lru_cache(maxsize=None)
def get_validator(kind: Kind, mode: Mode) -> Any:
    return QuoteForgeValidator(_FACTORIES[kind](mode))


def _format_error(err: Any, prefix: str) -> str:
    parts = [prefix] if prefix else []
    parts += [str(p) for p in err.absolute_path]
    location = ".".join(parts) or "<root>"
    return f"{location}: {err.message}"


def validate(kind: Kind, document: Any, mode: Mode = STRICT, *, prefix: str = "") -> list[str]:
    """Return field-level error messages; an empty list means the document is valid."""
    validator = get_validator(kind, mode)
    errors = sorted(validator.iter_errors(document), key=lambda e: list(map(str, e.absolute_path)))
    return [_format_error(e, prefix) for e in errors]


def ensure_valid(kind: Kind, document: Any, mode: Mode = STRICT, *, message: str | None = None) -> None:
    errors = validate(kind, document, mode)
    if errors:
        raise ValidationFailedError(message or f"Invalid {kind}", errors)
