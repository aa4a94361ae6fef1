"""Company settings singleton.

Readers get a fully populated document: stored values merged over the
built-in defaults, so a fresh install can still preview and finalize.
"""

from __future__ import annotations

import copy
from typing import Any, Optional

from sqlalchemy.orm import Session

from quoteforge.db.models import CompanySettings

SETTINGS_ID = 1

DEFAULT_SETTINGS: dict[str, Any] = {
    "company": {
        "name": "My Company",
        "vat_no": "",
        "address": [],
        "footer_text": "",
        "currency": "BHD",
        "default_vat_rate": 0.1,
    },
    "letterhead": {
        "url": "",
        "margins": {"top": 24, "right": 24, "bottom": 24, "left": 24},
    },
    "numbering": {"prefix": "QF", "year_reset": True},
}

SECTIONS = ("company", "letterhead", "numbering")


def default_settings() -> dict[str, Any]:
    return copy.deepcopy(DEFAULT_SETTINGS)


def _merged(row: CompanySettings | None) -> dict[str, Any]:
    doc = default_settings()
    if row is None:
        return doc
    for section in SECTIONS:
        stored = getattr(row, section) or {}
        doc[section].update(copy.deepcopy(stored))
    margins = DEFAULT_SETTINGS["letterhead"]["margins"] | (doc["letterhead"].get("margins") or {})
    doc["letterhead"]["margins"] = dict(margins)
    return doc


def get_settings_row(db: Session) -> Optional[CompanySettings]:
    return db.query(CompanySettings).filter(CompanySettings.id == SETTINGS_ID).one_or_none()


def load_company_settings(db: Session) -> dict[str, Any]:
    """Read-only view of the settings; never writes."""
    return _merged(get_settings_row(db))


def get_or_create_settings(db: Session) -> dict[str, Any]:
    row = get_settings_row(db)
    if row is None:
        defaults = default_settings()
        row = CompanySettings(id=SETTINGS_ID, **defaults)
        db.add(row)
        db.flush()
    return _merged(row)


def save_settings(db: Session, doc: dict[str, Any]) -> dict[str, Any]:
    row = get_settings_row(db)
    if row is None:
        row = CompanySettings(id=SETTINGS_ID, **{s: copy.deepcopy(doc[s]) for s in SECTIONS})
        db.add(row)
    else:
        for section in SECTIONS:
            setattr(row, section, copy.deepcopy(doc[section]))
    db.flush()
    return _merged(row)
