from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from quoteforge.core.security import admin_secret_auth
from quoteforge.db.crud.settings import get_or_create_settings
from quoteforge.db.session import get_db

router = APIRouter(dependencies=[Depends(admin_secret_auth)])


@router.post("/seed")
def seed(db: Session = Depends(get_db)) -> dict[str, Any]:
    """Make sure the settings singleton exists so the app is usable on a fresh database."""
    settings = get_or_create_settings(db)
    db.commit()
    return {"ok": True, "numbering": settings["numbering"]}
