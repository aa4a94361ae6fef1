from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from quoteforge.core.security import admin_secret_auth
from quoteforge.db.crud.settings import get_or_create_settings, save_settings
from quoteforge.db.session import get_db
from quoteforge.schemas.dto import SettingsDoc
from quoteforge.validation.schemas import STRICT, ensure_valid

router = APIRouter()


@router.get("", response_model=SettingsDoc)
def read_settings(db: Session = Depends(get_db)) -> SettingsDoc:
    doc = get_or_create_settings(db)
    db.commit()
    return SettingsDoc(**doc)


@router.put("", response_model=SettingsDoc, dependencies=[Depends(admin_secret_auth)])
def write_settings(payload: SettingsDoc, db: Session = Depends(get_db)) -> SettingsDoc:
    data = payload.model_dump()
    ensure_valid("settings", data, STRICT, message="Invalid settings")
    doc = save_settings(db, data)
    db.commit()
    return SettingsDoc(**doc)
