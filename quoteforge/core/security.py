"""Shared-secret guard for admin-only writes."""

from __future__ import annotations

import secrets

from fastapi import Header

from quoteforge.core.config import get_settings
from quoteforge.core.errors import ForbiddenError


def admin_secret_auth(x_admin_secret: str | None = Header(default=None)) -> None:
    settings = get_settings()
    if settings.APP_ENV == "development":
        return
    if not settings.ADMIN_SECRET:
        return
    if not x_admin_secret or not secrets.compare_digest(x_admin_secret, settings.ADMIN_SECRET):
        raise ForbiddenError("Forbidden")
