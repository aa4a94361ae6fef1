"""Human-readable quote numbers: ``<prefix>-<year>-<seq:03d>``."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional, Protocol

DEFAULT_PREFIX = "QF"
GLOBAL_SCOPE = "quote"


class CounterStore(Protocol):
    def increment(self, scope: str, *, year: Optional[int] = None) -> int: ...


def scope_key(year_reset: bool, year: int) -> str:
    return f"{GLOBAL_SCOPE}:{year}" if year_reset else GLOBAL_SCOPE


def format_quote_number(prefix: str, year: int, seq: int) -> str:
    return f"{prefix or DEFAULT_PREFIX}-{year}-{seq:03d}"


def draft_number(prefix: str) -> str:
    return f"{prefix or DEFAULT_PREFIX}-DRAFT"


def next_quote_number(
    counters: CounterStore,
    *,
    prefix: str,
    year_reset: bool,
    now: Optional[datetime] = None,
) -> str:
    # The display year is always the current one; only the counter scope depends on year_reset.
    year = (now or datetime.now(timezone.utc)).year
    seq = counters.increment(scope_key(year_reset, year), year=year)
    return format_quote_number(prefix, year, seq)
