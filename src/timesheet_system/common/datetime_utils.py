from __future__ import annotations

from datetime import date, datetime

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime((value or "").strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"Invalid date (expected YYYY-MM-DD): {value!r}")


def now_local() -> datetime:
    """Current local time, truncated to whole seconds.

    Note: Wrapped so tests can patch/mock easier. DATETIME columns and the
    breaks JSON must hold the same second-precision punches.
    """
    return datetime.now().replace(microsecond=0)
