from __future__ import annotations

from datetime import datetime, time, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable

Clock = Callable[[], datetime]


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def minutes_since_midnight(value: datetime | time) -> int:
    """Whole minutes since midnight; seconds are ignored."""
    return value.hour * 60 + value.minute


def round_hours(span: timedelta) -> float:
    """Hours in ``span`` rounded half-up to 2 decimals (0.025 -> 0.03)."""
    hours = Decimal(str(span.total_seconds())) / Decimal(3600)
    return float(hours.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def format_hms(span: timedelta) -> str:
    """Zero-padded ``HH:MM:SS``; hours are not wrapped at 24, negatives clamp to zero."""
    total = max(int(span.total_seconds()), 0)
    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def parse_iso_datetime(value: str) -> datetime:
    return datetime.fromisoformat(value)
