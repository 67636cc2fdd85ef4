from __future__ import annotations

import math
from datetime import datetime, date, timezone


def iso_now() -> str:
    # Use UTC ISO timestamps for consistency.
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()


def iso_day(day: date | str) -> str:
    if isinstance(day, date):
        return day.isoformat()
    return date.fromisoformat(str(day)).isoformat()


def round2(value: float) -> float:
    # Half-up on the value scaled by 100, e.g. 0.125 -> 0.13
    return math.floor(float(value) * 100 + 0.5) / 100
