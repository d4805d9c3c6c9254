"""Occupied-interval arithmetic on the hour axis.

An event occupies ``[start - pre, start + duration + post)`` where the
buffers come from the syllabus catalog entry matching its code.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from flightline.domain.models import Event

if TYPE_CHECKING:
    from flightline.repos.memory import SyllabusCatalog

Interval = tuple[float, float]

_HHMM = re.compile(r"^(\d{2}):(\d{2})$")


def buffers_for(event: Event, catalog: SyllabusCatalog) -> tuple[float, float]:
    """Return (pre, post) buffer hours; zero when the code is not catalogued."""
    entry = catalog.get(event.syllabus_code)
    if entry is None:
        return 0.0, 0.0
    return entry.pre_flight_time, entry.post_flight_time


def occupied_interval(event: Event, catalog: SyllabusCatalog) -> Interval:
    """Return the half-open span the event occupies including its buffers.

    Callers guarantee ``event.duration > 0``.
    """
    pre, post = buffers_for(event, catalog)
    return event.start_time - pre, event.start_time + event.duration + post


def intervals_overlap(a: Interval, b: Interval) -> bool:
    """Strict half-open overlap: touching endpoints do not overlap."""
    return a[0] < b[1] and a[1] > b[0]


def hhmm_to_hours(value: str | None) -> float | None:
    """Parse ``"HH:MM"`` into fractional hours. Returns None if malformed."""
    if not value:
        return None
    m = _HHMM.match(value.strip())
    if not m:
        return None
    hours, minutes = int(m.group(1)), int(m.group(2))
    if hours > 24 or minutes > 59 or (hours == 24 and minutes):
        return None
    return hours + minutes / 60


def hours_to_hhmm(hours: float) -> str:
    """Format fractional hours as ``"HH:MM"``, rounded to the nearest minute."""
    total = int(hours * 60 + 0.5)
    return f"{total // 60:02d}:{total % 60:02d}"
