"""Flag events that book someone who is recorded as unavailable that day."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date

from flightline.domain.models import Event, UnavailabilityPeriod
from flightline.services.personnel import crew


def unavailable_people(periods: Iterable[UnavailabilityPeriod], day: date) -> set[str]:
    return {p.person for p in periods if p.start_date <= day < p.end_date}


def compute_unavailability_conflicts(
    events: Iterable[Event],
    periods: Iterable[UnavailabilityPeriod],
    day: date,
) -> dict[str, list[str]]:
    """Map event id -> unavailable people it books, for events with any."""
    away = unavailable_people(periods, day)
    if not away:
        return {}

    result: dict[str, list[str]] = {}
    for event in events:
        names = [name for name in crew(event) if name in away]
        if names:
            result[event.id] = names
    return result
