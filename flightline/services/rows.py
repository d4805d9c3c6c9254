"""Row views of a day: one row per resource or per person, ordered by start."""

from __future__ import annotations

from collections.abc import Iterable

from flightline.domain.models import Event
from flightline.services.personnel import crew, occupies


def _by_start(events: Iterable[Event]) -> list[Event]:
    return sorted(events, key=lambda e: (e.start_time, e.id))


def rows_by_resource(
    events: Iterable[Event], resources: Iterable[str] | None = None
) -> dict[str, list[Event]]:
    """Group events by ``resource_id``.

    When ``resources`` is given the result has exactly those rows, in that
    order, and events on other resources are left out. Otherwise rows appear
    in first-seen order. Unassigned events (empty resource id) never get a row.
    """
    events = list(events)
    if resources is not None:
        rows: dict[str, list[Event]] = {r: [] for r in resources}
    else:
        rows = {}
        for event in events:
            if event.resource_id:
                rows.setdefault(event.resource_id, [])

    for event in events:
        if event.resource_id in rows:
            rows[event.resource_id].append(event)
    return {key: _by_start(row) for key, row in rows.items()}


def rows_by_person(
    events: Iterable[Event], people: Iterable[str] | None = None
) -> dict[str, list[Event]]:
    """Group events under every person they occupy.

    An event with two occupants appears in both rows. When ``people`` is
    omitted the rows are everyone occupied by at least one event.
    """
    events = list(events)
    if people is None:
        names: list[str] = []
        for event in events:
            for name in crew(event):
                if name not in names:
                    names.append(name)
        people = names
    return {
        person: _by_start(e for e in events if occupies(e, person)) for person in people
    }


def row_index(rows: dict[str, list[Event]], key: str) -> int | None:
    """Position of ``key`` among the rows, or None when it has no row."""
    for index, row_key in enumerate(rows):
        if row_key == key:
            return index
    return None


def unassigned(events: Iterable[Event]) -> list[Event]:
    return _by_start(e for e in events if not e.resource_id)
