"""Which people an event occupies."""

from __future__ import annotations

from flightline.domain.models import CrewRole, Event


def crew(event: Event) -> list[str]:
    """Occupants in lookup order: pilot for solos, else instructor then student,
    followed by group members. Empty fields and repeats are dropped."""
    if event.flight_type == CrewRole.SOLO:
        names = [event.pilot]
    else:
        names = [event.instructor, event.student]
    names.extend(event.group_member_ids)

    ordered: list[str] = []
    for name in names:
        if name and name not in ordered:
            ordered.append(name)
    return ordered


def occupants(event: Event) -> set[str]:
    return set(crew(event))


def shared_occupant(candidate: Event, other: Event) -> str | None:
    """First person of ``candidate`` that ``other`` also occupies, if any."""
    others = occupants(other)
    for name in crew(candidate):
        if name in others:
            return name
    return None


def shared_occupants(first: Event, second: Event) -> list[str]:
    others = occupants(second)
    return [name for name in crew(first) if name in others]


def occupies(event: Event, person: str) -> bool:
    return person in occupants(event)
