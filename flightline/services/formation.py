"""Formation sorties and placing unassigned events on free resource rows."""

from __future__ import annotations

import uuid
from collections.abc import Iterable
from typing import TYPE_CHECKING

from flightline.domain.errors import NoResourceAvailableError
from flightline.domain.models import CrewRole, Event, MissingSyllabusPolicy
from flightline.services.conflicts import is_checkable
from flightline.services.intervals import intervals_overlap, occupied_interval

if TYPE_CHECKING:
    from flightline.repos.memory import SyllabusCatalog


def build_formation(template: Event, count: int, callsign_prefix: str) -> list[Event]:
    """Create ``count`` linked flight events from one template.

    Each member gets its own id, the shared formation id, a position from 1
    and the callsign ``<prefix><position>``. Members are crewed solo by
    their callsign, so the aircraft of one sortie never double-book each
    other. Resource ids are left empty for ``assign_resources``.
    """
    if count < 2:
        raise ValueError("a formation needs at least two aircraft")

    formation_id = str(uuid.uuid4())
    members: list[Event] = []
    for position in range(1, count + 1):
        callsign = f"{callsign_prefix}{position}"
        members.append(
            template.model_copy(
                update={
                    "id": f"{formation_id}-{position}",
                    "resource_id": "",
                    "formation_id": formation_id,
                    "formation_position": position,
                    "callsign": callsign,
                    "flight_type": CrewRole.SOLO,
                    "pilot": callsign,
                    "instructor": None,
                    "student": None,
                    "group": None,
                    "group_member_ids": [],
                },
            )
        )
    return members


def find_available_resource_id(
    event: Event,
    resources: Iterable[str],
    events: Iterable[Event],
    catalog: SyllabusCatalog,
    policy: MissingSyllabusPolicy = MissingSyllabusPolicy.ZERO_BUFFER,
) -> str | None:
    """First resource whose row has nothing overlapping the event's span."""
    events = [e for e in events if e.id != event.id]
    span = occupied_interval(event, catalog)
    for resource in resources:
        busy = any(
            intervals_overlap(span, occupied_interval(other, catalog))
            for other in events
            if other.resource_id == resource and is_checkable(other, catalog, policy)
        )
        if not busy:
            return resource
    return None


def assign_resources(
    new_events: Iterable[Event],
    resources: Iterable[str],
    existing: Iterable[Event],
    catalog: SyllabusCatalog,
    policy: MissingSyllabusPolicy = MissingSyllabusPolicy.ZERO_BUFFER,
) -> list[Event]:
    """Return copies of ``new_events`` with empty resource ids filled in.

    Events are placed in order, so each one sees the rows taken by the ones
    before it. Raises NoResourceAvailableError when every row is busy.
    """
    resources = list(resources)
    placed = list(existing)
    assigned: list[Event] = []
    for event in new_events:
        if not event.resource_id:
            resource = find_available_resource_id(event, resources, placed, catalog, policy)
            if resource is None:
                raise NoResourceAvailableError(event.id, resources)
            event = event.model_copy(update={"resource_id": resource})
        placed.append(event)
        assigned.append(event)
    return assigned
