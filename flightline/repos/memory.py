"""In-memory repositories for the day's events and the data derived from them."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import date

from flightline.config import TimelineConfig
from flightline.domain.bus import EventBus
from flightline.domain.errors import (
    DuplicateEventError,
    EventNotFoundError,
    EventOutOfBoundsError,
)
from flightline.domain.events import (
    EventRemoved,
    EventsAdded,
    EventsCleared,
    EventsMoved,
    EventUpdated,
)
from flightline.domain.models import (
    ConflictPair,
    Event,
    EventMove,
    SyllabusEntry,
    UnavailabilityPeriod,
)
from flightline.services.intervals import hours_to_hhmm

logger = logging.getLogger(__name__)

# Float slack for spans that end exactly on a day boundary after snapping.
_BOUNDS_TOLERANCE = 1e-9


class SyllabusCatalog:
    """Dict-backed, read-mostly catalog of syllabus entries keyed by code."""

    def __init__(self, entries: Iterable[SyllabusEntry] = ()) -> None:
        self._store: dict[str, SyllabusEntry] = {}
        for entry in entries:
            self.add(entry)

    def add(self, entry: SyllabusEntry) -> None:
        self._store[entry.id] = entry

    def get(self, code: str) -> SyllabusEntry | None:
        return self._store.get(code)

    def list_all(self) -> list[SyllabusEntry]:
        return list(self._store.values())

    def replace_all(self, entries: Iterable[SyllabusEntry]) -> None:
        self._store = {entry.id: entry for entry in entries}

    def __contains__(self, code: object) -> bool:
        return code in self._store

    def __len__(self) -> int:
        return len(self._store)


class EventStore:
    """Owner of the committed event list for one day.

    Every mutation goes through this class and publishes a domain event on
    the bus, which is how the committed conflict set is kept current.
    """

    def __init__(self, bus: EventBus, config: TimelineConfig | None = None) -> None:
        self.bus = bus
        self.config = config or TimelineConfig()
        self._store: dict[str, Event] = {}

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, event_id: str) -> Event | None:
        return self._store.get(event_id)

    def require(self, event_id: str) -> Event:
        event = self._store.get(event_id)
        if event is None:
            raise EventNotFoundError(event_id)
        return event

    def list_all(self) -> list[Event]:
        return list(self._store.values())

    def list_sorted(self) -> list[Event]:
        return sorted(self._store.values(), key=lambda e: (e.start_time, e.id))

    def list_formation(self, formation_id: str) -> list[Event]:
        """Return the members of a formation sortie, lead first."""
        members = [e for e in self._store.values() if e.formation_id == formation_id]
        return sorted(members, key=lambda e: e.formation_position or 0)

    def __len__(self) -> int:
        return len(self._store)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_events(self, events: Iterable[Event]) -> list[Event]:
        events = list(events)
        seen: set[str] = set()
        for event in events:
            if event.id in self._store or event.id in seen:
                raise DuplicateEventError(event.id)
            seen.add(event.id)
            self._check_bounds(event.id, event.start_time, event.duration)

        for event in events:
            self._store[event.id] = event
        logger.info("Added %d event(s): %s", len(events), ", ".join(e.id for e in events))
        self.bus.publish(EventsAdded(event_ids=[e.id for e in events]))
        return events

    def update_event(self, event: Event) -> Event:
        """Replace an existing event with an edited copy."""
        self.require(event.id)
        self._check_bounds(event.id, event.start_time, event.duration)
        self._store[event.id] = event
        logger.info("Updated event %s", event.id)
        self.bus.publish(EventUpdated(event_id=event.id))
        return event

    def move_events(self, updates: Iterable[EventMove]) -> list[Event]:
        """Apply start-time changes atomically and publish one EventsMoved."""
        updates = list(updates)
        moved: list[Event] = []
        for update in updates:
            current = self.require(update.event_id)
            self._check_bounds(current.id, update.new_start_time, current.duration)
            moved.append(current.model_copy(update={"start_time": update.new_start_time}))

        for event in moved:
            self._store[event.id] = event
            logger.debug("Moved %s to %s", event.id, hours_to_hhmm(event.start_time))
        self.bus.publish(EventsMoved(updates=updates))
        return moved

    def remove_event(self, event_id: str) -> Event:
        event = self._store.pop(event_id, None)
        if event is None:
            raise EventNotFoundError(event_id)
        logger.info("Removed event %s", event_id)
        self.bus.publish(EventRemoved(event_id=event_id))
        return event

    def clear(self) -> None:
        """Drop every event; used to reset a day."""
        removed = list(self._store)
        self._store.clear()
        logger.info("Cleared %d event(s)", len(removed))
        self.bus.publish(EventsCleared(event_ids=removed))

    def _check_bounds(self, event_id: str, start: float, duration: float) -> None:
        cfg = self.config
        end = start + duration
        if start < cfg.day_start - _BOUNDS_TOLERANCE or end > cfg.day_end + _BOUNDS_TOLERANCE:
            raise EventOutOfBoundsError(event_id, start, end, cfg.day_start, cfg.day_end)


class ConflictStateRepository:
    """Holds the committed conflict set last computed by the validator."""

    def __init__(self) -> None:
        self._ids: set[str] = set()
        self._pairs: list[ConflictPair] = []

    def replace(self, ids: set[str], pairs: list[ConflictPair]) -> tuple[set[str], set[str]]:
        """Store a new result. Returns (newly conflicting, resolved) ids."""
        added = ids - self._ids
        resolved = self._ids - ids
        self._ids = set(ids)
        self._pairs = list(pairs)
        return added, resolved

    @property
    def conflicting_ids(self) -> set[str]:
        return set(self._ids)

    @property
    def pairs(self) -> list[ConflictPair]:
        return list(self._pairs)

    def is_conflicting(self, event_id: str) -> bool:
        return event_id in self._ids

    def flags(self, event_ids: Iterable[str]) -> dict[str, bool]:
        return {event_id: event_id in self._ids for event_id in event_ids}

    def clear(self) -> None:
        self._ids.clear()
        self._pairs.clear()


class UnavailabilityRepository:
    """List-backed store for UnavailabilityPeriod instances."""

    def __init__(self) -> None:
        self._periods: list[UnavailabilityPeriod] = []

    def add(self, period: UnavailabilityPeriod) -> None:
        self._periods.append(period)

    def list_all(self) -> list[UnavailabilityPeriod]:
        return list(self._periods)

    def list_for_day(self, day: date) -> list[UnavailabilityPeriod]:
        return [p for p in self._periods if p.start_date <= day < p.end_date]

    def list_for_person(self, person: str) -> list[UnavailabilityPeriod]:
        return [p for p in self._periods if p.person == person]
