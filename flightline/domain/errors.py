"""Exceptions raised by the event store and the resource assignment helpers."""

from __future__ import annotations


class ScheduleError(Exception):
    """Base class for scheduling errors surfaced to callers."""


class EventNotFoundError(ScheduleError, KeyError):
    def __init__(self, event_id: str) -> None:
        self.event_id = event_id
        super().__init__(f"Event {event_id!r} not found")

    def __str__(self) -> str:
        return self.args[0]


class DuplicateEventError(ScheduleError, ValueError):
    def __init__(self, event_id: str) -> None:
        self.event_id = event_id
        super().__init__(f"Event {event_id!r} already exists")


class EventOutOfBoundsError(ScheduleError, ValueError):
    """Raised when an event's span does not fit inside the day bounds."""

    def __init__(
        self, event_id: str, start: float, end: float, day_start: float, day_end: float
    ) -> None:
        self.event_id = event_id
        self.start = start
        self.end = end
        super().__init__(
            f"Event {event_id!r} spans [{start}, {end}) "
            f"outside the day [{day_start}, {day_end}]"
        )


class NoResourceAvailableError(ScheduleError, ValueError):
    def __init__(self, event_id: str, resources: list[str]) -> None:
        self.event_id = event_id
        self.resources = resources
        super().__init__(
            f"No free resource for event {event_id!r} among {len(resources)} rows"
        )
