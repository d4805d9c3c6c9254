"""Domain events emitted when the committed timeline changes."""

from __future__ import annotations

from pydantic import BaseModel

from flightline.domain.models import EventMove


class EventsAdded(BaseModel):
    """Fired when one or more events are added to the store."""

    event_ids: list[str]


class EventUpdated(BaseModel):
    """Fired when an event's fields are replaced by an edit."""

    event_id: str


class EventsMoved(BaseModel):
    """Fired on every committed start-time change (including drag steps)."""

    updates: list[EventMove]


class EventRemoved(BaseModel):
    event_id: str


class EventsCleared(BaseModel):
    """Fired when the whole day is emptied."""

    event_ids: list[str]


class ConflictSetChanged(BaseModel):
    """Fired when the committed conflict set differs from the previous one."""

    conflicting_event_ids: list[str]
    newly_conflicting: list[str]
    resolved: list[str]
