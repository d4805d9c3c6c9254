"""Domain models for the training-event timeline."""

from __future__ import annotations

import uuid
from datetime import date
from enum import StrEnum

from pydantic import BaseModel, Field, model_validator


class EventType(StrEnum):
    FLIGHT = "flight"
    FTD = "ftd"
    GROUND = "ground"


class CrewRole(StrEnum):
    DUAL = "Dual"
    SOLO = "Solo"


class MissingSyllabusPolicy(StrEnum):
    """What to do with an event whose syllabus code is not in the catalog."""

    ZERO_BUFFER = "zero_buffer"
    SKIP = "skip"


class DragState(StrEnum):
    IDLE = "idle"
    DRAGGING = "dragging"


def _new_id() -> str:
    return str(uuid.uuid4())


# ---------------------------------------------------------------------------
# Core domain models
# ---------------------------------------------------------------------------


class SyllabusEntry(BaseModel):
    """Catalog entry giving the buffer hours around an event of this code."""

    id: str
    pre_flight_time: float = Field(default=0.0, ge=0)
    post_flight_time: float = Field(default=0.0, ge=0)


class Event(BaseModel):
    id: str = Field(default_factory=_new_id)
    type: EventType = EventType.FLIGHT
    syllabus_code: str
    start_time: float
    duration: float = Field(gt=0)
    resource_id: str = ""
    flight_type: CrewRole = CrewRole.DUAL
    instructor: str | None = None
    student: str | None = None
    pilot: str | None = None
    group: str | None = None
    group_member_ids: list[str] = Field(default_factory=list)
    formation_id: str | None = None
    formation_position: int | None = Field(default=None, ge=1)
    callsign: str | None = None
    area: str | None = None
    locked: bool = False

    @property
    def end_time(self) -> float:
        return self.start_time + self.duration

    @model_validator(mode="after")
    def _formation_fields_paired(self) -> Event:
        if self.formation_position is not None and self.formation_id is None:
            raise ValueError("formation_position requires formation_id")
        return self


class EventMove(BaseModel):
    """A single committed start-time change."""

    event_id: str
    new_start_time: float


class Conflict(BaseModel):
    """First conflict found for a candidate event."""

    candidate_id: str
    conflicting_event: Event
    shared_identity: str


class ConflictPair(BaseModel):
    """Two committed events that double-book at least one person."""

    first_id: str
    second_id: str
    shared_identities: list[str]


class ConflictPreview(BaseModel):
    """Transient highlight shown while a tile is being dragged."""

    conflicting_event_id: str
    person_name: str


class DragSession(BaseModel):
    event_id: str
    x_offset: float
    row_index: int | None = None
    snapshot: Event
    last_snapped: float | None = None


class BufferBarFlags(BaseModel):
    """Pre/post buffer bars of one event within a row, and whether each
    runs into the neighbouring event's buffer."""

    event_id: str
    pre_time: float
    post_time: float
    pre_conflict: bool = False
    post_conflict: bool = False


class UnavailabilityPeriod(BaseModel):
    """A person is unavailable for start_date <= day < end_date."""

    id: str = Field(default_factory=_new_id)
    person: str
    start_date: date
    end_date: date
    reason: str | None = None

    @model_validator(mode="after")
    def _end_after_start(self) -> UnavailabilityPeriod:
        if self.end_date <= self.start_date:
            raise ValueError("end_date must be after start_date")
        return self


# ---------------------------------------------------------------------------
# Request / Response DTOs
# ---------------------------------------------------------------------------


class MoveEventsRequest(BaseModel):
    updates: list[EventMove] = Field(min_length=1)


class ConflictReport(BaseModel):
    conflicting_event_ids: list[str]
    pairs: list[ConflictPair] = Field(default_factory=list)


class DragStartRequest(BaseModel):
    event_id: str
    pointer_x: float
    tile_left: float
    button: int = 0
    row_index: int | None = None
    zoom: float | None = Field(default=None, gt=0)


class DragMoveRequest(BaseModel):
    pointer_x: float


class DragStatus(BaseModel):
    state: DragState
    event_id: str | None = None
    start_time: float | None = None
    preview: ConflictPreview | None = None


class TileClick(BaseModel):
    event_id: str
    open_details: bool


class FormationRequest(BaseModel):
    template: Event
    count: int = Field(default=2, ge=2)
    callsign_prefix: str = "MERL"
    resources: list[str] = Field(min_length=1)
