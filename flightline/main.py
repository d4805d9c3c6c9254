"""FastAPI application: a thin HTTP surface over the timeline engine."""

from __future__ import annotations

import logging
from datetime import date
from typing import NoReturn

from fastapi import FastAPI, HTTPException

from flightline.config import TimelineConfig
from flightline.domain.bus import EventBus
from flightline.domain.errors import EventNotFoundError, ScheduleError
from flightline.domain.handlers import HandlerRegistry
from flightline.domain.models import (
    BufferBarFlags,
    ConflictReport,
    DragMoveRequest,
    DragStartRequest,
    DragStatus,
    Event,
    FormationRequest,
    MoveEventsRequest,
    SyllabusEntry,
    TileClick,
    UnavailabilityPeriod,
)
from flightline.repos.memory import (
    ConflictStateRepository,
    EventStore,
    SyllabusCatalog,
    UnavailabilityRepository,
)
from flightline.services.buffers import buffer_flags_by_row
from flightline.services.drag import DragController
from flightline.services.formation import assign_resources, build_formation
from flightline.services.rows import rows_by_person, rows_by_resource
from flightline.services.unavailability import compute_unavailability_conflicts

config = TimelineConfig.from_env()
logging.basicConfig(level=config.log_level.upper())
logger = logging.getLogger(__name__)

app = FastAPI(title="Flightline Timeline Engine")

# ── Singletons (created at import time for simplicity) ────────────────
event_bus = EventBus()
event_store = EventStore(event_bus, config)
syllabus_catalog = SyllabusCatalog()
conflict_repo = ConflictStateRepository()
unavailability_repo = UnavailabilityRepository()

handler_registry = HandlerRegistry(
    bus=event_bus,
    store=event_store,
    catalog=syllabus_catalog,
    conflict_repo=conflict_repo,
)
drag_controller = DragController(event_store, syllabus_catalog, config)


def _raise_http(exc: ScheduleError) -> NoReturn:
    if isinstance(exc, EventNotFoundError):
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    raise HTTPException(status_code=400, detail=str(exc)) from exc


def _drag_status() -> DragStatus:
    session = drag_controller.session
    if session is None:
        return DragStatus(state=drag_controller.state)
    current = event_store.get(session.event_id)
    return DragStatus(
        state=drag_controller.state,
        event_id=session.event_id,
        start_time=current.start_time if current else None,
        preview=drag_controller.preview,
    )


# ── Events ────────────────────────────────────────────────────────────


@app.get("/events", response_model=list[Event])
def list_events() -> list[Event]:
    """Return the day's committed events ordered by start time."""
    return event_store.list_sorted()


@app.post("/events", response_model=list[Event], status_code=201)
def add_events(events: list[Event]) -> list[Event]:
    try:
        return event_store.add_events(events)
    except ScheduleError as exc:
        _raise_http(exc)


@app.get("/events/{event_id}", response_model=Event)
def get_event(event_id: str) -> Event:
    event = event_store.get(event_id)
    if event is None:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


@app.put("/events/{event_id}", response_model=Event)
def update_event(event_id: str, event: Event) -> Event:
    if event.id != event_id:
        raise HTTPException(status_code=400, detail="Event id does not match path")
    try:
        return event_store.update_event(event)
    except ScheduleError as exc:
        _raise_http(exc)


@app.delete("/events/{event_id}", status_code=200)
def delete_event(event_id: str) -> dict:
    try:
        event_store.remove_event(event_id)
    except ScheduleError as exc:
        _raise_http(exc)
    return {"status": "deleted"}


@app.post("/events/move", response_model=list[Event])
def move_events(body: MoveEventsRequest) -> list[Event]:
    try:
        return event_store.move_events(body.updates)
    except ScheduleError as exc:
        _raise_http(exc)


# ── Syllabus catalog ──────────────────────────────────────────────────


@app.get("/syllabus", response_model=list[SyllabusEntry])
def list_syllabus() -> list[SyllabusEntry]:
    return syllabus_catalog.list_all()


@app.put("/syllabus", response_model=list[SyllabusEntry])
def replace_syllabus(entries: list[SyllabusEntry]) -> list[SyllabusEntry]:
    """Replace the catalog; buffers change, so conflicts are recomputed."""
    syllabus_catalog.replace_all(entries)
    handler_registry.revalidate()
    return syllabus_catalog.list_all()


# ── Validation views ──────────────────────────────────────────────────


@app.get("/conflicts", response_model=ConflictReport)
def get_conflicts() -> ConflictReport:
    return ConflictReport(
        conflicting_event_ids=sorted(conflict_repo.conflicting_ids),
        pairs=conflict_repo.pairs,
    )


@app.get("/buffer-flags", response_model=dict[str, list[BufferBarFlags]])
def get_buffer_flags(by: str = "resource") -> dict[str, list[BufferBarFlags]]:
    events = event_store.list_all()
    if by == "resource":
        rows = rows_by_resource(events)
    elif by == "person":
        rows = rows_by_person(events)
    else:
        raise HTTPException(status_code=400, detail="by must be 'resource' or 'person'")
    return buffer_flags_by_row(rows, syllabus_catalog, config.missing_syllabus)


# ── Drag gestures ─────────────────────────────────────────────────────


@app.get("/drag", response_model=DragStatus)
def get_drag() -> DragStatus:
    return _drag_status()


@app.post("/drag/start", response_model=DragStatus)
def start_drag(body: DragStartRequest) -> DragStatus:
    if body.zoom is not None:
        drag_controller.zoom = body.zoom
    started = drag_controller.pointer_down(
        body.event_id,
        body.pointer_x,
        body.tile_left,
        button=body.button,
        row_index=body.row_index,
    )
    if not started and event_store.get(body.event_id) is None:
        raise HTTPException(status_code=404, detail="Event not found")
    return _drag_status()


@app.post("/drag/move", response_model=DragStatus)
def move_drag(body: DragMoveRequest) -> DragStatus:
    drag_controller.pointer_move(body.pointer_x)
    return _drag_status()


@app.post("/drag/end", response_model=DragStatus)
def end_drag() -> DragStatus:
    drag_controller.pointer_up()
    return _drag_status()


@app.post("/drag/leave", response_model=DragStatus)
def leave_drag() -> DragStatus:
    """Pointer left the grid; the gesture ends where it was last committed."""
    drag_controller.pointer_leave()
    return _drag_status()


@app.post("/events/{event_id}/click", response_model=TileClick)
def click_event(event_id: str) -> TileClick:
    """Report whether a click on a tile should open its detail view."""
    if event_store.get(event_id) is None:
        raise HTTPException(status_code=404, detail="Event not found")
    return TileClick(
        event_id=event_id, open_details=drag_controller.consume_click(event_id)
    )


# ── Formations ────────────────────────────────────────────────────────


@app.post("/formations", response_model=list[Event], status_code=201)
def create_formation(body: FormationRequest) -> list[Event]:
    """Build a formation sortie and place each aircraft on a free row."""
    try:
        members = build_formation(body.template, body.count, body.callsign_prefix)
        placed = assign_resources(
            members,
            body.resources,
            event_store.list_all(),
            syllabus_catalog,
            config.missing_syllabus,
        )
        return event_store.add_events(placed)
    except ScheduleError as exc:
        _raise_http(exc)


# ── Unavailability ────────────────────────────────────────────────────


@app.get("/unavailability", response_model=list[UnavailabilityPeriod])
def list_unavailability() -> list[UnavailabilityPeriod]:
    return unavailability_repo.list_all()


@app.post("/unavailability", response_model=UnavailabilityPeriod, status_code=201)
def add_unavailability(period: UnavailabilityPeriod) -> UnavailabilityPeriod:
    unavailability_repo.add(period)
    logger.info("%s unavailable %s to %s", period.person, period.start_date, period.end_date)
    return period


@app.get("/unavailability/conflicts", response_model=dict[str, list[str]])
def get_unavailability_conflicts(day: date) -> dict[str, list[str]]:
    return compute_unavailability_conflicts(
        event_store.list_all(), unavailability_repo.list_for_day(day), day
    )
