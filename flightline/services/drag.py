"""Drag/reposition controller for event tiles on the timeline.

Pointer positions are pixels from the left edge of the schedule grid at the
current zoom. Every move that lands on a new snapped start is committed to
the store straight away (no rollback on release); the live conflict preview
is kept separately and dropped when the gesture ends.
"""

from __future__ import annotations

import logging
import math

from flightline.config import TimelineConfig
from flightline.domain.models import (
    ConflictPreview,
    DragSession,
    DragState,
    EventMove,
)
from flightline.repos.memory import EventStore, SyllabusCatalog
from flightline.services.conflicts import find_conflict
from flightline.services.intervals import hours_to_hhmm

logger = logging.getLogger(__name__)

PRIMARY_BUTTON = 0

_EPS = 1e-9


def clamp_start(raw_start: float, duration: float, config: TimelineConfig) -> float:
    """Keep ``[start, start + duration]`` inside the day bounds."""
    start = raw_start
    if start < config.day_start:
        start = config.day_start
    if start + duration > config.day_end:
        start = config.day_end - duration
    return start


def snap_start(start: float, duration: float, config: TimelineConfig) -> float:
    """Round to the nearest snap step (halves round up).

    If rounding pushes the span past a day bound, fall back to the nearest
    step that is still inside it.
    """
    steps = config.steps_per_hour
    snapped = math.floor(start * steps + 0.5) / steps

    upper = config.day_end - duration
    if snapped > upper + _EPS:
        snapped = math.floor(upper * steps + _EPS) / steps
    if snapped < config.day_start - _EPS:
        snapped = math.ceil(config.day_start * steps - _EPS) / steps
    return snapped


class DragController:
    """Turns pointer gestures into committed start-time changes.

    States: ``idle`` and ``dragging``. At most one session exists at a time.
    """

    def __init__(
        self,
        store: EventStore,
        catalog: SyllabusCatalog,
        config: TimelineConfig | None = None,
        zoom: float = 1.0,
    ) -> None:
        self.store = store
        self.catalog = catalog
        self.config = config or store.config
        self.zoom = zoom
        self._session: DragSession | None = None
        self._preview: ConflictPreview | None = None
        self._did_drag = False

    @property
    def zoom(self) -> float:
        return self._zoom

    @zoom.setter
    def zoom(self, value: float) -> None:
        if value <= 0:
            raise ValueError("zoom must be positive")
        self._zoom = value

    @property
    def state(self) -> DragState:
        return DragState.IDLE if self._session is None else DragState.DRAGGING

    @property
    def session(self) -> DragSession | None:
        return self._session

    @property
    def preview(self) -> ConflictPreview | None:
        return self._preview

    @property
    def pixels_per_hour(self) -> float:
        """Grid pixels per hour at the current zoom."""
        return self.config.pixels_per_hour * self.zoom

    # ------------------------------------------------------------------
    # Gesture handlers
    # ------------------------------------------------------------------

    def pointer_down(
        self,
        event_id: str,
        pointer_x: float,
        tile_left: float,
        button: int = PRIMARY_BUTTON,
        row_index: int | None = None,
    ) -> bool:
        """Start dragging ``event_id``. Returns False if the press is ignored."""
        if button != PRIMARY_BUTTON:
            return False
        self._did_drag = False

        event = self.store.get(event_id)
        if event is None or event.locked:
            logger.debug("Ignoring press on %s (missing or locked)", event_id)
            return False

        self._session = DragSession(
            event_id=event_id,
            x_offset=(pointer_x - tile_left) / self.zoom,
            row_index=row_index,
            snapshot=event.model_copy(deep=True),
        )
        self._preview = None
        logger.debug("Drag started on %s at %s", event_id, hours_to_hhmm(event.start_time))
        return True

    def pointer_move(self, pointer_x: float) -> ConflictPreview | None:
        """Follow the pointer; commit when the snapped start changes.

        Returns the live conflict preview for the proposed position.
        """
        session = self._session
        if session is None:
            return None
        self._did_drag = True

        event = self.store.get(session.event_id)
        if event is None:
            return None

        snapped = self.candidate_start(pointer_x, event.duration)
        session.last_snapped = snapped

        proposed = event.model_copy(update={"start_time": snapped})
        others = [e for e in self.store.list_all() if e.id != event.id]
        conflict = find_conflict([proposed], others, self.catalog, self.config.missing_syllabus)
        self._preview = (
            ConflictPreview(
                conflicting_event_id=conflict.conflicting_event.id,
                person_name=conflict.shared_identity,
            )
            if conflict
            else None
        )

        if not math.isclose(snapped, event.start_time, abs_tol=_EPS):
            logger.debug(
                "Drag commit %s: %s -> %s",
                event.id,
                hours_to_hhmm(event.start_time),
                hours_to_hhmm(snapped),
            )
            self.store.move_events([EventMove(event_id=event.id, new_start_time=snapped)])
        return self._preview

    def pointer_up(self) -> None:
        """End the gesture. The last committed position stands."""
        if self._session is not None:
            logger.debug("Drag ended on %s", self._session.event_id)
        self._session = None
        self._preview = None

    def pointer_leave(self) -> None:
        self.pointer_up()

    def consume_click(self, event_id: str) -> bool:
        """Whether a click on ``event_id`` should open its detail view.

        A click that ends a drag which moved the pointer is swallowed once.
        """
        if self._did_drag:
            self._did_drag = False
            logger.debug("Suppressing click on %s after drag", event_id)
            return False
        return True

    # ------------------------------------------------------------------
    # Geometry
    # ------------------------------------------------------------------

    def raw_start(self, pointer_x: float) -> float:
        """Unclamped start time implied by the pointer and the grab offset."""
        if self._session is None:
            raise RuntimeError("no drag in progress")
        grab = self._session.x_offset * self.zoom
        return (pointer_x - grab) / self.pixels_per_hour + self.config.day_start

    def candidate_start(self, pointer_x: float, duration: float) -> float:
        clamped = clamp_start(self.raw_start(pointer_x), duration, self.config)
        return snap_start(clamped, duration, self.config)

    def pointer_x_for(self, start_time: float) -> float:
        """Pointer position that places the grabbed tile at ``start_time``."""
        if self._session is None:
            raise RuntimeError("no drag in progress")
        grab = self._session.x_offset * self.zoom
        return (start_time - self.config.day_start) * self.pixels_per_hour + grab
