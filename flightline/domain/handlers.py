"""Domain event handlers that keep the committed conflict set in step with the store."""

from __future__ import annotations

import logging

from flightline.domain.bus import EventBus
from flightline.domain.events import (
    ConflictSetChanged,
    EventRemoved,
    EventsAdded,
    EventsCleared,
    EventsMoved,
    EventUpdated,
)
from flightline.repos.memory import ConflictStateRepository, EventStore, SyllabusCatalog
from flightline.services.conflicts import find_conflict_pairs

logger = logging.getLogger(__name__)


class HandlerRegistry:
    """Wires the global validator to every store mutation."""

    def __init__(
        self,
        bus: EventBus,
        store: EventStore,
        catalog: SyllabusCatalog,
        conflict_repo: ConflictStateRepository,
    ) -> None:
        self.bus = bus
        self.store = store
        self.catalog = catalog
        self.conflict_repo = conflict_repo
        self._register()

    def _register(self) -> None:
        self.bus.subscribe(EventsAdded, self.on_events_added)
        self.bus.subscribe(EventUpdated, self.on_event_updated)
        self.bus.subscribe(EventsMoved, self.on_events_moved)
        self.bus.subscribe(EventRemoved, self.on_event_removed)
        self.bus.subscribe(EventsCleared, self.on_events_cleared)

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def on_events_added(self, event: EventsAdded) -> None:
        self.revalidate()

    def on_event_updated(self, event: EventUpdated) -> None:
        self.revalidate()

    def on_events_moved(self, event: EventsMoved) -> None:
        self.revalidate()

    def on_event_removed(self, event: EventRemoved) -> None:
        self.revalidate()

    def on_events_cleared(self, event: EventsCleared) -> None:
        self.revalidate()

    def revalidate(self) -> set[str]:
        """Recompute the committed conflict set from the store and catalog.

        Also called directly after the catalog changes, since catalog edits
        do not go through the store.
        """
        pairs = find_conflict_pairs(
            self.store.list_all(), self.catalog, self.store.config.missing_syllabus
        )
        ids: set[str] = set()
        for pair in pairs:
            ids.update((pair.first_id, pair.second_id))

        added, resolved = self.conflict_repo.replace(ids, pairs)
        if added or resolved:
            logger.info(
                "Conflict set now %d event(s): +%d, -%d", len(ids), len(added), len(resolved)
            )
            self.bus.publish(
                ConflictSetChanged(
                    conflicting_event_ids=sorted(ids),
                    newly_conflicting=sorted(added),
                    resolved=sorted(resolved),
                )
            )
        return ids
