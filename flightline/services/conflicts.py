"""Service for detecting personnel double-booking between events.

Overlap rule: two events conflict if their occupied intervals (buffers
included) satisfy ``a_start < b_end AND a_end > b_start`` and they share at
least one occupant. Exact boundary touches are NOT conflicts.

``find_conflict`` stops at the first hit and backs the live drag preview;
``find_conflict_pairs``/``compute_conflict_set`` accumulate every pair and
back the committed validation display. The scan is O(n * m), which is fine
for a day's worth of events.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from flightline.domain.models import (
    Conflict,
    ConflictPair,
    Event,
    MissingSyllabusPolicy,
)
from flightline.services.intervals import intervals_overlap, occupied_interval
from flightline.services.personnel import shared_occupant, shared_occupants

if TYPE_CHECKING:
    from flightline.repos.memory import SyllabusCatalog


def is_checkable(
    event: Event,
    catalog: SyllabusCatalog,
    policy: MissingSyllabusPolicy = MissingSyllabusPolicy.ZERO_BUFFER,
) -> bool:
    """Whether an event takes part in conflict checks under ``policy``."""
    if policy == MissingSyllabusPolicy.SKIP:
        return catalog.get(event.syllabus_code) is not None
    return True


def find_conflict(
    candidates: Iterable[Event],
    existing: Iterable[Event],
    catalog: SyllabusCatalog,
    policy: MissingSyllabusPolicy = MissingSyllabusPolicy.ZERO_BUFFER,
) -> Conflict | None:
    """Return the first existing event that double-books a candidate.

    Candidates are scanned in order, and for each candidate the existing
    events are scanned in order; an existing event with the candidate's id
    is skipped.
    """
    existing = [e for e in existing if is_checkable(e, catalog, policy)]

    for candidate in candidates:
        if not is_checkable(candidate, catalog, policy):
            continue
        span = occupied_interval(candidate, catalog)

        for other in existing:
            if other.id == candidate.id:
                continue
            if not intervals_overlap(span, occupied_interval(other, catalog)):
                continue
            person = shared_occupant(candidate, other)
            if person is not None:
                return Conflict(
                    candidate_id=candidate.id,
                    conflicting_event=other,
                    shared_identity=person,
                )
    return None


def find_conflict_pairs(
    events: Iterable[Event],
    catalog: SyllabusCatalog,
    policy: MissingSyllabusPolicy = MissingSyllabusPolicy.ZERO_BUFFER,
) -> list[ConflictPair]:
    """Return every pair of events (in list order, i < j) that conflict."""
    checked = [e for e in events if is_checkable(e, catalog, policy)]
    spans = [occupied_interval(e, catalog) for e in checked]

    pairs: list[ConflictPair] = []
    for i, first in enumerate(checked):
        for j in range(i + 1, len(checked)):
            second = checked[j]
            if first.id == second.id:
                continue
            if not intervals_overlap(spans[i], spans[j]):
                continue
            shared = shared_occupants(first, second)
            if shared:
                pairs.append(
                    ConflictPair(
                        first_id=first.id,
                        second_id=second.id,
                        shared_identities=shared,
                    )
                )
    return pairs


def compute_conflict_set(
    events: Iterable[Event],
    catalog: SyllabusCatalog,
    policy: MissingSyllabusPolicy = MissingSyllabusPolicy.ZERO_BUFFER,
) -> set[str]:
    """Ids of every event that appears in at least one conflicting pair."""
    conflicting: set[str] = set()
    for pair in find_conflict_pairs(events, catalog, policy):
        conflicting.add(pair.first_id)
        conflicting.add(pair.second_id)
    return conflicting
