"""Buffer-bar pass: flag pre/post buffers that run into a neighbour's buffer.

Only adjacent events in the same row are compared, and no shared occupant
is required; sharing the row is enough.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING

from flightline.domain.models import BufferBarFlags, Event, MissingSyllabusPolicy

if TYPE_CHECKING:
    from flightline.repos.memory import SyllabusCatalog


def buffer_bar_flags(
    row_events: Iterable[Event],
    catalog: SyllabusCatalog,
    policy: MissingSyllabusPolicy = MissingSyllabusPolicy.ZERO_BUFFER,
) -> list[BufferBarFlags]:
    """Compute buffer flags for one row of events.

    The row is sorted by start time first. Under ``SKIP`` an event with no
    catalog entry gets no flags and never flags its neighbours.
    """
    ordered = sorted(row_events, key=lambda e: e.start_time)
    flags: list[BufferBarFlags] = []

    for i, current in enumerate(ordered):
        pre, post = _buffers(current, catalog, policy)
        if pre is None:
            continue

        pre_conflict = False
        if i > 0:
            prev = ordered[i - 1]
            _, prev_post = _buffers(prev, catalog, policy)
            if prev_post is not None:
                prev_post_end = prev.start_time + prev.duration + prev_post
                pre_conflict = prev_post_end > current.start_time - pre

        post_conflict = False
        if i + 1 < len(ordered):
            nxt = ordered[i + 1]
            next_pre, _ = _buffers(nxt, catalog, policy)
            if next_pre is not None:
                post_end = current.start_time + current.duration + post
                post_conflict = post_end > nxt.start_time - next_pre

        flags.append(
            BufferBarFlags(
                event_id=current.id,
                pre_time=pre,
                post_time=post,
                pre_conflict=pre_conflict,
                post_conflict=post_conflict,
            )
        )
    return flags


def buffer_flags_by_row(
    rows: Mapping[str, Iterable[Event]],
    catalog: SyllabusCatalog,
    policy: MissingSyllabusPolicy = MissingSyllabusPolicy.ZERO_BUFFER,
) -> dict[str, list[BufferBarFlags]]:
    """Apply ``buffer_bar_flags`` to every row of a row view."""
    return {key: buffer_bar_flags(events, catalog, policy) for key, events in rows.items()}


def _buffers(
    event: Event, catalog: SyllabusCatalog, policy: MissingSyllabusPolicy
) -> tuple[float | None, float | None]:
    entry = catalog.get(event.syllabus_code)
    if entry is None:
        if policy == MissingSyllabusPolicy.SKIP:
            return None, None
        return 0.0, 0.0
    return entry.pre_flight_time, entry.post_flight_time
