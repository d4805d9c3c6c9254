"""Tests for the conflict-detection service."""

from __future__ import annotations

from flightline.domain.models import CrewRole, Event, MissingSyllabusPolicy, SyllabusEntry
from flightline.repos.memory import SyllabusCatalog
from flightline.services.conflicts import (
    compute_conflict_set,
    find_conflict,
    find_conflict_pairs,
)
from flightline.services.intervals import occupied_interval


def _catalog() -> SyllabusCatalog:
    return SyllabusCatalog(
        [
            SyllabusEntry(id="BGF1", pre_flight_time=0.25, post_flight_time=0.25),
            SyllabusEntry(id="BGF2", pre_flight_time=0.25, post_flight_time=0.0),
            SyllabusEntry(id="NOBUF"),
        ]
    )


def _make_event(event_id: str, **overrides) -> Event:
    defaults = dict(
        id=event_id,
        syllabus_code="NOBUF",
        start_time=8.0,
        duration=1.0,
        resource_id="PC-21 01",
    )
    defaults.update(overrides)
    return Event(**defaults)


def _scenario_a() -> Event:
    return _make_event(
        "A", syllabus_code="BGF1", instructor="Smith", student="Jones", start_time=8.0
    )


def _scenario_b(**overrides) -> Event:
    fields = dict(syllabus_code="BGF2", instructor="Lee", student="Jones", start_time=9.0)
    fields.update(overrides)
    return _make_event("B", **fields)


# ---------------------------------------------------------------------------
# find_conflict
# ---------------------------------------------------------------------------


def test_shared_student_inside_buffers_conflicts():
    """A's post buffer [9.0, 9.25) runs into B's pre buffer from 8.75."""
    catalog = _catalog()
    a, b = _scenario_a(), _scenario_b()

    assert occupied_interval(a, catalog) == (7.75, 9.25)
    assert occupied_interval(b, catalog) == (8.75, 10.0)

    conflict = find_conflict([a], [b], catalog)
    assert conflict is not None
    assert conflict.conflicting_event.id == "B"
    assert conflict.shared_identity == "Jones"
    assert conflict.candidate_id == "A"


def test_touching_buffers_do_not_conflict():
    """B moved to 9.5 h: its pre buffer starts exactly where A's post ends."""
    catalog = _catalog()
    a, b = _scenario_a(), _scenario_b(start_time=9.5)

    assert occupied_interval(b, catalog)[0] == 9.25
    assert find_conflict([a], [b], catalog) is None
    assert find_conflict([b], [a], catalog) is None


def test_disjoint_occupants_never_conflict():
    a = _make_event("A", instructor="Smith", student="Jones")
    b = _make_event("B", instructor="Lee", student="Brown")
    assert find_conflict([a], [b], _catalog()) is None


def test_candidate_is_not_compared_with_itself():
    a = _make_event("A", instructor="Smith")
    assert find_conflict([a], [a], _catalog()) is None


def test_first_existing_event_wins():
    a = _make_event("A", instructor="Smith", student="Jones")
    b = _make_event("B", instructor="Lee", student="Jones")
    c = _make_event("C", instructor="Smith", student="Brown")

    conflict = find_conflict([a], [c, b], _catalog())
    assert conflict.conflicting_event.id == "C"
    assert conflict.shared_identity == "Smith"


def test_candidates_scanned_in_order():
    a = _make_event("A", instructor="Smith", start_time=6.0)
    b = _make_event("B", instructor="Lee", start_time=12.0)
    existing = [
        _make_event("X", instructor="Smith", start_time=6.5),
        _make_event("Y", instructor="Lee", start_time=12.0),
    ]
    conflict = find_conflict([b, a], existing, _catalog())
    assert conflict.candidate_id == "B"
    assert conflict.conflicting_event.id == "Y"


def test_shared_identity_follows_candidate_crew_order():
    a = _make_event("A", instructor="Smith", student="Jones")
    b = _make_event("B", instructor="Jones", student="Smith")
    assert find_conflict([a], [b], _catalog()).shared_identity == "Smith"


def test_solo_pilot_conflicts_with_dual_student():
    solo = _make_event("S", flight_type=CrewRole.SOLO, pilot="Jones", instructor="Smith")
    dual = _make_event("D", instructor="Lee", student="Jones")
    conflict = find_conflict([solo], [dual], _catalog())
    assert conflict.shared_identity == "Jones"


def test_solo_instructor_field_is_ignored():
    solo = _make_event("S", flight_type=CrewRole.SOLO, pilot="Jones", instructor="Smith")
    other = _make_event("O", instructor="Smith", student="Brown")
    assert find_conflict([solo], [other], _catalog()) is None


def test_group_member_conflicts():
    ground = _make_event(
        "G", type="ground", group="CSE301", group_member_ids=["Jones", "Brown"]
    )
    flight = _make_event("F", instructor="Lee", student="Brown")
    conflict = find_conflict([flight], [ground], _catalog())
    assert conflict.shared_identity == "Brown"


def test_unknown_syllabus_uses_raw_interval_by_default():
    a = _make_event("A", syllabus_code="UNKNOWN", instructor="Smith", start_time=8.0)
    b = _make_event("B", syllabus_code="UNKNOWN", instructor="Smith", start_time=9.0)
    assert find_conflict([a], [b], _catalog()) is None

    c = _make_event("C", syllabus_code="UNKNOWN", instructor="Smith", start_time=8.5)
    assert find_conflict([a], [c], _catalog()) is not None


def test_unknown_syllabus_skipped_under_skip_policy():
    a = _make_event("A", syllabus_code="UNKNOWN", instructor="Smith")
    b = _make_event("B", instructor="Smith")
    skip = MissingSyllabusPolicy.SKIP
    assert find_conflict([a], [b], _catalog(), skip) is None
    assert find_conflict([b], [a], _catalog(), skip) is None


# ---------------------------------------------------------------------------
# Global validator
# ---------------------------------------------------------------------------


def test_conflict_set_collects_every_pair():
    events = [
        _make_event("A", instructor="Smith", start_time=8.0),
        _make_event("B", instructor="Smith", start_time=8.5),
        _make_event("C", instructor="Smith", start_time=9.25),
        _make_event("D", instructor="Lee", start_time=8.0),
    ]
    pairs = find_conflict_pairs(events, _catalog())
    assert [(p.first_id, p.second_id) for p in pairs] == [("A", "B"), ("B", "C")]
    assert compute_conflict_set(events, _catalog()) == {"A", "B", "C"}


def test_pair_lists_every_shared_identity():
    a = _make_event("A", instructor="Smith", student="Jones")
    b = _make_event("B", instructor="Smith", student="Jones")
    (pair,) = find_conflict_pairs([a, b], _catalog())
    assert pair.shared_identities == ["Smith", "Jones"]


def test_conflict_set_is_idempotent():
    events = [_scenario_a(), _scenario_b()]
    catalog = _catalog()
    first = compute_conflict_set(events, catalog)
    assert first == {"A", "B"}
    assert compute_conflict_set(events, catalog) == first


def test_empty_crew_never_conflicts():
    a = _make_event("A")
    b = _make_event("B")
    assert compute_conflict_set([a, b], _catalog()) == set()
