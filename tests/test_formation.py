"""Tests for formation sorties, resource assignment and unavailability."""

from __future__ import annotations

from datetime import date

import pytest

from flightline.domain.errors import NoResourceAvailableError
from flightline.domain.models import CrewRole, Event, SyllabusEntry, UnavailabilityPeriod
from flightline.repos.memory import SyllabusCatalog, UnavailabilityRepository
from flightline.services.conflicts import compute_conflict_set
from flightline.services.formation import (
    assign_resources,
    build_formation,
    find_available_resource_id,
)
from flightline.services.personnel import crew
from flightline.services.unavailability import (
    compute_unavailability_conflicts,
    unavailable_people,
)

RESOURCES = ["PC-21 01", "PC-21 02", "PC-21 03"]


def _catalog() -> SyllabusCatalog:
    return SyllabusCatalog(
        [SyllabusEntry(id="SCT FORM", pre_flight_time=0.5, post_flight_time=0.5)]
    )


def _template(**overrides) -> Event:
    defaults = dict(
        id="tmpl",
        syllabus_code="SCT FORM",
        start_time=10.0,
        duration=1.5,
        instructor="Smith",
        area="A",
    )
    defaults.update(overrides)
    return Event(**defaults)


# ---------------------------------------------------------------------------
# build_formation
# ---------------------------------------------------------------------------


def test_formation_members_are_linked():
    members = build_formation(_template(), 3, "MERL")

    assert len(members) == 3
    assert len({m.id for m in members}) == 3
    assert len({m.formation_id for m in members}) == 1
    assert [m.formation_position for m in members] == [1, 2, 3]
    assert [m.callsign for m in members] == ["MERL1", "MERL2", "MERL3"]
    assert [m.pilot for m in members] == ["MERL1", "MERL2", "MERL3"]
    assert all(m.resource_id == "" for m in members)
    assert all(m.start_time == 10.0 and m.area == "A" for m in members)


def test_formation_members_do_not_double_book_each_other():
    template = _template(instructor="Smith", student="Jones", group_member_ids=["Lee"])
    members = assign_resources(
        build_formation(template, 3, "MERL"), RESOURCES, [], _catalog()
    )

    assert compute_conflict_set(members, _catalog()) == set()
    assert all(m.flight_type == CrewRole.SOLO for m in members)
    assert [crew(m) for m in members] == [["MERL1"], ["MERL2"], ["MERL3"]]


def test_formation_needs_two_aircraft():
    with pytest.raises(ValueError):
        build_formation(_template(), 1, "MERL")


# ---------------------------------------------------------------------------
# Resource assignment
# ---------------------------------------------------------------------------


def test_first_free_row_is_chosen():
    existing = [_template(id="busy", resource_id="PC-21 01", start_time=11.0)]
    event = _template(id="new")
    assert (
        find_available_resource_id(event, RESOURCES, existing, _catalog()) == "PC-21 02"
    )


def test_buffers_count_when_finding_a_row():
    """12.5 + pre 0.5 touches busy's post end at 12.0; 12.4 would overlap."""
    existing = [_template(id="busy", resource_id="PC-21 01", start_time=10.0)]
    assert (
        find_available_resource_id(
            _template(id="a", start_time=12.5), RESOURCES, existing, _catalog()
        )
        == "PC-21 01"
    )
    assert (
        find_available_resource_id(
            _template(id="b", start_time=12.4), RESOURCES, existing, _catalog()
        )
        == "PC-21 02"
    )


def test_formation_lands_on_different_rows():
    members = build_formation(_template(), 2, "MERL")
    existing = [_template(id="busy", resource_id="PC-21 01")]

    placed = assign_resources(members, RESOURCES, existing, _catalog())
    assert [m.resource_id for m in placed] == ["PC-21 02", "PC-21 03"]
    assert all(m.resource_id == "" for m in members)


def test_preassigned_resource_kept():
    event = _template(id="fixed", resource_id="PC-21 03")
    (placed,) = assign_resources([event], RESOURCES, [], _catalog())
    assert placed.resource_id == "PC-21 03"


def test_no_row_free_raises():
    members = build_formation(_template(), 4, "MERL")
    with pytest.raises(NoResourceAvailableError) as exc_info:
        assign_resources(members, RESOURCES, [], _catalog())
    assert exc_info.value.event_id == members[3].id


# ---------------------------------------------------------------------------
# Unavailability
# ---------------------------------------------------------------------------


def _periods() -> list[UnavailabilityPeriod]:
    return [
        UnavailabilityPeriod(
            person="Jones", start_date=date(2026, 3, 2), end_date=date(2026, 3, 4)
        ),
        UnavailabilityPeriod(
            person="Smith",
            start_date=date(2026, 3, 4),
            end_date=date(2026, 3, 5),
            reason="leave",
        ),
    ]


def test_period_end_date_is_exclusive():
    periods = _periods()
    assert unavailable_people(periods, date(2026, 3, 2)) == {"Jones"}
    assert unavailable_people(periods, date(2026, 3, 4)) == {"Smith"}
    assert unavailable_people(periods, date(2026, 3, 5)) == set()


def test_events_booking_unavailable_people_are_flagged():
    events = [
        _template(id="A", student="Jones"),
        _template(id="B", instructor="Lee", student="Brown"),
    ]
    result = compute_unavailability_conflicts(events, _periods(), date(2026, 3, 3))
    assert result == {"A": ["Jones"]}

    result = compute_unavailability_conflicts(events, _periods(), date(2026, 3, 4))
    assert result == {"A": ["Smith"]}


def test_period_rejects_empty_range():
    with pytest.raises(ValueError):
        UnavailabilityPeriod(
            person="Jones", start_date=date(2026, 3, 2), end_date=date(2026, 3, 2)
        )


def test_repository_filters_by_day_and_person():
    repo = UnavailabilityRepository()
    for period in _periods():
        repo.add(period)
    assert [p.person for p in repo.list_for_day(date(2026, 3, 3))] == ["Jones"]
    assert len(repo.list_for_person("Smith")) == 1
