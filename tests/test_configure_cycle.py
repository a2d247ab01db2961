from __future__ import annotations

from sqlalchemy import func

from conftest import configure, create_cycle, location_payload, slot_payload, transition
from workscholarship.domain.errors import ErrorCode
from workscholarship.domain.models import CycleStatus
from workscholarship.infrastructure.db.models import CycleLocationModel, ScheduleSlotModel


def _state(cycle_repo, cycle_id):
    """Сравнимое состояние конфигурации без суррогатных id."""
    locations = cycle_repo.get_cycle_locations(cycle_id)
    return (
        sorted(
            (
                cl.location_id,
                cl.scholarships_available,
                cl.is_active,
                tuple((s.day_of_week, s.start_time, s.end_time, s.required_scholars) for s in cl.schedule_slots),
            )
            for cl in locations
        ),
        sorted((a.supervisor_id, a.cycle_location_id) for a in cycle_repo.get_supervisor_assignments(cycle_id)),
        cycle_repo.get_cycle(cycle_id).total_scholarships_available,
    )


def test_configure_counts_only_active_locations(cycle_repo, clock) -> None:
    cycle = create_cycle(cycle_repo, clock)

    result = configure(
        cycle_repo,
        clock,
        cycle.id,
        [location_payload("loc-a", 3), location_payload("loc-b", 5, is_active=False)],
    )

    assert result.ok, result.error
    assert result.value.total_scholarships_available == 3
    assert result.value.locations_count == 1
    assert cycle_repo.get_cycle(cycle.id).total_scholarships_available == 3


def test_configure_is_idempotent(cycle_repo, clock) -> None:
    cycle = create_cycle(cycle_repo, clock)
    locations = [
        location_payload("loc-a", 3, slots=[slot_payload(1, 8, 12, 2), slot_payload(2, 8, 12, 2)]),
        location_payload("loc-b", 5),
    ]
    assignments = [{"supervisor_id": "sup-1", "cycle_location_id": "cl-x"}]

    configure(cycle_repo, clock, cycle.id, locations, assignments)
    first = _state(cycle_repo, cycle.id)
    first_ids = {cl.location_id: cl.id for cl in cycle_repo.get_cycle_locations(cycle.id)}
    configure(cycle_repo, clock, cycle.id, locations, assignments)

    assert _state(cycle_repo, cycle.id) == first
    assert {cl.location_id: cl.id for cl in cycle_repo.get_cycle_locations(cycle.id)} == first_ids


def test_omitted_locations_are_deactivated_not_deleted(cycle_repo, clock, session) -> None:
    cycle = create_cycle(cycle_repo, clock)
    configure(cycle_repo, clock, cycle.id, [location_payload("loc-a", 3), location_payload("loc-b", 5)])

    result = configure(cycle_repo, clock, cycle.id, [location_payload("loc-b", 5)])

    assert result.value.total_scholarships_available == 5
    by_location = {cl.location_id: cl for cl in cycle_repo.get_cycle_locations(cycle.id)}
    assert set(by_location) == {"loc-a", "loc-b"}
    assert by_location["loc-a"].is_active is False
    assert by_location["loc-a"].updated_at == clock.now()
    assert session.query(func.count(CycleLocationModel.id)).scalar() == 2


def test_slots_are_replaced_entirely(cycle_repo, clock, session) -> None:
    cycle = create_cycle(cycle_repo, clock)
    configure(
        cycle_repo, clock, cycle.id,
        [location_payload("loc-a", 3, slots=[slot_payload(1, 8, 12, 2), slot_payload(2, 8, 12, 2)])],
    )

    configure(cycle_repo, clock, cycle.id, [location_payload("loc-a", 4, slots=[slot_payload(5, 14, 16, 1)])])

    [cl] = cycle_repo.get_cycle_locations(cycle.id)
    assert cl.scholarships_available == 4
    assert [(s.day_of_week, s.required_scholars) for s in cl.schedule_slots] == [(5, 1)]
    assert session.query(func.count(ScheduleSlotModel.id)).scalar() == 1


def test_assignments_are_replaced_wholesale(cycle_repo, clock) -> None:
    cycle = create_cycle(cycle_repo, clock)
    configure(
        cycle_repo, clock, cycle.id, [location_payload("loc-a", 3)],
        [{"supervisor_id": "sup-1", "cycle_location_id": "cl-1"},
         {"supervisor_id": "sup-2", "cycle_location_id": "cl-2"}],
    )

    result = configure(
        cycle_repo, clock, cycle.id, [location_payload("loc-a", 3)],
        [{"supervisor_id": "sup-3", "cycle_location_id": "cl-1"}],
    )

    assert result.value.supervisors_count == 1
    assert [(a.supervisor_id, a.cycle_location_id) for a in cycle_repo.get_supervisor_assignments(cycle.id)] == [
        ("sup-3", "cl-1")
    ]


def test_reactivating_a_location_restores_its_capacity(cycle_repo, clock) -> None:
    cycle = create_cycle(cycle_repo, clock)
    configure(cycle_repo, clock, cycle.id, [location_payload("loc-a", 3), location_payload("loc-b", 5)])
    configure(cycle_repo, clock, cycle.id, [location_payload("loc-a", 3)])

    result = configure(cycle_repo, clock, cycle.id, [location_payload("loc-a", 3), location_payload("loc-b", 2)])

    assert result.value.total_scholarships_available == 5
    assert len(cycle_repo.get_cycle_locations(cycle.id)) == 2


def test_invalid_slot_is_reported_with_path_and_nothing_is_written(cycle_repo, clock) -> None:
    cycle = create_cycle(cycle_repo, clock)
    bad = location_payload("loc-a", 3, slots=[slot_payload(1, 8, 12, 1), slot_payload(8, 12, 10, 0)])

    result = configure(cycle_repo, clock, cycle.id, [bad])

    assert result.code == ErrorCode.VALIDATION_ERROR
    fields = {d.field for d in result.error.details}
    assert fields == {
        "locations.0.schedule_slots.1.day_of_week",
        "locations.0.schedule_slots.1.end_time",
        "locations.0.schedule_slots.1.required_scholars",
    }
    assert cycle_repo.get_cycle_locations(cycle.id) == []


def test_duplicate_location_ids_are_rejected(cycle_repo, clock) -> None:
    cycle = create_cycle(cycle_repo, clock)

    result = configure(cycle_repo, clock, cycle.id, [location_payload("loc-a", 3), location_payload("loc-a", 4)])

    assert result.code == ErrorCode.VALIDATION_ERROR
    assert [d.field for d in result.error.details] == ["locations"]


def test_unknown_cycle(cycle_repo, clock) -> None:
    result = configure(cycle_repo, clock, "nope", [location_payload("loc-a", 3)])

    assert result.code == ErrorCode.CYCLE_NOT_FOUND


def test_configure_outside_configuration_state(cycle_repo, clock) -> None:
    cycle = create_cycle(cycle_repo, clock)
    configure(cycle_repo, clock, cycle.id, [location_payload("loc-a", 3)])
    assert transition(cycle_repo, clock, cycle.id, CycleStatus.APPLICATIONS_OPEN).ok

    result = configure(cycle_repo, clock, cycle.id, [location_payload("loc-b", 9)])

    assert result.code == ErrorCode.NOT_IN_CONFIGURATION
    assert [cl.location_id for cl in cycle_repo.get_cycle_locations(cycle.id)] == ["loc-a"]
    assert cycle_repo.get_cycle(cycle.id).total_scholarships_available == 3
