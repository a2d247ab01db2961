from __future__ import annotations

from conftest import configure, create_cycle, location_payload, slot_payload
from workscholarship.application.use_cases.get_weekly_coverage import GetWeeklyCoverageUseCase
from workscholarship.domain.errors import ErrorCode
from workscholarship.infrastructure.db.queries.schedule_statistics import COVERAGE_COLUMNS, weekly_coverage


def test_coverage_aggregates_active_locations_by_day(session, cycle_repo, clock) -> None:
    cycle = create_cycle(cycle_repo, clock)
    configure(
        cycle_repo, clock, cycle.id,
        [
            location_payload("loc-a", 3, slots=[slot_payload(1, 8, 12, 2), slot_payload(3, 14, 15, 1)]),
            location_payload("loc-b", 2, slots=[slot_payload(1, 13, 16, 1)]),
            location_payload("loc-c", 9, is_active=False, slots=[slot_payload(1, 8, 18, 5)]),
        ],
    )

    days = GetWeeklyCoverageUseCase(session, cycle_repo).execute(cycle.id).value

    assert [(d.day_name, d.slots, d.required_scholars, d.scholar_hours) for d in days] == [
        ("Monday", 2, 3, 11.0),
        ("Wednesday", 1, 1, 1.0),
    ]


def test_coverage_of_unconfigured_cycle_is_empty(session, cycle_repo, clock) -> None:
    cycle = create_cycle(cycle_repo, clock)

    df = weekly_coverage(session, cycle.id)

    assert df.empty
    assert list(df.columns) == COVERAGE_COLUMNS
    assert GetWeeklyCoverageUseCase(session, cycle_repo).execute(cycle.id).value == []


def test_coverage_unknown_cycle(session, cycle_repo) -> None:
    result = GetWeeklyCoverageUseCase(session, cycle_repo).execute("nope")

    assert result.code == ErrorCode.CYCLE_NOT_FOUND
