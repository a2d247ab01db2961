from __future__ import annotations

import pytest

from conftest import ACTOR, configure, create_cycle, location_payload, run_to_closed, transition
from workscholarship.application.use_cases.transition_cycle import TransitionCycleUseCase
from workscholarship.domain.errors import ErrorCode
from workscholarship.domain.models import CycleStatus


def test_full_lifecycle_reaches_closed(cycle_repo, clock) -> None:
    cycle = create_cycle(cycle_repo, clock)
    configure(cycle_repo, clock, cycle.id, [location_payload("loc-a", 3)])

    run_to_closed(cycle_repo, clock, cycle.id)

    closed = cycle_repo.get_cycle(cycle.id)
    assert closed.status == CycleStatus.CLOSED
    assert closed.closed_at == clock.now()
    assert closed.closed_by == ACTOR
    assert closed.is_closed


def test_reopen_applications(cycle_repo, clock) -> None:
    cycle = create_cycle(cycle_repo, clock)
    configure(cycle_repo, clock, cycle.id, [location_payload("loc-a", 3)])
    transition(cycle_repo, clock, cycle.id, CycleStatus.APPLICATIONS_OPEN)
    transition(cycle_repo, clock, cycle.id, CycleStatus.APPLICATIONS_CLOSED)

    result = transition(cycle_repo, clock, cycle.id, CycleStatus.APPLICATIONS_OPEN)

    assert result.ok
    assert result.value.status == CycleStatus.APPLICATIONS_OPEN


def test_open_without_locations_is_blocked(cycle_repo, clock) -> None:
    cycle = create_cycle(cycle_repo, clock)

    result = transition(cycle_repo, clock, cycle.id, CycleStatus.APPLICATIONS_OPEN)

    assert result.code == ErrorCode.NO_LOCATIONS
    assert cycle_repo.get_cycle(cycle.id).status == CycleStatus.CONFIGURATION


def test_open_with_pending_renewals_is_blocked(cycle_repo, clock) -> None:
    source = create_cycle(cycle_repo, clock, name="2025-2")
    configure(cycle_repo, clock, source.id, [location_payload("loc-a", 3)])
    run_to_closed(cycle_repo, clock, source.id)
    second = create_cycle(cycle_repo, clock, name="2026-1", clone_from_cycle_id=source.id)

    result = transition(cycle_repo, clock, second.id, CycleStatus.APPLICATIONS_OPEN)

    assert result.code == ErrorCode.RENEWALS_PENDING


def test_close_before_end_date_is_blocked(cycle_repo, clock) -> None:
    cycle = create_cycle(cycle_repo, clock)
    configure(cycle_repo, clock, cycle.id, [location_payload("loc-a", 3)])
    for target in (CycleStatus.APPLICATIONS_OPEN, CycleStatus.APPLICATIONS_CLOSED, CycleStatus.ACTIVE):
        transition(cycle_repo, clock, cycle.id, target)

    result = transition(cycle_repo, clock, cycle.id, CycleStatus.CLOSED)

    assert result.code == ErrorCode.CYCLE_NOT_ENDED
    assert cycle_repo.get_cycle(cycle.id).status == CycleStatus.ACTIVE


@pytest.mark.parametrize(
    "target",
    [CycleStatus.CONFIGURATION, CycleStatus.APPLICATIONS_CLOSED, CycleStatus.ACTIVE, CycleStatus.CLOSED],
)
def test_skipping_states_is_invalid(cycle_repo, clock, target: CycleStatus) -> None:
    cycle = create_cycle(cycle_repo, clock)
    configure(cycle_repo, clock, cycle.id, [location_payload("loc-a", 3)])

    result = transition(cycle_repo, clock, cycle.id, target)

    assert result.code == ErrorCode.INVALID_TRANSITION
    assert cycle_repo.get_cycle(cycle.id).status == CycleStatus.CONFIGURATION


def test_closed_cycle_is_terminal(cycle_repo, clock) -> None:
    cycle = create_cycle(cycle_repo, clock)
    configure(cycle_repo, clock, cycle.id, [location_payload("loc-a", 3)])
    run_to_closed(cycle_repo, clock, cycle.id)

    for target in CycleStatus:
        result = transition(cycle_repo, clock, cycle.id, target)
        assert result.code == ErrorCode.INVALID_TRANSITION


def test_unknown_target_status_is_validation_error(cycle_repo, clock) -> None:
    cycle = create_cycle(cycle_repo, clock)

    result = TransitionCycleUseCase(cycle_repo, clock).execute(
        {"cycle_id": cycle.id, "target_status": "Archived"}, ACTOR
    )

    assert result.code == ErrorCode.VALIDATION_ERROR
    assert result.error.details[0].field == "target_status"


def test_unknown_cycle(cycle_repo, clock) -> None:
    result = transition(cycle_repo, clock, "nope", CycleStatus.APPLICATIONS_OPEN)

    assert result.code == ErrorCode.CYCLE_NOT_FOUND
