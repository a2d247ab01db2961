from __future__ import annotations

from conftest import ACTOR, configure, create_cycle, location_payload, run_to_closed, transition
from workscholarship.application.use_cases.complete_renewals import CompleteRenewalsUseCase
from workscholarship.domain.errors import ErrorCode
from workscholarship.domain.models import CycleStatus


def test_completing_renewals_unblocks_opening(cycle_repo, clock) -> None:
    source = create_cycle(cycle_repo, clock, name="2025-2")
    configure(cycle_repo, clock, source.id, [location_payload("loc-a", 3)])
    run_to_closed(cycle_repo, clock, source.id)
    cycle = create_cycle(cycle_repo, clock, name="2026-1", clone_from_cycle_id=source.id)
    assert cycle.renewal_process_completed is False

    result = CompleteRenewalsUseCase(cycle_repo, clock).execute(cycle.id, ACTOR)

    assert result.ok
    assert result.value.renewal_process_completed is True
    assert transition(cycle_repo, clock, cycle.id, CycleStatus.APPLICATIONS_OPEN).ok


def test_closed_cycle_is_rejected(cycle_repo, clock) -> None:
    cycle = create_cycle(cycle_repo, clock)
    configure(cycle_repo, clock, cycle.id, [location_payload("loc-a", 3)])
    run_to_closed(cycle_repo, clock, cycle.id)

    result = CompleteRenewalsUseCase(cycle_repo, clock).execute(cycle.id, ACTOR)

    assert result.code == ErrorCode.CYCLE_CLOSED


def test_unknown_cycle(cycle_repo, clock) -> None:
    result = CompleteRenewalsUseCase(cycle_repo, clock).execute("nope", ACTOR)

    assert result.code == ErrorCode.CYCLE_NOT_FOUND
