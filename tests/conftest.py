from __future__ import annotations

from datetime import datetime, timedelta, time
from typing import Any, Dict, Iterator, List, Optional

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from workscholarship.application.use_cases.complete_renewals import CompleteRenewalsUseCase
from workscholarship.application.use_cases.configure_cycle import ConfigureCycleUseCase
from workscholarship.application.use_cases.create_cycle import CreateCycleUseCase
from workscholarship.application.use_cases.transition_cycle import TransitionCycleUseCase
from workscholarship.config.config import Settings
from workscholarship.domain.models import CycleStatus
from workscholarship.infrastructure.db.models import Base
from workscholarship.infrastructure.db.repositories.catalog_repository import CatalogRepository
from workscholarship.infrastructure.db.repositories.cycle_repository import CycleRepository

ACTOR = "admin@example.edu"


class FixedClock:
    def __init__(self, now: datetime) -> None:
        self.current = now

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs: Any) -> None:
        self.current = self.current + timedelta(**kwargs)


@pytest.fixture
def session() -> Iterator[Session]:
    engine = create_engine("sqlite://", future=True)
    Base.metadata.create_all(engine)
    factory = sessionmaker(bind=engine, future=True)
    s = factory()
    try:
        yield s
    finally:
        s.close()
        engine.dispose()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2026, 1, 10, 9, 0))


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture
def cycle_repo(session: Session) -> CycleRepository:
    return CycleRepository(session)


@pytest.fixture
def catalog_repo(session: Session) -> CatalogRepository:
    return CatalogRepository(session)


def cycle_payload(clock: FixedClock, department: str = "Library", name: str = "2026-1",
                  **overrides: Any) -> Dict[str, Any]:
    now = clock.now()
    payload: Dict[str, Any] = {
        "name": name,
        "department": department,
        "application_deadline": now + timedelta(days=10),
        "interview_date": now + timedelta(days=15),
        "selection_date": now + timedelta(days=20),
        "start_date": now + timedelta(days=30),
        "end_date": now + timedelta(days=150),
        "total_scholarships_available": 10,
    }
    payload.update(overrides)
    return payload


def location_payload(location_id: str, scholarships: int, is_active: bool = True,
                     slots: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
    return {
        "location_id": location_id,
        "scholarships_available": scholarships,
        "is_active": is_active,
        "schedule_slots": slots if slots is not None else [slot_payload(1, 8, 12, 2)],
    }


def slot_payload(day: int, start_hour: int, end_hour: int, required: int) -> Dict[str, Any]:
    return {
        "day_of_week": day,
        "start_time": time(start_hour, 0),
        "end_time": time(end_hour, 0),
        "required_scholars": required,
    }


def create_cycle(cycle_repo: CycleRepository, clock: FixedClock, **kwargs: Any):
    result = CreateCycleUseCase(cycle_repo, clock).execute(cycle_payload(clock, **kwargs), ACTOR)
    assert result.ok, result.error
    return result.value


def configure(cycle_repo: CycleRepository, clock: FixedClock, cycle_id: str,
              locations: List[Dict[str, Any]], assignments: Optional[List[Dict[str, Any]]] = None):
    return ConfigureCycleUseCase(cycle_repo, clock).execute(
        {"cycle_id": cycle_id, "locations": locations, "supervisor_assignments": assignments or []},
        ACTOR,
    )


def transition(cycle_repo: CycleRepository, clock: FixedClock, cycle_id: str, target: CycleStatus):
    return TransitionCycleUseCase(cycle_repo, clock).execute(
        {"cycle_id": cycle_id, "target_status": target}, ACTOR
    )


def run_to_closed(cycle_repo: CycleRepository, clock: FixedClock, cycle_id: str) -> None:
    """Проводит сконфигурированный цикл по всей цепочке до Closed."""
    CompleteRenewalsUseCase(cycle_repo, clock).execute(cycle_id, ACTOR)
    for target in (CycleStatus.APPLICATIONS_OPEN, CycleStatus.APPLICATIONS_CLOSED, CycleStatus.ACTIVE):
        assert transition(cycle_repo, clock, cycle_id, target).ok
    clock.advance(days=200)
    assert transition(cycle_repo, clock, cycle_id, CycleStatus.CLOSED).ok
