"""
Проекции для внешнего (HTTP) слоя. Собираются из доменных моделей и счётчиков.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, time
from enum import Enum
from typing import Generic, List, Optional, TypeVar

from workscholarship.domain.errors import to_upper_snake
from workscholarship.domain.models import Cycle, CycleLocation, CycleStatus, ScheduleSlot

T = TypeVar("T")


@dataclass(frozen=True)
class CycleSummary:
    id: str
    name: str
    department: str
    status: CycleStatus
    start_date: datetime
    end_date: datetime
    application_deadline: datetime
    interview_date: datetime
    selection_date: datetime
    total_scholarships_available: int
    total_scholarships_assigned: int
    renewal_process_completed: bool
    cloned_from_cycle_id: Optional[str]
    closed_at: Optional[datetime]
    locations_count: int
    supervisors_count: int
    created_at: datetime
    updated_at: Optional[datetime]

    @classmethod
    def from_domain(cls, c: Cycle, locations_count: int = 0, supervisors_count: int = 0) -> CycleSummary:
        return cls(
            id=c.id,
            name=c.name,
            department=c.department,
            status=c.status,
            start_date=c.start_date,
            end_date=c.end_date,
            application_deadline=c.application_deadline,
            interview_date=c.interview_date,
            selection_date=c.selection_date,
            total_scholarships_available=c.total_scholarships_available,
            total_scholarships_assigned=c.total_scholarships_assigned,
            renewal_process_completed=c.renewal_process_completed,
            cloned_from_cycle_id=c.cloned_from_cycle_id,
            closed_at=c.closed_at,
            locations_count=locations_count,
            supervisors_count=supervisors_count,
            created_at=c.created_at,
            updated_at=c.updated_at,
        )


@dataclass(frozen=True)
class ScheduleSlotView:
    day_of_week: int
    day_name: str
    start_time: time
    end_time: time
    required_scholars: int
    duration_hours: float

    @classmethod
    def from_domain(cls, s: ScheduleSlot) -> ScheduleSlotView:
        return cls(
            day_of_week=s.day_of_week,
            day_name=s.day_of_week_name,
            start_time=s.start_time,
            end_time=s.end_time,
            required_scholars=s.required_scholars,
            duration_hours=s.duration_hours,
        )


@dataclass(frozen=True)
class CycleLocationView:
    id: str
    location_id: str
    scholarships_available: int
    scholarships_assigned: int
    remaining_slots: int
    is_active: bool
    schedule_slots: List[ScheduleSlotView]

    @classmethod
    def from_domain(cls, cl: CycleLocation) -> CycleLocationView:
        slots = sorted(cl.schedule_slots, key=lambda s: (s.day_of_week, s.start_time))
        return cls(
            id=cl.id,
            location_id=cl.location_id,
            scholarships_available=cl.scholarships_available,
            scholarships_assigned=cl.scholarships_assigned,
            remaining_slots=cl.remaining_slots,
            is_active=cl.is_active,
            schedule_slots=[ScheduleSlotView.from_domain(s) for s in slots],
        )


@dataclass(frozen=True)
class CycleDetail:
    summary: CycleSummary
    closed_by: Optional[str]
    created_by: str
    updated_by: Optional[str]
    scholars_count: int
    locations: List[CycleLocationView]


@dataclass(frozen=True)
class CycleListItem:
    id: str
    name: str
    department: str
    status: CycleStatus
    start_date: datetime
    end_date: datetime
    total_scholarships_available: int
    total_scholarships_assigned: int
    created_at: datetime
    closed_at: Optional[datetime]

    @classmethod
    def from_domain(cls, c: Cycle) -> CycleListItem:
        return cls(
            id=c.id,
            name=c.name,
            department=c.department,
            status=c.status,
            start_date=c.start_date,
            end_date=c.end_date,
            total_scholarships_available=c.total_scholarships_available,
            total_scholarships_assigned=c.total_scholarships_assigned,
            created_at=c.created_at,
            closed_at=c.closed_at,
        )


@dataclass(frozen=True)
class Page(Generic[T]):
    items: List[T]
    total_count: int
    page: int
    page_size: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_count / self.page_size) if self.page_size else 0

    @property
    def has_previous_page(self) -> bool:
        return self.page > 1

    @property
    def has_next_page(self) -> bool:
        return self.page < self.total_pages


# ───────────────────────── Панель администратора ─────────────────────────

class PendingActionCode(str, Enum):
    NO_LOCATIONS = "NoLocations"
    NO_SUPERVISORS = "NoSupervisors"
    NO_ACTIVE_CYCLE = "NoActiveCycle"
    CYCLE_NEEDS_LOCATIONS = "CycleNeedsLocations"
    CYCLE_NEEDS_SUPERVISORS = "CycleNeedsSupervisors"
    RENEWALS_PENDING = "RenewalsPending"

    @property
    def code_string(self) -> str:
        return to_upper_snake(self.value)


@dataclass(frozen=True)
class DashboardState:
    """
    «Снимок здоровья» департамента. Ничего не хранится, всё считается на лету.
    """
    locations_count: int
    supervisors_count: int
    active_cycle: Optional[CycleSummary] = None
    cycle_in_configuration: Optional[CycleSummary] = None
    last_closed_cycle: Optional[CycleSummary] = None
    pending_actions: List[PendingActionCode] = field(default_factory=list)

    @property
    def has_locations(self) -> bool:
        return self.locations_count > 0

    @property
    def has_supervisors(self) -> bool:
        return self.supervisors_count > 0


@dataclass(frozen=True)
class DayCoverage:
    day_of_week: int
    day_name: str
    slots: int
    required_scholars: int
    scholar_hours: float
