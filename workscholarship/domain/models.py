import uuid
from dataclasses import dataclass, field
from datetime import datetime, time
from enum import Enum
from typing import List, Optional


def new_id() -> str:
    return str(uuid.uuid4())


def normalize_department(department: str) -> str:
    """
    Ключ сравнения департаментов: без пробелов по краям и без учёта регистра.
    """
    return department.strip().lower()


class CycleStatus(str, Enum):
    CONFIGURATION = "Configuration"
    APPLICATIONS_OPEN = "ApplicationsOpen"
    APPLICATIONS_CLOSED = "ApplicationsClosed"
    ACTIVE = "Active"
    CLOSED = "Closed"


# «в настройке» для панели администратора: всё, что ещё не Active и не Closed
IN_CONFIGURATION_STATUSES = frozenset({
    CycleStatus.CONFIGURATION,
    CycleStatus.APPLICATIONS_OPEN,
    CycleStatus.APPLICATIONS_CLOSED,
})


class UserRole(str, Enum):
    NONE = "None"
    ADMIN = "Admin"
    SUPERVISOR = "Supervisor"
    BECA = "Beca"


_DAY_NAMES = {
    1: "Monday",
    2: "Tuesday",
    3: "Wednesday",
    4: "Thursday",
    5: "Friday",
    6: "Saturday",
    7: "Sunday",
}


def day_of_week_name(day_of_week: int) -> str:
    return _DAY_NAMES.get(day_of_week, "Unknown")


def duration_hours(start_time: time, end_time: time) -> float:
    start = start_time.hour * 3600 + start_time.minute * 60 + start_time.second
    end = end_time.hour * 3600 + end_time.minute * 60 + end_time.second
    return (end - start) / 3600


@dataclass
class ScheduleSlot:
    """
    Еженедельное окно работы на площадке цикла.
    - day_of_week: 1 = понедельник … 7 = воскресенье
    - required_scholars: сколько стипендиатов нужно одновременно
    Слоты не имеют собственной идентичности между переконфигурациями:
    при каждом Configure они удаляются и создаются заново.
    """
    cycle_location_id: str
    day_of_week: int
    start_time: time
    end_time: time
    required_scholars: int
    created_by: str
    created_at: datetime
    id: str = field(default_factory=new_id)

    @property
    def duration_hours(self) -> float:
        return duration_hours(self.start_time, self.end_time)

    @property
    def day_of_week_name(self) -> str:
        return day_of_week_name(self.day_of_week)


@dataclass
class CycleLocation:
    """
    Участие площадки каталога (location_id) в конкретном цикле.
    Не удаляется физически: из конфигурации убирается только через is_active=False.
    """
    cycle_id: str
    location_id: str
    scholarships_available: int
    created_by: str
    created_at: datetime
    scholarships_assigned: int = 0
    is_active: bool = True
    updated_by: Optional[str] = None
    updated_at: Optional[datetime] = None
    id: str = field(default_factory=new_id)
    schedule_slots: List[ScheduleSlot] = field(default_factory=list)

    @property
    def remaining_slots(self) -> int:
        return max(0, self.scholarships_available - self.scholarships_assigned)

    @property
    def has_available_slots(self) -> bool:
        return self.scholarships_available > self.scholarships_assigned

    def touch(self, actor: str, now: datetime) -> None:
        self.updated_by = actor
        self.updated_at = now


@dataclass
class SupervisorAssignment:
    cycle_id: str
    cycle_location_id: str
    supervisor_id: str
    assigned_at: datetime
    created_by: str
    id: str = field(default_factory=new_id)


@dataclass
class Cycle:
    """
    Семестровый цикл программы «beca trabajo» одного департамента.
    Корень агрегата: владеет CycleLocation (а через них и ScheduleSlot)
    и SupervisorAssignment.

    Инварианты:
      • start_date < end_date
      • application_deadline < interview_date < selection_date < end_date
      • в департаменте не больше одного цикла в статусе, отличном от Closed
    """
    name: str
    department: str
    start_date: datetime
    end_date: datetime
    application_deadline: datetime
    interview_date: datetime
    selection_date: datetime
    total_scholarships_available: int
    created_by: str
    created_at: datetime
    status: CycleStatus = CycleStatus.CONFIGURATION
    total_scholarships_assigned: int = 0
    renewal_process_completed: bool = False
    cloned_from_cycle_id: Optional[str] = None
    closed_at: Optional[datetime] = None
    closed_by: Optional[str] = None
    updated_by: Optional[str] = None
    updated_at: Optional[datetime] = None
    id: str = field(default_factory=new_id)

    @property
    def is_modifiable(self) -> bool:
        return self.status != CycleStatus.CLOSED

    @property
    def accepts_applications(self) -> bool:
        return self.status == CycleStatus.APPLICATIONS_OPEN

    @property
    def is_operational(self) -> bool:
        return self.status == CycleStatus.ACTIVE

    @property
    def is_closed(self) -> bool:
        return self.status == CycleStatus.CLOSED

    def touch(self, actor: str, now: datetime) -> None:
        self.updated_by = actor
        self.updated_at = now


@dataclass
class Location:
    """
    Площадка из каталога департамента. Для ядра только для чтения.
    """
    name: str
    department: str
    created_by: str
    created_at: datetime
    is_active: bool = True
    description: Optional[str] = None
    address: Optional[str] = None
    id: str = field(default_factory=new_id)


@dataclass
class User:
    email: str
    first_name: str
    last_name: str
    role: UserRole
    created_at: datetime
    is_active: bool = True
    id: str = field(default_factory=new_id)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
