"""
Входные команды ядра (pydantic).

Проверки здесь только «по форме» и не зависят от состояния БД.
Проверка «дата в будущем» срабатывает, только если при валидации
передан context={"now": ...}; так её вызывает use case, получая время из Clock.
"""
from __future__ import annotations

from datetime import datetime, time, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator, model_validator

from workscholarship.domain.models import CycleStatus


def _naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _now_from(info: ValidationInfo) -> Optional[datetime]:
    if not info.context:
        return None
    return info.context.get("now")


class _Command(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)


# ───────────────────────── CreateCycle ─────────────────────────

class CreateCycleCommand(_Command):
    name: str = Field(min_length=1, max_length=100)
    department: str = Field(min_length=1, max_length=100)
    start_date: datetime
    end_date: datetime
    application_deadline: datetime
    interview_date: datetime
    selection_date: datetime
    total_scholarships_available: int = Field(gt=0)
    clone_from_cycle_id: Optional[str] = None

    @field_validator("start_date")
    @classmethod
    def _start_in_future(cls, v: datetime, info: ValidationInfo) -> datetime:
        v = _naive_utc(v)
        now = _now_from(info)
        if now is not None and v <= now:
            raise ValueError("Дата начала должна быть в будущем.")
        return v

    @field_validator("end_date")
    @classmethod
    def _end_after_start(cls, v: datetime, info: ValidationInfo) -> datetime:
        v = _naive_utc(v)
        start = info.data.get("start_date")
        if start is not None and v <= start:
            raise ValueError("Дата окончания должна быть позже даты начала.")
        return v

    @field_validator("application_deadline")
    @classmethod
    def _deadline_in_future(cls, v: datetime, info: ValidationInfo) -> datetime:
        v = _naive_utc(v)
        now = _now_from(info)
        if now is not None and v <= now:
            raise ValueError("Крайний срок подачи заявок должен быть в будущем.")
        return v

    @field_validator("interview_date")
    @classmethod
    def _interview_after_deadline(cls, v: datetime, info: ValidationInfo) -> datetime:
        v = _naive_utc(v)
        deadline = info.data.get("application_deadline")
        if deadline is not None and v <= deadline:
            raise ValueError("Собеседования должны быть позже крайнего срока подачи заявок.")
        return v

    @field_validator("selection_date")
    @classmethod
    def _selection_between_interview_and_end(cls, v: datetime, info: ValidationInfo) -> datetime:
        v = _naive_utc(v)
        interview = info.data.get("interview_date")
        end = info.data.get("end_date")
        if interview is not None and v <= interview:
            raise ValueError("Дата отбора должна быть позже собеседований.")
        if end is not None and v >= end:
            raise ValueError("Дата отбора должна быть раньше окончания цикла.")
        return v


# ───────────────────────── Configure ─────────────────────────

class ScheduleSlotInput(_Command):
    day_of_week: int = Field(ge=1, le=7)
    start_time: time
    end_time: time
    required_scholars: int = Field(gt=0)

    @field_validator("end_time")
    @classmethod
    def _end_after_start(cls, v: time, info: ValidationInfo) -> time:
        start = info.data.get("start_time")
        if start is not None and v <= start:
            raise ValueError("Время начала должно быть раньше времени окончания.")
        return v


class LocationInput(_Command):
    location_id: str = Field(min_length=1)
    scholarships_available: int = Field(gt=0)
    is_active: bool = True
    schedule_slots: List[ScheduleSlotInput] = Field(default_factory=list)


class SupervisorAssignmentInput(_Command):
    supervisor_id: str = Field(min_length=1)
    cycle_location_id: str = Field(min_length=1)


class ConfigureCycleCommand(_Command):
    """
    Полное желаемое состояние конфигурации цикла.
    Всё, что не перечислено, будет деактивировано (площадки) или удалено (назначения).
    """
    cycle_id: str = Field(min_length=1)
    locations: List[LocationInput] = Field(default_factory=list)
    supervisor_assignments: List[SupervisorAssignmentInput] = Field(default_factory=list)

    @field_validator("locations")
    @classmethod
    def _unique_locations(cls, v: List[LocationInput]) -> List[LocationInput]:
        seen = set()
        for item in v:
            if item.location_id in seen:
                raise ValueError(f"Площадка {item.location_id} указана больше одного раза.")
            seen.add(item.location_id)
        return v

    @field_validator("supervisor_assignments")
    @classmethod
    def _unique_assignments(cls, v: List[SupervisorAssignmentInput]) -> List[SupervisorAssignmentInput]:
        seen = set()
        for item in v:
            key = (item.supervisor_id, item.cycle_location_id)
            if key in seen:
                raise ValueError(
                    f"Супервизор {item.supervisor_id} уже назначен на {item.cycle_location_id}."
                )
            seen.add(key)
        return v


# ───────────────────────── Переходы и даты ─────────────────────────

class TransitionCycleCommand(_Command):
    cycle_id: str = Field(min_length=1)
    target_status: CycleStatus


class ExtendCycleDatesCommand(_Command):
    cycle_id: str = Field(min_length=1)
    new_application_deadline: Optional[datetime] = None
    new_interview_date: Optional[datetime] = None
    new_selection_date: Optional[datetime] = None
    new_end_date: Optional[datetime] = None

    @field_validator(
        "new_application_deadline", "new_interview_date", "new_selection_date", "new_end_date"
    )
    @classmethod
    def _to_naive_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return _naive_utc(v) if v is not None else None

    @model_validator(mode="after")
    def _at_least_one_date(self) -> "ExtendCycleDatesCommand":
        if (
                self.new_application_deadline is None
                and self.new_interview_date is None
                and self.new_selection_date is None
                and self.new_end_date is None
        ):
            raise ValueError("Нужно указать хотя бы одну дату для продления.")
        return self


# ───────────────────────── Списки ─────────────────────────

class ListCyclesQuery(_Command):
    department: Optional[str] = None
    year: Optional[int] = Field(None, ge=1)
    status: Optional[CycleStatus] = None
    page: int = Field(1, ge=1)
    page_size: Optional[int] = Field(None, ge=1)

    @field_validator("page_size")
    @classmethod
    def _page_size_limit(cls, v: Optional[int], info: ValidationInfo) -> Optional[int]:
        limit = info.context.get("max_page_size") if info.context else None
        if v is not None and limit is not None and v > limit:
            raise ValueError(f"Размер страницы не может превышать {limit}.")
        return v
