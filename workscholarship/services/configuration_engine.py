"""
Replace-all сверка конфигурации цикла.

На вход: то, что уже лежит в БД (CycleLocation вместе со слотами), и
желаемое состояние из команды Configure. На выход: план изменений,
который use case применяет к репозиторию в одной транзакции.

Правила:
  • площадки, чьего location_id нет в желаемом наборе, деактивируются
    (физически не удаляются, история сохраняется);
  • существующие площадки из набора обновляют число стипендий и флаг
    активности, а их слоты пересоздаются целиком;
  • новые площадки создаются вместе со своими слотами;
  • назначения супервизоров цикла заменяются полностью, без диффа.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Dict, List, Sequence

from workscholarship.domain.models import CycleLocation, ScheduleSlot, SupervisorAssignment

if TYPE_CHECKING:
    from workscholarship.application.commands import (
        LocationInput,
        ScheduleSlotInput,
        SupervisorAssignmentInput,
    )


@dataclass
class ReconciliationPlan:
    deactivated: List[CycleLocation] = field(default_factory=list)
    updated: List[CycleLocation] = field(default_factory=list)
    created: List[CycleLocation] = field(default_factory=list)
    assignments: List[SupervisorAssignment] = field(default_factory=list)

    @property
    def touched(self) -> List[CycleLocation]:
        return self.deactivated + self.updated + self.created

    @property
    def slots_to_replace(self) -> List[str]:
        """cycle_location_id, у которых старые слоты нужно удалить перед вставкой новых"""
        return [cl.id for cl in self.updated]

    @property
    def new_slots(self) -> List[ScheduleSlot]:
        return [slot for cl in self.updated + self.created for slot in cl.schedule_slots]


def _build_slots(
        cycle_location_id: str,
        inputs: Sequence["ScheduleSlotInput"],
        actor: str,
        now: datetime,
) -> List[ScheduleSlot]:
    return [
        ScheduleSlot(
            cycle_location_id=cycle_location_id,
            day_of_week=s.day_of_week,
            start_time=s.start_time,
            end_time=s.end_time,
            required_scholars=s.required_scholars,
            created_by=actor,
            created_at=now,
        )
        for s in inputs
    ]


def plan_locations(
        cycle_id: str,
        existing: Sequence[CycleLocation],
        desired: Sequence["LocationInput"],
        actor: str,
        now: datetime,
) -> ReconciliationPlan:
    plan = ReconciliationPlan()
    by_location: Dict[str, CycleLocation] = {cl.location_id: cl for cl in existing}
    desired_ids = {d.location_id for d in desired}

    # 1) нет в запросе → деактивируем
    for cl in existing:
        if cl.location_id not in desired_ids:
            cl.is_active = False
            cl.touch(actor, now)
            plan.deactivated.append(cl)

    # 2) есть в запросе: обновляем или создаём
    for d in desired:
        current = by_location.get(d.location_id)
        if current is not None:
            current.scholarships_available = d.scholarships_available
            current.is_active = d.is_active
            current.touch(actor, now)
            current.schedule_slots = _build_slots(current.id, d.schedule_slots, actor, now)
            plan.updated.append(current)
        else:
            cl = CycleLocation(
                cycle_id=cycle_id,
                location_id=d.location_id,
                scholarships_available=d.scholarships_available,
                is_active=d.is_active,
                created_by=actor,
                created_at=now,
            )
            cl.schedule_slots = _build_slots(cl.id, d.schedule_slots, actor, now)
            plan.created.append(cl)

    return plan


def plan_assignments(
        cycle_id: str,
        desired: Sequence["SupervisorAssignmentInput"],
        actor: str,
        now: datetime,
) -> List[SupervisorAssignment]:
    return [
        SupervisorAssignment(
            cycle_id=cycle_id,
            cycle_location_id=a.cycle_location_id,
            supervisor_id=a.supervisor_id,
            assigned_at=now,
            created_by=actor,
        )
        for a in desired
    ]


def plan_configuration(
        cycle_id: str,
        existing: Sequence[CycleLocation],
        desired_locations: Sequence["LocationInput"],
        desired_assignments: Sequence["SupervisorAssignmentInput"],
        actor: str,
        now: datetime,
) -> ReconciliationPlan:
    plan = plan_locations(cycle_id, existing, desired_locations, actor, now)
    plan.assignments = plan_assignments(cycle_id, desired_assignments, actor, now)
    return plan


def clone_locations(
        cycle_id: str,
        source: Sequence[CycleLocation],
        actor: str,
        now: datetime,
) -> List[CycleLocation]:
    """
    Глубокая копия всех площадок закрытого цикла вместе с is_active: новые id,
    scholarships_assigned обнуляется, слоты копируются. Супервизоры не копируются.
    """
    clones: List[CycleLocation] = []
    for src in source:
        cl = CycleLocation(
            cycle_id=cycle_id,
            location_id=src.location_id,
            scholarships_available=src.scholarships_available,
            is_active=src.is_active,
            created_by=actor,
            created_at=now,
        )
        cl.schedule_slots = [
            ScheduleSlot(
                cycle_location_id=cl.id,
                day_of_week=s.day_of_week,
                start_time=s.start_time,
                end_time=s.end_time,
                required_scholars=s.required_scholars,
                created_by=actor,
                created_at=now,
            )
            for s in src.schedule_slots
        ]
        clones.append(cl)
    return clones
