# repositories/cycle_repository.py
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy import delete, extract, func
from sqlalchemy.orm import Session

from workscholarship.domain.models import (
    Cycle, CycleLocation, CycleStatus, ScheduleSlot, SupervisorAssignment, normalize_department
)
from workscholarship.infrastructure.db.models import (
    CycleModel, CycleLocationModel, ScheduleSlotModel, SupervisorAssignmentModel
)


def _department_key(column):
    return func.lower(func.trim(column))


class CycleRepository:
    """
    Агрегат «цикл»: Cycle, его CycleLocation (со слотами) и SupervisorAssignment.
    Сессия служит единицей работы: репозиторий только пишет в неё, а атомарный
    шаг (commit / rollback) делает use case.
    """

    def __init__(self, session: Session):
        self._session = session

    # ——— МАППЕРЫ ——————————————————————————————————————————————
    @staticmethod
    def _to_cycle_model(c: Cycle) -> CycleModel:
        return CycleModel(
            id=c.id,
            name=c.name,
            department=c.department,
            start_date=c.start_date,
            end_date=c.end_date,
            application_deadline=c.application_deadline,
            interview_date=c.interview_date,
            selection_date=c.selection_date,
            status=c.status.value,
            total_scholarships_available=c.total_scholarships_available,
            total_scholarships_assigned=c.total_scholarships_assigned,
            renewal_process_completed=c.renewal_process_completed,
            cloned_from_cycle_id=c.cloned_from_cycle_id,
            closed_at=c.closed_at,
            closed_by=c.closed_by,
            created_at=c.created_at,
            created_by=c.created_by,
            updated_at=c.updated_at,
            updated_by=c.updated_by,
        )

    @staticmethod
    def _to_cycle_domain(m: CycleModel) -> Cycle:
        return Cycle(
            id=m.id,
            name=m.name,
            department=m.department,
            start_date=m.start_date,
            end_date=m.end_date,
            application_deadline=m.application_deadline,
            interview_date=m.interview_date,
            selection_date=m.selection_date,
            status=CycleStatus(m.status),
            total_scholarships_available=m.total_scholarships_available,
            total_scholarships_assigned=m.total_scholarships_assigned,
            renewal_process_completed=m.renewal_process_completed,
            cloned_from_cycle_id=m.cloned_from_cycle_id,
            closed_at=m.closed_at,
            closed_by=m.closed_by,
            created_at=m.created_at,
            created_by=m.created_by,
            updated_at=m.updated_at,
            updated_by=m.updated_by,
        )

    @staticmethod
    def _to_cycle_location_model(cl: CycleLocation) -> CycleLocationModel:
        # слоты пишутся отдельно: add_schedule_slots_bulk
        return CycleLocationModel(
            id=cl.id,
            cycle_id=cl.cycle_id,
            location_id=cl.location_id,
            scholarships_available=cl.scholarships_available,
            scholarships_assigned=cl.scholarships_assigned,
            is_active=cl.is_active,
            created_at=cl.created_at,
            created_by=cl.created_by,
            updated_at=cl.updated_at,
            updated_by=cl.updated_by,
        )

    @staticmethod
    def _to_cycle_location_domain(m: CycleLocationModel, slots: List[ScheduleSlot]) -> CycleLocation:
        return CycleLocation(
            id=m.id,
            cycle_id=m.cycle_id,
            location_id=m.location_id,
            scholarships_available=m.scholarships_available,
            scholarships_assigned=m.scholarships_assigned,
            is_active=m.is_active,
            created_at=m.created_at,
            created_by=m.created_by,
            updated_at=m.updated_at,
            updated_by=m.updated_by,
            schedule_slots=slots,
        )

    @staticmethod
    def _to_slot_model(s: ScheduleSlot) -> ScheduleSlotModel:
        return ScheduleSlotModel(
            id=s.id,
            cycle_location_id=s.cycle_location_id,
            day_of_week=s.day_of_week,
            start_time=s.start_time,
            end_time=s.end_time,
            required_scholars=s.required_scholars,
            created_at=s.created_at,
            created_by=s.created_by,
        )

    @staticmethod
    def _to_slot_domain(m: ScheduleSlotModel) -> ScheduleSlot:
        return ScheduleSlot(
            id=m.id,
            cycle_location_id=m.cycle_location_id,
            day_of_week=m.day_of_week,
            start_time=m.start_time,
            end_time=m.end_time,
            required_scholars=m.required_scholars,
            created_at=m.created_at,
            created_by=m.created_by,
        )

    @staticmethod
    def _to_assignment_model(a: SupervisorAssignment) -> SupervisorAssignmentModel:
        return SupervisorAssignmentModel(
            id=a.id,
            cycle_id=a.cycle_id,
            cycle_location_id=a.cycle_location_id,
            supervisor_id=a.supervisor_id,
            assigned_at=a.assigned_at,
            created_by=a.created_by,
        )

    @staticmethod
    def _to_assignment_domain(m: SupervisorAssignmentModel) -> SupervisorAssignment:
        return SupervisorAssignment(
            id=m.id,
            cycle_id=m.cycle_id,
            cycle_location_id=m.cycle_location_id,
            supervisor_id=m.supervisor_id,
            assigned_at=m.assigned_at,
            created_by=m.created_by,
        )

    # ——— ЦИКЛЫ ——————————————————————————————————————————————

    def has_open_cycle(self, department: str) -> bool:
        """Есть ли в департаменте цикл в любом статусе, кроме Closed."""
        q = (
            self._session.query(CycleModel.id)
            .filter(
                _department_key(CycleModel.department) == normalize_department(department),
                CycleModel.status != CycleStatus.CLOSED.value,
            )
        )
        return self._session.query(q.exists()).scalar()

    def has_any_cycle(self, department: str) -> bool:
        q = (
            self._session.query(CycleModel.id)
            .filter(_department_key(CycleModel.department) == normalize_department(department))
        )
        return self._session.query(q.exists()).scalar()

    def get_cycle(self, cycle_id: str) -> Optional[Cycle]:
        m = self._session.get(CycleModel, cycle_id)
        return self._to_cycle_domain(m) if m else None

    def add_cycle(self, cycle: Cycle) -> None:
        self._session.add(self._to_cycle_model(cycle))

    def save_cycle(self, cycle: Cycle) -> None:
        self._session.merge(self._to_cycle_model(cycle))

    def get_recent_cycles(self, department: str, limit: int) -> List[Cycle]:
        rows = (
            self._session.query(CycleModel)
            .filter(_department_key(CycleModel.department) == normalize_department(department))
            .order_by(CycleModel.created_at.desc())
            .limit(limit)
            .all()
        )
        return [self._to_cycle_domain(m) for m in rows]

    def get_latest_open_cycle(self, department: str) -> Optional[Cycle]:
        m = (
            self._session.query(CycleModel)
            .filter(
                _department_key(CycleModel.department) == normalize_department(department),
                CycleModel.status != CycleStatus.CLOSED.value,
            )
            .order_by(CycleModel.created_at.desc())
            .first()
        )
        return self._to_cycle_domain(m) if m else None

    def list_cycles(
            self,
            department: Optional[str] = None,
            year: Optional[int] = None,
            status: Optional[CycleStatus] = None,
            page: int = 1,
            page_size: int = 10,
    ) -> Tuple[List[Cycle], int]:
        """
        Страница циклов (новые сверху) и общее число подходящих под фильтры.
        """
        q = self._session.query(CycleModel)
        if department:
            q = q.filter(_department_key(CycleModel.department) == normalize_department(department))
        if year is not None:
            q = q.filter(extract('year', CycleModel.start_date) == year)
        if status is not None:
            q = q.filter(CycleModel.status == status.value)

        total = q.count()
        rows = (
            q.order_by(CycleModel.created_at.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
            .all()
        )
        return [self._to_cycle_domain(m) for m in rows], total

    # ——— ПЛОЩАДКИ И СЛОТЫ ——————————————————————————————————————————

    def get_cycle_locations(self, cycle_id: str, active_only: bool = False) -> List[CycleLocation]:
        q = self._session.query(CycleLocationModel).filter(CycleLocationModel.cycle_id == cycle_id)
        if active_only:
            q = q.filter(CycleLocationModel.is_active.is_(True))
        models = q.order_by(CycleLocationModel.created_at, CycleLocationModel.location_id).all()
        if not models:
            return []

        slots: Dict[str, List[ScheduleSlot]] = defaultdict(list)
        slot_rows = (
            self._session.query(ScheduleSlotModel)
            .filter(ScheduleSlotModel.cycle_location_id.in_([m.id for m in models]))
            .order_by(ScheduleSlotModel.day_of_week, ScheduleSlotModel.start_time)
            .all()
        )
        for s in slot_rows:
            slots[s.cycle_location_id].append(self._to_slot_domain(s))

        return [self._to_cycle_location_domain(m, slots[m.id]) for m in models]

    def add_cycle_locations_bulk(self, locations: Iterable[CycleLocation]) -> None:
        objs = [self._to_cycle_location_model(cl) for cl in locations]
        self._session.bulk_save_objects(objs)

    def save_cycle_location(self, cl: CycleLocation) -> None:
        self._session.merge(self._to_cycle_location_model(cl))

    def delete_schedule_slots(self, cycle_location_ids: Iterable[str]) -> None:
        """
        Жёстко удалить все слоты перечисленных площадок цикла.
        """
        ids = list(cycle_location_ids)
        if not ids:
            return
        self._session.execute(
            delete(ScheduleSlotModel).where(ScheduleSlotModel.cycle_location_id.in_(ids))
        )

    def add_schedule_slots_bulk(self, slots: Iterable[ScheduleSlot]) -> None:
        objs = [self._to_slot_model(s) for s in slots]
        self._session.bulk_save_objects(objs)

    def sum_active_scholarships(self, cycle_id: str) -> int:
        total = (
            self._session.query(func.coalesce(func.sum(CycleLocationModel.scholarships_available), 0))
            .filter(
                CycleLocationModel.cycle_id == cycle_id,
                CycleLocationModel.is_active.is_(True),
            )
            .scalar()
        )
        return int(total)

    def count_active_locations(self, cycle_id: str) -> int:
        return (
            self._session.query(func.count(CycleLocationModel.id))
            .filter(
                CycleLocationModel.cycle_id == cycle_id,
                CycleLocationModel.is_active.is_(True),
            )
            .scalar()
        )

    # ——— НАЗНАЧЕНИЯ СУПЕРВИЗОРОВ ——————————————————————————————————

    def get_supervisor_assignments(self, cycle_id: str) -> List[SupervisorAssignment]:
        rows = (
            self._session.query(SupervisorAssignmentModel)
            .filter(SupervisorAssignmentModel.cycle_id == cycle_id)
            .order_by(SupervisorAssignmentModel.supervisor_id, SupervisorAssignmentModel.cycle_location_id)
            .all()
        )
        return [self._to_assignment_domain(m) for m in rows]

    def delete_supervisor_assignments(self, cycle_id: str) -> None:
        self._session.execute(
            delete(SupervisorAssignmentModel).where(SupervisorAssignmentModel.cycle_id == cycle_id)
        )

    def add_supervisor_assignments_bulk(self, assignments: Iterable[SupervisorAssignment]) -> None:
        objs = [self._to_assignment_model(a) for a in assignments]
        self._session.bulk_save_objects(objs)

    def count_supervisor_assignments(self, cycle_id: str) -> int:
        return (
            self._session.query(func.count(SupervisorAssignmentModel.id))
            .filter(SupervisorAssignmentModel.cycle_id == cycle_id)
            .scalar()
        )

    # ——— ТРАНЗАКЦИЯ ——————————————————————————————————————————————

    def flush(self) -> None:
        self._session.flush()

    def commit(self) -> None:
        self._session.commit()

    def rollback(self) -> None:
        self._session.rollback()
