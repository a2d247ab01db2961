from __future__ import annotations

from workscholarship.application.dto import CycleDetail, CycleLocationView, CycleSummary
from workscholarship.domain.errors import ErrorCode, Result
from workscholarship.infrastructure.db.repositories.cycle_repository import CycleRepository


class GetCycleByIdUseCase:
    def __init__(self, repo: CycleRepository):
        self._repo = repo

    def execute(self, cycle_id: str) -> Result[CycleDetail]:
        cycle = self._repo.get_cycle(cycle_id)
        if cycle is None:
            return Result.failure(ErrorCode.CYCLE_NOT_FOUND, f"Цикл {cycle_id} не найден.")

        locations = self._repo.get_cycle_locations(cycle.id)
        summary = CycleSummary.from_domain(
            cycle,
            locations_count=sum(1 for cl in locations if cl.is_active),
            supervisors_count=self._repo.count_supervisor_assignments(cycle.id),
        )
        return Result.success(CycleDetail(
            summary=summary,
            closed_by=cycle.closed_by,
            created_by=cycle.created_by,
            updated_by=cycle.updated_by,
            # стипендиатов ведёт подсистема отбора, которой в ядре нет
            scholars_count=0,
            locations=[CycleLocationView.from_domain(cl) for cl in locations],
        ))
