from __future__ import annotations

from typing import Optional

from workscholarship.application.dto import CycleSummary
from workscholarship.domain.errors import Result
from workscholarship.infrastructure.db.repositories.cycle_repository import CycleRepository


class GetActiveCycleUseCase:
    """
    Текущий (самый свежий незакрытый) цикл департамента или None.
    Отсутствие цикла не ошибка.
    """

    def __init__(self, repo: CycleRepository):
        self._repo = repo

    def execute(self, department: str) -> Result[Optional[CycleSummary]]:
        cycle = self._repo.get_latest_open_cycle(department)
        if cycle is None:
            return Result.success(None)
        return Result.success(CycleSummary.from_domain(
            cycle,
            locations_count=self._repo.count_active_locations(cycle.id),
            supervisors_count=self._repo.count_supervisor_assignments(cycle.id),
        ))
