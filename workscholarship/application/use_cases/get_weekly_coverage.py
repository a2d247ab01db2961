from __future__ import annotations

from typing import List

from sqlalchemy.orm import Session

from workscholarship.application.dto import DayCoverage
from workscholarship.domain.errors import ErrorCode, Result
from workscholarship.infrastructure.db.queries.schedule_statistics import weekly_coverage
from workscholarship.infrastructure.db.repositories.cycle_repository import CycleRepository


class GetWeeklyCoverageUseCase:
    """
    Потребность цикла в стипендиатах по дням недели (только активные площадки).
    """

    def __init__(self, session: Session, repo: CycleRepository):
        self._session = session
        self._repo = repo

    def execute(self, cycle_id: str) -> Result[List[DayCoverage]]:
        if self._repo.get_cycle(cycle_id) is None:
            return Result.failure(ErrorCode.CYCLE_NOT_FOUND, f"Цикл {cycle_id} не найден.")

        df = weekly_coverage(self._session, cycle_id)
        return Result.success([
            DayCoverage(
                day_of_week=int(row.day_of_week),
                day_name=row.day_name,
                slots=int(row.slots),
                required_scholars=int(row.required_scholars),
                scholar_hours=float(row.scholar_hours),
            )
            for row in df.itertuples(index=False)
        ])
