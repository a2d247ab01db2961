from __future__ import annotations

from typing import List, Optional

from workscholarship.application.dto import CycleSummary, DashboardState, PendingActionCode
from workscholarship.config.config import Settings
from workscholarship.config.logger import logger
from workscholarship.domain.errors import Result
from workscholarship.domain.models import IN_CONFIGURATION_STATUSES, Cycle, CycleStatus
from workscholarship.infrastructure.db.repositories.catalog_repository import CatalogRepository
from workscholarship.infrastructure.db.repositories.cycle_repository import CycleRepository


class GetDashboardStateUseCase:
    """
    Состояние департамента для панели администратора.
    Только чтение; пустое состояние нового департамента тоже считается успехом.
    Ошибки БД не маскируются.
    """

    def __init__(self, cycle_repo: CycleRepository, catalog_repo: CatalogRepository, settings: Settings):
        self._cycles = cycle_repo
        self._catalog = catalog_repo
        self._settings = settings

    def _summary(self, cycle: Optional[Cycle]) -> Optional[CycleSummary]:
        if cycle is None:
            return None
        return CycleSummary.from_domain(
            cycle,
            locations_count=self._cycles.count_active_locations(cycle.id),
            supervisors_count=self._cycles.count_supervisor_assignments(cycle.id),
        )

    def execute(self, department: str) -> Result[DashboardState]:
        locations_count = self._catalog.count_active_locations(department)
        supervisors_count = self._catalog.count_active_supervisors()

        recent = self._cycles.get_recent_cycles(department, self._settings.dashboard_recent_cycles)
        # recent отсортированы от новых к старым: берём первый подходящий каждого вида
        active = next((c for c in recent if c.status == CycleStatus.ACTIVE), None)
        in_configuration = next((c for c in recent if c.status in IN_CONFIGURATION_STATUSES), None)
        last_closed = next((c for c in recent if c.status == CycleStatus.CLOSED), None)

        active_summary = self._summary(active)
        config_summary = self._summary(in_configuration)

        pending: List[PendingActionCode] = []
        if locations_count == 0:
            pending.append(PendingActionCode.NO_LOCATIONS)
        if supervisors_count == 0:
            pending.append(PendingActionCode.NO_SUPERVISORS)
        if active_summary is None and config_summary is None:
            pending.append(PendingActionCode.NO_ACTIVE_CYCLE)
        if config_summary is not None:
            if config_summary.locations_count == 0:
                pending.append(PendingActionCode.CYCLE_NEEDS_LOCATIONS)
            if config_summary.supervisors_count == 0:
                pending.append(PendingActionCode.CYCLE_NEEDS_SUPERVISORS)
            if not config_summary.renewal_process_completed:
                pending.append(PendingActionCode.RENEWALS_PENDING)

        logger.debug(
            "Панель %s: площадок %d, супервизоров %d, ожидает действий: %s",
            department, locations_count, supervisors_count, [p.code_string for p in pending],
        )
        return Result.success(DashboardState(
            locations_count=locations_count,
            supervisors_count=supervisors_count,
            active_cycle=active_summary,
            cycle_in_configuration=config_summary,
            last_closed_cycle=self._summary(last_closed),
            pending_actions=pending,
        ))
