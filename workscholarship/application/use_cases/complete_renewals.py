from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError

from workscholarship.application.dto import CycleSummary
from workscholarship.config.logger import logger
from workscholarship.domain.errors import ErrorCode, Result
from workscholarship.infrastructure.db.repositories.cycle_repository import CycleRepository
from workscholarship.services.clock import Clock


class CompleteRenewalsUseCase:
    """
    Отметка «продления обработаны или пропущены». Снимает гейт RENEWALS_PENDING
    на открытии приёма заявок. Повторный вызов ничего не ломает.
    """

    def __init__(self, repo: CycleRepository, clock: Clock):
        self._repo = repo
        self._clock = clock

    def execute(self, cycle_id: str, actor: str) -> Result[CycleSummary]:
        now = self._clock.now()
        try:
            cycle = self._repo.get_cycle(cycle_id)
            if cycle is None:
                self._repo.rollback()
                return Result.failure(ErrorCode.CYCLE_NOT_FOUND, f"Цикл {cycle_id} не найден.")
            if cycle.is_closed:
                self._repo.rollback()
                return Result.failure(ErrorCode.CYCLE_CLOSED, "Закрытый цикл изменять нельзя.")

            cycle.renewal_process_completed = True
            cycle.touch(actor, now)
            self._repo.save_cycle(cycle)

            self._repo.flush()
            locations_count = self._repo.count_active_locations(cycle.id)
            supervisors_count = self._repo.count_supervisor_assignments(cycle.id)
            self._repo.commit()
        except SQLAlchemyError as db_err:
            logger.exception("Ошибка транзакции, выполняем rollback: %s", db_err)
            self._repo.rollback()
            raise

        logger.info("✅ Продления цикла %s отмечены завершёнными", cycle.id)
        return Result.success(CycleSummary.from_domain(cycle, locations_count, supervisors_count))
