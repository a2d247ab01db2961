from __future__ import annotations

from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from workscholarship.application.commands import ConfigureCycleCommand
from workscholarship.application.dto import CycleSummary
from workscholarship.application.validation import parse_command
from workscholarship.config.logger import logger
from workscholarship.domain.errors import ErrorCode, Result
from workscholarship.domain.models import CycleStatus
from workscholarship.infrastructure.db.repositories.cycle_repository import CycleRepository
from workscholarship.services.clock import Clock
from workscholarship.services.configuration_engine import plan_configuration


class ConfigureCycleUseCase:
    """
    Replace-all конфигурация цикла в статусе Configuration.

    Клиент всегда присылает полное желаемое состояние:
        1. площадки, которых нет в запросе, деактивируются
        2. существующие обновляются, их слоты пересоздаются
        3. новые создаются со слотами
        4. назначения супервизоров заменяются целиком
        5. total_scholarships_available пересчитывается по активным площадкам

    Всё в одной транзакции; при ошибке БД делается rollback.
    """

    def __init__(self, repo: CycleRepository, clock: Clock):
        self._repo = repo
        self._clock = clock

    def execute(self, command: Any, actor: str) -> Result[CycleSummary]:
        cmd, error = parse_command(ConfigureCycleCommand, command)
        if error:
            logger.warning("Конфигурация отклонена: некорректный запрос (%d ошибок)", len(error.details))
            return Result.from_error(error)

        now = self._clock.now()
        logger.info(
            "=== Конфигурация цикла %s: %d площадок, %d назначений ===",
            cmd.cycle_id, len(cmd.locations), len(cmd.supervisor_assignments),
        )
        try:
            cycle = self._repo.get_cycle(cmd.cycle_id)
            if cycle is None:
                self._repo.rollback()
                return Result.failure(ErrorCode.CYCLE_NOT_FOUND, f"Цикл {cmd.cycle_id} не найден.")
            if cycle.status != CycleStatus.CONFIGURATION:
                self._repo.rollback()
                logger.warning("✕ Цикл %s в статусе %s, конфигурация запрещена", cycle.id, cycle.status.value)
                return Result.failure(
                    ErrorCode.NOT_IN_CONFIGURATION,
                    "Менять площадки и супервизоров можно только в статусе Configuration.",
                )

            existing = self._repo.get_cycle_locations(cycle.id)
            plan = plan_configuration(
                cycle.id, existing, cmd.locations, cmd.supervisor_assignments, actor, now
            )

            for cl in plan.deactivated + plan.updated:
                self._repo.save_cycle_location(cl)
            self._repo.add_cycle_locations_bulk(plan.created)
            self._repo.delete_schedule_slots(plan.slots_to_replace)
            self._repo.add_schedule_slots_bulk(plan.new_slots)

            self._repo.delete_supervisor_assignments(cycle.id)
            self._repo.add_supervisor_assignments_bulk(plan.assignments)

            # явный пересчёт ёмкости в той же транзакции
            self._repo.flush()
            cycle.total_scholarships_available = self._repo.sum_active_scholarships(cycle.id)
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

        logger.info(
            "✅ Цикл %s сконфигурирован: деактивировано %d, обновлено %d, создано %d, стипендий %d",
            cycle.id, len(plan.deactivated), len(plan.updated), len(plan.created),
            cycle.total_scholarships_available,
        )
        return Result.success(CycleSummary.from_domain(cycle, locations_count, supervisors_count))
