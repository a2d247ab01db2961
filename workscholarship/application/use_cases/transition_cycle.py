from __future__ import annotations

from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from workscholarship.application.commands import TransitionCycleCommand
from workscholarship.application.dto import CycleSummary
from workscholarship.application.validation import parse_command
from workscholarship.config.logger import logger
from workscholarship.domain.cycle_state_machine import action_for, apply_transition
from workscholarship.domain.errors import ErrorCode, Result
from workscholarship.infrastructure.db.repositories.cycle_repository import CycleRepository
from workscholarship.services.clock import Clock


class TransitionCycleUseCase:
    """
    Перевод цикла в целевой статус по таблице переходов.
    Недопустимое ребро → INVALID_TRANSITION, нарушенный гейт → его код;
    в обоих случаях цикл не меняется.
    """

    def __init__(self, repo: CycleRepository, clock: Clock):
        self._repo = repo
        self._clock = clock

    def execute(self, command: Any, actor: str) -> Result[CycleSummary]:
        cmd, error = parse_command(TransitionCycleCommand, command)
        if error:
            return Result.from_error(error)

        now = self._clock.now()
        try:
            cycle = self._repo.get_cycle(cmd.cycle_id)
            if cycle is None:
                self._repo.rollback()
                return Result.failure(ErrorCode.CYCLE_NOT_FOUND, f"Цикл {cmd.cycle_id} не найден.")

            action = action_for(cycle.status, cmd.target_status)
            if action is None:
                self._repo.rollback()
                logger.warning(
                    "✕ Цикл %s: переход %s → %s недопустим",
                    cycle.id, cycle.status.value, cmd.target_status.value,
                )
                return Result.failure(
                    ErrorCode.INVALID_TRANSITION,
                    f"Переход из {cycle.status.value} в {cmd.target_status.value} недопустим.",
                )

            logger.info("=== Цикл %s: %s (%s) ===", cycle.id, action.value, cycle.status.value)
            # TODO: подставить реальные счётчики, когда появятся подсистемы смен и журналов
            gate_error = apply_transition(
                cycle,
                action,
                actor=actor,
                now=now,
                active_locations_count=self._repo.count_active_locations(cycle.id),
                pending_shifts_count=0,
                missing_logbooks_count=0,
            )
            if gate_error is not None:
                self._repo.rollback()
                logger.warning("✕ Цикл %s: %s", cycle.id, gate_error.code.value)
                return Result.from_error(gate_error)

            self._repo.save_cycle(cycle)
            self._repo.flush()
            locations_count = self._repo.count_active_locations(cycle.id)
            supervisors_count = self._repo.count_supervisor_assignments(cycle.id)
            self._repo.commit()
        except SQLAlchemyError as db_err:
            logger.exception("Ошибка транзакции, выполняем rollback: %s", db_err)
            self._repo.rollback()
            raise

        logger.info("✅ Цикл %s переведён в %s", cycle.id, cycle.status.value)
        return Result.success(CycleSummary.from_domain(cycle, locations_count, supervisors_count))
