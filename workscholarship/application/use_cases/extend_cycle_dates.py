from __future__ import annotations

from typing import Any, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError

from workscholarship.application.commands import ExtendCycleDatesCommand
from workscholarship.application.dto import CycleSummary
from workscholarship.application.validation import parse_command
from workscholarship.config.logger import logger
from workscholarship.domain.errors import Error, ErrorCode, Result
from workscholarship.domain.models import Cycle, CycleStatus
from workscholarship.infrastructure.db.repositories.cycle_repository import CycleRepository
from workscholarship.services.clock import Clock

# (поле команды, поле цикла, подпись для сообщения)
_EXTENDABLE = (
    ("new_application_deadline", "application_deadline", "крайний срок подачи заявок"),
    ("new_interview_date", "interview_date", "дата собеседований"),
    ("new_selection_date", "selection_date", "дата отбора"),
    ("new_end_date", "end_date", "дата окончания"),
)


def _check_extension(cycle: Cycle, cmd: ExtendCycleDatesCommand) -> Tuple[List[Tuple[str, Any]], Optional[Error]]:
    """
    Даты можно только сдвигать вперёд, и порядок
    deadline < interview < selection < end должен сохраниться.
    """
    changes = []
    for cmd_field, cycle_field, label in _EXTENDABLE:
        new_value = getattr(cmd, cmd_field)
        if new_value is None:
            continue
        if new_value <= getattr(cycle, cycle_field):
            return [], Error(ErrorCode.INVALID_DATE, f"{label.capitalize()}: новое значение должно быть позже текущего.")
        changes.append((cycle_field, new_value))

    resulting = dict(
        (cycle_field, getattr(cycle, cycle_field)) for _, cycle_field, _ in _EXTENDABLE
    )
    resulting.update(changes)
    if not (
            resulting["application_deadline"]
            < resulting["interview_date"]
            < resulting["selection_date"]
            < resulting["end_date"]
    ):
        return [], Error(
            ErrorCode.INVALID_DATE,
            "После продления должно сохраняться: подача заявок < собеседования < отбор < окончание.",
        )
    return changes, None


class ExtendCycleDatesUseCase:
    """
    Продление ключевых дат цикла. Закрытый цикл не трогаем;
    при закрытом приёме заявок продлевать нельзя, сначала переоткройте приём.
    """

    def __init__(self, repo: CycleRepository, clock: Clock):
        self._repo = repo
        self._clock = clock

    def execute(self, command: Any, actor: str) -> Result[CycleSummary]:
        cmd, error = parse_command(ExtendCycleDatesCommand, command)
        if error:
            return Result.from_error(error)

        now = self._clock.now()
        try:
            cycle = self._repo.get_cycle(cmd.cycle_id)
            if cycle is None:
                self._repo.rollback()
                return Result.failure(ErrorCode.CYCLE_NOT_FOUND, f"Цикл {cmd.cycle_id} не найден.")
            if cycle.status == CycleStatus.CLOSED:
                self._repo.rollback()
                return Result.failure(ErrorCode.CYCLE_CLOSED, "Закрытый цикл изменять нельзя.")
            if cycle.status == CycleStatus.APPLICATIONS_CLOSED:
                self._repo.rollback()
                return Result.failure(
                    ErrorCode.INVALID_TRANSITION,
                    "Приём заявок закрыт: переоткройте его, чтобы продлить даты.",
                )

            changes, date_error = _check_extension(cycle, cmd)
            if date_error is not None:
                self._repo.rollback()
                logger.warning("✕ Цикл %s: даты не продлены (%s)", cycle.id, date_error.message)
                return Result.from_error(date_error)

            logger.info("=== Цикл %s: продление дат %s ===", cycle.id, [name for name, _ in changes])
            for cycle_field, new_value in changes:
                setattr(cycle, cycle_field, new_value)
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

        logger.info("✅ Даты цикла %s продлены", cycle.id)
        return Result.success(CycleSummary.from_domain(cycle, locations_count, supervisors_count))
