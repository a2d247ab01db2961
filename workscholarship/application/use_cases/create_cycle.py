from __future__ import annotations

from typing import Any

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from workscholarship.application.commands import CreateCycleCommand
from workscholarship.application.dto import CycleSummary
from workscholarship.application.validation import parse_command
from workscholarship.config.logger import logger
from workscholarship.domain.errors import ErrorCode, Result
from workscholarship.domain.models import Cycle, CycleStatus
from workscholarship.infrastructure.db.models import OPEN_CYCLE_INDEX
from workscholarship.infrastructure.db.repositories.cycle_repository import CycleRepository
from workscholarship.services.clock import Clock
from workscholarship.services.configuration_engine import clone_locations


class CreateCycleUseCase:
    """
    Создание нового цикла департамента, опционально клонированием закрытого.

    Порядок:
        1. валидация входа (даты относительно clock.now())
        2. в департаменте не должно быть незакрытого цикла
        3. первый цикл департамента → продления считаются выполненными
        4. при clone_from_cycle_id: глубокая копия всех площадок и слотов,
           is_active переносится (супервизоры не копируются)
        5. один коммит на всё
    """

    def __init__(self, repo: CycleRepository, clock: Clock):
        self._repo = repo
        self._clock = clock

    def execute(self, command: Any, actor: str) -> Result[CycleSummary]:
        now = self._clock.now()
        cmd, error = parse_command(CreateCycleCommand, command, now=now)
        if error:
            logger.warning("Цикл не создан: некорректный запрос (%d ошибок)", len(error.details))
            return Result.from_error(error)

        logger.info("=== Создание цикла «%s» для департамента %s ===", cmd.name, cmd.department)
        try:
            if self._repo.has_open_cycle(cmd.department):
                return self._reject(
                    ErrorCode.DUPLICATE_CYCLE,
                    f"В департаменте «{cmd.department}» уже есть активный или настраиваемый цикл.",
                )

            source = None
            source_locations = []
            if cmd.clone_from_cycle_id:
                source = self._repo.get_cycle(cmd.clone_from_cycle_id)
                if source is None:
                    return self._reject(
                        ErrorCode.CYCLE_NOT_FOUND,
                        f"Цикл-источник {cmd.clone_from_cycle_id} не найден.",
                    )
                if source.status != CycleStatus.CLOSED:
                    return self._reject(
                        ErrorCode.INVALID_CLONE_SOURCE,
                        "Клонировать можно только закрытый цикл.",
                    )
                source_locations = self._repo.get_cycle_locations(source.id)

            is_first_cycle = not self._repo.has_any_cycle(cmd.department)

            cycle = Cycle(
                name=cmd.name,
                department=cmd.department,
                start_date=cmd.start_date,
                end_date=cmd.end_date,
                application_deadline=cmd.application_deadline,
                interview_date=cmd.interview_date,
                selection_date=cmd.selection_date,
                total_scholarships_available=cmd.total_scholarships_available,
                renewal_process_completed=is_first_cycle,
                cloned_from_cycle_id=source.id if source else None,
                created_by=actor,
                created_at=now,
            )

            clones = clone_locations(cycle.id, source_locations, actor, now)
            active_clones = [cl for cl in clones if cl.is_active]
            if active_clones:
                cycle.total_scholarships_available = sum(cl.scholarships_available for cl in active_clones)

            self._repo.add_cycle(cycle)
            self._repo.flush()
            self._repo.add_cycle_locations_bulk(clones)
            self._repo.add_schedule_slots_bulk(slot for cl in clones for slot in cl.schedule_slots)
            self._repo.commit()
        except IntegrityError as db_err:
            if OPEN_CYCLE_INDEX not in str(db_err.orig):
                logger.exception("Ошибка целостности, выполняем rollback: %s", db_err)
                self._repo.rollback()
                raise
            # параллельное создание: сработал уникальный индекс по департаменту
            return self._reject(
                ErrorCode.DUPLICATE_CYCLE,
                f"В департаменте «{cmd.department}» уже есть активный или настраиваемый цикл.",
            )
        except SQLAlchemyError as db_err:
            logger.exception("Ошибка транзакции, выполняем rollback: %s", db_err)
            self._repo.rollback()
            raise

        logger.info(
            "✅ Цикл %s создан (площадок скопировано: %d, из них активных: %d, первый цикл: %s)",
            cycle.id, len(clones), len(active_clones), is_first_cycle,
        )
        return Result.success(
            CycleSummary.from_domain(cycle, locations_count=len(active_clones), supervisors_count=0)
        )

    def _reject(self, code: ErrorCode, message: str) -> Result[CycleSummary]:
        self._repo.rollback()
        logger.warning("✕ Цикл не создан: %s", code.value)
        return Result.failure(code, message)
