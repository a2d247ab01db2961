"""
Машина состояний цикла.

Таблица TRANSITIONS является единственным источником истины о допустимых рёбрах:
по ней проверяются переходы в рантайме, по ней же строятся тесты.

    Configuration → ApplicationsOpen → ApplicationsClosed → Active → Closed
                          ↑__________________|   (reopen)

Гейты (NO_LOCATIONS, CYCLE_NOT_ENDED, …) проверяются после таблицы и
до любой мутации: неуспешный переход ничего не меняет в цикле.
"""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Dict, Optional, Tuple

from workscholarship.domain.errors import Error, ErrorCode
from workscholarship.domain.models import Cycle, CycleStatus


class CycleAction(str, Enum):
    OPEN_APPLICATIONS = "OpenApplications"
    CLOSE_APPLICATIONS = "CloseApplications"
    REOPEN_APPLICATIONS = "ReopenApplications"
    ACTIVATE = "Activate"
    CLOSE = "Close"


TRANSITIONS: Dict[Tuple[CycleStatus, CycleAction], CycleStatus] = {
    (CycleStatus.CONFIGURATION, CycleAction.OPEN_APPLICATIONS): CycleStatus.APPLICATIONS_OPEN,
    (CycleStatus.APPLICATIONS_OPEN, CycleAction.CLOSE_APPLICATIONS): CycleStatus.APPLICATIONS_CLOSED,
    (CycleStatus.APPLICATIONS_CLOSED, CycleAction.REOPEN_APPLICATIONS): CycleStatus.APPLICATIONS_OPEN,
    (CycleStatus.APPLICATIONS_CLOSED, CycleAction.ACTIVATE): CycleStatus.ACTIVE,
    (CycleStatus.ACTIVE, CycleAction.CLOSE): CycleStatus.CLOSED,
}


def next_status(current: CycleStatus, action: CycleAction) -> Optional[CycleStatus]:
    return TRANSITIONS.get((current, action))


def action_for(current: CycleStatus, target: CycleStatus) -> Optional[CycleAction]:
    """
    Какое действие переводит цикл из current в target (None, если такого ребра нет).
    В таблице нет двух действий с одинаковой парой (from, to).
    """
    for (src, action), dst in TRANSITIONS.items():
        if src == current and dst == target:
            return action
    return None


def check_gates(
        cycle: Cycle,
        action: CycleAction,
        *,
        now: datetime,
        active_locations_count: int,
        pending_shifts_count: int = 0,
        missing_logbooks_count: int = 0,
) -> Optional[Error]:
    """
    Бизнес-предусловия конкретного действия. Возвращает первую нарушенную.

    Подсистемы смен и бортовых журналов ещё не существуют, поэтому
    pending_shifts_count / missing_logbooks_count сейчас всегда приходят нулями.
    Переход в Active намеренно без гейтов: готовность продлений
    обеспечивает вызывающий процесс.
    """
    if action == CycleAction.OPEN_APPLICATIONS:
        if active_locations_count == 0:
            return Error(ErrorCode.NO_LOCATIONS,
                         "Для открытия приёма заявок нужна хотя бы одна активная площадка.")
        if cycle.total_scholarships_available <= 0:
            return Error(ErrorCode.NO_SCHOLARSHIPS,
                         "Общее число стипендий должно быть больше 0.")
        if not cycle.renewal_process_completed:
            return Error(ErrorCode.RENEWALS_PENDING,
                         "Сначала обработайте или пропустите продления стипендий.")

    elif action == CycleAction.CLOSE:
        if now < cycle.end_date:
            return Error(ErrorCode.CYCLE_NOT_ENDED,
                         "Нельзя закрыть цикл до даты его окончания.")
        if pending_shifts_count > 0:
            return Error(ErrorCode.PENDING_SHIFTS,
                         f"Есть {pending_shifts_count} неподтверждённых смен.")
        if missing_logbooks_count > 0:
            return Error(ErrorCode.MISSING_LOGBOOKS,
                         f"Не сформированы журналы для {missing_logbooks_count} стипендиатов.")

    return None


def apply_transition(
        cycle: Cycle,
        action: CycleAction,
        *,
        actor: str,
        now: datetime,
        active_locations_count: int,
        pending_shifts_count: int = 0,
        missing_logbooks_count: int = 0,
) -> Optional[Error]:
    """
    Проверяет ребро и гейты, при успехе мутирует cycle. None означает, что переход выполнен.
    """
    target = next_status(cycle.status, action)
    if target is None:
        return Error(
            ErrorCode.INVALID_TRANSITION,
            f"Переход {action.value} недопустим из состояния {cycle.status.value}.",
        )

    gate_error = check_gates(
        cycle,
        action,
        now=now,
        active_locations_count=active_locations_count,
        pending_shifts_count=pending_shifts_count,
        missing_logbooks_count=missing_logbooks_count,
    )
    if gate_error is not None:
        return gate_error

    cycle.status = target
    if target == CycleStatus.CLOSED:
        cycle.closed_at = now
        cycle.closed_by = actor
    cycle.touch(actor, now)
    return None
