#!/usr/bin/env python3
import argparse
import sys
from datetime import datetime, timezone

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from workscholarship.application.dto import DashboardState
from workscholarship.application.use_cases.get_dashboard_state import GetDashboardStateUseCase
from workscholarship.application.use_cases.get_weekly_coverage import GetWeeklyCoverageUseCase
from workscholarship.config.config import settings
from workscholarship.config.logger import logger
from workscholarship.infrastructure.db.models import Base
from workscholarship.infrastructure.db.repositories.catalog_repository import CatalogRepository
from workscholarship.infrastructure.db.repositories.cycle_repository import CycleRepository


def _local_date(value: datetime) -> str:
    # в БД наивный UTC, показываем в таймзоне из настроек
    return value.replace(tzinfo=timezone.utc).astimezone(settings.timezone).strftime("%Y-%m-%d")


def _format_dashboard(department: str, state: DashboardState) -> str:
    lines = [
        f"Департамент: {department}",
        f"  площадок в каталоге: {state.locations_count}",
        f"  активных супервизоров: {state.supervisors_count}",
    ]
    for label, cycle in (
            ("активный цикл", state.active_cycle),
            ("цикл в настройке", state.cycle_in_configuration),
            ("последний закрытый", state.last_closed_cycle),
    ):
        if cycle is None:
            lines.append(f"  {label}: нет")
        else:
            lines.append(
                f"  {label}: {cycle.name} [{cycle.status.value}] "
                f"стипендий {cycle.total_scholarships_available}, "
                f"{_local_date(cycle.start_date)} … {_local_date(cycle.end_date)}, "
                f"площадок {cycle.locations_count}, супервизоров {cycle.supervisors_count}"
            )
    if state.pending_actions:
        lines.append("  требуется: " + ", ".join(p.code_string for p in state.pending_actions))
    else:
        lines.append("  требуется: ничего")
    return "\n".join(lines)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Состояние департамента для панели администратора")
    parser.add_argument("department", help="название департамента")
    parser.add_argument("--database-url", default=None, help="URL БД (по умолчанию из настроек)")
    parser.add_argument("--coverage", action="store_true",
                        help="показать недельную потребность текущего цикла")
    args = parser.parse_args(argv)

    logger.info("=== workscholarship: панель департамента %s ===", args.department)
    # 1) Настройка БД
    database_url = args.database_url or settings.database_url
    if args.database_url is None and settings.db_url is None:
        settings.data_dir.mkdir(parents=True, exist_ok=True)
    engine = create_engine(database_url, echo=settings.db_echo, future=True)
    Base.metadata.create_all(engine)
    Session = sessionmaker(bind=engine, future=True)

    # 2) Инициализация
    session = Session()
    cycle_repo = CycleRepository(session)
    dashboard = GetDashboardStateUseCase(cycle_repo, CatalogRepository(session), settings)

    # 3) Запуск
    try:
        state = dashboard.execute(args.department).value
        print(_format_dashboard(args.department, state))

        current = state.cycle_in_configuration or state.active_cycle
        if args.coverage and current is not None:
            coverage = GetWeeklyCoverageUseCase(session, cycle_repo).execute(current.id).value
            print(f"Недельная потребность цикла «{current.name}»:")
            for day in coverage:
                print(f"  {day.day_name:<9} слотов {day.slots:>2}, "
                      f"стипендиатов {day.required_scholars:>3}, человеко-часов {day.scholar_hours:g}")
    except Exception as e:
        logger.exception("Ошибка при сборке состояния департамента")
        print("❌ Ошибка:", e, file=sys.stderr)
        return 1
    finally:
        session.close()
        engine.dispose()
        logger.info("=== workscholarship завершён ===")
    return 0


if __name__ == "__main__":
    sys.exit(main())
