# workscholarship/infrastructure/db/queries/schedule_statistics.py

import pandas as pd
from sqlalchemy.orm import Session

from workscholarship.domain.models import day_of_week_name, duration_hours
from workscholarship.infrastructure.db.models import CycleLocationModel, ScheduleSlotModel

COVERAGE_COLUMNS = ["day_of_week", "day_name", "slots", "required_scholars", "scholar_hours"]


def weekly_coverage(session: Session, cycle_id: str) -> pd.DataFrame:
    """
    Недельная потребность цикла по дням: сколько слотов, сколько стипендиатов
    нужно одновременно (сумма required_scholars) и сколько человеко-часов
    (сумма required_scholars × длительность слота).
    Учитываются только активные площадки цикла. Дни без слотов не выводятся.
    """
    rows = (
        session.query(
            ScheduleSlotModel.day_of_week,
            ScheduleSlotModel.start_time,
            ScheduleSlotModel.end_time,
            ScheduleSlotModel.required_scholars,
        )
        .join(CycleLocationModel, CycleLocationModel.id == ScheduleSlotModel.cycle_location_id)
        .filter(
            CycleLocationModel.cycle_id == cycle_id,
            CycleLocationModel.is_active.is_(True),
        )
        .all()
    )
    if not rows:
        return pd.DataFrame(columns=COVERAGE_COLUMNS)

    df = pd.DataFrame(
        [
            {
                "day_of_week": r.day_of_week,
                "required_scholars": r.required_scholars,
                "hours": duration_hours(r.start_time, r.end_time),
            }
            for r in rows
        ]
    )
    df["scholar_hours"] = df["required_scholars"] * df["hours"]

    out = (
        df.groupby("day_of_week", as_index=False)
        .agg(
            slots=("required_scholars", "size"),
            required_scholars=("required_scholars", "sum"),
            scholar_hours=("scholar_hours", "sum"),
        )
        .sort_values("day_of_week")
        .reset_index(drop=True)
    )
    out["day_name"] = out["day_of_week"].map(lambda d: day_of_week_name(int(d)))
    return out[COVERAGE_COLUMNS]
