from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, String, Time, func
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


class CycleModel(Base):
    __tablename__ = 'cycles'
    id = Column(String(36), primary_key=True)
    name = Column(String(100), nullable=False)
    department = Column(String(100), nullable=False, index=True)
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=False)
    application_deadline = Column(DateTime, nullable=False)
    interview_date = Column(DateTime, nullable=False)
    selection_date = Column(DateTime, nullable=False)
    status = Column(String(32), nullable=False)
    total_scholarships_available = Column(Integer, nullable=False)
    total_scholarships_assigned = Column(Integer, default=0, nullable=False)
    renewal_process_completed = Column(Boolean, default=False, nullable=False)
    cloned_from_cycle_id = Column(String(36), ForeignKey('cycles.id'), nullable=True)
    closed_at = Column(DateTime, nullable=True)
    closed_by = Column(String, nullable=True)
    created_at = Column(DateTime, nullable=False)
    created_by = Column(String, nullable=False)
    updated_at = Column(DateTime, nullable=True)
    updated_by = Column(String, nullable=True)

    locations = relationship('CycleLocationModel', back_populates='cycle', cascade='all')
    supervisor_assignments = relationship(
        'SupervisorAssignmentModel', back_populates='cycle', cascade='all'
    )


# на уровне БД: не больше одного незакрытого цикла на департамент
OPEN_CYCLE_INDEX = 'ux_cycles_department_open'

Index(
    OPEN_CYCLE_INDEX,
    func.lower(CycleModel.department),
    unique=True,
    sqlite_where=CycleModel.status != 'Closed',
    postgresql_where=CycleModel.status != 'Closed',
)


class CycleLocationModel(Base):
    __tablename__ = 'cycle_locations'
    id = Column(String(36), primary_key=True)
    cycle_id = Column(String(36), ForeignKey('cycles.id'), nullable=False, index=True)
    location_id = Column(String(36), nullable=False)
    scholarships_available = Column(Integer, nullable=False)
    scholarships_assigned = Column(Integer, default=0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, nullable=False)
    created_by = Column(String, nullable=False)
    updated_at = Column(DateTime, nullable=True)
    updated_by = Column(String, nullable=True)

    cycle = relationship('CycleModel', back_populates='locations')
    schedule_slots = relationship(
        'ScheduleSlotModel', back_populates='cycle_location', cascade='all'
    )


class ScheduleSlotModel(Base):
    __tablename__ = 'schedule_slots'
    id = Column(String(36), primary_key=True)
    cycle_location_id = Column(String(36), ForeignKey('cycle_locations.id'), nullable=False, index=True)
    day_of_week = Column(Integer, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    required_scholars = Column(Integer, nullable=False)
    created_at = Column(DateTime, nullable=False)
    created_by = Column(String, nullable=False)

    cycle_location = relationship('CycleLocationModel', back_populates='schedule_slots')


class SupervisorAssignmentModel(Base):
    __tablename__ = 'supervisor_assignments'
    id = Column(String(36), primary_key=True)
    cycle_id = Column(String(36), ForeignKey('cycles.id'), nullable=False, index=True)
    # ссылка на площадку цикла не проверяется: назначения валидируются только по форме
    cycle_location_id = Column(String(36), nullable=False)
    supervisor_id = Column(String(36), nullable=False)
    assigned_at = Column(DateTime, nullable=False)
    created_by = Column(String, nullable=False)

    cycle = relationship('CycleModel', back_populates='supervisor_assignments')


# ────────── Каталог (ведётся вне ядра) ───────────────────────────────────
class LocationModel(Base):
    __tablename__ = 'locations'
    id = Column(String(36), primary_key=True)
    name = Column(String(100), nullable=False)
    department = Column(String(100), nullable=False, index=True)
    description = Column(String, nullable=True)
    address = Column(String, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, nullable=False)
    created_by = Column(String, nullable=False)


class UserModel(Base):
    __tablename__ = 'users'
    id = Column(String(36), primary_key=True)
    email = Column(String, nullable=False, unique=True)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    role = Column(String(32), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, nullable=False)
