# repositories/catalog_repository.py
from sqlalchemy import func
from sqlalchemy.orm import Session

from workscholarship.domain.models import Location, User, UserRole, normalize_department
from workscholarship.infrastructure.db.models import LocationModel, UserModel


class CatalogRepository:
    """
    Каталог площадок и пользователей. Ведётся вне ядра: здесь только
    подсчёты для панели администратора и добавление записей (сидинг, тесты).
    """

    def __init__(self, session: Session):
        self._session = session

    # ——— МАППЕРЫ ——————————————————————————————————————————————
    @staticmethod
    def _to_location_model(loc: Location) -> LocationModel:
        return LocationModel(
            id=loc.id,
            name=loc.name,
            department=loc.department,
            description=loc.description,
            address=loc.address,
            is_active=loc.is_active,
            created_at=loc.created_at,
            created_by=loc.created_by,
        )

    @staticmethod
    def _to_user_model(u: User) -> UserModel:
        return UserModel(
            id=u.id,
            email=u.email,
            first_name=u.first_name,
            last_name=u.last_name,
            role=u.role.value,
            is_active=u.is_active,
            created_at=u.created_at,
        )

    # ——— CRUD МЕТОДЫ ——————————————————————————————————————————————

    def add_location(self, loc: Location) -> None:
        self._session.merge(self._to_location_model(loc))

    def add_user(self, user: User) -> None:
        self._session.merge(self._to_user_model(user))

    def count_active_locations(self, department: str) -> int:
        return (
            self._session.query(func.count(LocationModel.id))
            .filter(
                func.lower(func.trim(LocationModel.department)) == normalize_department(department),
                LocationModel.is_active.is_(True),
            )
            .scalar()
        )

    def count_active_supervisors(self) -> int:
        """
        Активные пользователи с ролью Supervisor по всей системе,
        а не по департаменту: супервизоры общий пул.
        """
        return (
            self._session.query(func.count(UserModel.id))
            .filter(
                UserModel.role == UserRole.SUPERVISOR.value,
                UserModel.is_active.is_(True),
            )
            .scalar()
        )

    def commit(self) -> None:
        self._session.commit()
