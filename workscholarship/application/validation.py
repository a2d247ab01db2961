from __future__ import annotations

from typing import Any, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel, ValidationError

from workscholarship.domain.errors import Error, FieldError

M = TypeVar("M", bound=BaseModel)

_VALUE_ERROR_PREFIX = "Value error, "


def _field_path(loc: Tuple[Any, ...]) -> str:
    # ('locations', 0, 'schedule_slots', 1, 'day_of_week') -> 'locations.0.schedule_slots.1.day_of_week'
    return ".".join(str(part) for part in loc) or "request"


def _message(msg: str) -> str:
    return msg[len(_VALUE_ERROR_PREFIX):] if msg.startswith(_VALUE_ERROR_PREFIX) else msg


def parse_command(model_cls: Type[M], data: Any, **context: Any) -> Tuple[Optional[M], Optional[Error]]:
    """
    Валидирует вход команды. Уже собранная модель валидируется повторно:
    с контекстом (now, лимиты), которого при её создании не было.
    """
    if isinstance(data, BaseModel):
        data = data.model_dump()
    try:
        return model_cls.model_validate(data, context=context or None), None
    except ValidationError as exc:
        details = tuple(
            FieldError(field=_field_path(err["loc"]), message=_message(err["msg"]))
            for err in exc.errors()
        )
        return None, Error.validation(details)
