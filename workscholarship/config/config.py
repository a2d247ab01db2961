# workscholarship/config/config.py
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_PROJECT_ROOT = Path(__file__).resolve().parents[2]
_DEFAULT_DATA_DIR = _PROJECT_ROOT / "data"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=_PROJECT_ROOT / ".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        populate_by_name=True,
        extra="ignore",
    )

    # окружение
    env: str = Field("dev", alias="ENV")
    data_dir: Path = Field(_DEFAULT_DATA_DIR, alias="DATA_DIR")

    # таймзона для отображения дат (в БД всё хранится в наивном UTC)
    timezone_name: str = Field("UTC", alias="TIMEZONE")

    # БД
    db_url: str | None = Field(None, alias="DATABASE_URL")
    db_filename: str = Field("workscholarship.db", alias="DB_FILENAME")
    db_echo: bool = Field(False, alias="DB_ECHO")

    # ───────────────── Панель администратора ─────────────────
    # Сколько последних циклов департамента просматривать при сборке состояния
    dashboard_recent_cycles: int = Field(10, alias="DASHBOARD_RECENT_CYCLES")

    # ───────────────── Пагинация списка циклов ─────────────────
    default_page_size: int = Field(10, alias="DEFAULT_PAGE_SIZE")
    max_page_size: int = Field(100, alias="MAX_PAGE_SIZE")

    @model_validator(mode="before")
    def _preprocess(cls, values: dict[str, Any]) -> dict[str, Any]:
        raw = values.pop("DATA_DIR", None) or values.get("data_dir", _DEFAULT_DATA_DIR)
        values["data_dir"] = Path(raw).expanduser().resolve()
        return values

    @property
    def timezone(self) -> ZoneInfo:
        return ZoneInfo(self.timezone_name)

    @property
    def database_url(self) -> str:
        return self.db_url or f"sqlite:///{self.data_dir / self.db_filename}"


settings = Settings()
