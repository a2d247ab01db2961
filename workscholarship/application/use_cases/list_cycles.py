from __future__ import annotations

from typing import Any

from workscholarship.application.commands import ListCyclesQuery
from workscholarship.application.dto import CycleListItem, Page
from workscholarship.application.validation import parse_command
from workscholarship.config.config import Settings
from workscholarship.domain.errors import Result
from workscholarship.infrastructure.db.repositories.cycle_repository import CycleRepository


class ListCyclesUseCase:
    def __init__(self, repo: CycleRepository, settings: Settings):
        self._repo = repo
        self._settings = settings

    def execute(self, query: Any = None) -> Result[Page[CycleListItem]]:
        """
        Фильтры: департамент (без учёта регистра), год начала, статус.
        Новые циклы сверху. page_size по умолчанию берётся из настроек.
        """
        q, error = parse_command(
            ListCyclesQuery, query or {}, max_page_size=self._settings.max_page_size
        )
        if error:
            return Result.from_error(error)

        page_size = q.page_size or self._settings.default_page_size
        cycles, total = self._repo.list_cycles(
            department=q.department,
            year=q.year,
            status=q.status,
            page=q.page,
            page_size=page_size,
        )
        return Result.success(Page(
            items=[CycleListItem.from_domain(c) for c in cycles],
            total_count=total,
            page=q.page,
            page_size=page_size,
        ))
