"""
Offset pagination over SQLAlchemy SELECT statements.

A page fetch runs two queries against the same session: a count over the
filtered statement and the data query with LIMIT/OFFSET applied. They are not
forced into a single snapshot unless the session was opened with snapshot
isolation (see `Database`), so heavy concurrent writes may make
`total_items` and `items` disagree slightly.
"""
import logging
from typing import Any, List

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from config.logging_config import logger
from config.settings import MAX_PER_PAGE
from db.core.exceptions import InvalidInputError, describe_statement, translate_errors
from db.schemas.page import Page, PageParameters
from utils.timing import Timer


def page_offset(page: int, per_page: int) -> int:
    return (page - 1) * per_page


def count_statement(statement: Select) -> Select:
    """`SELECT count(*)` over the statement's rows, ordering dropped."""
    return select(func.count()).select_from(statement.order_by(None).subquery())


class Paginator:
    def __init__(self, max_per_page: int = MAX_PER_PAGE):
        self.max_per_page = max_per_page

    def validate(self, params: PageParameters):
        if params.page < 1:
            raise InvalidInputError(f"page must be >= 1, got {params.page}")
        if params.per_page < 1:
            raise InvalidInputError(f"per_page must be >= 1, got {params.per_page}")
        if params.per_page > self.max_per_page:
            raise InvalidInputError(
                f"per_page must be <= {self.max_per_page}, got {params.per_page}"
            )

    def _page_statement(self, statement: Select, params: PageParameters) -> Select:
        return statement.limit(params.per_page).offset(page_offset(params.page, params.per_page))

    @staticmethod
    def _log_statement(label: str, statement: Select):
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"[SQL] {label}: {describe_statement(statement)}")

    @staticmethod
    def _rows(result, scalars: bool) -> List[Any]:
        if scalars:
            return list(result.scalars().all())
        return [tuple(row) for row in result.all()]

    # --- Sync ---
    def paginate(
        self, db: Session, statement: Select, params: PageParameters, scalars: bool = True
    ) -> Page:
        """
        Fetch one page of `statement`.

        Args:
            db: Session checked out for this request
            statement: Filtered and ordered SELECT
            params: Requested page and page size
            scalars: Return the first column of each row instead of row tuples

        Returns:
            Page holding at most `per_page` items plus total counts
        """
        self.validate(params)

        count_query = count_statement(statement)
        self._log_statement("count", count_query)
        with translate_errors(count_query), Timer("page count query"):
            total_items = db.execute(count_query).scalar_one()

        items = []
        if page_offset(params.page, params.per_page) < total_items:
            data_query = self._page_statement(statement, params)
            self._log_statement("page", data_query)
            with translate_errors(data_query), Timer("page data query"):
                items = self._rows(db.execute(data_query), scalars)

        return Page.build(items, params.page, params.per_page, total_items)

    # --- Async ---
    async def apaginate(
        self, db: AsyncSession, statement: Select, params: PageParameters, scalars: bool = True
    ) -> Page:
        self.validate(params)

        count_query = count_statement(statement)
        self._log_statement("count", count_query)
        with translate_errors(count_query), Timer("page count query"):
            total_items = (await db.execute(count_query)).scalar_one()

        items = []
        if page_offset(params.page, params.per_page) < total_items:
            data_query = self._page_statement(statement, params)
            self._log_statement("page", data_query)
            with translate_errors(data_query), Timer("page data query"):
                items = self._rows(await db.execute(data_query), scalars)

        return Page.build(items, params.page, params.per_page, total_items)
