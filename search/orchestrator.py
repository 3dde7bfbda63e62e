"""
Search and find over a single mapped entity.

search(): trigram fuzzy match on the configured columns, ranked by the best
          per-column similarity, highest first, primary key breaking ties.
find():   optional case-insensitive substring filter, ordered by the name
          columns (or by primary key when unfiltered).
Both hand the finished statement to the Paginator.
"""
from typing import Optional, Sequence

from sqlalchemy import Select, inspect, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import ColumnElement

from db.core.pagination import Paginator
from db.schemas.page import Page, PageParameters, ScoredRow
from search.columns import SearchColumn
from search.models import SearchQuery, normalize_filter
from search.predicates import PredicateBuilder, all_of
from search.similarity import labeled_rank
from utils.timing import async_timed, timed


def _scored(row) -> ScoredRow:
    item, rank = row
    return ScoredRow(item=item, rank=float(rank or 0.0))


class EntitySearch:
    def __init__(
        self,
        model,
        search_columns: Sequence[SearchColumn],
        find_columns: Optional[Sequence[SearchColumn]] = None,
        name_order: Sequence[ColumnElement] = (),
        paginator: Optional[Paginator] = None,
    ):
        self.model = model
        self.search_columns = tuple(search_columns)
        self.find_columns = tuple(find_columns or search_columns)
        self.name_order = tuple(name_order)
        self.primary_key = tuple(inspect(model).primary_key)
        self.fuzzy = PredicateBuilder(self.search_columns)
        self.partial = PredicateBuilder(self.find_columns)
        self.paginator = paginator or Paginator()

    # --- Statements ---
    def search_statement(self, query: SearchQuery) -> Select:
        rank = labeled_rank(self.search_columns, query.text)
        return (
            select(self.model, rank)
            .where(self.fuzzy.fuzzy(query.text))
            .order_by(rank.desc(), *self.primary_key)
        )

    def find_statement(
        self, term: Optional[str] = None, filters: Sequence[ColumnElement] = ()
    ) -> Select:
        term = normalize_filter(term)
        statement = select(self.model)

        condition = all_of([self.partial.partial(term) if term else None, *filters])
        if condition is not None:
            statement = statement.where(condition)

        if term:
            return statement.order_by(*self.name_order, *self.primary_key)
        return statement.order_by(*self.primary_key)

    # --- Sync ---
    @timed("entity search")
    def search(self, db: Session, query: str, page_parameters: PageParameters) -> Page:
        """Ranked fuzzy search; items are ScoredRow(item, rank)."""
        statement = self.search_statement(SearchQuery.parse(query))
        page = self.paginator.paginate(db, statement, page_parameters, scalars=False)
        return page.map(_scored)

    @timed("entity find")
    def find(
        self,
        db: Session,
        term: Optional[str],
        page_parameters: PageParameters,
        filters: Sequence[ColumnElement] = (),
    ) -> Page:
        return self.paginator.paginate(db, self.find_statement(term, filters), page_parameters)

    # --- Async ---
    @async_timed("entity search")
    async def asearch(self, db: AsyncSession, query: str, page_parameters: PageParameters) -> Page:
        statement = self.search_statement(SearchQuery.parse(query))
        page = await self.paginator.apaginate(db, statement, page_parameters, scalars=False)
        return page.map(_scored)

    @async_timed("entity find")
    async def afind(
        self,
        db: AsyncSession,
        term: Optional[str],
        page_parameters: PageParameters,
        filters: Sequence[ColumnElement] = (),
    ) -> Page:
        return await self.paginator.apaginate(db, self.find_statement(term, filters), page_parameters)
