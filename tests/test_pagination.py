import pytest
from unittest.mock import AsyncMock, Mock

from sqlalchemy import exc as sa_exc
from sqlalchemy import select
from sqlalchemy.dialects import postgresql

from db.core.exceptions import InvalidInputError, QueryExecutionError, StoreUnavailableError
from db.core.pagination import Paginator, count_statement, page_offset
from db.schemas.page import Page, PageParameters
from tests.sqlite_trgm import Herb


def expected_len(total_items, page, per_page):
    return min(per_page, max(0, total_items - (page - 1) * per_page))


class TestPageMath:
    """Offset and page count arithmetic."""

    def test_page_offset(self):
        assert page_offset(1, 10) == 0
        assert page_offset(2, 10) == 10
        assert page_offset(5, 3) == 12

    @pytest.mark.parametrize("total_items,per_page,total_pages", [
        (0, 10, 0),
        (1, 10, 1),
        (10, 10, 1),
        (11, 10, 2),
        (23, 10, 3),
        (23, 1, 23),
        (100, 7, 15),
    ])
    def test_total_pages_is_ceiling(self, total_items, per_page, total_pages):
        page = Page.build([], 1, per_page, total_items)
        assert page.total_pages == total_pages
        assert (page.total_pages == 0) == (total_items == 0)

    def test_map_keeps_metadata(self):
        page = Page.build([1, 2, 3], 2, 3, 9)
        mapped = page.map(lambda x: x * 10)
        assert mapped.items == [10, 20, 30]
        assert (mapped.page, mapped.per_page, mapped.total_items, mapped.total_pages) == (2, 3, 9, 3)

    def test_map_with_item_type_is_parameterised(self):
        mapped = Page.build([1, 2], 1, 10, 2).map(str, item_type=str)
        assert type(mapped) is Page[str]
        assert mapped.items == ["1", "2"]

    def test_default_page_parameters(self):
        params = PageParameters()
        assert params.page == 1
        assert params.per_page == 10


class TestPaginatorValidation:
    """Invalid page parameters are rejected before touching the store."""

    @pytest.fixture
    def paginator(self):
        return Paginator(max_per_page=50)

    @pytest.mark.parametrize("page,per_page", [(0, 10), (-1, 10), (1, 0), (1, -5), (0, 0), (1, 51)])
    def test_invalid_parameters_raise(self, paginator, page, per_page):
        db = Mock()
        with pytest.raises(InvalidInputError):
            paginator.paginate(db, select(Herb), PageParameters(page=page, per_page=per_page))
        db.execute.assert_not_called()

    def test_max_per_page_is_allowed(self, paginator, db):
        page = paginator.paginate(db, select(Herb), PageParameters(page=1, per_page=50))
        assert page.total_items == 0
        assert page.items == []


class TestPaginatorOnSqlite:
    """Pagination against a real (SQLite) store."""

    @pytest.fixture
    def herbs(self, add_herbs):
        return add_herbs(*[f"Herb {i:02d}" for i in range(1, 24)])

    def test_23_rows_10_per_page(self, db, herbs):
        paginator = Paginator()
        statement = select(Herb).order_by(Herb.id)

        sizes = []
        for page_number in (1, 2, 3, 4):
            page = paginator.paginate(db, statement, PageParameters(page=page_number, per_page=10))
            assert page.total_items == 23
            assert page.total_pages == 3
            assert page.page == page_number
            sizes.append(len(page.items))

        assert sizes == [10, 10, 3, 0]

    def test_pages_do_not_overlap(self, db, herbs):
        paginator = Paginator()
        statement = select(Herb).order_by(Herb.id)

        seen = []
        for page_number in (1, 2, 3):
            page = paginator.paginate(db, statement, PageParameters(page=page_number, per_page=10))
            seen.extend(herb.id for herb in page.items)

        assert seen == [herb.id for herb in herbs]

    @pytest.mark.parametrize("per_page", [1, 3, 7, 10, 23, 30])
    def test_items_length_matches_formula(self, db, herbs, per_page):
        paginator = Paginator()
        statement = select(Herb).order_by(Herb.id)
        total_pages = (23 + per_page - 1) // per_page

        for page_number in range(1, total_pages + 3):
            page = paginator.paginate(db, statement, PageParameters(page=page_number, per_page=per_page))
            assert len(page.items) == expected_len(23, page_number, per_page)
            assert len(page.items) <= per_page
            assert page.total_pages == total_pages

    def test_count_respects_filter(self, db, herbs):
        statement = select(Herb).where(Herb.name.like("Herb 1%")).order_by(Herb.id)
        page = Paginator().paginate(db, statement, PageParameters(page=1, per_page=5))
        assert page.total_items == 10
        assert page.total_pages == 2
        assert [herb.name for herb in page.items] == [f"Herb {i}" for i in range(10, 15)]

    def test_row_tuples_when_not_scalars(self, db, herbs):
        statement = select(Herb, Herb.name).order_by(Herb.id)
        page = Paginator().paginate(db, statement, PageParameters(page=1, per_page=2), scalars=False)
        assert len(page.items) == 2
        herb, name = page.items[0]
        assert herb.name == name == "Herb 01"

    def test_empty_table(self, db):
        page = Paginator().paginate(db, select(Herb), PageParameters(page=1, per_page=10))
        assert page.items == []
        assert page.total_items == 0
        assert page.total_pages == 0


class TestCountStatement:
    def test_ordering_is_dropped(self):
        statement = select(Herb).where(Herb.name == "x").order_by(Herb.name)
        sql = str(count_statement(statement).compile(dialect=postgresql.dialect()))
        assert "count(*)" in sql
        assert "ORDER BY" not in sql
        assert "herbs.name =" in sql


class TestPaginatorErrors:
    """Store failures surface as typed errors and never yield a partial page."""

    def test_query_failure_becomes_query_execution_error(self):
        db = Mock()
        db.execute.side_effect = sa_exc.ProgrammingError("SELECT", {}, Exception("syntax error"))

        with pytest.raises(QueryExecutionError) as exc_info:
            Paginator().paginate(db, select(Herb), PageParameters())

        assert isinstance(exc_info.value.__cause__, sa_exc.ProgrammingError)
        assert db.execute.call_count == 1

    def test_pool_timeout_becomes_store_unavailable(self):
        db = Mock()
        db.execute.side_effect = sa_exc.TimeoutError("QueuePool limit reached")

        with pytest.raises(StoreUnavailableError) as exc_info:
            Paginator().paginate(db, select(Herb), PageParameters())

        assert exc_info.value.retryable

    def test_data_query_failure_after_count(self):
        count_result = Mock()
        count_result.scalar_one.return_value = 5
        db = Mock()
        db.execute.side_effect = [
            count_result,
            sa_exc.OperationalError("SELECT", {}, Exception("connection lost")),
        ]

        with pytest.raises(QueryExecutionError):
            Paginator().paginate(db, select(Herb), PageParameters())

        assert db.execute.call_count == 2

    def test_out_of_range_page_skips_data_query(self):
        count_result = Mock()
        count_result.scalar_one.return_value = 3
        db = Mock()
        db.execute.return_value = count_result

        page = Paginator().paginate(db, select(Herb), PageParameters(page=2, per_page=5))

        assert page.items == []
        assert page.total_pages == 1
        db.execute.assert_called_once()


class TestAsyncPaginator:
    @pytest.mark.asyncio
    async def test_apaginate_assembles_page(self):
        count_result = Mock()
        count_result.scalar_one.return_value = 23
        data_result = Mock()
        data_result.scalars.return_value.all.return_value = ["a", "b", "c"]
        db = Mock()
        db.execute = AsyncMock(side_effect=[count_result, data_result])

        page = await Paginator().apaginate(db, select(Herb), PageParameters(page=3, per_page=10))

        assert page.items == ["a", "b", "c"]
        assert page.total_items == 23
        assert page.total_pages == 3
        assert db.execute.await_count == 2

    @pytest.mark.asyncio
    async def test_apaginate_rejects_invalid_page(self):
        db = Mock()
        db.execute = AsyncMock()

        with pytest.raises(InvalidInputError):
            await Paginator().apaginate(db, select(Herb), PageParameters(page=0))

        db.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_apaginate_translates_errors(self):
        db = Mock()
        db.execute = AsyncMock(side_effect=sa_exc.TimeoutError("pool exhausted"))

        with pytest.raises(StoreUnavailableError):
            await Paginator().apaginate(db, select(Herb), PageParameters())
