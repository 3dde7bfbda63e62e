import pytest
from unittest.mock import AsyncMock, MagicMock, Mock

from sqlalchemy import exc as sa_exc
from sqlalchemy import column, text
from sqlalchemy.dialects import postgresql

from db.core.database import SNAPSHOT_ISOLATION_LEVEL, Base, Database
from db.core.exceptions import (
    NotFoundError,
    QueryExecutionError,
    StoreUnavailableError,
    translate_errors,
)
from db.core.functions import trigram_match


class TestDatabaseSessions:
    @pytest.fixture
    def database(self, engine):
        return Database(url=None, async_url=None, engine=engine)

    def test_session_runs_queries(self, database):
        with database.session() as db:
            assert db.execute(text("SELECT 1")).scalar_one() == 1

    def test_session_is_closed_on_error(self, database):
        fake_session = Mock()
        database.SessionLocal = Mock(return_value=fake_session)

        with pytest.raises(RuntimeError):
            with database.session():
                raise RuntimeError("boom")

        fake_session.close.assert_called_once()

    def test_acquisition_failure_is_store_unavailable(self, database):
        fake_session = Mock()
        fake_session.connection.side_effect = sa_exc.OperationalError(
            "connect", {}, Exception("connection refused")
        )
        database.SessionLocal = Mock(return_value=fake_session)

        with pytest.raises(StoreUnavailableError):
            with database.session():
                pytest.fail("session body must not run")

        fake_session.close.assert_called_once()

    def test_pool_timeout_is_store_unavailable(self, database):
        fake_session = Mock()
        fake_session.connection.side_effect = sa_exc.TimeoutError("QueuePool limit of size 10 overflow 5 reached")
        database.SessionLocal = Mock(return_value=fake_session)

        with pytest.raises(StoreUnavailableError) as exc_info:
            with database.session():
                pass

        assert exc_info.value.retryable

    def test_snapshot_isolation_option(self, engine):
        database = Database(url=None, async_url=None, engine=engine, snapshot_isolation=True)
        fake_session = Mock()
        database.SessionLocal = Mock(return_value=fake_session)

        with database.session():
            pass

        fake_session.connection.assert_called_once_with(
            execution_options={"isolation_level": SNAPSHOT_ISOLATION_LEVEL}
        )

    def test_default_isolation_is_left_alone(self, database):
        fake_session = Mock()
        database.SessionLocal = Mock(return_value=fake_session)

        with database.session():
            pass

        fake_session.connection.assert_called_once_with(execution_options={})

    def test_without_sync_engine(self):
        database = Database(url=None, async_url=None)
        with pytest.raises(RuntimeError):
            with database.session():
                pass


def async_session_factory(session):
    """Stand-in for async_sessionmaker: `async with factory() as db` yields `session`."""
    context = MagicMock()
    context.__aenter__.return_value = session
    context.__aexit__.return_value = False
    return Mock(return_value=context), context


class TestAsyncDatabaseSessions:
    @pytest.fixture
    def async_engine(self):
        async_engine = Mock()
        async_engine.sync_engine.dialect.name = "sqlite"
        async_engine.dialect.name = "sqlite"
        async_engine.dispose = AsyncMock()
        return async_engine

    @pytest.fixture
    def database(self, async_engine):
        return Database(url=None, async_url=None, async_engine=async_engine)

    @pytest.mark.asyncio
    async def test_asession_yields_and_releases(self, database):
        fake_session = Mock()
        fake_session.connection = AsyncMock()
        database.AsyncSessionLocal, context = async_session_factory(fake_session)

        async with database.asession() as db:
            assert db is fake_session

        fake_session.connection.assert_awaited_once_with(execution_options={})
        context.__aexit__.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_asession_is_released_on_error(self, database):
        fake_session = Mock()
        fake_session.connection = AsyncMock()
        database.AsyncSessionLocal, context = async_session_factory(fake_session)

        with pytest.raises(RuntimeError):
            async with database.asession():
                raise RuntimeError("boom")

        context.__aexit__.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_acquisition_failure_is_store_unavailable(self, database):
        fake_session = Mock()
        fake_session.connection = AsyncMock(
            side_effect=sa_exc.OperationalError("connect", {}, Exception("connection refused"))
        )
        database.AsyncSessionLocal, context = async_session_factory(fake_session)

        with pytest.raises(StoreUnavailableError) as exc_info:
            async with database.asession():
                pytest.fail("session body must not run")

        assert exc_info.value.retryable
        context.__aexit__.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_snapshot_isolation_option(self, async_engine):
        database = Database(url=None, async_url=None, async_engine=async_engine, snapshot_isolation=True)
        fake_session = Mock()
        fake_session.connection = AsyncMock()
        database.AsyncSessionLocal, _ = async_session_factory(fake_session)

        async with database.asession():
            pass

        fake_session.connection.assert_awaited_once_with(
            execution_options={"isolation_level": SNAPSHOT_ISOLATION_LEVEL}
        )

    @pytest.mark.asyncio
    async def test_without_async_engine(self, engine):
        database = Database(url=None, async_url=None, engine=engine)
        with pytest.raises(RuntimeError):
            async with database.asession():
                pass

    @pytest.mark.asyncio
    async def test_init_async_db_creates_tables(self, database, async_engine):
        conn = Mock()
        conn.execute = AsyncMock()
        conn.run_sync = AsyncMock()
        begin = MagicMock()
        begin.__aenter__.return_value = conn
        begin.__aexit__.return_value = False
        async_engine.begin.return_value = begin

        await database.init_async_db()

        conn.run_sync.assert_awaited_once_with(Base.metadata.create_all)
        # pg_trgm is only enabled on PostgreSQL
        conn.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_adispose(self, database, async_engine):
        await database.adispose()
        async_engine.dispose.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_adispose_without_async_engine(self, engine):
        await Database(url=None, async_url=None, engine=engine).adispose()


class TestTranslateErrors:
    def test_passes_through_results(self):
        with translate_errors():
            value = 1
        assert value == 1

    def test_integrity_error(self):
        with pytest.raises(QueryExecutionError) as exc_info:
            with translate_errors():
                raise sa_exc.IntegrityError("INSERT", {}, Exception("duplicate key"))
        assert not exc_info.value.retryable
        assert "duplicate key" in str(exc_info.value)

    def test_disconnect_is_store_unavailable(self):
        with pytest.raises(StoreUnavailableError):
            with translate_errors():
                raise sa_exc.DisconnectionError("gone")

    def test_data_access_errors_pass_unchanged(self):
        error = NotFoundError("Plant", 1)
        with pytest.raises(NotFoundError) as exc_info:
            with translate_errors():
                raise error
        assert exc_info.value is error

    def test_other_exceptions_are_not_touched(self):
        with pytest.raises(KeyError):
            with translate_errors():
                raise KeyError("x")


def test_trigram_match_compiles_to_percent_operator():
    sql = str(trigram_match(column("name"), "rose").compile(dialect=postgresql.dialect()))
    assert sql.startswith("name %")
