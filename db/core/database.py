from contextlib import asynccontextmanager, contextmanager
from typing import AsyncIterator, Iterator, Optional

from sqlalchemy import create_engine, event, text
from sqlalchemy import exc as sa_exc
from sqlalchemy.engine import Engine
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from config.logging_config import logger
from config.settings import (
    DATABASE_URL_ASYNC,
    DATABASE_URL_SYNC,
    DB_MAX_OVERFLOW,
    DB_POOL_SIZE,
    DB_POOL_TIMEOUT,
    PAGE_SNAPSHOT_ISOLATION,
    TRGM_SIMILARITY_THRESHOLD,
)
from db.core.exceptions import StoreUnavailableError

Base = declarative_base()

SNAPSHOT_ISOLATION_LEVEL = "REPEATABLE READ"

# Raised by the pool or the driver when no connection can be handed out
_ACQUISITION_ERRORS = (
    sa_exc.TimeoutError,
    sa_exc.DisconnectionError,
    sa_exc.OperationalError,
    sa_exc.InterfaceError,
)


class Database:
    """
    Process-wide handle on the connection pools.

    Create one at startup, check out one scoped session per unit of work with
    `session()` / `asession()`, and call `dispose()` at shutdown.
    """

    def __init__(
        self,
        url: Optional[str] = DATABASE_URL_SYNC,
        async_url: Optional[str] = DATABASE_URL_ASYNC,
        pool_size: int = DB_POOL_SIZE,
        max_overflow: int = DB_MAX_OVERFLOW,
        pool_timeout: float = DB_POOL_TIMEOUT,
        similarity_threshold: Optional[float] = TRGM_SIMILARITY_THRESHOLD,
        snapshot_isolation: bool = PAGE_SNAPSHOT_ISOLATION,
        engine: Optional[Engine] = None,
        async_engine: Optional[AsyncEngine] = None,
    ):
        pool_options = dict(
            pool_pre_ping=True,
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_timeout=pool_timeout,
        )
        if engine is None and url:
            engine = create_engine(url, **pool_options)
        if async_engine is None and async_url:
            async_engine = create_async_engine(async_url, **pool_options)

        self.engine = engine
        self.async_engine = async_engine
        self.similarity_threshold = similarity_threshold
        self.snapshot_isolation = snapshot_isolation

        self.SessionLocal = None
        self.AsyncSessionLocal = None
        if self.engine is not None:
            self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
            self._install_threshold(self.engine)
        if self.async_engine is not None:
            self.AsyncSessionLocal = async_sessionmaker(
                self.async_engine, class_=AsyncSession, expire_on_commit=False
            )
            self._install_threshold(self.async_engine.sync_engine)

    def _install_threshold(self, engine: Engine):
        if self.similarity_threshold is None or engine.dialect.name != "postgresql":
            return
        threshold = float(self.similarity_threshold)

        @event.listens_for(engine, "connect")
        def set_similarity_threshold(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute(f"SET pg_trgm.similarity_threshold = {threshold}")
            cursor.close()

        logger.info(f"pg_trgm similarity threshold set to {threshold}")

    def _connection_options(self) -> dict:
        if self.snapshot_isolation:
            return {"isolation_level": SNAPSHOT_ISOLATION_LEVEL}
        return {}

    # --- Sync ---
    @contextmanager
    def session(self) -> Iterator[Session]:
        if self.SessionLocal is None:
            raise RuntimeError("Database was created without a sync engine")
        db = self.SessionLocal()
        try:
            try:
                db.connection(execution_options=self._connection_options())
            except _ACQUISITION_ERRORS as ex:
                logger.error(f"Could not acquire a database connection: {ex}")
                raise StoreUnavailableError(str(ex)) from ex
            yield db
        finally:
            db.close()

    def init_db(self):
        if self.engine.dialect.name == "postgresql":
            with self.engine.begin() as conn:
                conn.execute(text("CREATE EXTENSION IF NOT EXISTS pg_trgm"))
        Base.metadata.create_all(bind=self.engine)

    def dispose(self):
        if self.engine is not None:
            self.engine.dispose()

    # --- Async ---
    @asynccontextmanager
    async def asession(self) -> AsyncIterator[AsyncSession]:
        if self.AsyncSessionLocal is None:
            raise RuntimeError("Database was created without an async engine")
        async with self.AsyncSessionLocal() as db:
            try:
                await db.connection(execution_options=self._connection_options())
            except _ACQUISITION_ERRORS as ex:
                logger.error(f"Could not acquire a database connection: {ex}")
                raise StoreUnavailableError(str(ex)) from ex
            yield db

    async def init_async_db(self):
        async with self.async_engine.begin() as conn:
            if self.async_engine.dialect.name == "postgresql":
                await conn.execute(text("CREATE EXTENSION IF NOT EXISTS pg_trgm"))
            await conn.run_sync(Base.metadata.create_all)

    async def adispose(self):
        if self.async_engine is not None:
            await self.async_engine.dispose()
