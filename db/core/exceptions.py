"""
Typed errors raised by the data-access layer.

Everything coming out of SQLAlchemy is translated at the execution seam into
one of these kinds so callers never have to know about driver exceptions.
"""
from contextlib import contextmanager
from typing import Any, Optional

from sqlalchemy import exc as sa_exc

from config.logging_config import logger


class DataAccessError(Exception):
    """Base class of every data-access error."""

    retryable = False


class InvalidInputError(DataAccessError):
    """Caller supplied parameters that can never succeed (bad page, blank query)."""


class StoreUnavailableError(DataAccessError):
    """No connection could be acquired from the pool."""

    retryable = True


class QueryExecutionError(DataAccessError):
    """The store rejected or failed to run a query."""


class NotFoundError(DataAccessError):
    """A single-entity lookup matched no row."""

    def __init__(self, entity: str, id: Any):
        super().__init__(f"{entity} with id {id} not found")
        self.entity = entity
        self.id = id


def describe_statement(statement: Any) -> str:
    if statement is None:
        return "<unknown>"
    try:
        return str(statement.compile(compile_kwargs={"literal_binds": True}))
    except Exception:
        # Not every construct can inline its parameters
        return str(statement)


@contextmanager
def translate_errors(statement: Optional[Any] = None):
    """Re-raise SQLAlchemy exceptions as data-access errors, logging the failing SQL."""
    try:
        yield
    except DataAccessError:
        raise
    except (sa_exc.TimeoutError, sa_exc.DisconnectionError) as ex:
        logger.error(f"Store unavailable while running query: {ex}")
        raise StoreUnavailableError(str(ex)) from ex
    except sa_exc.SQLAlchemyError as ex:
        logger.error(f"Query failed: {ex}\nSQL: {describe_statement(statement)}")
        raise QueryExecutionError(str(ex)) from ex
