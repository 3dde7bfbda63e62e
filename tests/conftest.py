import pytest
from sqlalchemy.orm import Session

from search.columns import optional, scalar
from search.orchestrator import EntitySearch
from tests.sqlite_trgm import SQLITE_SIMILARITY_THRESHOLD, Herb, make_sqlite_engine


@pytest.fixture
def similarity_threshold():
    return SQLITE_SIMILARITY_THRESHOLD


@pytest.fixture
def engine():
    engine = make_sqlite_engine()
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def add_herbs(db):
    """Insert herbs by name (or (name, notes) tuples) and return them in insertion order."""
    def _add(*entries):
        herbs = []
        for entry in entries:
            name, notes = entry if isinstance(entry, tuple) else (entry, None)
            herbs.append(Herb(name=name, notes=notes))
        db.add_all(herbs)
        db.commit()
        return herbs
    return _add


@pytest.fixture
def herb_search():
    return EntitySearch(
        Herb,
        (scalar(Herb.name), optional(Herb.notes)),
        name_order=(Herb.name,),
    )
