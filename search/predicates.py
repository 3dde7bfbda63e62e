from typing import Optional, Sequence

from sqlalchemy import and_, or_
from sqlalchemy.sql.elements import ColumnElement

from db.core.functions import trigram_match
from search.columns import SearchColumn


def all_of(fragments: Sequence[Optional[ColumnElement]]) -> Optional[ColumnElement]:
    """AND of the given fragments; None when there is nothing to filter on."""
    present = [fragment for fragment in fragments if fragment is not None]
    if not present:
        return None
    if len(present) == 1:
        return present[0]
    return and_(*present)


class PredicateBuilder:
    """
    Builds the row-selection condition over a fixed set of text columns.

    fuzzy()   -- any column trigram-matches the query (search mode)
    partial() -- any column contains the term, case-insensitively (find mode)
    """

    def __init__(self, columns: Sequence[SearchColumn]):
        if not columns:
            raise ValueError("PredicateBuilder needs at least one column")
        self.columns = tuple(columns)

    def fuzzy(self, query: str) -> ColumnElement:
        return or_(*[trigram_match(column.text_expression(), query) for column in self.columns])

    def partial(self, term: str) -> ColumnElement:
        return or_(*[
            column.text_expression().icontains(term, autoescape=True)
            for column in self.columns
        ])
