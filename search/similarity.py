"""
Relevance rank computed inside the query.

rank = greatest(similarity(col_1, q), ..., similarity(col_n, q)), with
nullable columns counted as 0 rather than NULL.
"""
from typing import Sequence

from sqlalchemy import func, literal
from sqlalchemy.sql.elements import ColumnElement

from db.core.functions import greatest, similarity
from search.columns import SearchColumn

RANK_LABEL = "rank"


def column_similarity(column: SearchColumn, query: str) -> ColumnElement:
    score = similarity(column.text_expression(), query)
    if column.nullable:
        return func.coalesce(score, literal(0.0))
    return score


def rank_expression(columns: Sequence[SearchColumn], query: str) -> ColumnElement:
    if not columns:
        raise ValueError("rank_expression needs at least one column")

    scores = [column_similarity(column, query) for column in columns]
    if len(scores) == 1:
        return scores[0]
    return greatest(*scores)


def labeled_rank(columns: Sequence[SearchColumn], query: str) -> ColumnElement:
    return rank_expression(columns, query).label(RANK_LABEL)
