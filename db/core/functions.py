"""
SQL functions and operators provided by PostgreSQL's pg_trgm extension.
"""
from sqlalchemy import Boolean, Float, Text, literal
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.sql.elements import ClauseElement, ColumnElement
from sqlalchemy.sql.functions import GenericFunction
from sqlalchemy.sql.visitors import InternalTraversal


class similarity(GenericFunction):
    """pg_trgm `similarity(text, text)`, a float in [0, 1]."""
    type = Float()
    inherit_cache = True


class array_to_string(GenericFunction):
    type = Text()
    inherit_cache = True


class greatest(GenericFunction):
    type = Float()
    inherit_cache = True


class trigram_match(ColumnElement):
    """
    pg_trgm fuzzy match `left % right`.

    True when the similarity of both sides reaches the session's
    `pg_trgm.similarity_threshold`.
    """
    type = Boolean()
    inherit_cache = True

    _traverse_internals = [
        ("left", InternalTraversal.dp_clauseelement),
        ("right", InternalTraversal.dp_clauseelement),
    ]

    def __init__(self, left, right):
        self.left = left
        self.right = right if isinstance(right, ClauseElement) else literal(right, Text())

    @property
    def _from_objects(self):
        return self.left._from_objects + self.right._from_objects


@compiles(trigram_match)
def _compile_trigram_match(element, compiler, **kw):
    return compiler.process(
        element.left.op("%", is_comparison=True)(element.right), **kw
    )
