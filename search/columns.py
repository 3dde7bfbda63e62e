from dataclasses import dataclass
from enum import Enum

from sqlalchemy.sql.elements import ColumnElement

from db.core.functions import array_to_string

ARRAY_SEPARATOR = " "


class ColumnKind(str, Enum):
    SCALAR_TEXT = "scalar_text"
    OPTIONAL_TEXT = "optional_text"
    ARRAY_OF_TEXT = "array_of_text"


@dataclass(frozen=True)
class SearchColumn:
    """A text column taking part in matching and ranking."""
    column: ColumnElement
    kind: ColumnKind = ColumnKind.SCALAR_TEXT

    @property
    def nullable(self) -> bool:
        return self.kind is not ColumnKind.SCALAR_TEXT

    def text_expression(self) -> ColumnElement:
        if self.kind is ColumnKind.ARRAY_OF_TEXT:
            return array_to_string(self.column, ARRAY_SEPARATOR)
        return self.column


def scalar(column) -> SearchColumn:
    return SearchColumn(column, ColumnKind.SCALAR_TEXT)


def optional(column) -> SearchColumn:
    return SearchColumn(column, ColumnKind.OPTIONAL_TEXT)


def array(column) -> SearchColumn:
    return SearchColumn(column, ColumnKind.ARRAY_OF_TEXT)
