from typing import Callable, Generic, List, Optional, Type, TypeVar

from pydantic import BaseModel

from config.settings import DEFAULT_PER_PAGE

T = TypeVar("T")
U = TypeVar("U")


class PageParameters(BaseModel):
    page: int = 1
    per_page: int = DEFAULT_PER_PAGE


class ScoredRow(BaseModel, Generic[T]):
    """A search hit and its trigram similarity rank in [0, 1]."""
    item: T
    rank: float


class Page(BaseModel, Generic[T]):
    items: List[T]
    page: int
    per_page: int
    total_items: int
    total_pages: int

    @classmethod
    def build(cls, items: List[T], page: int, per_page: int, total_items: int) -> "Page[T]":
        return cls(
            items=items,
            page=page,
            per_page=per_page,
            total_items=total_items,
            total_pages=(total_items + per_page - 1) // per_page,
        )

    def map(self, fn: Callable[[T], U], item_type: Optional[Type[U]] = None) -> "Page[U]":
        """Convert every item with `fn`; pass `item_type` to get a `Page[item_type]`."""
        page_cls = Page[item_type] if item_type is not None else Page
        return page_cls(
            items=[fn(item) for item in self.items],
            page=self.page,
            per_page=self.per_page,
            total_items=self.total_items,
            total_pages=self.total_pages,
        )
