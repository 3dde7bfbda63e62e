from typing import List, Optional

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import ColumnElement

from db.core.pagination import Paginator
from db.crud.base import CRUDBase
from db.models.map import Map
from db.schemas.map import MapDto, MapSearchParameters, NewMapDto
from db.schemas.page import Page, PageParameters, ScoredRow
from search.columns import optional, scalar
from search.orchestrator import EntitySearch


def _map_row(row: ScoredRow) -> ScoredRow[MapDto]:
    return ScoredRow[MapDto](item=MapDto.model_validate(row.item), rank=row.rank)


class CRUDMap(CRUDBase[Map, NewMapDto, BaseModel]):
    def __init__(self, model=Map, paginator: Optional[Paginator] = None):
        super().__init__(model)
        self.searcher = EntitySearch(
            model,
            (scalar(model.name), optional(model.description)),
            find_columns=(scalar(model.name),),
            name_order=(model.name,),
            paginator=paginator,
        )

    def filters(self, search_parameters: MapSearchParameters) -> List[ColumnElement]:
        """Exact-match conditions for every field the caller set; name is handled separately."""
        fragments = []
        if search_parameters.is_inactive is not None:
            fragments.append(self.model.is_inactive.is_(search_parameters.is_inactive))
        if search_parameters.created_by is not None:
            fragments.append(self.model.created_by == search_parameters.created_by)
        if search_parameters.privacy is not None:
            fragments.append(self.model.privacy == search_parameters.privacy)
        return fragments

    # --- Sync ---
    def find(
        self, db: Session, search_parameters: MapSearchParameters, page_parameters: PageParameters
    ) -> Page[MapDto]:
        page = self.searcher.find(
            db, search_parameters.name, page_parameters, filters=self.filters(search_parameters)
        )
        return page.map(MapDto.model_validate, MapDto)

    def search(self, db: Session, query: str, page_parameters: PageParameters) -> Page[ScoredRow[MapDto]]:
        return self.searcher.search(db, query, page_parameters).map(_map_row, ScoredRow[MapDto])

    def find_by_id(self, db: Session, id: int) -> MapDto:
        return MapDto.model_validate(self.get_or_raise(db, id))

    # --- Async ---
    async def afind(
        self, db: AsyncSession, search_parameters: MapSearchParameters, page_parameters: PageParameters
    ) -> Page[MapDto]:
        page = await self.searcher.afind(
            db, search_parameters.name, page_parameters, filters=self.filters(search_parameters)
        )
        return page.map(MapDto.model_validate, MapDto)

    async def asearch(self, db: AsyncSession, query: str, page_parameters: PageParameters) -> Page[ScoredRow[MapDto]]:
        return (await self.searcher.asearch(db, query, page_parameters)).map(_map_row, ScoredRow[MapDto])

    async def afind_by_id(self, db: AsyncSession, id: int) -> MapDto:
        return MapDto.model_validate(await self.aget_or_raise(db, id))
