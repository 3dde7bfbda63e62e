from typing import Optional

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from db.core.pagination import Paginator
from db.crud.base import CRUDBase
from db.models.plant import Plant
from db.schemas.page import Page, PageParameters, ScoredRow
from db.schemas.plant import PlantsSearchParameters, PlantsSearchQuery, PlantsSummaryDto
from search.columns import array, optional, scalar
from search.orchestrator import EntitySearch

# Ranked fuzzy search looks at every name a plant is known by plus its edible uses
PLANT_SEARCH_COLUMNS = (
    scalar(Plant.unique_name),
    array(Plant.common_name_de),
    array(Plant.common_name_en),
    optional(Plant.edible_uses_en),
)
PLANT_FIND_COLUMNS = (
    scalar(Plant.unique_name),
    array(Plant.common_name_en),
)


def _summary_row(row: ScoredRow) -> ScoredRow[PlantsSummaryDto]:
    return ScoredRow[PlantsSummaryDto](item=PlantsSummaryDto.model_validate(row.item), rank=row.rank)


class CRUDPlant(CRUDBase[Plant, BaseModel, BaseModel]):
    def __init__(self, model=Plant, paginator: Optional[Paginator] = None):
        super().__init__(model)
        self.searcher = EntitySearch(
            model,
            PLANT_SEARCH_COLUMNS,
            find_columns=PLANT_FIND_COLUMNS,
            name_order=(model.unique_name, model.common_name_en),
            paginator=paginator,
        )

    # --- Sync ---
    def search(
        self, db: Session, search_query: PlantsSearchQuery, page_parameters: PageParameters
    ) -> Page[ScoredRow[PlantsSummaryDto]]:
        """
        Get the plants best matching `search_query`, most similar first.

        Matches `unique_name`, the German and English common names and
        `edible_uses_en` with pg_trgm and ranks by the best similarity.
        """
        page = self.searcher.search(db, search_query.name_or_term, page_parameters)
        return page.map(_summary_row, ScoredRow[PlantsSummaryDto])

    def find(
        self, db: Session, search_parameters: PlantsSearchParameters, page_parameters: PageParameters
    ) -> Page[PlantsSummaryDto]:
        """Get a page of plants, optionally filtered by (part of) a name."""
        page = self.searcher.find(db, search_parameters.name, page_parameters)
        return page.map(PlantsSummaryDto.model_validate, PlantsSummaryDto)

    def find_by_id(self, db: Session, id: int) -> PlantsSummaryDto:
        return PlantsSummaryDto.model_validate(self.get_or_raise(db, id))

    # --- Async ---
    async def asearch(
        self, db: AsyncSession, search_query: PlantsSearchQuery, page_parameters: PageParameters
    ) -> Page[ScoredRow[PlantsSummaryDto]]:
        page = await self.searcher.asearch(db, search_query.name_or_term, page_parameters)
        return page.map(_summary_row, ScoredRow[PlantsSummaryDto])

    async def afind(
        self, db: AsyncSession, search_parameters: PlantsSearchParameters, page_parameters: PageParameters
    ) -> Page[PlantsSummaryDto]:
        page = await self.searcher.afind(db, search_parameters.name, page_parameters)
        return page.map(PlantsSummaryDto.model_validate, PlantsSummaryDto)

    async def afind_by_id(self, db: AsyncSession, id: int) -> PlantsSummaryDto:
        return PlantsSummaryDto.model_validate(await self.aget_or_raise(db, id))
