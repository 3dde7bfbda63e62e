from typing import List

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from config.logging_config import logger
from db.core.exceptions import describe_statement, translate_errors
from db.crud.base import CRUDBase
from db.models.planting import Planting
from db.schemas.planting import NewPlantingDto, PlantingDto, PlantingSearchParameters, UpdatePlantingDto
from search.predicates import all_of


class CRUDPlanting(CRUDBase[Planting, NewPlantingDto, UpdatePlantingDto]):
    def __init__(self, model=Planting):
        super().__init__(model)

    def find_statement(self, search_parameters: PlantingSearchParameters) -> Select:
        fragments = []
        if search_parameters.plant_id is not None:
            fragments.append(self.model.plant_id == search_parameters.plant_id)
        if search_parameters.layer_id is not None:
            fragments.append(self.model.layer_id == search_parameters.layer_id)

        statement = select(self.model)
        condition = all_of(fragments)
        if condition is not None:
            statement = statement.where(condition)
        return statement.order_by(self.model.id)

    def find(self, db: Session, search_parameters: PlantingSearchParameters) -> List[PlantingDto]:
        """All plantings of a plant and/or a layer (unpaginated)."""
        statement = self.find_statement(search_parameters)
        logger.debug(f"[SQL] plantings: {describe_statement(statement)}")
        with translate_errors(statement):
            rows = db.execute(statement).scalars().all()
        return [PlantingDto.model_validate(row) for row in rows]

    async def afind(self, db: AsyncSession, search_parameters: PlantingSearchParameters) -> List[PlantingDto]:
        statement = self.find_statement(search_parameters)
        logger.debug(f"[SQL] plantings: {describe_statement(statement)}")
        with translate_errors(statement):
            rows = (await db.execute(statement)).scalars().all()
        return [PlantingDto.model_validate(row) for row in rows]
