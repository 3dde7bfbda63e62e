from typing import List, Optional

from pydantic import BaseModel


class PlantsSummaryDto(BaseModel):
    id: int
    unique_name: str
    common_name_de: Optional[List[str]] = None
    common_name_en: Optional[List[str]] = None
    edible_uses_en: Optional[str] = None
    spread: Optional[int] = None

    class Config:
        from_attributes = True


class PlantsSearchQuery(BaseModel):
    name_or_term: str


class PlantsSearchParameters(BaseModel):
    name: Optional[str] = None
