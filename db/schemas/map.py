from datetime import date
from typing import Optional

from pydantic import BaseModel

from db.models.enums import PrivacyOption


class MapBase(BaseModel):
    name: str
    created_by: str
    deletion_date: Optional[date] = None
    last_visit: Optional[date] = None
    is_inactive: bool = False
    zoom_factor: int = 100
    honors: int = 0
    visits: int = 0
    harvested: int = 0
    privacy: PrivacyOption = PrivacyOption.PRIVATE
    description: Optional[str] = None


class NewMapDto(MapBase):
    pass


class MapDto(MapBase):
    id: int
    creation_date: date

    class Config:
        from_attributes = True


class MapSearchParameters(BaseModel):
    name: Optional[str] = None
    is_inactive: Optional[bool] = None
    created_by: Optional[str] = None
    privacy: Optional[PrivacyOption] = None
