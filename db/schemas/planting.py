from typing import Optional

from pydantic import BaseModel


class PlantingBase(BaseModel):
    layer_id: int
    plant_id: int
    x: int
    y: int
    width: int
    height: int
    rotation: float = 0.0
    scale_x: float = 1.0
    scale_y: float = 1.0


class NewPlantingDto(PlantingBase):
    pass


class UpdatePlantingDto(BaseModel):
    x: Optional[int] = None
    y: Optional[int] = None
    width: Optional[int] = None
    height: Optional[int] = None
    rotation: Optional[float] = None
    scale_x: Optional[float] = None
    scale_y: Optional[float] = None


class PlantingDto(PlantingBase):
    id: int

    class Config:
        from_attributes = True


class PlantingSearchParameters(BaseModel):
    plant_id: Optional[int] = None
    layer_id: Optional[int] = None
