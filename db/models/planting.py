from sqlalchemy import Column, Float, ForeignKey, Integer

from db.core.database import Base


class Planting(Base):
    __tablename__ = "plantings"

    id = Column(Integer, primary_key=True, index=True)
    layer_id = Column(Integer, nullable=False, index=True)
    plant_id = Column(Integer, ForeignKey("plants.id", ondelete="CASCADE"), nullable=False, index=True)
    x = Column(Integer, nullable=False)
    y = Column(Integer, nullable=False)
    width = Column(Integer, nullable=False)
    height = Column(Integer, nullable=False)
    rotation = Column(Float, nullable=False, default=0.0)
    scale_x = Column(Float, nullable=False, default=1.0)
    scale_y = Column(Float, nullable=False, default=1.0)
