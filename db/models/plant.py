from sqlalchemy import Boolean, Column, DateTime, Enum, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.sql import func

from db.core.database import Base
from db.models.enums import SoilPH, enum_values


class Plant(Base):
    __tablename__ = "plants"

    id = Column(Integer, primary_key=True, index=True)
    unique_name = Column(Text, nullable=False, unique=True)
    common_name_de = Column(ARRAY(Text), nullable=True)
    common_name_en = Column(ARRAY(Text), nullable=True)
    family = Column(String, nullable=True)
    genus = Column(String, nullable=True)
    edible = Column(Boolean, nullable=True)
    edible_uses_en = Column(Text, nullable=True)
    functions = Column(Text, nullable=True)
    heat_zone = Column(Integer, nullable=True)
    shade = Column(String, nullable=True)
    soil_ph = Column(Enum(SoilPH, name="soil_ph", values_callable=enum_values), nullable=True)
    spread = Column(Integer, nullable=True)
    height = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index("plants_unique_name_trgm_idx", "unique_name",
              postgresql_using="gin", postgresql_ops={"unique_name": "gin_trgm_ops"}),
        Index("plants_edible_uses_en_trgm_idx", "edible_uses_en",
              postgresql_using="gin", postgresql_ops={"edible_uses_en": "gin_trgm_ops"}),
    )
