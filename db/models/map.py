from sqlalchemy import Boolean, Column, Date, Enum, Index, Integer, String, Text
from sqlalchemy.sql import func

from db.core.database import Base
from db.models.enums import PrivacyOption, enum_values


class Map(Base):
    __tablename__ = "maps"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(Text, nullable=False, unique=True)
    created_by = Column(String, nullable=False, index=True)
    creation_date = Column(Date, nullable=False, server_default=func.current_date())
    deletion_date = Column(Date, nullable=True)
    last_visit = Column(Date, nullable=True)
    is_inactive = Column(Boolean, nullable=False, default=False)
    zoom_factor = Column(Integer, nullable=False, default=100)
    honors = Column(Integer, nullable=False, default=0)
    visits = Column(Integer, nullable=False, default=0)
    harvested = Column(Integer, nullable=False, default=0)
    privacy = Column(Enum(PrivacyOption, name="privacy_option", values_callable=enum_values),
                     nullable=False, default=PrivacyOption.PRIVATE)
    description = Column(Text, nullable=True)

    __table_args__ = (
        Index("maps_name_trgm_idx", "name",
              postgresql_using="gin", postgresql_ops={"name": "gin_trgm_ops"}),
    )
