"""
API Layer for the garden planner.
Exposes plant search, map listing and planting endpoints over the data-access layer.
"""
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.orm import Session

from config.logging_config import logger
from config.settings import API_ALLOWED_ORIGINS, DEFAULT_PER_PAGE
from db import crud
from db.core.database import Database
from db.core.exceptions import (
    DataAccessError,
    InvalidInputError,
    NotFoundError,
    QueryExecutionError,
    StoreUnavailableError,
    translate_errors,
)
from db.models.enums import PrivacyOption
from db.schemas.map import MapDto, MapSearchParameters, NewMapDto
from db.schemas.page import Page, PageParameters, ScoredRow
from db.schemas.plant import PlantsSearchParameters, PlantsSearchQuery, PlantsSummaryDto
from db.schemas.planting import NewPlantingDto, PlantingDto, PlantingSearchParameters, UpdatePlantingDto


class HealthResponse(BaseModel):
    status: str
    services: dict


# ---------------------------
# Dependencies
# ---------------------------

def get_db(request: Request):
    database: Database = request.app.state.database
    with database.session() as db:
        yield db


def page_parameters(page: int = 1, per_page: int = DEFAULT_PER_PAGE) -> PageParameters:
    return PageParameters(page=page, per_page=per_page)


# ---------------------------
# Error mapping
# ---------------------------

ERROR_STATUS = {
    InvalidInputError: 400,
    NotFoundError: 404,
    StoreUnavailableError: 503,
    QueryExecutionError: 500,
}


async def data_access_error_handler(request: Request, ex: DataAccessError):
    status_code = next(
        (code for kind, code in ERROR_STATUS.items() if isinstance(ex, kind)), 500
    )
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {ex}")
    headers = {"Retry-After": "1"} if ex.retryable else None
    return JSONResponse(status_code=status_code, content={"detail": str(ex)}, headers=headers)


# ---------------------------
# App Initialization
# ---------------------------

def create_app(database: Optional[Database] = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Initializing garden planner API...")
        app.state.database = database or Database()
        try:
            yield
        finally:
            app.state.database.dispose()
            await app.state.database.adispose()
            logger.info("Database pools disposed")

    app = FastAPI(title="Garden Planner API", version="1.0.0", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=API_ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(DataAccessError, data_access_error_handler)

    # ---------------------------
    # Endpoints
    # ---------------------------

    @app.get("/health", response_model=HealthResponse, tags=["General"])
    def health_check(db: Session = Depends(get_db)):
        """Health check endpoint for Docker and Kubernetes"""
        with translate_errors():
            db.execute(text("SELECT 1"))
        return HealthResponse(status="healthy", services={"postgres": "healthy"})

    @app.get("/api/plants", response_model=Page[PlantsSummaryDto], tags=["Plants"])
    def find_plants(
        name: Optional[str] = None,
        page: PageParameters = Depends(page_parameters),
        db: Session = Depends(get_db),
    ):
        return crud.plants.find(db, PlantsSearchParameters(name=name), page)

    @app.get("/api/plants/search", response_model=Page[ScoredRow[PlantsSummaryDto]], tags=["Plants"])
    def search_plants(
        name_or_term: str,
        page: PageParameters = Depends(page_parameters),
        db: Session = Depends(get_db),
    ):
        return crud.plants.search(db, PlantsSearchQuery(name_or_term=name_or_term), page)

    @app.get("/api/plants/{plant_id}", response_model=PlantsSummaryDto, tags=["Plants"])
    def find_plant(plant_id: int, db: Session = Depends(get_db)):
        return crud.plants.find_by_id(db, plant_id)

    @app.get("/api/maps", response_model=Page[MapDto], tags=["Maps"])
    def find_maps(
        name: Optional[str] = None,
        is_inactive: Optional[bool] = None,
        created_by: Optional[str] = None,
        privacy: Optional[PrivacyOption] = None,
        page: PageParameters = Depends(page_parameters),
        db: Session = Depends(get_db),
    ):
        search_parameters = MapSearchParameters(
            name=name, is_inactive=is_inactive, created_by=created_by, privacy=privacy
        )
        return crud.maps.find(db, search_parameters, page)

    @app.get("/api/maps/search", response_model=Page[ScoredRow[MapDto]], tags=["Maps"])
    def search_maps(
        name_or_term: str,
        page: PageParameters = Depends(page_parameters),
        db: Session = Depends(get_db),
    ):
        return crud.maps.search(db, name_or_term, page)

    @app.get("/api/maps/{map_id}", response_model=MapDto, tags=["Maps"])
    def find_map(map_id: int, db: Session = Depends(get_db)):
        return crud.maps.find_by_id(db, map_id)

    @app.post("/api/maps", response_model=MapDto, status_code=201, tags=["Maps"])
    def create_map(new_map: NewMapDto, db: Session = Depends(get_db)):
        return MapDto.model_validate(crud.maps.create(db, new_map))

    @app.get("/api/plantings", response_model=List[PlantingDto], tags=["Plantings"])
    def find_plantings(
        plant_id: Optional[int] = None,
        layer_id: Optional[int] = None,
        db: Session = Depends(get_db),
    ):
        return crud.plantings.find(db, PlantingSearchParameters(plant_id=plant_id, layer_id=layer_id))

    @app.post("/api/plantings", response_model=PlantingDto, status_code=201, tags=["Plantings"])
    def create_planting(new_planting: NewPlantingDto, db: Session = Depends(get_db)):
        return PlantingDto.model_validate(crud.plantings.create(db, new_planting))

    @app.patch("/api/plantings/{planting_id}", response_model=PlantingDto, tags=["Plantings"])
    def update_planting(planting_id: int, update: UpdatePlantingDto, db: Session = Depends(get_db)):
        return PlantingDto.model_validate(crud.plantings.update_by_id(db, planting_id, update))

    @app.delete("/api/plantings/{planting_id}", status_code=204, tags=["Plantings"])
    def delete_planting(planting_id: int, db: Session = Depends(get_db)):
        if crud.plantings.delete_by_id(db, planting_id) == 0:
            raise NotFoundError("Planting", planting_id)

    return app


app = create_app()
