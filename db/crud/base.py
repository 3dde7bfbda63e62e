from typing import Any, Dict, Generic, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel
from sqlalchemy import delete, inspect, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from config.logging_config import logger
from db.core.database import Base
from db.core.exceptions import NotFoundError, translate_errors

ModelType = TypeVar("ModelType", bound=Base)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)


def _update_data(obj_in: Union[Dict[str, Any], BaseModel]) -> Dict[str, Any]:
    return obj_in if isinstance(obj_in, dict) else obj_in.model_dump(exclude_unset=True)


class CRUDBase(Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    def __init__(self, model: Type[ModelType]):
        self.model = model

    @property
    def entity_name(self) -> str:
        return self.model.__name__

    def _pk_column(self):
        return inspect(self.model).primary_key[0]

    # --- Sync ---
    def get(self, db: Session, id: Any) -> Optional[ModelType]:
        with translate_errors():
            return db.get(self.model, id)

    def get_or_raise(self, db: Session, id: Any) -> ModelType:
        obj = self.get(db, id)
        if obj is None:
            raise NotFoundError(self.entity_name, id)
        return obj

    def get_multi(self, db: Session, skip: int = 0, limit: int = 100) -> List[ModelType]:
        statement = select(self.model).order_by(self._pk_column()).offset(skip).limit(limit)
        with translate_errors(statement):
            return list(db.execute(statement).scalars().all())

    def create(self, db: Session, obj_in: CreateSchemaType) -> ModelType:
        obj = self.model(**obj_in.model_dump())
        db.add(obj)
        try:
            with translate_errors():
                db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(obj)
        logger.debug(f"Created {self.entity_name} {obj.id}")
        return obj

    def update(self, db: Session, db_obj: ModelType, obj_in: Union[Dict[str, Any], BaseModel]) -> ModelType:
        for k, v in _update_data(obj_in).items():
            setattr(db_obj, k, v)
        db.add(db_obj)
        try:
            with translate_errors():
                db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(db_obj)
        return db_obj

    def update_by_id(self, db: Session, id: Any, obj_in: Union[Dict[str, Any], BaseModel]) -> ModelType:
        return self.update(db, self.get_or_raise(db, id), obj_in)

    def delete_by_id(self, db: Session, id: Any) -> int:
        """Delete one row by primary key; returns the number of rows deleted."""
        statement = delete(self.model).where(self._pk_column() == id)
        try:
            with translate_errors(statement):
                deleted = db.execute(statement).rowcount
                db.commit()
        except Exception:
            db.rollback()
            raise
        logger.debug(f"Deleted {deleted} {self.entity_name} row(s) with id {id}")
        return deleted

    def remove(self, db: Session, id: Any) -> ModelType:
        obj = self.get_or_raise(db, id)
        db.delete(obj)
        try:
            with translate_errors():
                db.commit()
        except Exception:
            db.rollback()
            raise
        return obj

    # --- Async ---
    async def aget(self, db: AsyncSession, id: Any) -> Optional[ModelType]:
        with translate_errors():
            return await db.get(self.model, id)

    async def aget_or_raise(self, db: AsyncSession, id: Any) -> ModelType:
        obj = await self.aget(db, id)
        if obj is None:
            raise NotFoundError(self.entity_name, id)
        return obj

    async def aget_multi(self, db: AsyncSession, skip: int = 0, limit: int = 100) -> List[ModelType]:
        statement = select(self.model).order_by(self._pk_column()).offset(skip).limit(limit)
        with translate_errors(statement):
            res = await db.execute(statement)
        return list(res.scalars().all())

    async def acreate(self, db: AsyncSession, obj_in: CreateSchemaType) -> ModelType:
        obj = self.model(**obj_in.model_dump())
        db.add(obj)
        try:
            with translate_errors():
                await db.commit()
        except Exception:
            await db.rollback()
            raise
        await db.refresh(obj)
        return obj

    async def aupdate(self, db: AsyncSession, db_obj: ModelType, obj_in: Union[Dict[str, Any], BaseModel]) -> ModelType:
        for k, v in _update_data(obj_in).items():
            setattr(db_obj, k, v)
        db.add(db_obj)
        try:
            with translate_errors():
                await db.commit()
        except Exception:
            await db.rollback()
            raise
        await db.refresh(db_obj)
        return db_obj

    async def aupdate_by_id(self, db: AsyncSession, id: Any, obj_in: Union[Dict[str, Any], BaseModel]) -> ModelType:
        return await self.aupdate(db, await self.aget_or_raise(db, id), obj_in)

    async def adelete_by_id(self, db: AsyncSession, id: Any) -> int:
        statement = delete(self.model).where(self._pk_column() == id)
        try:
            with translate_errors(statement):
                deleted = (await db.execute(statement)).rowcount
                await db.commit()
        except Exception:
            await db.rollback()
            raise
        return deleted

    async def aremove(self, db: AsyncSession, id: Any) -> ModelType:
        obj = await self.aget_or_raise(db, id)
        await db.delete(obj)
        try:
            with translate_errors():
                await db.commit()
        except Exception:
            await db.rollback()
            raise
        return obj
