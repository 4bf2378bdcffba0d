from enum import Enum
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar, Union
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from pydantic import BaseModel

from predictsafe.models.base import Base

ModelType = TypeVar("ModelType", bound=Base)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)


class CRUDBase(Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    def __init__(self, model: Type[ModelType]):
        """
        CRUD object with default methods to Create, Read, Update, Delete (CRUD).
        **Parameters**
        * `model`: A SQLAlchemy model class
        """
        self.model = model

    def _serialize_enums(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Store enum members by value."""
        for key, value in data.items():
            if isinstance(value, Enum):
                data[key] = value.value
            elif isinstance(value, list):
                data[key] = [item.value if isinstance(item, Enum) else item for item in value]
        return data

    async def exists(self, db: AsyncSession, *, id: Union[UUID, str]) -> bool:
        """Check if an object exists."""
        return await self.get(db, id=id) is not None

    async def count(self, db: AsyncSession, *filters: Any) -> int:
        """Count objects, optionally narrowed by SQL expressions."""
        stmt = select(func.count()).select_from(self.model)
        if filters:
            stmt = stmt.where(*filters)
        result = await db.execute(stmt)
        return result.scalar_one()

    async def get_multi(
        self, db: AsyncSession, *, skip: int = 0, limit: int = 100, order_by: Any = None
    ) -> List[ModelType]:
        """Get multiple objects.

        Args:
            db: Database session
            skip: Number of records to skip
            limit: Maximum number of records to return
            order_by: Optional ordering clause, newest first when omitted

        Returns:
            list[ModelType]: List of model objects
        """
        stmt = select(self.model)
        stmt = stmt.order_by(order_by if order_by is not None else self.model.created_at.desc())
        stmt = stmt.offset(skip).limit(limit)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def get(self, db: AsyncSession, *, id: Union[UUID, str]) -> Optional[ModelType]:
        """Get a single object by ID."""
        if isinstance(id, str):
            try:
                id = UUID(id)
            except ValueError:
                return None
        return await db.get(self.model, id)

    async def get_by_key(self, db: AsyncSession, *, key_field: str, key_value: Any) -> Optional[ModelType]:
        """Get by key field and value"""
        stmt = select(self.model).where(getattr(self.model, key_field) == key_value)
        result = await db.execute(stmt)
        return result.scalars().first()

    async def create(self, db: AsyncSession, *, obj_in: Union[CreateSchemaType, Dict[str, Any]], commit: bool = True) -> ModelType:
        """Create a new object."""
        obj_in_data = obj_in if isinstance(obj_in, dict) else obj_in.model_dump()
        db_obj = self.model(**self._serialize_enums(dict(obj_in_data)))
        db.add(db_obj)
        if commit:
            await db.commit()
            await db.refresh(db_obj)
        else:
            await db.flush()
        return db_obj

    async def update(
        self,
        db: AsyncSession,
        *,
        db_obj: ModelType,
        obj_in: Union[UpdateSchemaType, Dict[str, Any]],
        commit: bool = True,
    ) -> ModelType:
        """Update an object."""
        update_data = obj_in if isinstance(obj_in, dict) else obj_in.model_dump(exclude_unset=True)
        for field, value in self._serialize_enums(dict(update_data)).items():
            setattr(db_obj, field, value)
        db.add(db_obj)
        if commit:
            await db.commit()
            await db.refresh(db_obj)
        else:
            await db.flush()
        return db_obj

    async def remove(self, db: AsyncSession, *, id: Union[UUID, str]) -> Optional[ModelType]:
        """Remove an object."""
        obj = await self.get(db, id=id)
        if not obj:
            return None
        await db.delete(obj)
        await db.commit()
        return obj
