from typing import Generic, TypeVar, Type, Optional, List, Any, Dict
from sqlalchemy.orm import Session
from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from pydantic import BaseModel
from pulse_onboarding.database import Base

ModelType = TypeVar("ModelType", bound=Base)

# Dialects with a native INSERT ... ON CONFLICT
_UPSERT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


class CRUDBase(Generic[ModelType]):
    """
    Generic CRUD class for per-user records.

    Every onboarding entity carries a user_id. Records that exist once per
    user declare a unique constraint on user_id so upsert_by_user_id can
    write them atomically.

    Type Parameters:
        ModelType: SQLAlchemy model class
    """

    def __init__(self, model: Type[ModelType]):
        """
        Initialize CRUD object with model class.

        Args:
            model: SQLAlchemy model class
        """
        self.model = model

    def get(self, db: Session, id: str) -> Optional[ModelType]:
        """
        Retrieve a single record by ID.

        Args:
            db: Database session
            id: Record ID

        Returns:
            Model instance or None if not found
        """
        stmt = select(self.model).where(self.model.id == id)
        result = db.execute(stmt)
        return result.scalar_one_or_none()

    def filter(self, db: Session, **criteria: Any) -> List[ModelType]:
        """
        Retrieve records whose columns equal the given values.

        Args:
            db: Database session
            **criteria: Column name to expected value

        Returns:
            Matching model instances, oldest first
        """
        stmt = select(self.model)
        for field, value in criteria.items():
            stmt = stmt.where(getattr(self.model, field) == value)
        if hasattr(self.model, "created_at"):
            stmt = stmt.order_by(self.model.created_at)
        result = db.execute(stmt)
        return list(result.scalars().all())

    def get_by_user_id(self, db: Session, user_id: str) -> Optional[ModelType]:
        """Retrieve the first record belonging to a user."""
        records = self.filter(db, user_id=user_id)
        return records[0] if records else None

    def create(
        self,
        db: Session,
        *,
        obj_in: BaseModel | Dict[str, Any]
    ) -> ModelType:
        """
        Create a new record.

        Args:
            db: Database session
            obj_in: Pydantic schema or dict with creation data

        Returns:
            Created model instance
        """
        obj_data = obj_in if isinstance(obj_in, dict) else obj_in.model_dump()
        db_obj = self.model(**obj_data)
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def update(
        self,
        db: Session,
        *,
        db_obj: ModelType,
        obj_in: BaseModel | Dict[str, Any]
    ) -> ModelType:
        """
        Update an existing record.

        Args:
            db: Database session
            db_obj: Existing model instance to update
            obj_in: Pydantic schema or dict with update data

        Returns:
            Updated model instance
        """
        if isinstance(obj_in, dict):
            update_data = obj_in
        else:
            update_data = obj_in.model_dump(exclude_unset=True)

        for field, value in update_data.items():
            setattr(db_obj, field, value)

        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def upsert(
        self,
        db: Session,
        *,
        match: Dict[str, Any],
        values: Dict[str, Any]
    ) -> ModelType:
        """
        Create or update the single record identified by `match`.

        The columns in `match` must be covered by a unique constraint.
        PostgreSQL and SQLite get one INSERT ... ON CONFLICT DO UPDATE;
        other dialects fall back to select-then-write, retrying once on
        an IntegrityError raised by a concurrent insert.

        Args:
            db: Database session
            match: Unique column values identifying the record
            values: Column values to write

        Returns:
            The stored model instance
        """
        insert = _UPSERT_INSERTS.get(db.get_bind().dialect.name)

        if insert is not None:
            stmt = insert(self.model).values(**match, **values)
            set_ = dict(values)
            if hasattr(self.model, "updated_at"):
                set_["updated_at"] = func.now()
            stmt = stmt.on_conflict_do_update(index_elements=list(match), set_=set_)
            db.execute(stmt)
            db.commit()
            return self.filter(db, **match)[0]

        existing = self.filter(db, **match)
        if existing:
            return self.update(db, db_obj=existing[0], obj_in=values)

        try:
            return self.create(db, obj_in={**match, **values})
        except IntegrityError:
            # Another writer inserted the row between the select and the insert
            db.rollback()
            return self.update(db, db_obj=self.filter(db, **match)[0], obj_in=values)

    def upsert_by_user_id(self, db: Session, *, user_id: str, values: Dict[str, Any]) -> ModelType:
        """Create or update the one record a user owns."""
        return self.upsert(db, match={"user_id": user_id}, values=values)
