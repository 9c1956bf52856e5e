from typing import Generic, Iterable, Type, TypeVar, List, Optional
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session
from app.core.exceptions import ConfigurationError

T = TypeVar("T")

_INSERT_BY_DIALECT = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}

class BaseRepository(Generic[T]):
    def __init__(self, model: Type[T]):
        self.model = model

    def get(self, db: Session, id) -> Optional[T]:
        obj = db.get(self.model, id)
        if obj is None or obj.deleted_at is not None:
            return None
        return obj

    def get_all(self, db: Session, skip: int = 0, limit: int = 100) -> List[T]:
        return db.query(self.model).filter(self.model.deleted_at.is_(None)).offset(skip).limit(limit).all()

    def create(self, db: Session, obj_in: dict) -> T:
        db_obj = self.model(**obj_in)
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def update(self, db: Session, db_obj: T, obj_in: dict) -> T:
        for field, value in obj_in.items():
            setattr(db_obj, field, value)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def _dialect_insert(self, db: Session):
        dialect = db.get_bind().dialect.name
        insert = _INSERT_BY_DIALECT.get(dialect)
        if insert is None:
            raise ConfigurationError(f"Unsupported database dialect for conflict-aware writes: {dialect}")
        return insert

    def insert_ignore(self, db: Session, values: dict, conflict_columns: Iterable[str]) -> bool:
        """INSERT ... ON CONFLICT DO NOTHING in one round trip.

        Returns True when this call inserted the row, False when a row with the
        same unique key already existed.
        """
        insert = self._dialect_insert(db)
        stmt = insert(self.model).values(**values).on_conflict_do_nothing(
            index_elements=list(conflict_columns)
        )
        result = db.execute(stmt)
        db.commit()
        return result.rowcount == 1

    def upsert(
        self, db: Session, values: dict, conflict_columns: Iterable[str], update_columns: Iterable[str]
    ) -> None:
        """INSERT ... ON CONFLICT DO UPDATE. The caller owns the commit."""
        insert = self._dialect_insert(db)
        stmt = insert(self.model).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=list(conflict_columns),
            set_={column: stmt.excluded[column] for column in update_columns},
        )
        db.execute(stmt)
