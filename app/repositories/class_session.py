from typing import Optional, Tuple
from uuid import UUID
from sqlalchemy.orm import Session
from app.models.academic import Class
from app.models.session_attendance import ClassSession
from app.repositories.base import BaseRepository

class ClassRepository(BaseRepository[Class]):
    def __init__(self):
        super().__init__(Class)

class ClassSessionRepository(BaseRepository[ClassSession]):
    def __init__(self):
        super().__init__(ClassSession)

    def get_by_class_and_date(self, db: Session, class_id: UUID, date_key: str) -> Optional[ClassSession]:
        return (
            db.query(ClassSession)
            .filter(
                ClassSession.class_id == class_id,
                ClassSession.date_key == date_key,
            )
            .first()
        )

    def insert_if_absent(self, db: Session, values: dict) -> Tuple[ClassSession, bool]:
        """Insert the day's session unless one exists, then return the stored row."""
        inserted = self.insert_ignore(db, values, conflict_columns=("class_id", "date_key"))
        return self.get_by_class_and_date(db, values["class_id"], values["date_key"]), inserted

class_session_repository = ClassSessionRepository()
class_repository = ClassRepository()
