from typing import List, Optional, Tuple
from uuid import UUID
from sqlalchemy.orm import Session, joinedload
from app.models.session_attendance import AttendanceRecord
from app.repositories.base import BaseRepository

HISTORY_LIMIT = 50
DAY_KEY = ("student_id", "class_id", "date_key")

class AttendanceRepository(BaseRepository[AttendanceRecord]):
    def __init__(self):
        super().__init__(AttendanceRecord)

    def get_for_day(self, db: Session, student_id: UUID, class_id: UUID, date_key: str) -> Optional[AttendanceRecord]:
        return db.query(AttendanceRecord).filter(
            AttendanceRecord.student_id == student_id,
            AttendanceRecord.class_id == class_id,
            AttendanceRecord.date_key == date_key,
        ).first()

    def insert_if_absent(self, db: Session, values: dict) -> Tuple[AttendanceRecord, bool]:
        inserted = self.insert_ignore(db, values, conflict_columns=DAY_KEY)
        record = self.get_for_day(db, values["student_id"], values["class_id"], values["date_key"])
        return record, inserted

    def upsert_for_day(self, db: Session, values: dict) -> None:
        """Insert or overwrite the record for (student, class, day). Not committed."""
        update_columns = [column for column in values if column not in DAY_KEY]
        self.upsert(db, values, conflict_columns=DAY_KEY, update_columns=update_columns)

    def list_by_class_and_date(self, db: Session, class_id: UUID, date_key: str) -> List[AttendanceRecord]:
        return (
            db.query(AttendanceRecord)
            .options(joinedload(AttendanceRecord.student))
            .filter(
                AttendanceRecord.class_id == class_id,
                AttendanceRecord.date_key == date_key,
            )
            .all()
        )

    def list_by_class_range(
        self, db: Session, class_id: UUID,
        start_key: Optional[str] = None, end_key: Optional[str] = None
    ) -> List[AttendanceRecord]:
        query = db.query(AttendanceRecord).filter(AttendanceRecord.class_id == class_id)
        # YYYY-MM-DD keys sort lexically in date order
        if start_key:
            query = query.filter(AttendanceRecord.date_key >= start_key)
        if end_key:
            query = query.filter(AttendanceRecord.date_key <= end_key)
        return query.order_by(AttendanceRecord.date_key.desc()).all()

    def list_by_student(
        self, db: Session, student_id: UUID,
        class_id: Optional[UUID] = None, limit: int = HISTORY_LIMIT
    ) -> List[AttendanceRecord]:
        query = db.query(AttendanceRecord).filter(AttendanceRecord.student_id == student_id)
        if class_id:
            query = query.filter(AttendanceRecord.class_id == class_id)
        return query.order_by(AttendanceRecord.date_key.desc()).limit(limit).all()

attendance_repository = AttendanceRepository()
