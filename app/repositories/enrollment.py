from typing import List, Optional, Sequence
from uuid import UUID
from sqlalchemy.orm import Session, joinedload
from app.models.academic import ClassEnrollment, EnrollmentStatus
from app.repositories.base import BaseRepository

class EnrollmentRepository(BaseRepository[ClassEnrollment]):
    def __init__(self):
        super().__init__(ClassEnrollment)

    def get_by_class_and_student(self, db: Session, class_id: UUID, student_id: UUID) -> Optional[ClassEnrollment]:
        return db.query(ClassEnrollment).filter(
            ClassEnrollment.class_id == class_id,
            ClassEnrollment.student_id == student_id,
            ClassEnrollment.deleted_at.is_(None),
        ).first()

    def list_by_status(
        self, db: Session, statuses: Sequence[EnrollmentStatus], class_id: Optional[UUID] = None
    ) -> List[ClassEnrollment]:
        query = (
            db.query(ClassEnrollment)
            .options(
                joinedload(ClassEnrollment.student),
                joinedload(ClassEnrollment.enrollment_class),
            )
            .filter(
                ClassEnrollment.status.in_(list(statuses)),
                ClassEnrollment.deleted_at.is_(None),
            )
        )
        if class_id:
            query = query.filter(ClassEnrollment.class_id == class_id)
        return query.all()

enrollment_repository = EnrollmentRepository()
