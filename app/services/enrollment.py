from typing import Optional
from uuid import UUID
from sqlalchemy.orm import Session
from app.core.exceptions import EnrollmentInactiveError, NotEnrolledError
from app.models.academic import ClassEnrollment, EnrollmentStatus
from app.repositories.enrollment import EnrollmentRepository, enrollment_repository

class ClassEnrollmentService:
    """Read-only view of class enrollments for the attendance core."""

    def __init__(self, repository: EnrollmentRepository):
        self.repository = repository

    def get_enrollment_status(self, db: Session, student_id: UUID, class_id: UUID) -> Optional[EnrollmentStatus]:
        enrollment = self.repository.get_by_class_and_student(db, class_id, student_id)
        return enrollment.status if enrollment else None

    def is_actively_enrolled(self, db: Session, student_id: UUID, class_id: UUID) -> bool:
        return self.get_enrollment_status(db, student_id, class_id) == EnrollmentStatus.ACTIVE

    def ensure_enrolled(self, db: Session, student_id: UUID, class_id: UUID) -> ClassEnrollment:
        """Any enrollment status; corrections may target paused or former students."""
        enrollment = self.repository.get_by_class_and_student(db, class_id, student_id)
        if enrollment is None:
            raise NotEnrolledError(f"Student {student_id} is not enrolled in this class")
        return enrollment

    def ensure_active(self, db: Session, student_id: UUID, class_id: UUID) -> ClassEnrollment:
        enrollment = self.repository.get_by_class_and_student(db, class_id, student_id)
        if enrollment is None:
            raise NotEnrolledError()
        if enrollment.status != EnrollmentStatus.ACTIVE:
            raise EnrollmentInactiveError(
                f"Cannot record attendance: enrollment status is {enrollment.status.value}"
            )
        return enrollment

class_enrollment_service = ClassEnrollmentService(enrollment_repository)
