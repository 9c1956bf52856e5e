import hmac
import logging
from datetime import date, datetime, timedelta, timezone
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.daily_secret import as_utc, get_utc_date_key, is_valid_daily_secret, utcnow
from app.core.exceptions import (
    AlreadyRecordedError, CodeMismatchError, ConflictError, ForbiddenError, NoActiveSessionError,
    NotFoundError, SessionExpiredError, ValidationError,
)
from app.dependencies import is_staff
from app.models.academic import Class, EnrollmentStatus
from app.models.session_attendance import AttendanceMethod, AttendanceRecord, AttendanceStatus
from app.models.user import User, UserRole
from app.repositories.attendance import AttendanceRepository, attendance_repository
from app.repositories.enrollment import enrollment_repository
from app.schemas.attendance import AttendanceUpdate, BatchAttendanceRequest
from app.services.class_session import ClassSessionService, class_session_service
from app.services.enrollment import ClassEnrollmentService, class_enrollment_service

logger = logging.getLogger(__name__)

SELF_CHECK_IN_METHODS = (AttendanceMethod.PIN, AttendanceMethod.BARCODE)
MONITORING_WINDOW = 10
DEFAULT_MIN_ABSENCES = 2


class AttendanceService:

    def __init__(
        self,
        repository: AttendanceRepository,
        session_service: ClassSessionService,
        enrollment_service: ClassEnrollmentService,
    ):
        self.repository = repository
        self.session_service = session_service
        self.enrollment_service = enrollment_service

    # ------------------------------------------------------------------
    # Self check-in
    # ------------------------------------------------------------------

    def check_in(
        self,
        db: Session,
        class_id: UUID,
        student_id: UUID,
        code: str,
        method: AttendanceMethod,
        now: Optional[datetime] = None,
        recorded_by: Optional[UUID] = None,
    ) -> AttendanceRecord:
        """Validate a submitted PIN/barcode and record attendance once per day.

        Steps run in order and each failure is terminal: input format, today's
        session (exists, not expired, secret still valid), exact code match,
        active enrollment, then an insert that the unique key on
        (student, class, day) turns into "already recorded" on a repeat.
        """
        now = as_utc(now or utcnow())
        code = self._validate_code(code, method)

        date_key = get_utc_date_key(now)
        session = self.session_service.get_by_class_and_date(db, class_id, date_key)
        if session is None:
            raise NoActiveSessionError()
        if now > as_utc(session.expires_at):
            raise SessionExpiredError()
        if not is_valid_daily_secret(session.secret, self.session_service.base_secret, now):
            raise SessionExpiredError("Session secret is no longer valid")

        expected = session.pin if method == AttendanceMethod.PIN else session.barcode
        if not hmac.compare_digest(code.encode("utf-8"), expected.encode("utf-8")):
            logger.info(f"Rejected {method.value} check-in for class {class_id}: code mismatch")
            raise CodeMismatchError()

        self.enrollment_service.ensure_active(db, student_id, class_id)

        class_ = self.session_service.class_repo.get(db, class_id)
        status, late_minutes = self.resolve_status(class_, now)

        record, inserted = self.repository.insert_if_absent(db, {
            "student_id": student_id,
            "class_id": class_id,
            "date_key": date_key,
            "status": status,
            "method": method,
            "recorded_at": now,
            "recorded_by": recorded_by or student_id,
            "late_minutes": late_minutes,
            "notes": "Self check-in",
        })
        if not inserted:
            raise AlreadyRecordedError()

        logger.info(f"Recorded {status.value} for student {student_id} in class {class_id} on {date_key}")
        return record

    def _validate_code(self, code: Optional[str], method: AttendanceMethod) -> str:
        if method not in SELF_CHECK_IN_METHODS:
            raise ValidationError("Check-in method must be 'pin' or 'barcode'")
        code = (code or "").strip()
        if not code:
            raise ValidationError("Code is required")
        # Length is left to the match against the stored PIN
        if method == AttendanceMethod.PIN and not code.isdigit():
            raise ValidationError("PIN must contain digits only")
        return code

    def resolve_status(self, class_: Optional[Class], now: datetime) -> Tuple[AttendanceStatus, int]:
        """On time up to the cutoff, late afterwards.

        The cutoff is the class start plus the grace minutes; without a start
        time the configured cutoff applies, and without either everyone is
        present.
        """
        now = as_utc(now)
        reference = cutoff = None
        if class_ is not None and class_.start_time is not None:
            reference = datetime.combine(now.date(), class_.start_time.replace(tzinfo=None), tzinfo=timezone.utc)
            cutoff = reference + timedelta(minutes=settings.ATTENDANCE_LATE_GRACE_MINUTES)
        elif settings.ATTENDANCE_LATE_CUTOFF is not None:
            reference = cutoff = datetime.combine(
                now.date(), settings.ATTENDANCE_LATE_CUTOFF.replace(tzinfo=None), tzinfo=timezone.utc
            )

        if cutoff is None or now <= cutoff:
            return AttendanceStatus.PRESENT, 0
        return AttendanceStatus.LATE, int((now - reference).total_seconds() // 60)

    # ------------------------------------------------------------------
    # Staff corrections
    # ------------------------------------------------------------------

    def mark_attendance(
        self,
        db: Session,
        class_id: UUID,
        data: BatchAttendanceRequest,
        marker: User,
        now: Optional[datetime] = None,
    ) -> List[AttendanceRecord]:
        """Manual marking for a class day, upserting one record per student."""
        self.session_service.get_managed_class(db, class_id, marker)
        now = as_utc(now or utcnow())
        date_key = data.attendance_date.isoformat() if data.attendance_date else get_utc_date_key(now)

        for item in data.items:
            self.enrollment_service.ensure_enrolled(db, item.student_id, class_id)

        try:
            for item in data.items:
                self.repository.upsert_for_day(db, {
                    "student_id": item.student_id,
                    "class_id": class_id,
                    "date_key": date_key,
                    "status": item.status,
                    "method": AttendanceMethod.MANUAL,
                    "recorded_by": marker.id,
                    "recorded_at": now,
                    "late_minutes": item.late_minutes,
                    "notes": item.notes,
                    "updated_at": now,
                })
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            logger.warning(f"Manual marking for class {class_id} on {date_key} rejected: {exc.orig}")
            raise ConflictError("Attendance could not be saved, please retry") from exc

        records = [
            self.repository.get_for_day(db, item.student_id, class_id, date_key)
            for item in data.items
        ]
        logger.info(f"{marker.email} marked {len(records)} attendance records for class {class_id} on {date_key}")
        return records

    def update_attendance(self, db: Session, record_id: UUID, changes: AttendanceUpdate, user: User) -> AttendanceRecord:
        record = self.repository.get(db, record_id)
        if not record:
            raise NotFoundError("Attendance record not found")
        if not is_staff(user):
            raise ForbiddenError()
        # Instructors may only amend their own classes
        self.session_service.get_managed_class(db, record.class_id, user)

        update_data = changes.model_dump(exclude_unset=True)
        if "recorded_at" in update_data and update_data["recorded_at"] is None:
            update_data["recorded_at"] = utcnow()
        update_data["recorded_by"] = user.id
        return self.repository.update(db, record, update_data)

    # ------------------------------------------------------------------
    # History and monitoring
    # ------------------------------------------------------------------

    def get_class_attendance_by_date(self, db: Session, class_id: UUID, day: date, user: User) -> list:
        """Every active or paused student of the class with that day's record, or None."""
        self.session_service.get_managed_class(db, class_id, user)
        enrollments = enrollment_repository.list_by_status(
            db, [EnrollmentStatus.ACTIVE, EnrollmentStatus.PAUSED], class_id=class_id
        )
        records = {
            record.student_id: record
            for record in self.repository.list_by_class_and_date(db, class_id, day.isoformat())
        }
        return [
            {
                "student": {
                    "id": enrollment.student.id,
                    "name": enrollment.student.full_name,
                    "email": enrollment.student.email,
                },
                "attendance": records.get(enrollment.student_id),
            }
            for enrollment in sorted(enrollments, key=lambda e: e.student.full_name)
        ]

    def get_class_attendance_by_range(
        self, db: Session, class_id: UUID, user: User,
        start_date: Optional[date] = None, end_date: Optional[date] = None,
    ) -> List[AttendanceRecord]:
        self.session_service.get_managed_class(db, class_id, user)
        if start_date and end_date and start_date > end_date:
            raise ValidationError("start_date must not be after end_date")
        return self.repository.list_by_class_range(
            db, class_id,
            start_date.isoformat() if start_date else None,
            end_date.isoformat() if end_date else None,
        )

    def get_student_attendance_history(
        self, db: Session, student_id: UUID, user: User, class_id: Optional[UUID] = None
    ) -> List[AttendanceRecord]:
        if user.role == UserRole.STUDENT and user.id != student_id:
            raise ForbiddenError("Students can only view their own attendance")
        if not is_staff(user) and user.role != UserRole.STUDENT:
            raise ForbiddenError()
        return self.repository.list_by_student(db, student_id, class_id=class_id)

    def get_attendance_monitoring(
        self, db: Session, class_id: Optional[UUID] = None, min_absences: int = DEFAULT_MIN_ABSENCES
    ) -> list:
        """Active enrollments whose latest records end in an absence streak."""
        enrollments = enrollment_repository.list_by_status(db, [EnrollmentStatus.ACTIVE], class_id=class_id)

        monitoring = []
        for enrollment in enrollments:
            recent = self.repository.list_by_student(
                db, enrollment.student_id, class_id=enrollment.class_id, limit=MONITORING_WINDOW
            )
            streak, last_attended = self.count_consecutive_absences(recent)
            if streak < min_absences:
                continue
            monitoring.append({
                "student_id": enrollment.student_id,
                "student": {
                    "id": enrollment.student.id,
                    "name": enrollment.student.full_name,
                    "email": enrollment.student.email,
                },
                "class_id": enrollment.class_id,
                "class_name": enrollment.enrollment_class.name,
                "last_attendance_date": last_attended,
                "consecutive_absences": streak,
            })

        return sorted(monitoring, key=lambda m: m["consecutive_absences"], reverse=True)

    @staticmethod
    def count_consecutive_absences(records: List[AttendanceRecord]) -> Tuple[int, Optional[str]]:
        """Count absences from newest back to the last attendance.

        ``records`` must be newest first. Excused days neither count nor end
        the streak.
        """
        streak = 0
        for record in records:
            if record.status == AttendanceStatus.ABSENT:
                streak += 1
            elif record.status in (AttendanceStatus.PRESENT, AttendanceStatus.LATE):
                return streak, record.date_key
        return streak, None


attendance_service = AttendanceService(attendance_repository, class_session_service, class_enrollment_service)
