import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.daily_secret import as_utc, derive_daily_secret, end_of_utc_day, get_utc_date_key, utcnow
from app.core.exceptions import ForbiddenError, NotFoundError
from app.core.tokens import build_session_barcode, generate_barcode_token, generate_pin
from app.dependencies import is_admin
from app.models.academic import Class
from app.models.session_attendance import ClassSession
from app.models.user import User, UserRole
from app.repositories.class_session import (
    ClassRepository, ClassSessionRepository, class_repository, class_session_repository,
)

logger = logging.getLogger(__name__)


class ClassSessionService:
    def __init__(
        self,
        session_repo: ClassSessionRepository,
        class_repo: ClassRepository,
        base_secret: Optional[str] = None,
        pin_length: Optional[int] = None,
    ):
        self.session_repo = session_repo
        self.class_repo = class_repo
        self._base_secret = base_secret
        self._pin_length = pin_length

    @property
    def base_secret(self) -> str:
        return self._base_secret or settings.ATTENDANCE_BASE_SECRET

    @property
    def pin_length(self) -> int:
        return self._pin_length or settings.ATTENDANCE_PIN_LENGTH

    def get_managed_class(self, db: Session, class_id: UUID, user: User) -> Class:
        """Return the class if the user is an admin or its assigned teacher."""
        class_ = self.class_repo.get(db, class_id)
        if not class_:
            raise NotFoundError("Class not found")
        if is_admin(user):
            return class_
        if user.role == UserRole.TEACHER and class_.teacher_id == user.id:
            return class_
        raise ForbiddenError("Only the assigned instructor or an admin can manage this class")

    def get_or_create_today_session(
        self,
        db: Session,
        class_id: UUID,
        now: Optional[datetime] = None,
        created_by: Optional[UUID] = None,
    ) -> ClassSession:
        now = as_utc(now or utcnow())
        date_key = get_utc_date_key(now)
        values = {
            "class_id": class_id,
            "date_key": date_key,
            "pin": generate_pin(self.pin_length),
            "barcode": build_session_barcode(class_id, date_key, generate_barcode_token()),
            "secret": derive_daily_secret(self.base_secret, date_key),
            "expires_at": end_of_utc_day(now),
            "created_by": created_by,
        }
        session, inserted = self.session_repo.insert_if_absent(db, values)
        if inserted:
            logger.info(f"Opened attendance session for class {class_id} on {date_key}")
        return session

    def get_by_class_and_date(self, db: Session, class_id: UUID, date_key: str) -> Optional[ClassSession]:
        return self.session_repo.get_by_class_and_date(db, class_id, date_key)

    def get_today_session(self, db: Session, class_id: UUID, user: User, now: Optional[datetime] = None) -> dict:
        class_ = self.get_managed_class(db, class_id, user)
        session = self.get_or_create_today_session(db, class_id, now=now, created_by=user.id)
        return {
            "class_id": class_.id,
            "class_name": class_.name,
            "date": session.date_key,
            "pin": session.pin,
            "barcode": session.barcode,
            "expires_at": as_utc(session.expires_at),
        }

    def generate_attendance_pin(self, db: Session, class_id: UUID, user: User) -> dict:
        today = self.get_today_session(db, class_id, user)
        return {
            "pin": today["pin"],
            "class_id": today["class_id"],
            "class_name": today["class_name"],
            "expires_at": today["expires_at"],
            "generated_by": {"id": user.id, "name": user.full_name},
        }

    def generate_attendance_barcode(self, db: Session, class_id: UUID, user: User) -> dict:
        today = self.get_today_session(db, class_id, user)
        return {
            "barcode": today["barcode"],
            "class_id": today["class_id"],
            "class_name": today["class_name"],
            "expires_at": today["expires_at"],
            "generated_by": {"id": user.id, "name": user.full_name},
        }


class_session_service = ClassSessionService(class_session_repository, class_repository)
