from datetime import date
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from uuid import UUID
from typing import List, Optional

from app.core.daily_secret import get_utc_date_key, parse_date_key
from app.core.database import get_db
from app.core.exceptions import ForbiddenError
from app.dependencies import get_current_active_user, get_current_staff_user, is_staff
from app.models.user import User, UserRole
from app.schemas.attendance import (
    AttendanceRecordResponse, AttendanceUpdate, BatchAttendanceRequest,
    CheckInRequest, MonitoringEntry, RosterEntry,
)
from app.services.attendance import DEFAULT_MIN_ABSENCES, attendance_service

router = APIRouter(tags=["Attendance"])

@router.post(
    "/classes/{class_id}/attendance/check-in",
    response_model=AttendanceRecordResponse,
    status_code=status.HTTP_201_CREATED,
)
def check_in(
    class_id: UUID,
    payload: CheckInRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    student_id = payload.student_id or current_user.id
    if current_user.role == UserRole.STUDENT and student_id != current_user.id:
        raise ForbiddenError("Cannot record attendance for another student")
    if current_user.role != UserRole.STUDENT and not is_staff(current_user):
        raise ForbiddenError()

    return attendance_service.check_in(
        db,
        class_id=class_id,
        student_id=student_id,
        code=payload.code,
        method=payload.method,
        recorded_by=current_user.id,
    )

@router.get("/classes/{class_id}/attendance", response_model=List[RosterEntry])
def get_class_attendance(
    class_id: UUID,
    day: Optional[date] = Query(None, alias="date"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_staff_user)
):
    """Enrolled students of the class paired with their record for the day (UTC today by default)."""
    return attendance_service.get_class_attendance_by_date(
        db, class_id, day or parse_date_key(get_utc_date_key()), current_user
    )

@router.get("/classes/{class_id}/attendance/range", response_model=List[AttendanceRecordResponse])
def get_class_attendance_range(
    class_id: UUID,
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_staff_user)
):
    return attendance_service.get_class_attendance_by_range(
        db, class_id, current_user, start_date=start_date, end_date=end_date
    )

@router.put("/classes/{class_id}/attendance", response_model=List[AttendanceRecordResponse])
def mark_attendance(
    class_id: UUID,
    payload: BatchAttendanceRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_staff_user)
):
    return attendance_service.mark_attendance(db, class_id, payload, marker=current_user)

@router.get("/students/{student_id}/attendance", response_model=List[AttendanceRecordResponse])
def get_student_attendance(
    student_id: UUID,
    class_id: Optional[UUID] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    return attendance_service.get_student_attendance_history(db, student_id, current_user, class_id=class_id)

@router.patch("/attendance/{record_id}", response_model=AttendanceRecordResponse)
def update_attendance(
    record_id: UUID,
    payload: AttendanceUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_staff_user)
):
    return attendance_service.update_attendance(db, record_id, payload, current_user)

@router.get("/attendance/monitoring", response_model=List[MonitoringEntry])
def get_attendance_monitoring(
    class_id: Optional[UUID] = Query(None),
    min_absences: int = Query(DEFAULT_MIN_ABSENCES, ge=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_staff_user)
):
    return attendance_service.get_attendance_monitoring(db, class_id=class_id, min_absences=min_absences)
