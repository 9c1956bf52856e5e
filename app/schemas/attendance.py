from typing import List, Optional
from pydantic import BaseModel, Field, field_validator
from uuid import UUID
from datetime import date, datetime
from app.models.session_attendance import AttendanceMethod, AttendanceStatus

class CheckInRequest(BaseModel):
    code: str
    method: AttendanceMethod
    # Defaults to the caller; staff may check a student in on their behalf
    student_id: Optional[UUID] = None

class AttendanceRecordResponse(BaseModel):
    id: UUID
    student_id: UUID
    class_id: UUID
    date_key: str
    status: AttendanceStatus
    method: AttendanceMethod
    recorded_at: datetime
    recorded_by: Optional[UUID] = None
    late_minutes: int = 0
    notes: Optional[str] = None

    class Config:
        from_attributes = True

class AttendanceMarkItem(BaseModel):
    student_id: UUID
    status: AttendanceStatus
    notes: Optional[str] = None
    late_minutes: int = Field(0, ge=0)

class BatchAttendanceRequest(BaseModel):
    attendance_date: Optional[date] = None
    items: List[AttendanceMarkItem]

    @field_validator("items")
    @classmethod
    def students_are_unique(cls, items: List[AttendanceMarkItem]) -> List[AttendanceMarkItem]:
        student_ids = [item.student_id for item in items]
        if len(set(student_ids)) != len(student_ids):
            raise ValueError("Each student may appear only once per batch")
        return items

class AttendanceUpdate(BaseModel):
    status: Optional[AttendanceStatus] = None
    method: Optional[AttendanceMethod] = None
    recorded_at: Optional[datetime] = None
    late_minutes: Optional[int] = Field(None, ge=0)
    notes: Optional[str] = None

    # Omitted fields stay unchanged, explicit nulls are rejected
    @field_validator("status", "method", "late_minutes")
    @classmethod
    def not_null_when_given(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value

class StudentBrief(BaseModel):
    id: UUID
    name: str
    email: Optional[str] = None

class RosterEntry(BaseModel):
    student: StudentBrief
    attendance: Optional[AttendanceRecordResponse] = None

class MonitoringEntry(BaseModel):
    student_id: UUID
    student: StudentBrief
    class_id: UUID
    class_name: str
    last_attendance_date: Optional[str] = None
    consecutive_absences: int
