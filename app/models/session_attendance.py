from sqlalchemy import Column, String, Text, ForeignKey, TIMESTAMP, Integer, Enum, CheckConstraint, Index, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.schema import UniqueConstraint
from app.models.base import BaseModel
import enum

# ATTENDANCE ENUMS
class AttendanceStatus(enum.Enum):
    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    EXCUSED = "excused"

class AttendanceMethod(enum.Enum):
    PIN = "pin"
    BARCODE = "barcode"
    MANUAL = "manual"

class ClassSession(BaseModel):
    """The single attendance session of a class for one UTC day."""
    __tablename__ = "class_sessions"
    
    class_id = Column(Uuid(as_uuid=True), ForeignKey('classes.id', ondelete='CASCADE'), nullable=False)
    date_key = Column(String(10), nullable=False)  # YYYY-MM-DD, UTC

    pin = Column(String(12), nullable=False)
    barcode = Column(String(255), nullable=False)
    # Stored for audit only; validation recomputes it
    secret = Column(String(64), nullable=False)
    expires_at = Column(TIMESTAMP(timezone=True), nullable=False)

    session_class = relationship("Class", backref="attendance_sessions")

    __table_args__ = (
        UniqueConstraint('class_id', 'date_key', name='uq_class_session_day'),
    )

class AttendanceRecord(BaseModel):
    __tablename__ = "attendance_records"
    
    student_id = Column(Uuid(as_uuid=True), ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    class_id = Column(Uuid(as_uuid=True), ForeignKey('classes.id', ondelete='CASCADE'), nullable=False)
    date_key = Column(String(10), nullable=False)
    
    status = Column(Enum(AttendanceStatus, values_callable=lambda obj: [e.value for e in obj],
        native_enum=True, name='attendance_status'), nullable=False)
    method = Column(Enum(AttendanceMethod, values_callable=lambda obj: [e.value for e in obj],
        native_enum=True, name='attendance_method'), nullable=False)
    
    recorded_at = Column(TIMESTAMP(timezone=True), nullable=False)
    recorded_by = Column(Uuid(as_uuid=True), ForeignKey('users.id'), nullable=True)
    late_minutes = Column(Integer, default=0, nullable=False)
    notes = Column(Text)
    
    # Relationships
    student = relationship("User", foreign_keys=[student_id], backref="attendance_logs")
    record_class = relationship("Class")
    recorder = relationship("User", foreign_keys=[recorded_by])

    __table_args__ = (
        UniqueConstraint('student_id', 'class_id', 'date_key', name='uq_attendance_student_class_day'),
        CheckConstraint('late_minutes >= 0', name='attendance_late_minutes_check'),
        Index('ix_attendance_records_class_day', 'class_id', 'date_key'),
        Index('ix_attendance_records_student_day', 'student_id', 'date_key'),
    )
