from sqlalchemy import Column, String, Text, Enum, Time, TIMESTAMP, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from sqlalchemy.schema import UniqueConstraint

from app.models.base import BaseModel
import enum

# Classes and enrollments are owned by the academic admin screens; the
# attendance core only reads them.

class ClassStatus(enum.Enum):
    SCHEDULED = "scheduled"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    POSTPONED = "postponed"

class EnrollmentStatus(enum.Enum):
    ACTIVE = "active"
    PAUSED = "paused"
    WITHDRAWN = "withdrawn"
    COMPLETED = "completed"

# Class Model
class Class(BaseModel):
    __tablename__ = "classes"
    
    name = Column(String(255), nullable=False)
    teacher_id = Column(Uuid(as_uuid=True), ForeignKey('users.id', ondelete='RESTRICT'), nullable=False)

    # UTC time of day the class starts; drives the late cutoff
    start_time = Column(Time, nullable=True)

    status = Column(Enum(ClassStatus, values_callable=lambda obj: [e.value for e in obj], 
        native_enum=True, name='class_status'), default=ClassStatus.ACTIVE, nullable=False) 
    
    notes = Column(Text, nullable=True)
    
    # Relationships
    teacher = relationship("User", foreign_keys=[teacher_id], backref="classes_taught")
    enrollments = relationship("ClassEnrollment", back_populates="enrollment_class")

# Class Enrollment Model
class ClassEnrollment(BaseModel):
    __tablename__ = "class_enrollments"
    
    class_id = Column(Uuid(as_uuid=True), ForeignKey("classes.id", ondelete="CASCADE"), nullable=False)
    student_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    
    enrollment_date = Column(TIMESTAMP(timezone=True), default=func.now())
    status = Column(Enum(EnrollmentStatus, values_callable=lambda obj: [e.value for e in obj],
                         name='enrollment_status', native_enum=True), 
                    default=EnrollmentStatus.ACTIVE, nullable=False)

    __table_args__ = (
        UniqueConstraint('class_id', 'student_id', name='uq_class_student_enrollment'),
    )

    # Relationships
    enrollment_class = relationship("Class", back_populates="enrollments")
    student = relationship("User", foreign_keys=[student_id], backref="class_enrollments")
