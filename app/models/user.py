from sqlalchemy import Column, String, Enum, Boolean, TIMESTAMP
from app.models.base import BaseModel
import enum

class UserRole(enum.Enum):
    STUDENT = "student"
    TEACHER = "teacher"
    OFFICE_ADMIN = "office_admin"
    CENTER_ADMIN = "center_admin"
    SYSTEM_ADMIN = "system_admin"

class UserStatus(enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"
    PENDING_ACTIVATION = "pending_activation"

class User(BaseModel):
    __tablename__ = "users"
    
    # Basic info
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(Enum(UserRole, values_callable=lambda obj: [e.value for e in obj], 
        native_enum=False), default=UserRole.STUDENT, nullable=False)
    status = Column(Enum(UserStatus, values_callable=lambda obj: [e.value for e in obj], 
        native_enum=False), default=UserStatus.ACTIVE, nullable=False)
    
    # Personal info
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)

    # Security
    last_login = Column(TIMESTAMP(timezone=True))
    is_first_login = Column(Boolean, default=True)
    
    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
