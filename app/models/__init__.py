from .academic import Class, ClassEnrollment
from .user import User
from .session_attendance import AttendanceRecord, ClassSession
