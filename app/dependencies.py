from fastapi import Depends
from app.core.exceptions import ForbiddenError, UnauthorizedError
from app.core.security import get_current_user
from app.models.user import User, UserRole, UserStatus

ADMIN_ROLES = [UserRole.OFFICE_ADMIN, UserRole.CENTER_ADMIN, UserRole.SYSTEM_ADMIN]
STAFF_ROLES = [UserRole.TEACHER] + ADMIN_ROLES


def is_admin(user: User) -> bool:
    return user.role in ADMIN_ROLES


def is_staff(user: User) -> bool:
    return user.role in STAFF_ROLES


def get_current_active_user(
    current_user: User = Depends(get_current_user)
) -> User:
    if current_user.status != UserStatus.ACTIVE:
        raise UnauthorizedError("Inactive user")
    return current_user


def get_current_staff_user(
    current_user: User = Depends(get_current_active_user)
) -> User:
    if not is_staff(current_user):
        raise ForbiddenError("Only staff can perform this action")
    return current_user
