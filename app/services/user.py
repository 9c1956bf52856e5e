from typing import Optional
from sqlalchemy.orm import Session
from app.core.daily_secret import utcnow
from app.core.security import verify_password
from app.models.user import User
from app.repositories.user import UserRepository, user_repository

class UserService:
    def __init__(self, repository: UserRepository):
        self.repository = repository

    def authenticate_user(self, db: Session, email: str, password: str) -> Optional[User]:
        user = self.repository.get_by_email(db, email)
        if not user or not verify_password(password, user.password_hash):
            return None
        return user

    def record_login(self, db: Session, user: User) -> User:
        return self.repository.update(db, user, {"last_login": utcnow(), "is_first_login": False})

user_service = UserService(user_repository)
