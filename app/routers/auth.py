from datetime import timedelta
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.core.config import settings
from app.core.database import get_db
from app.core.exceptions import UnauthorizedError
from app.core.security import create_access_token
from app.models.user import UserStatus
from app.schemas.token import LoginRequest, LoginResponse
from app.services.user import user_service

router = APIRouter()

@router.post("/login", response_model=LoginResponse)
def login(
    login_data: LoginRequest,
    db: Session = Depends(get_db)
):
    user = user_service.authenticate_user(db, login_data.email, login_data.password)
    if not user:
        raise UnauthorizedError("Incorrect email or password")

    if user.status != UserStatus.ACTIVE:
        raise UnauthorizedError("Account is not active")

    is_first_login = bool(user.is_first_login)
    access_token = create_access_token(
        subject=user.email,
        expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    user_service.record_login(db, user)

    return {
        "access_token": access_token,
        "token_type": "bearer",
        "is_first_login": is_first_login
    }
