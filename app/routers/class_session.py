from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from uuid import UUID

from app.core.database import get_db
from app.dependencies import get_current_staff_user
from app.models.user import User
from app.schemas.class_session import BarcodeResponse, PinResponse, TodaySessionResponse
from app.services.class_session import class_session_service

router = APIRouter(prefix="/classes/{class_id}/session", tags=["Class Session"])

@router.get("/today", response_model=TodaySessionResponse)
def get_today_session(
    class_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_staff_user)
):
    """Today's PIN and barcode for the class, opened on first request of the day."""
    return class_session_service.get_today_session(db, class_id, current_user)

@router.get("/pin", response_model=PinResponse)
def generate_pin(
    class_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_staff_user)
):
    return class_session_service.generate_attendance_pin(db, class_id, current_user)

@router.get("/barcode", response_model=BarcodeResponse)
def generate_barcode(
    class_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_staff_user)
):
    return class_session_service.generate_attendance_barcode(db, class_id, current_user)
