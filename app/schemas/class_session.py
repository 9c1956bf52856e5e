from pydantic import BaseModel
from uuid import UUID
from datetime import datetime

class TodaySessionResponse(BaseModel):
    class_id: UUID
    class_name: str
    date: str
    pin: str
    barcode: str
    expires_at: datetime

class GeneratedBy(BaseModel):
    id: UUID
    name: str

class PinResponse(BaseModel):
    pin: str
    class_id: UUID
    class_name: str
    expires_at: datetime
    generated_by: GeneratedBy

class BarcodeResponse(BaseModel):
    barcode: str
    class_id: UUID
    class_name: str
    expires_at: datetime
    generated_by: GeneratedBy
