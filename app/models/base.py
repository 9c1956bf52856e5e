from sqlalchemy import Column, DateTime, Uuid, func
from sqlalchemy.orm import declarative_base
import uuid

Base = declarative_base()

class AuditMixin:
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    deleted_at = Column(DateTime(timezone=True), nullable=True, default=None)
    created_by = Column(Uuid, nullable=True)
    updated_by = Column(Uuid, nullable=True)

class BaseModel(Base, AuditMixin):
    __abstract__ = True
    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
