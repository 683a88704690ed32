import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from ..database.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_uuid() -> str:
    return str(uuid.uuid4())


class Zone(Base):
    __tablename__ = "zones"

    id = Column(String(36), primary_key=True, default=new_uuid)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    title = Column(String(100), nullable=False)
    address = Column(String(255), nullable=False)
    location = Column(String(255), nullable=False)
    latitude = Column(Numeric(10, 7), nullable=False)
    longitude = Column(Numeric(10, 7), nullable=False)
    radius = Column(Float, nullable=False)  # metros
    icon = Column(String(50), nullable=False)
    color = Column(String(30), nullable=False)
    description = Column(Text, nullable=True)
    image_url = Column(String(500), nullable=True)

    notification_option = Column(String(10), nullable=False, default="both")  # enter | exit | both
    notification_text = Column(String(255), nullable=False, default="You have entered the zone")

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
    # Eliminación lógica: la zona deja de aparecer pero el registro se conserva
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    user = relationship("User", back_populates="zones")
