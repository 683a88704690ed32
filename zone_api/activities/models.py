import uuid
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import BigInteger, Column, DateTime, ForeignKey, Index, Integer, String

from ..database.database import Base


class ActivityType:
    ENTER = "enter"
    EXIT = "exit"
    ALL = (ENTER, EXIT)


@dataclass(frozen=True)
class ZoneSnapshot:
    """
    Copia inmutable de los datos de la zona al momento del evento.
    El historial no vuelve a leer la zona viva (puede cambiar o eliminarse).
    """
    zone_id: str
    zone_name: str
    icon: str

    @classmethod
    def from_zone(cls, zone) -> "ZoneSnapshot":
        return cls(zone_id=zone.id, zone_name=zone.title, icon=zone.icon)


class Activity(Base):
    """Registro de solo escritura: no existe update ni delete."""
    __tablename__ = "activities"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    # Sin FK a zones: la zona puede estar eliminada lógicamente
    zone_id = Column(String(36), nullable=False, index=True)
    zone_name = Column(String(100), nullable=False)
    icon = Column(String(50), nullable=False)
    type = Column(String(10), nullable=False)
    timestamp = Column(BigInteger, nullable=False)  # ms desde epoch
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)

    __table_args__ = (
        Index("ix_activities_user_timestamp", "user_id", "timestamp"),
    )

    @property
    def snapshot(self) -> ZoneSnapshot:
        return ZoneSnapshot(zone_id=self.zone_id, zone_name=self.zone_name, icon=self.icon)
