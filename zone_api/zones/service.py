import logging
import math
import time
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from ..core.exceptions import ForbiddenError, NotFoundError, ValidationError
from ..database.config import settings
from . import crud
from .geofence import is_valid_latitude, is_valid_longitude
from .models import Zone

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = {
    "title", "address", "location", "latitude", "longitude", "radius",
    "icon", "color", "notification_option", "notification_text",
}


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


def isoformat(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    # SQLite devuelve datetimes sin zona horaria; se guardan siempre en UTC
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


def validate_geometry(latitude: float = None, longitude: float = None, radius: float = None) -> None:
    """Valida solo los campos presentes (None = no enviado)."""
    if latitude is not None and not is_valid_latitude(latitude):
        raise ValidationError("Latitude must be between -90 and 90", {"latitude": str(latitude)})
    if longitude is not None and not is_valid_longitude(longitude):
        raise ValidationError("Longitude must be between -180 and 180", {"longitude": str(longitude)})
    if radius is not None and not math.isfinite(radius):
        raise ValidationError("Radius must be a finite number", {"radius": str(radius)})
    if radius is not None and radius <= 0:
        raise ValidationError("Radius must be greater than 0", {"radius": str(radius)})


def format_zone(zone: Zone) -> dict:
    return {
        "id": zone.id,
        "title": zone.title,
        "address": zone.address,
        "location": zone.location,
        "latitude": float(zone.latitude),
        "longitude": float(zone.longitude),
        "radius": zone.radius,
        "icon": zone.icon,
        "color": zone.color,
        "description": zone.description,
        "notificationOption": zone.notification_option,
        "notificationText": zone.notification_text,
        "image": zone.image_url,
        "createdAt": isoformat(zone.created_at),
        "updatedAt": isoformat(zone.updated_at),
    }


class ZoneService:
    """
    Ciclo de vida de las zonas: validación de geometría y control de propietario.
    """

    def __init__(self, db: Session):
        self.db = db

    def _get_owned_zone(self, zone_id: str, requester_id: int, action: str) -> Zone:
        zone = crud.get_zone(self.db, zone_id)
        if not zone or zone.deleted_at is not None:
            raise NotFoundError("Zone")
        if zone.user_id != requester_id:
            raise ForbiddenError(f"You do not have permission to {action} this zone")
        return zone

    def create_zone(self, owner_id: int, data: dict) -> dict:
        start = time.monotonic()
        validate_geometry(data.get("latitude"), data.get("longitude"), data.get("radius"))
        if data.get("latitude") is None or data.get("longitude") is None or data.get("radius") is None:
            raise ValidationError("Latitude, longitude and radius are required")

        zone = crud.create_zone(self.db, owner_id, data)
        logger.info(f"📍 Zona creada zone_id={zone.id} user_id={owner_id} duration_ms={_elapsed_ms(start)}")
        return format_zone(zone)

    def get_zone_by_id(self, zone_id: str, requester_id: int) -> dict:
        return format_zone(self._get_owned_zone(zone_id, requester_id, "access"))

    def get_zones(
        self,
        owner_id: int,
        icon: str = None,
        sort_by: str = "date",
        limit: int = None,
        offset: int = None
    ) -> dict:
        start = time.monotonic()
        zones, total = crud.list_zones(
            self.db,
            owner_id,
            icon=icon,
            sort_by=sort_by or "date",
            limit=limit or settings.default_page_size,
            offset=offset or 0,
        )
        logger.info(f"📍 Zonas consultadas user_id={owner_id} count={len(zones)} duration_ms={_elapsed_ms(start)}")
        return {"zones": [format_zone(z) for z in zones], "total": total}

    def update_zone(self, zone_id: str, requester_id: int, data: dict) -> dict:
        start = time.monotonic()
        zone = self._get_owned_zone(zone_id, requester_id, "update")
        null_fields = sorted(k for k, v in data.items() if v is None and k in REQUIRED_FIELDS)
        if null_fields:
            raise ValidationError("Required fields cannot be null", {k: "null" for k in null_fields})
        validate_geometry(data.get("latitude"), data.get("longitude"), data.get("radius"))

        zone = crud.update_zone(self.db, zone, data)
        logger.info(
            f"✏️ Zona actualizada zone_id={zone_id} user_id={requester_id} "
            f"fields={sorted(data)} duration_ms={_elapsed_ms(start)}"
        )
        return format_zone(zone)

    def delete_zone(self, zone_id: str, requester_id: int) -> dict:
        start = time.monotonic()
        zone = self._get_owned_zone(zone_id, requester_id, "delete")
        # Las actividades de la zona se conservan (guardan nombre/icono propios)
        crud.soft_delete_zone(self.db, zone)
        logger.info(f"🗑️ Zona eliminada zone_id={zone_id} user_id={requester_id} duration_ms={_elapsed_ms(start)}")
        return {"message": "Zone deleted successfully"}
